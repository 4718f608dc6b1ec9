"""
Модели данных: задача на обработку файла и ошибки обработки.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


@dataclass(frozen=True)
class Task:
    """Один файл для обработки."""
    name: str
    source_path: Path
    dest_root: Path


class ErrorKind(Enum):
    """Вид ошибки обработки одного файла."""
    OPEN = "open"
    CLASSIFICATION = "classification"
    UNSUPPORTED_TYPE = "unsupported_type"
    NO_METADATA = "no_metadata"
    DIRECTORY_CREATE = "directory_create"
    MOVE = "move"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class ProcessingError:
    """
    Итоговая ошибка обработки одного файла.

    Создается любой стадией конвейера и после передачи в ErrorAggregator
    больше не изменяется.
    """
    file_name: str
    message: str
    kind: ErrorKind

    @property
    def is_skip(self) -> bool:
        """Файл пропущен из-за неподдерживаемого типа, а не из-за сбоя."""
        return self.kind is ErrorKind.UNSUPPORTED_TYPE

    def __str__(self) -> str:
        return self.message
