"""
Потокобезопасный сборщик ошибок обработки файлов.
"""

import threading
from typing import List

from .models import ProcessingError


class ErrorAggregator:
    """
    Накапливает ошибки от всех обработчиков для итогового отчета.

    Ошибки хранятся в порядке поступления, без фильтрации и дедупликации.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._errors: List[ProcessingError] = []

    def submit(self, error: ProcessingError) -> None:
        """Добавляет ошибку. Может вызываться из любого потока."""
        with self._lock:
            self._errors.append(error)

    def drain(self) -> List[ProcessingError]:
        """
        Возвращает накопленные ошибки и очищает хранилище.

        Returns:
            List[ProcessingError]: Ошибки в порядке поступления
        """
        with self._lock:
            errors, self._errors = self._errors, []
        return errors


def format_report(errors: List[ProcessingError]) -> str:
    """Склеивает сообщения об ошибках построчно."""
    return "\n".join(str(error) for error in errors)
