"""
Модуль для операций с файловой системой.

Обеспечивает чтение списка входных файлов и перемещение файлов
в структуру каталогов по месяцам (January, February, ...).
"""

import os
import sys
import threading
from pathlib import Path
from typing import List, TextIO, Optional
from datetime import datetime

from .config_loader import CONFLICT_POLICIES
from .errors import DirectoryCreateError, ListingError, MoveError
from .logger import SorterLogger
from .models import Task


DIRECTORY_MODE = 0o755

# calendar.month_name зависит от LC_TIME
MONTH_NAMES = ('', 'January', 'February', 'March', 'April', 'May', 'June', 'July',
               'August', 'September', 'October', 'November', 'December')


def month_directory_name(dt: datetime) -> str:
    """Полное английское название месяца независимо от локали."""
    return MONTH_NAMES[dt.month]


class FileOps:
    """Класс для операций с файловой системой."""

    def __init__(self, logger: SorterLogger, on_conflict: str = 'rename',
                 out: Optional[TextIO] = None):
        """
        Инициализация операций с файлами.

        Args:
            logger: Логгер для записи операций
            on_conflict: Политика при совпадении имен (rename, fail, overwrite)
            out: Поток для строк о перемещении (по умолчанию sys.stdout)
        """
        if on_conflict not in CONFLICT_POLICIES:
            raise ValueError(f"Некорректная политика конфликтов: {on_conflict}")

        self.logger = logger
        self.on_conflict = on_conflict
        self.out = out
        self._move_lock = threading.Lock()
        self._out_lock = threading.Lock()

    def list_input_files(self, input_dir: Path) -> List[Path]:
        """
        Получает абсолютные пути файлов входного каталога (без рекурсии).

        Args:
            input_dir: Входной каталог

        Returns:
            List[Path]: Файлы в порядке сортировки по имени

        Raises:
            ListingError: Если каталог не удалось прочитать
        """
        try:
            entries = sorted(Path(input_dir).iterdir(), key=lambda p: p.name)
        except OSError as e:
            raise ListingError(f"failed to read directory '{input_dir}': {e}") from e

        # Ссылка на каталог - тоже запись для обработки, как и любой не-каталог
        files = [Path(os.path.abspath(p)) for p in entries if p.is_symlink() or not p.is_dir()]
        self.logger.log_system_info(f"Файлов во входном каталоге: {len(files)}")
        return files

    def get_month_directory(self, dest_root: Path, dt: datetime) -> Path:
        """
        Получает путь к каталогу месяца.

        Args:
            dest_root: Корневой каталог назначения
            dt: Дата съемки

        Returns:
            Path: dest_root / <Month>
        """
        return Path(dest_root) / month_directory_name(dt)

    def ensure_month_directory(self, dest_root: Path, dt: datetime) -> Path:
        """
        Создает каталог месяца если он не существует.

        Повторное создание уже существующего каталога не является ошибкой,
        поэтому параллельные обработчики не мешают друг другу.

        Raises:
            DirectoryCreateError: Если каталог не удалось создать
        """
        month_dir = self.get_month_directory(dest_root, dt)
        try:
            month_dir.mkdir(mode=DIRECTORY_MODE, parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryCreateError(f"failed to create directory '{month_dir}': {e}") from e
        return month_dir

    def relocate(self, task: Task, dt: datetime) -> Path:
        """
        Перемещает файл задачи в каталог месяца.

        Перемещение выполняется переименованием: либо файл появляется
        по новому пути, либо остается на старом месте. Каталог месяца
        строится от task.dest_root.

        Args:
            task: Задача с именем и путем исходного файла
            dt: Дата съемки

        Returns:
            Path: Путь к перемещенному файлу

        Raises:
            DirectoryCreateError: Если не удалось создать каталог месяца
            MoveError: Если не удалось переместить файл
        """
        name = task.name
        target_dir = self.ensure_month_directory(task.dest_root, dt)

        try:
            with self._move_lock:
                target_path = self._resolve_target(target_dir, name)
                if self.on_conflict == 'overwrite':
                    os.replace(task.source_path, target_path)
                else:
                    os.rename(task.source_path, target_path)
        except OSError as e:
            raise MoveError(f"failed to move '{name}' to '{target_dir}': {e}") from e

        self.logger.log_file_moved(name, Path(task.source_path), target_path)
        self._emit(f"Moved '{name}' to '{target_dir}' ...")
        return target_path

    def _resolve_target(self, target_dir: Path, name: str) -> Path:
        """Выбирает путь назначения с учетом политики конфликтов."""
        target_path = target_dir / name
        if not target_path.exists() or self.on_conflict == 'overwrite':
            return target_path

        if self.on_conflict == 'fail':
            raise MoveError(f"failed to move '{name}' to '{target_dir}': destination file already exists")

        unique_path = self._get_unique_filename(target_dir, name)
        self.logger.log_warning(f"Файл {name} уже существует в {target_dir}, сохраняем как {unique_path.name}")
        return unique_path

    def _get_unique_filename(self, directory: Path, filename: str) -> Path:
        """
        Получает уникальное имя файла в каталоге.

        Args:
            directory: Каталог для проверки
            filename: Исходное имя файла

        Returns:
            Path: Свободный путь вида name_1.ext, name_2.ext, ...
        """
        base_path = directory / filename
        if not base_path.exists():
            return base_path

        # Добавляем суффикс с номером
        name_parts = filename.rsplit('.', 1)
        if len(name_parts) == 2 and name_parts[0]:
            base_name, extension = name_parts
            extension = '.' + extension
        else:
            base_name = filename
            extension = ''

        counter = 1
        while True:
            new_path = directory / f"{base_name}_{counter}{extension}"
            if not new_path.exists():
                return new_path
            counter += 1

    def _emit(self, line: str) -> None:
        """Пишет строку статуса в stdout одной операцией."""
        stream = self.out or sys.stdout
        with self._out_lock:
            stream.write(line + "\n")
            stream.flush()
