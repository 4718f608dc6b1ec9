"""
Модуль бизнес-логики сортировки файлов.

Объединяет определение типа, чтение EXIF и перемещение файлов в параллельный
конвейер: пул потоков-обработчиков забирает задачи из общей очереди,
а ошибки всех обработчиков собираются в ErrorAggregator.
"""

import os
import queue
import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, TextIO

from .aggregator import ErrorAggregator, format_report
from .config_loader import Config, PipelineConfig
from .errors import ClassificationError, DirectoryCreateError, MoveError, NoMetadataError
from .file_ops import FileOps
from .inspector import classify, extract_timestamp
from .logger import SorterLogger
from .models import ErrorKind, ProcessingError, Task


STOP_SENTINEL = None


class SortStats:
    """Класс для хранения статистики сортировки."""

    def __init__(self):
        self.total_files = 0
        self.processed_files = 0
        self.successful_files = 0
        self.skipped_files = 0
        self.failed_files = 0
        self.start_time = None
        self.end_time = None
        self._lock = threading.Lock()

    def record(self, error: Optional[ProcessingError]) -> None:
        """Учитывает результат обработки одного файла."""
        with self._lock:
            self.processed_files += 1
            if error is None:
                self.successful_files += 1
            elif error.is_skip:
                self.skipped_files += 1
            else:
                self.failed_files += 1

    def get_duration(self) -> Optional[float]:
        """Возвращает продолжительность сортировки в секундах."""
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None

    def get_success_rate(self) -> float:
        """Возвращает процент перемещенных файлов."""
        if self.processed_files == 0:
            return 0.0
        return (self.successful_files / self.processed_files) * 100


@dataclass
class SortReport:
    """Итог одного запуска: статистика и все ошибки обработки."""
    stats: SortStats
    errors: List[ProcessingError] = field(default_factory=list)

    def has_errors(self) -> bool:
        return bool(self.errors)

    def format_errors(self) -> str:
        return format_report(self.errors)


class Sorter:
    """Основной класс для сортировки файлов по месяцам."""

    def __init__(self, pipeline_config: PipelineConfig, logger: SorterLogger,
                 file_ops: Optional[FileOps] = None,
                 aggregator: Optional[ErrorAggregator] = None,
                 out: Optional[TextIO] = None):
        """
        Инициализация сортировщика.

        Args:
            pipeline_config: Параметры конвейера (число обработчиков, очередь, конфликты)
            logger: Логгер для записи операций
            file_ops: Операции с файлами (по умолчанию создаются из конфигурации)
            aggregator: Сборщик ошибок (по умолчанию новый)
            out: Поток для строк о перемещении (по умолчанию sys.stdout)
        """
        self.config = pipeline_config
        self.logger = logger
        self.file_ops = file_ops or FileOps(logger, pipeline_config.on_conflict, out)
        self.aggregator = aggregator or ErrorAggregator()
        self.stats = SortStats()

    def process_task(self, task: Task) -> Optional[ProcessingError]:
        """
        Обрабатывает один файл: тип → дата съемки → перемещение.

        Args:
            task: Задача

        Returns:
            Optional[ProcessingError]: None при успехе, иначе итоговая ошибка
        """
        name = task.name

        try:
            stream = open(task.source_path, 'rb')
        except OSError as e:
            return ProcessingError(name, f"failed to open file '{name}': {e}", ErrorKind.OPEN)

        with stream:
            try:
                classification = classify(stream)
            except ClassificationError as e:
                return ProcessingError(name, f"failed to read MIME type from '{name}': {e}",
                                       ErrorKind.CLASSIFICATION)

            if not classification.eligible:
                return ProcessingError(name, f"ignore '{name}' because of {classification.reason}",
                                       ErrorKind.UNSUPPORTED_TYPE)

            try:
                timestamp = extract_timestamp(stream)
            except NoMetadataError as e:
                return ProcessingError(name, f"failed to get time from EXIF data in '{name}': {e}",
                                       ErrorKind.NO_METADATA)

        # Файл закрыт до переименования
        try:
            self.file_ops.relocate(task, timestamp)
        except DirectoryCreateError as e:
            return ProcessingError(name, str(e), ErrorKind.DIRECTORY_CREATE)
        except MoveError as e:
            return ProcessingError(name, str(e), ErrorKind.MOVE)

        return None

    def _handle_task(self, task: Task) -> None:
        """Обрабатывает задачу и передает ошибку в сборщик."""
        try:
            error = self.process_task(task)
        except Exception as e:
            error = ProcessingError(task.name, f"unexpected error while processing '{task.name}': {e}",
                                    ErrorKind.UNEXPECTED)

        self.stats.record(error)

        if error is None:
            return
        if error.is_skip:
            self.logger.log_file_skipped(task.name, error.message)
        else:
            self.logger.log_file_error(task.name, error)
        self.aggregator.submit(error)

    def _worker(self, tasks: queue.Queue) -> None:
        """Цикл обработчика: задачи берутся из очереди до стоп-сигнала."""
        while True:
            task = tasks.get()
            try:
                if task is STOP_SENTINEL:
                    break
                self._handle_task(task)
            finally:
                tasks.task_done()

    def run(self, input_dir: Path, output_dir: Path) -> SortReport:
        """
        Сортирует все файлы входного каталога.

        Каталог читается до запуска обработчиков. Метод возвращает управление
        только после того, как все обработчики завершились.

        Args:
            input_dir: Входной каталог
            output_dir: Корневой каталог назначения

        Returns:
            SortReport: Статистика и ошибки

        Raises:
            ListingError: Если входной каталог не удалось прочитать
        """
        self.stats = SortStats()
        self.stats.start_time = datetime.now()

        files = self.file_ops.list_input_files(input_dir)
        dest_root = Path(os.path.abspath(output_dir))

        workers = self.config.workers
        self.stats.total_files = len(files)
        self.logger.log_run_start(len(files), workers)

        tasks: queue.Queue = queue.Queue(maxsize=self.config.effective_queue_size)
        threads = [
            threading.Thread(target=self._worker, args=(tasks,), name=f"worker-{i}", daemon=True)
            for i in range(workers)
        ]
        for thread in threads:
            thread.start()

        for path in files:
            tasks.put(Task(name=path.name, source_path=path, dest_root=dest_root))

        for _ in threads:
            tasks.put(STOP_SENTINEL)

        for thread in threads:
            thread.join()

        self.stats.end_time = datetime.now()
        errors = self.aggregator.drain()

        self.logger.log_run_end(
            processed_files=self.stats.processed_files,
            successful_files=self.stats.successful_files,
            skipped_files=self.stats.skipped_files,
            failed_files=self.stats.failed_files,
            success_rate=self.stats.get_success_rate(),
            duration=self.stats.get_duration()
        )

        return SortReport(stats=self.stats, errors=errors)


def create_sorter(config: Config, logger: SorterLogger, out: Optional[TextIO] = None) -> Sorter:
    """
    Удобная функция для создания сортировщика.

    Args:
        config: Конфигурация приложения
        logger: Логгер
        out: Поток для строк о перемещении

    Returns:
        Sorter: Объект сортировщика
    """
    return Sorter(config.pipeline, logger, out=out)
