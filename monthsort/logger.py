"""
Модуль для настройки и управления логированием приложения.

Обеспечивает централизованную настройку логирования с цветным выводом
в консоль (stderr) и необязательной ротацией файлов логов.
"""

import copy
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime

from .config_loader import LoggingConfig


LOGGER_NAME = 'monthsort'
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s (%(threadName)s): %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ColoredFormatter(logging.Formatter):
    """Форматтер с цветным выводом для консоли."""

    # Цветовые коды ANSI
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'        # Reset
    }

    def format(self, record):
        """Форматирует запись лога с цветом."""
        # Копия, чтобы цвет не попал в файловый обработчик
        record = copy.copy(record)
        if record.levelname in self.COLORS:
            record.levelname = f"{self.COLORS[record.levelname]}{record.levelname}{self.COLORS['RESET']}"

        return super().format(record)


class SorterLogger:
    """Класс для управления логированием приложения Month Sorter."""

    def __init__(self, config: LoggingConfig, stream=None):
        """
        Инициализация логгера.

        Args:
            config: Конфигурация логирования
            stream: Поток для консольного вывода (по умолчанию sys.stderr)
        """
        self.config = config
        self.stream = stream
        self.logger: Optional[logging.Logger] = None
        self._setup_logger()

    def _setup_logger(self) -> None:
        """Настраивает логгер с консольным и (опционально) файловым выводом."""
        level = getattr(logging, self.config.level.upper())

        self.logger = logging.getLogger(LOGGER_NAME)
        self.logger.setLevel(level)

        # Очищаем существующие обработчики
        for handler in self.logger.handlers[:]:
            handler.close()
            self.logger.removeHandler(handler)

        # stdout занят строками "Moved ...", поэтому консольный лог идет в stderr
        console_handler = logging.StreamHandler(self.stream or sys.stderr)
        console_handler.setFormatter(ColoredFormatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        console_handler.setLevel(level)
        self.logger.addHandler(console_handler)

        if self.config.log_file:
            log_file_path = Path(self.config.log_file)
            log_file_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_file_path,
                maxBytes=self.config.max_log_size * 1024 * 1024,  # MB в байты
                backupCount=self.config.backup_count,
                encoding='utf-8'
            )
            file_handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
            file_handler.setLevel(level)
            self.logger.addHandler(file_handler)

        # Предотвращаем дублирование сообщений
        self.logger.propagate = False

    def close(self) -> None:
        """Закрывает и отключает все обработчики."""
        for handler in self.logger.handlers[:]:
            handler.close()
            self.logger.removeHandler(handler)

    def log_run_start(self, total_files: int, workers: int) -> None:
        """
        Логирует начало сортировки.

        Args:
            total_files: Количество найденных файлов
            workers: Количество обработчиков
        """
        self.logger.info("🚀 Начало сортировки файлов")
        self.logger.info(f"📊 Всего файлов: {total_files}")
        self.logger.info(f"🧵 Обработчиков: {workers}")
        self.logger.info(f"⏰ Время начала: {datetime.now().strftime(DATE_FORMAT)}")

    def log_run_end(self, processed_files: int, successful_files: int,
                    skipped_files: int, failed_files: int,
                    success_rate: float = 0.0, duration: Optional[float] = None) -> None:
        """
        Логирует завершение сортировки.

        Args:
            processed_files: Обработано файлов
            successful_files: Успешно перемещено
            skipped_files: Пропущено (неподдерживаемый тип)
            failed_files: Ошибок
            success_rate: Процент перемещенных файлов
            duration: Продолжительность в секундах
        """
        self.logger.info("✅ Сортировка завершена")
        self.logger.info("📊 Статистика:")
        self.logger.info(f"   • Обработано: {processed_files}")
        self.logger.info(f"   • Перемещено: {successful_files}")
        self.logger.info(f"   • Пропущено: {skipped_files}")
        self.logger.info(f"   • Ошибок: {failed_files}")
        self.logger.info(f"   • Процент успеха: {success_rate:.1f}%")
        if duration is not None:
            self.logger.info(f"   • Длительность: {duration:.2f} с")
        self.logger.info(f"⏰ Время завершения: {datetime.now().strftime(DATE_FORMAT)}")

    def log_file_moved(self, name: str, source_path: Path, target_path: Path) -> None:
        """Логирует успешное перемещение файла."""
        self.logger.debug(f"📁 Файл {name} перемещен: {source_path} → {target_path}")

    def log_file_skipped(self, name: str, reason: str) -> None:
        """Логирует пропуск файла неподдерживаемого типа."""
        self.logger.info(f"⏭️ Файл {name} пропущен: {reason}")

    def log_file_error(self, name: str, error) -> None:
        """
        Логирует ошибку при обработке файла.

        Args:
            name: Имя файла
            error: Исключение или ProcessingError
        """
        self.logger.error(f"❌ Ошибка при обработке файла {name}: {error}")

    def log_system_info(self, info: str) -> None:
        """Логирует системную информацию."""
        self.logger.info(f"ℹ️ {info}")

    def log_warning(self, message: str) -> None:
        """Логирует предупреждение."""
        self.logger.warning(f"⚠️ {message}")

    def log_critical_error(self, message: str, error: Exception = None) -> None:
        """
        Логирует критическую ошибку.

        Args:
            message: Сообщение об ошибке
            error: Исключение (опционально)
        """
        if error:
            self.logger.critical(f"💥 {message}: {error}")
        else:
            self.logger.critical(f"💥 {message}")

