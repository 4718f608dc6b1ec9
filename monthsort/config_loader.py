"""
Модуль для загрузки и валидации конфигурации приложения.

Конфигурация собирается из значений по умолчанию, необязательного
INI-файла и аргументов командной строки (в порядке возрастания приоритета).
"""

import configparser
import os
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field, replace


CONFLICT_POLICIES = ('rename', 'fail', 'overwrite')
VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


class ConfigError(ValueError):
    """Некорректная конфигурация."""
    pass


def default_workers() -> int:
    """Количество обработчиков по умолчанию: по числу процессоров."""
    return os.cpu_count() or 1


def optional_path(value: Optional[str]) -> Optional[Path]:
    """Путь из строки; пустая или пробельная строка дает None."""
    if value is None or not str(value).strip():
        return None
    return Path(value)


@dataclass
class PathsConfig:
    """Конфигурация путей к файлам."""
    input_dir: Path = Path('.')
    output_dir: Optional[Path] = None


@dataclass
class PipelineConfig:
    """Конфигурация конвейера обработки."""
    workers: int = field(default_factory=default_workers)
    queue_size: Optional[int] = None
    on_conflict: str = 'rename'

    @property
    def effective_queue_size(self) -> int:
        """Емкость очереди задач; по умолчанию вдвое больше числа обработчиков."""
        if self.queue_size is None:
            return self.workers * 2
        return self.queue_size


@dataclass
class LoggingConfig:
    """Конфигурация логирования."""
    level: str = 'WARNING'
    log_file: Optional[Path] = None
    max_log_size: int = 10
    backup_count: int = 5


@dataclass
class Config:
    """Основная конфигурация приложения."""
    paths: PathsConfig = field(default_factory=PathsConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class ConfigLoader:
    """Класс для загрузки и валидации конфигурации."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Инициализация загрузчика конфигурации.

        Args:
            config_path: Путь к файлу конфигурации (None - только значения по умолчанию)
        """
        self.config_path = Path(config_path) if config_path else None

    def load_config(self) -> Config:
        """
        Загружает конфигурацию из файла.

        Returns:
            Config: Объект конфигурации

        Raises:
            FileNotFoundError: Если указанный файл конфигурации не найден
            ConfigError: Если конфигурация некорректна
        """
        config_parser = configparser.ConfigParser()

        if self.config_path is not None:
            if not self.config_path.exists():
                raise FileNotFoundError(f"Файл конфигурации не найден: {self.config_path}")
            try:
                config_parser.read(self.config_path, encoding='utf-8')
            except configparser.Error as e:
                raise ConfigError(f"Ошибка чтения конфигурации: {e}") from e

        try:
            config = Config(
                paths=self._load_paths_config(config_parser),
                pipeline=self._load_pipeline_config(config_parser),
                logging=self._load_logging_config(config_parser)
            )
        except ValueError as e:
            raise ConfigError(f"Ошибка загрузки конфигурации: {e}") from e

        validate_config(config)
        return config

    def _load_paths_config(self, parser: configparser.ConfigParser) -> PathsConfig:
        """Загружает конфигурацию путей."""
        section = 'paths'

        input_dir = parser.get(section, 'input_dir', fallback='.')
        output_dir = parser.get(section, 'output_dir', fallback='')

        return PathsConfig(
            input_dir=Path(input_dir),
            output_dir=optional_path(output_dir)
        )

    def _load_pipeline_config(self, parser: configparser.ConfigParser) -> PipelineConfig:
        """Загружает конфигурацию конвейера."""
        section = 'pipeline'

        queue_size = parser.get(section, 'queue_size', fallback='')

        return PipelineConfig(
            workers=parser.getint(section, 'workers', fallback=default_workers()),
            queue_size=int(queue_size) if queue_size else None,
            on_conflict=parser.get(section, 'on_conflict', fallback='rename')
        )

    def _load_logging_config(self, parser: configparser.ConfigParser) -> LoggingConfig:
        """Загружает конфигурацию логирования."""
        section = 'logging'

        log_file = parser.get(section, 'log_file', fallback='')

        return LoggingConfig(
            level=parser.get(section, 'level', fallback='WARNING'),
            log_file=Path(log_file) if log_file else None,
            max_log_size=parser.getint(section, 'max_log_size', fallback=10),
            backup_count=parser.getint(section, 'backup_count', fallback=5)
        )

def validate_config(config: Config) -> None:
    """
    Валидирует конфигурацию.

    Raises:
        ConfigError: Если значение вне допустимого диапазона
    """
    if config.pipeline.workers < 1:
        raise ConfigError("Количество обработчиков должно быть больше 0")

    if config.pipeline.queue_size is not None and config.pipeline.queue_size < 1:
        raise ConfigError("Размер очереди должен быть больше 0")

    if config.pipeline.on_conflict not in CONFLICT_POLICIES:
        raise ConfigError(f"Некорректная политика конфликтов: {config.pipeline.on_conflict}")

    if config.logging.level.upper() not in VALID_LOG_LEVELS:
        raise ConfigError(f"Некорректный уровень логирования: {config.logging.level}")

    if config.logging.max_log_size < 0 or config.logging.backup_count < 0:
        raise ConfigError("Параметры ротации логов не могут быть отрицательными")


def apply_overrides(config: Config, **overrides) -> Config:
    """
    Возвращает копию конфигурации с переопределенными значениями.

    Значения None игнорируются, пустая строка в output_dir сбрасывает каталог
    назначения. Поддерживаемые ключи: input_dir, output_dir, workers,
    queue_size, on_conflict, log_level, log_file.
    """
    paths = config.paths
    pipeline = config.pipeline
    logging_config = config.logging

    if overrides.get('input_dir') is not None:
        paths = replace(paths, input_dir=Path(overrides['input_dir']))
    if overrides.get('output_dir') is not None:
        # Пустой --out означает, что каталог не указан
        paths = replace(paths, output_dir=optional_path(overrides['output_dir']))
    if overrides.get('workers') is not None:
        pipeline = replace(pipeline, workers=overrides['workers'])
    if overrides.get('queue_size') is not None:
        pipeline = replace(pipeline, queue_size=overrides['queue_size'])
    if overrides.get('on_conflict') is not None:
        pipeline = replace(pipeline, on_conflict=overrides['on_conflict'])
    if overrides.get('log_level') is not None:
        logging_config = replace(logging_config, level=overrides['log_level'])
    if overrides.get('log_file') is not None:
        logging_config = replace(logging_config, log_file=Path(overrides['log_file']))

    updated = Config(paths=paths, pipeline=pipeline, logging=logging_config)
    validate_config(updated)
    return updated


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Удобная функция для быстрой загрузки конфигурации.

    Args:
        config_path: Путь к файлу конфигурации

    Returns:
        Config: Объект конфигурации
    """
    loader = ConfigLoader(config_path)
    return loader.load_config()
