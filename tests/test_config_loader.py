"""
Тесты для модуля config_loader.py
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from monthsort.config_loader import (
    Config,
    ConfigError,
    PathsConfig,
    PipelineConfig,
    apply_overrides,
    load_config,
)


def write_ini(tmp_path, text: str) -> str:
    path = tmp_path / "settings.ini"
    path.write_text(text, encoding='utf-8')
    return str(path)


class TestConfigLoader:
    """Тесты для класса ConfigLoader."""

    def test_defaults_without_file(self):
        """Тест: без файла используются значения по умолчанию."""
        with patch('monthsort.config_loader.os.cpu_count', return_value=6):
            config = load_config()

        assert config.paths.input_dir == Path('.')
        assert config.paths.output_dir is None
        assert config.pipeline.workers == 6
        assert config.pipeline.effective_queue_size == 12
        assert config.pipeline.on_conflict == 'rename'
        assert config.logging.level == 'WARNING'
        assert config.logging.log_file is None

    def test_cpu_count_unknown(self):
        with patch('monthsort.config_loader.os.cpu_count', return_value=None):
            assert load_config().pipeline.workers == 1

    def test_load_config_success(self, tmp_path):
        """Тест успешной загрузки конфигурации."""
        config_path = write_ini(tmp_path, """[paths]
input_dir = /data/camera
output_dir = /data/sorted

[pipeline]
workers = 3
queue_size = 7
on_conflict = fail

[logging]
level = DEBUG
log_file = logs/monthsort.log
max_log_size = 2
backup_count = 1
""")

        config = load_config(config_path)

        assert config.paths.input_dir == Path('/data/camera')
        assert config.paths.output_dir == Path('/data/sorted')
        assert config.pipeline.workers == 3
        assert config.pipeline.effective_queue_size == 7
        assert config.pipeline.on_conflict == 'fail'
        assert config.logging.level == 'DEBUG'
        assert config.logging.log_file == Path('logs/monthsort.log')
        assert config.logging.max_log_size == 2
        assert config.logging.backup_count == 1

    def test_partial_file(self, tmp_path):
        """Тест: отсутствующие секции заменяются значениями по умолчанию."""
        config_path = write_ini(tmp_path, "[pipeline]\nworkers = 2\n")

        config = load_config(config_path)

        assert config.pipeline.workers == 2
        assert config.paths.output_dir is None
        assert config.logging.level == 'WARNING'

    def test_config_file_not_found(self):
        """Тест ошибки при отсутствии файла конфигурации."""
        with pytest.raises(FileNotFoundError):
            load_config("nonexistent_config.ini")

    @pytest.mark.parametrize("section,key,value,message", [
        ("pipeline", "workers", "0", "обработчиков"),
        ("pipeline", "queue_size", "0", "очереди"),
        ("pipeline", "on_conflict", "merge", "политика"),
        ("logging", "level", "LOUD", "уровень"),
        ("logging", "backup_count", "-1", "ротации"),
    ])
    def test_invalid_values(self, tmp_path, section, key, value, message):
        """Тест валидации некорректных значений."""
        config_path = write_ini(tmp_path, f"[{section}]\n{key} = {value}\n")

        with pytest.raises(ConfigError, match=message):
            load_config(config_path)

    def test_non_integer_value(self, tmp_path):
        config_path = write_ini(tmp_path, "[pipeline]\nworkers = many\n")

        with pytest.raises(ConfigError, match="Ошибка загрузки конфигурации"):
            load_config(config_path)

    def test_config_error_is_value_error(self):
        assert issubclass(ConfigError, ValueError)


class TestApplyOverrides:
    """Тесты переопределения конфигурации аргументами CLI."""

    def test_overrides(self):
        config = Config(pipeline=PipelineConfig(workers=4))

        updated = apply_overrides(config, input_dir='in', output_dir='out', workers=2,
                                  on_conflict='overwrite', log_level='INFO', log_file='x.log')

        assert updated.paths.input_dir == Path('in')
        assert updated.paths.output_dir == Path('out')
        assert updated.pipeline.workers == 2
        assert updated.pipeline.on_conflict == 'overwrite'
        assert updated.logging.level == 'INFO'
        assert updated.logging.log_file == Path('x.log')
        # исходная конфигурация не изменяется
        assert config.pipeline.workers == 4
        assert config.paths.output_dir is None

    def test_none_is_ignored(self):
        config = Config(pipeline=PipelineConfig(workers=4))

        updated = apply_overrides(config, workers=None, output_dir=None)

        assert updated.pipeline.workers == 4
        assert updated.paths.output_dir is None

    def test_overrides_are_validated(self):
        with pytest.raises(ConfigError):
            apply_overrides(Config(), workers=0)

    @pytest.mark.parametrize("value", ["", "   "])
    def test_blank_output_dir_clears_destination(self, value):
        """Тест: пустой --out равнозначен отсутствующему каталогу."""
        config = Config(paths=PathsConfig(output_dir=Path('/data/sorted')))

        updated = apply_overrides(config, output_dir=value)

        assert updated.paths.output_dir is None

    def test_blank_output_dir_in_file(self, tmp_path):
        config_path = write_ini(tmp_path, "[paths]\noutput_dir =   \n")

        assert load_config(config_path).paths.output_dir is None
