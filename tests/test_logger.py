"""
Тесты для модуля logger.py
"""

import io
import logging
from pathlib import Path

import pytest

from monthsort.config_loader import LoggingConfig
from monthsort.logger import ColoredFormatter, SorterLogger


def make_record(level=logging.INFO, msg='Test message'):
    return logging.LogRecord(
        name='test',
        level=level,
        pathname='',
        lineno=0,
        msg=msg,
        args=(),
        exc_info=None
    )


class TestColoredFormatter:
    """Тесты для ColoredFormatter."""

    def test_colored_formatter(self):
        """Тест цветного форматтера."""
        formatter = ColoredFormatter(fmt='[%(levelname)s] %(message)s')
        record = make_record()

        formatted = formatter.format(record)

        assert '\033[32m' in formatted  # Зеленый цвет для INFO
        assert '\033[0m' in formatted
        assert 'Test message' in formatted
        # Исходная запись не изменяется
        assert record.levelname == 'INFO'


class TestSorterLogger:
    """Тесты для SorterLogger."""

    @pytest.fixture
    def stream(self):
        return io.StringIO()

    @pytest.fixture
    def sorter_logger(self, stream):
        logger = SorterLogger(LoggingConfig(level='DEBUG'), stream=stream)
        yield logger
        logger.close()

    def test_logger_initialization(self, sorter_logger):
        """Тест инициализации логгера."""
        assert sorter_logger.logger.name == 'monthsort'
        assert sorter_logger.logger.level == logging.DEBUG
        assert sorter_logger.logger.propagate is False

    def test_console_only_by_default(self, sorter_logger):
        """Тест: без log_file только консольный обработчик."""
        handler_types = [type(h).__name__ for h in sorter_logger.logger.handlers]

        assert handler_types == ['StreamHandler']

    def test_file_handler(self, tmp_path, stream):
        """Тест: с log_file добавляется обработчик с ротацией."""
        log_file = tmp_path / "logs" / "monthsort.log"
        sorter_logger = SorterLogger(LoggingConfig(level='INFO', log_file=log_file,
                                                   max_log_size=1, backup_count=2), stream=stream)
        try:
            handlers = sorter_logger.logger.handlers
            rotating = [h for h in handlers if type(h).__name__ == 'RotatingFileHandler']
            assert len(handlers) == 2
            assert rotating[0].maxBytes == 1024 * 1024
            assert rotating[0].backupCount == 2

            sorter_logger.log_system_info("hello file")
            for handler in handlers:
                handler.flush()
        finally:
            sorter_logger.close()

        content = log_file.read_text(encoding='utf-8')
        assert 'hello file' in content
        assert '\033[' not in content

    def test_repeated_setup_does_not_duplicate_handlers(self, stream):
        first = SorterLogger(LoggingConfig(), stream=stream)
        second = SorterLogger(LoggingConfig(), stream=stream)
        try:
            assert len(second.logger.handlers) == 1
        finally:
            first.close()
            second.close()

    def test_level_filters_messages(self, stream):
        sorter_logger = SorterLogger(LoggingConfig(level='WARNING'), stream=stream)
        try:
            sorter_logger.log_system_info("quiet")
            sorter_logger.log_warning("loud")
        finally:
            sorter_logger.close()

        assert 'quiet' not in stream.getvalue()
        assert 'loud' in stream.getvalue()

    def test_domain_messages(self, sorter_logger, stream):
        """Тест специальных методов логирования."""
        sorter_logger.log_run_start(10, 4)
        sorter_logger.log_file_moved("a.jpg", Path("in/a.jpg"), Path("out/June/a.jpg"))
        sorter_logger.log_file_skipped("c.txt", "unsupported")
        sorter_logger.log_file_error("b.jpg", Exception("no exif"))
        sorter_logger.log_run_end(10, 7, 2, 1, success_rate=70.0, duration=1.5)
        sorter_logger.log_critical_error("fatal", Exception("disk"))

        output = stream.getvalue()
        assert 'a.jpg' in output
        assert 'c.txt' in output
        assert 'no exif' in output
        assert 'fatal: disk' in output
        assert '70.0%' in output
        assert '1.50' in output

