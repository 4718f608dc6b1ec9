"""
Главный модуль CLI интерфейса для утилиты сортировки снимков по месяцам.
"""

import argparse
import sys
from typing import Optional, TextIO

from .config_loader import ConfigError, VALID_LOG_LEVELS, CONFLICT_POLICIES, apply_overrides, load_config
from .errors import ListingError
from .logger import SorterLogger
from .sorter import Sorter, create_sorter


EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


class SorterCLI:
    """Класс для обработки команд CLI."""

    def __init__(self, out: Optional[TextIO] = None, err: Optional[TextIO] = None):
        self.out = out or sys.stdout
        self.err = err or sys.stderr
        self.config = None
        self.logger: Optional[SorterLogger] = None
        self.sorter: Optional[Sorter] = None

    def _fail(self, message: str) -> None:
        """Пишет однострочную диагностику в stderr."""
        print(message, file=self.err)

    def setup(self, args) -> bool:
        """
        Инициализирует CLI: конфигурация, логгер, сортировщик.

        Args:
            args: Аргументы командной строки

        Returns:
            bool: True если инициализация успешна
        """
        try:
            config = load_config(args.config)
            self.config = apply_overrides(
                config,
                input_dir=args.input_dir,
                output_dir=args.output_dir,
                workers=args.workers,
                on_conflict=args.on_conflict,
                log_level=args.log_level,
                log_file=args.log_file
            )
        except (FileNotFoundError, ConfigError) as e:
            self._fail(f"invalid configuration: {e}")
            return False

        if self.config.paths.output_dir is None:
            self._fail("the output directory is missing")
            return False

        self.logger = SorterLogger(self.config.logging, stream=self.err)
        self.sorter = create_sorter(self.config, self.logger, out=self.out)

        if args.config:
            self.logger.log_system_info(f"Конфигурация загружена из: {args.config}")
        return True

    def cmd_sort(self, args) -> int:
        """
        Команда сортировки файлов.

        Args:
            args: Аргументы командной строки

        Returns:
            int: Код возврата (0 - выполнено, 1 - фатальная ошибка или --strict с ошибками)
        """
        paths = self.config.paths
        try:
            report = self.sorter.run(paths.input_dir, paths.output_dir)
        except ListingError as e:
            self._fail(str(e))
            return EXIT_FAILURE
        except Exception as e:
            self.logger.log_critical_error("Сортировка прервана", e)
            raise
        finally:
            self.logger.close()

        if report.has_errors():
            print(report.format_errors(), file=self.err)

        if args.strict and report.has_errors():
            return EXIT_FAILURE
        return EXIT_OK


def positive_int(value: str) -> int:
    """Тип аргумента argparse: целое число больше 0."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"ожидается целое число: {value}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"значение должно быть больше 0: {value}")
    return number


def create_parser() -> argparse.ArgumentParser:
    """
    Создает парсер аргументов командной строки.

    Returns:
        argparse.ArgumentParser: Настроенный парсер
    """
    parser = argparse.ArgumentParser(
        prog='monthsort',
        description="Раскладывает JPEG-снимки по каталогам месяцев по дате съемки из EXIF",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Примеры использования:

  # Сортировка текущего каталога
  monthsort --out ~/Pictures/sorted

  # Сортировка с явным входным каталогом и двумя обработчиками
  monthsort --in ~/Downloads/camera --out ~/Pictures/sorted --workers 2

  # Не перезаписывать и не переименовывать совпадающие файлы
  monthsort --in ./dcim --out ./sorted --on-conflict fail

  # Код возврата 1, если хотя бы один файл не обработан
  monthsort --in ./dcim --out ./sorted --strict
        """
    )

    parser.add_argument(
        '--in',
        dest='input_dir',
        default=None,
        help='Входной каталог (по умолчанию: текущий каталог)'
    )
    parser.add_argument(
        '--out',
        dest='output_dir',
        nargs='?',
        const='',
        default=None,
        help='Корневой каталог для отсортированных файлов (обязательный)'
    )
    parser.add_argument(
        '--workers',
        type=positive_int,
        default=None,
        help='Количество обработчиков (по умолчанию: число процессоров)'
    )
    parser.add_argument(
        '--on-conflict',
        choices=CONFLICT_POLICIES,
        default=None,
        help='Что делать, если файл с таким именем уже есть (по умолчанию: rename)'
    )
    parser.add_argument(
        '--config',
        default=None,
        help='Путь к INI-файлу конфигурации (необязательно)'
    )
    parser.add_argument(
        '--log-level',
        choices=VALID_LOG_LEVELS,
        type=str.upper,
        default=None,
        help='Уровень логирования (по умолчанию: WARNING)'
    )
    parser.add_argument(
        '--log-file',
        default=None,
        help='Файл лога с ротацией (по умолчанию лог только в stderr)'
    )
    parser.add_argument(
        '--strict',
        action='store_true',
        help='Код возврата 1, если хотя бы один файл не обработан'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Подробный вывод при неожиданных ошибках'
    )

    return parser


def main(argv=None) -> int:
    """Главная функция CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    cli = SorterCLI()

    if not cli.setup(args):
        return EXIT_FAILURE

    try:
        return cli.cmd_sort(args)
    except KeyboardInterrupt:
        print("\n⚠️ Операция прервана пользователем", file=sys.stderr)
        return EXIT_INTERRUPTED
    except Exception as e:
        print(f"❌ Неожиданная ошибка: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
