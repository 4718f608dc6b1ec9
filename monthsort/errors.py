"""
Иерархия исключений проекта.
"""


class MonthSortError(Exception):
    """Базовое исключение проекта."""


class ClassificationError(MonthSortError):
    """Не удалось определить тип содержимого потока."""


class NoMetadataError(MonthSortError):
    """В файле нет EXIF или в EXIF нет даты съемки."""


class FileOperationError(MonthSortError):
    """Исключение для ошибок операций с файлами."""


class DirectoryCreateError(FileOperationError):
    pass


class MoveError(FileOperationError):
    pass


class ListingError(FileOperationError):
    """Входной каталог не удалось прочитать. Фатальная ошибка запуска."""
