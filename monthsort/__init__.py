"""
Month Sorter Utility

Утилита для раскладки JPEG-снимков по каталогам месяцев (June, July, ...)
на основе даты съемки из EXIF.
"""

__version__ = "1.0.0"
__author__ = "Month Sorter Team"
__description__ = "Utility for sorting JPEG photos into month directories by EXIF capture date"
