"""
Модуль для определения типа файла и извлечения даты съемки.

Тип определяется по содержимому (сигнатуре формата), а не по расширению.
Дата съемки берется из блока EXIF.
"""

import struct
from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO, Optional

from PIL import Image, UnidentifiedImageError

from .errors import ClassificationError, NoMetadataError


# MPO - это JPEG с дополнительными кадрами, Pillow открывает его отдельным форматом
SUPPORTED_FORMATS = ('JPEG', 'MPO')
SUPPORTED_MIME_TYPE = 'image/jpeg'
UNKNOWN_MIME_TYPE = 'application/octet-stream'
JPEG_SIGNATURE = b'\xff\xd8\xff'

EXIF_IFD_POINTER = 0x8769
EXIF_DATETIME_ORIGINAL_TAG = 0x9003
EXIF_DATETIME_DIGITIZED_TAG = 0x9004
EXIF_DATETIME_TAG = 0x0132
EXIF_DATETIME_FORMAT = '%Y:%m:%d %H:%M:%S'

# Что Pillow выбрасывает на поврежденном или усеченном блоке EXIF
EXIF_READ_ERRORS = (OSError, SyntaxError, ValueError, KeyError, struct.error, Image.DecompressionBombError)


@dataclass(frozen=True)
class Classification:
    """Результат проверки типа содержимого."""
    eligible: bool
    mime_type: str
    reason: str = ""


def classify(stream: BinaryIO) -> Classification:
    """
    Определяет, является ли поток поддерживаемым изображением (JPEG).

    Читается только заголовок. После проверки поток перематывается в начало.

    Args:
        stream: Открытый бинарный поток с возможностью перемотки

    Returns:
        Classification: eligible=True для JPEG, иначе причина пропуска

    Raises:
        ClassificationError: Если не удалось прочитать поток
    """
    try:
        try:
            header = stream.read(len(JPEG_SIGNATURE))
            stream.seek(0)
            with Image.open(stream) as img:
                image_format = img.format
                mime_type = img.get_format_mimetype() or UNKNOWN_MIME_TYPE
        except UnidentifiedImageError:
            # Поврежденный JPEG Pillow не открывает, но сигнатура на месте
            if header == JPEG_SIGNATURE:
                return Classification(eligible=True, mime_type=SUPPORTED_MIME_TYPE)
            return Classification(
                eligible=False,
                mime_type=UNKNOWN_MIME_TYPE,
                reason=f"unsupported MIME type '{UNKNOWN_MIME_TYPE}'"
            )
        except (OSError, Image.DecompressionBombError) as e:
            raise ClassificationError(str(e)) from e
    finally:
        stream.seek(0)

    if image_format not in SUPPORTED_FORMATS:
        return Classification(
            eligible=False,
            mime_type=mime_type,
            reason=f"unsupported MIME type '{mime_type}'"
        )

    return Classification(eligible=True, mime_type=SUPPORTED_MIME_TYPE)


def _parse_exif_datetime(value) -> Optional[datetime]:
    """Разбирает значение вида 'YYYY:MM:DD HH:MM:SS'."""
    if isinstance(value, bytes):
        value = value.decode('ascii', errors='ignore')
    if not isinstance(value, str):
        return None

    value = value.replace('\x00', '').strip()
    if not value:
        return None

    try:
        return datetime.strptime(value, EXIF_DATETIME_FORMAT)
    except ValueError:
        return None


def extract_timestamp(stream: BinaryIO) -> datetime:
    """
    Извлекает дату съемки из EXIF.

    Порядок поиска: DateTimeOriginal, DateTimeDigitized, DateTime.

    Args:
        stream: Открытый поток файла, признанного поддерживаемым

    Returns:
        datetime: Дата и время съемки

    Raises:
        NoMetadataError: Если EXIF отсутствует, поврежден или не содержит даты
    """
    try:
        with Image.open(stream) as img:
            exif = img.getexif()
            exif_ifd = exif.get_ifd(EXIF_IFD_POINTER) if exif else {}
    except EXIF_READ_ERRORS as e:
        raise NoMetadataError(f"unreadable EXIF data: {e}") from e
    finally:
        stream.seek(0)

    if not exif:
        raise NoMetadataError("no EXIF data")

    candidates = (
        exif_ifd.get(EXIF_DATETIME_ORIGINAL_TAG),
        exif_ifd.get(EXIF_DATETIME_DIGITIZED_TAG),
        exif.get(EXIF_DATETIME_TAG),
    )
    present = [value for value in candidates if value is not None]
    if not present:
        raise NoMetadataError("EXIF data has no date/time field")

    for value in present:
        timestamp = _parse_exif_datetime(value)
        if timestamp is not None:
            return timestamp

    raise NoMetadataError(f"cannot parse EXIF date/time {present[0]!r}")
