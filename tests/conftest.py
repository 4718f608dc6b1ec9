"""
Общие фикстуры тестов.
"""

from pathlib import Path
from unittest.mock import Mock

import pytest
from PIL import Image

from monthsort.logger import SorterLogger


def write_jpeg(path: Path, exif_datetime: str = None) -> Path:
    """Создает небольшой JPEG; если задана дата, пишет ее в EXIF DateTime."""
    img = Image.new('RGB', (8, 8), color=(200, 30, 30))
    if exif_datetime is None:
        img.save(path, 'JPEG')
    else:
        exif = Image.Exif()
        exif[0x0132] = exif_datetime
        img.save(path, 'JPEG', exif=exif.tobytes())
    return path


def write_png(path: Path) -> Path:
    Image.new('RGB', (8, 8)).save(path, 'PNG')
    return path


@pytest.fixture
def mock_logger():
    """Создает мок логгера."""
    return Mock(spec=SorterLogger)


@pytest.fixture
def input_dir(tmp_path):
    path = tmp_path / "in"
    path.mkdir()
    return path


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "out"


@pytest.fixture
def make_jpeg():
    return write_jpeg


@pytest.fixture
def make_png():
    return write_png
