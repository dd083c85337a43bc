"""Модели данных для bitmap-файлов.

Принципы:
- SRP: только структуры данных и производная геометрия, без I/O и обработки.
- Неизменяемость (`frozen=True`): заголовки меняются только через
  `dataclasses.replace` непосредственно перед записью.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np

SIGNATURE = b"BM"
FILE_HEADER_SIZE = 14
DESCRIPTOR_SIZE = 40
HEADERS_SIZE = FILE_HEADER_SIZE + DESCRIPTOR_SIZE
SUPPORTED_DEPTHS = (24, 32)


def row_stride(width: int, bits_per_pixel: int) -> int:
    """Байт на строку с учётом выравнивания до границы 4 байт."""
    return ((bits_per_pixel * width + 31) // 32) * 4


@dataclass(frozen=True)
class FileHeader:
    """Фиксированный 14-байтный заголовок файла.

    Fields:
        signature: После разбора всегда b"BM".
        file_size: Полный размер файла, байт.
        reserved1, reserved2: Переносятся без изменений.
        pixel_offset: Начало пиксельных данных, байт от начала файла.
    """
    signature: bytes
    file_size: int
    reserved1: int
    reserved2: int
    pixel_offset: int


@dataclass(frozen=True)
class ImageDescriptor:
    """40-байтный описатель изображения (BITMAPINFOHEADER).

    Fields:
        header_size: Объявленный размер описателя, байт.
        width: Ширина, px (> 0).
        height: Высота, px. Положительная: строки снизу вверх, отрицательная: сверху вниз.
        planes: Число цветовых плоскостей, всегда 1.
        bits_per_pixel: 24 (B, G, R) или 32 (B, G, R, A).
        compression: Всегда 0 (без сжатия).
        image_size: Размер пиксельных данных, байт. Во входном файле может быть 0.
        x_pixels_per_meter, y_pixels_per_meter: Разрешение, переносится как есть.
        colors_used, colors_important: Размеры палитры, всегда 0.
    """
    header_size: int
    width: int
    height: int
    planes: int
    bits_per_pixel: int
    compression: int
    image_size: int
    x_pixels_per_meter: int
    y_pixels_per_meter: int
    colors_used: int
    colors_important: int

    @property
    def bytes_per_pixel(self) -> int:
        return self.bits_per_pixel // 8

    @property
    def abs_height(self) -> int:
        return abs(self.height)

    @property
    def top_down(self) -> bool:
        return self.height < 0

    @property
    def stride(self) -> int:
        return row_stride(self.width, self.bits_per_pixel)

    @property
    def row_bytes(self) -> int:
        """Значимые байты пикселей в строке; остаток stride занят выравниванием."""
        return self.width * self.bytes_per_pixel

    @property
    def pixel_count(self) -> int:
        return self.width * self.abs_height


@dataclass(frozen=True)
class BitmapImage:
    """Разобранный bitmap: заголовки и принадлежащий ему буфер строк.

    Fields:
        path: Исходный файл, если изображение загружено с диска.
        file_header: Разобранный заголовок файла.
        descriptor: Разобранный описатель изображения.
        pixels: Массив uint8 формы (abs(height), stride), строки в порядке файла.
        size_bytes: Размер исходного файла, если доступен.
    """
    path: Optional[Path]
    file_header: FileHeader
    descriptor: ImageDescriptor
    pixels: np.ndarray
    size_bytes: Optional[int] = None
