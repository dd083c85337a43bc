"""Побайтно точное чтение и запись заголовка файла и описателя изображения.

Принципы:
- SRP: только кодек заголовков, без пиксельных данных.
- Оба заголовка little-endian и упакованы без выравнивания; поля разбираются
  по одному явными форматами `struct`, раскладка не зависит от платформы.
"""
from __future__ import annotations

import logging
import struct
from dataclasses import asdict
from typing import Tuple

from bmpeq.models.bitmap_model import (
    DESCRIPTOR_SIZE,
    FILE_HEADER_SIZE,
    HEADERS_SIZE,
    SIGNATURE,
    SUPPORTED_DEPTHS,
    FileHeader,
    ImageDescriptor,
)
from bmpeq.models.errors import (
    BadSignatureError,
    InvalidHeaderError,
    TruncatedError,
    UnsupportedCompressionError,
    UnsupportedDepthError,
)

logger = logging.getLogger(__name__)

# сигнатура, размер файла, reserved1, reserved2, смещение пикселей
FILE_HEADER_FMT = struct.Struct("<2sIHHI")
# размер, ширина, высота, плоскости, bpp, сжатие, размер данных, x ppm, y ppm, палитра
DESCRIPTOR_FMT = struct.Struct("<IiiHHIIiiII")


def decode_headers(data: bytes) -> Tuple[FileHeader, ImageDescriptor]:
    """Разбирает и проверяет оба заголовка из начала `data`.

    Args:
        data: Как минимум первые 54 байта файла.

    Returns:
        `(FileHeader, ImageDescriptor)`.

    Raises:
        TruncatedError: байт меньше, чем нужно фиксированным заголовкам.
        BadSignatureError: первые два байта не "BM".
        UnsupportedDepthError: глубина цвета не 24 и не 32 бита.
        UnsupportedCompressionError: поле сжатия не 0.
        InvalidHeaderError: любое другое поле вне допустимых значений.
    """
    if len(data) < len(SIGNATURE):
        raise TruncatedError(
            "File too short for a bitmap signature",
            field="signature", expected=len(SIGNATURE), observed=len(data),
        )
    if data[0:2] != SIGNATURE:
        raise BadSignatureError(
            "Not a bitmap file", field="signature", expected=SIGNATURE, observed=bytes(data[0:2]),
        )
    if len(data) < HEADERS_SIZE:
        raise TruncatedError(
            "File too short for the bitmap headers",
            field="headers", expected=HEADERS_SIZE, observed=len(data),
        )

    file_header = FileHeader(*FILE_HEADER_FMT.unpack_from(data, 0))
    descriptor = ImageDescriptor(*DESCRIPTOR_FMT.unpack_from(data, FILE_HEADER_SIZE))
    logger.debug("Decoded file header: %s", asdict(file_header))
    logger.debug("Decoded image descriptor: %s", asdict(descriptor))

    _validate(file_header, descriptor)
    return file_header, descriptor


def _validate(file_header: FileHeader, descriptor: ImageDescriptor) -> None:
    if descriptor.bits_per_pixel not in SUPPORTED_DEPTHS:
        raise UnsupportedDepthError(
            "Only 24-bit and 32-bit bitmaps are supported",
            field="bits_per_pixel", expected=SUPPORTED_DEPTHS, observed=descriptor.bits_per_pixel,
        )
    if descriptor.compression != 0:
        raise UnsupportedCompressionError(
            "Only uncompressed bitmaps are supported",
            field="compression", expected=0, observed=descriptor.compression,
        )
    if descriptor.header_size < DESCRIPTOR_SIZE:
        raise InvalidHeaderError(
            "Image descriptor is smaller than BITMAPINFOHEADER",
            field="header_size", expected=DESCRIPTOR_SIZE, observed=descriptor.header_size,
        )
    if descriptor.width <= 0:
        raise InvalidHeaderError(
            "Width must be positive", field="width", expected="> 0", observed=descriptor.width,
        )
    if descriptor.height == 0:
        raise InvalidHeaderError(
            "Height must be nonzero", field="height", expected="!= 0", observed=descriptor.height,
        )
    if descriptor.planes != 1:
        raise InvalidHeaderError(
            "Color plane count must be 1", field="planes", expected=1, observed=descriptor.planes,
        )
    for name in ("colors_used", "colors_important"):
        value = getattr(descriptor, name)
        if value != 0:
            raise InvalidHeaderError(
                "Palette counts must be 0 for 24/32-bit bitmaps", field=name, expected=0, observed=value,
            )
    # Расширенные описатели (V4/V5) лежат между байтом 14 и пиксельными данными.
    minimum_offset = FILE_HEADER_SIZE + descriptor.header_size
    if file_header.pixel_offset < minimum_offset:
        raise InvalidHeaderError(
            "Pixel data offset overlaps the headers",
            field="pixel_offset", expected=f">= {minimum_offset}", observed=file_header.pixel_offset,
        )


def encode_headers(file_header: FileHeader, descriptor: ImageDescriptor) -> bytes:
    """Кодирует оба заголовка ровно в 54 байта little-endian."""
    try:
        return FILE_HEADER_FMT.pack(
            file_header.signature,
            file_header.file_size,
            file_header.reserved1,
            file_header.reserved2,
            file_header.pixel_offset,
        ) + DESCRIPTOR_FMT.pack(
            descriptor.header_size,
            descriptor.width,
            descriptor.height,
            descriptor.planes,
            descriptor.bits_per_pixel,
            descriptor.compression,
            descriptor.image_size,
            descriptor.x_pixels_per_meter,
            descriptor.y_pixels_per_meter,
            descriptor.colors_used,
            descriptor.colors_important,
        )
    except struct.error as exc:
        raise InvalidHeaderError(f"Header field out of range: {exc}") from exc
