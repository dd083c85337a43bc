"""Чтение и запись сырого буфера строк развёртки.

Буфер: массив `uint8` формы `(abs(height), stride)`, строки в порядке файла.
Порядок строк (снизу вверх или сверху вниз) не приводится к единому: обработка
попиксельная, поэтому строки записываются в том же порядке, в каком прочитаны.
"""
from __future__ import annotations

import io
import logging
from typing import BinaryIO

import numpy as np

from bmpeq.models.bitmap_model import HEADERS_SIZE, FileHeader, ImageDescriptor
from bmpeq.models.errors import InvalidHeaderError, ReadFailedError, TruncatedError, WriteFailedError
from bmpeq.services.header_codec import encode_headers

logger = logging.getLogger(__name__)


def load_pixels(stream: BinaryIO, offset: int, stride: int, height: int) -> np.ndarray:
    """Читает ровно `stride * abs(height)` байт начиная с `offset`.

    Размер потока проверяется до чтения, поэтому заголовок с огромными
    размерами не приводит к попытке выделить под них память.

    Raises:
        TruncatedError: поток заканчивается раньше, чем буфер заполнен.
        ReadFailedError: поток не удалось прочитать.
    """
    rows = abs(height)
    expected = stride * rows
    try:
        end = stream.seek(0, io.SEEK_END)
        available = max(0, end - offset)
        if available < expected:
            raise TruncatedError(
                "Pixel data is shorter than the headers declare",
                field="pixels", expected=expected, observed=available,
            )
        stream.seek(offset)
        data = stream.read(expected)
    except OSError as exc:
        raise ReadFailedError(f"Cannot read pixel data: {exc}") from exc

    if len(data) < expected:
        raise TruncatedError(
            "Pixel data is shorter than the headers declare",
            field="pixels", expected=expected, observed=len(data),
        )
    logger.debug("Loaded %d rows x %d bytes from offset %d", rows, stride, offset)
    return np.frombuffer(data, dtype=np.uint8).reshape(rows, stride).copy()


def write_pixels(
    stream: BinaryIO,
    file_header: FileHeader,
    descriptor: ImageDescriptor,
    buffer: np.ndarray,
) -> None:
    """Пишет заголовки, нули до смещения пиксельных данных, затем буфер.

    Выравнивание строк всегда записывается нулями, что бы ни лежало в буфере.

    Raises:
        InvalidHeaderError: буфер или смещение не согласуются с заголовками.
        WriteFailedError: поток не удалось записать.
    """
    expected_shape = (descriptor.abs_height, descriptor.stride)
    if buffer.shape != expected_shape:
        raise InvalidHeaderError(
            "Pixel buffer does not match the image descriptor",
            field="pixels", expected=expected_shape, observed=buffer.shape,
        )
    gap = file_header.pixel_offset - HEADERS_SIZE
    if gap < 0:
        raise InvalidHeaderError(
            "Pixel data offset overlaps the headers",
            field="pixel_offset", expected=f">= {HEADERS_SIZE}", observed=file_header.pixel_offset,
        )

    rows = np.array(buffer, dtype=np.uint8, copy=True)
    rows[:, descriptor.row_bytes:] = 0

    try:
        stream.write(encode_headers(file_header, descriptor))
        if gap:
            stream.write(b"\x00" * gap)
        stream.write(rows.tobytes())
    except OSError as exc:
        raise WriteFailedError(f"Cannot write bitmap: {exc}") from exc
    logger.debug("Wrote %d header bytes, %d gap bytes, %d pixel bytes", HEADERS_SIZE, gap, rows.size)
