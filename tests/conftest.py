from __future__ import annotations

import struct
from pathlib import Path
from typing import Callable, List, Sequence

import pytest

Row = Sequence[Sequence[int]]

BLACK = (0, 0, 0)
WHITE = (255, 255, 255)


def build_bitmap(
    rows: List[Row],
    bits_per_pixel: int = 24,
    top_down: bool = False,
    gap: int = 0,
    signature: bytes = b"BM",
    planes: int = 1,
    compression: int = 0,
    colors_used: int = 0,
    header_size: int = 40,
    padding_byte: int = 0,
    image_size: int = None,
) -> bytes:
    """Assembles a bitmap byte by byte; `rows` are in on-disk order, pixels as B, G, R(, A)."""
    height = len(rows)
    width = len(rows[0])
    stride = ((bits_per_pixel * width + 31) // 32) * 4
    body = bytearray()
    for row in rows:
        raw = bytes(channel for pixel in row for channel in pixel)
        body += raw + bytes([padding_byte]) * (stride - len(raw))

    gap = max(gap, header_size - 40)
    offset = 54 + gap
    file_header = struct.pack("<2sIHHI", signature, offset + len(body), 0, 0, offset)
    descriptor = struct.pack(
        "<IiiHHIIiiII",
        header_size,
        width,
        -height if top_down else height,
        planes,
        bits_per_pixel,
        compression,
        len(body) if image_size is None else image_size,
        2835,
        2835,
        colors_used,
        0,
    )
    return file_header + descriptor + bytes(gap) + bytes(body)


@pytest.fixture
def write_bitmap(tmp_path: Path) -> Callable[..., Path]:
    """Writes `build_bitmap(...)` to a file under tmp_path and returns the path."""
    def _write(rows: List[Row], name: str = "input.bmp", **kwargs) -> Path:
        path = tmp_path / name
        path.write_bytes(build_bitmap(rows, **kwargs))
        return path
    return _write


@pytest.fixture
def checker_rows() -> List[Row]:
    """2x2: black, white / black, white."""
    return [[BLACK, WHITE], [BLACK, WHITE]]


def oversized_bitmap(width: int, height: int) -> bytes:
    """A 58-byte 32-bit bitmap whose descriptor claims `width` x `height` pixels."""
    data = bytearray(build_bitmap([[(0, 0, 0, 0)]], bits_per_pixel=32))
    struct.pack_into("<ii", data, 18, width, height)
    return bytes(data)
