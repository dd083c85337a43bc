"""Загрузка bitmap-файлов с диска и сохранение обратно.

Принципы:
- SRP: класс только переносит изображения между диском и `BitmapImage`;
  разбор заголовков и обработка живут в своих модулях.
- Выходной путь не трогается, пока весь файл не записан во временный соседний
  файл; затем он атомарно переименовывается поверх цели.
"""
from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import replace
from pathlib import Path
from typing import Optional

from bmpeq.models.bitmap_model import DESCRIPTOR_SIZE, HEADERS_SIZE, BitmapImage
from bmpeq.models.errors import BitmapError, CannotOpenError, ReadFailedError, WriteFailedError
from bmpeq.services.header_codec import decode_headers
from bmpeq.services.pixel_io import load_pixels, write_pixels

logger = logging.getLogger(__name__)

# umask читается один раз при импорте: os.umask умеет только заменять значение.
_UMASK = os.umask(0o022)
os.umask(_UMASK)
OUTPUT_FILE_MODE = 0o666 & ~_UMASK


class ImageService:
    def load_bitmap(self, file_path: str | Path) -> BitmapImage:
        """Читает bitmap с диска: заголовки и буфер строк развёртки.

        Args:
            file_path: Путь до bitmap-файла.

        Returns:
            `BitmapImage` с разобранными заголовками, пиксельным буфером и размером файла.

        Raises:
            CannotOpenError: путь не существует, не является файлом или не открывается.
            ReadFailedError: ошибка чтения открытого файла.
            FormatError: заголовки или пиксельные данные повреждены (см. `decode_headers`).
        """
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise CannotOpenError("File not found", path=path)

        try:
            handle = path.open("rb")
        except OSError as exc:
            raise CannotOpenError(f"Cannot open file: {exc.strerror or exc}", path=path) from exc

        with handle:
            try:
                head = handle.read(HEADERS_SIZE)
            except OSError as exc:
                raise ReadFailedError(f"Cannot read headers: {exc.strerror or exc}", path=path) from exc
            try:
                file_header, descriptor = decode_headers(head)
                pixels = load_pixels(handle, file_header.pixel_offset, descriptor.stride, descriptor.height)
            except BitmapError as exc:
                exc.with_path(path)
                raise

        try:
            size_bytes: Optional[int] = path.stat().st_size
        except OSError:
            size_bytes = None

        logger.debug(
            "Loaded %s: %dx%d, %d bpp, %s",
            path, descriptor.width, descriptor.abs_height, descriptor.bits_per_pixel,
            "top-down" if descriptor.top_down else "bottom-up",
        )
        return BitmapImage(
            path=path,
            file_header=file_header,
            descriptor=descriptor,
            pixels=pixels,
            size_bytes=size_bytes,
        )

    def save_bitmap(self, file_path: str | Path, image: BitmapImage) -> int:
        """Атомарно записывает `image` в `file_path`.

        Размер данных и размер файла пересчитываются по буферу, описатель
        пишется как 40-байтный BITMAPINFOHEADER. Остальные поля, включая
        объявленное смещение пикселей, переносятся без изменений.

        Returns:
            Число записанных байт.

        Raises:
            CannotOpenError: рядом с `file_path` нельзя создать временный файл.
            WriteFailedError: запись или переименование не удались; `file_path` не тронут.
        """
        path = Path(file_path)
        descriptor = replace(
            image.descriptor,
            header_size=DESCRIPTOR_SIZE,
            image_size=image.descriptor.stride * image.descriptor.abs_height,
        )
        file_header = replace(
            image.file_header,
            file_size=image.file_header.pixel_offset + descriptor.image_size,
        )

        directory = path.parent if str(path.parent) else Path(".")
        try:
            handle = tempfile.NamedTemporaryFile(
                mode="wb", dir=directory, prefix=f".{path.name}.", suffix=".tmp", delete=False,
            )
        except OSError as exc:
            raise CannotOpenError(f"Cannot create output file: {exc.strerror or exc}", path=path) from exc

        tmp_path = Path(handle.name)
        try:
            try:
                with handle:
                    write_pixels(handle, file_header, descriptor, image.pixels)
                os.chmod(tmp_path, OUTPUT_FILE_MODE)
                os.replace(tmp_path, path)
            except OSError as exc:
                raise WriteFailedError(f"Cannot write output file: {exc.strerror or exc}", path=path) from exc
            except BitmapError as exc:
                exc.with_path(path)
                raise
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

        logger.debug("Saved %s (%d bytes)", path, file_header.file_size)
        return file_header.file_size
