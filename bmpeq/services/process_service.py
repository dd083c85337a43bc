"""Перевод в оттенки серого и эквализация гистограммы над буфером строк.

Принципы:
- Обе стадии меняют буфер на месте и возвращают его.
- Затрагиваются только первые `width * bytes_per_pixel` байт строки;
  выравнивание и альфа-канал остаются как есть.
"""
from __future__ import annotations

import logging
from typing import Tuple

import numpy as np

from bmpeq.models.bitmap_model import ImageDescriptor

logger = logging.getLogger(__name__)

LEVELS = 256
BLUE, GREEN, RED = 0, 1, 2


class ProcessService:
    # ---------- Вспомогательные ----------
    def _pixels(self, buffer: np.ndarray, descriptor: ImageDescriptor) -> np.ndarray:
        """
        Возвращает байты пикселей формы (rows, width, channels) без выравнивания.
        """
        rows = buffer[:, : descriptor.row_bytes]
        return rows.reshape(descriptor.abs_height, descriptor.width, descriptor.bytes_per_pixel)

    def _store_gray(self, buffer: np.ndarray, descriptor: ImageDescriptor, gray: np.ndarray) -> None:
        """
        Записывает одно значение серого в B, G и R каждого пикселя.
        """
        pixels = self._pixels(buffer, descriptor)
        pixels[..., BLUE:RED + 1] = gray.astype(np.uint8)[..., np.newaxis]
        # reshape среза с шагом может вернуть копию, строки пишутся обратно
        buffer[:, : descriptor.row_bytes] = pixels.reshape(descriptor.abs_height, descriptor.row_bytes)

    # ---------- Оттенки серого ----------
    def to_grayscale(
        self,
        buffer: np.ndarray,
        descriptor: ImageDescriptor,
        luma_weights: Tuple[int, int, int] = (299, 587, 114),
    ) -> np.ndarray:
        """
        gray = trunc(0.299 R + 0.587 G + 0.114 B) в тысячных долях, поэтому
        отбрасывание дробной части точное: белый остаётся 255, чёрный 0.
        """
        w_red, w_green, w_blue = luma_weights
        px = self._pixels(buffer, descriptor).astype(np.uint32)
        gray = (w_red * px[..., RED] + w_green * px[..., GREEN] + w_blue * px[..., BLUE]) // 1000
        self._store_gray(buffer, descriptor, np.minimum(gray, 255))
        logger.debug("Converted %dx%d pixels to grayscale", descriptor.width, descriptor.abs_height)
        return buffer

    # ---------- Эквализация гистограммы ----------
    def build_histogram(self, buffer: np.ndarray, descriptor: ImageDescriptor) -> np.ndarray:
        """
        Число пикселей каждого уровня серого (по красному каналу).
        """
        red = self._pixels(buffer, descriptor)[..., RED]
        return np.bincount(red.ravel(), minlength=LEVELS).astype(np.int64)

    def build_cdf(self, histogram: np.ndarray) -> np.ndarray:
        return np.cumsum(histogram, dtype=np.int64)

    def equalization_table(self, cdf: np.ndarray, total_pixels: int) -> np.ndarray:
        """
        table[i] = round(cdf[i] / total * 255), половины округляются вверх.

        Считается как (510 cdf + total) // (2 total), без плавающей точки;
        таблица не убывает, так как не убывает cdf.
        """
        if total_pixels <= 0:
            raise ValueError(f"total_pixels must be positive: {total_pixels}")
        cdf = np.asarray(cdf, dtype=np.int64)
        table = (cdf * 510 + total_pixels) // (2 * total_pixels)
        return np.clip(table, 0, 255).astype(np.uint8)

    def apply_table(self, buffer: np.ndarray, descriptor: ImageDescriptor, table: np.ndarray) -> np.ndarray:
        red = self._pixels(buffer, descriptor)[..., RED]
        self._store_gray(buffer, descriptor, table[red])
        return buffer

    def equalize(self, buffer: np.ndarray, descriptor: ImageDescriptor) -> Tuple[np.ndarray, np.ndarray]:
        """
        Эквализация гистограммы буфера, уже переведённого в серый.
        Возвращает буфер и применённую таблицу.
        """
        histogram = self.build_histogram(buffer, descriptor)
        cdf = self.build_cdf(histogram)
        table = self.equalization_table(cdf, descriptor.pixel_count)
        self.apply_table(buffer, descriptor, table)
        logger.debug(
            "Equalized %d pixels over %d occupied levels",
            descriptor.pixel_count,
            int(np.count_nonzero(histogram)),
        )
        return buffer, table
