"""Контроллер конвейера: порядок вызова сервисов для одного файла.

Принципы:
- SRP: класс только упорядочивает стадии и сообщает результат; разбор,
  преобразования и работа с диском живут в сервисах.
- Ошибки пробрасываются без изменений. Ничего не пишется, пока все стадии
  до сохранения не завершились успешно.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path

import numpy as np

from bmpeq.models.bitmap_model import ImageDescriptor
from bmpeq.models.pipeline_config import PipelineConfig
from bmpeq.services.image_service import ImageService
from bmpeq.services.process_service import ProcessService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    """Итог завершённого запуска."""
    input_path: Path
    output_path: Path
    width: int
    height: int
    bits_per_pixel: int
    top_down: bool
    equalized: bool
    levels_before: int
    levels_after: int
    bytes_written: int


@dataclass
class PipelineController:
    """Выполняет load -> grayscale -> equalize -> save.

    Буфер строк создаётся стадией загрузки и передаётся от стадии к стадии;
    между запусками ссылка на него не хранится.
    """
    config: PipelineConfig = field(default_factory=PipelineConfig)
    _image_service: ImageService = field(default_factory=ImageService)
    _process_service: ProcessService = field(default_factory=ProcessService)

    def run(self, input_path: str | Path, output_path: str | Path) -> PipelineResult:
        input_path, output_path = Path(input_path), Path(output_path)
        logger.debug("Loading %s", input_path)
        image = self._image_service.load_bitmap(input_path)
        descriptor = image.descriptor

        pixels = self._process_service.to_grayscale(
            image.pixels, descriptor, luma_weights=self.config.luma_weights
        )
        levels_before = self._occupied_levels(pixels, descriptor)

        if self.config.equalize:
            pixels, _table = self._process_service.equalize(pixels, descriptor)
        levels_after = self._occupied_levels(pixels, descriptor)

        logger.debug("Writing %s", output_path)
        written = self._image_service.save_bitmap(output_path, replace(image, pixels=pixels))

        result = PipelineResult(
            input_path=input_path,
            output_path=output_path,
            width=descriptor.width,
            height=descriptor.abs_height,
            bits_per_pixel=descriptor.bits_per_pixel,
            top_down=descriptor.top_down,
            equalized=self.config.equalize,
            levels_before=levels_before,
            levels_after=levels_after,
            bytes_written=written,
        )
        logger.info(
            "%s %s -> %s (%dx%d, %d-bit, %d -> %d gray levels)",
            "Histogram equalization applied:" if result.equalized else "Grayscale written:",
            input_path, output_path, result.width, result.height,
            result.bits_per_pixel, levels_before, levels_after,
        )
        return result

    # ---- Вспомогательные ----
    def _occupied_levels(self, pixels: np.ndarray, descriptor: ImageDescriptor) -> int:
        histogram = self._process_service.build_histogram(pixels, descriptor)
        return int(np.count_nonzero(histogram))
