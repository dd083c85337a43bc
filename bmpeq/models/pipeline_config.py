"""Настройки конвейера."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class PipelineConfig:
    """Настраиваемые параметры одного запуска.

    Fields:
        luma_weights: Веса (red, green, blue) в тысячных. По умолчанию ITU-R BT.601;
            в сумме 1000, чтобы белый оставался белым.
        equalize: Выполнять эквализацию гистограммы после перевода в серый.
        log_level: Уровень, который CLI передаёт в `logging.basicConfig`.
    """
    luma_weights: Tuple[int, int, int] = (299, 587, 114)
    equalize: bool = True
    log_level: int = logging.INFO

    def __post_init__(self) -> None:
        if len(self.luma_weights) != 3 or any(w < 0 for w in self.luma_weights):
            raise ValueError(f"luma_weights must be three non-negative ints: {self.luma_weights}")
        if sum(self.luma_weights) != 1000:
            raise ValueError(f"luma_weights must sum to 1000: {self.luma_weights}")
