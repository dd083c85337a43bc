"""Виды ошибок кодека и конвейера.

Любая ошибка завершает текущий запуск. Контекст (путь к файлу, имя поля,
ожидаемое и фактическое значение) передаётся в исключении, чтобы CLI мог
напечатать диагностику без разбора бинарного файла.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Optional


class BitmapError(Exception):
    """Базовый класс всех ошибок конвейера."""

    kind = "error"

    def __init__(
        self,
        message: str,
        *,
        path: Optional[Path] = None,
        field: Optional[str] = None,
        expected: Any = None,
        observed: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.field = field
        self.expected = expected
        self.observed = observed

    def with_path(self, path: Path) -> "BitmapError":
        """Прикрепляет путь к файлу, когда вызывающий его знает."""
        if self.path is None:
            self.path = path
        return self

    def __str__(self) -> str:
        parts = [self.message]
        if self.field is not None:
            parts.append(f"field={self.field}")
        if self.expected is not None:
            parts.append(f"expected={self.expected!r}")
        if self.observed is not None:
            parts.append(f"observed={self.observed!r}")
        text = ", ".join(parts)
        if self.path is not None:
            text = f"{self.path}: {text}"
        return text


# ---------- Ошибки формата ----------
class FormatError(BitmapError, ValueError):
    kind = "format"


class BadSignatureError(FormatError):
    kind = "bad-signature"


class TruncatedError(FormatError):
    kind = "truncated"


class UnsupportedDepthError(FormatError):
    kind = "unsupported-depth"


class UnsupportedCompressionError(FormatError):
    kind = "unsupported-compression"


class InvalidHeaderError(FormatError):
    """Поле заголовка содержит недопустимое значение."""

    kind = "invalid-header"


# ---------- Ошибки ввода-вывода ----------
class BitmapIOError(BitmapError):
    kind = "io"


class CannotOpenError(BitmapIOError):
    kind = "cannot-open"


class ReadFailedError(BitmapIOError):
    kind = "read-failed"


class WriteFailedError(BitmapIOError):
    kind = "write-failed"
