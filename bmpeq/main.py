"""Точка входа командной строки: bmpeq <input.bmp> <output.bmp>."""
from __future__ import annotations

import argparse
import logging
import sys
from importlib.metadata import PackageNotFoundError, version as _pkg_version
from typing import List, NoReturn, Optional

from bmpeq.controllers.pipeline_controller import PipelineController
from bmpeq.models.errors import BitmapError
from bmpeq.models.pipeline_config import PipelineConfig

logger = logging.getLogger("bmpeq")

EXIT_OK = 0
EXIT_FAILURE = 1
LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"

try:
    __version__ = _pkg_version("bmpeq")
except PackageNotFoundError:
    __version__ = "0+unknown"


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        # любая ошибка, включая ошибки использования, даёт код 1
        self.print_usage(sys.stderr)
        self.exit(EXIT_FAILURE, f"{self.prog}: error: {message}\n")


def get_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = _ArgumentParser(
        prog="bmpeq",
        description="Convert a 24/32-bit BMP to grayscale and equalize its histogram.",
    )
    p.add_argument("input", help="Path to the input bitmap")
    p.add_argument("output", help="Path of the bitmap to write")
    p.add_argument("--grayscale-only", action="store_true",
                   help="Skip histogram equalization, write the grayscale image")
    verbosity = p.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Log every stage")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p.parse_args(argv)


def build_config(args: argparse.Namespace) -> PipelineConfig:
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    return PipelineConfig(equalize=not args.grayscale_only, log_level=level)


def main(argv: Optional[List[str]] = None) -> int:
    """Разбирает аргументы, запускает конвейер, ошибки отображает в код 1."""
    args = get_args(argv)
    config = build_config(args)
    logging.basicConfig(level=config.log_level, format=LOG_FORMAT, stream=sys.stderr)

    try:
        PipelineController(config=config).run(args.input, args.output)
    except BitmapError as exc:
        logger.error("%s: %s", exc.kind, exc)
        return EXIT_FAILURE
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
