from __future__ import annotations

import logging

import pytest

from bmpeq.main import EXIT_FAILURE, EXIT_OK, build_config, get_args, main
from conftest import WHITE, build_bitmap, oversized_bitmap


def test_success(write_bitmap, tmp_path, checker_rows):
    out = tmp_path / "out.bmp"

    assert main([str(write_bitmap(checker_rows)), str(out)]) == EXIT_OK
    assert out.exists()


def test_missing_arguments_exit_with_one(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert excinfo.value.code == EXIT_FAILURE
    assert "usage" in capsys.readouterr().err


def test_missing_input(tmp_path, caplog):
    out = tmp_path / "out.bmp"

    with caplog.at_level(logging.ERROR, logger="bmpeq"):
        assert main([str(tmp_path / "nope.bmp"), str(out)]) == EXIT_FAILURE

    assert "cannot-open" in caplog.text
    assert "nope.bmp" in caplog.text
    assert not out.exists()


def test_malformed_header(tmp_path, caplog):
    src = tmp_path / "in.bmp"
    src.write_bytes(b"\x00\x00" + build_bitmap([[WHITE]])[2:])
    out = tmp_path / "out.bmp"

    with caplog.at_level(logging.ERROR, logger="bmpeq"):
        assert main([str(src), str(out)]) == EXIT_FAILURE

    assert "bad-signature" in caplog.text
    assert not out.exists()


@pytest.mark.parametrize(
    "width, height",
    [
        (2147483647, 2147483647),
        (2147483647, -2147483648),
        (100000, 100000),
    ],
)
def test_huge_dimensions_fail_cleanly(tmp_path, caplog, width, height):
    src = tmp_path / "in.bmp"
    src.write_bytes(oversized_bitmap(width, height))
    out = tmp_path / "out.bmp"

    with caplog.at_level(logging.ERROR, logger="bmpeq"):
        assert main([str(src), str(out)]) == EXIT_FAILURE

    assert "truncated" in caplog.text
    assert not out.exists()


def test_unsupported_depth(write_bitmap, tmp_path, caplog):
    out = tmp_path / "out.bmp"

    with caplog.at_level(logging.ERROR, logger="bmpeq"):
        code = main([str(write_bitmap([[WHITE]], bits_per_pixel=16)), str(out)])

    assert code == EXIT_FAILURE
    assert "unsupported-depth" in caplog.text
    assert "observed=16" in caplog.text


def test_unwritable_output(write_bitmap, tmp_path, caplog, checker_rows):
    out = tmp_path / "missing-dir" / "out.bmp"

    with caplog.at_level(logging.ERROR, logger="bmpeq"):
        assert main([str(write_bitmap(checker_rows)), str(out)]) == EXIT_FAILURE
    assert "cannot-open" in caplog.text


@pytest.mark.parametrize(
    "flags, level, equalize",
    [
        ([], logging.INFO, True),
        (["-v"], logging.DEBUG, True),
        (["--quiet"], logging.WARNING, True),
        (["--grayscale-only"], logging.INFO, False),
    ],
)
def test_build_config(flags, level, equalize):
    config = build_config(get_args(["in.bmp", "out.bmp", *flags]))

    assert config.log_level == level
    assert config.equalize is equalize


def test_verbose_and_quiet_are_exclusive():
    with pytest.raises(SystemExit) as excinfo:
        get_args(["in.bmp", "out.bmp", "-v", "-q"])
    assert excinfo.value.code == EXIT_FAILURE
