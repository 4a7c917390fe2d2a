"""Tests covering the utilities modules."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from classlens.utils import file_io, logging as logging_utils


def test_read_text_detects_bom(tmp_path: Path) -> None:
    target = tmp_path / "utf16.clw"
    target.write_bytes("{\"a\": 1}".encode("utf-16"))

    assert file_io.read_text(target) == "{\"a\": 1}"


def test_read_text_strips_utf8_bom(tmp_path: Path) -> None:
    target = tmp_path / "utf8.clw"
    target.write_bytes(b"\xef\xbb\xbfhello")

    assert file_io.read_text(target) == "hello"


def test_write_text_creates_parents_atomically(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "dir" / "output.clw"

    returned = file_io.write_text(target, "Line1\nLine2")

    assert returned == target
    assert target.read_bytes() == b"Line1\nLine2"
    assert [p.name for p in target.parent.iterdir()] == ["output.clw"]


def test_write_text_non_atomic(tmp_path: Path) -> None:
    target = tmp_path / "plain.clw"

    file_io.write_text(target, "body", atomic=False)

    assert target.read_text(encoding="utf-8") == "body"


def test_setup_logging_writes_to_log_dir(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    log_dir = tmp_path / "custom-logs"
    monkeypatch.setenv("CLASSLENS_LOG_DIR", str(log_dir))

    returned = logging_utils.setup_logging(debug=True, console=False)
    logging.getLogger("classlens.tests").debug("hello from tests")
    for handler in logging.getLogger().handlers:
        handler.flush()

    log_path = logging_utils.get_log_path()
    assert log_path == returned == log_dir / logging_utils.LOG_FILE_NAME
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("jsonschema").level == logging.WARNING
    assert "hello from tests" in log_path.read_text(encoding="utf-8")
