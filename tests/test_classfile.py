"""Tests for the class-file header reader."""

from __future__ import annotations

import struct
from pathlib import Path

import pytest

from classlens.classpath.classfile import parse_class_name, read_class_name
from classlens.errors import ErrorCode, InvalidClassFileError
from tests.helpers import class_bytes, write_class


def test_parse_class_name_reads_this_class() -> None:
    assert parse_class_name(class_bytes("com/example/Foo")) == "com/example/Foo"


def test_read_class_name_from_disk(tmp_path: Path) -> None:
    path = write_class(tmp_path, "org/demo/Widget")

    assert read_class_name(path) == "org/demo/Widget"


def test_bad_magic_is_rejected() -> None:
    data = bytearray(class_bytes("Foo"))
    data[0:4] = b"\x00\x00\x00\x00"

    with pytest.raises(InvalidClassFileError) as info:
        parse_class_name(bytes(data))

    assert info.value.error_code == ErrorCode.INVALID_CLASS_FILE
    assert info.value.details["magic"] == "0x00000000"


@pytest.mark.parametrize("size", [0, 6, 20])
def test_truncated_data_is_rejected(size: int) -> None:
    with pytest.raises(InvalidClassFileError):
        parse_class_name(class_bytes("com/example/Foo")[:size])


def test_unknown_constant_tag_is_rejected() -> None:
    data = struct.pack(">IHHH", 0xCAFEBABE, 0, 52, 2) + b"\x63"

    with pytest.raises(InvalidClassFileError, match="Unknown constant pool tag"):
        parse_class_name(data)


def test_this_class_must_point_at_class_constant() -> None:
    name = b"Foo"
    data = (
        struct.pack(">IHHH", 0xCAFEBABE, 0, 52, 2)
        + b"\x01"
        + struct.pack(">H", len(name))
        + name
        + struct.pack(">HHHHHHH", 0x21, 1, 0, 0, 0, 0, 0)
    )

    with pytest.raises(InvalidClassFileError):
        parse_class_name(data)
