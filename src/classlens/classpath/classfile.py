"""Minimal class-file header reader.

Only the constant pool and ``this_class`` index are decoded; that is all the
viewer core needs to infer a classpath root from an opened file.
"""

from __future__ import annotations

import struct
from pathlib import Path

from ..errors import InvalidClassFileError

__all__ = ["CLASS_MAGIC", "read_class_name", "parse_class_name"]

CLASS_MAGIC = 0xCAFEBABE

_TAG_UTF8 = 1
_TAG_CLASS = 7
# Payload sizes of fixed-width constant pool entries, keyed by tag.
_FIXED_SIZES = {
    3: 4,  # Integer
    4: 4,  # Float
    5: 8,  # Long
    6: 8,  # Double
    7: 2,  # Class
    8: 2,  # String
    9: 4,  # Fieldref
    10: 4,  # Methodref
    11: 4,  # InterfaceMethodref
    12: 4,  # NameAndType
    15: 3,  # MethodHandle
    16: 2,  # MethodType
    17: 4,  # Dynamic
    18: 4,  # InvokeDynamic
    19: 2,  # Module
    20: 2,  # Package
}
_WIDE_TAGS = frozenset({5, 6})


def read_class_name(path: Path | str) -> str:
    """Return the internal name (``com/foo/Bar``) of the class stored at ``path``."""

    target = Path(path)
    with target.open("rb") as handle:
        data = handle.read()
    return parse_class_name(data)


def parse_class_name(data: bytes) -> str:
    """Return the internal name of the class encoded in ``data``."""

    try:
        magic, _minor, _major, pool_count = struct.unpack_from(">IHHH", data, 0)
    except struct.error as exc:
        raise InvalidClassFileError(message="Truncated class file header") from exc
    if magic != CLASS_MAGIC:
        raise InvalidClassFileError(
            message="Bad class file magic", details={"magic": f"{magic:#010x}"}
        )

    utf8: dict[int, str] = {}
    class_refs: dict[int, int] = {}
    offset = 10
    index = 1
    try:
        while index < pool_count:
            tag = data[offset]
            offset += 1
            if tag == _TAG_UTF8:
                (length,) = struct.unpack_from(">H", data, offset)
                offset += 2
                raw = data[offset : offset + length]
                if len(raw) != length:
                    raise InvalidClassFileError(message="Truncated constant pool")
                # Modified UTF-8 only differs from UTF-8 for NUL and supplementary characters.
                utf8[index] = raw.decode("utf-8", errors="replace")
                offset += length
            elif tag in _FIXED_SIZES:
                if tag == _TAG_CLASS:
                    (class_refs[index],) = struct.unpack_from(">H", data, offset)
                offset += _FIXED_SIZES[tag]
            else:
                raise InvalidClassFileError(
                    message="Unknown constant pool tag", details={"tag": tag, "index": index}
                )
            index += 2 if tag in _WIDE_TAGS else 1
        _access_flags, this_class = struct.unpack_from(">HH", data, offset)
    except (IndexError, struct.error) as exc:
        raise InvalidClassFileError(message="Truncated constant pool") from exc

    name_index = class_refs.get(this_class)
    if name_index is None or name_index not in utf8:
        raise InvalidClassFileError(
            message="this_class does not reference a class constant",
            details={"this_class": this_class},
        )
    return utf8[name_index]
