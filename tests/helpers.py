"""Shared test helpers for building class files, trees and archives.

Import from here instead of hand-assembling bytes in individual test files.
"""

from __future__ import annotations

import struct
import zipfile
from pathlib import Path
from typing import Iterable


def class_bytes(internal_name: str, *, major: int = 52) -> bytes:
    """Return a minimal class file whose ``this_class`` is ``internal_name``.

    The constant pool holds a Long (to exercise the two-slot rule), the Utf8
    name and the Class constant pointing at it.
    """

    name = internal_name.encode("utf-8")
    pool = b"".join(
        [
            b"\x05" + struct.pack(">q", 42),  # 1-2 Long
            b"\x01" + struct.pack(">H", len(name)) + name,  # 3 Utf8
            b"\x07" + struct.pack(">H", 3),  # 4 Class
        ]
    )
    header = struct.pack(">IHHH", 0xCAFEBABE, 0, major, 5)
    tail = struct.pack(">HHHHHHH", 0x0021, 4, 0, 0, 0, 0, 0)
    return header + pool + tail


def write_class(root: Path, internal_name: str) -> Path:
    """Write ``internal_name`` beneath ``root`` laid out by package."""

    *packages, simple = internal_name.split("/")
    target = root.joinpath(*packages, f"{simple}.class")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(class_bytes(internal_name))
    return target


def write_archive(path: Path, internal_names: Iterable[str], *, prefix: str = "") -> Path:
    """Write a zip archive holding one class member per name."""

    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as archive:
        for name in internal_names:
            archive.writestr(f"{prefix}{name}.class", class_bytes(name))
    return path
