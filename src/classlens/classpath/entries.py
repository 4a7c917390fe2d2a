"""Classpath entry model and class-location helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import ClassVar, Union

__all__ = [
    "EntryKind",
    "FileKind",
    "DirectoryEntry",
    "ArchiveEntry",
    "ModuleEntry",
    "ClasspathEntry",
    "ClassLocation",
    "CLASS_SUFFIX",
    "ARCHIVE_SEPARATOR",
    "WORKSPACE_SUFFIX",
    "normalize_path",
    "normalize_class_name",
    "split_module_name",
]

CLASS_SUFFIX = ".class"
ARCHIVE_SEPARATOR = "!"
WORKSPACE_SUFFIX = ".clw"
_ARCHIVE_SUFFIXES = frozenset({".jar", ".zip"})


def normalize_path(path: Path | str) -> str:
    """Return the comparison form of ``path``: user-expanded, absolute, normalized."""

    expanded = os.path.expanduser(os.fspath(path))
    return os.path.normpath(os.path.abspath(expanded))


def normalize_class_name(name: str) -> str:
    """Return ``name`` as an internal (``/``-separated) name without ``.class``."""

    cleaned = name.strip()
    if cleaned.endswith(CLASS_SUFFIX):
        cleaned = cleaned[: -len(CLASS_SUFFIX)]
    if "/" not in cleaned:
        cleaned = cleaned.replace(".", "/")
    return cleaned.strip("/")


def split_module_name(name: str) -> tuple[str | None, str]:
    """Split a module-path selection ``"<module>/<pkg>/<Class>"``.

    Returns the module name (or ``None`` when the name has a single segment)
    and the remaining internal class name.
    """

    normalized = normalize_class_name(name)
    module, sep, rest = normalized.partition("/")
    if not sep:
        return None, normalized
    return module, rest


class EntryKind(str, Enum):
    """Tag of a classpath entry as it appears in workspace documents."""

    DIRECTORY = "directory"
    ARCHIVE = "archive"
    MODULE = "module"


class FileKind(Enum):
    """What an opened file is, decided once from its name."""

    CLASS = "class"
    ARCHIVE = "archive"
    WORKSPACE = "workspace"
    UNKNOWN = "unknown"

    @classmethod
    def detect(cls, path: Path | str) -> "FileKind":
        suffix = Path(path).suffix.lower()
        if suffix == CLASS_SUFFIX:
            return cls.CLASS
        if suffix in _ARCHIVE_SUFFIXES:
            return cls.ARCHIVE
        if suffix == WORKSPACE_SUFFIX:
            return cls.WORKSPACE
        return cls.UNKNOWN


@dataclass(slots=True, frozen=True)
class DirectoryEntry:
    """A directory root holding class files laid out by package."""

    path: str
    kind: ClassVar[EntryKind] = EntryKind.DIRECTORY

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", normalize_path(self.path))

    @property
    def key(self) -> str:
        return self.path

    def class_file(self, class_name: str) -> Path:
        *packages, simple_name = class_name.split("/")
        return Path(self.path, *packages, f"{simple_name}{CLASS_SUFFIX}")


@dataclass(slots=True, frozen=True)
class ArchiveEntry:
    """A jar or zip archive holding class files laid out by package."""

    path: str
    kind: ClassVar[EntryKind] = EntryKind.ARCHIVE

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", normalize_path(self.path))

    @property
    def key(self) -> str:
        return self.path

    def member_name(self, class_name: str) -> str:
        return f"{class_name}{CLASS_SUFFIX}"


@dataclass(slots=True, frozen=True)
class ModuleEntry:
    """A named module searched beneath the configured modules root."""

    module_name: str
    kind: ClassVar[EntryKind] = EntryKind.MODULE

    def __post_init__(self) -> None:
        object.__setattr__(self, "module_name", self.module_name.strip())

    @property
    def key(self) -> str:
        return self.module_name


ClasspathEntry = Union[DirectoryEntry, ArchiveEntry, ModuleEntry]


@dataclass(slots=True, frozen=True)
class ClassLocation:
    """Where the bytes of a class live.

    ``file_name`` is a plain file path for loose class files and
    ``"<archivePath>!<className>.class"`` for archive members.
    """

    file_name: str
    module_name: str | None = None

    @classmethod
    def for_archive(
        cls, archive_path: Path | str, class_name: str, module_name: str | None = None
    ) -> "ClassLocation":
        member = f"{normalize_class_name(class_name)}{CLASS_SUFFIX}"
        return cls(f"{os.fspath(archive_path)}{ARCHIVE_SEPARATOR}{member}", module_name)

    @property
    def in_archive(self) -> bool:
        return ARCHIVE_SEPARATOR in self.file_name

    @property
    def archive_path(self) -> str | None:
        if not self.in_archive:
            return None
        return self.file_name.split(ARCHIVE_SEPARATOR, 1)[0]

    @property
    def entry_name(self) -> str:
        """Archive member name, or the plain file path for loose classes."""

        if not self.in_archive:
            return self.file_name
        return self.file_name.split(ARCHIVE_SEPARATOR, 1)[1]

    @property
    def display_name(self) -> str:
        name = self.entry_name
        if self.in_archive:
            name = name[: -len(CLASS_SUFFIX)] if name.endswith(CLASS_SUFFIX) else name
            return name.replace("/", ".")
        return Path(name).name
