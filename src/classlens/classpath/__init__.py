"""Classpath entries, class-file header reading and class resolution."""

from .entries import (
    ArchiveEntry,
    ClassLocation,
    ClasspathEntry,
    DirectoryEntry,
    EntryKind,
    FileKind,
    ModuleEntry,
)
from .resolver import ClasspathConfig, infer_root_directory

__all__ = [
    "ArchiveEntry",
    "ClassLocation",
    "ClasspathEntry",
    "DirectoryEntry",
    "EntryKind",
    "FileKind",
    "ModuleEntry",
    "ClasspathConfig",
    "infer_root_directory",
]
