"""Tests for classpath entry models and class-location helpers."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from classlens.classpath.entries import (
    ArchiveEntry,
    ClassLocation,
    DirectoryEntry,
    EntryKind,
    FileKind,
    ModuleEntry,
    normalize_class_name,
    normalize_path,
    split_module_name,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("com.example.Foo", "com/example/Foo"),
        ("com/example/Foo", "com/example/Foo"),
        ("com/example/Foo.class", "com/example/Foo"),
        ("  Foo  ", "Foo"),
        ("/com/example/Foo/", "com/example/Foo"),
    ],
)
def test_normalize_class_name(raw: str, expected: str) -> None:
    assert normalize_class_name(raw) == expected


def test_split_module_name_takes_first_segment() -> None:
    assert split_module_name("java.base/java/lang/String") == ("java.base", "java/lang/String")
    assert split_module_name("String") == (None, "String")


def test_directory_entries_normalize_paths(tmp_path: Path) -> None:
    messy = os.path.join(str(tmp_path), "a", "..", "classes")

    entry = DirectoryEntry(messy)

    assert entry.path == normalize_path(tmp_path / "classes")
    assert entry == DirectoryEntry(str(tmp_path / "classes"))
    assert entry.kind is EntryKind.DIRECTORY


def test_directory_entry_class_file_follows_packages(tmp_path: Path) -> None:
    entry = DirectoryEntry(str(tmp_path))

    assert entry.class_file("com/example/Foo") == tmp_path / "com" / "example" / "Foo.class"


def test_entries_of_different_kinds_are_distinct(tmp_path: Path) -> None:
    directory = DirectoryEntry(str(tmp_path / "x"))
    archive = ArchiveEntry(str(tmp_path / "x"))

    assert directory.key == archive.key
    assert directory != archive
    assert ModuleEntry(" java.base ").key == "java.base"


@pytest.mark.parametrize(
    ("name", "kind"),
    [
        ("Foo.class", FileKind.CLASS),
        ("lib.JAR", FileKind.ARCHIVE),
        ("lib.zip", FileKind.ARCHIVE),
        ("project.clw", FileKind.WORKSPACE),
        ("notes.txt", FileKind.UNKNOWN),
    ],
)
def test_file_kind_detection(name: str, kind: FileKind) -> None:
    assert FileKind.detect(name) is kind


def test_class_location_for_archive_member() -> None:
    location = ClassLocation.for_archive("/libs/a.jar", "com.example.Foo")

    assert location.file_name == "/libs/a.jar!com/example/Foo.class"
    assert location.in_archive
    assert location.archive_path == "/libs/a.jar"
    assert location.entry_name == "com/example/Foo.class"
    assert location.display_name == "com.example.Foo"


def test_class_location_for_loose_file() -> None:
    location = ClassLocation("/work/classes/com/example/Foo.class", "app")

    assert not location.in_archive
    assert location.archive_path is None
    assert location.display_name == "Foo.class"
    assert location.module_name == "app"
