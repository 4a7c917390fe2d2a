"""Classpath configuration and class resolution."""

from __future__ import annotations

import logging
import os
import zipfile
from pathlib import Path
from typing import Callable, Iterable, Iterator, Sequence

from ..errors import InvalidClassFileError
from .classfile import parse_class_name
from .entries import (
    ArchiveEntry,
    CLASS_SUFFIX,
    ClassLocation,
    ClasspathEntry,
    DirectoryEntry,
    EntryKind,
    ModuleEntry,
    normalize_class_name,
    split_module_name,
)

__all__ = [
    "ClasspathConfig",
    "ClasspathListener",
    "infer_root_directory",
    "read_class_bytes",
    "class_output_path",
]

LOGGER = logging.getLogger(__name__)

ClasspathListener = Callable[[tuple[ClasspathEntry, ...]], None]

_JMOD_DIRECTORY = "jmods"
_JMOD_SUFFIX = ".jmod"
_JMOD_CLASSES_PREFIX = "classes/"


def infer_root_directory(opened_file: Path | str, qualified_class_name: str) -> Path | None:
    """Return the classpath root implied by ``opened_file`` and its class name.

    Each ancestor directory of ``opened_file`` must carry the name of the
    corresponding package segment, innermost first. Any mismatch means the
    file does not sit in a package-shaped tree and ``None`` is returned.
    """

    segments = normalize_class_name(qualified_class_name).split("/")
    current = Path(opened_file).parent
    for segment in reversed(segments[:-1]):
        if current.name != segment:
            return None
        current = current.parent
    return current


def read_class_bytes(location: ClassLocation) -> bytes:
    """Return the bytes stored at ``location``, loose file or archive member."""

    if not location.in_archive:
        return Path(location.file_name).read_bytes()
    try:
        with zipfile.ZipFile(location.archive_path) as archive:
            return archive.read(location.entry_name)
    except (KeyError, zipfile.BadZipFile) as exc:
        raise OSError(f"Cannot read {location.file_name}: {exc}") from exc


def class_output_path(location: ClassLocation, data: bytes) -> str:
    """Return the package-relative path (``com/foo/Bar.class``) for saving ``data``.

    Archive members keep their member name minus the jmod ``classes/`` prefix.
    Loose files are placed by the class name in their header, or by their
    file name when the header cannot be read.
    """

    if location.in_archive:
        member = location.entry_name
        if location.module_name is not None and member.startswith(_JMOD_CLASSES_PREFIX):
            member = member[len(_JMOD_CLASSES_PREFIX) :]
        return member
    try:
        return f"{parse_class_name(data)}{CLASS_SUFFIX}"
    except InvalidClassFileError:
        return Path(location.file_name).name


class ClasspathConfig:
    """Ordered, de-duplicated set of classpath entries with class lookup."""

    def __init__(
        self,
        entries: Iterable[ClasspathEntry] = (),
        *,
        modules_root: Path | str | None = None,
    ) -> None:
        self._entries: list[ClasspathEntry] = []
        self._keys: set[tuple[EntryKind, str]] = set()
        self._listeners: list[ClasspathListener] = []
        self.modules_root = Path(modules_root).expanduser() if modules_root else None
        for entry in entries:
            self.add(entry)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def add(self, entry: ClasspathEntry) -> ClasspathEntry:
        """Append ``entry`` unless an entry of the same kind and key exists."""

        identity = (entry.kind, entry.key)
        if identity in self._keys:
            for existing in self._entries:
                if (existing.kind, existing.key) == identity:
                    return existing
        self._entries.append(entry)
        self._keys.add(identity)
        LOGGER.debug("Classpath entry added: %s %s", entry.kind.value, entry.key)
        self._notify()
        return entry

    def add_directory(self, path: Path | str) -> ClasspathEntry:
        return self.add(DirectoryEntry(os.fspath(path)))

    def add_archive(self, path: Path | str) -> ClasspathEntry:
        return self.add(ArchiveEntry(os.fspath(path)))

    def add_module(self, module_name: str) -> ClasspathEntry:
        return self.add(ModuleEntry(module_name))

    def remove(self, entry: ClasspathEntry) -> bool:
        identity = (entry.kind, entry.key)
        if identity not in self._keys:
            return False
        self._entries = [e for e in self._entries if (e.kind, e.key) != identity]
        self._keys.discard(identity)
        self._notify()
        return True

    def clear(self) -> None:
        if not self._entries:
            return
        self._entries.clear()
        self._keys.clear()
        LOGGER.debug("Classpath cleared")
        self._notify()

    def replace(self, entries: Sequence[ClasspathEntry]) -> None:
        """Swap in a whole new entry list, keeping first occurrences only."""

        self._entries = []
        self._keys = set()
        for entry in entries:
            identity = (entry.kind, entry.key)
            if identity in self._keys:
                continue
            self._entries.append(entry)
            self._keys.add(identity)
        self._notify()

    def add_listener(self, listener: ClasspathListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ClasspathListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:  # pragma: no cover
            pass

    def _notify(self) -> None:
        snapshot = self.entries
        for listener in list(self._listeners):
            listener(snapshot)

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    @property
    def entries(self) -> tuple[ClasspathEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ClasspathEntry]:
        return iter(tuple(self._entries))

    def __contains__(self, entry: object) -> bool:
        kind = getattr(entry, "kind", None)
        key = getattr(entry, "key", None)
        return (kind, key) in self._keys

    def directories(self) -> list[DirectoryEntry]:
        return [e for e in self._entries if isinstance(e, DirectoryEntry)]

    def archives(self) -> list[ArchiveEntry]:
        return [e for e in self._entries if isinstance(e, ArchiveEntry)]

    def modules(self) -> list[ModuleEntry]:
        return [e for e in self._entries if isinstance(e, ModuleEntry)]

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------
    def find_class(
        self, qualified_name: str, prefer_module_path: bool = False
    ) -> ClassLocation | None:
        """Locate ``qualified_name`` across directories, archives, then modules.

        With ``prefer_module_path`` the name is a module-path selection whose
        first segment names the module; that segment restricts the module tier
        and is dropped for the directory and archive tiers.
        """

        module_filter: str | None = None
        class_name = normalize_class_name(qualified_name)
        if prefer_module_path:
            module_filter, class_name = split_module_name(class_name)
        if not class_name:
            return None

        for directory in self.directories():
            location = self._probe_directory(directory, class_name)
            if location is not None:
                return location
        for archive in self.archives():
            location = self._probe_archive(archive, class_name)
            if location is not None:
                return location
        for module in self.modules():
            if module_filter is not None and module.module_name != module_filter:
                continue
            location = self._probe_module(module, class_name)
            if location is not None:
                return location

        LOGGER.debug("Class %s not found in %d classpath entries", qualified_name, len(self))
        return None

    def infer_root_directory(
        self, opened_file: Path | str, qualified_class_name: str
    ) -> Path | None:
        return infer_root_directory(opened_file, qualified_class_name)

    def _probe_directory(self, entry: DirectoryEntry, class_name: str) -> ClassLocation | None:
        candidate = entry.class_file(class_name)
        if candidate.is_file():
            return ClassLocation(str(candidate))
        return None

    def _probe_archive(
        self,
        entry: ArchiveEntry,
        class_name: str,
        *,
        archive_path: str | None = None,
        member_prefix: str = "",
        module_name: str | None = None,
    ) -> ClassLocation | None:
        path = archive_path or entry.path
        member = f"{member_prefix}{entry.member_name(class_name)}"
        try:
            with zipfile.ZipFile(path) as archive:
                archive.getinfo(member)
        except KeyError:
            return None
        except (OSError, zipfile.BadZipFile) as exc:
            LOGGER.debug("Skipping unreadable archive %s: %s", path, exc)
            return None
        return ClassLocation.for_archive(path, member[: -len(".class")], module_name)

    def _probe_module(self, entry: ModuleEntry, class_name: str) -> ClassLocation | None:
        root = self.modules_root
        if root is None:
            return None
        exploded = DirectoryEntry(str(root / entry.module_name))
        candidate = exploded.class_file(class_name)
        if candidate.is_file():
            return ClassLocation(str(candidate), entry.module_name)
        jmod = root / _JMOD_DIRECTORY / f"{entry.module_name}{_JMOD_SUFFIX}"
        if not jmod.is_file():
            return None
        return self._probe_archive(
            ArchiveEntry(str(jmod)),
            class_name,
            member_prefix=_JMOD_CLASSES_PREFIX,
            module_name=entry.module_name,
        )
