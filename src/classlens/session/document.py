"""Workspace document codec and file storage.

The document is JSON with a single ``workspace`` root holding the classpath
``config``, the open ``tabs`` and ``activeTabIndex``. Writing is
deterministic so equal sessions produce byte-identical documents; reading
validates the mandatory containers with a JSON schema and ignores unknown
optional fields.
"""

from __future__ import annotations

import json
import logging
import os
from json import JSONDecodeError
from pathlib import Path
from typing import Any, Mapping, Sequence

import jsonschema

from ..classpath.entries import (
    ArchiveEntry,
    ClassLocation,
    ClasspathEntry,
    DirectoryEntry,
    EntryKind,
    ModuleEntry,
    WORKSPACE_SUFFIX,
)
from ..errors import MalformedSessionError, StorageFailureError
from ..navigation.history import NavigationEntry, NavigationHistory
from ..utils.file_io import read_text, write_text
from .model import SessionState, SplitLayout, ViewSession

__all__ = [
    "DOCUMENT_VERSION",
    "WORKSPACE_SCHEMA",
    "serialize",
    "deserialize",
    "dumps",
    "loads",
    "WorkspaceStore",
]

LOGGER = logging.getLogger(__name__)
DOCUMENT_VERSION = 1
MAX_SCHEMA_ERRORS = 10

_LOCATION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["file"],
    "properties": {
        "file": {"type": "string", "minLength": 1},
        "module": {"type": ["string", "null"]},
    },
}

_HISTORY_ENTRY_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["file"],
    "properties": {
        **_LOCATION_SCHEMA["properties"],
        "state": {"type": ["object", "null"]},
    },
}

WORKSPACE_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["workspace"],
    "properties": {
        "workspace": {
            "type": "object",
            "required": ["config", "tabs"],
            "properties": {
                "version": {"type": "integer"},
                "config": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "required": ["kind"],
                        "properties": {
                            "kind": {"enum": [kind.value for kind in EntryKind]},
                            "path": {"type": "string", "minLength": 1},
                            "module": {"type": "string", "minLength": 1},
                        },
                        "if": {"properties": {"kind": {"const": EntryKind.MODULE.value}}},
                        "then": {"required": ["module"]},
                        "else": {"required": ["path"]},
                    },
                },
                "tabs": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "required": ["location"],
                        "properties": {
                            "location": _LOCATION_SCHEMA,
                            "history": {
                                "type": "object",
                                "properties": {
                                    "entries": {"type": "array", "items": _HISTORY_ENTRY_SCHEMA},
                                    "index": {"type": "integer"},
                                },
                            },
                            "layout": {"type": "object"},
                        },
                    },
                },
                "activeTabIndex": {"type": "integer"},
            },
        }
    },
}


# ----------------------------------------------------------------------
# Write path
# ----------------------------------------------------------------------
def serialize(state: SessionState) -> dict[str, Any]:
    """Return the workspace document for ``state`` with a fixed field order."""

    return {
        "workspace": {
            "version": DOCUMENT_VERSION,
            "config": [_entry_payload(entry) for entry in state.entries],
            "tabs": [_view_payload(view) for view in state.views],
            "activeTabIndex": _clamp_index(state.active_view_index, len(state.views)),
        }
    }


def dumps(state: SessionState) -> str:
    return json.dumps(serialize(state), indent=2, ensure_ascii=False) + "\n"


def _clamp_index(index: int, count: int) -> int:
    return max(0, min(index, count - 1)) if count else 0


def _entry_payload(entry: ClasspathEntry) -> dict[str, Any]:
    if isinstance(entry, ModuleEntry):
        return {"kind": entry.kind.value, "module": entry.module_name}
    return {"kind": entry.kind.value, "path": entry.path}


def _location_payload(location: ClassLocation) -> dict[str, Any]:
    payload: dict[str, Any] = {"file": location.file_name}
    if location.module_name is not None:
        payload["module"] = location.module_name
    return payload


def _view_payload(view: ViewSession) -> dict[str, Any]:
    history_entries = []
    for entry in view.history.entries:
        item = _location_payload(entry.location)
        if entry.state:
            item["state"] = dict(entry.state)
        history_entries.append(item)
    layout: dict[str, Any] = {"mode": view.layout.mode, "ratios": list(view.layout.ratios)}
    layout.update(view.layout.extra)
    return {
        "location": _location_payload(view.location),
        "history": {"entries": history_entries, "index": view.history.index},
        "layout": layout,
    }


# ----------------------------------------------------------------------
# Read path
# ----------------------------------------------------------------------
def loads(text: str, *, source: str | None = None) -> SessionState:
    try:
        payload = json.loads(text)
    except JSONDecodeError as exc:
        raise MalformedSessionError(
            message=f"Workspace document is not valid JSON: {exc.msg}",
            details={"line": exc.lineno, "column": exc.colno},
            path=source,
        ) from exc
    return deserialize(payload, source=source)


def deserialize(payload: Any, *, source: str | None = None) -> SessionState:
    """Build a fresh :class:`SessionState` from a workspace document.

    Raises:
        MalformedSessionError: when mandatory containers are missing or an
            entry carries an unrecognized kind.
    """

    problems = _schema_problems(payload)
    if problems:
        LOGGER.warning("Workspace document %s rejected: %s", source or "<memory>", problems[0])
        raise MalformedSessionError(
            message=f"Malformed workspace document: {problems[0]}",
            details={"problems": problems},
            path=source,
        )

    workspace = payload["workspace"]
    version = workspace.get("version", DOCUMENT_VERSION)
    if version > DOCUMENT_VERSION:
        LOGGER.info("Reading workspace version %s with reader version %s", version, DOCUMENT_VERSION)

    entries = [_entry_from_payload(item) for item in workspace["config"]]
    views = [_view_from_payload(item) for item in workspace["tabs"]]
    active = _clamp_index(workspace.get("activeTabIndex", 0), len(views))
    return SessionState(entries=entries, views=views, active_view_index=active)


def _schema_problems(payload: Any) -> list[str]:
    validator = jsonschema.Draft202012Validator(WORKSPACE_SCHEMA)
    problems: list[str] = []
    issues = sorted(validator.iter_errors(payload), key=lambda e: [str(p) for p in e.absolute_path])
    for issue in issues:
        path = _format_schema_path(issue.absolute_path)
        problems.append(f"{path}: {issue.message}" if path else issue.message)
        if len(problems) >= MAX_SCHEMA_ERRORS:
            break
    return problems


def _format_schema_path(path: Sequence[Any]) -> str:
    components: list[str] = []
    for segment in path:
        if isinstance(segment, int) and components:
            components[-1] = f"{components[-1]}[{segment}]"
        else:
            components.append(str(segment))
    return ".".join(components)


def _entry_from_payload(item: Mapping[str, Any]) -> ClasspathEntry:
    kind = EntryKind(item["kind"])
    if kind is EntryKind.DIRECTORY:
        return DirectoryEntry(item["path"])
    if kind is EntryKind.ARCHIVE:
        return ArchiveEntry(item["path"])
    return ModuleEntry(item["module"])


def _location_from_payload(item: Mapping[str, Any]) -> ClassLocation:
    return ClassLocation(item["file"], item.get("module"))


def _view_from_payload(item: Mapping[str, Any]) -> ViewSession:
    location = _location_from_payload(item["location"])
    history_payload = item.get("history")
    # A history without an entries list starts at the tab location.
    if history_payload is None or "entries" not in history_payload:
        history = NavigationHistory([NavigationEntry(location)])
    else:
        history_entries = [
            NavigationEntry(_location_from_payload(raw), dict(raw.get("state") or {}))
            for raw in history_payload["entries"]
        ]
        history = NavigationHistory(history_entries, history_payload.get("index"))
    return ViewSession(location=location, history=history, layout=_layout_from_payload(item))


def _layout_from_payload(item: Mapping[str, Any]) -> SplitLayout:
    raw = dict(item.get("layout") or {})
    mode = raw.pop("mode", "none")
    ratios = raw.pop("ratios", [])
    return SplitLayout(
        mode=str(mode),
        ratios=list(ratios) if isinstance(ratios, list) else [],
        extra=raw,
    )


# ----------------------------------------------------------------------
# Storage
# ----------------------------------------------------------------------
class WorkspaceStore:
    """Reads and writes workspace documents on disk."""

    suffix = WORKSPACE_SUFFIX

    @classmethod
    def ensure_suffix(cls, path: Path | str) -> Path:
        """Append the workspace suffix when ``path`` does not already carry it."""

        target = Path(path)
        if target.name.lower().endswith(cls.suffix):
            return target
        return target.with_name(f"{target.name}{cls.suffix}")

    def save(self, state: SessionState, path: Path | str) -> Path:
        body = dumps(state)
        try:
            target = write_text(path, body, atomic=True)
        except OSError as exc:
            LOGGER.warning("Failed to save workspace to %s: %s", path, exc)
            raise StorageFailureError(
                message=f"An error occurred while saving to {path}",
                details={"reason": str(exc)},
                path=os.fspath(path),
            ) from exc
        LOGGER.debug(
            "Workspace saved to %s: %d entries, %d tabs", target, len(state.entries), len(state.views)
        )
        return target

    def read(self, path: Path | str) -> SessionState:
        """Parse the document at ``path`` into an independent :class:`SessionState`."""

        source = os.fspath(path)
        try:
            text = read_text(path)
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageFailureError(
                message=f"Unable to read workspace {source}",
                details={"reason": str(exc)},
                path=source,
            ) from exc
        state = loads(text, source=source)
        LOGGER.debug(
            "Workspace read from %s: %d entries, %d tabs", source, len(state.entries), len(state.views)
        )
        return state
