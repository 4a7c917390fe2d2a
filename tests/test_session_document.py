"""Tests for the workspace document codec and store."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from classlens.classpath.entries import ArchiveEntry, ClassLocation, DirectoryEntry, ModuleEntry
from classlens.errors import ErrorCode, MalformedSessionError, StorageFailureError
from classlens.navigation.history import NavigationEntry, NavigationHistory
from classlens.session import document
from classlens.session.document import WorkspaceStore
from classlens.session.model import SessionState, SplitLayout, ViewSession


def _sample_state(tmp_path: Path) -> SessionState:
    foo = ClassLocation(str(tmp_path / "classes" / "com" / "example" / "Foo.class"))
    util = ClassLocation.for_archive(str(tmp_path / "lib.jar"), "org/lib/Util")
    string = ClassLocation(str(tmp_path / "jre" / "java.base" / "String.class"), "java.base")
    history = NavigationHistory(
        [NavigationEntry(foo, {"scroll": 40}), NavigationEntry(util), NavigationEntry(string)],
        1,
    )
    first = ViewSession(
        location=foo,
        history=history,
        layout=SplitLayout(mode="horizontal", ratios=[0.25, 0.75], extra={"collapsed": True}),
    )
    second = ViewSession.open(util)
    return SessionState(
        entries=[
            DirectoryEntry(str(tmp_path / "classes")),
            ArchiveEntry(str(tmp_path / "lib.jar")),
            ModuleEntry("java.base"),
        ],
        views=[first, second],
        active_view_index=1,
    )


def _minimal(**workspace: object) -> dict:
    payload = {"config": [], "tabs": []}
    payload.update(workspace)
    return {"workspace": payload}


def _tab_with_state(state: object) -> dict:
    return {
        "location": {"file": "/cp/A.class"},
        "history": {"entries": [{"file": "/cp/A.class", "state": state}], "index": 0},
    }


def test_round_trip_preserves_everything(tmp_path: Path) -> None:
    state = _sample_state(tmp_path)

    restored = document.loads(document.dumps(state))

    assert restored.entries == state.entries
    assert restored.active_view_index == 1
    assert len(restored.views) == 2
    first = restored.views[0]
    assert first.location == state.views[0].location
    assert first.history.index == 1
    assert [e.location for e in first.history.entries] == [
        e.location for e in state.views[0].history.entries
    ]
    assert first.history.entries[0].state == {"scroll": 40}
    assert first.history.entries[2].location.module_name == "java.base"
    assert first.layout == state.views[0].layout


def test_serialization_is_deterministic(tmp_path: Path) -> None:
    state = _sample_state(tmp_path)

    text = document.dumps(state)

    assert text == document.dumps(document.loads(text))
    assert text.endswith("\n")


def test_document_layout(tmp_path: Path) -> None:
    payload = document.serialize(_sample_state(tmp_path))

    workspace = payload["workspace"]
    assert list(workspace) == ["version", "config", "tabs", "activeTabIndex"]
    assert workspace["config"][2] == {"kind": "module", "module": "java.base"}
    assert workspace["config"][0]["kind"] == "directory"
    tab = workspace["tabs"][0]
    assert tab["layout"] == {"mode": "horizontal", "ratios": [0.25, 0.75], "collapsed": True}
    assert "module" not in tab["location"]
    assert "state" not in tab["history"]["entries"][1]


def test_deserialized_state_is_independent(tmp_path: Path) -> None:
    text = document.dumps(_sample_state(tmp_path))

    first = document.loads(text)
    second = document.loads(text)
    first.views[0].history.visit(ClassLocation("/elsewhere/X.class"))

    assert len(second.views[0].history) == 3
    assert first.views[0].view_id != second.views[0].view_id


def test_missing_history_defaults_to_location() -> None:
    payload = _minimal(tabs=[{"location": {"file": "/cp/A.class"}}])

    state = document.deserialize(payload)

    history = state.views[0].history
    assert len(history) == 1
    assert history.current.location == ClassLocation("/cp/A.class")
    assert state.views[0].layout == SplitLayout()


def test_unknown_optional_fields_are_ignored() -> None:
    payload = _minimal(
        tabs=[{"location": {"file": "/cp/A.class"}, "pinned": True}],
        theme="dark",
    )
    payload["generator"] = "test"

    state = document.deserialize(payload)

    assert len(state.views) == 1


@pytest.mark.parametrize(
    ("active", "expected"),
    [(-3, 0), (7, 1), (1, 1)],
)
def test_active_index_is_clamped(active: int, expected: int) -> None:
    tabs = [{"location": {"file": "/cp/A.class"}}, {"location": {"file": "/cp/B.class"}}]

    state = document.deserialize(_minimal(tabs=tabs, activeTabIndex=active))

    assert state.active_view_index == expected
    assert state.active_view is state.views[expected]


def test_empty_workspace_document() -> None:
    state = document.deserialize(_minimal())

    assert state.entries == []
    assert state.views == []
    assert state.active_view is None


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"workspace": {"tabs": []}},
        {"workspace": {"config": []}},
        {"workspace": {"config": [{"kind": "network", "path": "/x"}], "tabs": []}},
        {"workspace": {"config": [{"kind": "module"}], "tabs": []}},
        {"workspace": {"config": [{"kind": "directory"}], "tabs": []}},
        {"workspace": {"config": [], "tabs": [{"history": {}}]}},
        _minimal(tabs=[_tab_with_state("abc")]),
        _minimal(tabs=[_tab_with_state(5)]),
        _minimal(tabs=[_tab_with_state([1, 2])]),
        [],
    ],
)
def test_malformed_documents_are_rejected(payload: object) -> None:
    with pytest.raises(MalformedSessionError) as info:
        document.deserialize(payload, source="bad.clw")

    assert info.value.error_code == ErrorCode.MALFORMED_SESSION
    assert info.value.path == "bad.clw"
    assert info.value.details["problems"]


def test_invalid_json_is_malformed() -> None:
    with pytest.raises(MalformedSessionError) as info:
        document.loads("{not json")

    assert info.value.details["line"] == 1


def test_store_round_trip_and_suffix(tmp_path: Path) -> None:
    store = WorkspaceStore()
    target = store.ensure_suffix(tmp_path / "project")

    written = store.save(_sample_state(tmp_path), target)
    restored = store.read(written)

    assert written.name == "project.clw"
    assert store.ensure_suffix(written) == written
    assert len(restored.views) == 2
    assert json.loads(written.read_text(encoding="utf-8"))["workspace"]["version"] == 1


def test_store_reads_document_with_bom(tmp_path: Path) -> None:
    target = tmp_path / "bom.clw"
    target.write_bytes(b"\xef\xbb\xbf" + json.dumps(_minimal()).encode("utf-8"))

    assert WorkspaceStore().read(target).views == []


def test_store_save_failure_is_reported(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("file", encoding="utf-8")

    with pytest.raises(StorageFailureError) as info:
        WorkspaceStore().save(SessionState(), blocker / "nested" / "project.clw")

    assert info.value.error_code == ErrorCode.STORAGE_FAILURE
    assert "An error occurred while saving to" in info.value.message


def test_store_read_failure_is_reported(tmp_path: Path) -> None:
    with pytest.raises(StorageFailureError) as info:
        WorkspaceStore().read(tmp_path / "missing.clw")

    assert info.value.path == str(tmp_path / "missing.clw")


def test_history_without_entries_defaults_to_location() -> None:
    payload = _minimal(tabs=[{"location": {"file": "/cp/A.class"}, "history": {}}])

    history = document.deserialize(payload).views[0].history

    assert [entry.location for entry in history.entries] == [ClassLocation("/cp/A.class")]
    assert history.index == 0


def test_cleared_history_round_trips() -> None:
    view = ViewSession.open(ClassLocation("/cp/A.class"))
    view.history.clear()
    state = SessionState(views=[view])

    text = document.dumps(state)

    assert document.dumps(document.loads(text)) == text
    assert len(document.loads(text).views[0].history) == 0


def test_out_of_range_active_index_is_clamped_on_write() -> None:
    state = SessionState(views=[ViewSession.open(ClassLocation("/cp/A.class"))], active_view_index=3)

    text = document.dumps(state)

    assert json.loads(text)["workspace"]["activeTabIndex"] == 0
    assert document.dumps(document.loads(text)) == text
