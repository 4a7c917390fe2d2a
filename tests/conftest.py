"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from classlens.services.settings import Settings, SettingsStore
from tests.helpers import write_archive, write_class


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in ("CLASSLENS_MODULES_ROOT", "CLASSLENS_DEBUG_LOGGING", "CLASSLENS_DEBUG"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("CLASSLENS_LOG_DIR", str(tmp_path / "logs"))


@pytest.fixture
def class_tree(tmp_path: Path) -> Path:
    """A directory root holding ``com/example/Foo`` and ``com/example/Bar``."""

    root = tmp_path / "classes"
    write_class(root, "com/example/Foo")
    write_class(root, "com/example/Bar")
    return root


@pytest.fixture
def jar_file(tmp_path: Path) -> Path:
    """An archive holding ``com/example/Foo`` and ``org/lib/Util``."""

    return write_archive(tmp_path / "lib" / "lib.jar", ["com/example/Foo", "org/lib/Util"])


@pytest.fixture
def settings_store(tmp_path: Path) -> SettingsStore:
    return SettingsStore(tmp_path / "settings" / "settings.json")


@pytest.fixture
def settings() -> Settings:
    return Settings()
