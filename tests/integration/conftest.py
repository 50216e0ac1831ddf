"""Integration test fixtures.

Provides a fully wired AppState backed by a temporary SQLite file, plus an
environment that points the CLI at that same file.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from depreview.config import Settings, StoreSettings
from depreview.state import AppState, open_app_state

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "state" / "depreview.db"


@pytest.fixture()
async def app_state(db_path: Path) -> AppState:
    settings = Settings(store=StoreSettings(db_path=str(db_path)))
    async with open_app_state(settings) as state:
        yield state


@pytest.fixture()
def cli_env(db_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point ``Settings()`` (as built by the CLI) at the temporary database."""
    monkeypatch.setenv("DEPREVIEW__STORE__DB_PATH", str(db_path))
    return db_path


@pytest.fixture()
def subprocess_env(db_path: Path) -> dict[str, str]:
    env = os.environ.copy()
    env["DEPREVIEW__STORE__DB_PATH"] = str(db_path)
    return env
