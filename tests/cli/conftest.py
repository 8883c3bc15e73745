"""Shared fixtures for CLI execution tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path

BASE_URL = "https://floats.example.org/SOM/"


@pytest.fixture()
def cli_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> dict[str, str]:
    """Point the CLI at a test data server and a throwaway cache directory."""
    monkeypatch.chdir(tmp_path)
    env = {
        "FLOAT_BASE_URL": BASE_URL,
        "FLOAT_CACHE_DIR": str(tmp_path / "cache"),
        "FLOAT_FILE_SUFFIX": "_all",
    }
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    monkeypatch.delenv("FLOAT_DEVICE", raising=False)
    return env
