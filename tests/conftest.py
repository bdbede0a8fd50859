"""
Pytest configuration and shared fixtures.
"""

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from helpers import SOURCE_URL
from specwatch.config import WatchConfig
from specwatch.logger import get_logger, reset_logger


@pytest.fixture(autouse=True)
def quiet_logger():
    """Fresh global logger without console output for every test."""
    reset_logger()
    get_logger(enable_console=False)
    yield
    reset_logger()


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 10, 18, 7, 30, 0, 123000, tzinfo=timezone.utc)


@pytest.fixture
def watch_config(tmp_path) -> WatchConfig:
    """Config with all directories under tmp_path."""
    return WatchConfig(
        source_url=SOURCE_URL,
        data_dir=tmp_path / "data",
        diff_dir=tmp_path / "diffs",
        log_dir=tmp_path / "logs",
        diff_command="unified",
    )


@pytest.fixture
def write_meta(watch_config):
    """Write a meta.json with the given JSON keys."""
    def _write(**values) -> Path:
        watch_config.data_dir.mkdir(parents=True, exist_ok=True)
        watch_config.meta_path.write_text(json.dumps(values, indent=2), encoding="utf-8")
        return watch_config.meta_path
    return _write


@pytest.fixture
def write_snapshot(watch_config):
    """Place a snapshot file in the data directory."""
    def _write(name: str, body: bytes) -> Path:
        watch_config.data_dir.mkdir(parents=True, exist_ok=True)
        path = watch_config.data_dir / name
        path.write_bytes(body)
        return path
    return _write


ENV_VARS = [
    "SPECWATCH_SOURCE_URL",
    "SPECWATCH_DATA_DIR",
    "SPECWATCH_DIFF_DIR",
    "SPECWATCH_LOG_DIR",
    "SPECWATCH_DIFF_COMMAND",
    "SPECWATCH_FETCH_TIMEOUT",
    "SPECWATCH_LEGACY_POINTERS",
    "SPECWATCH_LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Unset SPECWATCH_* variables for the test."""
    # setenv first so teardown also undoes values loaded from .env files
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
