"""Shared pytest fixtures for jot tests."""

from datetime import datetime
from pathlib import Path

import pytest
from loguru import logger

from jot.config import JotConfig
from jot.engine import JotEngine


SAMPLE_LINES = [
    "[2024-01-01 10:00] quick brown fox",
    "[2024-01-01 11:00] lazy dog jumps",
    "[2024-01-01 12:00] quick blue hare",
]


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop sinks main() installed so they don't outlive a captured stream."""
    yield
    logger.remove()


@pytest.fixture
def temp_home(tmp_path, monkeypatch):
    """Point HOME (and friends) at a temporary directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    for var in ("XDG_CONFIG_HOME", "JOT_LOG_LEVEL", "VISUAL", "EDITOR", "JOT_EDITOR"):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def config(temp_home):
    """Create a test configuration rooted at the temporary home."""
    return JotConfig(home=temp_home)


@pytest.fixture
def clock():
    """A settable clock for deterministic entry stamps."""

    class Clock:
        def __init__(self):
            self.now = datetime(2024, 1, 1, 10, 0)

        def __call__(self):
            return self.now

    return Clock()


@pytest.fixture
def engine(config, clock):
    """Create a test engine with a fixed clock."""
    return JotEngine(config, clock=clock)


@pytest.fixture
def write_journal(config):
    """Write raw lines to the configured journal, newline-terminated."""

    def _write(lines, path: Path = None):
        path = path or config.journal_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
        return path

    return _write
