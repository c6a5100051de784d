"""Configuration loading for jot.

jot is zero-config: everything lives under ``~/.jot`` unless a
``config.toml`` or ``config.json`` in that directory says otherwise.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

# Python 3.11+ has tomllib in stdlib; fall back to tomli for older versions
try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # Python <3.11

from .log import DEFAULT_LEVEL

DATA_DIR_NAME = ".jot"
JOURNAL_FILE = "journal.txt"
INDEX_FILE = "index.json"
LINKS_FILE = "links.jsonl"
TEMPLATES_DIR = "templates"

CONFIG_CANDIDATES = ("config.toml", "config.json")


def home_dir() -> Path:
    """Locate the user's home directory.

    HOME wins, then USERPROFILE, then whatever the platform reports.
    """
    for var in ("HOME", "USERPROFILE"):
        value = os.environ.get(var)
        if value:
            return Path(value)
    return Path.home()


def default_templates_dir(home: Path) -> Path:
    """Templates live under XDG_CONFIG_HOME when it is set."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "jot" / TEMPLATES_DIR
    return home / DATA_DIR_NAME / TEMPLATES_DIR


@dataclass
class JotConfig:
    """Resolved locations and settings for one jot installation."""

    home: Path = field(default_factory=home_dir)
    data_dir: Optional[Path] = None

    journal_path: Optional[Path] = None
    index_path: Optional[Path] = None
    links_path: Optional[Path] = None
    templates_dir: Optional[Path] = None

    # Editor command string; None means fall back to the environment
    editor: Optional[str] = None

    log_level: str = DEFAULT_LEVEL
    log_file: Optional[str] = None

    def __post_init__(self) -> None:
        if self.data_dir is None:
            self.data_dir = self.home / DATA_DIR_NAME
        if self.journal_path is None:
            self.journal_path = self.data_dir / JOURNAL_FILE
        if self.index_path is None:
            self.index_path = self.data_dir / INDEX_FILE
        if self.links_path is None:
            self.links_path = self.data_dir / LINKS_FILE
        if self.templates_dir is None:
            self.templates_dir = default_templates_dir(self.home)


def load_toml_config(path: Path) -> dict[str, Any]:
    """Load configuration from TOML file."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_json_config(path: Path) -> dict[str, Any]:
    """Load configuration from JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _resolve(value: str, base: Path) -> Path:
    path = Path(os.path.expanduser(value))
    if not path.is_absolute():
        path = base / path
    return path


def dict_to_config(data: dict[str, Any], home: Path) -> JotConfig:
    """Convert dictionary to JotConfig.

    Relative paths are resolved against the data directory.
    """
    data_dir = home / DATA_DIR_NAME
    kwargs: dict[str, Any] = {"home": home, "data_dir": data_dir}

    if "paths" in data:
        paths = data["paths"]
        if "journal" in paths:
            kwargs["journal_path"] = _resolve(paths["journal"], data_dir)
        if "index" in paths:
            kwargs["index_path"] = _resolve(paths["index"], data_dir)
        if "links" in paths:
            kwargs["links_path"] = _resolve(paths["links"], data_dir)
        if "templates" in paths:
            kwargs["templates_dir"] = _resolve(paths["templates"], data_dir)

    if "editor" in data:
        editor = data["editor"]
        if isinstance(editor, str):
            kwargs["editor"] = editor
        elif isinstance(editor, dict) and editor.get("command"):
            kwargs["editor"] = editor["command"]

    if "logging" in data:
        logging_cfg = data["logging"]
        if "level" in logging_cfg:
            kwargs["log_level"] = str(logging_cfg["level"]).upper()
        if "file" in logging_cfg:
            kwargs["log_file"] = str(_resolve(logging_cfg["file"], data_dir))

    return JotConfig(**kwargs)


def find_config_file(data_dir: Path) -> Optional[Path]:
    """Find configuration file in the data directory.

    Search order:
    1. config.toml
    2. config.json
    """
    for name in CONFIG_CANDIDATES:
        path = data_dir / name
        if path.exists():
            return path

    return None


def load_config(home: Optional[Path] = None, config_path: Optional[Path] = None) -> JotConfig:
    """Load jot configuration.

    Args:
        home: Home directory (default: resolved from the environment)
        config_path: Optional explicit path to config file

    Returns:
        JotConfig instance
    """
    home = home or home_dir()

    if config_path is None:
        config_path = find_config_file(home / DATA_DIR_NAME)

    if config_path is None:
        config = JotConfig(home=home)
    else:
        suffix = config_path.suffix.lower()
        if suffix == ".toml":
            config = dict_to_config(load_toml_config(config_path), home)
        elif suffix == ".json":
            config = dict_to_config(load_json_config(config_path), home)
        else:
            raise ValueError(f"Unsupported config file type: {suffix}")

    env_level = os.environ.get("JOT_LOG_LEVEL")
    if env_level:
        config.log_level = env_level.upper()

    return config
