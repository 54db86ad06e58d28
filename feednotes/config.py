"""
Configuration management for feednotes.

Uses XDG base directories:
- Notes: ~/.local/share/feednotes/notes.json
- Config: ~/.config/feednotes/config.yaml (optional, never created)
- Log: ~/.local/state/feednotes/feednotes.log
"""
from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

APP_NAME = "feednotes"

# XDG defaults
DEFAULT_DATA_HOME = Path.home() / ".local" / "share"
DEFAULT_CONFIG_HOME = Path.home() / ".config"
DEFAULT_STATE_HOME = Path.home() / ".local" / "state"

START_MODES = ("normal", "insert")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(Exception):
    """The config file is unreadable or holds invalid values."""


def get_data_dir() -> Path:
    """Get the data directory (XDG_DATA_HOME/feednotes)."""
    base = Path(os.environ.get("XDG_DATA_HOME") or DEFAULT_DATA_HOME)
    return base / APP_NAME


def get_config_dir() -> Path:
    """Get the config directory (XDG_CONFIG_HOME/feednotes)."""
    base = Path(os.environ.get("XDG_CONFIG_HOME") or DEFAULT_CONFIG_HOME)
    return base / APP_NAME


def get_state_dir() -> Path:
    """Get the state directory (XDG_STATE_HOME/feednotes)."""
    base = Path(os.environ.get("XDG_STATE_HOME") or DEFAULT_STATE_HOME)
    return base / APP_NAME


def get_config_path() -> Path:
    """Get the path to config.yaml (or FEEDNOTES_CONFIG)."""
    if env_path := os.environ.get("FEEDNOTES_CONFIG"):
        return Path(env_path).expanduser()
    return get_config_dir() / "config.yaml"


def get_notes_path(config: Optional[Mapping[str, Any]] = None) -> Path:
    """
    Get the path to the notes file.

    FEEDNOTES_FILE wins over ``notes_file`` from the config, which wins over
    the XDG default.
    """
    if env_path := os.environ.get("FEEDNOTES_FILE"):
        return Path(env_path).expanduser()
    if config and config.get("notes_file"):
        return Path(str(config["notes_file"])).expanduser()
    return get_data_dir() / "notes.json"


def get_log_path(config: Optional[Mapping[str, Any]] = None) -> Path:
    """Get the path to the log file."""
    if config and config.get("log_file"):
        return Path(str(config["log_file"])).expanduser()
    return get_state_dir() / f"{APP_NAME}.log"


def get_default_config() -> Dict[str, Any]:
    """Return default configuration."""
    return {
        "notes_file": None,
        "log_file": None,
        "log_level": "INFO",
        "feed": {
            "width": 80,
            "date_format": "%Y-%m-%d %H:%M:%S",
        },
        "editor": {
            "start_mode": "normal",
            "indent_width": 4,
        },
        "keys": {
            "normal": {},
            "insert": {},
        },
    }


def merge(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Recursively merge *override* into a copy of *base*."""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(result.get(key), dict):
            result[key] = merge(result[key], value)
        else:
            result[key] = value
    return result


def validate_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Check value types; raise ConfigError on the first problem."""
    for section in ("feed", "editor", "keys"):
        if not isinstance(config.get(section), dict):
            raise ConfigError(f"'{section}' must be a mapping")

    width = config["feed"].get("width")
    if not isinstance(width, int) or isinstance(width, bool) or width < 20:
        raise ConfigError("feed.width must be an integer of at least 20")
    if not isinstance(config["feed"].get("date_format"), str):
        raise ConfigError("feed.date_format must be a string")

    start_mode = str(config["editor"].get("start_mode", "")).lower()
    if start_mode not in START_MODES:
        raise ConfigError(f"editor.start_mode must be one of {', '.join(START_MODES)}")
    config["editor"]["start_mode"] = start_mode
    indent = config["editor"].get("indent_width")
    if not isinstance(indent, int) or isinstance(indent, bool) or not 1 <= indent <= 16:
        raise ConfigError("editor.indent_width must be an integer between 1 and 16")

    level = str(config.get("log_level", "")).upper()
    if level not in LOG_LEVELS:
        raise ConfigError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
    config["log_level"] = level

    for mode in ("normal", "insert"):
        table = config["keys"].get(mode) or {}
        if not isinstance(table, dict):
            raise ConfigError(f"keys.{mode} must be a mapping of key to command")
        for keys, command in table.items():
            if not isinstance(keys, str) or not (command is None or isinstance(command, str)):
                raise ConfigError(f"keys.{mode}: invalid binding {keys!r}: {command!r}")
        config["keys"][mode] = table
    return config


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from config.yaml.

    Returns default config if the file doesn't exist.
    """
    config_path = path if path is not None else get_config_path()

    if not config_path.exists():
        return get_default_config()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"malformed YAML in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"cannot read {config_path}: {e.strerror or e}") from e

    if user_config is None:
        user_config = {}
    if not isinstance(user_config, dict):
        raise ConfigError(f"{config_path} must contain a mapping")
    return validate_config(merge(get_default_config(), user_config))
