# -------------------------------------
# seqmacro shared state
# -------------------------------------
"""
Shared settings for the sequence expander:
- SETTINGS: macro name, nesting bound, verbosity
- load_config: override SETTINGS from a YAML file
- trace: stderr diagnostics, only when verbose
"""
import sys
from pathlib import Path
from typing import Any

import yaml


# ============================================================
# Settings
# ============================================================

DEFAULTS: dict[str, Any] = {
    "macro_name": "seq",
    "max_depth": 128,
    "verbose": False,
}

SETTINGS: dict[str, Any] = dict(DEFAULTS)

_TYPES: dict[str, type] = {
    "macro_name": str,
    "max_depth": int,
    "verbose": bool,
}


_TRUE_WORDS = ("1", "true", "yes", "on")
_FALSE_WORDS = ("0", "false", "no", "off")


def _coerce(name: str, value: Any) -> Any:
    if name not in _TYPES:
        raise ValueError(f"unknown setting '{name}' (known: {', '.join(sorted(_TYPES))})")
    kind = _TYPES[name]
    if kind is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            word = value.strip().lower()
            if word in _TRUE_WORDS:
                return True
            if word in _FALSE_WORDS:
                return False
        raise ValueError(f"setting '{name}' must be true or false, got {value!r}")
    if kind is int:
        # bool is an int subclass
        if isinstance(value, bool):
            raise ValueError(f"setting '{name}' must be an integer, got {value!r}")
        if isinstance(value, str) and value.strip().isdecimal():
            value = int(value)
        if not isinstance(value, int):
            raise ValueError(f"setting '{name}' must be an integer, got {value!r}")
        if value < 1:
            raise ValueError(f"setting '{name}' must be >= 1, got {value}")
        return value
    if not isinstance(value, str):
        raise ValueError(f"setting '{name}' must be a string, got {value!r}")
    v = value.strip()
    if not v:
        raise ValueError(f"setting '{name}' is empty")
    if not v.isidentifier():
        raise ValueError(f"setting '{name}' must be an identifier, got {v!r}")
    return v


def set_setting(name: str, value: Any) -> None:
    """Set one entry in SETTINGS (validated)."""
    SETTINGS[name] = _coerce(name, value)


def get_setting(name: str) -> Any:
    """Get one entry from SETTINGS."""
    return SETTINGS[name]


def reset_settings() -> None:
    """Restore SETTINGS to DEFAULTS."""
    SETTINGS.clear()
    SETTINGS.update(DEFAULTS)


def load_config(path: str | Path) -> dict[str, Any]:
    """
    Load settings from a YAML file and apply them.

    Accepts either a flat mapping:
        max_depth: 64
    or one nested under a top-level "seqmacro" key:
        seqmacro:
          macro_name: repeat

    Returns:
        The settings that were applied.

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If the file is not valid YAML
        ValueError: If a key is unknown or a value is invalid
    """
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"config '{path}' must be a mapping")
    if "seqmacro" in data:
        data = data["seqmacro"] or {}
        if not isinstance(data, dict):
            raise ValueError(f"'seqmacro' in config '{path}' must be a mapping")

    applied = {str(k): _coerce(str(k), v) for k, v in data.items()}
    SETTINGS.update(applied)
    return applied


# ============================================================
# Diagnostics
# ============================================================

def trace(msg: str) -> None:
    """Print a diagnostic line to stderr when verbose is on."""
    if SETTINGS.get("verbose"):
        print(f"seqmacro: {msg}", file=sys.stderr)
