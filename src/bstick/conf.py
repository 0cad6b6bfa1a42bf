"""Read-only settings for bstick.

Tunables for the retry wrapper and animation defaults.  Values come from
``~/.config/bstick/config.json`` (XDG-compliant) and are overridden by
``BSTICK_<KEY>`` environment variables.  Nothing here writes to disk.

Usage:
    from bstick.conf import settings

    settings.read_attempts          # read-path attempt limit
    settings.write_backoff_max_s    # write-path backoff ceiling
    settings.morph_steps            # default morph step count

Example config.json::

    {"read_attempts": 5, "write_backoff_initial_s": 0.02, "backend": "hidapi"}
"""
from __future__ import annotations

import json
import logging
import os
from typing import Any, Mapping, Optional

log = logging.getLogger(__name__)

# =========================================================================
# Config file location (XDG-compliant)
# =========================================================================

_XDG_CONFIG = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
CONFIG_DIR = os.path.join(_XDG_CONFIG, 'bstick')
CONFIG_PATH = os.path.join(CONFIG_DIR, 'config.json')

ENV_PREFIX = 'BSTICK_'

BACKENDS = ('pyusb', 'hidapi')

# key → (type, default)
DEFAULTS: dict[str, tuple[type, Any]] = {
    'write_backoff_initial_s': (float, 0.010),
    'write_backoff_factor': (float, 2.0),
    'write_backoff_max_s': (float, 1.0),
    'read_attempts': (int, 5),
    'morph_duration_ms': (int, 1000),
    'morph_steps': (int, 50),
    'backend': (str, 'pyusb'),
}


def load_config(path: Optional[str] = None) -> dict:
    """Load user config from disk. Returns empty dict on missing/corrupt file."""
    try:
        with open(path or CONFIG_PATH, 'r') as f:
            data = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def _coerce(key: str, raw: Any) -> Any:
    kind, default = DEFAULTS[key]
    try:
        value = kind(raw)
    except (TypeError, ValueError):
        log.warning("Config %s=%r is not a valid %s, using %r",
                    key, raw, kind.__name__, default)
        return default
    if kind in (int, float) and value < 0:
        log.warning("Config %s=%r is negative, using %r", key, raw, default)
        return default
    if key == 'read_attempts' and value < 1:
        log.warning("Config read_attempts=%r must be >= 1, using %r", raw, default)
        return default
    if key == 'morph_steps' and value < 1:
        log.warning("Config morph_steps=%r must be >= 1, using %r", raw, default)
        return default
    if key == 'backend' and value not in BACKENDS:
        log.warning("Config backend=%r unknown, using %r", raw, default)
        return default
    return value


class Settings:
    """Resolved settings; environment beats config file beats defaults."""

    write_backoff_initial_s: float
    write_backoff_factor: float
    write_backoff_max_s: float
    read_attempts: int
    morph_duration_ms: int
    morph_steps: int
    backend: str

    def __init__(self, values: Optional[Mapping[str, Any]] = None) -> None:
        values = values or {}
        for key, (_, default) in DEFAULTS.items():
            raw = values.get(key, default)
            setattr(self, key, _coerce(key, raw) if key in values else default)

    @classmethod
    def from_sources(
        cls,
        config: Optional[Mapping[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> Settings:
        """Merge a config dict with ``BSTICK_*`` environment overrides."""
        config = load_config() if config is None else config
        environ = os.environ if environ is None else environ
        merged = {k: v for k, v in config.items() if k in DEFAULTS}
        unknown = set(config) - set(DEFAULTS)
        if unknown:
            log.debug("Ignoring unknown config keys: %s", ", ".join(sorted(unknown)))
        for key in DEFAULTS:
            env_value = environ.get(ENV_PREFIX + key.upper())
            if env_value is not None:
                merged[key] = env_value
        return cls(merged)

    def as_dict(self) -> dict:
        return {key: getattr(self, key) for key in DEFAULTS}

    def __repr__(self) -> str:
        return f"Settings({self.as_dict()!r})"


# Module-level singleton, import and use directly
settings = Settings.from_sources()
