"""Load and save ModGraph settings from the TOML config file."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List

import toml

from . import config

logger = logging.getLogger(__name__)

SECTION = "analysis"


@dataclass
class Settings:
    trusted_stdlib_prefixes: List[str] = field(
        default_factory=lambda: list(config.DEFAULT_TRUSTED_STDLIB_PREFIXES)
    )
    test_suffix: str = config.DEFAULT_TEST_SUFFIX
    symbol_limit: int = config.DEFAULT_SYMBOL_LIMIT
    go_binary: str = config.DEFAULT_GO_BINARY


SETTING_TYPES = {
    "trusted_stdlib_prefixes": list,
    "test_suffix": str,
    "symbol_limit": int,
    "go_binary": str,
}


def load_full_config() -> Dict[str, Any]:
    """Load the entire TOML config (all sections)."""
    if not config.CONFIG_FILE.exists():
        return {}
    try:
        with open(config.CONFIG_FILE, "r") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", config.CONFIG_FILE, exc)
        return {}


def _save_full_config(data: Dict[str, Any]) -> None:
    config.ensure_base_dirs()
    with open(config.CONFIG_FILE, "w") as f:
        toml.dump(data, f)


def load_settings() -> Settings:
    """Return settings from the ``[analysis]`` section, defaults elsewhere.

    Keys with the wrong type are ignored with a warning.
    """
    section = load_full_config().get(SECTION, {})
    settings = Settings()
    for key, expected in SETTING_TYPES.items():
        if key not in section:
            continue
        value = section[key]
        if not isinstance(value, expected):
            logger.warning("Ignoring %s.%s: expected %s", SECTION, key, expected.__name__)
            continue
        setattr(settings, key, value)
    return settings


def save_settings(settings: Settings) -> None:
    """Write *settings* to the ``[analysis]`` section, keeping other sections."""
    data = load_full_config()
    data[SECTION] = asdict(settings)
    _save_full_config(data)


def parse_setting(key: str, raw: str) -> Any:
    """Convert the command-line text *raw* for setting *key*."""
    expected = SETTING_TYPES.get(key)
    if expected is None:
        raise KeyError(key)
    if expected is int:
        return int(raw)
    if expected is list:
        return [part.strip() for part in raw.split(",") if part.strip()]
    return raw
