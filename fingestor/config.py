"""Configuration file management for fingestor.

The TOML file holds installation settings (such as where "today" is fetched
from). User preferences, alerts and recurring schedules live in the store.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

import tomli_w

DEFAULT_TIME_SOURCE_URL = "https://worldtimeapi.org/api/ip"
DEFAULT_TIME_SOURCE_TIMEOUT = 5.0


def get_xdg_config_home() -> Path:
    """Get XDG config directory, with fallback to ~/.config."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config)
    return Path.home() / ".config"


def get_config_path() -> Path:
    """Get the config file path (XDG compliant).

    Returns:
        Path to the config file.
    """
    return get_xdg_config_home() / "fingestor" / "config.toml"


def default_config() -> dict[str, Any]:
    """Return the default configuration dictionary."""
    return {
        "time_source": {
            "enabled": True,
            "url": DEFAULT_TIME_SOURCE_URL,
            "timeout": DEFAULT_TIME_SOURCE_TIMEOUT,
        },
    }


def create_default_config(config_path: Path | None = None) -> None:
    """Create default config file with secure permissions.

    Args:
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "wb") as f:
        tomli_w.dump(default_config(), f)

    os.chmod(config_path, 0o600)


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from TOML file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "rb") as f:
        return tomllib.load(f)


def save_config(config: dict[str, Any], config_path: Path | None = None) -> None:
    """Save configuration to TOML file.

    Args:
        config: Configuration dictionary.
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    with open(config_path, "wb") as f:
        tomli_w.dump(config, f)

    os.chmod(config_path, 0o600)


def get_time_source(config_path: Path | None = None) -> dict[str, Any]:
    """Get the time source settings, filling in defaults.

    A config file that cannot be read or parsed yields the defaults. So does
    a timeout that is not a positive number.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Dictionary with enabled, url and timeout keys.
    """
    settings = dict(default_config()["time_source"])
    try:
        config = load_config(config_path)
    except (OSError, tomllib.TOMLDecodeError):
        return settings

    section = config.get("time_source", {})
    if isinstance(section, dict):
        settings.update(section)

    try:
        timeout = float(settings["timeout"])
    except (TypeError, ValueError):
        timeout = DEFAULT_TIME_SOURCE_TIMEOUT
    settings["timeout"] = timeout if timeout > 0 else DEFAULT_TIME_SOURCE_TIMEOUT
    return settings
