"""Configuration I/O utilities for reading and writing TOML config files.

This module handles serialization/deserialization of LocalNetConfig to/from TOML format.
"""

import os
import platform
import tomllib
from pathlib import Path
from typing import Any

import tomli_w

from zcash_local_net.domain.config import LocalNetConfig

CONFIG_ENV_VAR = "ZCASH_LOCAL_NET_CONFIG"


def get_global_config_path() -> Path:
    """Get the path to the global config file.

    The location is platform-dependent:
    - $ZCASH_LOCAL_NET_CONFIG if set
    - Linux/macOS: $XDG_CONFIG_HOME/zcash-local-net/config.toml or
      ~/.config/zcash-local-net/config.toml
    - Windows: %APPDATA%/zcash-local-net/config.toml

    Returns:
        Path to the global config file (may not exist)
    """
    override = os.environ.get(CONFIG_ENV_VAR, "")
    if override:
        return Path(override)

    if platform.system() == "Windows":
        appdata = os.environ.get("APPDATA", "")
        if appdata:
            return Path(appdata) / "zcash-local-net" / "config.toml"
        return Path.home() / ".config" / "zcash-local-net" / "config.toml"

    xdg_config = os.environ.get("XDG_CONFIG_HOME", "")
    if xdg_config:
        return Path(xdg_config) / "zcash-local-net" / "config.toml"
    return Path.home() / ".config" / "zcash-local-net" / "config.toml"


def load_config_data(path: Path) -> dict[str, Any]:
    """Load raw TOML data from a config file.

    Args:
        path: Path to config.toml file

    Returns:
        Dictionary with parsed TOML data

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config file is malformed
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in config file: {e}") from e


def load_config(path: Path) -> LocalNetConfig:
    """Load configuration from a TOML file, filling gaps with defaults.

    Args:
        path: Path to config.toml file

    Returns:
        Parsed LocalNetConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config file is malformed or holds invalid values
    """
    data = load_config_data(path)
    return LocalNetConfig.from_partial(LocalNetConfig.default(), data)


def config_to_data(config: LocalNetConfig) -> dict[str, Any]:
    """Convert a LocalNetConfig to TOML-serializable data.

    TOML has no null, so unset values are left out.
    """
    binaries = {
        "zcashd": config.binaries.zcashd,
        "zcash_cli": config.binaries.zcash_cli,
        "zainod": config.binaries.zainod,
    }
    launch = {
        "poll_interval": config.launch.poll_interval,
        "timeout": config.launch.timeout,
        "validator_port": config.launch.validator_port,
    }
    return {
        "binaries": {k: v for k, v in binaries.items() if v is not None},
        "launch": {k: v for k, v in launch.items() if v is not None},
    }


def save_config(config: LocalNetConfig, path: Path) -> None:
    """Save configuration to a TOML file.

    Args:
        config: LocalNetConfig to save
        path: Destination path for config.toml
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("wb") as f:
        tomli_w.dump(config_to_data(config), f)
