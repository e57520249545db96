"""Config domain models for zcash-local-net.

Configuration is stored in a TOML file and tells the launcher where to find
daemon binaries and how to poll for readiness. This module defines the domain
models that represent validated configuration state.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any


@dataclass(frozen=True)
class BinariesConfig:
    """Locations of daemon and control binaries.

    A value of None means the default binary name is looked up on $PATH.

    Attributes:
        zcashd: Path to the zcashd binary
        zcash_cli: Path to the zcash-cli binary
        zainod: Path to the zainod binary
    """

    zcashd: str | None = None
    zcash_cli: str | None = None
    zainod: str | None = None


@dataclass(frozen=True)
class LaunchConfig:
    """Configuration for launching and monitoring daemons.

    Attributes:
        poll_interval: Seconds between readiness checks (default: 0.1)
        timeout: Launch deadline in seconds, or None to wait indefinitely
        validator_port: Validator RPC port used when launching zainod alone

    Raises:
        ValueError: If poll_interval or timeout is not positive, or
            validator_port is not a valid TCP port.
    """

    poll_interval: float = 0.1
    timeout: float | None = None
    validator_port: int = 18232

    def __post_init__(self) -> None:
        """Validate launch config after initialization."""
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if not 1 <= self.validator_port <= 65535:
            raise ValueError(
                f"validator_port must be between 1 and 65535, got {self.validator_port}"
            )


@dataclass(frozen=True)
class LocalNetConfig:
    """Complete zcash-local-net configuration.

    Attributes:
        binaries: Binary locations
        launch: Launch and readiness settings
    """

    binaries: BinariesConfig = field(default_factory=BinariesConfig)
    launch: LaunchConfig = field(default_factory=LaunchConfig)

    @classmethod
    def default(cls) -> LocalNetConfig:
        """Create config with all default values."""
        return cls()

    @classmethod
    def from_partial(cls, base: LocalNetConfig, data: dict[str, Any]) -> LocalNetConfig:
        """Overlay partial TOML data onto an existing config.

        Values present in `data` win; sections and keys that are missing keep
        the values of `base`. Unknown keys are ignored.

        Args:
            base: Config providing values for anything `data` omits
            data: Parsed TOML data (section name -> key/value table)

        Returns:
            New LocalNetConfig with the overlay applied

        Raises:
            ValueError: If a merged section fails validation
        """
        sections = {}
        for f in fields(cls):
            current = getattr(base, f.name)
            overlay = data.get(f.name, {})
            if not isinstance(overlay, dict):
                raise ValueError(f"[{f.name}] must be a table, got {type(overlay).__name__}")
            known = {sf.name for sf in fields(current)}
            sections[f.name] = replace(
                current, **{k: v for k, v in overlay.items() if k in known}
            )
        return cls(**sections)
