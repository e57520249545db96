"""Per-daemon-type descriptors.

zcashd and zainod are launched, monitored and stopped by the same machinery;
everything that differs between them lives in a DaemonDescriptor.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from zcash_local_net.adapters.provisioning.config_files import (
    ZAINOD_FILENAME,
    ZCASHD_FILENAME,
)

ERROR_MARKER = "Error:"

ArgumentBuilder = Callable[[Path, Path | None], list[str]]
"""Builds daemon arguments from (config path, data directory or None)."""


@dataclass(frozen=True)
class DaemonDescriptor:
    """Static description of a daemon type.

    Attributes:
        name: Process name used in logs and errors
        default_binary: Binary name looked up on $PATH when none is given
        build_args: Argument builder for the daemon command line
        success_marker: Output text that means startup finished
        config_filename: Name of the config file inside the config directory
        needs_data_dir: Whether the daemon gets its own data directory
        control_binary: Default control CLI name, or None if the daemon has
            no control channel (it is then stopped by killing it)
        stop_command: Control command that shuts the daemon down gracefully
        error_marker: Output text that means startup went wrong
    """

    name: str
    default_binary: str
    build_args: ArgumentBuilder
    success_marker: str
    config_filename: str
    needs_data_dir: bool = False
    control_binary: str | None = None
    stop_command: tuple[str, ...] = ("stop",)
    error_marker: str = ERROR_MARKER

    @property
    def has_control_channel(self) -> bool:
        return self.control_binary is not None


def _zcashd_args(config_path: Path, data_dir: Path | None) -> list[str]:
    if data_dir is None:
        raise ValueError("zcashd requires a data directory")
    return [
        "--printtoconsole",
        f"--conf={config_path}",
        f"--datadir={data_dir}",
        "-debug=1",
    ]


def _zainod_args(config_path: Path, data_dir: Path | None) -> list[str]:
    return ["--config", str(config_path)]


ZCASHD = DaemonDescriptor(
    name="zcashd",
    default_binary="zcashd",
    build_args=_zcashd_args,
    success_marker="init message: Done loading",
    config_filename=ZCASHD_FILENAME,
    needs_data_dir=True,
    control_binary="zcash-cli",
)

ZAINOD = DaemonDescriptor(
    name="zainod",
    default_binary="zainod",
    build_args=_zainod_args,
    success_marker="Server Ready.",
    config_filename=ZAINOD_FILENAME,
)
