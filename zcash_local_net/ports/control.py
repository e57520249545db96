"""Port interface for daemon control channels.

A control channel issues administrative commands to a running daemon through
an auxiliary binary (e.g. zcash-cli) and returns its captured output.
"""

import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol


class ControlChannel(Protocol):
    """Protocol for synchronous daemon control commands."""

    def invoke(
        self, config_path: Path, args: Sequence[str]
    ) -> subprocess.CompletedProcess[bytes]:
        """Run a control command against the daemon using `config_path`.

        A non-zero exit status is returned, not raised; only failing to run
        the command at all is an error.

        Args:
            config_path: Config file of the daemon instance
            args: Command and its arguments (e.g. ["generate", "1"])

        Returns:
            CompletedProcess with captured stdout and stderr

        Raises:
            ControlChannelError: If the command could not be invoked
        """
        ...
