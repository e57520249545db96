"""Control channel adapter using subprocess calls to a daemon's CLI binary."""

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path

from zcash_local_net.domain.exceptions import ControlChannelError

logger = logging.getLogger(__name__)


class CliControlChannel:
    """Runs control commands through an auxiliary CLI binary (e.g. zcash-cli).

    Every invocation is `<binary> -conf=<config_path> <args...>`.
    """

    def __init__(self, binary: Path | str) -> None:
        """Initialize the channel.

        Args:
            binary: Path to the control binary, or a name looked up on $PATH.
        """
        self.binary = binary

    def invoke(
        self, config_path: Path, args: Sequence[str]
    ) -> subprocess.CompletedProcess[bytes]:
        """Run a control command and capture its output.

        Args:
            config_path: Config file of the target daemon
            args: Command and its arguments

        Returns:
            CompletedProcess with captured stdout/stderr. Non-zero exit codes
            are returned, not raised.

        Raises:
            ControlChannelError: If the binary cannot be executed.
        """
        cmd = [str(self.binary), f"-conf={config_path}", *args]
        logger.debug("Running control command: %s", " ".join(cmd))
        try:
            result = subprocess.run(cmd, capture_output=True, check=False)
        except OSError as e:
            raise ControlChannelError(
                f"Failed to run {self.binary}: {e}",
                hint="Check that the control binary exists and is executable",
            ) from e

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            logger.debug(
                f"{self.binary} {' '.join(args)} exited with {result.returncode}: {stderr}"
            )
        return result
