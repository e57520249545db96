"""Process supervision: spawning, stopping and killing daemon processes."""

import logging
import subprocess
from pathlib import Path

from zcash_local_net.adapters.daemon.descriptors import DaemonDescriptor
from zcash_local_net.domain.exceptions import ControlChannelError, SetupError
from zcash_local_net.ports.control import ControlChannel

logger = logging.getLogger(__name__)


class ProcessSupervisor:
    """Owns the OS-level lifecycle of one daemon type's processes."""

    def __init__(self, descriptor: DaemonDescriptor, binary: Path | str | None = None):
        """Initialize supervisor.

        Args:
            descriptor: Daemon type to supervise
            binary: Path to the daemon binary (default: descriptor's binary
                name, looked up on $PATH)
        """
        self.descriptor = descriptor
        self.binary = binary if binary is not None else descriptor.default_binary

    def build_command(self, config_path: Path, data_dir: Path | None) -> list[str]:
        """Build the full daemon command line."""
        return [str(self.binary), *self.descriptor.build_args(config_path, data_dir)]

    def spawn(self, config_path: Path, data_dir: Path | None = None) -> subprocess.Popen:
        """Spawn the daemon with piped stdout and stderr.

        Args:
            config_path: Ready-to-use config file
            data_dir: Data directory, for daemon types that need one

        Returns:
            The running process

        Raises:
            SetupError: If the OS process cannot be started
        """
        cmd = self.build_command(config_path, data_dir)
        logger.info(f"Starting {self.descriptor.name}: {' '.join(cmd)}")
        try:
            process = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                stdin=subprocess.DEVNULL,
            )
        except (OSError, ValueError) as e:
            raise SetupError(
                f"Failed to start {self.descriptor.name}: {e}",
                hint=(
                    f"Install {self.descriptor.default_binary} on $PATH "
                    "or pass the path to the binary explicitly"
                ),
            ) from e

        logger.debug(f"{self.descriptor.name} spawned with PID {process.pid}")
        return process

    def stop(
        self,
        process: subprocess.Popen,
        channel: ControlChannel | None,
        config_path: Path,
    ) -> None:
        """Stop a daemon, gracefully if possible.

        Shutdown sequence:
        1. Return early if the process already exited
        2. Without a control channel, kill the process
        3. Otherwise issue the stop command and wait for exit (no timeout)
        4. If the stop command cannot be issued, kill the process

        Never raises; failures are logged.

        Args:
            process: Process to stop
            channel: Control channel, or None if the daemon type has none
            config_path: Config file the control channel should use
        """
        name = self.descriptor.name
        if process.poll() is not None:
            logger.info(f"{name} already exited with status {process.returncode}")
            return

        if channel is None:
            self.kill(process)
            return

        try:
            channel.invoke(config_path, list(self.descriptor.stop_command))
        except ControlChannelError as e:
            logger.error(f"Can't stop {name} through its control channel: {e}")
            logger.error(f"Sending SIGKILL to {name} process {process.pid}")
            self.kill(process)
            return

        try:
            process.wait()
        except OSError as e:
            logger.error(f"{name} cannot be awaited: {e}")
        else:
            logger.info(f"{name} successfully shut down")

    def kill(self, process: subprocess.Popen) -> None:
        """Forcefully kill a daemon and reap it.

        Killing an already-exited process only logs a warning. Other failures
        are logged as errors and swallowed.

        Args:
            process: Process to kill
        """
        name = self.descriptor.name
        if process.poll() is not None:
            logger.warning(f"{name} has already terminated (status {process.returncode})")
            return

        try:
            process.kill()
            process.wait()
        except ProcessLookupError:
            logger.warning(f"{name} has already terminated")
        except OSError as e:
            logger.error(f"{name} couldn't be killed: {e}")
        else:
            logger.info(f"{name} killed")
