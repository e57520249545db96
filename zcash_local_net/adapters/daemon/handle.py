"""Handle to a running daemon instance.

A DaemonHandle owns the daemon process, its temporary directories and its
reserved port. Dropping the handle, calling close(), or leaving a `with`
block stops the daemon and releases everything exactly once.
"""

from __future__ import annotations

import logging
import subprocess
import threading
import weakref
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Self

import click

from zcash_local_net.adapters.daemon.descriptors import DaemonDescriptor
from zcash_local_net.adapters.daemon.readiness import LogCopier
from zcash_local_net.adapters.daemon.supervisor import ProcessSupervisor
from zcash_local_net.adapters.daemon.timeouts import DaemonTimeouts
from zcash_local_net.adapters.provisioning.workspace import InstanceDirectories
from zcash_local_net.domain.exceptions import ControlChannelError
from zcash_local_net.ports.control import ControlChannel

logger = logging.getLogger(__name__)


class _Teardown:
    """Stop/cleanup state shared by a handle and its finalizer.

    Must not reference the handle itself, or the finalizer would keep it
    alive forever.
    """

    def __init__(
        self,
        supervisor: ProcessSupervisor,
        process: subprocess.Popen,
        channel: ControlChannel | None,
        config_path: Path,
        directories: InstanceDirectories,
        copier: LogCopier,
        release_port: Callable[[], None],
    ) -> None:
        self.supervisor = supervisor
        self.process = process
        self.channel = channel
        self.config_path = config_path
        self.directories = directories
        self.copier = copier
        self.release_port = release_port
        self.stopped = False
        self._lock = threading.Lock()

    def stop(self) -> None:
        with self._lock:
            if self.stopped:
                logger.debug(f"{self.supervisor.descriptor.name} already stopped")
                return
            self.stopped = True
        self.supervisor.stop(self.process, self.channel, self.config_path)

    def close(self) -> None:
        self.stop()
        self.copier.join(DaemonTimeouts.LOG_DRAIN_WAIT)
        if self.process.stderr is not None:
            self.process.stderr.close()
        self.release_port()
        self.directories.cleanup()


class DaemonHandle:
    """A launched daemon: process, port, directories and control channel.

    Created by the launcher once the daemon reported ready; never construct
    one directly.
    """

    def __init__(
        self,
        descriptor: DaemonDescriptor,
        supervisor: ProcessSupervisor,
        process: subprocess.Popen,
        port: int,
        directories: InstanceDirectories,
        copier: LogCopier,
        channel: ControlChannel | None = None,
        release_port: Callable[[], None] = lambda: None,
    ) -> None:
        self.descriptor = descriptor
        self._process = process
        self._port = port
        self._directories = directories
        self._channel = channel
        self._teardown = _Teardown(
            supervisor=supervisor,
            process=process,
            channel=channel,
            config_path=self.config_path(),
            directories=directories,
            copier=copier,
            release_port=release_port,
        )
        self._finalizer = weakref.finalize(self, self._teardown.close)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(pid={self._process.pid}, port={self._port}, "
            f"running={self.is_running()})"
        )

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def process(self) -> subprocess.Popen:
        return self._process

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def port(self) -> int:
        return self._port

    @property
    def config_dir(self) -> Path:
        return self._directories.config_dir

    @property
    def logs_dir(self) -> Path:
        return self._directories.logs_dir

    @property
    def data_dir(self) -> Path | None:
        return self._directories.data_dir

    @property
    def log_path(self) -> Path:
        return self._directories.log_path

    @property
    def closed(self) -> bool:
        """True once the daemon was stopped and its resources released."""
        return not self._finalizer.alive

    def config_path(self) -> Path:
        """Return the path of the daemon's config file."""
        return self._directories.config_dir / self.descriptor.config_filename

    def is_running(self) -> bool:
        """Check whether the daemon process is still alive."""
        return self._process.poll() is None

    def control_channel_command(
        self, args: Sequence[str]
    ) -> subprocess.CompletedProcess[bytes]:
        """Run a control command against this daemon.

        Example:
            zcashd.control_channel_command(["getblockcount"])

        Args:
            args: Command and arguments passed after the config flag

        Returns:
            CompletedProcess with captured stdout/stderr

        Raises:
            ControlChannelError: If the daemon type has no control channel
                or the control binary cannot be run
        """
        if self._channel is None:
            raise ControlChannelError(
                f"{self.descriptor.name} has no control channel",
            )
        return self._channel.invoke(self.config_path(), args)

    def read_log(self) -> str:
        """Return everything the daemon has written to stdout so far."""
        return self.log_path.read_bytes().decode("utf-8", errors="replace")

    def print_log(self) -> None:
        """Print the captured stdout log."""
        click.echo(self.read_log())

    def stop(self) -> None:
        """Stop the daemon process.

        Tries the control channel's stop command first and falls back to
        killing the process. Directories stay in place until close(). Safe
        to call more than once.
        """
        self._teardown.stop()

    def close(self) -> None:
        """Stop the daemon (if needed) and remove its directories and port reservation."""
        self._finalizer()
