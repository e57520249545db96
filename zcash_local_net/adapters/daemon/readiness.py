"""Readiness detection for freshly spawned daemons.

A background thread copies the daemon's stdout into an append-only log file.
The caller's thread polls that file, and the process exit status, until the
launch outcome is known:

- process exited          -> Failed (exit status, full stdout and stderr)
- error marker in output  -> Aborted (process still running)
- success marker          -> Ready
- caller deadline passed  -> TimedOut

The exit check runs before the marker checks on every poll, so a daemon that
printed its success marker and then crashed is reported as Failed together
with its full output.
"""

from __future__ import annotations

import logging
import subprocess
import threading
import time
from pathlib import Path
from typing import IO

from zcash_local_net.adapters.daemon.descriptors import DaemonDescriptor
from zcash_local_net.adapters.daemon.timeouts import DaemonTimeouts
from zcash_local_net.domain.outcome import (
    Aborted,
    Failed,
    LaunchOutcome,
    Ready,
    TimedOut,
)

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


class LogCopier(threading.Thread):
    """Copies a process output stream into a log file until EOF.

    The only writer of its log file. Every chunk is flushed as soon as it is
    written so that readers of the file see it.
    """

    def __init__(self, source: IO[bytes], log_path: Path, process_name: str) -> None:
        super().__init__(name=f"log-copier-{process_name}", daemon=True)
        self._source = source
        self._process_name = process_name
        self.log_path = log_path
        # Created here, before any reader opens it
        self._sink = log_path.open("wb")

    def run(self) -> None:
        try:
            for chunk in iter(lambda: self._source.read1(CHUNK_SIZE), b""):
                self._sink.write(chunk)
                self._sink.flush()
        except (OSError, ValueError):
            logger.exception(f"Error copying {self._process_name} stdout to {self.log_path}")
        finally:
            self._sink.close()
            self._source.close()


class ReadinessMonitor:
    """Resolves the launch outcome of a daemon from its live output."""

    def __init__(
        self,
        descriptor: DaemonDescriptor,
        poll_interval: float = DaemonTimeouts.READY_CHECK_INTERVAL,
    ) -> None:
        """Initialize monitor.

        Args:
            descriptor: Daemon type, providing the success and error markers
            poll_interval: Seconds between polls
        """
        self.descriptor = descriptor
        self.poll_interval = poll_interval

    def start_log_capture(self, process: subprocess.Popen, log_path: Path) -> LogCopier:
        """Start copying the process's stdout into `log_path`.

        Args:
            process: Process spawned with stdout=PIPE
            log_path: Log file to create

        Returns:
            The running copier thread
        """
        if process.stdout is None:
            raise ValueError(f"{self.descriptor.name} was not spawned with a stdout pipe")
        copier = LogCopier(process.stdout, log_path, self.descriptor.name)
        copier.start()
        return copier

    def wait_for_outcome(
        self,
        process: subprocess.Popen,
        copier: LogCopier,
        timeout: float | None = None,
    ) -> LaunchOutcome:
        """Block until the launch outcome is known.

        Args:
            process: The spawned daemon
            copier: Thread copying the daemon's stdout (from start_log_capture)
            timeout: Seconds to wait before giving up, or None for no limit

        Returns:
            Ready, Failed, Aborted, or (only with a timeout) TimedOut
        """
        name = self.descriptor.name
        deadline = time.monotonic() + timeout if timeout is not None else None
        captured = bytearray()

        with copier.log_path.open("rb") as log:
            while True:
                exit_status = process.poll()
                if exit_status is not None:
                    copier.join(DaemonTimeouts.LOG_DRAIN_WAIT)
                    captured += log.read()
                    logger.debug(f"{name} exited with status {exit_status} during launch")
                    return Failed(
                        exit_status=exit_status,
                        stdout=_decode(captured),
                        stderr=self._read_stderr(process),
                    )

                captured += log.read()
                stdout = _decode(captured)
                if self.descriptor.error_marker in stdout:
                    logger.debug(f"{name} reported an error during launch")
                    return Aborted(stdout=stdout)
                if self.descriptor.success_marker in stdout:
                    logger.debug(f"{name} reported ready")
                    return Ready(stdout=stdout)
                if deadline is not None and time.monotonic() >= deadline:
                    return TimedOut(stdout=stdout)

                time.sleep(self.poll_interval)

    def _read_stderr(self, process: subprocess.Popen) -> str:
        """Read all of an exited process's stderr.

        Returns:
            Decoded stderr output, or empty string if unavailable
        """
        if process.stderr is None:
            return ""
        try:
            return _decode(process.stderr.read())
        except (OSError, ValueError):
            logger.debug(f"Failed to read stderr from {self.descriptor.name}")
            return ""
