"""Domain exceptions for local network daemon management.

Every error that crosses the public API derives from LocalNetError, which
carries a user-facing message and an optional actionable hint. The CLI turns
these into click exceptions; tests and library callers catch them directly.
"""

from __future__ import annotations

import subprocess
import weakref
from collections.abc import Callable
from pathlib import Path


class LocalNetError(Exception):
    """Base exception for all local network errors.

    Attributes:
        message: User-facing error message.
        hint: Optional actionable suggestion.
    """

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint


class LaunchError(LocalNetError):
    """Base class for everything a daemon launch can raise."""

    pass


class SetupError(LaunchError):
    """Raised when the runtime environment or the OS process cannot be created.

    Covers port allocation, config file synthesis, temporary directory
    creation, and spawn failures (e.g. binary not found on $PATH).
    """

    pass


class ProcessFailedError(LaunchError):
    """Raised when a daemon exits before reporting that it is ready.

    Attributes:
        process_name: Name of the daemon (e.g. "zcashd").
        exit_status: Exit code reported by the OS (negative for signals).
        stdout: Everything the daemon wrote to stdout before exiting.
        stderr: Everything the daemon wrote to stderr before exiting.
    """

    def __init__(
        self,
        process_name: str,
        exit_status: int,
        stdout: str,
        stderr: str,
    ) -> None:
        super().__init__(
            f"{process_name} exited with status {exit_status} before it was ready",
            hint="Inspect the captured stdout/stderr for the daemon's own error report",
        )
        self.process_name = process_name
        self.exit_status = exit_status
        self.stdout = stdout
        self.stderr = stderr

    def __str__(self) -> str:
        return (
            f"{self.message}\n"
            f"--- stdout ---\n{self.stdout}\n"
            f"--- stderr ---\n{self.stderr}"
        )


def _release_launch_resources(
    release_port: Callable[[], None] | None, resources: object
) -> None:
    if release_port is not None:
        release_port()
    cleanup = getattr(resources, "cleanup", None)
    if cleanup is not None:
        cleanup()


class LaunchAbortedError(LaunchError):
    """Raised when an error marker shows up in the output of a running daemon.

    The daemon did not exit, so it is still running when this is raised and
    no stop logic has been applied to it. Its directories and port stay
    reserved until cleanup() is called or this exception is garbage
    collected, whichever comes first.

    Example:
        except LaunchAbortedError as e:
            e.process.kill()
            e.process.wait()
            e.cleanup()

    Attributes:
        process_name: Name of the daemon.
        pid: PID of the still-running process.
        stdout: Captured stdout up to the error marker.
        log_path: Path of the stdout log.
        process: The still-running process, for manual termination.
    """

    def __init__(
        self,
        process_name: str,
        pid: int,
        stdout: str,
        log_path: Path,
        process: subprocess.Popen | None = None,
        resources: object = None,
        release_port: Callable[[], None] | None = None,
    ) -> None:
        super().__init__(
            f"{process_name} launch failed without reporting an error code",
            hint=(
                f"The daemon (PID {pid}) may still be running; "
                "you may have to shut it down manually"
            ),
        )
        self.process_name = process_name
        self.pid = pid
        self.stdout = stdout
        self.log_path = log_path
        self.process = process
        # Must not reference self, or the exception would never be collected
        self._finalizer = weakref.finalize(
            self, _release_launch_resources, release_port, resources
        )

    def cleanup(self) -> None:
        """Release the port reservation and remove the directories.

        Does not touch the process; kill it first. Safe to call more than once.
        """
        self._finalizer()


class LaunchTimeoutError(LaunchError):
    """Raised when a launch deadline passes without a ready or error marker.

    Only possible when the caller passed an explicit timeout. The process is
    killed before this is raised.

    Attributes:
        process_name: Name of the daemon.
        timeout: The deadline in seconds.
        stdout: Captured stdout when the deadline passed.
    """

    def __init__(self, process_name: str, timeout: float, stdout: str) -> None:
        super().__init__(
            f"{process_name} did not become ready within {timeout:.1f}s",
            hint="The daemon was killed. Increase the timeout or check its log output",
        )
        self.process_name = process_name
        self.timeout = timeout
        self.stdout = stdout


class ControlChannelError(LocalNetError):
    """Raised when a control command cannot be issued to a daemon."""

    pass


class ConfigError(LocalNetError):
    """Raised when a zcash-local-net config file holds invalid values."""

    pass
