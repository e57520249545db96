"""Launch outcome value objects.

The readiness monitor resolves every launch into exactly one of these
variants. They never outlive the launch call: the launcher turns them into a
daemon handle or one of the LaunchError subclasses.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Ready:
    """The success marker was observed while the process was running.

    Attributes:
        stdout: Captured stdout up to and including the success marker.
    """

    stdout: str


@dataclass(frozen=True)
class Failed:
    """The process exited before a success marker appeared.

    Attributes:
        exit_status: Exit code (negative signal number if killed by a signal).
        stdout: Full captured stdout.
        stderr: Full captured stderr.
    """

    exit_status: int
    stdout: str
    stderr: str


@dataclass(frozen=True)
class Aborted:
    """An error marker appeared while the process was still running.

    Attributes:
        stdout: Captured stdout up to and including the error marker.
    """

    stdout: str


@dataclass(frozen=True)
class TimedOut:
    """A caller-supplied deadline passed with no marker and no exit.

    Attributes:
        stdout: Captured stdout when the deadline passed.
    """

    stdout: str


LaunchOutcome = Ready | Failed | Aborted | TimedOut
