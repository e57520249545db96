"""Port interfaces for environment provisioning.

Defines the collaborators that prepare a daemon instance's runtime
environment before the process is spawned.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Protocol

ConfigWriter = Callable[[Path, int], Path]
"""Writes a daemon config file into a directory for a given port.

Called with (config directory, assigned port); returns the path of the
written file. May raise OSError or ValueError.
"""


class PortAllocator(Protocol):
    """Protocol for reserving network ports for daemon instances."""

    def allocate_port(self, preferred: int | None = None) -> int:
        """Reserve a port for a new daemon instance.

        Args:
            preferred: Caller-fixed port, or None to pick a free one

        Returns:
            The reserved port number

        Raises:
            ValueError: If the preferred port is invalid
            OSError: If no free port could be found
        """
        ...

    def release_port(self, port: int) -> None:
        """Return a port reserved by allocate_port.

        Args:
            port: Previously reserved port (unknown ports are ignored)
        """
        ...
