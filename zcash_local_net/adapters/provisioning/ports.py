"""Port allocation for daemon instances.

Free ports are found by binding to port 0 on the loopback interface and
reading back the port the OS assigned. A process-wide reservation set keeps
concurrently running instances from ever sharing a port, even if the OS
hands the same ephemeral port out twice before a daemon binds it.
"""

import logging
import socket
import threading

logger = logging.getLogger(__name__)

# Give up after this many OS-assigned ports collide with reservations
MAX_PICK_ATTEMPTS = 100


def _os_assigned_port() -> int:
    """Ask the OS for a currently free TCP port on 127.0.0.1."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class PortRegistry:
    """Thread-safe port allocator implementing the PortAllocator protocol."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._reserved: set[int] = set()

    @property
    def reserved(self) -> frozenset[int]:
        """Ports currently reserved by running instances."""
        with self._lock:
            return frozenset(self._reserved)

    def allocate_port(self, preferred: int | None = None) -> int:
        """Reserve a port, picking a free one when none is fixed.

        A caller-fixed port is accepted as-is; if another instance in this
        process already holds it a warning is logged, since the daemon will
        most likely fail to bind.

        Args:
            preferred: Caller-fixed port, or None to pick a free one

        Returns:
            The reserved port

        Raises:
            ValueError: If preferred is outside 1-65535
            OSError: If no unreserved free port could be found
        """
        if preferred is not None:
            if not 1 <= preferred <= 65535:
                raise ValueError(f"Port must be between 1 and 65535, got {preferred}")
            with self._lock:
                if preferred in self._reserved:
                    logger.warning(f"Port {preferred} is already used by another instance")
                self._reserved.add(preferred)
            return preferred

        for _ in range(MAX_PICK_ATTEMPTS):
            port = _os_assigned_port()
            with self._lock:
                if port not in self._reserved:
                    self._reserved.add(port)
                    logger.debug("Reserved port %d", port)
                    return port

        raise OSError(f"No free port found after {MAX_PICK_ATTEMPTS} attempts")

    def release_port(self, port: int) -> None:
        """Release a reserved port. Unknown ports are ignored."""
        with self._lock:
            self._reserved.discard(port)


default_port_registry = PortRegistry()
"""Registry shared by every launch in this process unless one is injected."""
