"""Supervision of external daemon processes used as test fixtures.

Architecture:
- descriptors.py: Per-daemon-type parameters (binary, args, markers)
- supervisor.py: Spawning, graceful stop and kill
- readiness.py: stdout log capture and readiness polling
- handle.py: Handle owning a running daemon and its resources
- launcher.py: Launch sequence plus the Zcashd and Zainod handles
"""

from zcash_local_net.adapters.daemon.descriptors import ZAINOD, ZCASHD, DaemonDescriptor
from zcash_local_net.adapters.daemon.handle import DaemonHandle
from zcash_local_net.adapters.daemon.launcher import Zainod, Zcashd, launch_daemon

__all__ = [
    "ZAINOD",
    "ZCASHD",
    "DaemonDescriptor",
    "DaemonHandle",
    "Zainod",
    "Zcashd",
    "launch_daemon",
]
