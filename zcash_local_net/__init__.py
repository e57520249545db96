"""Launch and supervise local zcashd / zainod daemons for integration tests."""

from zcash_local_net.adapters.daemon import (
    ZAINOD,
    ZCASHD,
    DaemonDescriptor,
    DaemonHandle,
    Zainod,
    Zcashd,
    launch_daemon,
)
from zcash_local_net.domain.exceptions import (
    ConfigError,
    ControlChannelError,
    LaunchAbortedError,
    LaunchError,
    LaunchTimeoutError,
    LocalNetError,
    ProcessFailedError,
    SetupError,
)
from zcash_local_net.domain.network import ActivationHeights, NetworkUpgrade

__all__ = [
    "ZAINOD",
    "ZCASHD",
    "ActivationHeights",
    "ConfigError",
    "ControlChannelError",
    "DaemonDescriptor",
    "DaemonHandle",
    "LaunchAbortedError",
    "LaunchError",
    "LaunchTimeoutError",
    "LocalNetError",
    "NetworkUpgrade",
    "ProcessFailedError",
    "SetupError",
    "Zainod",
    "Zcashd",
    "launch_daemon",
]
