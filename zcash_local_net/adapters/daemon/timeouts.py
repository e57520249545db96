"""Centralized timing configuration for daemon supervision.

All polling intervals and bounded waits used while launching and stopping
daemons are defined here so they can be tuned in one place.
"""


class DaemonTimeouts:
    """Timing constants for daemon supervision.

    All values are in seconds.

    Groups:
        READY_*: Waiting for a daemon to report readiness after spawn
        LOG_*: Draining the stdout copy thread
    """

    # =========================================================================
    # Readiness
    # =========================================================================

    READY_CHECK_INTERVAL: float = 0.1
    """Interval between readiness polls of the stdout log.

    Each poll first checks whether the process exited, then re-reads the log
    for the error and success markers. A daemon that prints its success
    marker is detected at most one interval later.
    """

    READY_WAIT_DEFAULT: float | None = None
    """Launch deadline used when the caller does not pass one.

    None means launch polls until the daemon reports ready, errors out, or
    exits, however long that takes. A daemon that hangs without printing a
    marker therefore blocks launch forever; pass an explicit timeout to
    bound it.
    """

    # =========================================================================
    # Log draining
    # =========================================================================

    LOG_DRAIN_WAIT: float = 5.0
    """Maximum wait for the log copy thread after the process exited.

    Once the process is gone its stdout pipe reaches EOF and the copier
    finishes almost immediately. The wait is bounded because a grandchild
    that inherited the pipe can keep it open after the daemon itself died.
    """
