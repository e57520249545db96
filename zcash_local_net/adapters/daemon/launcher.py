"""Launching daemons and the daemon-specific handles.

launch_daemon() runs the full launch sequence for any DaemonDescriptor:

1. Create the instance directories
2. Reserve a port (caller-fixed or free)
3. Write the config file
4. Spawn the daemon and start copying its stdout to the log
5. Block until the readiness monitor resolves the outcome
6. Return a handle (ready) or raise a LaunchError (anything else)

Zcashd and Zainod wrap it with each daemon's own parameters.
"""

from __future__ import annotations

import functools
import logging
import subprocess
from pathlib import Path
from typing import TypeVar

from zcash_local_net.adapters.control.cli_channel import CliControlChannel
from zcash_local_net.adapters.daemon.descriptors import ZAINOD, ZCASHD, DaemonDescriptor
from zcash_local_net.adapters.daemon.handle import DaemonHandle
from zcash_local_net.adapters.daemon.readiness import ReadinessMonitor
from zcash_local_net.adapters.daemon.supervisor import ProcessSupervisor
from zcash_local_net.adapters.daemon.timeouts import DaemonTimeouts
from zcash_local_net.adapters.provisioning.config_files import (
    write_zainod_config,
    write_zcashd_config,
)
from zcash_local_net.adapters.provisioning.ports import default_port_registry
from zcash_local_net.adapters.provisioning.workspace import InstanceDirectories
from zcash_local_net.domain.exceptions import (
    LaunchAbortedError,
    LaunchTimeoutError,
    ProcessFailedError,
    SetupError,
)
from zcash_local_net.domain.network import ActivationHeights
from zcash_local_net.domain.outcome import Failed, Ready, TimedOut
from zcash_local_net.ports.control import ControlChannel
from zcash_local_net.ports.provisioner import ConfigWriter, PortAllocator

logger = logging.getLogger(__name__)

H = TypeVar("H", bound=DaemonHandle)

DEFAULT_VALIDATOR_PORT = 18232


def launch_daemon(
    descriptor: DaemonDescriptor,
    config_writer: ConfigWriter,
    *,
    binary: Path | str | None = None,
    control_binary: Path | str | None = None,
    fixed_port: int | None = None,
    timeout: float | None = DaemonTimeouts.READY_WAIT_DEFAULT,
    poll_interval: float = DaemonTimeouts.READY_CHECK_INTERVAL,
    port_allocator: PortAllocator | None = None,
    control_channel: ControlChannel | None = None,
    handle_class: type[H] = DaemonHandle,
) -> H:
    """Launch a daemon and wait until it is ready.

    Args:
        descriptor: Daemon type to launch
        config_writer: Writes the config file for (directory, port)
        binary: Daemon binary (default: descriptor's name on $PATH)
        control_binary: Control CLI binary (default: descriptor's name on $PATH)
        fixed_port: Port to use instead of picking a free one
        timeout: Seconds to wait for readiness, or None to wait indefinitely
        poll_interval: Seconds between readiness polls
        port_allocator: Port allocator (default: process-wide registry)
        control_channel: Control channel to use instead of the CLI binary
        handle_class: DaemonHandle subclass to return

    Returns:
        Handle to the ready daemon

    Raises:
        SetupError: If provisioning or spawning fails
        ProcessFailedError: If the daemon exits before it is ready
        LaunchAbortedError: If the daemon prints an error marker while running
        LaunchTimeoutError: If `timeout` passes first (the daemon is killed)
    """
    name = descriptor.name
    allocator = port_allocator or default_port_registry

    try:
        directories = InstanceDirectories.create(descriptor.needs_data_dir)
    except OSError as e:
        raise SetupError(f"Failed to create directories for {name}: {e}") from e

    try:
        port = allocator.allocate_port(fixed_port)
    except (OSError, ValueError) as e:
        directories.cleanup()
        raise SetupError(f"Failed to allocate a port for {name}: {e}") from e

    release_port = functools.partial(allocator.release_port, port)

    def abandon() -> None:
        release_port()
        directories.cleanup()

    supervisor = ProcessSupervisor(descriptor, binary)
    try:
        config_path = config_writer(directories.config_dir, port)
        process = supervisor.spawn(config_path, directories.data_dir)
    except SetupError:
        abandon()
        raise
    except (OSError, ValueError) as e:
        abandon()
        raise SetupError(f"Failed to write {name} config: {e}") from e

    monitor = ReadinessMonitor(descriptor, poll_interval)
    copier = None
    try:
        copier = monitor.start_log_capture(process, directories.log_path)
        outcome = monitor.wait_for_outcome(process, copier, timeout)
    except BaseException:
        # Interrupted (e.g. Ctrl-C) or broken while waiting: nothing may outlive us
        logger.error(f"{name} launch interrupted, killing PID {process.pid}")
        supervisor.kill(process)
        if copier is not None:
            copier.join(DaemonTimeouts.LOG_DRAIN_WAIT)
        elif process.stdout is not None:
            process.stdout.close()
        if process.stderr is not None:
            process.stderr.close()
        abandon()
        raise

    if isinstance(outcome, Ready):
        if control_channel is None and descriptor.has_control_channel:
            control_channel = CliControlChannel(control_binary or descriptor.control_binary)
        logger.info(f"{name} ready on port {port} (PID {process.pid})")
        return handle_class(
            descriptor=descriptor,
            supervisor=supervisor,
            process=process,
            port=port,
            directories=directories,
            copier=copier,
            channel=control_channel,
            release_port=release_port,
        )

    if isinstance(outcome, Failed):
        if process.stderr is not None:
            process.stderr.close()
        abandon()
        raise ProcessFailedError(
            process_name=name,
            exit_status=outcome.exit_status,
            stdout=outcome.stdout,
            stderr=outcome.stderr,
        )

    if isinstance(outcome, TimedOut):
        logger.warning(f"{name} not ready after {timeout}s, killing it")
        supervisor.kill(process)
        copier.join(DaemonTimeouts.LOG_DRAIN_WAIT)
        if process.stderr is not None:
            process.stderr.close()
        abandon()
        raise LaunchTimeoutError(name, timeout, outcome.stdout)

    logger.error(f"{name} reported an error during launch (PID {process.pid} left running)")
    raise LaunchAbortedError(
        process_name=name,
        pid=process.pid,
        stdout=outcome.stdout,
        log_path=directories.log_path,
        process=process,
        resources=directories,
        release_port=release_port,
    )


class Zcashd(DaemonHandle):
    """A running zcashd full node on regtest."""

    @classmethod
    def launch(
        cls,
        zcashd_bin: Path | str | None = None,
        zcash_cli_bin: Path | str | None = None,
        rpc_port: int | None = None,
        activation_heights: ActivationHeights | None = None,
        miner_address: str | None = None,
        timeout: float | None = DaemonTimeouts.READY_WAIT_DEFAULT,
        poll_interval: float = DaemonTimeouts.READY_CHECK_INTERVAL,
    ) -> Zcashd:
        """Launch zcashd and wait for "init message: Done loading".

        If the binaries are on $PATH, `zcashd_bin` and `zcash_cli_bin` can be
        left as None to run "zcashd" / "zcash-cli".

        Args:
            zcashd_bin: Path to zcashd
            zcash_cli_bin: Path to zcash-cli
            rpc_port: Fixed RPC port; a free port is picked when None
            activation_heights: Network upgrade activation heights
                (default: everything active from block 1)
            miner_address: Target address for block rewards of generated blocks
            timeout: Seconds to wait for readiness, or None to wait indefinitely
            poll_interval: Seconds between readiness polls

        Returns:
            Handle to the running zcashd

        Raises:
            LaunchError: If zcashd could not be brought up
        """
        heights = activation_heights or ActivationHeights()

        def write_config(config_dir: Path, port: int) -> Path:
            return write_zcashd_config(config_dir, port, heights, miner_address)

        return launch_daemon(
            ZCASHD,
            write_config,
            binary=zcashd_bin,
            control_binary=zcash_cli_bin,
            fixed_port=rpc_port,
            timeout=timeout,
            poll_interval=poll_interval,
            handle_class=cls,
        )

    @classmethod
    def default(cls) -> Zcashd:
        """Launch zcashd from $PATH with default settings."""
        return cls.launch()

    def zcash_cli_command(self, args: list[str]) -> subprocess.CompletedProcess[bytes]:
        """Run a zcash-cli command with the given `args`."""
        return self.control_channel_command(args)

    def generate_blocks(self, num_blocks: int) -> subprocess.CompletedProcess[bytes]:
        """Generate `num_blocks` blocks.

        The count is passed through unchecked; zcash-cli reports invalid
        values in the returned result.

        Returns:
            CompletedProcess of the `generate` call; its stdout holds the
            JSON list of new block hashes.
        """
        return self.control_channel_command(["generate", str(num_blocks)])


class Zainod(DaemonHandle):
    """A running zainod indexer.

    zainod has no control channel; stop() kills it.
    """

    @classmethod
    def launch(
        cls,
        zainod_bin: Path | str | None = None,
        listen_port: int | None = None,
        validator_port: int = DEFAULT_VALIDATOR_PORT,
        timeout: float | None = DaemonTimeouts.READY_WAIT_DEFAULT,
        poll_interval: float = DaemonTimeouts.READY_CHECK_INTERVAL,
    ) -> Zainod:
        """Launch zainod and wait for "Server Ready.".

        The validator must already be running on `validator_port`.

        Args:
            zainod_bin: Path to zainod (default: "zainod" on $PATH)
            listen_port: Fixed gRPC port; a free port is picked when None
            validator_port: RPC port of the running validator
            timeout: Seconds to wait for readiness, or None to wait indefinitely
            poll_interval: Seconds between readiness polls

        Returns:
            Handle to the running zainod

        Raises:
            LaunchError: If zainod could not be brought up
        """

        def write_config(config_dir: Path, port: int) -> Path:
            return write_zainod_config(config_dir, port, validator_port)

        return launch_daemon(
            ZAINOD,
            write_config,
            binary=zainod_bin,
            fixed_port=listen_port,
            timeout=timeout,
            poll_interval=poll_interval,
            handle_class=cls,
        )

    @classmethod
    def default(cls) -> Zainod:
        """Launch zainod from $PATH against a validator on the default port."""
        return cls.launch()
