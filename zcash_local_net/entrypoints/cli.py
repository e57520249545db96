"""zcash-local-net CLI entrypoint.

Command-line interface for running local regtest daemons by hand, e.g. to
poke at a node with zcash-cli while writing an integration test.
"""

from __future__ import annotations

import logging
import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from zcash_local_net.adapters.daemon.handle import DaemonHandle
    from zcash_local_net.domain.config import LocalNetConfig

from zcash_local_net.core.errors import handle_cli_errors
from zcash_local_net.domain.network import ActivationHeights
from zcash_local_net.version import __version__

# Seconds between liveness checks while a daemon runs in the foreground
WATCH_INTERVAL = 0.5


def _configure_logging(verbose: bool, quiet: bool) -> None:
    """Set up root logging for CLI runs."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _load_config(config_path: Path | None) -> LocalNetConfig:
    """Load the effective configuration (global file plus optional override)."""
    from zcash_local_net.adapters.config.toml_config_provider import TomlConfigProvider

    return TomlConfigProvider().load(config_path)


def _parse_activation_heights(
    ctx: click.Context, param: click.Parameter, values: tuple[str, ...]
) -> ActivationHeights:
    """Parse repeated NAME=HEIGHT options into ActivationHeights."""
    heights: dict[str, int] = {}
    for value in values:
        name, sep, height = value.partition("=")
        if not sep or not height.strip().isdigit():
            raise click.BadParameter(f"expected NAME=HEIGHT, got '{value}'")
        heights[name.strip().lower()] = int(height)
    try:
        return ActivationHeights.from_mapping(heights)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


def _echo_ready(handle: DaemonHandle, quiet: bool) -> None:
    if quiet:
        return
    click.echo(f"✓ {handle.descriptor.name} ready (PID {handle.pid})")
    click.echo(f"  Port:   {handle.port}")
    click.echo(f"  Config: {handle.config_path()}")
    click.echo(f"  Log:    {handle.log_path}")


def _run_until_interrupted(handles: list[DaemonHandle], print_log: bool) -> None:
    """Block until Ctrl-C or until a daemon exits, then tear everything down.

    Handles are closed in reverse launch order so dependents stop first.
    """
    try:
        while all(handle.is_running() for handle in handles):
            time.sleep(WATCH_INTERVAL)
        for handle in handles:
            if not handle.is_running():
                click.echo(
                    f"✗ {handle.descriptor.name} exited with status "
                    f"{handle.process.returncode}",
                    err=True,
                )
    except KeyboardInterrupt:
        click.echo("\nStopping...")
    finally:
        for handle in reversed(handles):
            if print_log:
                click.echo(f"--- {handle.descriptor.name} stdout ---")
                handle.print_log()
            handle.close()


@click.group()
@click.version_option(version=__version__, prog_name="zcash-local-net")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Config file overriding the global one.",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool, config_path: Path | None) -> None:
    """zcash-local-net - Local regtest daemons for integration testing.

    Launches zcashd and zainod in throwaway directories and keeps them
    running until interrupted.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = config_path
    _configure_logging(verbose, quiet)


def _zcashd_options(func):
    """Options shared by commands that launch zcashd."""
    options = [
        click.option(
            "--zcashd-bin",
            type=click.Path(path_type=Path),
            default=None,
            help="Path to zcashd (default: config or $PATH).",
        ),
        click.option(
            "--zcash-cli-bin",
            type=click.Path(path_type=Path),
            default=None,
            help="Path to zcash-cli (default: config or $PATH).",
        ),
        click.option(
            "--rpc-port", type=int, default=None, help="Fixed RPC port (default: free port)."
        ),
        click.option(
            "--miner-address", default=None, help="Address receiving block rewards."
        ),
        click.option(
            "--activation-height",
            "activation_heights",
            multiple=True,
            callback=_parse_activation_heights,
            metavar="NAME=HEIGHT",
            help="Network upgrade activation height, e.g. nu5=10. Repeatable.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _launch_options(func):
    """Options shared by every launching command."""
    func = click.option(
        "--print-log", is_flag=True, help="Print captured stdout when stopping."
    )(func)
    func = click.option(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for readiness (default: config, else no limit).",
    )(func)
    return func


def _launch_zcashd(config: LocalNetConfig, timeout: float | None, **kwargs):
    from zcash_local_net.adapters.daemon.launcher import Zcashd

    return Zcashd.launch(
        zcashd_bin=kwargs["zcashd_bin"] or config.binaries.zcashd,
        zcash_cli_bin=kwargs["zcash_cli_bin"] or config.binaries.zcash_cli,
        rpc_port=kwargs["rpc_port"],
        activation_heights=kwargs["activation_heights"],
        miner_address=kwargs["miner_address"],
        timeout=timeout if timeout is not None else config.launch.timeout,
        poll_interval=config.launch.poll_interval,
    )


def _launch_zainod(
    config: LocalNetConfig,
    timeout: float | None,
    zainod_bin: Path | None,
    listen_port: int | None,
    validator_port: int,
):
    from zcash_local_net.adapters.daemon.launcher import Zainod

    return Zainod.launch(
        zainod_bin=zainod_bin or config.binaries.zainod,
        listen_port=listen_port,
        validator_port=validator_port,
        timeout=timeout if timeout is not None else config.launch.timeout,
        poll_interval=config.launch.poll_interval,
    )


@cli.command()
@_zcashd_options
@_launch_options
@click.pass_context
@handle_cli_errors("zcashd")
def zcashd(ctx: click.Context, timeout: float | None, print_log: bool, **kwargs) -> None:
    """Run a regtest zcashd until interrupted."""
    config = _load_config(ctx.obj["config_path"])
    quiet = ctx.obj["quiet"]

    if not quiet:
        click.echo("Starting zcashd...")
    handle = _launch_zcashd(config, timeout, **kwargs)
    _echo_ready(handle, quiet)
    _run_until_interrupted([handle], print_log)


@cli.command()
@click.option(
    "--zainod-bin",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to zainod (default: config or $PATH).",
)
@click.option("--listen-port", type=int, default=None, help="Fixed gRPC port (default: free port).")
@click.option(
    "--validator-port",
    type=int,
    default=None,
    help="RPC port of the running validator (default: config, 18232).",
)
@_launch_options
@click.pass_context
@handle_cli_errors("zainod")
def zainod(
    ctx: click.Context,
    zainod_bin: Path | None,
    listen_port: int | None,
    validator_port: int | None,
    timeout: float | None,
    print_log: bool,
) -> None:
    """Run zainod against an already running validator until interrupted."""
    config = _load_config(ctx.obj["config_path"])
    quiet = ctx.obj["quiet"]

    if not quiet:
        click.echo("Starting zainod...")
    handle = _launch_zainod(
        config,
        timeout,
        zainod_bin,
        listen_port,
        validator_port or config.launch.validator_port,
    )
    _echo_ready(handle, quiet)
    _run_until_interrupted([handle], print_log)


@cli.command()
@_zcashd_options
@click.option(
    "--zainod-bin",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to zainod (default: config or $PATH).",
)
@click.option("--listen-port", type=int, default=None, help="Fixed zainod gRPC port.")
@_launch_options
@click.pass_context
@handle_cli_errors("network")
def network(
    ctx: click.Context,
    zainod_bin: Path | None,
    listen_port: int | None,
    timeout: float | None,
    print_log: bool,
    **kwargs,
) -> None:
    """Run zcashd plus a zainod connected to it until interrupted."""
    config = _load_config(ctx.obj["config_path"])
    quiet = ctx.obj["quiet"]

    if not quiet:
        click.echo("Starting zcashd...")
    validator = _launch_zcashd(config, timeout, **kwargs)
    _echo_ready(validator, quiet)

    if not quiet:
        click.echo("Starting zainod...")
    try:
        indexer = _launch_zainod(config, timeout, zainod_bin, listen_port, validator.port)
    except BaseException:
        validator.close()
        raise
    _echo_ready(indexer, quiet)
    _run_until_interrupted([validator, indexer], print_log)


@cli.group()
def config() -> None:
    """Inspect zcash-local-net configuration."""
    pass


@config.command(name="show")
@click.pass_context
@handle_cli_errors("config show")
def config_show(ctx: click.Context) -> None:
    """Show the effective configuration as TOML."""
    import tomli_w

    from zcash_local_net.shared.config_io import config_to_data

    effective = _load_config(ctx.obj["config_path"])
    click.echo(tomli_w.dumps(config_to_data(effective)), nl=False)


@config.command(name="init")
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing config file.")
@click.pass_context
@handle_cli_errors("config init")
def config_init(ctx: click.Context, force: bool) -> None:
    """Write a config file with default values.

    Writes to the --config path if given, otherwise to the global config.
    """
    from zcash_local_net.core.errors import LocalNetCliError
    from zcash_local_net.domain.config import LocalNetConfig
    from zcash_local_net.shared.config_io import get_global_config_path, save_config

    target = ctx.obj["config_path"] or get_global_config_path()
    if target.exists() and not force:
        raise LocalNetCliError(
            f"Config already exists at {target}",
            hint="Use --force to overwrite it",
        )
    save_config(LocalNetConfig.default(), target)
    click.echo(f"✓ Wrote default config to {target}")


@config.command(name="path")
@click.pass_context
def config_path(ctx: click.Context) -> None:
    """Show the config file locations."""
    from zcash_local_net.shared.config_io import get_global_config_path

    global_path = get_global_config_path()
    status = "exists" if global_path.exists() else "not found"
    click.echo(f"Global: {global_path} ({status})")
    explicit = ctx.obj["config_path"]
    if explicit is not None:
        status = "exists" if explicit.exists() else "not found"
        click.echo(f"Override: {explicit} ({status})")


def main() -> int:
    """Main entrypoint for the CLI."""
    try:
        cli(obj={})
        return 0
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
