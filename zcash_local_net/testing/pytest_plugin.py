"""Pytest fixtures for tests that need running regtest daemons.

Registered through the `pytest11` entry point, so installing the package is
enough to use the fixtures:

    def test_generates_blocks(zcashd):
        zcashd.generate_blocks(1)

Fixtures skip the requesting test when the daemon binary cannot be found.
"""

from __future__ import annotations

import shutil
from collections.abc import Iterator

import pytest

from zcash_local_net.adapters.config.toml_config_provider import TomlConfigProvider
from zcash_local_net.adapters.daemon.launcher import Zainod, Zcashd
from zcash_local_net.domain.config import LocalNetConfig


def _require_binary(configured: str | None, default_name: str) -> str:
    """Return the binary to run, skipping the test if it is unavailable."""
    binary = configured or default_name
    if shutil.which(binary) is None:
        pytest.skip(f"{binary} not found; install it or set it in the zcash-local-net config")
    return binary


@pytest.fixture(scope="session")
def localnet_config() -> LocalNetConfig:
    """Effective zcash-local-net configuration for the test session."""
    return TomlConfigProvider().load()


@pytest.fixture
def zcashd(localnet_config: LocalNetConfig) -> Iterator[Zcashd]:
    """A freshly launched regtest zcashd, stopped after the test."""
    binaries = localnet_config.binaries
    zcashd_bin = _require_binary(binaries.zcashd, "zcashd")
    zcash_cli_bin = _require_binary(binaries.zcash_cli, "zcash-cli")

    with Zcashd.launch(
        zcashd_bin=zcashd_bin,
        zcash_cli_bin=zcash_cli_bin,
        timeout=localnet_config.launch.timeout,
        poll_interval=localnet_config.launch.poll_interval,
    ) as handle:
        yield handle


@pytest.fixture
def zainod(localnet_config: LocalNetConfig, zcashd: Zcashd) -> Iterator[Zainod]:
    """A zainod connected to the test's zcashd, stopped after the test."""
    zainod_bin = _require_binary(localnet_config.binaries.zainod, "zainod")

    with Zainod.launch(
        zainod_bin=zainod_bin,
        validator_port=zcashd.port,
        timeout=localnet_config.launch.timeout,
        poll_interval=localnet_config.launch.poll_interval,
    ) as handle:
        yield handle
