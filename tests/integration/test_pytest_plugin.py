"""Integration tests for the zcash_local_net pytest fixtures.

`localnet_config` is overridden here so the plugin's `zcashd` and `zainod`
fixtures launch the fake daemons.
"""

import tomllib
from pathlib import Path

import pytest

from zcash_local_net.adapters.daemon.launcher import Zainod, Zcashd
from zcash_local_net.domain.config import BinariesConfig, LaunchConfig, LocalNetConfig
from zcash_local_net.testing.pytest_plugin import _require_binary

pytestmark = pytest.mark.slow


@pytest.fixture
def localnet_config(fake_zcashd: Path, fake_zcash_cli: Path, fake_zainod: Path) -> LocalNetConfig:
    return LocalNetConfig(
        binaries=BinariesConfig(
            zcashd=str(fake_zcashd),
            zcash_cli=str(fake_zcash_cli),
            zainod=str(fake_zainod),
        ),
        launch=LaunchConfig(timeout=30.0),
    )


class TestFixtures:
    """Tests for the zcashd and zainod fixtures."""

    def test_zcashd_fixture_is_running(self, zcashd: Zcashd) -> None:
        assert zcashd.is_running()
        assert zcashd.generate_blocks(1).returncode == 0

    def test_zainod_fixture_uses_zcashd_port(self, zainod: Zainod, zcashd: Zcashd) -> None:
        with zainod.config_path().open("rb") as f:
            data = tomllib.load(f)

        assert data["validator_listen_address"] == f"127.0.0.1:{zcashd.port}"


class TestRequireBinary:
    """Tests for binary lookup in fixtures."""

    def test_missing_binary_skips(self) -> None:
        with pytest.raises(pytest.skip.Exception, match="zcash-local-net-no-such-binary"):
            _require_binary(None, "zcash-local-net-no-such-binary")

    def test_configured_path_wins(self, fake_zainod: Path) -> None:
        assert _require_binary(str(fake_zainod), "zainod") == str(fake_zainod)
