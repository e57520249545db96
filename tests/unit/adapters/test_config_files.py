"""Unit tests for zcashd / zainod config file synthesis."""

import tomllib
from pathlib import Path

from zcash_local_net.adapters.provisioning.config_files import (
    RPC_PASSWORD,
    RPC_USER,
    ZAINOD_FILENAME,
    ZCASHD_FILENAME,
    write_zainod_config,
    write_zcashd_config,
)
from zcash_local_net.domain.network import ActivationHeights


class TestWriteZcashdConfig:
    """Tests for write_zcashd_config."""

    def test_writes_regtest_config(self, tmp_path: Path) -> None:
        """Config enables regtest on the requested RPC port."""
        path = write_zcashd_config(tmp_path, 18555, ActivationHeights())

        assert path == tmp_path / ZCASHD_FILENAME
        lines = path.read_text().splitlines()
        assert "regtest=1" in lines
        assert "rpcport=18555" in lines
        assert f"rpcuser={RPC_USER}" in lines
        assert f"rpcpassword={RPC_PASSWORD}" in lines
        assert "listen=0" in lines

    def test_writes_one_nuparams_line_per_upgrade(self, tmp_path: Path) -> None:
        heights = ActivationHeights(nu5=2, nu6=3)

        lines = write_zcashd_config(tmp_path, 18555, heights).read_text().splitlines()

        nuparams = [line for line in lines if line.startswith("nuparams=")]
        assert nuparams == [f"nuparams={p}" for p in heights.nuparams()]
        assert "nuparams=c8e71055:3" in nuparams

    def test_mining_section_only_with_miner_address(self, tmp_path: Path) -> None:
        without = write_zcashd_config(tmp_path / "a", 1, ActivationHeights()).read_text()
        with_miner = write_zcashd_config(
            tmp_path / "b", 1, ActivationHeights(), miner_address="tmTestAddress"
        ).read_text()

        assert "mineraddress" not in without
        assert "mineraddress=tmTestAddress" in with_miner.splitlines()
        assert "minetolocalwallet=0" in with_miner.splitlines()


class TestWriteZainodConfig:
    """Tests for write_zainod_config."""

    def test_writes_valid_toml(self, tmp_path: Path) -> None:
        """zindexer.toml points zainod at the validator's RPC port."""
        path = write_zainod_config(tmp_path, listen_port=9067, validator_port=18232)

        assert path == tmp_path / ZAINOD_FILENAME
        with path.open("rb") as f:
            data = tomllib.load(f)
        assert data["network"] == "Regtest"
        assert data["grpc_listen_address"] == "127.0.0.1:9067"
        assert data["validator_listen_address"] == "127.0.0.1:18232"
        assert data["validator_user"] == RPC_USER
        assert data["grpc_tls"] is False
