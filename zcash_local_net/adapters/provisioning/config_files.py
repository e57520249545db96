"""Config file synthesis for zcashd and zainod.

zcashd reads a flat `key=value` file; zainod reads TOML. Both writers follow
the ConfigWriter shape once their daemon-specific parameters are bound:
(directory, port) -> path of the written file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomli_w

from zcash_local_net.domain.network import ActivationHeights

ZCASHD_FILENAME = "zcash.conf"
ZAINOD_FILENAME = "zindexer.toml"

# Regtest RPC credentials shared by zcashd and the indexers that talk to it
RPC_USER = "xxxxxx"
RPC_PASSWORD = "xxxxxx"


def write_zcashd_config(
    config_dir: Path,
    rpc_port: int,
    activation_heights: ActivationHeights,
    miner_address: str | None = None,
) -> Path:
    """Write a regtest zcash.conf.

    Args:
        config_dir: Directory to write into
        rpc_port: Port zcashd serves RPC on
        activation_heights: Network upgrade activation heights
        miner_address: Address receiving block rewards; mining settings are
            omitted when None

    Returns:
        Path to the written config file
    """
    nuparams = "\n".join(f"nuparams={p}" for p in activation_heights.nuparams())

    template = f"""\
### Blockchain Configuration
regtest=1
{nuparams}

### MetaData Storage and Retrieval
txindex=1
insightexplorer=1
experimentalfeatures=1
lightwalletd=1

### RPC Server Interface Options
rpcuser={RPC_USER}
rpcpassword={RPC_PASSWORD}
rpcport={rpc_port}
rpcallowip=127.0.0.1

# Buried config option to allow non-canonical RPC-PORT:
listen=0
"""
    if miner_address is not None:
        template += f"""
### Mining
minetolocalwallet=0
mineraddress={miner_address}
"""

    config_dir.mkdir(parents=True, exist_ok=True)
    path = config_dir / ZCASHD_FILENAME
    with path.open("w", encoding="utf-8") as f:
        f.write(template)
    return path


def write_zainod_config(config_dir: Path, listen_port: int, validator_port: int) -> Path:
    """Write a zindexer.toml for a zainod connected to a local validator.

    Args:
        config_dir: Directory to write into
        listen_port: Port zainod serves gRPC on
        validator_port: RPC port of the running validator (zcashd)

    Returns:
        Path to the written config file
    """
    data: dict[str, Any] = {
        "network": "Regtest",
        "grpc_listen_address": f"127.0.0.1:{listen_port}",
        "grpc_tls": False,
        "validator_listen_address": f"127.0.0.1:{validator_port}",
        "validator_user": RPC_USER,
        "validator_password": RPC_PASSWORD,
        "no_sync": True,
        "no_db": True,
    }

    config_dir.mkdir(parents=True, exist_ok=True)
    path = config_dir / ZAINOD_FILENAME
    with path.open("wb") as f:
        tomli_w.dump(data, f)
    return path
