"""Pytest configuration and shared fixtures.

Daemons are replaced by small executable Python scripts that mimic the
output and control behaviour of zcashd, zcash-cli and zainod, so the whole
launch/stop machinery runs against real processes without the real binaries.
"""

import stat
import sys
import textwrap
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from zcash_local_net.adapters.daemon.descriptors import DaemonDescriptor
from zcash_local_net.adapters.provisioning.ports import PortRegistry
from zcash_local_net.shared.config_io import CONFIG_ENV_VAR

# ============================================================================
# Config Isolation
# ============================================================================
# Point the global config at a path that does not exist so a developer's own
# ~/.config/zcash-local-net/config.toml never leaks into test runs.


@pytest.fixture(autouse=True)
def isolated_global_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirect the global config file into the test's tmp_path."""
    path = tmp_path / "global-config" / "config.toml"
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
    return path


# ============================================================================
# Fake Daemon Scripts
# ============================================================================
# Scripts are written with the running interpreter in their shebang so they
# can be spawned directly, exactly like a daemon binary.

FAKE_ZCASHD = """\
import os
import sys
import time

conf = next(a.split("=", 1)[1] for a in sys.argv[1:] if a.startswith("--conf="))
with open(os.path.join(os.path.dirname(conf), "daemon.pid"), "w") as f:
    f.write(str(os.getpid()))

print("Zcash version v6.0.0", flush=True)
print("init message: Loading block index...", flush=True)
print("init message: Done loading", flush=True)
while True:
    time.sleep(0.1)
"""

FAKE_ZCASH_CLI = """\
import json
import os
import signal
import sys

conf = sys.argv[1].split("=", 1)[1]
args = sys.argv[2:]

if args == ["stop"]:
    with open(os.path.join(os.path.dirname(conf), "daemon.pid")) as f:
        os.kill(int(f.read()), signal.SIGTERM)
    print("Zcash server stopping")
elif args[:1] == ["generate"]:
    print(json.dumps([format(i, "064x") for i in range(int(args[1]))]))
else:
    print("error: unknown command: " + " ".join(args), file=sys.stderr)
    sys.exit(1)
"""

FAKE_ZAINOD = """\
import sys
import time

print("Starting Zaino indexer", flush=True)
print("Server Ready.", flush=True)
while True:
    time.sleep(0.1)
"""


def write_script(path: Path, body: str) -> Path:
    """Write an executable Python script run by the current interpreter.

    Args:
        path: Destination of the script.
        body: Python source; dedented before writing.

    Returns:
        The script path.
    """
    path.write_text(f"#!{sys.executable}\n{textwrap.dedent(body)}")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def script_factory(tmp_path: Path) -> Callable[[str, str], Path]:
    """Factory writing executable scripts into a bin/ directory."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(exist_ok=True)

    def factory(name: str, body: str) -> Path:
        return write_script(bin_dir / name, body)

    return factory


@pytest.fixture
def fake_zcashd(script_factory: Callable[[str, str], Path]) -> Path:
    """zcashd stand-in that reports ready and records its PID next to its config."""
    return script_factory("zcashd", FAKE_ZCASHD)


@pytest.fixture
def fake_zcash_cli(script_factory: Callable[[str, str], Path]) -> Path:
    """zcash-cli stand-in supporting `stop` and `generate N`."""
    return script_factory("zcash-cli", FAKE_ZCASH_CLI)


@pytest.fixture
def fake_zainod(script_factory: Callable[[str, str], Path]) -> Path:
    """zainod stand-in that reports ready and runs until killed."""
    return script_factory("zainod", FAKE_ZAINOD)


# ============================================================================
# Launch Helpers
# ============================================================================


@pytest.fixture
def port_registry() -> PortRegistry:
    """A fresh port registry, isolated from the process-wide one."""
    return PortRegistry()


@pytest.fixture
def fake_descriptor() -> DaemonDescriptor:
    """Descriptor for a generic daemon without control channel."""
    return DaemonDescriptor(
        name="fakenode",
        default_binary="fakenode",
        build_args=lambda config_path, data_dir: ["--config", str(config_path)],
        success_marker="Server Ready.",
        config_filename="fakenode.conf",
    )


def write_fake_config(config_dir: Path, port: int) -> Path:
    """ConfigWriter producing a one-line config for fake daemons."""
    path = config_dir / "fakenode.conf"
    path.write_text(f"port={port}\n")
    return path


@pytest.fixture
def reap_processes() -> Iterator[list]:
    """Collect stray processes (e.g. from aborted launches) and kill them on teardown."""
    processes: list = []
    yield processes
    for process in processes:
        if process.poll() is None:
            process.kill()
        process.wait()
        for stream in (process.stdout, process.stderr):
            if stream is not None:
                stream.close()
