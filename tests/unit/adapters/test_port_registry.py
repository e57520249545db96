"""Unit tests for the port registry."""

import logging
from unittest.mock import patch

import pytest

from zcash_local_net.adapters.provisioning.ports import MAX_PICK_ATTEMPTS, PortRegistry


class TestAllocatePort:
    """Tests for PortRegistry.allocate_port."""

    def test_free_ports_are_distinct(self, port_registry: PortRegistry) -> None:
        """Ports picked for concurrent instances never collide."""
        ports = [port_registry.allocate_port() for _ in range(10)]

        assert len(set(ports)) == 10
        assert port_registry.reserved == frozenset(ports)

    def test_preferred_port_returned_as_is(self, port_registry: PortRegistry) -> None:
        assert port_registry.allocate_port(18232) == 18232
        assert 18232 in port_registry.reserved

    def test_reused_preferred_port_warns(
        self, port_registry: PortRegistry, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Fixing a port another instance holds is allowed but logged."""
        port_registry.allocate_port(20000)

        with caplog.at_level(logging.WARNING):
            assert port_registry.allocate_port(20000) == 20000

        assert "Port 20000 is already used" in caplog.text

    @pytest.mark.parametrize("port", [0, -1, 70000])
    def test_invalid_preferred_port_rejected(
        self, port_registry: PortRegistry, port: int
    ) -> None:
        with pytest.raises(ValueError, match="between 1 and 65535"):
            port_registry.allocate_port(port)

    def test_skips_os_ports_already_reserved(self, port_registry: PortRegistry) -> None:
        """An OS-assigned port that is still reserved is not handed out again."""
        port_registry.allocate_port(30001)

        with patch(
            "zcash_local_net.adapters.provisioning.ports._os_assigned_port",
            side_effect=[30001, 30002],
        ):
            assert port_registry.allocate_port() == 30002

    def test_gives_up_after_max_attempts(self, port_registry: PortRegistry) -> None:
        port_registry.allocate_port(30001)

        with patch(
            "zcash_local_net.adapters.provisioning.ports._os_assigned_port",
            return_value=30001,
        ) as mock_pick:
            with pytest.raises(OSError, match="No free port found"):
                port_registry.allocate_port()

        assert mock_pick.call_count == MAX_PICK_ATTEMPTS


class TestReleasePort:
    """Tests for PortRegistry.release_port."""

    def test_released_port_can_be_picked_again(self, port_registry: PortRegistry) -> None:
        port_registry.allocate_port(30001)
        port_registry.release_port(30001)

        assert port_registry.reserved == frozenset()
        with patch(
            "zcash_local_net.adapters.provisioning.ports._os_assigned_port",
            return_value=30001,
        ):
            assert port_registry.allocate_port() == 30001

    def test_unknown_port_ignored(self, port_registry: PortRegistry) -> None:
        port_registry.release_port(12345)
        assert port_registry.reserved == frozenset()
