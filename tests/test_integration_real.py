"""Real device integration tests.

These tests change the configuration of an actual Junos device.
Skip in CI - only run manually against a lab device.

Run with: JUNOS_HOST=192.0.2.1 JUNOS_PASSWORD=... pytest tests/test_integration_real.py -v -s
"""
import os
import socket

import pytest

from junos_provider.engine.orchestrator import ResourceOrchestrator
from junos_provider.resources import NtpServer, PrefixList
from junos_provider.session.base import ClientConfig
from junos_provider.session.client import Client


def can_reach_device() -> bool:
    """Check if the NETCONF port of JUNOS_HOST answers."""
    host = os.environ.get("JUNOS_HOST")
    if not host:
        return False
    try:
        with socket.create_connection((host, int(os.environ.get("JUNOS_PORT", "830"))), timeout=2):
            return True
    except OSError:
        return False


pytestmark = pytest.mark.skipif(not can_reach_device(), reason="Junos device not reachable")


@pytest.fixture
def orchestrator():
    config, warnings = ClientConfig.from_settings()
    assert warnings == []
    return ResourceOrchestrator(Client(config.host, config))


class TestNtpServerReal:
    """NTP server lifecycle on a real device."""

    @pytest.mark.asyncio
    async def test_lifecycle(self, orchestrator):
        resource = NtpServer()
        created = await orchestrator.create(resource, {"address": "192.0.2.123", "version": 4})
        assert created.success, created.to_dict()
        try:
            read = await orchestrator.read(resource, created.id)
            assert read.state["version"] == 4
            print(f"\nRead back: {read.state}")

            updated = await orchestrator.update(resource, {"address": "192.0.2.123", "prefer": True})
            assert updated.success, updated.to_dict()
            assert updated.state["prefer"] is True
            assert updated.state["version"] == 0
        finally:
            deleted = await orchestrator.delete(resource, created.id)
            assert deleted.success, deleted.to_dict()


class TestPrefixListReal:
    """Prefix list lifecycle on a real device."""

    @pytest.mark.asyncio
    async def test_create_import_delete(self, orchestrator):
        resource = PrefixList()
        created = await orchestrator.create(
            resource,
            {"name": "junos-provider-test", "prefix": ["192.0.2.0/25", "192.0.2.128/25"]},
        )
        assert created.success, created.to_dict()
        try:
            imported = await orchestrator.import_resource(resource, "junos-provider-test")
            assert imported.state["prefix"] == ["192.0.2.0/25", "192.0.2.128/25"]
        finally:
            deleted = await orchestrator.delete(resource, "junos-provider-test")
            assert deleted.success, deleted.to_dict()
