"""Tests for the set file session."""
import asyncio
import os
import stat

import pytest

from junos_provider.session.base import ClientConfig, SessionError, UnsupportedOperation
from junos_provider.session.client import Client, create_session
from junos_provider.session.netconf import NetconfSession
from junos_provider.session.setfile import SetFileSession


class TestSetFileSession:
    """Tests for SetFileSession."""

    @pytest.mark.asyncio
    async def test_appends_lines(self, tmp_path):
        path = tmp_path / "sub" / "lab.set"
        config = ClientConfig(fake_create_with_setfile=str(path))
        async with SetFileSession("lab", config) as session:
            await session.config_set(["set a", "set b"])
            await session.config_set(["delete c"])
        assert path.read_text() == "set a\nset b\ndelete c\n"

    @pytest.mark.asyncio
    async def test_concurrent_batches_stay_whole(self, tmp_path):
        """Each call's lines land together while writes run off the event loop."""
        path = tmp_path / "lab.set"
        config = ClientConfig(fake_create_with_setfile=str(path))
        first = [f"set first {i}" for i in range(200)]
        second = [f"set second {i}" for i in range(200)]
        async with SetFileSession("lab", config) as a, SetFileSession("lab", config) as b:
            await asyncio.gather(a.config_set(first), b.config_set(second))
        written = path.read_text().splitlines()
        assert written in (first + second, second + first)

    @pytest.mark.asyncio
    async def test_file_permission(self, tmp_path):
        path = tmp_path / "lab.set"
        config = ClientConfig(fake_create_with_setfile=str(path), file_permission=0o600)
        old_umask = os.umask(0)
        try:
            async with SetFileSession("lab", config) as session:
                await session.config_set(["set a"])
        finally:
            os.umask(old_umask)
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    @pytest.mark.asyncio
    async def test_device_operations_unsupported(self, tmp_path):
        config = ClientConfig(fake_create_with_setfile=str(tmp_path / "lab.set"))
        session = SetFileSession("lab", config)
        with pytest.raises(UnsupportedOperation):
            await session.command("show configuration")
        with pytest.raises(UnsupportedOperation):
            await session.config_lock()
        with pytest.raises(UnsupportedOperation):
            await session.commit("msg")

    def test_requires_path(self):
        with pytest.raises(SessionError):
            SetFileSession("lab", ClientConfig())


class TestClient:
    """Tests for Client and the session factory."""

    def test_create_session_types(self, tmp_path):
        config = ClientConfig(host="192.0.2.1", fake_create_with_setfile=str(tmp_path / "x.set"))
        assert isinstance(create_session("lab", config), NetconfSession)
        assert isinstance(create_session("lab", config, "setfile"), SetFileSession)

    def test_unknown_session_type(self):
        with pytest.raises(ValueError):
            create_session("lab", ClientConfig(), "telnet")

    def test_fake_flags(self, tmp_path):
        """Update and delete flags only count with a set file."""
        assert not Client("lab", ClientConfig(fake_update_also=True)).fake_update()
        client = Client("lab", ClientConfig(
            fake_create_with_setfile=str(tmp_path / "x.set"),
            fake_update_also=True,
        ))
        assert client.fake_create()
        assert client.fake_update()
        assert not client.fake_delete()

    def test_repr(self):
        assert repr(Client("lab", ClientConfig(host="192.0.2.1"))) == "Client(lab, 192.0.2.1:830)"
