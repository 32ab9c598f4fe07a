"""Shared fixtures: an in-memory Junos device behind the Session interface."""
from typing import Optional

import pytest

from junos_provider.session.base import (
    ClientConfig,
    CommitError,
    ConfigSetError,
    LockError,
    Session,
    SessionError,
)
from junos_provider.session.client import Client

SHOW = "show configuration "
RELATIVE = " | display set relative"
DISPLAY_SET = " | display set"


class FakeJunosSession(Session):
    """Candidate/running configuration kept as statements without ``set ``.

    ``set X`` adds ``X`` to the candidate, ``delete X`` removes ``X`` and
    everything below it, commit copies the candidate to the running
    configuration and ``show configuration`` answers from the running one.
    Every call is recorded in ``calls``; the ``fail_*`` attributes inject
    errors.
    """

    def __init__(self, running: Optional[list[str]] = None):
        super().__init__("fake-junos", ClientConfig(host="192.0.2.1"))
        self.running: list[str] = list(running or [])
        self.candidate: list[str] = list(self.running)
        self.locked = False
        self.calls: list[tuple] = []
        self.commit_messages: list[str] = []
        self.commit_warnings: list[str] = []
        self.clear_warnings: list[str] = []
        self.fail_open: Optional[str] = None
        self.fail_lock: Optional[str] = None
        self.fail_set: Optional[str] = None
        self.fail_commit: Optional[str] = None
        # Statements the device silently refuses to keep
        self.ignored_prefixes: list[str] = []

    async def open(self) -> None:
        self.calls.append(("open",))
        if self.fail_open:
            raise SessionError(self.fail_open)
        self._connected = True

    async def close(self) -> None:
        self.calls.append(("close",))
        # closing the session releases its lock
        self.locked = False
        self._connected = False

    def call_names(self) -> list[str]:
        return [call[0] for call in self.calls]

    async def command(self, command: str) -> str:
        self.calls.append(("command", command))
        body = command.removeprefix(SHOW)
        if body.endswith(RELATIVE):
            path = body.removesuffix(RELATIVE)
            lines = []
            for stmt in self.running:
                if stmt == path:
                    lines.append("set")
                elif stmt.startswith(path + " "):
                    lines.append("set " + stmt[len(path) + 1:])
        else:
            path = body.removesuffix(DISPLAY_SET)
            lines = [
                "set " + stmt for stmt in self.running
                if stmt == path or stmt.startswith(path + " ")
            ]
        if not lines:
            return ""
        return "\n".join(lines) + "\n"

    async def config_set(self, lines: list[str]) -> None:
        self.calls.append(("config_set", list(lines)))
        if self.fail_set:
            raise ConfigSetError(self.fail_set)
        for line in lines:
            if line.startswith("set "):
                stmt = line[4:]
                if any(stmt.startswith(p) for p in self.ignored_prefixes):
                    continue
                if stmt not in self.candidate:
                    self.candidate.append(stmt)
            elif line.startswith("delete "):
                path = line[7:]
                self.candidate = [
                    s for s in self.candidate
                    if s != path and not s.startswith(path + " ")
                ]

    async def config_lock(self) -> None:
        self.calls.append(("config_lock",))
        if self.fail_lock:
            raise LockError(self.fail_lock)
        self.locked = True

    async def config_clear(self) -> list[str]:
        self.calls.append(("config_clear",))
        self.candidate = list(self.running)
        self.locked = False
        return list(self.clear_warnings)

    async def commit(self, message: str) -> list[str]:
        self.calls.append(("commit", message))
        if self.fail_commit:
            raise CommitError(self.fail_commit, list(self.commit_warnings))
        self.commit_messages.append(message)
        self.running = list(self.candidate)
        return list(self.commit_warnings)


@pytest.fixture
def device():
    """Fake device shared by every session of the client."""
    return FakeJunosSession()


@pytest.fixture
def client(device):
    """Client whose sessions all talk to the fake device."""
    return Client("fake-junos", device.config, session_factory=lambda: device)


@pytest.fixture
def relative_output():
    """Turn rendered set lines into the ``display set relative`` output of the object."""
    def _convert(resource, lines: list[str], *ids: str) -> str:
        prefix = resource.set_prefix(*ids)
        relative = []
        for line in lines:
            rest = line.removeprefix(prefix)
            relative.append("set" + rest if rest else "set")
        return "\n".join(relative) + "\n"
    return _convert


@pytest.fixture
def fake_session_class():
    """The fake session type, for tests that need to specialise it."""
    return FakeJunosSession
