"""Session that writes configuration lines to a file instead of a device.

Used by the ``fake_create_with_setfile`` mode: resources are rendered and
their lines appended to a set file that can be loaded on the device later
(``load set <file>``).
"""
import asyncio
import logging
import os
from pathlib import Path

from .base import ClientConfig, Session, SessionError, UnsupportedOperation

logger = logging.getLogger(__name__)


class SetFileSession(Session):
    """Append-only session backed by a local file."""

    def __init__(self, device_id: str, config: ClientConfig):
        super().__init__(device_id, config)
        if not config.fake_create_with_setfile:
            raise SessionError("fake_create_with_setfile is not set")
        self.path = Path(config.fake_create_with_setfile).expanduser()

    async def open(self) -> None:
        self._connected = True

    async def close(self) -> None:
        self._connected = False

    async def config_set(self, lines: list[str]) -> None:
        if not lines:
            return
        loop = asyncio.get_event_loop()
        await loop.run_in_executor(None, self._append, lines)
        logger.debug(f"Appended {len(lines)} lines to {self.path}")

    def _append(self, lines: list[str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(
            self.path,
            os.O_WRONLY | os.O_APPEND | os.O_CREAT,
            self.config.file_permission,
        )
        with os.fdopen(fd, "a", encoding="utf-8") as f:
            f.write("".join(line + "\n" for line in lines))

    async def command(self, command: str) -> str:
        raise UnsupportedOperation(f"command '{command}' cannot run against a set file")

    async def config_lock(self) -> None:
        raise UnsupportedOperation("a set file has no candidate configuration to lock")

    async def config_clear(self) -> list[str]:
        raise UnsupportedOperation("a set file has no candidate configuration to clear")

    async def commit(self, message: str) -> list[str]:
        raise UnsupportedOperation("a set file cannot be committed")
