"""Per-device client: settings, session factory and the read lock."""
import asyncio
import logging
from typing import Callable, Optional

from .base import ClientConfig, Session
from .netconf import NetconfSession
from .setfile import SetFileSession

logger = logging.getLogger(__name__)

# Session type registry
SESSION_TYPES: dict[str, type[Session]] = {
    "netconf": NetconfSession,
    "setfile": SetFileSession,
}


def create_session(device_id: str, config: ClientConfig, session_type: str = "netconf") -> Session:
    """Factory function to create session instances."""
    session_type = session_type.lower()
    if session_type not in SESSION_TYPES:
        raise ValueError(f"Unknown session type: {session_type}")
    return SESSION_TYPES[session_type](device_id, config)


class Client:
    """Entry point for talking to one Junos device.

    Every resource operation opens its own session. The client only carries
    what those sessions share: the settings and the lock that serialises the
    read-and-decode phase of concurrent operations.
    """

    def __init__(
        self,
        device_id: str,
        config: ClientConfig,
        session_type: str = "netconf",
        session_factory: Optional[Callable[[], Session]] = None,
    ):
        self.device_id = device_id
        self.config = config
        self.session_type = session_type
        self._session_factory = session_factory
        self.read_lock = asyncio.Lock()

    def new_session(self) -> Session:
        """Create an unopened session (use it with ``async with``)."""
        if self._session_factory is not None:
            return self._session_factory()
        return create_session(self.device_id, self.config, self.session_type)

    def setfile_session(self) -> SetFileSession:
        """Session appending lines to ``fake_create_with_setfile``."""
        return SetFileSession(self.device_id, self.config)

    def fake_create(self) -> bool:
        return self.config.fake_create()

    def fake_update(self) -> bool:
        return self.config.fake_update()

    def fake_delete(self) -> bool:
        return self.config.fake_delete()

    def __repr__(self) -> str:
        return f"Client({self.device_id}, {self.config.host}:{self.config.port})"
