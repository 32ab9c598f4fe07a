"""Sessions to Junos devices."""
from .base import (
    ClientConfig,
    CommitError,
    ConfigSetError,
    LockError,
    Session,
    SessionError,
    SystemInformation,
    UnsupportedOperation,
)
from .client import Client, SESSION_TYPES, create_session
from .netconf import NetconfSession
from .setfile import SetFileSession

__all__ = [
    "Client",
    "ClientConfig",
    "CommitError",
    "ConfigSetError",
    "LockError",
    "NetconfSession",
    "Session",
    "SessionError",
    "SESSION_TYPES",
    "SetFileSession",
    "SystemInformation",
    "UnsupportedOperation",
    "create_session",
]
