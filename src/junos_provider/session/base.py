"""Base session abstraction for Junos devices."""
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)


# Environment fallback for every client setting left unset
ENV_VARS = {
    "host": "JUNOS_HOST",
    "port": "JUNOS_PORT",
    "username": "JUNOS_USERNAME",
    "password": "JUNOS_PASSWORD",
    "sshkey_pem": "JUNOS_KEYPEM",
    "sshkeyfile": "JUNOS_KEYFILE",
    "keypass": "JUNOS_KEYPASS",
    "cmd_sleep_short": "JUNOS_SLEEP_SHORT",
    "cmd_sleep_lock": "JUNOS_SLEEP_LOCK",
    "commit_confirmed": "JUNOS_COMMIT_CONFIRMED",
    "commit_confirmed_wait_percent": "JUNOS_COMMIT_CONFIRMED_WAIT_PERCENT",
    "ssh_sleep_closed": "JUNOS_SLEEP_SSH_CLOSED",
    "ssh_timeout_to_establish": "JUNOS_SSH_TIMEOUT_TO_ESTABLISH",
    "ssh_retry_to_establish": "JUNOS_SSH_RETRY_TO_ESTABLISH",
    "file_permission": "JUNOS_FILE_PERMISSION",
    "debug_netconf_log_path": "JUNOS_LOG_PATH",
    "fake_create_with_setfile": "JUNOS_FAKECREATE_SETFILE",
    "fake_update_also": "JUNOS_FAKEUPDATE_ALSO",
    "fake_delete_also": "JUNOS_FAKEDELETE_ALSO",
}

# Integer settings and their accepted (min, max)
INT_RANGES = {
    "port": (1, 65535),
    "cmd_sleep_short": (0, None),
    "cmd_sleep_lock": (0, None),
    "lock_timeout": (0, None),
    "commit_confirmed": (0, 65535),
    "commit_confirmed_wait_percent": (0, 99),
    "ssh_sleep_closed": (0, None),
    "ssh_timeout_to_establish": (0, None),
    "ssh_retry_to_establish": (1, 10),
}

BOOL_SETTINGS = {"fake_update_also", "fake_delete_also"}


class SessionError(Exception):
    """Error talking to a Junos device."""
    pass


class ConfigSetError(SessionError):
    """Device rejected a set/delete batch."""
    pass


class CommitError(SessionError):
    """Device rejected a commit.

    ``warnings`` keeps the non-fatal messages the device sent before the failure.
    """

    def __init__(self, message: str, warnings: Optional[list[str]] = None):
        super().__init__(message)
        self.warnings = list(warnings or [])


class LockError(SessionError):
    """Candidate configuration could not be locked."""
    pass


class UnsupportedOperation(SessionError):
    """Operation not available on this kind of session."""
    pass


def parse_bool(value: Any) -> bool:
    """Parse booleans the way environment variables spell them."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("1", "t", "true", "yes", "on"):
        return True
    if text in ("0", "f", "false", "no", "off", ""):
        return False
    raise ValueError(f"invalid boolean '{value}'")


def _convert_setting(name: str, value: Any) -> Any:
    if name in INT_RANGES:
        number = int(value)
        low, high = INT_RANGES[name]
        if number < low or (high is not None and number > high):
            bounds = f"{low}-{high}" if high is not None else f">= {low}"
            raise ValueError(f"{number} out of range ({bounds})")
        return number
    if name in BOOL_SETTINGS:
        return parse_bool(value)
    if name == "file_permission":
        return int(value, 8) if isinstance(value, str) else int(value)
    return str(value)


@dataclass
class ClientConfig:
    """Connection and behaviour settings for a Junos device."""
    host: str = ""
    port: int = 830
    username: str = "netconf"
    password: Optional[str] = None
    sshkey_pem: Optional[str] = None
    sshkeyfile: Optional[str] = None
    keypass: Optional[str] = None
    cmd_sleep_short: int = 100  # milliseconds
    cmd_sleep_lock: int = 10  # seconds
    lock_timeout: int = 1200  # seconds, 0 waits forever
    commit_confirmed: int = 0  # minutes, 0 disables commit confirmed
    commit_confirmed_wait_percent: int = 90
    ssh_sleep_closed: int = 0  # seconds
    ssh_timeout_to_establish: int = 0  # seconds, 0 keeps the library default
    ssh_retry_to_establish: int = 1
    file_permission: int = 0o644
    debug_netconf_log_path: Optional[str] = None
    fake_create_with_setfile: Optional[str] = None
    fake_update_also: bool = False
    fake_delete_also: bool = False

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Mapping[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> tuple["ClientConfig", list[str]]:
        """Build a config from explicit settings with environment fallback.

        Explicit settings win over ``JUNOS_*`` environment variables, which
        win over the defaults. A value that cannot be used is reported as a
        warning and the default is kept.

        Args:
            settings: Mapping of setting name to value (e.g. a YAML device entry)
            environ: Environment mapping, ``os.environ`` when omitted

        Returns:
            Tuple of (config, warnings)

        Raises:
            ValueError: On setting names the client does not know
        """
        settings = dict(settings or {})
        environ = os.environ if environ is None else environ
        known = {f.name for f in fields(cls)}
        unknown = set(settings) - known
        if unknown:
            raise ValueError(f"Unknown client settings: {', '.join(sorted(unknown))}")

        values: dict[str, Any] = {}
        warnings: list[str] = []
        for f in fields(cls):
            raw = settings.get(f.name)
            source = f.name
            env_name = ENV_VARS.get(f.name)
            if raw is None and env_name and environ.get(env_name):
                raw = environ[env_name]
                source = env_name
            if raw is None:
                continue
            try:
                values[f.name] = _convert_setting(f.name, raw)
            except (TypeError, ValueError) as e:
                warnings.append(f"Bad value in {source}: {e}, so the value is not used")

        return cls(**values), warnings

    @property
    def commit_confirmed_wait(self) -> float:
        """Seconds to wait between commit confirmed and its confirmation."""
        return self.commit_confirmed * 60 * self.commit_confirmed_wait_percent / 100

    def fake_create(self) -> bool:
        return bool(self.fake_create_with_setfile)

    def fake_update(self) -> bool:
        return self.fake_create() and self.fake_update_also

    def fake_delete(self) -> bool:
        return self.fake_create() and self.fake_delete_also


@dataclass
class SystemInformation:
    """Facts gathered from ``get-system-information``."""
    hardware_model: str = ""
    os_name: str = ""
    os_version: str = ""
    serial_number: str = ""
    host_name: str = ""
    cluster_node: bool = False


class Session(ABC):
    """Abstract base class for a configuration session on a Junos device."""

    def __init__(self, device_id: str, config: ClientConfig):
        self.device_id = device_id
        self.config = config
        self._connected = False
        self.system_information = SystemInformation()

    @property
    def host(self) -> str:
        return self.config.host

    @property
    def is_connected(self) -> bool:
        return self._connected

    # Connection management
    @abstractmethod
    async def open(self) -> None:
        """Establish the session."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the session."""
        pass

    # Read
    @abstractmethod
    async def command(self, command: str) -> str:
        """Run an operational command such as ``show configuration ...``.

        Returns:
            The text output, or an empty string when the device has nothing to show
        """
        pass

    # Candidate configuration
    @abstractmethod
    async def config_set(self, lines: list[str]) -> None:
        """Load ``set``/``delete`` lines into the candidate configuration.

        Raises:
            ConfigSetError: If the device reports any error for the batch
        """
        pass

    @abstractmethod
    async def config_lock(self) -> None:
        """Take the exclusive lock on the candidate configuration.

        Raises:
            LockError: If the lock is still held elsewhere when the wait expires
        """
        pass

    @abstractmethod
    async def config_clear(self) -> list[str]:
        """Discard the uncommitted candidate and release the lock.

        Returns:
            Problems met while clearing, as warning messages
        """
        pass

    @abstractmethod
    async def commit(self, message: str) -> list[str]:
        """Commit the candidate configuration with a log message.

        Returns:
            Non-fatal warnings reported by the device

        Raises:
            CommitError: If the device reports an error
        """
        pass

    async def __aenter__(self):
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False
