"""NETCONF session handler for Junos devices.

Uses ncclient with the junos device handler. ncclient is blocking, so every
exchange runs in the default executor.

Supports:
- Password or SSH key authentication (key file or PEM content)
- Text commands (``show configuration ... | display set``)
- Loading ``set``/``delete`` lines into the candidate configuration
- Candidate lock/unlock, discard, commit and commit confirmed
"""
import asyncio
import logging
import os
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

import paramiko
from lxml import etree
from ncclient import manager, NCClientError
from ncclient.operations import RaiseMode
from ncclient.xml_ import to_ele

from .base import (
    ClientConfig,
    CommitError,
    ConfigSetError,
    LockError,
    Session,
    SessionError,
    SystemInformation,
)
from ..utils.connection import with_retry
from ..utils.logging_config import setup_netconf_debug_log, timed

logger = logging.getLogger(__name__)

ERROR_SEVERITY = "error"

RPC_LOCK_CANDIDATE = "<lock><target><candidate/></target></lock>"
RPC_UNLOCK_CANDIDATE = "<unlock><target><candidate/></target></unlock>"
RPC_CLEAR_CANDIDATE = "<delete-config><target><candidate/></target></delete-config>"
RPC_GET_SYSTEM_INFORMATION = "<get-system-information/>"
RPC_COMMIT_CHECK = "<commit-configuration><check/></commit-configuration>"


@dataclass
class RPCErrorInfo:
    """One ``rpc-error`` found in a reply."""
    severity: str
    message: str
    bad_element: str = ""

    def __str__(self) -> str:
        text = f"netconf rpc [{self.severity}] '{self.message}'"
        if self.bad_element:
            text += f" (bad element: {self.bad_element})"
        return text


def _local(root: etree._Element, name: str) -> list:
    return root.xpath(f".//*[local-name()='{name}']")


def _child_text(element: etree._Element, name: str) -> str:
    found = _local(element, name)
    if not found or found[0].text is None:
        return ""
    return found[0].text.strip()


def reply_root(reply) -> etree._Element:
    """Return the ``rpc-reply`` element of an ncclient reply object."""
    raw = getattr(reply, "data_xml", None) or getattr(reply, "xml", None) or str(reply)
    if isinstance(raw, str):
        raw = raw.encode()
    return etree.fromstring(raw, parser=etree.XMLParser(huge_tree=True))


def rpc_errors(root: etree._Element) -> list[RPCErrorInfo]:
    """Collect every ``rpc-error``, including those nested in ``commit-results``."""
    errors = []
    for node in _local(root, "rpc-error"):
        errors.append(RPCErrorInfo(
            severity=_child_text(node, "error-severity") or ERROR_SEVERITY,
            message=_child_text(node, "error-message"),
            bad_element=_child_text(node, "bad-element"),
        ))
    return errors


def commit_reply_warnings(root: etree._Element, commit_type: str) -> list[str]:
    """Split commit reply errors into a failure or a list of warnings.

    Raises:
        CommitError: If any ``rpc-error`` has the ``error`` severity
    """
    warnings = []
    failures = []
    for err in rpc_errors(root):
        if err.severity == ERROR_SEVERITY:
            failures.append(str(err))
        else:
            warnings.append(str(err))
    if failures:
        raise CommitError(f"{commit_type}: " + "\n".join(failures), warnings)
    return warnings


def command_rpc(command: str) -> etree._Element:
    element = etree.Element("command", format="text")
    element.text = command
    return element


def load_set_rpc(lines: list[str]) -> etree._Element:
    element = etree.Element("load-configuration", action="set", format="text")
    etree.SubElement(element, "configuration-set").text = "\n".join(lines)
    return element


def commit_rpc(message: str, confirm_timeout: int = 0) -> etree._Element:
    element = etree.Element("commit-configuration")
    if confirm_timeout > 0:
        etree.SubElement(element, "confirmed")
        etree.SubElement(element, "confirm-timeout").text = str(confirm_timeout)
    etree.SubElement(element, "log").text = message
    return element


class NetconfSession(Session):
    """Junos NETCONF session over SSH."""

    def __init__(self, device_id: str, config: ClientConfig):
        super().__init__(device_id, config)
        self._manager = None
        self._trace: Optional[logging.Logger] = None
        if config.debug_netconf_log_path:
            self._trace = setup_netconf_debug_log(
                config.debug_netconf_log_path, config.file_permission
            )

    @timed("netconf_open")
    async def open(self) -> None:
        """Connect, retrying up to ``ssh_retry_to_establish`` times."""
        logger.info(f"Opening NETCONF session to {self.device_id} at {self.host}:{self.config.port}")

        connect = with_retry(
            max_attempts=self.config.ssh_retry_to_establish,
            min_wait=1,
            max_wait=10,
            increment=1,
        )(self._connect)
        try:
            self._manager = await connect()
        except (NCClientError, OSError, paramiko.SSHException) as e:
            raise SessionError(f"connecting to {self.host}:{self.config.port}: {e}") from e
        self._connected = True
        await self._gather_facts()
        logger.info(
            f"Connected to {self.device_id} "
            f"({self.system_information.hardware_model} {self.system_information.os_version})"
        )

    @contextmanager
    def _key_filename(self) -> Iterator[Optional[str]]:
        """Yield a key file path, writing PEM content to a private temp file."""
        if self.config.sshkey_pem:
            fd, path = tempfile.mkstemp(prefix="junos-provider-key-")
            try:
                with os.fdopen(fd, "w") as f:
                    f.write(self.config.sshkey_pem)
                yield path
            finally:
                os.unlink(path)
        elif self.config.sshkeyfile:
            yield os.path.expanduser(self.config.sshkeyfile)
        else:
            yield None

    async def _connect(self):
        loop = asyncio.get_event_loop()

        def _open():
            with self._key_filename() as key_filename:
                # ncclient uses the password as passphrase when a key is given
                password = self.config.password
                if key_filename and self.config.keypass:
                    password = self.config.keypass
                kwargs = dict(
                    host=self.host,
                    port=self.config.port,
                    username=self.config.username,
                    password=password,
                    key_filename=key_filename,
                    hostkey_verify=False,
                    allow_agent=False,
                    look_for_keys=False,
                    device_params={"name": "junos"},
                )
                if self.config.ssh_timeout_to_establish > 0:
                    kwargs["timeout"] = self.config.ssh_timeout_to_establish
                conn = manager.connect(**kwargs)
            # rpc-error elements are inspected per call, never raised
            conn.raise_mode = RaiseMode.NONE
            return conn

        return await loop.run_in_executor(None, _open)

    async def _gather_facts(self) -> None:
        root = await self._rpc(to_ele(RPC_GET_SYSTEM_INFORMATION), "get-system-information")
        errors = rpc_errors(root)
        if errors:
            raise SessionError("\n".join(str(e) for e in errors))
        self.system_information = SystemInformation(
            hardware_model=_child_text(root, "hardware-model"),
            os_name=_child_text(root, "os-name"),
            os_version=_child_text(root, "os-version"),
            serial_number=_child_text(root, "serial-number"),
            host_name=_child_text(root, "host-name"),
            cluster_node=bool(_local(root, "cluster-node")),
        )

    async def close(self) -> None:
        """Send close-session and drop the transport."""
        if self._manager is None:
            return
        loop = asyncio.get_event_loop()
        try:
            self._log_exchange("request", "<close-session/>")
            await loop.run_in_executor(None, self._manager.close_session)
        except NCClientError as e:
            logger.warning(f"Error closing NETCONF session to {self.device_id}: {e}")
        finally:
            self._manager = None
            self._connected = False
            if self.config.ssh_sleep_closed > 0:
                await asyncio.sleep(self.config.ssh_sleep_closed)
        logger.info(f"Disconnected from {self.device_id}")

    def _log_exchange(self, direction: str, text: str) -> None:
        if self._trace is not None:
            self._trace.debug(f"[{self.device_id}] {direction}:\n{text}")

    async def _rpc(self, payload: etree._Element, name: str) -> etree._Element:
        """Send one RPC and return the parsed ``rpc-reply``."""
        if self._manager is None:
            raise SessionError(f"NETCONF session to {self.device_id} is not open")

        loop = asyncio.get_event_loop()
        self._log_exchange("request", etree.tostring(payload, encoding="unicode"))
        try:
            reply = await loop.run_in_executor(None, self._manager.rpc, payload)
        except NCClientError as e:
            raise SessionError(f"executing netconf {name}: {e}") from e
        root = reply_root(reply)
        self._log_exchange("reply", etree.tostring(root, encoding="unicode"))
        return root

    async def _sleep_short(self) -> None:
        if self.config.cmd_sleep_short > 0:
            await asyncio.sleep(self.config.cmd_sleep_short / 1000)

    @timed("command")
    async def command(self, command: str) -> str:
        """Run a text command, empty output becomes an empty string."""
        root = await self._rpc(command_rpc(command), "command")
        errors = rpc_errors(root)
        if errors:
            raise SessionError("\n".join(str(e) for e in errors))

        output = "".join(
            text for child in root for text in child.itertext()
        )
        if not output.strip():
            return ""
        return output

    @timed("config_set")
    async def config_set(self, lines: list[str]) -> None:
        if not lines:
            return
        root = await self._rpc(load_set_rpc(lines), "load-configuration")
        errors = rpc_errors(root)
        await self._sleep_short()
        if errors:
            raise ConfigSetError("\n".join(e.message for e in errors))

    async def _try_lock(self) -> bool:
        try:
            root = await self._rpc(to_ele(RPC_LOCK_CANDIDATE), "lock")
        except SessionError as e:
            logger.debug(f"Lock attempt on {self.device_id} failed: {e}")
            return False
        return not rpc_errors(root)

    @timed("config_lock")
    async def config_lock(self) -> None:
        """Lock the candidate, retrying every ``cmd_sleep_lock`` seconds."""
        async def _acquire() -> None:
            while not await self._try_lock():
                logger.debug(
                    f"Candidate configuration lock attempt failed on {self.device_id}, "
                    f"retry after {self.config.cmd_sleep_lock}s"
                )
                await asyncio.sleep(self.config.cmd_sleep_lock)

        timeout = self.config.lock_timeout or None
        try:
            await asyncio.wait_for(_acquire(), timeout)
        except asyncio.TimeoutError as e:
            # the last lock RPC may still be answered after the wait is cancelled
            await self._unlock_after_timeout()
            raise LockError(
                f"candidate configuration lock attempt aborted after {timeout}s"
            ) from e

    async def _unlock_after_timeout(self) -> None:
        """Release a lock granted to a cancelled attempt, errors are expected."""
        try:
            root = await self._rpc(to_ele(RPC_UNLOCK_CANDIDATE), "unlock")
        except SessionError as e:
            logger.debug(f"Unlock after lock timeout on {self.device_id} failed: {e}")
            return
        for err in rpc_errors(root):
            logger.debug(f"Unlock after lock timeout on {self.device_id}: {err.message}")

    async def config_clear(self) -> list[str]:
        warnings = []
        for name, payload in (
            ("clear", RPC_CLEAR_CANDIDATE),
            ("unlock", RPC_UNLOCK_CANDIDATE),
        ):
            try:
                root = await self._rpc(to_ele(payload), name)
            except SessionError as e:
                warnings.append(f"config {name}: {e}")
                continue
            warnings.extend(f"config {name}: {err.message}" for err in rpc_errors(root))
        await self._sleep_short()
        return warnings

    @timed("commit")
    async def commit(self, message: str) -> list[str]:
        if self.config.commit_confirmed > 0:
            warnings = await self._commit_confirmed(message)
        else:
            root = await self._rpc(commit_rpc(message), "commit")
            warnings = commit_reply_warnings(root, "commit-configuration")
        await self._sleep_short()
        return warnings

    async def _commit_confirmed(self, message: str) -> list[str]:
        """Commit with automatic rollback, wait, then confirm with commit check."""
        timeout = self.config.commit_confirmed
        root = await self._rpc(commit_rpc(message, timeout), "commit (confirmed)")
        warnings = commit_reply_warnings(root, f"commit-configuration(confirmed {timeout})")

        wait = self.config.commit_confirmed_wait
        logger.info(f"Waiting {wait:.0f}s before confirming commit on {self.device_id}")
        await asyncio.sleep(wait)

        root = await self._rpc(to_ele(RPC_COMMIT_CHECK), "commit check")
        try:
            warnings.extend(commit_reply_warnings(root, "commit-configuration(check)"))
        except CommitError as e:
            raise CommitError(str(e), warnings + e.warnings) from e
        return warnings
