"""Generic create/read/update/delete/import workflow for every resource type.

Each write operation brackets its work in the candidate lock:

    lock -> (check) -> load lines -> commit -> (re-check) -> read back

Any failure after the lock was taken discards the candidate (``config_clear``)
before the error is reported, so no half-loaded configuration or stale lock is
left behind. Errors and warnings come back as diagnostics on the
``OperationResult``; the public methods never raise.
"""
import logging
from typing import Any, Mapping, Optional

from ..session.base import CommitError, Session, SessionError
from ..session.client import Client
from ..utils.logging_config import timed_section
from .errors import ProviderError, ValidationError
from .lines import join_id
from .resource import ResourceType
from .schema import OperationResult
from .validator import ResourceValidator

logger = logging.getLogger(__name__)


async def check_exists(resource: ResourceType, session: Session, *ids: str) -> bool:
    """Binary presence test: any output at all means the object exists."""
    output = await session.command(resource.exists_command(*ids))
    return output != ""


async def read_options(resource: ResourceType, session: Session, *ids: str) -> Any:
    """Fetch the scoped configuration and decode it into options."""
    output = await session.command(resource.read_command(*ids))
    return resource.parse(output, *ids)


class ResourceOrchestrator:
    """
    Drive resources through the device lock/commit workflow.

    Usage:
        orchestrator = ResourceOrchestrator(client)
        result = await orchestrator.create(AsPath(), {
            "name": "test",
            "path": "65000 65001",
        })
    """

    def __init__(self, client: Optional[Client], validator: Optional[ResourceValidator] = None):
        self.client = client
        self.validator = validator or ResourceValidator()

    # --- Preparation (no device access) ---

    def prepare(self, resource: ResourceType, attributes: Mapping[str, Any]) -> tuple[Any, list[str], list[str]]:
        """
        Validate, decode and render attributes.

        Returns:
            Tuple of (options, set lines, validation warnings)

        Raises:
            ValidationError: If the attributes fail validation
            ProviderError: If decoding or rendering fails
        """
        validation = self.validator.validate(resource, attributes)
        if not validation.valid:
            raise ValidationError(validation.errors, validation.warnings)

        options = resource.decode(attributes)
        option_checks = self.validator.validate_options(resource, options)
        if not option_checks.valid:
            raise ValidationError(option_checks.errors, validation.warnings)

        lines = resource.render(options)
        return options, lines, validation.warnings

    def _prepare_into(
        self,
        result: OperationResult,
        resource: ResourceType,
        attributes: Mapping[str, Any],
    ) -> Optional[tuple[Any, list[str]]]:
        try:
            options, lines, warnings = self.prepare(resource, attributes)
        except ValidationError as e:
            result.diagnostics.extend_warnings(e.warnings)
            for message in e.errors:
                result.diagnostics.add_error(message)
            return None
        except ProviderError as e:
            result.diagnostics.add_error(str(e))
            return None
        result.diagnostics.extend_warnings(warnings)
        result.lines = lines
        return options, lines

    def render(self, resource: ResourceType, attributes: Mapping[str, Any]) -> OperationResult:
        """Render lines without touching the device (dry run)."""
        result = OperationResult("render", resource.type_name)
        prepared = self._prepare_into(result, resource, attributes)
        if prepared is not None:
            options, _ = prepared
            result.id = join_id(*resource.identity(options))
            result.state = resource.to_state(options)
        return result

    # --- Helpers ---

    async def _clear(self, session: Session, result: OperationResult) -> None:
        """Discard the candidate; problems become warnings."""
        try:
            result.diagnostics.extend_warnings(await session.config_clear())
        except SessionError as e:
            result.diagnostics.add_warning(f"config clear: {e}")

    async def _abort(self, session: Session, result: OperationResult, error: Exception) -> OperationResult:
        if isinstance(error, CommitError):
            result.diagnostics.extend_warnings(error.warnings)
        await self._clear(session, result)
        result.diagnostics.add_error(str(error))
        logger.warning(f"{result.operation} {result.resource_type} on {self.client.device_id} failed: {error}")
        return result

    async def _read_into(
        self,
        result: OperationResult,
        resource: ResourceType,
        session: Session,
        ids: tuple[str, ...],
    ) -> OperationResult:
        try:
            async with self.client.read_lock:
                options = await read_options(resource, session, *ids)
        except (SessionError, ProviderError) as e:
            result.diagnostics.add_error(str(e))
            return result

        if resource.is_absent(options):
            result.id = ""
            result.state = None
        else:
            result.id = join_id(*resource.identity(options))
            result.state = resource.to_state(options)
        return result

    async def _write_setfile(self, result: OperationResult, lines: list[str]) -> bool:
        try:
            async with self.client.setfile_session() as session:
                await session.config_set(lines)
        except (SessionError, OSError) as e:
            result.diagnostics.add_error(str(e))
            return False
        return True

    # --- Operations ---

    async def create(self, resource: ResourceType, attributes: Mapping[str, Any]) -> OperationResult:
        """Create an object that must not exist yet."""
        result = OperationResult("create", resource.type_name)
        prepared = self._prepare_into(result, resource, attributes)
        if prepared is None:
            return result
        options, lines = prepared
        ids = resource.identity(options)

        if self.client.fake_create():
            if await self._write_setfile(result, lines):
                result.id = join_id(*ids)
                result.state = resource.to_state(options)
            return result

        try:
            async with timed_section("create", self.client.device_id, resource=resource.type_name):
                async with self.client.new_session() as session:
                    await session.config_lock()
                    try:
                        if await check_exists(resource, session, *ids):
                            raise ProviderError(f"{resource.describe(*ids)} already exists")
                        await session.config_set(lines)
                        warnings = await session.commit(f"create resource {resource.type_name}")
                    except (SessionError, ProviderError) as e:
                        return await self._abort(session, result, e)
                    result.diagnostics.extend_warnings(warnings)

                    if not await check_exists(resource, session, *ids):
                        result.diagnostics.add_error(
                            f"{resource.describe(*ids)} not exists after commit => check your config"
                        )
                        return result
                    result.id = join_id(*ids)
                    return await self._read_into(result, resource, session, ids)
        except SessionError as e:
            result.diagnostics.add_error(str(e))
        return result

    async def read(self, resource: ResourceType, resource_id: str) -> OperationResult:
        """Refresh state; ``state`` is ``None`` when the object is gone."""
        result = OperationResult("read", resource.type_name)
        try:
            ids = resource.split_identity(resource_id)
        except ProviderError as e:
            result.diagnostics.add_error(str(e))
            return result

        try:
            async with self.client.new_session() as session:
                await self._read_into(result, resource, session, ids)
        except SessionError as e:
            result.diagnostics.add_error(str(e))
        if result.state is None and result.success:
            logger.info(f"{resource.describe(*ids)} not found on {self.client.device_id}, removing from state")
        return result

    async def update(self, resource: ResourceType, attributes: Mapping[str, Any]) -> OperationResult:
        """Replace the whole object: delete lines then set lines in one commit."""
        result = OperationResult("update", resource.type_name)
        prepared = self._prepare_into(result, resource, attributes)
        if prepared is None:
            return result
        options, lines = prepared
        ids = resource.identity(options)
        delete_lines = resource.render_delete(*ids)
        result.lines = delete_lines + lines

        if self.client.fake_update():
            if await self._write_setfile(result, result.lines):
                result.id = join_id(*ids)
                result.state = resource.to_state(options)
            return result

        try:
            async with timed_section("update", self.client.device_id, resource=resource.type_name):
                async with self.client.new_session() as session:
                    await session.config_lock()
                    try:
                        await session.config_set(delete_lines)
                        await session.config_set(lines)
                        warnings = await session.commit(f"update resource {resource.type_name}")
                    except SessionError as e:
                        return await self._abort(session, result, e)
                    result.diagnostics.extend_warnings(warnings)
                    return await self._read_into(result, resource, session, ids)
        except SessionError as e:
            result.diagnostics.add_error(str(e))
        return result

    async def delete(self, resource: ResourceType, resource_id: str) -> OperationResult:
        """Remove the object."""
        result = OperationResult("delete", resource.type_name)
        try:
            ids = resource.split_identity(resource_id)
        except ProviderError as e:
            result.diagnostics.add_error(str(e))
            return result
        lines = resource.render_delete(*ids)
        result.lines = lines

        if self.client.fake_delete():
            await self._write_setfile(result, lines)
            return result

        try:
            async with timed_section("delete", self.client.device_id, resource=resource.type_name):
                async with self.client.new_session() as session:
                    await session.config_lock()
                    try:
                        await session.config_set(lines)
                        warnings = await session.commit(f"delete resource {resource.type_name}")
                    except SessionError as e:
                        return await self._abort(session, result, e)
                    result.diagnostics.extend_warnings(warnings)

                    if await check_exists(resource, session, *ids):
                        result.diagnostics.add_error(
                            f"{resource.describe(*ids)} still exists after commit => check your config"
                        )
        except SessionError as e:
            result.diagnostics.add_error(str(e))
        return result

    async def import_resource(self, resource: ResourceType, resource_id: str) -> OperationResult:
        """Adopt an existing object by ID."""
        result = OperationResult("import", resource.type_name)
        try:
            ids = resource.split_identity(resource_id)
        except ProviderError as e:
            result.diagnostics.add_error(str(e))
            return result

        try:
            async with self.client.new_session() as session:
                if not await check_exists(resource, session, *ids):
                    result.diagnostics.add_error(
                        f"don't find {resource.config_path} with id '{resource_id}' "
                        f"(id must be {resource.id_format})"
                    )
                    return result
                await self._read_into(result, resource, session, ids)
        except SessionError as e:
            result.diagnostics.add_error(str(e))
        return result
