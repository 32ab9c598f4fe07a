"""Declarative resource descriptors.

A resource type is described once by four operations over its options
dataclass: ``render`` (options to set lines), ``parse`` (show output to
options), the existence check command and ``render_delete``. The
orchestrator drives every resource through the same lock/commit workflow
using only these.
"""
from abc import ABC, abstractmethod
from typing import Any, Generic, Mapping, Optional, TypeVar

from .errors import DecodeError
from .lines import (
    CMD_SHOW_CONFIG,
    DELETE_LS,
    ID_SEPARATOR,
    PIPE_DISPLAY_SET,
    PIPE_DISPLAY_SET_RELATIVE,
    quote,
    split_id,
)

O = TypeVar("O")


class ResourceType(ABC, Generic[O]):
    """Base class for resource descriptors.

    Subclasses set the class attributes and implement the abstract methods.
    """
    # Terraform-style resource type name, e.g. "junos_policyoptions_as_path"
    type_name: str = ""
    # Configuration hierarchy holding the objects, e.g. "policy-options as-path"
    config_path: str = ""
    # Options fields forming the identity, joined with "_-_" in the ID
    id_fields: tuple[str, ...] = ("name",)
    # Identity is written between double quotes in the configuration path
    quote_name: bool = False
    # Top-level attributes accepted in user input
    attributes: tuple[str, ...] = ()
    # Dotted attribute paths that must be present ("*" for every list item)
    required: tuple[str, ...] = ()
    # Pairs of dotted attribute paths that cannot both be set
    conflicts: tuple[tuple[str, str], ...] = ()

    @property
    def id_format(self) -> str:
        return ID_SEPARATOR.join(f"<{f}>" for f in self.id_fields)

    def object_path(self, *ids: str) -> str:
        names = " ".join(quote(i) if self.quote_name else i for i in ids)
        return f"{self.config_path} {names}"

    def describe(self, *ids: str) -> str:
        return f"{self.config_path} {' '.join(ids)}"

    def exists_command(self, *ids: str) -> str:
        return CMD_SHOW_CONFIG + self.object_path(*ids) + PIPE_DISPLAY_SET

    def read_command(self, *ids: str) -> str:
        return CMD_SHOW_CONFIG + self.object_path(*ids) + PIPE_DISPLAY_SET_RELATIVE

    def set_prefix(self, *ids: str) -> str:
        return "set " + self.object_path(*ids)

    def render_delete(self, *ids: str) -> list[str]:
        return [DELETE_LS + self.object_path(*ids)]

    def identity(self, options: O) -> tuple[str, ...]:
        return tuple(str(getattr(options, f)) for f in self.id_fields)

    def split_identity(self, resource_id: str) -> tuple[str, ...]:
        parts = split_id(resource_id)
        if len(parts) != len(self.id_fields) or not all(parts):
            raise DecodeError(
                f"invalid id '{resource_id}' (id must be {self.id_format})"
            )
        return tuple(parts)

    def is_absent(self, options: O) -> bool:
        return not all(getattr(options, f) for f in self.id_fields)

    def validate(self, options: O) -> list[str]:
        """Checks on decoded options (names, ranges, formats)."""
        return []

    @abstractmethod
    def decode(self, attributes: Mapping[str, Any]) -> O:
        """Build options from user attributes, applying defaults."""
        pass

    @abstractmethod
    def render(self, options: O) -> list[str]:
        """Ordered ``set`` lines for the options."""
        pass

    @abstractmethod
    def parse(self, output: str, *ids: str) -> O:
        """Options from ``| display set relative`` output, empty identity when absent."""
        pass

    @abstractmethod
    def to_state(self, options: O) -> dict[str, Any]:
        """Flat state dictionary for the options."""
        pass


# --- Attribute accessors ---

def attr_str(attributes: Mapping[str, Any], key: str, default: str = "") -> str:
    value = attributes.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise DecodeError(f"{key}: expected a string, got {value!r}")
    return str(value)


def attr_int(attributes: Mapping[str, Any], key: str, default: int = 0) -> int:
    value = attributes.get(key)
    if value is None:
        return default
    if isinstance(value, bool):
        raise DecodeError(f"{key}: expected an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"{key}: expected an integer, got {value!r}") from e


def attr_bool(attributes: Mapping[str, Any], key: str) -> bool:
    value = attributes.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise DecodeError(f"{key}: expected a boolean, got {value!r}")
    return value


def attr_str_list(attributes: Mapping[str, Any], key: str) -> list[str]:
    value = attributes.get(key)
    if value is None:
        return []
    if isinstance(value, (str, bytes, Mapping)):
        raise DecodeError(f"{key}: expected a list of strings, got {value!r}")
    return [str(v) for v in value]


def attr_blocks(attributes: Mapping[str, Any], key: str) -> list[Mapping[str, Any]]:
    """Repeated block as a list of mappings (a single mapping is accepted)."""
    value = attributes.get(key)
    if value is None:
        return []
    if isinstance(value, Mapping):
        return [value]
    if isinstance(value, (str, bytes)):
        raise DecodeError(f"{key}: expected a block, got {value!r}")
    blocks = []
    for item in value:
        if item is None:
            item = {}
        if not isinstance(item, Mapping):
            raise DecodeError(f"{key}: expected a block, got {item!r}")
        blocks.append(item)
    return blocks


def attr_block(attributes: Mapping[str, Any], key: str) -> Optional[Mapping[str, Any]]:
    """Singleton block: a mapping or a list of at most one mapping."""
    blocks = attr_blocks(attributes, key)
    if len(blocks) > 1:
        raise DecodeError(f"{key}: at most one block is allowed, got {len(blocks)}")
    return blocks[0] if blocks else None
