"""Pre-flight validation of resource attributes.

Catches schema errors before any device communication: nothing here opens a
session or takes the candidate lock.
"""
import ipaddress
import re
from typing import Any, Iterable, Mapping

from .resource import ResourceType
from .schema import ValidationResult


# Allowed characters in Junos object names by format
NAME_PATTERNS = {
    "default": re.compile(r"^[A-Za-z0-9_-]+$"),
    "address": re.compile(r"^[A-Za-z0-9_./:-]+$"),
}

NAME_MAX_LENGTH = 64

_MISSING = object()


def validate_name(
    value: str,
    field: str,
    exclude: Iterable[str] = (),
    length: int = NAME_MAX_LENGTH,
    name_format: str = "default",
) -> list[str]:
    """Check a Junos object name.

    Args:
        value: Name to check
        field: Attribute path, used in messages
        exclude: Words reserved by Junos in this position
        length: Maximum length
        name_format: Key of NAME_PATTERNS
    """
    if not value:
        return [f"{field}: name cannot be empty"]
    errors = []
    if len(value) > length:
        errors.append(f"{field}: '{value}' is too long (maximum {length} characters)")
    if not NAME_PATTERNS[name_format].match(value):
        errors.append(f"{field}: '{value}' invalid name (bad character)")
    if value in exclude:
        errors.append(f"{field}: '{value}' invalid name (reserved word)")
    return errors


def validate_int_range(value: int, field: str, low: int, high: int) -> list[str]:
    if value < low or value > high:
        return [f"{field}: expected to be in the range ({low} - {high}), got {value}"]
    return []


def validate_ip_address(value: str, field: str) -> list[str]:
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return [f"{field}: expected to contain a valid IP, got '{value}'"]
    return []


def validate_cidr_network(value: str, field: str) -> list[str]:
    try:
        ipaddress.ip_network(value, strict=True)
    except ValueError:
        return [f"{field}: '{value}' is not a valid CIDR network"]
    if "/" not in value:
        return [f"{field}: '{value}' is missing a prefix length"]
    return []


def validate_no_space(value: str, field: str) -> list[str]:
    if " " in value:
        return [f"{field}: '{value}' cannot contain a space"]
    return []


def _is_set(value: Any) -> bool:
    """Configured in the zero-value-is-absent sense."""
    if value is _MISSING or value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) > 0
    return True


def _as_items(node: Any) -> list:
    if node is None or node is _MISSING:
        return []
    if isinstance(node, Mapping):
        return [node]
    if isinstance(node, (list, tuple)):
        return [{} if item is None else item for item in node]
    return []


def resolve_path(data: Mapping[str, Any], path: str) -> list[tuple[str, Any]]:
    """Resolve a dotted attribute path into (concrete path, value) pairs.

    Numeric parts index into blocks, ``*`` expands to every block. A missing
    leaf resolves to a sentinel; a missing parent resolves to nothing so that
    only the parent's own requirement reports it.
    """
    results: list[tuple[str, Any]] = [("", data)]
    parts = path.split(".")
    for position, part in enumerate(parts):
        last = position == len(parts) - 1
        resolved = []
        for prefix, node in results:
            if part == "*" or part.isdigit():
                items = _as_items(node)
                indexes = range(len(items)) if part == "*" else [int(part)]
                for index in indexes:
                    if index < len(items):
                        resolved.append((f"{prefix}.{index}".lstrip("."), items[index]))
                continue
            if not isinstance(node, Mapping):
                continue
            value = node.get(part)
            if value is None:
                if not last:
                    continue
                value = _MISSING
            resolved.append((f"{prefix}.{part}".lstrip("."), value))
        results = resolved
    return results


class ResourceValidator:
    """Validate resource attributes for schema errors before execution."""

    def validate(self, resource: ResourceType, attributes: Mapping[str, Any]) -> ValidationResult:
        """
        Validate user attributes for a resource type.

        Performs pre-flight checks:
        - Unknown attributes (warning only)
        - Required attributes
        - Mutually exclusive attribute pairs

        Value checks that need typed options (names, ranges, formats) run
        through ``validate_options`` once the attributes are decoded.

        Args:
            resource: Resource descriptor
            attributes: User attributes

        Returns:
            ValidationResult with valid flag, errors, and warnings
        """
        errors: list[str] = []
        warnings: list[str] = []

        if not isinstance(attributes, Mapping):
            return ValidationResult(
                valid=False,
                errors=[f"attributes of {resource.type_name} must be a mapping"],
            )

        self._check_unknown(resource, attributes, warnings)
        self._check_required(resource, attributes, errors)
        self._check_conflicts(resource, attributes, errors)

        return ValidationResult(
            valid=len(errors) == 0,
            errors=errors,
            warnings=warnings,
        )

    def validate_options(self, resource: ResourceType, options: Any) -> ValidationResult:
        """Run the resource's own checks on decoded options."""
        errors = resource.validate(options)
        return ValidationResult(valid=len(errors) == 0, errors=errors)

    def _check_unknown(
        self,
        resource: ResourceType,
        attributes: Mapping[str, Any],
        warnings: list[str]
    ) -> None:
        if not resource.attributes:
            return
        for key in attributes:
            if key not in resource.attributes and key != "id":
                warnings.append(f"unknown attribute '{key}' for {resource.type_name} is ignored")

    def _check_required(
        self,
        resource: ResourceType,
        attributes: Mapping[str, Any],
        errors: list[str]
    ) -> None:
        for path in resource.required:
            for concrete, value in resolve_path(attributes, path):
                if value is _MISSING or value == "":
                    errors.append(f"{concrete}: required attribute is missing")

    def _check_conflicts(
        self,
        resource: ResourceType,
        attributes: Mapping[str, Any],
        errors: list[str]
    ) -> None:
        for first, second in resource.conflicts:
            first_set = [p for p, v in resolve_path(attributes, first) if _is_set(v)]
            second_set = [p for p, v in resolve_path(attributes, second) if _is_set(v)]
            if first_set and second_set:
                errors.append(
                    f"{first_set[0]}: conflicts with {second_set[0]}"
                )
