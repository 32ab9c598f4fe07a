"""Result types shared by the validator and the orchestrator."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Optional


class Severity(str, Enum):
    """Severity of a diagnostic."""
    ERROR = "error"
    WARNING = "warning"


@dataclass
class Diagnostic:
    """One message reported back to the caller."""
    severity: Severity
    summary: str
    detail: str = ""

    def to_dict(self) -> dict:
        return {
            "severity": self.severity.value,
            "summary": self.summary,
            "detail": self.detail,
        }


class Diagnostics(list):
    """Ordered list of diagnostics, warnings and errors mixed."""

    def add_error(self, summary: str, detail: str = "") -> None:
        self.append(Diagnostic(Severity.ERROR, summary, detail))

    def add_warning(self, summary: str, detail: str = "") -> None:
        self.append(Diagnostic(Severity.WARNING, summary, detail))

    def extend_warnings(self, messages: Iterable[str]) -> None:
        for message in messages:
            self.add_warning(message)

    def has_error(self) -> bool:
        return any(d.severity == Severity.ERROR for d in self)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self if d.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self if d.severity == Severity.WARNING]


@dataclass
class ValidationResult:
    """Result of attribute validation."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class OperationResult:
    """Outcome of one resource operation.

    ``state`` is ``None`` when the object does not exist (or no longer
    exists) on the device; ``lines`` holds the configuration lines the
    operation rendered.
    """
    operation: str
    resource_type: str
    id: str = ""
    state: Optional[dict[str, Any]] = None
    lines: list[str] = field(default_factory=list)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)

    @property
    def success(self) -> bool:
        return not self.diagnostics.has_error()

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "operation": self.operation,
            "resource_type": self.resource_type,
            "success": self.success,
            "id": self.id,
            "state": self.state,
            "lines": self.lines,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }
