"""Resource engine - declarative Junos configuration through set lines.

The engine turns structured attributes into Junos configuration:
- Validate attributes before touching the device
- Render ordered ``set`` lines
- Load and commit them inside the candidate lock
- Read the object back from ``display set relative`` output

Usage:
    from junos_provider.engine import ResourceOrchestrator
    from junos_provider.resources import get_resource_type

    orchestrator = ResourceOrchestrator(client)
    result = await orchestrator.create(
        get_resource_type("junos_policyoptions_community"),
        {"name": "customers", "members": ["65000:100"]},
    )
"""

from .errors import (
    DecodeError,
    LineParseError,
    ProviderError,
    RenderError,
    ValidationError,
)
from .lines import (
    join_id,
    parse_int,
    relative_lines,
    split_id,
    take_named,
    unquote,
)
from .orchestrator import ResourceOrchestrator, check_exists, read_options
from .resource import ResourceType
from .schema import (
    Diagnostic,
    Diagnostics,
    OperationResult,
    Severity,
    ValidationResult,
)
from .validator import ResourceValidator

__all__ = [
    # Main orchestrator
    "ResourceOrchestrator",
    "ResourceType",
    "ResourceValidator",
    "check_exists",
    "read_options",
    # Result types
    "Diagnostic",
    "Diagnostics",
    "OperationResult",
    "Severity",
    "ValidationResult",
    # Errors
    "DecodeError",
    "LineParseError",
    "ProviderError",
    "RenderError",
    "ValidationError",
    # Line helpers
    "join_id",
    "parse_int",
    "relative_lines",
    "split_id",
    "take_named",
    "unquote",
]
