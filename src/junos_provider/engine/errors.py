"""Errors raised while preparing or decoding resource configuration."""
from typing import Optional


class ProviderError(Exception):
    """Base error for resource handling."""
    pass


class DecodeError(ProviderError):
    """Attribute value has the wrong type or shape."""
    pass


class RenderError(ProviderError):
    """Options cannot be turned into consistent configuration lines."""
    pass


class LineParseError(ProviderError):
    """Device output cannot be decoded into options."""
    pass


class ValidationError(ProviderError):
    """Attributes failed pre-flight validation.

    Carries every problem found, not just the first one.
    """

    def __init__(self, errors: list[str], warnings: Optional[list[str]] = None):
        super().__init__("; ".join(errors))
        self.errors = list(errors)
        self.warnings = list(warnings or [])
