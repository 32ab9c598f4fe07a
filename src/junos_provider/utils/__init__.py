"""Utility modules for retries, logging and secrets."""
from .connection import with_retry, RETRYABLE_EXCEPTIONS
from .logging_config import (
    setup_logging,
    setup_netconf_debug_log,
    timed,
    timed_section,
    perf_logger,
)
from .secret import decode_secret, encode_secret, SecretDecodeError

__all__ = [
    "with_retry",
    "RETRYABLE_EXCEPTIONS",
    "setup_logging",
    "setup_netconf_debug_log",
    "timed",
    "timed_section",
    "perf_logger",
    "decode_secret",
    "encode_secret",
    "SecretDecodeError",
]
