"""Logging configuration for junos-provider.

Provides configurable logging with:
- File-based logging with rotation
- Console output for real-time debugging
- Performance timing decorators for session and resource operations
- A dedicated NETCONF trace file for debugging device exchanges

Environment Variables:
    JUNOS_PROVIDER_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
    JUNOS_PROVIDER_LOG_FILE: Path to log file (default: ~/.junos-provider/junos-provider.log)
    JUNOS_PROVIDER_LOG_MAX_SIZE: Max log file size in MB (default: 10)
    JUNOS_PROVIDER_LOG_BACKUPS: Number of backup files to keep (default: 5)

Usage:
    from junos_provider.utils.logging_config import setup_logging, timed

    setup_logging()  # Call once at startup

    @timed("netconf_open")
    async def open(self):
        ...

    # Or use context manager for sections:
    async with timed_section("create", device_id="srx-lab", resource="junos_firewall_policer"):
        ...
"""
import asyncio
import functools
import logging
import os
import time
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Callable, Any

# Performance logger - separate from main logger for easy filtering
perf_logger = logging.getLogger("junos_provider.perf")
main_logger = logging.getLogger("junos_provider")
netconf_logger = logging.getLogger("junos_provider.netconf")


def get_log_level() -> int:
    """Get log level from environment."""
    level_str = os.environ.get("JUNOS_PROVIDER_LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_str, logging.INFO)


def get_log_file() -> Path:
    """Get log file path from environment."""
    default_path = Path.home() / ".junos-provider" / "junos-provider.log"
    path_str = os.environ.get("JUNOS_PROVIDER_LOG_FILE", str(default_path))
    return Path(path_str)


def setup_logging(log_file: Optional[Path] = None, log_level: Optional[int] = None) -> None:
    """Configure logging for the application.

    Sets up:
    - Console handler (``log_level``, else JUNOS_PROVIDER_LOG_LEVEL)
    - File handler with rotation (DEBUG level - captures everything)
    - Performance logger for timing metrics
    """
    log_level = log_level or get_log_level()
    log_file = Path(log_file or get_log_file())
    max_size_mb = int(os.environ.get("JUNOS_PROVIDER_LOG_MAX_SIZE", "10"))
    backup_count = int(os.environ.get("JUNOS_PROVIDER_LOG_BACKUPS", "5"))

    log_file.parent.mkdir(parents=True, exist_ok=True)

    main_format = logging.Formatter(
        "%(asctime)s.%(msecs)03d | %(name)-32s | %(levelname)-7s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    perf_format = logging.Formatter(
        "%(asctime)s.%(msecs)03d | PERF | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(main_format)

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=max_size_mb * 1024 * 1024,
        backupCount=backup_count,
        encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(main_format)

    perf_log_file = log_file.parent / "junos-provider-perf.log"
    perf_handler = RotatingFileHandler(
        perf_log_file,
        maxBytes=max_size_mb * 1024 * 1024,
        backupCount=backup_count,
        encoding="utf-8"
    )
    perf_handler.setLevel(logging.DEBUG)
    perf_handler.setFormatter(perf_format)

    main_logger.setLevel(logging.DEBUG)  # Capture all, handlers filter
    main_logger.addHandler(console_handler)
    main_logger.addHandler(file_handler)

    # Perf lines only go to their own file and the console
    perf_logger.setLevel(logging.DEBUG)
    perf_logger.propagate = False
    perf_logger.addHandler(perf_handler)
    perf_logger.addHandler(console_handler)

    main_logger.info(f"Logging initialized: level={logging.getLevelName(log_level)}, file={log_file}")
    perf_logger.info(f"Performance logging to: {perf_log_file}")


def setup_netconf_debug_log(path: str, file_permission: int = 0o644) -> logging.Logger:
    """Send every NETCONF request and reply to ``path``.

    Safe to call once per session: a handler for the same file is only
    attached the first time.
    """
    target = Path(path).expanduser().resolve()
    for handler in netconf_logger.handlers:
        if isinstance(handler, logging.FileHandler) and Path(handler.baseFilename) == target:
            return netconf_logger

    target.parent.mkdir(parents=True, exist_ok=True)
    created = not target.exists()
    handler = logging.FileHandler(target, encoding="utf-8")
    if created:
        os.chmod(target, file_permission)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s.%(msecs)03d %(message)s",
        datefmt="%Y/%m/%d %H:%M:%S"
    ))
    netconf_logger.setLevel(logging.DEBUG)
    netconf_logger.propagate = False
    netconf_logger.addHandler(handler)
    return netconf_logger


def timed(operation: str, device_id: Optional[str] = None):
    """Decorator to log execution time of sync/async functions.

    Args:
        operation: Name of the operation (e.g., "netconf_open", "commit")
        device_id: Optional device identifier (can also be inferred from self.device_id)
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> Any:
            dev_id = device_id
            if dev_id is None and args and hasattr(args[0], 'device_id'):
                dev_id = args[0].device_id

            start = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
                elapsed = (time.perf_counter() - start) * 1000  # ms
                perf_logger.info(
                    f"{operation:20s} | {dev_id or 'N/A':15s} | {elapsed:8.2f}ms | OK"
                )
                return result
            except Exception as e:
                elapsed = (time.perf_counter() - start) * 1000
                perf_logger.warning(
                    f"{operation:20s} | {dev_id or 'N/A':15s} | {elapsed:8.2f}ms | FAIL: {e}"
                )
                raise

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs) -> Any:
            dev_id = device_id
            if dev_id is None and args and hasattr(args[0], 'device_id'):
                dev_id = args[0].device_id

            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
                elapsed = (time.perf_counter() - start) * 1000
                perf_logger.info(
                    f"{operation:20s} | {dev_id or 'N/A':15s} | {elapsed:8.2f}ms | OK"
                )
                return result
            except Exception as e:
                elapsed = (time.perf_counter() - start) * 1000
                perf_logger.warning(
                    f"{operation:20s} | {dev_id or 'N/A':15s} | {elapsed:8.2f}ms | FAIL: {e}"
                )
                raise

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


@asynccontextmanager
async def timed_section(operation: str, device_id: Optional[str] = None, **extra):
    """Async context manager for timing code sections.

    Usage:
        async with timed_section("update", device_id="srx-lab", resource="junos_snmp_community"):
            ...
    """
    start = time.perf_counter()
    extra_str = " | ".join(f"{k}={v}" for k, v in extra.items()) if extra else ""

    try:
        yield
        elapsed = (time.perf_counter() - start) * 1000
        msg = f"{operation:20s} | {device_id or 'N/A':15s} | {elapsed:8.2f}ms | OK"
        if extra_str:
            msg += f" | {extra_str}"
        perf_logger.info(msg)
    except Exception as e:
        elapsed = (time.perf_counter() - start) * 1000
        msg = f"{operation:20s} | {device_id or 'N/A':15s} | {elapsed:8.2f}ms | FAIL: {e}"
        if extra_str:
            msg += f" | {extra_str}"
        perf_logger.warning(msg)
        raise
