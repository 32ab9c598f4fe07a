#!/usr/bin/env python3
"""Command line front end to the resource orchestrator.

Usage:
    junos-provider [--inventory FILE] [--device ID] [-v] ACTION TYPE [--file YAML] [--id ID]

Actions:
    render   Print the set lines for the attributes (no device access)
    create   Create the object described by --file
    read     Read the object --id
    update   Replace the object described by --file
    delete   Delete the object --id
    import   Adopt the existing object --id
    types    List the supported resource types

Without an inventory file the device is configured from the JUNOS_*
environment variables alone.
"""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import yaml

from .config.inventory import DeviceInventory
from .engine.orchestrator import ResourceOrchestrator
from .engine.schema import OperationResult
from .resources import RESOURCE_TYPES, get_resource_type
from .session.base import ClientConfig
from .session.client import Client
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

ACTIONS = ("render", "create", "read", "update", "delete", "import", "types")
ATTRIBUTE_ACTIONS = ("render", "create", "update")
ID_ACTIONS = ("read", "delete", "import")


class UsageError(Exception):
    """Command line arguments cannot be acted upon."""
    pass


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="junos-provider",
        description="Declarative Junos configuration through NETCONF",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Show the lines of a policer without touching the device
    junos-provider render junos_firewall_policer --file policer.yaml

    # Create it on a device of the inventory
    junos-provider --device srx-lab create junos_firewall_policer --file policer.yaml

    # Import an existing NTP server
    junos-provider --device srx-lab import junos_system_ntp_server --id 192.0.2.1

Environment:
    JUNOS_HOST, JUNOS_USERNAME, JUNOS_PASSWORD, ...   Device settings
    JUNOS_PROVIDER_LOG_LEVEL                          Console log level
""",
    )
    parser.add_argument(
        "--inventory",
        type=Path,
        help="Devices file (default: search ./configs/devices.yaml, ./devices.yaml, ...)",
    )
    parser.add_argument(
        "--device",
        type=str,
        help="Device ID in the inventory",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Also log to this file (with rotation)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument("action", choices=ACTIONS)
    parser.add_argument("type", nargs="?", help="Resource type, e.g. junos_policyoptions_as_path")
    parser.add_argument(
        "--file",
        type=str,
        help="YAML file with the resource attributes ('-' for stdin)",
    )
    parser.add_argument(
        "--id",
        dest="resource_id",
        type=str,
        help="Resource ID (identity fields joined with '_-_')",
    )
    return parser


def load_attributes(path: str) -> dict[str, Any]:
    """Read resource attributes from a YAML file or stdin."""
    if path == "-":
        data = yaml.safe_load(sys.stdin)
    else:
        with open(path) as f:
            data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise UsageError(f"{path}: expected a mapping of attributes")
    return data


def load_client(inventory_path: Optional[Path], device_id: Optional[str]) -> Client:
    """Client of the selected device, from the inventory or the environment."""
    try:
        inventory = DeviceInventory(str(inventory_path) if inventory_path else None)
    except FileNotFoundError:
        if inventory_path or device_id:
            raise
        config, warnings = ClientConfig.from_settings()
        for warning in warnings:
            logger.warning(warning)
        if not config.host and not config.fake_create():
            raise UsageError("no inventory found and JUNOS_HOST is not set")
        return Client(config.host or "setfile", config)

    if device_id is None:
        device_ids = inventory.get_device_ids()
        if len(device_ids) != 1:
            raise UsageError(f"--device is required, choose from: {', '.join(device_ids)}")
        device_id = device_ids[0]
    return inventory.get_client(device_id)


async def run_action(
    orchestrator: ResourceOrchestrator,
    action: str,
    type_name: str,
    attributes: dict[str, Any],
    resource_id: str,
) -> OperationResult:
    resource = get_resource_type(type_name)
    if action == "create":
        return await orchestrator.create(resource, attributes)
    if action == "update":
        return await orchestrator.update(resource, attributes)
    if action == "read":
        return await orchestrator.read(resource, resource_id)
    if action == "delete":
        return await orchestrator.delete(resource, resource_id)
    return await orchestrator.import_resource(resource, resource_id)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # setup_logging owns the console handler when a log file is requested
    if args.log_file:
        setup_logging(args.log_file, log_level=logging.DEBUG if args.verbose else None)
    else:
        logging.basicConfig(
            level=logging.DEBUG if args.verbose else logging.WARNING,
            format="%(asctime)s | %(levelname)-5s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    if args.action == "types":
        print(json.dumps(sorted(RESOURCE_TYPES), indent=2))
        return 0

    try:
        if args.type is None:
            raise UsageError(f"{args.action} needs a resource type")
        resource = get_resource_type(args.type)

        attributes: dict[str, Any] = {}
        if args.action in ATTRIBUTE_ACTIONS:
            if not args.file:
                raise UsageError(f"{args.action} needs --file")
            attributes = load_attributes(args.file)
        if args.action in ID_ACTIONS and not args.resource_id:
            raise UsageError(f"{args.action} needs --id")

        if args.action == "render":
            # Dry run, no client needed
            result = ResourceOrchestrator(client=None).render(resource, attributes)
        else:
            client = load_client(args.inventory, args.device)
            orchestrator = ResourceOrchestrator(client)
            result = asyncio.run(
                run_action(orchestrator, args.action, args.type, attributes, args.resource_id or "")
            )
    except (UsageError, KeyError, ValueError, OSError, yaml.YAMLError) as e:
        logger.error(str(e))
        print(json.dumps({"success": False, "error": str(e)}, indent=2))
        return 2
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130

    print(json.dumps(result.to_dict(), indent=2))
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
