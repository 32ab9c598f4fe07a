"""system ntp server."""
from dataclasses import dataclass
from typing import Any, Mapping

from ..engine.lines import parse_int, relative_lines
from ..engine.resource import ResourceType, attr_bool, attr_int, attr_str
from ..engine.validator import validate_int_range, validate_ip_address, validate_name


@dataclass
class NtpServerOptions:
    address: str = ""
    key: int = 0
    prefer: bool = False
    routing_instance: str = ""
    version: int = 0


class NtpServer(ResourceType[NtpServerOptions]):
    type_name = "junos_system_ntp_server"
    config_path = "system ntp server"
    id_fields = ("address",)
    attributes = ("address", "key", "prefer", "routing_instance", "version")
    required = ("address",)

    def decode(self, attributes: Mapping[str, Any]) -> NtpServerOptions:
        return NtpServerOptions(
            address=attr_str(attributes, "address"),
            key=attr_int(attributes, "key"),
            prefer=attr_bool(attributes, "prefer"),
            routing_instance=attr_str(attributes, "routing_instance"),
            version=attr_int(attributes, "version"),
        )

    def validate(self, options: NtpServerOptions) -> list[str]:
        errors = validate_ip_address(options.address, "address")
        if options.key:
            errors.extend(validate_int_range(options.key, "key", 1, 65534))
        if options.routing_instance:
            errors.extend(validate_name(options.routing_instance, "routing_instance"))
        if options.version:
            errors.extend(validate_int_range(options.version, "version", 1, 4))
        return errors

    def render(self, options: NtpServerOptions) -> list[str]:
        set_prefix = self.set_prefix(options.address)
        lines = [set_prefix]
        if options.key != 0:
            lines.append(f"{set_prefix} key {options.key}")
        if options.prefer:
            lines.append(f"{set_prefix} prefer")
        if options.routing_instance:
            lines.append(f"{set_prefix} routing-instance {options.routing_instance}")
        if options.version != 0:
            lines.append(f"{set_prefix} version {options.version}")
        return lines

    def parse(self, output: str, *ids: str) -> NtpServerOptions:
        options = NtpServerOptions()
        for item in relative_lines(output):
            options.address = ids[0]
            if item.startswith("key "):
                options.key = parse_int(item.removeprefix("key "))
            elif item == "prefer":
                options.prefer = True
            elif item.startswith("routing-instance "):
                options.routing_instance = item.removeprefix("routing-instance ")
            elif item.startswith("version "):
                options.version = parse_int(item.removeprefix("version "))
        return options

    def to_state(self, options: NtpServerOptions) -> dict[str, Any]:
        return {
            "id": options.address,
            "address": options.address,
            "key": options.key,
            "prefer": options.prefer,
            "routing_instance": options.routing_instance,
            "version": options.version,
        }
