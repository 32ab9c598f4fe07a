"""snmp community."""
from dataclasses import dataclass, field
from typing import Any, Mapping

from ..engine.errors import RenderError
from ..engine.lines import first_field, relative_lines, take_named, unquote
from ..engine.resource import ResourceType, attr_blocks, attr_bool, attr_str, attr_str_list
from ..engine.validator import validate_name


@dataclass
class CommunityRoutingInstance:
    name: str = ""
    client_list_name: str = ""
    clients: list[str] = field(default_factory=list)


@dataclass
class CommunityOptions:
    name: str = ""
    authorization_read_only: bool = False
    authorization_read_write: bool = False
    client_list_name: str = ""
    clients: list[str] = field(default_factory=list)
    routing_instance: list[CommunityRoutingInstance] = field(default_factory=list)
    view: str = ""


class Community(ResourceType[CommunityOptions]):
    type_name = "junos_snmp_community"
    config_path = "snmp community"
    quote_name = True
    attributes = (
        "name",
        "authorization_read_only",
        "authorization_read_write",
        "client_list_name",
        "clients",
        "routing_instance",
        "view",
    )
    required = ("name", "routing_instance.*.name")
    conflicts = (
        ("authorization_read_only", "authorization_read_write"),
        ("client_list_name", "clients"),
    )

    def decode(self, attributes: Mapping[str, Any]) -> CommunityOptions:
        # clients are unordered sets, kept sorted
        return CommunityOptions(
            name=attr_str(attributes, "name"),
            authorization_read_only=attr_bool(attributes, "authorization_read_only"),
            authorization_read_write=attr_bool(attributes, "authorization_read_write"),
            client_list_name=attr_str(attributes, "client_list_name"),
            clients=sorted(set(attr_str_list(attributes, "clients"))),
            routing_instance=[
                CommunityRoutingInstance(
                    name=attr_str(block, "name"),
                    client_list_name=attr_str(block, "client_list_name"),
                    clients=sorted(set(attr_str_list(block, "clients"))),
                )
                for block in attr_blocks(attributes, "routing_instance")
            ],
            view=attr_str(attributes, "view"),
        )

    def validate(self, options: CommunityOptions) -> list[str]:
        errors = []
        for index, instance in enumerate(options.routing_instance):
            errors.extend(validate_name(
                instance.name, f"routing_instance.{index}.name", exclude=("default",)
            ))
        return errors

    def render(self, options: CommunityOptions) -> list[str]:
        set_prefix = self.set_prefix(options.name)
        lines = []
        if options.authorization_read_only:
            lines.append(f"{set_prefix} authorization read-only")
        if options.authorization_read_write:
            lines.append(f"{set_prefix} authorization read-write")
        if options.client_list_name:
            lines.append(f'{set_prefix} client-list-name "{options.client_list_name}"')
        for client in options.clients:
            lines.append(f"{set_prefix} clients {client}")

        names = set()
        for instance in options.routing_instance:
            if instance.clients and instance.client_list_name:
                raise RenderError(
                    f"conflict between clients and client_list_name in routing-instance {instance.name}"
                )
            if instance.name in names:
                raise RenderError(f"multiple blocks routing_instance with the same name {instance.name}")
            names.add(instance.name)
            instance_prefix = f"{set_prefix} routing-instance {instance.name}"
            lines.append(instance_prefix)
            if instance.client_list_name:
                lines.append(f'{instance_prefix} client-list-name "{instance.client_list_name}"')
            for client in instance.clients:
                lines.append(f"{instance_prefix} clients {client}")

        if options.view:
            lines.append(f'{set_prefix} view "{options.view}"')
        return lines

    def parse(self, output: str, *ids: str) -> CommunityOptions:
        options = CommunityOptions()
        for item in relative_lines(output):
            options.name = ids[0]
            if item == "authorization read-only":
                options.authorization_read_only = True
            elif item == "authorization read-write":
                options.authorization_read_write = True
            elif item.startswith("client-list-name "):
                options.client_list_name = unquote(item.removeprefix("client-list-name "))
            elif item.startswith("clients "):
                options.clients.append(item.removeprefix("clients "))
            elif item.startswith("routing-instance "):
                name, rest = first_field(item.removeprefix("routing-instance "))
                name = unquote(name)
                instance = (
                    take_named(options.routing_instance, name, lambda r: r.name)
                    or CommunityRoutingInstance(name=name)
                )
                if rest.startswith("client-list-name "):
                    instance.client_list_name = unquote(rest.removeprefix("client-list-name "))
                elif rest.startswith("clients "):
                    instance.clients.append(rest.removeprefix("clients "))
                options.routing_instance.append(instance)
            elif item.startswith("view "):
                options.view = unquote(item.removeprefix("view "))
        options.clients.sort()
        for instance in options.routing_instance:
            instance.clients.sort()
        return options

    def to_state(self, options: CommunityOptions) -> dict[str, Any]:
        return {
            "id": options.name,
            "name": options.name,
            "authorization_read_only": options.authorization_read_only,
            "authorization_read_write": options.authorization_read_write,
            "client_list_name": options.client_list_name,
            "clients": list(options.clients),
            "routing_instance": [
                {
                    "name": instance.name,
                    "client_list_name": instance.client_list_name,
                    "clients": list(instance.clients),
                }
                for instance in options.routing_instance
            ],
            "view": options.view,
        }
