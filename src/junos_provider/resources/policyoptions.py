"""policy-options objects: as-path, as-path-group, community, prefix-list."""
import html
from dataclasses import dataclass, field
from typing import Any, Mapping

from ..engine.errors import RenderError
from ..engine.lines import first_field, relative_lines, unquote
from ..engine.resource import (
    ResourceType,
    attr_blocks,
    attr_bool,
    attr_str,
    attr_str_list,
)
from ..engine.validator import validate_cidr_network, validate_name


# --- as-path ---

@dataclass
class AsPathOptions:
    name: str = ""
    dynamic_db: bool = False
    path: str = ""


class AsPath(ResourceType[AsPathOptions]):
    type_name = "junos_policyoptions_as_path"
    config_path = "policy-options as-path"
    attributes = ("name", "dynamic_db", "path")
    required = ("name",)

    def decode(self, attributes: Mapping[str, Any]) -> AsPathOptions:
        return AsPathOptions(
            name=attr_str(attributes, "name"),
            dynamic_db=attr_bool(attributes, "dynamic_db"),
            path=attr_str(attributes, "path"),
        )

    def validate(self, options: AsPathOptions) -> list[str]:
        errors = validate_name(options.name, "name")
        if not options.path and not options.dynamic_db:
            errors.append("name: at least one of path or dynamic_db must be specified")
        return errors

    def render(self, options: AsPathOptions) -> list[str]:
        set_prefix = self.set_prefix(options.name)
        lines = []
        if options.dynamic_db:
            lines.append(f"{set_prefix} dynamic-db")
        if options.path:
            lines.append(f'{set_prefix} "{options.path}"')
        return lines

    def parse(self, output: str, *ids: str) -> AsPathOptions:
        options = AsPathOptions()
        for item in relative_lines(output):
            options.name = ids[0]
            if item == "dynamic-db":
                options.dynamic_db = True
            else:
                options.path = unquote(item)
        return options

    def to_state(self, options: AsPathOptions) -> dict[str, Any]:
        return {
            "id": options.name,
            "name": options.name,
            "dynamic_db": options.dynamic_db,
            "path": options.path,
        }


# --- as-path-group ---

@dataclass
class AsPathEntry:
    name: str = ""
    path: str = ""


@dataclass
class AsPathGroupOptions:
    name: str = ""
    dynamic_db: bool = False
    as_path: list[AsPathEntry] = field(default_factory=list)


class AsPathGroup(ResourceType[AsPathGroupOptions]):
    type_name = "junos_policyoptions_as_path_group"
    config_path = "policy-options as-path-group"
    attributes = ("name", "as_path", "dynamic_db")
    required = ("name", "as_path.*.name", "as_path.*.path")

    def decode(self, attributes: Mapping[str, Any]) -> AsPathGroupOptions:
        return AsPathGroupOptions(
            name=attr_str(attributes, "name"),
            dynamic_db=attr_bool(attributes, "dynamic_db"),
            as_path=[
                AsPathEntry(name=attr_str(block, "name"), path=attr_str(block, "path"))
                for block in attr_blocks(attributes, "as_path")
            ],
        )

    def validate(self, options: AsPathGroupOptions) -> list[str]:
        errors = validate_name(options.name, "name")
        if not options.as_path and not options.dynamic_db:
            errors.append("name: at least one of as_path or dynamic_db must be specified")
        for index, entry in enumerate(options.as_path):
            errors.extend(validate_name(entry.name, f"as_path.{index}.name"))
        return errors

    def render(self, options: AsPathGroupOptions) -> list[str]:
        set_prefix = self.set_prefix(options.name)
        lines = []
        seen = set()
        for entry in options.as_path:
            if entry.name in seen:
                raise RenderError(f"multiple blocks as_path with the same name {entry.name}")
            seen.add(entry.name)
            lines.append(f'{set_prefix} as-path {entry.name} "{entry.path}"')
        if options.dynamic_db:
            lines.append(f"{set_prefix} dynamic-db")
        return lines

    def parse(self, output: str, *ids: str) -> AsPathGroupOptions:
        options = AsPathGroupOptions()
        for item in relative_lines(output):
            options.name = ids[0]
            if item == "dynamic-db":
                options.dynamic_db = True
            elif item.startswith("as-path "):
                entry_name, path = first_field(item.removeprefix("as-path "))
                options.as_path.append(AsPathEntry(name=unquote(entry_name), path=unquote(path)))
        return options

    def to_state(self, options: AsPathGroupOptions) -> dict[str, Any]:
        return {
            "id": options.name,
            "name": options.name,
            "as_path": [{"name": e.name, "path": e.path} for e in options.as_path],
            "dynamic_db": options.dynamic_db,
        }


# --- community ---

@dataclass
class CommunityOptions:
    name: str = ""
    dynamic_db: bool = False
    invert_match: bool = False
    members: list[str] = field(default_factory=list)


class Community(ResourceType[CommunityOptions]):
    """BGP community; ``members`` and ``dynamic_db`` are mutually exclusive."""
    type_name = "junos_policyoptions_community"
    config_path = "policy-options community"
    attributes = ("name", "dynamic_db", "members", "invert_match")
    required = ("name",)

    def decode(self, attributes: Mapping[str, Any]) -> CommunityOptions:
        return CommunityOptions(
            name=attr_str(attributes, "name"),
            dynamic_db=attr_bool(attributes, "dynamic_db"),
            invert_match=attr_bool(attributes, "invert_match"),
            members=attr_str_list(attributes, "members"),
        )

    def validate(self, options: CommunityOptions) -> list[str]:
        errors = validate_name(options.name, "name")
        if not options.members and not options.dynamic_db:
            errors.append("name: one of members or dynamic_db must be specified")
        elif options.members and options.dynamic_db:
            errors.append("name: only one of members or dynamic_db must be specified")
        return errors

    def render(self, options: CommunityOptions) -> list[str]:
        set_prefix = self.set_prefix(options.name)
        lines = []
        if options.dynamic_db:
            lines.append(f"{set_prefix} dynamic-db")
        for member in options.members:
            lines.append(f'{set_prefix} members "{member}"')
        if options.invert_match:
            lines.append(f"{set_prefix} invert-match")
        return lines

    def parse(self, output: str, *ids: str) -> CommunityOptions:
        options = CommunityOptions()
        for item in relative_lines(output):
            options.name = ids[0]
            if item == "dynamic-db":
                options.dynamic_db = True
            elif item == "invert-match":
                options.invert_match = True
            elif item.startswith("members "):
                options.members.append(unquote(item.removeprefix("members ")))
        return options

    def to_state(self, options: CommunityOptions) -> dict[str, Any]:
        return {
            "id": options.name,
            "name": options.name,
            "dynamic_db": options.dynamic_db,
            "members": list(options.members),
            "invert_match": options.invert_match,
        }


# --- prefix-list ---

@dataclass
class PrefixListOptions:
    name: str = ""
    apply_path: str = ""
    dynamic_db: bool = False
    prefix: list[str] = field(default_factory=list)


class PrefixList(ResourceType[PrefixListOptions]):
    type_name = "junos_policyoptions_prefix_list"
    config_path = "policy-options prefix-list"
    attributes = ("name", "apply_path", "dynamic_db", "prefix")
    required = ("name",)

    def decode(self, attributes: Mapping[str, Any]) -> PrefixListOptions:
        # prefix is an unordered set
        return PrefixListOptions(
            name=attr_str(attributes, "name"),
            apply_path=attr_str(attributes, "apply_path"),
            dynamic_db=attr_bool(attributes, "dynamic_db"),
            prefix=sorted(set(attr_str_list(attributes, "prefix"))),
        )

    def validate(self, options: PrefixListOptions) -> list[str]:
        errors = validate_name(options.name, "name")
        for prefix in options.prefix:
            errors.extend(validate_cidr_network(prefix, "prefix"))
        return errors

    def render(self, options: PrefixListOptions) -> list[str]:
        set_prefix = self.set_prefix(options.name)
        lines = [set_prefix]
        if options.apply_path:
            lines.append(f'{set_prefix} apply-path "{options.apply_path}"')
        if options.dynamic_db:
            lines.append(f"{set_prefix} dynamic-db")
        for prefix in options.prefix:
            lines.append(f"{set_prefix} {prefix}")
        return lines

    def parse(self, output: str, *ids: str) -> PrefixListOptions:
        options = PrefixListOptions()
        for item in relative_lines(output):
            options.name = ids[0]
            if item.startswith("apply-path "):
                options.apply_path = html.unescape(unquote(item.removeprefix("apply-path ")))
            elif item == "dynamic-db":
                options.dynamic_db = True
            elif "/" in item:
                options.prefix.append(item)
        options.prefix.sort()
        return options

    def to_state(self, options: PrefixListOptions) -> dict[str, Any]:
        return {
            "id": options.name,
            "name": options.name,
            "apply_path": options.apply_path,
            "dynamic_db": options.dynamic_db,
            "prefix": list(options.prefix),
        }
