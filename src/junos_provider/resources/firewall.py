"""firewall policer."""
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..engine.lines import parse_int, relative_lines
from ..engine.resource import ResourceType, attr_block, attr_bool, attr_int, attr_str
from ..engine.validator import validate_int_range, validate_name


@dataclass
class PolicerIfExceeding:
    burst_size_limit: str = ""
    bandwidth_percent: int = 0
    bandwidth_limit: str = ""


@dataclass
class PolicerIfExceedingPps:
    packet_burst: str = ""
    pps_limit: str = ""


@dataclass
class PolicerThen:
    discard: bool = False
    forwarding_class: str = ""
    loss_priority: str = ""
    out_of_profile: bool = False

    def is_empty(self) -> bool:
        return not (self.discard or self.forwarding_class or self.loss_priority or self.out_of_profile)


@dataclass
class PolicerOptions:
    name: str = ""
    filter_specific: bool = False
    logical_bandwidth_policer: bool = False
    logical_interface_policer: bool = False
    physical_interface_policer: bool = False
    shared_bandwidth_policer: bool = False
    if_exceeding: Optional[PolicerIfExceeding] = None
    if_exceeding_pps: Optional[PolicerIfExceedingPps] = None
    then: Optional[PolicerThen] = None


# Policer flags rendered as bare keywords, in line order
FLAGS = (
    "filter_specific",
    "logical_bandwidth_policer",
    "logical_interface_policer",
    "physical_interface_policer",
    "shared_bandwidth_policer",
)


class Policer(ResourceType[PolicerOptions]):
    """Rate limiter referenced from firewall filter terms.

    Exactly one of ``if_exceeding`` (bandwidth) or ``if_exceeding_pps``
    (packets per second) limits the traffic; ``then`` is required and must
    hold at least one action.
    """
    type_name = "junos_firewall_policer"
    config_path = "firewall policer"
    attributes = ("name", *FLAGS, "if_exceeding", "if_exceeding_pps", "then")
    required = (
        "name",
        "if_exceeding.0.burst_size_limit",
        "if_exceeding_pps.0.packet_burst",
        "if_exceeding_pps.0.pps_limit",
        "then",
    )
    conflicts = (
        ("physical_interface_policer", "filter_specific"),
        ("physical_interface_policer", "logical_bandwidth_policer"),
        ("physical_interface_policer", "logical_interface_policer"),
        ("if_exceeding.0.bandwidth_percent", "if_exceeding.0.bandwidth_limit"),
        ("then.0.discard", "then.0.out_of_profile"),
        ("then.0.discard", "then.0.forwarding_class"),
        ("then.0.discard", "then.0.loss_priority"),
    )

    def decode(self, attributes: Mapping[str, Any]) -> PolicerOptions:
        options = PolicerOptions(name=attr_str(attributes, "name"))
        for flag in FLAGS:
            setattr(options, flag, attr_bool(attributes, flag))
        block = attr_block(attributes, "if_exceeding")
        if block is not None:
            options.if_exceeding = PolicerIfExceeding(
                burst_size_limit=attr_str(block, "burst_size_limit"),
                bandwidth_percent=attr_int(block, "bandwidth_percent"),
                bandwidth_limit=attr_str(block, "bandwidth_limit"),
            )
        block = attr_block(attributes, "if_exceeding_pps")
        if block is not None:
            options.if_exceeding_pps = PolicerIfExceedingPps(
                packet_burst=attr_str(block, "packet_burst"),
                pps_limit=attr_str(block, "pps_limit"),
            )
        block = attr_block(attributes, "then")
        if block is not None:
            options.then = PolicerThen(
                discard=attr_bool(block, "discard"),
                forwarding_class=attr_str(block, "forwarding_class"),
                loss_priority=attr_str(block, "loss_priority"),
                out_of_profile=attr_bool(block, "out_of_profile"),
            )
        return options

    def validate(self, options: PolicerOptions) -> list[str]:
        errors = validate_name(options.name, "name")
        if options.if_exceeding is None and options.if_exceeding_pps is None:
            errors.append("name: one of if_exceeding or if_exceeding_pps block must be specified")
        elif options.if_exceeding is not None and options.if_exceeding_pps is not None:
            errors.append("if_exceeding: only one of if_exceeding or if_exceeding_pps block can be specified")
        if options.if_exceeding and options.if_exceeding.bandwidth_percent:
            errors.extend(validate_int_range(
                options.if_exceeding.bandwidth_percent, "if_exceeding.0.bandwidth_percent", 1, 100
            ))
        if options.then is not None and options.then.is_empty():
            errors.append("then: then block is empty")
        return errors

    def render(self, options: PolicerOptions) -> list[str]:
        set_prefix = self.set_prefix(options.name)
        lines = []
        for flag in FLAGS:
            if getattr(options, flag):
                lines.append(f"{set_prefix} {flag.replace('_', '-')}")
        exceeding = options.if_exceeding
        if exceeding is not None:
            lines.append(f"{set_prefix} if-exceeding burst-size-limit {exceeding.burst_size_limit}")
            if exceeding.bandwidth_percent != 0:
                lines.append(f"{set_prefix} if-exceeding bandwidth-percent {exceeding.bandwidth_percent}")
            if exceeding.bandwidth_limit:
                lines.append(f"{set_prefix} if-exceeding bandwidth-limit {exceeding.bandwidth_limit}")
        pps = options.if_exceeding_pps
        if pps is not None:
            lines.append(f"{set_prefix} if-exceeding-pps packet-burst {pps.packet_burst}")
            lines.append(f"{set_prefix} if-exceeding-pps pps-limit {pps.pps_limit}")
        then = options.then
        if then is not None:
            if then.discard:
                lines.append(f"{set_prefix} then discard")
            if then.forwarding_class:
                lines.append(f"{set_prefix} then forwarding-class {then.forwarding_class}")
            if then.loss_priority:
                lines.append(f"{set_prefix} then loss-priority {then.loss_priority}")
            if then.out_of_profile:
                lines.append(f"{set_prefix} then out-of-profile")
        return lines

    def parse(self, output: str, *ids: str) -> PolicerOptions:
        options = PolicerOptions()
        flags = {flag.replace("_", "-"): flag for flag in FLAGS}
        for item in relative_lines(output):
            options.name = ids[0]
            if item in flags:
                setattr(options, flags[item], True)
            elif item.startswith("if-exceeding "):
                if options.if_exceeding is None:
                    options.if_exceeding = PolicerIfExceeding()
                item = item.removeprefix("if-exceeding ")
                if item.startswith("burst-size-limit "):
                    options.if_exceeding.burst_size_limit = item.removeprefix("burst-size-limit ")
                elif item.startswith("bandwidth-percent "):
                    options.if_exceeding.bandwidth_percent = parse_int(item.removeprefix("bandwidth-percent "))
                elif item.startswith("bandwidth-limit "):
                    options.if_exceeding.bandwidth_limit = item.removeprefix("bandwidth-limit ")
            elif item.startswith("if-exceeding-pps "):
                if options.if_exceeding_pps is None:
                    options.if_exceeding_pps = PolicerIfExceedingPps()
                item = item.removeprefix("if-exceeding-pps ")
                if item.startswith("packet-burst "):
                    options.if_exceeding_pps.packet_burst = item.removeprefix("packet-burst ")
                elif item.startswith("pps-limit "):
                    options.if_exceeding_pps.pps_limit = item.removeprefix("pps-limit ")
            elif item.startswith("then "):
                if options.then is None:
                    options.then = PolicerThen()
                item = item.removeprefix("then ")
                if item == "discard":
                    options.then.discard = True
                elif item.startswith("forwarding-class "):
                    options.then.forwarding_class = item.removeprefix("forwarding-class ")
                elif item.startswith("loss-priority "):
                    options.then.loss_priority = item.removeprefix("loss-priority ")
                elif item == "out-of-profile":
                    options.then.out_of_profile = True
        return options

    def to_state(self, options: PolicerOptions) -> dict[str, Any]:
        state: dict[str, Any] = {"id": options.name, "name": options.name}
        for flag in FLAGS:
            state[flag] = getattr(options, flag)
        state["if_exceeding"] = []
        state["if_exceeding_pps"] = []
        state["then"] = []
        if options.if_exceeding is not None:
            state["if_exceeding"].append({
                "burst_size_limit": options.if_exceeding.burst_size_limit,
                "bandwidth_percent": options.if_exceeding.bandwidth_percent,
                "bandwidth_limit": options.if_exceeding.bandwidth_limit,
            })
        if options.if_exceeding_pps is not None:
            state["if_exceeding_pps"].append({
                "packet_burst": options.if_exceeding_pps.packet_burst,
                "pps_limit": options.if_exceeding_pps.pps_limit,
            })
        if options.then is not None:
            state["then"].append({
                "discard": options.then.discard,
                "forwarding_class": options.then.forwarding_class,
                "loss_priority": options.then.loss_priority,
                "out_of_profile": options.then.out_of_profile,
            })
        return state
