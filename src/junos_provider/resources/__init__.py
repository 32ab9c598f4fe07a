"""Resource types supported by the provider."""
from ..engine.resource import ResourceType
from .eventoptions import Destination as EventoptionsDestination
from .firewall import Policer as FirewallPolicer
from .policyoptions import AsPath, AsPathGroup, Community as PolicyoptionsCommunity, PrefixList
from .snmp import Community as SnmpCommunity
from .system import NtpServer

# Resource type registry
RESOURCE_TYPES: dict[str, ResourceType] = {
    resource.type_name: resource
    for resource in (
        AsPath(),
        AsPathGroup(),
        PolicyoptionsCommunity(),
        PrefixList(),
        FirewallPolicer(),
        EventoptionsDestination(),
        SnmpCommunity(),
        NtpServer(),
    )
}


def get_resource_type(name: str) -> ResourceType:
    """Look up a resource type by its ``junos_*`` name."""
    if name not in RESOURCE_TYPES:
        raise KeyError(f"Unknown resource type: {name}")
    return RESOURCE_TYPES[name]


__all__ = [
    "RESOURCE_TYPES",
    "get_resource_type",
    "AsPath",
    "AsPathGroup",
    "PolicyoptionsCommunity",
    "PrefixList",
    "FirewallPolicer",
    "EventoptionsDestination",
    "SnmpCommunity",
    "NtpServer",
]
