from .catalog import DefaultSwitchCatalog, ProfileSwitchCatalog, SwitchCatalog, SwitchProfileSource, YamlSwitchCatalog
from .manifests import load_fabric_spec, load_planning_policy, load_switch_profiles
from .ports import expand_port_ranges, parse_port_range

__all__ = [
    "DefaultSwitchCatalog",
    "ProfileSwitchCatalog",
    "SwitchCatalog",
    "SwitchProfileSource",
    "YamlSwitchCatalog",
    "expand_port_ranges",
    "load_fabric_spec",
    "load_planning_policy",
    "load_switch_profiles",
    "parse_port_range",
]
