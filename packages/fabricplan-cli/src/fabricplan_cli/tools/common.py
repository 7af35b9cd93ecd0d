from typing import Optional

import yaml

from fabricplan_core.data.catalog import DefaultSwitchCatalog, YamlSwitchCatalog

SEVERITY_COLORS = {"error": "red", "warning": "yellow", "info": "blue"}


def open_catalog(path: Optional[str]):
    """YAML-backed catalog when a path is given, else the DS2000/DS3000 fixture."""
    if path:
        return YamlSwitchCatalog(path)
    return DefaultSwitchCatalog()


def export_yaml(data: dict, path: str) -> None:
    with open(path, "w") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=True)
