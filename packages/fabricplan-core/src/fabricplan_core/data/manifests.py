"""
Manifest loaders for fabric planning inputs using Pydantic v2.

Provides typed YAML loaders for the fabric spec, the switch profile catalog
and the planning policy consumed by ``fabricplan topology`` and
``fabricplan breakout``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import TypeAdapter

from fabricplan_core.data.loader import load_yaml_typed, read_yaml, validate_typed
from fabricplan_core.models.policy import PlanningPolicy
from fabricplan_core.models.records import FabricSpec, SwitchProfile

_logger = logging.getLogger("fabricplan.manifests")


def load_fabric_spec(path: Path | str) -> FabricSpec:
    """
    Load and validate a fabric specification.

    Accepts either the bare spec mapping or a document with a top-level
    ``fabric:`` key.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the YAML is malformed or fails validation
    """
    data = read_yaml(path)
    if isinstance(data, dict) and isinstance(data.get("fabric"), dict):
        data = data["fabric"]
    return validate_typed(data, path, model=FabricSpec)


def load_switch_profiles(path: Path | str) -> list[SwitchProfile]:
    """
    Load switch profiles from YAML.

    The document is either a list of profiles or a mapping with a
    ``switches:`` list.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the YAML is malformed or fails validation
    """
    data = read_yaml(path)
    if isinstance(data, dict):
        if "switches" not in data:
            raise ValueError(f"Expected a list or a 'switches' key in {path}")
        data = data["switches"]
    if not isinstance(data, list):
        raise ValueError(f"'switches' must be a list in {path}, got {type(data).__name__}")
    return validate_typed(data, path, adapter=TypeAdapter(list[SwitchProfile]))


def load_planning_policy(path: Path | str | None = None) -> PlanningPolicy:
    """Load the planning policy; a missing path or file yields the defaults."""
    if path is None:
        return PlanningPolicy()
    try:
        return load_yaml_typed(Path(path), model=PlanningPolicy)
    except FileNotFoundError:
        _logger.info("planning policy %s not found, using defaults", path)
        return PlanningPolicy()
