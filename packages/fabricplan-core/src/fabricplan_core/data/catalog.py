"""
Switch catalog implementations.

The rule engine and calculator only depend on the ``SwitchCatalog`` protocol:
two pure lookups that return ``None`` for unknown models. Three concrete
catalogs are provided:

- ``ProfileSwitchCatalog``: an immutable catalog built from ``SwitchProfile`` records.
- ``DefaultSwitchCatalog``: the DS2000 leaf / DS3000 spine fixture pair.
- ``YamlSwitchCatalog``: a file-backed catalog loaded once on first lookup.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Protocol, runtime_checkable

from fabricplan_core.data.manifests import load_switch_profiles
from fabricplan_core.data.ports import expand_port_ranges
from fabricplan_core.models.records import (
    BreakoutCapability,
    ModelProfile,
    SwitchModelInfo,
    SwitchPorts,
    SwitchProfile,
)

_logger = logging.getLogger("fabricplan.catalog")


@runtime_checkable
class SwitchCatalog(Protocol):
    def get_switch_model(self, model_id: str) -> SwitchModelInfo | None: ...

    def get_model_profile(self, model_id: str) -> ModelProfile | None: ...


@runtime_checkable
class SwitchProfileSource(Protocol):
    """Catalogs that can also hand out full switch profiles (ports, breakout)."""

    def get_switch_profile(self, model_id: str) -> SwitchProfile | None: ...

    def switch_profiles(self) -> Mapping[str, SwitchProfile]: ...


def physical_port_count(profile: SwitchProfile) -> int:
    """Explicit ``port_count`` if set, otherwise the distinct assignable ports."""
    if profile.port_count is not None:
        return profile.port_count
    return len(expand_port_ranges([*profile.ports.endpoint_assignable, *profile.ports.fabric_assignable]))


class ProfileSwitchCatalog:
    """Read-only catalog over a fixed set of switch profiles."""

    def __init__(self, profiles: Iterable[SwitchProfile]):
        by_id: dict[str, SwitchProfile] = {}
        for profile in profiles:
            if profile.model_id in by_id:
                raise ValueError(f"duplicate switch profile for model {profile.model_id}")
            by_id[profile.model_id] = profile
        self._profiles = MappingProxyType(by_id)

    def switch_profiles(self) -> Mapping[str, SwitchProfile]:
        return self._profiles

    def get_switch_profile(self, model_id: str) -> SwitchProfile | None:
        return self._profiles.get(model_id)

    def get_switch_model(self, model_id: str) -> SwitchModelInfo | None:
        profile = self._profiles.get(model_id)
        if profile is None:
            return None
        return SwitchModelInfo(ports=physical_port_count(profile), role=profile.primary_role)

    def get_model_profile(self, model_id: str) -> ModelProfile | None:
        profile = self._profiles.get(model_id)
        if profile is None:
            return None
        return ModelProfile(max_capacity=profile.max_capacity or 0, recommended=profile.recommended)

    def __contains__(self, model_id: str) -> bool:
        return model_id in self._profiles

    def __len__(self) -> int:
        return len(self._profiles)


DS2000 = SwitchProfile(
    model_id="DS2000",
    roles=("leaf",),
    ports=SwitchPorts(endpoint_assignable=("E1/1-48",), fabric_assignable=("E1/49-56",)),
    recommended=("server", "storage"),
    max_capacity=1200,
    port_count=48,
    breakout=BreakoutCapability(supports_breakout=True, breakout_type="4x25G", capacity_multiplier=4),
)

DS3000 = SwitchProfile(
    model_id="DS3000",
    roles=("spine",),
    ports=SwitchPorts(fabric_assignable=("E1/1-32",)),
    recommended=("uplink", "interconnect"),
    max_capacity=800,
    port_count=32,
)


class DefaultSwitchCatalog(ProfileSwitchCatalog):
    """Fixture catalog with the DS2000 (48-port leaf) and DS3000 (32-port spine)."""

    def __init__(self):
        super().__init__([DS2000, DS3000])


class YamlSwitchCatalog:
    """Catalog backed by a switch profile YAML file.

    The file is read on the first lookup, under a lock, and frozen into a
    ``ProfileSwitchCatalog``; later lookups only read that snapshot.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._snapshot: ProfileSwitchCatalog | None = None

    def _catalog(self) -> ProfileSwitchCatalog:
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot
        with self._lock:
            if self._snapshot is None:
                profiles = load_switch_profiles(self.path)
                self._snapshot = ProfileSwitchCatalog(profiles)
                _logger.debug("loaded %d switch profiles from %s", len(profiles), self.path)
            return self._snapshot

    def switch_profiles(self) -> Mapping[str, SwitchProfile]:
        return self._catalog().switch_profiles()

    def get_switch_profile(self, model_id: str) -> SwitchProfile | None:
        return self._catalog().get_switch_profile(model_id)

    def get_switch_model(self, model_id: str) -> SwitchModelInfo | None:
        return self._catalog().get_switch_model(model_id)

    def get_model_profile(self, model_id: str) -> ModelProfile | None:
        return self._catalog().get_model_profile(model_id)
