"""Fabric specification and switch catalog records.

Records accept the camelCase keys used by fabric manifests (``leafModelId``,
``uplinksPerLeaf``, ...) as well as the snake_case attribute names.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

SwitchRole = Literal["leaf", "spine"]

_RECORD_CONFIG = ConfigDict(extra="ignore", alias_generator=to_camel, populate_by_name=True)
_FROZEN_CONFIG = ConfigDict(extra="ignore", alias_generator=to_camel, populate_by_name=True, frozen=True)


class EndpointProfile(BaseModel):
    """One homogeneous group of attached servers."""

    model_config = _RECORD_CONFIG
    name: str
    ports_per_endpoint: int = Field(default=1, ge=1)
    count: int = Field(default=0, ge=0)
    # Single-homed unless stated otherwise
    nics: int = Field(default=1, ge=1)
    es_lag: bool = False
    type: str | None = None

    @field_validator("ports_per_endpoint", "count", "nics", mode="before")
    @classmethod
    def _coerce_int(cls, v):
        return int(v)

    @property
    def endpoint_type(self) -> str:
        return self.type or "server"

    @property
    def port_demand(self) -> int:
        return self.count * self.ports_per_endpoint


class LeafClass(BaseModel):
    """A named group of leaves sharing uplinks, model and redundancy settings."""

    model_config = _RECORD_CONFIG
    id: str
    name: str | None = None
    uplinks_per_leaf: int = Field(ge=0)
    # None means "derive from endpoint demand"
    count: int | None = Field(default=None, ge=0)
    mc_lag: bool = False
    breakout_enabled: bool = False
    leaf_model_id: str | None = None
    endpoint_profiles: list[EndpointProfile] = Field(default_factory=list)

    @field_validator("uplinks_per_leaf", mode="before")
    @classmethod
    def _coerce_int(cls, v):
        return int(v)

    @property
    def endpoint_count(self) -> int:
        return sum(profile.count for profile in self.endpoint_profiles)

    @property
    def port_demand(self) -> int:
        return sum(profile.port_demand for profile in self.endpoint_profiles)


class FabricSpec(BaseModel):
    """Declarative fabric input, either legacy single-class or multi-class."""

    model_config = _RECORD_CONFIG
    name: str = "fabric"
    spine_model_id: str
    leaf_model_id: str
    uplinks_per_leaf: int = Field(default=0, ge=0)
    endpoint_count: int | None = Field(default=None, ge=0)
    endpoint_profile: EndpointProfile | None = None
    breakout_enabled: bool = False
    leaf_classes: list[LeafClass] | None = None

    @model_validator(mode="after")
    def _unique_class_ids(self):
        ids = [leaf_class.id for leaf_class in self.leaf_classes or []]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"duplicate leaf class ids: {duplicates}")
        return self

    @property
    def is_multi_class(self) -> bool:
        return bool(self.leaf_classes)

    @property
    def legacy_endpoint_count(self) -> int:
        """Endpoint count of a legacy spec; falls back to the profile's own count."""
        if self.endpoint_count is not None:
            return self.endpoint_count
        if self.endpoint_profile is not None:
            return self.endpoint_profile.count
        return 0

    @property
    def legacy_port_demand(self) -> int:
        ports_per_endpoint = self.endpoint_profile.ports_per_endpoint if self.endpoint_profile else 1
        return self.legacy_endpoint_count * ports_per_endpoint


class DerivedTopology(BaseModel):
    """Immutable sizing snapshot computed from a FabricSpec."""

    model_config = _FROZEN_CONFIG
    leaves_needed: int = Field(ge=0)
    spines_needed: int = Field(ge=0)
    total_ports: int = Field(default=0, ge=0)
    used_ports: int = Field(default=0, ge=0)
    oversubscription_ratio: float = Field(default=0.0, ge=0.0)
    is_valid: bool = True
    validation_errors: tuple[str, ...] = ()


class SwitchModelInfo(BaseModel):
    """Port count and fabric role of a switch model."""

    model_config = _FROZEN_CONFIG
    ports: int = Field(ge=0)
    role: SwitchRole


class ModelProfile(BaseModel):
    """Recommended usage profile of a switch model."""

    model_config = _FROZEN_CONFIG
    max_capacity: int = Field(default=0, ge=0)
    recommended: tuple[str, ...] = ()


class SwitchPorts(BaseModel):
    model_config = _FROZEN_CONFIG
    endpoint_assignable: tuple[str, ...] = ()
    fabric_assignable: tuple[str, ...] = ()


class BreakoutCapability(BaseModel):
    model_config = _FROZEN_CONFIG
    supports_breakout: bool = False
    breakout_type: str | None = None
    capacity_multiplier: int = Field(default=1, ge=1)


class SwitchProfile(BaseModel):
    """Catalog entry for a switch model: roles, assignable ports and breakout support.

    Port lists may hold ranges such as ``"E1/1-48"``; use
    :func:`fabricplan_core.data.ports.expand_port_ranges` to enumerate them.
    ``port_count`` overrides the number of physical ports derived from the lists.
    """

    model_config = _FROZEN_CONFIG
    model_id: str
    roles: tuple[SwitchRole, ...] = Field(min_length=1)
    ports: SwitchPorts = Field(default_factory=SwitchPorts)
    recommended: tuple[str, ...] = ()
    max_capacity: int | None = Field(default=None, ge=0)
    port_count: int | None = Field(default=None, ge=0)
    breakout: BreakoutCapability = Field(default_factory=BreakoutCapability)

    @property
    def primary_role(self) -> SwitchRole:
        return self.roles[0]
