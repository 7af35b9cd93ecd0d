"""Normalize legacy and multi-class fabric specs into one leaf-class shape."""

from __future__ import annotations

from dataclasses import dataclass

from fabricplan_core.data.catalog import SwitchCatalog
from fabricplan_core.models.records import DerivedTopology, EndpointProfile, FabricSpec
from fabricplan_core.sizing import leaves_needed


@dataclass(frozen=True)
class NormalizedLeafClass:
    """One leaf class as seen by the rule checks.

    A legacy spec becomes a single ``implicit`` class: it has no
    ``leaf_class_id`` and its leaf count is the calculator's ``leaves_needed``.
    """

    leaf_class_id: str | None
    index: int
    uplinks_per_leaf: int
    leaf_model_id: str
    explicit_count: int | None
    mc_lag: bool
    breakout_enabled: bool
    endpoint_profiles: tuple[EndpointProfile, ...]
    endpoint_count: int
    port_demand: int
    implicit: bool = False

    @property
    def label(self) -> str:
        return self.leaf_class_id or "legacy"

    def field(self, name: str) -> str:
        """Path of a spec field for ``affected_fields``."""
        if self.implicit:
            return name
        return f"leafClasses.{self.leaf_class_id}.{name}"


def normalize_leaf_classes(spec: FabricSpec, derived: DerivedTopology) -> list[NormalizedLeafClass]:
    if spec.is_multi_class:
        return [
            NormalizedLeafClass(
                leaf_class_id=leaf_class.id,
                index=index,
                uplinks_per_leaf=leaf_class.uplinks_per_leaf,
                leaf_model_id=leaf_class.leaf_model_id or spec.leaf_model_id,
                explicit_count=leaf_class.count,
                mc_lag=leaf_class.mc_lag,
                breakout_enabled=leaf_class.breakout_enabled,
                endpoint_profiles=tuple(leaf_class.endpoint_profiles),
                endpoint_count=leaf_class.endpoint_count,
                port_demand=leaf_class.port_demand,
            )
            for index, leaf_class in enumerate(spec.leaf_classes or [])
        ]

    return [
        NormalizedLeafClass(
            leaf_class_id=None,
            index=0,
            uplinks_per_leaf=spec.uplinks_per_leaf,
            leaf_model_id=spec.leaf_model_id,
            explicit_count=derived.leaves_needed,
            mc_lag=False,
            breakout_enabled=spec.breakout_enabled,
            endpoint_profiles=(spec.endpoint_profile,) if spec.endpoint_profile is not None else (),
            endpoint_count=spec.legacy_endpoint_count,
            port_demand=spec.legacy_port_demand,
            implicit=True,
        )
    ]


def resolve_leaf_count(
    leaf_class: NormalizedLeafClass, catalog: SwitchCatalog, fallback_leaf_ports: int | None = None
) -> int | None:
    """
    Leaves in ``leaf_class``: the explicit count, else ceiling sizing of its
    endpoints against the class's leaf model.

    An unknown leaf model is sized with ``fallback_leaf_ports`` when given and
    is otherwise unresolvable (None).
    """
    if leaf_class.explicit_count is not None:
        return leaf_class.explicit_count
    model = catalog.get_switch_model(leaf_class.leaf_model_id)
    if model is not None:
        leaf_ports = model.ports
    elif fallback_leaf_ports is not None:
        leaf_ports = fallback_leaf_ports
    else:
        return None
    return leaves_needed(leaf_class.endpoint_count, leaf_ports - leaf_class.uplinks_per_leaf)
