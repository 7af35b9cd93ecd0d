"""Topology capacity calculator.

Maps a ``FabricSpec`` to a ``DerivedTopology``: leaves and spines needed, port
totals and the oversubscription ratio, plus advisory ``validation_errors``
strings for the calculator's own sanity checks. Pure and idempotent.

Leaves and the oversubscription ratio are sized by endpoint count; ports per
endpoint only enter the rule engine's leaf capacity check.
"""

from __future__ import annotations

import logging

from fabricplan_core.data.catalog import DefaultSwitchCatalog, SwitchCatalog
from fabricplan_core.models.policy import PlanningPolicy
from fabricplan_core.models.records import DerivedTopology, FabricSpec
from fabricplan_core.sizing import leaves_needed, oversubscription_ratio, spines_needed

_logger = logging.getLogger("fabricplan.topology")


def _port_count(catalog: SwitchCatalog, model_id: str, default: int) -> int:
    model = catalog.get_switch_model(model_id)
    if model is None:
        _logger.debug("model %s not in catalog, assuming %d ports", model_id, default)
        return default
    return model.ports


def _advisories(
    leaves: int, spines: int, ratio: float, policy: PlanningPolicy, uplink_errors: list[str] | None = None
) -> list[str]:
    errors = []
    if leaves == 0:
        errors.append("No leaves computed")
    if spines == 0:
        errors.append("No spines computed")
    errors.extend(uplink_errors or [])
    if ratio > policy.max_oversubscription_ratio:
        errors.append(f"Oversubscription too high: {ratio:.2f}:1")
    return errors


def compute_derived(
    spec: FabricSpec,
    catalog: SwitchCatalog | None = None,
    policy: PlanningPolicy | None = None,
) -> DerivedTopology:
    """
    Size the fabric described by ``spec``.

    Port counts come from ``catalog`` (the DS2000/DS3000 fixture by default);
    models missing from the catalog fall back to the policy's default port
    counts.

    Returns:
        A fresh DerivedTopology; ``is_valid`` is False when any advisory fired
    """
    if catalog is None:
        catalog = DefaultSwitchCatalog()
    policy = policy or PlanningPolicy()

    spine_ports = _port_count(catalog, spec.spine_model_id, policy.default_spine_ports)
    if spec.is_multi_class:
        return _compute_multi_class(spec, catalog, policy, spine_ports)

    leaf_ports = _port_count(catalog, spec.leaf_model_id, policy.default_leaf_ports)
    uplinks = spec.uplinks_per_leaf
    endpoints = spec.legacy_endpoint_count

    leaves = leaves_needed(endpoints, leaf_ports - uplinks)
    spines = spines_needed(leaves, uplinks, spine_ports)
    uplink_ports = leaves * uplinks
    ratio = oversubscription_ratio(endpoints, uplink_ports)

    uplink_errors = ["Too many uplinks per leaf"] if uplinks > leaf_ports * policy.max_uplink_fraction else []
    errors = _advisories(leaves, spines, ratio, policy, uplink_errors)

    return DerivedTopology(
        leaves_needed=leaves,
        spines_needed=spines,
        total_ports=leaves * leaf_ports + spines * spine_ports,
        used_ports=endpoints + 2 * uplink_ports,
        oversubscription_ratio=ratio,
        is_valid=not errors,
        validation_errors=tuple(errors),
    )


def _compute_multi_class(
    spec: FabricSpec, catalog: SwitchCatalog, policy: PlanningPolicy, spine_ports: int
) -> DerivedTopology:
    total_leaves = 0
    total_endpoints = 0
    total_uplinks = 0
    leaf_port_total = 0
    class_errors: list[str] = []

    for leaf_class in sorted(spec.leaf_classes or [], key=lambda lc: lc.id):
        leaf_ports = _port_count(catalog, leaf_class.leaf_model_id or spec.leaf_model_id, policy.default_leaf_ports)
        endpoints = leaf_class.endpoint_count
        if leaf_class.count is not None:
            leaves = leaf_class.count
        else:
            leaves = leaves_needed(endpoints, leaf_ports - leaf_class.uplinks_per_leaf)

        total_leaves += leaves
        total_endpoints += endpoints
        total_uplinks += leaves * leaf_class.uplinks_per_leaf
        leaf_port_total += leaves * leaf_ports

        if leaf_class.uplinks_per_leaf > leaf_ports * policy.max_uplink_fraction:
            class_errors.append(f"Class {leaf_class.id}: Too many uplinks per leaf ({leaf_class.uplinks_per_leaf})")
        if leaves == 0 and endpoints > 0:
            class_errors.append(f"Class {leaf_class.id}: No leaves computed")

    # total_uplinks already sums leaves * uplinks over every class
    spines = spines_needed(total_uplinks, 1, spine_ports)
    ratio = oversubscription_ratio(total_endpoints, total_uplinks)
    errors = class_errors + _advisories(total_leaves, spines, ratio, policy)

    return DerivedTopology(
        leaves_needed=total_leaves,
        spines_needed=spines,
        total_ports=leaf_port_total + spines * spine_ports,
        used_ports=total_endpoints + 2 * total_uplinks,
        oversubscription_ratio=ratio,
        is_valid=not errors,
        validation_errors=tuple(errors),
    )
