"""
Breakout configuration checks.

Complements the core rule engine with checks on how breakout is enabled
across a fabric: breakout on models that cannot do it, mixed usage between
leaf classes, lopsided effective capacity, and legacy fabrics that would
benefit from enabling breakout.
"""

from __future__ import annotations

import logging
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field

from fabricplan_core.codebase.debug import trace
from fabricplan_core.data.catalog import physical_port_count
from fabricplan_core.data.ports import expand_port_ranges
from fabricplan_core.models.policy import PlanningPolicy
from fabricplan_core.models.records import FabricSpec, SwitchProfile
from fabricplan_core.models.violations import (
    BreakoutCapacityImbalanceContext,
    BreakoutMixedUsageContext,
    BreakoutRecommendedContext,
    BreakoutUnsupportedContext,
    Remediation,
    RuleViolation,
)

_logger = logging.getLogger("fabricplan.breakout")


class EffectiveCapacity(BaseModel):
    model_config = ConfigDict(frozen=True)
    endpoint_capacity: int
    uplink_capacity: int
    effective_multiplier: int


class BreakoutConfigResult(BaseModel):
    """Outcome of the breakout configuration checks."""

    model_config = ConfigDict(extra="ignore")
    is_valid: bool
    violations: list[RuleViolation] = Field(default_factory=list)
    has_mixed_breakouts: bool = False
    has_unsupported_breakouts: bool = False


def calculate_effective_capacity(profile: SwitchProfile, breakout_enabled: bool = False) -> EffectiveCapacity:
    """Endpoint and uplink port capacity of a switch, with breakout applied to endpoints only."""
    endpoint_ports = len(expand_port_ranges(profile.ports.endpoint_assignable))
    uplink_ports = len(expand_port_ranges(profile.ports.fabric_assignable))

    if not breakout_enabled or not profile.breakout.supports_breakout:
        return EffectiveCapacity(endpoint_capacity=endpoint_ports, uplink_capacity=uplink_ports, effective_multiplier=1)

    multiplier = profile.breakout.capacity_multiplier
    return EffectiveCapacity(
        endpoint_capacity=endpoint_ports * multiplier,
        uplink_capacity=uplink_ports,
        effective_multiplier=multiplier,
    )


def _supports_breakout(profile: SwitchProfile | None) -> bool:
    return profile is not None and profile.breakout.supports_breakout


def _unsupported(
    model_id: str, profile: SwitchProfile | None, message: str, field: str, leaf_class_id: str | None = None
) -> RuleViolation:
    return RuleViolation(
        code="BREAKOUT_UNSUPPORTED",
        severity="error",
        title="Unsupported Breakout",
        message=message,
        leaf_class_id=leaf_class_id,
        context=BreakoutUnsupportedContext(model_id=model_id, profile_known=profile is not None),
        remediation=Remediation(
            what=f"Disable breakout or choose a breakout-capable model instead of {model_id}",
            how=f"Set {field.rsplit('.', 1)[-1]}: false, or switch to a model whose profile supports breakout",
            why=f"{model_id} has no breakout capability in the switch catalog, so its ports cannot be split.",
        ),
        affected_fields=(field,),
    )


@trace
def validate_breakout_configuration(
    spec: FabricSpec,
    profiles: Mapping[str, SwitchProfile],
    policy: PlanningPolicy | None = None,
) -> BreakoutConfigResult:
    """
    Check how breakout is enabled across ``spec``.

    Args:
        spec: Fabric specification
        profiles: Switch profiles keyed by model id
        policy: Thresholds for the imbalance and recommendation checks

    Returns:
        BreakoutConfigResult; ``is_valid`` is False only when an error was raised
    """
    policy = policy or PlanningPolicy()
    violations: list[RuleViolation] = []
    has_mixed = False
    has_unsupported = False

    if spec.is_multi_class:
        leaf_classes = spec.leaf_classes or []
        enabled = [lc.id for lc in leaf_classes if lc.breakout_enabled]
        disabled = [lc.id for lc in leaf_classes if not lc.breakout_enabled]
        has_mixed = bool(enabled) and bool(disabled)
        if has_mixed:
            violations.append(
                RuleViolation(
                    code="BREAKOUT_MIXED_USAGE",
                    severity="warning",
                    title="Mixed Breakout Usage",
                    message=(
                        "Some leaf classes have breakouts enabled while others do not. "
                        "This may cause capacity imbalances."
                    ),
                    context=BreakoutMixedUsageContext(enabled_classes=tuple(enabled), disabled_classes=tuple(disabled)),
                    remediation=Remediation(
                        what="Use breakout consistently across leaf classes",
                        how=f"Enable breakout on {', '.join(disabled)} or disable it on {', '.join(enabled)}",
                        why="Classes with and without breakout offer very different endpoint capacity per leaf.",
                    ),
                    affected_fields=tuple(
                        f"leafClasses.{index}.breakoutEnabled" for index in range(len(leaf_classes))
                    ),
                )
            )

        for index, leaf_class in enumerate(leaf_classes):
            if not leaf_class.breakout_enabled:
                continue
            model_id = leaf_class.leaf_model_id or spec.leaf_model_id
            profile = profiles.get(model_id)
            if _supports_breakout(profile):
                continue
            has_unsupported = True
            violations.append(
                _unsupported(
                    model_id,
                    profile,
                    f"Leaf class '{leaf_class.id}' using model {model_id} does not support breakouts "
                    "but breakout is enabled.",
                    f"leafClasses.{index}.breakoutEnabled",
                    leaf_class_id=leaf_class.id,
                )
            )

        violations.extend(_capacity_imbalance(spec, profiles, policy))
    elif spec.breakout_enabled:
        profile = profiles.get(spec.leaf_model_id)
        if not _supports_breakout(profile):
            has_unsupported = True
            violations.append(
                _unsupported(
                    spec.leaf_model_id,
                    profile,
                    f"Switch model {spec.leaf_model_id} does not support breakouts but breakout is enabled.",
                    "breakoutEnabled",
                )
            )

    violations.extend(_recommendations(spec, profiles, policy))

    is_valid = not any(violation.severity == "error" for violation in violations)
    if not is_valid:
        _logger.info("breakout configuration of %s has unsupported breakouts", spec.name)
    return BreakoutConfigResult(
        is_valid=is_valid,
        violations=violations,
        has_mixed_breakouts=has_mixed,
        has_unsupported_breakouts=has_unsupported,
    )


def _leaf_ports(profile: SwitchProfile | None, policy: PlanningPolicy) -> int:
    return physical_port_count(profile) if profile is not None else policy.default_leaf_ports


def _capacity_imbalance(
    spec: FabricSpec, profiles: Mapping[str, SwitchProfile], policy: PlanningPolicy
) -> list[RuleViolation]:
    leaf_classes = spec.leaf_classes or []
    if len(leaf_classes) < 2:
        return []

    capacities: dict[str, int] = {}
    for leaf_class in leaf_classes:
        profile = profiles.get(leaf_class.leaf_model_id or spec.leaf_model_id)
        capacity = _leaf_ports(profile, policy) - leaf_class.uplinks_per_leaf
        if leaf_class.breakout_enabled and _supports_breakout(profile):
            capacity *= profile.breakout.capacity_multiplier
        capacities[leaf_class.id] = capacity

    low = min(capacities.values())
    high = max(capacities.values())
    if high <= low * policy.capacity_imbalance_factor:
        return []

    low_classes = tuple(cid for cid, cap in capacities.items() if cap == low)
    high_classes = tuple(cid for cid, cap in capacities.items() if cap == high)
    return [
        RuleViolation(
            code="BREAKOUT_CAPACITY_IMBALANCE",
            severity="warning",
            title="Capacity Imbalance",
            message=(
                f"Significant capacity difference detected. Classes [{', '.join(low_classes)}] have {low} ports "
                f"while [{', '.join(high_classes)}] have {high} ports."
            ),
            context=BreakoutCapacityImbalanceContext(
                min_capacity=low, max_capacity=high, low_classes=low_classes, high_classes=high_classes
            ),
            remediation=Remediation(
                what="Balance endpoint capacity between leaf classes",
                how=f"Enable breakout or reduce uplinks on {', '.join(low_classes)}",
                why=f"Per-leaf endpoint capacity differs by more than {policy.capacity_imbalance_factor:g}x.",
            ),
        )
    ]


def _recommendations(
    spec: FabricSpec, profiles: Mapping[str, SwitchProfile], policy: PlanningPolicy
) -> list[RuleViolation]:
    if spec.is_multi_class or spec.breakout_enabled:
        return []
    profile = profiles.get(spec.leaf_model_id)
    if not _supports_breakout(profile):
        return []
    demand = spec.legacy_port_demand
    if not demand or not spec.uplinks_per_leaf:
        return []

    base_capacity = _leaf_ports(profile, policy) - spec.uplinks_per_leaf
    if base_capacity <= 0:
        return []
    utilization = demand / base_capacity
    if utilization <= policy.breakout_recommendation_threshold:
        return []

    multiplier = profile.breakout.capacity_multiplier
    with_breakout = demand / (base_capacity * multiplier)
    breakout_type = profile.breakout.breakout_type or f"{multiplier}x"
    return [
        RuleViolation(
            code="BREAKOUT_RECOMMENDED",
            severity="info",
            title="Consider Breakouts",
            message=(
                f"High port utilization detected ({utilization * 100:.1f}%). Enabling {breakout_type} breakouts "
                f"would reduce utilization to {with_breakout * 100:.1f}%."
            ),
            context=BreakoutRecommendedContext(
                model_id=spec.leaf_model_id,
                base_capacity=base_capacity,
                current_utilization=utilization,
                utilization_with_breakout=with_breakout,
                breakout_type=profile.breakout.breakout_type,
            ),
            remediation=Remediation(
                what="Enable breakout on the leaf switches",
                how="Set breakoutEnabled: true",
                why=f"{spec.leaf_model_id} supports {breakout_type} breakout, multiplying endpoint ports by {multiplier}.",
            ),
            affected_fields=("breakoutEnabled",),
        )
    ]
