"""
Fabric rule evaluation engine.

Evaluates a ``FabricSpec`` against its ``DerivedTopology`` and a switch
catalog. Six independent checks always run, in a fixed order, and each one
contributes zero or more ``RuleViolation`` records:

- SPINE_CAPACITY_EXCEEDED (error)
- LEAF_CAPACITY_EXCEEDED (error)
- UPLINKS_NOT_DIVISIBLE_BY_SPINES (warning)
- MC_LAG_ODD_LEAFS (warning)
- ES_LAG_SINGLE_NIC (warning)
- MODEL_PROFILE_MISMATCH (warning)

Legacy specs are normalized into a single implicit leaf class first, so every
check walks one shape. Checks that need a catalog entry are skipped when the
model is unknown or has the wrong role.
"""

from __future__ import annotations

import logging

from fabricplan_core.codebase.debug import trace
from fabricplan_core.data.catalog import DefaultSwitchCatalog, SwitchCatalog, SwitchProfileSource
from fabricplan_core.models.policy import PlanningPolicy
from fabricplan_core.models.records import DerivedTopology, FabricSpec
from fabricplan_core.models.violations import (
    ClassUplinks,
    EsLagCalculations,
    EsLagContext,
    LeafCapacityCalculations,
    LeafCapacityContext,
    McLagCalculations,
    McLagContext,
    ModelProfileContext,
    Remediation,
    RuleEvaluationResult,
    RuleViolation,
    SpineCapacityCalculations,
    SpineCapacityContext,
    UplinkDivisibilityCalculations,
    UplinkDivisibilityContext,
)
from fabricplan_core.sizing import units_for
from fabricplan_core.validation.normalize import NormalizedLeafClass, normalize_leaf_classes, resolve_leaf_count

_logger = logging.getLogger("fabricplan.rules")


def _plural(n: int, singular: str, plural: str | None = None) -> str:
    return singular if n == 1 else (plural or f"{singular}s")


@trace
def check_spine_capacity(
    spec: FabricSpec,
    derived: DerivedTopology,
    classes: list[NormalizedLeafClass],
    catalog: SwitchCatalog,
    policy: PlanningPolicy,
) -> list[RuleViolation]:
    """Total uplink demand across all leaf classes must fit on the spines.

    Classes with an unset count on an unknown leaf model are sized with the
    policy default leaf ports, as the calculator sizes them.
    """
    spine_model = catalog.get_switch_model(spec.spine_model_id)
    if spine_model is None or spine_model.role != "spine":
        return []

    breakdown = []
    for leaf_class in classes:
        leaves = resolve_leaf_count(leaf_class, catalog, policy.default_leaf_ports)
        breakdown.append(
            ClassUplinks(
                leaf_class_id=leaf_class.leaf_class_id,
                leaves=leaves,
                uplinks_per_leaf=leaf_class.uplinks_per_leaf,
                total=leaves * leaf_class.uplinks_per_leaf,
            )
        )

    demand = sum(entry.total for entry in breakdown)
    ports = spine_model.ports
    spines = derived.spines_needed
    capacity = spines * ports
    if demand <= capacity:
        return []

    shortfall = demand - capacity
    additional = units_for(shortfall, ports)
    min_spines = units_for(demand, ports)

    how = [f"Option 1: Use {min_spines} total {_plural(min_spines, 'spine')} ({min_spines * ports} spine ports)."]
    if not spec.is_multi_class and derived.leaves_needed > 0:
        max_uplinks = capacity // derived.leaves_needed
        how.append(f"Option 2: Reduce uplinks per leaf to {max_uplinks} or fewer.")
    else:
        how.append(f"Option 2: Reduce uplinks per leaf so the fabric needs at most {capacity} uplinks.")
    if spines > 0:
        how.append(f"Option 3: Use a spine model with at least {units_for(demand, spines)} ports.")

    if spec.is_multi_class:
        affected = tuple(lc.field("uplinksPerLeaf") for lc in classes) + ("spineModelId",)
    else:
        affected = ("uplinksPerLeaf", "spineModelId")

    return [
        RuleViolation(
            code="SPINE_CAPACITY_EXCEEDED",
            severity="error",
            title="Spine Capacity Exceeded",
            message=(
                f"Spine capacity exceeded: need {demand} ports but only {capacity} available "
                f"across {spines} {_plural(spines, 'spine')}"
            ),
            context=SpineCapacityContext(
                expected=capacity,
                actual=demand,
                spine_count=spines,
                ports_per_spine=ports,
                calculations=SpineCapacityCalculations(
                    shortfall=shortfall,
                    additional_spines_needed=additional,
                    min_spines_for_capacity=min_spines,
                    class_breakdown=tuple(breakdown),
                ),
            ),
            remediation=Remediation(
                what=f"Add {additional} more {_plural(additional, 'spine')} or reduce uplinks per leaf",
                how=" ".join(how),
                why=(
                    f"The fabric requires every leaf uplink to land on its own spine port; "
                    f"{demand} uplinks cannot fit in {capacity} spine ports."
                ),
            ),
            affected_fields=affected,
        )
    ]


@trace
def check_leaf_capacity(classes: list[NormalizedLeafClass], catalog: SwitchCatalog) -> list[RuleViolation]:
    """Endpoint port demand of each class must fit on that class's leaf downlinks."""
    violations = []
    for leaf_class in classes:
        leaf_model = catalog.get_switch_model(leaf_class.leaf_model_id)
        if leaf_model is None or leaf_model.role != "leaf":
            _logger.debug("skipping leaf capacity for %s: no leaf model %s", leaf_class.label, leaf_class.leaf_model_id)
            continue

        downlinks = leaf_model.ports - leaf_class.uplinks_per_leaf
        leaves = resolve_leaf_count(leaf_class, catalog)
        capacity = leaves * downlinks
        demand = leaf_class.port_demand
        if demand <= capacity:
            continue

        shortfall = demand - capacity
        additional = units_for(shortfall, downlinks)
        min_leaves = units_for(demand, downlinks)
        scope = "" if leaf_class.implicit else f" for class '{leaf_class.leaf_class_id}'"

        if downlinks > 0:
            what = f"Add {additional} more {_plural(additional, 'leaf', 'leaves')}{scope}"
            how = (
                f"Option 1: Add {additional} {_plural(additional, 'leaf', 'leaves')} ({min_leaves} total). "
                "Option 2: Reduce uplinks per leaf to free endpoint ports. "
                "Option 3: Reduce endpoint count or ports per endpoint."
            )
        else:
            what = f"Reduce uplinks per leaf below {leaf_model.ports}{scope}"
            how = f"Option 1: Set uplinks per leaf to fewer than {leaf_model.ports} so leaves have endpoint ports."
        if leaf_class.implicit:
            affected = ("endpointCount", "uplinksPerLeaf")
        else:
            affected = (leaf_class.field("count"), leaf_class.field("uplinksPerLeaf"))

        violations.append(
            RuleViolation(
                code="LEAF_CAPACITY_EXCEEDED",
                severity="error",
                title="Leaf Capacity Exceeded",
                message=f"Leaf capacity exceeded{scope}: need {demand} endpoint ports but only {capacity} available",
                leaf_class_id=leaf_class.leaf_class_id,
                context=LeafCapacityContext(
                    expected=capacity,
                    actual=demand,
                    leaf_count=leaves,
                    ports_per_leaf=downlinks,
                    leaf_class_id=leaf_class.leaf_class_id,
                    calculations=LeafCapacityCalculations(
                        shortfall=shortfall,
                        additional_leaves_needed=additional,
                        min_leaves_for_capacity=min_leaves,
                    ),
                ),
                remediation=Remediation(
                    what=what,
                    how=how,
                    why=(
                        f"Each leaf offers {max(downlinks, 0)} endpoint ports after uplinks; "
                        f"{leaves} {_plural(leaves, 'leaf', 'leaves')} cannot host {demand} endpoint ports."
                    ),
                ),
                affected_fields=affected,
            )
        )
    return violations


@trace
def check_uplink_divisibility(classes: list[NormalizedLeafClass], derived: DerivedTopology) -> list[RuleViolation]:
    spines = derived.spines_needed
    if spines <= 1:
        return []

    violations = []
    for leaf_class in classes:
        uplinks = leaf_class.uplinks_per_leaf
        remainder = uplinks % spines
        if remainder == 0:
            continue

        lower = uplinks - remainder
        optimal = tuple(n for n in (lower, lower + spines) if n > 0)
        prefix = "Uplinks per leaf" if leaf_class.implicit else f"Leaf class '{leaf_class.leaf_class_id}' uplinks"
        violations.append(
            RuleViolation(
                code="UPLINKS_NOT_DIVISIBLE_BY_SPINES",
                severity="warning",
                title="Uneven Load Distribution",
                message=(
                    f"{prefix} ({uplinks}) not evenly divisible by spine count ({spines}) "
                    "- may cause uneven load distribution"
                ),
                leaf_class_id=leaf_class.leaf_class_id,
                context=UplinkDivisibilityContext(
                    uplinks_per_leaf=uplinks,
                    spine_count=spines,
                    remainder=remainder,
                    calculations=UplinkDivisibilityCalculations(
                        remainder=remainder, spine_count=spines, optimal_counts=optimal
                    ),
                ),
                remediation=Remediation(
                    what=f"Adjust uplinks per leaf to a multiple of {spines}",
                    how=f"Use {' or '.join(str(n) for n in optimal)} uplinks per leaf",
                    why=(
                        f"Uneven distribution causes {remainder} {_plural(remainder, 'spine')} to carry "
                        "an extra uplink from every leaf, concentrating traffic."
                    ),
                ),
                affected_fields=(leaf_class.field("uplinksPerLeaf"),),
            )
        )
    return violations


@trace
def check_mc_lag_pairs(classes: list[NormalizedLeafClass], catalog: SwitchCatalog) -> list[RuleViolation]:
    """MC-LAG classes need an even number of leaves, at least two."""
    violations = []
    for leaf_class in classes:
        if leaf_class.implicit or not leaf_class.mc_lag:
            continue
        leaves = resolve_leaf_count(leaf_class, catalog)
        if leaves is None:
            _logger.debug("skipping MC-LAG pairs for %s: no leaf model %s", leaf_class.label, leaf_class.leaf_model_id)
            continue
        if leaves % 2 == 0 and leaves >= 2:
            continue

        suggested = max(2, leaves + leaves % 2)
        pairs = suggested // 2
        what = (
            "Add more leaves for MC-LAG pairs"
            if leaves < 2
            else f"Make the leaf count of class '{leaf_class.leaf_class_id}' even"
        )
        violations.append(
            RuleViolation(
                code="MC_LAG_ODD_LEAFS",
                severity="warning",
                title=f"MC-LAG Configuration Issue - Class '{leaf_class.leaf_class_id}'",
                message=(
                    f"MC-LAG enabled for class '{leaf_class.leaf_class_id}' but leaf count ({leaves}) "
                    "is not even or less than 2 - MC-LAG requires pairs of leaves"
                ),
                leaf_class_id=leaf_class.leaf_class_id,
                context=McLagContext(
                    leaf_count=leaves,
                    calculations=McLagCalculations(suggested_count=suggested, pairs_needed=pairs),
                ),
                remediation=Remediation(
                    what=what,
                    how=f"Set leaf count to {suggested} ({pairs} MC-LAG {_plural(pairs, 'pair')}), or disable MC-LAG",
                    why="MC-LAG groups leaves into redundant peers. Each pair needs exactly 2 leaves.",
                ),
                affected_fields=(leaf_class.field("count"), leaf_class.field("mcLag")),
            )
        )
    return violations


@trace
def check_es_lag_nics(classes: list[NormalizedLeafClass]) -> list[RuleViolation]:
    violations = []
    for leaf_class in classes:
        for index, profile in enumerate(leaf_class.endpoint_profiles):
            if not profile.es_lag or profile.nics != 1:
                continue
            if leaf_class.implicit:
                field = "endpointProfile.nics"
            else:
                field = leaf_class.field(f"endpointProfiles.{index}.nics")
            violations.append(
                RuleViolation(
                    code="ES_LAG_SINGLE_NIC",
                    severity="warning",
                    title=f"ES-LAG Configuration Issue - Profile '{profile.name}'",
                    message=(
                        f"ES-LAG enabled for endpoint profile '{profile.name}' but NIC count is 1 "
                        "- ES-LAG requires multiple NICs for redundancy"
                    ),
                    leaf_class_id=leaf_class.leaf_class_id,
                    context=EsLagContext(
                        profile_name=profile.name,
                        nic_count=profile.nics,
                        calculations=EsLagCalculations(nic_count=profile.nics),
                    ),
                    remediation=Remediation(
                        what=f"Give profile '{profile.name}' a second NIC or disable ES-LAG",
                        how=f"Set nics: 2 on profile '{profile.name}', or set esLag: false",
                        why="Single NIC endpoints cannot utilize ES-LAG; the bond needs links to two different leaves.",
                    ),
                    affected_fields=(field,),
                )
            )
    return violations


def _uplink_spine_models(catalog: SwitchCatalog) -> list[str]:
    if not isinstance(catalog, SwitchProfileSource):
        return []
    return sorted(
        model_id
        for model_id, profile in catalog.switch_profiles().items()
        if "spine" in profile.roles and "uplink" in profile.recommended
    )


@trace
def check_model_profiles(
    spec: FabricSpec, classes: list[NormalizedLeafClass], catalog: SwitchCatalog
) -> list[RuleViolation]:
    """Spine models should be recommended for uplinks, server leaves for servers."""
    violations = []

    spine_profile = catalog.get_model_profile(spec.spine_model_id)
    if spine_profile is not None and "uplink" not in spine_profile.recommended:
        alternatives = _uplink_spine_models(catalog)
        how = (
            f"Replace with {' or '.join(alternatives)}"
            if alternatives
            else "Replace with a spine model recommended for uplink usage"
        )
        violations.append(
            RuleViolation(
                code="MODEL_PROFILE_MISMATCH",
                severity="warning",
                title="Spine Model Not Optimized",
                message=f"Spine model '{spec.spine_model_id}' may not be optimized for uplink usage",
                context=ModelProfileContext(
                    model_id=spec.spine_model_id, role="spine", recommended=spine_profile.recommended
                ),
                remediation=Remediation(
                    what=f"Use a spine model suited to uplinks instead of {spec.spine_model_id}",
                    how=how,
                    why=f"{spec.spine_model_id} is recommended for {', '.join(spine_profile.recommended) or 'no usage'}, not uplinks.",
                ),
                affected_fields=("spineModelId",),
            )
        )

    for leaf_class in classes:
        leaf_profile = catalog.get_model_profile(leaf_class.leaf_model_id)
        if leaf_profile is None:
            continue
        profile_types = tuple(profile.endpoint_type for profile in leaf_class.endpoint_profiles)
        if "server" not in profile_types or "server" in leaf_profile.recommended:
            continue
        scope = "" if leaf_class.implicit else f" in class '{leaf_class.leaf_class_id}'"
        violations.append(
            RuleViolation(
                code="MODEL_PROFILE_MISMATCH",
                severity="warning",
                title="Leaf Model Not Optimized",
                message=f"Leaf model '{leaf_class.leaf_model_id}'{scope} may not be optimized for server connectivity",
                leaf_class_id=leaf_class.leaf_class_id,
                context=ModelProfileContext(
                    model_id=leaf_class.leaf_model_id,
                    role="leaf",
                    recommended=leaf_profile.recommended,
                    profile_types=profile_types,
                ),
                remediation=Remediation(
                    what=f"Use a server-oriented leaf model{scope}",
                    how="Choose a leaf model whose recommended usage includes 'server'",
                    why=f"{leaf_class.leaf_model_id} is recommended for {', '.join(leaf_profile.recommended) or 'no usage'}.",
                ),
                affected_fields=("leafModelId",) if leaf_class.implicit else (leaf_class.field("leafModelId"),),
            )
        )
    return violations


def evaluate(
    spec: FabricSpec,
    derived: DerivedTopology,
    catalog: SwitchCatalog | None = None,
    policy: PlanningPolicy | None = None,
) -> RuleEvaluationResult:
    """
    Run every rule check against ``spec`` and ``derived``.

    Args:
        spec: Fabric specification to validate
        derived: Topology computed from ``spec``
        catalog: Switch catalog for model lookups (defaults to the DS2000/DS3000 fixture)
        policy: Port defaults for leaf classes sized against unknown models

    Returns:
        RuleEvaluationResult with errors, warnings and info in check order
    """
    if catalog is None:
        catalog = DefaultSwitchCatalog()
    policy = policy or PlanningPolicy()

    classes = normalize_leaf_classes(spec, derived)
    result = RuleEvaluationResult()
    result.extend(check_spine_capacity(spec, derived, classes, catalog, policy))
    result.extend(check_leaf_capacity(classes, catalog))
    result.extend(check_uplink_divisibility(classes, derived))
    result.extend(check_mc_lag_pairs(classes, catalog))
    result.extend(check_es_lag_nics(classes))
    result.extend(check_model_profiles(spec, classes, catalog))

    summary = result.summary
    _logger.debug(
        "evaluated %s: %d error(s), %d warning(s)", spec.name, summary.blocking_errors, summary.improvement_warnings
    )
    return result
