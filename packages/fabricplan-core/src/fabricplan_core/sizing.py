"""
Ceiling-division sizing helpers shared by the topology calculator and the
rule engine.

All helpers are pure. Negative inputs are programmer errors and raise
``ValueError``; zero operands size to zero.
"""

import math


def _require_non_negative(**values: int | float) -> None:
    for name, value in values.items():
        if value < 0:
            raise ValueError(f"{name} must be >= 0, got {value}")


def leaves_needed(endpoint_demand: int, downlink_ports_per_leaf: int) -> int:
    """Leaves required to host ``endpoint_demand`` endpoints.

    ``downlink_ports_per_leaf`` is ``leaf_ports - uplinks_per_leaf`` and may be
    zero or negative when uplinks eat the whole switch; that sizes to 0.
    """
    _require_non_negative(endpoint_demand=endpoint_demand)
    if endpoint_demand <= 0 or downlink_ports_per_leaf <= 0:
        return 0
    return math.ceil(endpoint_demand / downlink_ports_per_leaf)


def spines_needed(leaves: int, uplinks_per_leaf: int, spine_ports: int) -> int:
    """At least one spine whenever there is any uplink demand."""
    _require_non_negative(leaves=leaves, uplinks_per_leaf=uplinks_per_leaf, spine_ports=spine_ports)
    if leaves <= 0 or uplinks_per_leaf <= 0 or spine_ports <= 0:
        return 0
    return max(1, math.ceil(leaves * uplinks_per_leaf / spine_ports))


def oversubscription_ratio(endpoint_demand: int, uplink_ports: int) -> float:
    """Endpoint ports per uplink port; 0.0 when there is no uplink capacity."""
    _require_non_negative(endpoint_demand=endpoint_demand, uplink_ports=uplink_ports)
    if uplink_ports == 0:
        return 0.0
    return endpoint_demand / uplink_ports


def units_for(amount: int, per_unit: int) -> int:
    """``ceil(amount / per_unit)``, 0 when ``per_unit`` is not positive."""
    if per_unit <= 0 or amount <= 0:
        return 0
    return math.ceil(amount / per_unit)
