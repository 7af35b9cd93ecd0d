"""
Breakout port allocator.

Partitions a switch's physical ports into whole breakout groups and names the
child ports each group exposes. Allocation is sort-then-take, so the same set
of available ports always yields the same groups in the same order.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, NamedTuple, Sequence

from pydantic import BaseModel, ConfigDict, Field

_logger = logging.getLogger("fabricplan.breakout.allocator")

_BREAKOUT_TYPE_RE = re.compile(r"^(\d+)x(\d+(?:\.\d+)?[GMT]?)$", re.IGNORECASE)
_SLOT_PORT_RE = re.compile(r"^E\d+/(\d+)$")
_ETHERNET_RE = re.compile(r"^Ethernet(\d+)$")

# Only 4-lane splits are allocated as multi-port groups
_GROUPED_LANES = 4


class BreakoutType(NamedTuple):
    lanes: int
    speed: str

    def __str__(self) -> str:
        return f"{self.lanes}x{self.speed}"


class BreakoutGroup(BaseModel):
    """One broken-out physical port and the child ports it exposes."""

    model_config = ConfigDict(frozen=True)
    group_id: int = Field(ge=1)
    base_port: str
    child_ports: tuple[str, ...]


class BreakoutAllocation(BaseModel):
    model_config = ConfigDict(extra="ignore")
    allocated_groups: list[BreakoutGroup] = Field(default_factory=list)
    remaining_ports: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class AllocationManifest(BaseModel):
    """Allocation file as written by ``fabricplan breakout allocate --export``, plus regular ports."""

    model_config = ConfigDict(extra="ignore")
    allocated_groups: list[BreakoutGroup] = Field(default_factory=list)
    regular_ports: list[str] = Field(default_factory=list)


class BreakoutValidation(BaseModel):
    model_config = ConfigDict(extra="ignore")
    is_valid: bool
    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    has_mixed_allocation: bool = False


def parse_breakout_type(breakout_type: str | BreakoutType | None) -> BreakoutType | None:
    """Parse ``"4x25G"`` into ``BreakoutType(lanes=4, speed="25G")``; None if unrecognized."""
    if breakout_type is None or isinstance(breakout_type, BreakoutType):
        return breakout_type
    match = _BREAKOUT_TYPE_RE.match(breakout_type.strip())
    if not match:
        return None
    return BreakoutType(lanes=int(match.group(1)), speed=match.group(2).upper())


def breakout_group_size(breakout_type: str | BreakoutType | None) -> int:
    """Child ports per base port: 4 for a 4-lane type, 1 for anything else."""
    parsed = parse_breakout_type(breakout_type)
    if parsed is not None and parsed.lanes == _GROUPED_LANES:
        return _GROUPED_LANES
    return 1


def generate_breakout_port_names(base_port: str, breakout_type: str | BreakoutType | None) -> list[str]:
    """
    Child port names for ``base_port``.

    ``E1/5`` and ``Ethernet5`` become ``Ethernet5/0/1..N``; any other name
    becomes ``<base_port>/0/1..N``. Names depend on the base port string only.
    """
    size = breakout_group_size(breakout_type)
    match = _SLOT_PORT_RE.match(base_port) or _ETHERNET_RE.match(base_port)
    stem = f"Ethernet{int(match.group(1))}" if match else base_port
    return [f"{stem}/0/{lane}" for lane in range(1, size + 1)]


def allocate_breakout_groups(
    available_ports: Iterable[str],
    required_groups: int,
    breakout_type: str | BreakoutType | None,
) -> BreakoutAllocation:
    """
    Allocate ``required_groups`` breakout groups from ``available_ports``.

    Duplicate port names count once. Ports are sorted lexically and taken from
    the front; group ids start at 1.
    When fewer ports are available than groups requested, every port is
    allocated and a single shortfall warning is returned.

    Raises:
        ValueError: If ``required_groups`` is negative
    """
    if required_groups < 0:
        raise ValueError(f"required_groups must be >= 0, got {required_groups}")

    ports = sorted(set(available_ports))
    warnings = []
    if required_groups > len(ports):
        warnings.append(f"Requested {required_groups} breakout groups but only {len(ports)} ports available")
        _logger.warning("%s", warnings[-1])

    taken = ports[:required_groups]
    groups = [
        BreakoutGroup(
            group_id=index,
            base_port=port,
            child_ports=tuple(generate_breakout_port_names(port, breakout_type)),
        )
        for index, port in enumerate(taken, start=1)
    ]
    return BreakoutAllocation(allocated_groups=groups, remaining_ports=ports[len(taken):], warnings=warnings)


def validate_breakout_allocation(
    groups: Sequence[BreakoutGroup],
    regular_ports: Sequence[str],
    allow_mixed_mode: bool = False,
) -> BreakoutValidation:
    """
    Check a breakout allocation for integrity problems.

    Three independent checks, each reported on its own:
    mixed allocation (breakout groups next to plain ports) is a warning unless
    ``allow_mixed_mode``; a base or child port used by more than one group is
    an error; a base port also listed as a regular port is an error.
    """
    warnings: list[str] = []
    errors: list[str] = []

    has_mixed = bool(groups) and bool(regular_ports)
    if has_mixed and not allow_mixed_mode:
        warnings.append(
            f"Mixed allocation: {len(groups)} breakout group(s) alongside {len(regular_ports)} regular port(s)"
        )

    seen_base: dict[str, int] = {}
    seen_child: dict[str, int] = {}
    for group in groups:
        if group.base_port in seen_base:
            errors.append(
                f"Duplicate base port {group.base_port} in groups {seen_base[group.base_port]} and {group.group_id}"
            )
        else:
            seen_base[group.base_port] = group.group_id
        for child in group.child_ports:
            if child in seen_child:
                errors.append(f"Duplicate child port {child} in groups {seen_child[child]} and {group.group_id}")
            else:
                seen_child[child] = group.group_id

    regular = set(regular_ports)
    for base_port in seen_base:
        if base_port in regular:
            errors.append(f"Port {base_port} is allocated as a breakout base port and as a regular port")

    return BreakoutValidation(
        is_valid=not errors,
        warnings=warnings,
        errors=errors,
        has_mixed_allocation=has_mixed,
    )
