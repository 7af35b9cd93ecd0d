"""Breakout port allocation tools."""

from .allocator import (
    AllocationManifest,
    BreakoutAllocation,
    BreakoutGroup,
    BreakoutType,
    BreakoutValidation,
    allocate_breakout_groups,
    breakout_group_size,
    generate_breakout_port_names,
    parse_breakout_type,
    validate_breakout_allocation,
)

__all__ = [
    "AllocationManifest",
    "BreakoutAllocation",
    "BreakoutGroup",
    "BreakoutType",
    "BreakoutValidation",
    "allocate_breakout_groups",
    "breakout_group_size",
    "generate_breakout_port_names",
    "parse_breakout_type",
    "validate_breakout_allocation",
]
