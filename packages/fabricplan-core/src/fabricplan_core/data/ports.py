"""Port range parsing for switch port inventories.

Catalog entries list assignable ports either one by one (``"E1/3"``) or as
inclusive ranges over the last path segment (``"E1/49-56"``).
"""

import re
from typing import Iterable

_RANGE_RE = re.compile(r"^(\w+)/(\d+)-(\d+)$")
_PORT_RE = re.compile(r"^(\w+)/(\d+)$")


def parse_port_range(port_range: str) -> list[str]:
    """Expand a single range string into individual port names.

    "E1/49-52" -> ["E1/49", "E1/50", "E1/51", "E1/52"]. A reversed range yields
    an empty list; a plain port name is returned as-is.
    """
    match = _RANGE_RE.match(port_range)
    if not match:
        return [port_range]

    prefix, start, end = match.group(1), int(match.group(2)), int(match.group(3))
    if start > end:
        return []
    return [f"{prefix}/{n}" for n in range(start, end + 1)]


def port_sort_key(port: str) -> tuple[str, int, str]:
    """Natural ordering: prefix first, then the numeric port index."""
    match = _PORT_RE.match(port)
    if match:
        return match.group(1), int(match.group(2)), ""
    return port, 0, port


def expand_port_ranges(port_ranges: Iterable[str]) -> list[str]:
    """Expand ranges and discrete names into a de-duplicated, naturally sorted list."""
    ports: set[str] = set()
    for entry in port_ranges:
        ports.update(parse_port_range(entry))
    return sorted(ports, key=port_sort_key)
