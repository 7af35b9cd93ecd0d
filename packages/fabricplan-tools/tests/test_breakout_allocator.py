"""
Test breakout port allocation and allocation validation.
"""

import itertools

import pytest
from fabricplan_core.data.ports import expand_port_ranges
from fabricplan_tools.breakout import (
    BreakoutGroup,
    BreakoutType,
    allocate_breakout_groups,
    breakout_group_size,
    generate_breakout_port_names,
    parse_breakout_type,
    validate_breakout_allocation,
)

DS2000_ENDPOINT_PORTS = expand_port_ranges(["E1/1-48"])


class TestBreakoutTypes:
    def test_parse(self):
        assert parse_breakout_type("4x25G") == BreakoutType(lanes=4, speed="25G")
        assert parse_breakout_type("2x50g") == BreakoutType(lanes=2, speed="50G")
        assert str(parse_breakout_type("4x10G")) == "4x10G"

    @pytest.mark.parametrize("value", ["", "bogus", "x25G", "4by25G", None])
    def test_unparseable(self, value):
        assert parse_breakout_type(value) is None

    @pytest.mark.parametrize(
        "value,size",
        [("4x25G", 4), ("4x10G", 4), ("2x50G", 1), ("8x50G", 1), ("bogus", 1), (None, 1)],
    )
    def test_group_size(self, value, size):
        assert breakout_group_size(value) == size


class TestPortNames:
    def test_slot_port(self):
        assert generate_breakout_port_names("E1/5", "4x25G") == [
            "Ethernet5/0/1",
            "Ethernet5/0/2",
            "Ethernet5/0/3",
            "Ethernet5/0/4",
        ]

    def test_ethernet_port(self):
        assert generate_breakout_port_names("Ethernet12", "4x25G")[0] == "Ethernet12/0/1"

    def test_other_names_keep_base(self):
        assert generate_breakout_port_names("swp3", "4x25G") == ["swp3/0/1", "swp3/0/2", "swp3/0/3", "swp3/0/4"]

    def test_non_four_lane_gives_single_child(self):
        assert generate_breakout_port_names("E1/7", "2x50G") == ["Ethernet7/0/1"]


class TestAllocate:
    def test_ds2000_two_groups(self):
        """Ports are taken in lexical order."""
        allocation = allocate_breakout_groups(DS2000_ENDPOINT_PORTS, 2, "4x25G")

        groups = allocation.allocated_groups
        assert [g.group_id for g in groups] == [1, 2]
        assert [g.base_port for g in groups] == ["E1/1", "E1/10"]
        assert groups[0].child_ports == ("Ethernet1/0/1", "Ethernet1/0/2", "Ethernet1/0/3", "Ethernet1/0/4")
        assert groups[1].child_ports[0] == "Ethernet10/0/1"
        assert len(allocation.remaining_ports) == 46
        assert allocation.warnings == []

    def test_shortfall(self):
        allocation = allocate_breakout_groups(["E1/1", "E1/2", "E1/3"], 5, "4x25G")

        assert len(allocation.allocated_groups) == 3
        assert allocation.remaining_ports == []
        assert allocation.warnings == ["Requested 5 breakout groups but only 3 ports available"]

    def test_unsorted_ports(self):
        allocation = allocate_breakout_groups(["E1/5", "E1/1", "E1/3"], 2, "4x25G")

        groups = allocation.allocated_groups
        assert [g.group_id for g in groups] == [1, 2]
        assert [g.base_port for g in groups] == ["E1/1", "E1/3"]
        assert groups[0].child_ports == ("Ethernet1/0/1", "Ethernet1/0/2", "Ethernet1/0/3", "Ethernet1/0/4")
        assert groups[1].child_ports == ("Ethernet3/0/1", "Ethernet3/0/2", "Ethernet3/0/3", "Ethernet3/0/4")
        assert allocation.remaining_ports == ["E1/5"]
        assert allocation.warnings == []

    def test_five_requested_two_available(self):
        allocation = allocate_breakout_groups(["E1/1", "E1/2"], 5, "4x25G")

        assert [g.base_port for g in allocation.allocated_groups] == ["E1/1", "E1/2"]
        assert allocation.remaining_ports == []
        assert allocation.warnings == ["Requested 5 breakout groups but only 2 ports available"]

    def test_duplicate_ports_count_once(self):
        allocation = allocate_breakout_groups(["E1/2", "E1/1", "E1/1"], 2, "4x25G")

        assert [g.base_port for g in allocation.allocated_groups] == ["E1/1", "E1/2"]
        assert allocation.remaining_ports == []
        assert allocation.warnings == []

        short = allocate_breakout_groups(["E1/1", "E1/1"], 2, "4x25G")
        assert [g.base_port for g in short.allocated_groups] == ["E1/1"]
        assert short.warnings == ["Requested 2 breakout groups but only 1 ports available"]

    def test_zero_groups(self):
        allocation = allocate_breakout_groups(["E1/1", "E1/2"], 0, "4x25G")

        assert allocation.allocated_groups == []
        assert allocation.remaining_ports == ["E1/1", "E1/2"]

    def test_negative_groups(self):
        with pytest.raises(ValueError):
            allocate_breakout_groups(["E1/1"], -1, "4x25G")

    def test_input_order_is_irrelevant(self):
        ports = ["E1/3", "E1/1", "E1/4", "E1/2"]
        expected = allocate_breakout_groups(ports, 2, "4x25G")

        for permutation in itertools.permutations(ports):
            assert allocate_breakout_groups(list(permutation), 2, "4x25G") == expected

    @pytest.mark.parametrize("required", [0, 1, 7, 48, 60])
    def test_ports_are_conserved(self, required):
        allocation = allocate_breakout_groups(DS2000_ENDPOINT_PORTS, required, "4x25G")

        bases = [g.base_port for g in allocation.allocated_groups]
        assert len(bases) == min(required, 48)
        assert sorted(bases + allocation.remaining_ports) == sorted(DS2000_ENDPOINT_PORTS)
        assert not set(bases) & set(allocation.remaining_ports)
        for group in allocation.allocated_groups:
            assert len(group.child_ports) == 4


class TestValidateAllocation:
    def groups(self, *base_ports):
        return [
            BreakoutGroup(group_id=i, base_port=p, child_ports=tuple(generate_breakout_port_names(p, "4x25G")))
            for i, p in enumerate(base_ports, start=1)
        ]

    def test_clean_allocation(self):
        result = validate_breakout_allocation(self.groups("E1/1", "E1/2"), [])

        assert result.is_valid
        assert result.warnings == []
        assert not result.has_mixed_allocation

    def test_mixed_allocation_warns(self):
        result = validate_breakout_allocation(self.groups("E1/1"), ["E1/2", "E1/3"])

        assert result.is_valid
        assert result.has_mixed_allocation
        assert result.warnings == ["Mixed allocation: 1 breakout group(s) alongside 2 regular port(s)"]

    def test_mixed_allowed(self):
        result = validate_breakout_allocation(self.groups("E1/1"), ["E1/2"], allow_mixed_mode=True)

        assert result.has_mixed_allocation
        assert result.warnings == []

    def test_duplicate_base_port(self):
        result = validate_breakout_allocation(self.groups("E1/1", "E1/1"), [])

        assert not result.is_valid
        assert "Duplicate base port E1/1 in groups 1 and 2" in result.errors
        assert any(e.startswith("Duplicate child port Ethernet1/0/1") for e in result.errors)

    def test_child_port_collision(self):
        """E1/5 and Ethernet5 expand to the same child names."""
        result = validate_breakout_allocation(self.groups("E1/5", "Ethernet5"), [])

        assert not result.is_valid
        assert len(result.errors) == 4

    def test_base_port_also_regular(self):
        result = validate_breakout_allocation(self.groups("E1/1"), ["E1/1"], allow_mixed_mode=True)

        assert result.errors == ["Port E1/1 is allocated as a breakout base port and as a regular port"]

    def test_checks_are_independent(self):
        result = validate_breakout_allocation(self.groups("E1/1", "E1/1"), ["E1/1"])

        assert len(result.warnings) == 1
        assert any("Duplicate base port" in e for e in result.errors)
        assert any("regular port" in e for e in result.errors)
