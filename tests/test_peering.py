"""Tests for peering arithmetic."""

import pytest

from az_fleet.errors import InvalidRangeError, InvalidTypeError
from az_fleet.services.peering import hub_spoke_peering_count, mesh_peering_count, peering_count


class TestPeeringCounts:
    @pytest.mark.parametrize(("vnets", "expected"), [(0, 0), (1, 0), (2, 1), (3, 3), (5, 10)])
    def test_mesh(self, vnets: int, expected: int) -> None:
        assert mesh_peering_count(vnets) == expected

    def test_hub_spoke(self) -> None:
        assert hub_spoke_peering_count(4) == 4

    def test_dispatch(self) -> None:
        assert peering_count("mesh", 4) == 6
        assert peering_count("hub-spoke", 4) == 4

    def test_negative_counts(self) -> None:
        with pytest.raises(InvalidRangeError):
            mesh_peering_count(-1)
        with pytest.raises(InvalidRangeError):
            hub_spoke_peering_count(-2)

    def test_unknown_topology(self) -> None:
        with pytest.raises(InvalidTypeError):
            peering_count("ring", 3)
