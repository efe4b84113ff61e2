"""Tests for geo.py — haversine distance and nearest-neighbor spacing."""

import math

import pytest

from amenities import Coordinate, PlaceItem
from geo import EARTH_RADIUS_M, average_spacing_m, haversine_m, located_points
from helpers import M_PER_DEG_LAT


# ============================================================================
# haversine_m
# ============================================================================

class TestHaversine:

    A = Coordinate(40.7128, -74.0060)
    B = Coordinate(41.0340, -73.7629)

    def test_zero_for_same_point(self):
        assert haversine_m(self.A, self.A) == 0

    def test_symmetric(self):
        assert haversine_m(self.A, self.B) == haversine_m(self.B, self.A)

    def test_one_degree_of_latitude(self):
        d = haversine_m(Coordinate(10.0, 20.0), Coordinate(11.0, 20.0))
        assert d == pytest.approx(M_PER_DEG_LAT, rel=1e-9)

    def test_longitude_shrinks_with_latitude(self):
        at_equator = haversine_m(Coordinate(0.0, 0.0), Coordinate(0.0, 1.0))
        at_60 = haversine_m(Coordinate(60.0, 0.0), Coordinate(60.0, 1.0))
        assert at_60 == pytest.approx(at_equator / 2, rel=1e-3)

    def test_antipodal(self):
        d = haversine_m(Coordinate(0.0, 0.0), Coordinate(0.0, 180.0))
        assert d == pytest.approx(math.pi * EARTH_RADIUS_M)

    def test_known_city_pair(self):
        # Manhattan to White Plains, roughly 41 km
        assert 39_000 < haversine_m(self.A, self.B) < 43_000

    def test_nan_propagates(self):
        d = haversine_m(Coordinate(float("nan"), 0.0), Coordinate(1.0, 1.0))
        assert math.isnan(d)


# ============================================================================
# average_spacing_m
# ============================================================================

def _on_meridian(*lats):
    return [Coordinate(lat, 0.0) for lat in lats]


class TestAverageSpacing:

    def test_empty(self):
        assert average_spacing_m([]) is None

    def test_single_point(self):
        assert average_spacing_m(_on_meridian(1.0)) is None

    def test_single_located_point_among_unlocated(self):
        assert average_spacing_m([Coordinate(1.0, 1.0), None, None]) is None

    def test_two_points(self):
        assert average_spacing_m(_on_meridian(0.0, 1.0)) == pytest.approx(M_PER_DEG_LAT, rel=1e-9)

    def test_coincident_points_are_each_others_neighbor(self):
        p = Coordinate(40.0, -74.0)
        assert average_spacing_m([p, p]) == 0.0
        assert average_spacing_m([p, Coordinate(40.0, -74.0)]) == 0.0

    def test_mean_of_nearest_neighbors(self):
        # 0 -> 1 deg, 1 -> 1 deg, 3 -> 2 deg
        spacing = average_spacing_m(_on_meridian(0.0, 1.0, 3.0))
        assert spacing == pytest.approx(4 / 3 * M_PER_DEG_LAT, rel=1e-9)

    def test_clustered_pair_beats_even_spread(self):
        # Same count, same extent: a tight pair next to an outlier should
        # not read as spread out as three evenly spaced points.
        clustered = average_spacing_m(_on_meridian(0.0, 0.01, 2.0))
        even = average_spacing_m(_on_meridian(0.0, 1.0, 2.0))
        assert clustered < even

    def test_unlocated_entries_skipped(self):
        with_gaps = [Coordinate(0.0, 0.0), None, Coordinate(1.0, 0.0), None]
        assert average_spacing_m(with_gaps) == average_spacing_m(_on_meridian(0.0, 1.0))

    def test_order_independent(self):
        pts = _on_meridian(0.0, 1.0, 3.0, 7.0)
        assert average_spacing_m(pts) == pytest.approx(average_spacing_m(list(reversed(pts))))


class TestLocatedPoints:

    def test_keeps_positions_and_gaps(self):
        loc = Coordinate(1.0, 2.0)
        places = [PlaceItem("a", location=loc), PlaceItem("b")]
        assert located_points(places) == [loc, None]
