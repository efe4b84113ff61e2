"""
Great-circle distance and point-spacing helpers.

Pure functions, no API calls.  Distances are in meters.
"""

import math
from typing import Iterable, List, Optional, Sequence

from amenities import Coordinate, PlaceItem

EARTH_RADIUS_M = 6_371_000


def haversine_m(a: Coordinate, b: Coordinate) -> float:
    """Haversine distance in meters between two coordinates."""
    dlat = math.radians(b.lat - a.lat)
    dlng = math.radians(b.lng - a.lng)
    h = (math.sin(dlat / 2) ** 2 +
         math.cos(math.radians(a.lat)) * math.cos(math.radians(b.lat)) *
         math.sin(dlng / 2) ** 2)
    # Float error can push h a hair past 1 for antipodal points.
    # NaN fails the comparison and propagates.
    if h > 1.0:
        h = 1.0
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(h))


def located_points(places: Iterable[PlaceItem]) -> List[Optional[Coordinate]]:
    return [place.location for place in places]


def average_spacing_m(points: Sequence[Optional[Coordinate]]) -> Optional[float]:
    """Mean nearest-neighbor distance over *points*, in meters.

    ``None`` entries (places without a location) are skipped.  Returns
    None when fewer than two located points remain.

    Each point's neighbor is searched among the *other* points by
    position, so two coincident points are each other's nearest
    neighbor at distance 0.  O(n^2); fine for result pages of ~20
    places.  Swap in a k-d tree if this ever sees large point sets.
    """
    pts = [p for p in points if p is not None]
    if len(pts) < 2:
        return None

    total = 0.0
    for i, p in enumerate(pts):
        nearest = math.inf
        for j, q in enumerate(pts):
            if i == j:
                continue
            d = haversine_m(p, q)
            if d < nearest:
                nearest = d
        total += nearest
    return total / len(pts)
