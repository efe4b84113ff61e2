"""Builders for places and category snapshots laid out at known distances."""

import math

from amenities import CategoryData, Coordinate, PlaceItem

# Meters per degree of latitude on the 6,371 km sphere
M_PER_DEG_LAT = 6_371_000 * math.pi / 180

ORIGIN = Coordinate(40.0, -74.0)


def place_at(north_m: float, name: str = "Place", rating=None, origin: Coordinate = ORIGIN) -> PlaceItem:
    """A place *north_m* meters due north of *origin*."""
    loc = Coordinate(origin.lat + north_m / M_PER_DEG_LAT, origin.lng)
    return PlaceItem(name=name, rating=rating, location=loc)


def places_in_line(n: int, step_m: float, start_m: float = 0.0, name: str = "Place"):
    """*n* places due north of the origin, *step_m* meters apart."""
    return tuple(place_at(start_m + i * step_m, f"{name} {i}") for i in range(n))


def unlocated(n: int, name: str = "Place"):
    return tuple(PlaceItem(name=f"{name} {i}") for i in range(n))


def category(place_type: str, walking=(), driving=(), urban=(), label=None) -> CategoryData:
    return CategoryData(
        place_type=place_type,
        label=label or place_type,
        walking_places=tuple(walking),
        driving_places=tuple(driving),
        urban_places=tuple(urban),
    )
