"""
Amenity data model and search catalogue.

A scoring snapshot is one CategoryData per amenity category, each holding
three independently-queried result pages for the same origin:

    walking_places  – within WALKING_RADIUS_M (0.5 mi)
    urban_places    – within URBAN_RADIUS_M
    driving_places  – within DRIVING_RADIUS_M (10 mi); always empty for
                      walking-only categories such as transit

A place in urban_places is NOT implied to be in walking_places (or vice
versa); each page comes from its own nearby search.

The upstream collector fetches these pages; this module only describes
what it should fetch and converts its JSON into frozen dataclasses.
"""

import math
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

# =============================================================================
# CONFIGURATION
# =============================================================================

WALKING_RADIUS_M = 804    # 0.5 miles
URBAN_RADIUS_M = 500
DRIVING_RADIUS_M = 16093  # 10 miles

# Nearby search returns at most one page of this many results per query.
SEARCH_PAGE_SIZE = 20

# Categories whose top-rated places feed the neighborhood summary step.
SUMMARY_TYPES = ("shopping_mall", "park", "restaurant", "cafe", "tourist_attraction")
SUMMARY_PLACES_PER_CATEGORY = 2
SUMMARY_DRIVING_FALLBACK = 5


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class Coordinate:
    """WGS84 degrees.  Not range-checked; NaN propagates into distances."""
    lat: float
    lng: float


@dataclass(frozen=True)
class PlaceItem:
    """One nearby-search result"""
    name: str
    rating: Optional[float] = None        # 1.0-5.0 when the provider has one
    location: Optional[Coordinate] = None  # None → counted, but not spaced
    vicinity: Optional[str] = None


@dataclass(frozen=True)
class CategoryData:
    """All three result pages for one amenity category"""
    place_type: str  # "grocery_or_supermarket", "cafe", etc.
    label: str
    walking_places: Tuple[PlaceItem, ...] = ()
    driving_places: Tuple[PlaceItem, ...] = ()
    urban_places: Tuple[PlaceItem, ...] = ()


@dataclass(frozen=True)
class AmenityCategory:
    """One entry in the search catalogue"""
    place_type: str
    label: str
    walking_only: bool = False  # skip the driving-radius search


AMENITY_CATEGORIES: Tuple[AmenityCategory, ...] = (
    AmenityCategory("grocery_or_supermarket", "Grocery & Markets"),
    AmenityCategory("restaurant", "Restaurants"),
    AmenityCategory("gym", "Gyms & Fitness"),
    AmenityCategory("gas_station", "Gas Stations"),
    AmenityCategory("shopping_mall", "Shopping"),
    AmenityCategory("cafe", "Cafes"),
    AmenityCategory("pharmacy", "Pharmacies"),
    AmenityCategory("park", "Parks"),
    AmenityCategory("hospital", "Hospitals"),
    AmenityCategory("transit_station", "Transit Stations", walking_only=True),
    AmenityCategory("tourist_attraction", "Other Attractions"),
)

_CATEGORY_BY_TYPE: Dict[str, AmenityCategory] = {c.place_type: c for c in AMENITY_CATEGORIES}


def search_radii(category: AmenityCategory) -> Dict[str, Optional[int]]:
    """Radius (meters) of each nearby search to run for *category*.

    None means the search is skipped and the page is left empty.
    """
    return {
        "walking": WALKING_RADIUS_M,
        "urban": URBAN_RADIUS_M,
        "driving": None if category.walking_only else DRIVING_RADIUS_M,
    }


def catalogue_to_dict() -> dict:
    return {
        "page_size": SEARCH_PAGE_SIZE,
        "categories": [
            {
                "type": c.place_type,
                "label": c.label,
                "walking_only": c.walking_only,
                "radii_m": search_radii(c),
            }
            for c in AMENITY_CATEGORIES
        ],
    }


# =============================================================================
# PAYLOAD PARSING
# =============================================================================

# Accept both the front end's camelCase keys and snake_case.
_PAGE_KEYS = {
    "walking_places": ("walking_places", "walkingPlaces"),
    "driving_places": ("driving_places", "drivingPlaces"),
    "urban_places": ("urban_places", "urbanPlaces"),
}


def _as_float(value: Any, field_name: str) -> float:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{field_name} must be a number, got {value!r}")
    return float(value)


def coordinate_from_dict(data: Any, where: str = "location") -> Coordinate:
    if not isinstance(data, dict):
        raise ValueError(f"{where} must be an object with lat and lng")
    if "lat" not in data or "lng" not in data:
        raise ValueError(f"{where} is missing lat or lng")
    return Coordinate(
        lat=_as_float(data["lat"], f"{where}.lat"),
        lng=_as_float(data["lng"], f"{where}.lng"),
    )


def place_from_dict(data: Any, where: str = "place") -> PlaceItem:
    if not isinstance(data, dict):
        raise ValueError(f"{where} must be an object")

    name = data.get("name") or "Unknown"
    if not isinstance(name, str):
        raise ValueError(f"{where}.name must be a string")

    rating = data.get("rating")
    if rating is not None:
        rating = _as_float(rating, f"{where}.rating")
        if not 1.0 <= rating <= 5.0:
            raise ValueError(f"{where}.rating must be between 1 and 5, got {rating}")

    location = data.get("location")
    if location is not None:
        location = coordinate_from_dict(location, f"{where}.location")

    vicinity = data.get("vicinity")
    if vicinity is not None and not isinstance(vicinity, str):
        raise ValueError(f"{where}.vicinity must be a string")

    return PlaceItem(name=name, rating=rating, location=location, vicinity=vicinity)


def _page_from_dict(data: dict, page: str, where: str) -> Tuple[PlaceItem, ...]:
    raw = None
    for key in _PAGE_KEYS[page]:
        if key in data:
            raw = data[key]
            break
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ValueError(f"{where}.{page} must be a list")
    if len(raw) > SEARCH_PAGE_SIZE:
        # Not an error: the collector may have paged further than usual.
        logger.debug("%s.%s has %d places (page size %d)", where, page, len(raw), SEARCH_PAGE_SIZE)
    return tuple(place_from_dict(p, f"{where}.{page}[{i}]") for i, p in enumerate(raw))


def category_data_from_dict(data: Any, where: str = "category") -> CategoryData:
    if not isinstance(data, dict):
        raise ValueError(f"{where} must be an object")
    place_type = data.get("type") or data.get("place_type")
    if not isinstance(place_type, str) or not place_type:
        raise ValueError(f"{where}.type is required")

    label = data.get("label")
    if label is None:
        known = _CATEGORY_BY_TYPE.get(place_type)
        label = known.label if known else place_type
    elif not isinstance(label, str):
        raise ValueError(f"{where}.label must be a string")

    return CategoryData(
        place_type=place_type,
        label=label,
        walking_places=_page_from_dict(data, "walking_places", where),
        driving_places=_page_from_dict(data, "driving_places", where),
        urban_places=_page_from_dict(data, "urban_places", where),
    )


def categories_from_payload(payload: Any) -> List[CategoryData]:
    """Parse a scoring request body into CategoryData.

    *payload* is either a list of categories or an object with a
    ``categories`` list.  Raises ValueError naming the offending field.
    """
    if isinstance(payload, dict):
        payload = payload.get("categories")
    if not isinstance(payload, list):
        raise ValueError("Payload must be a list of categories or an object with a 'categories' list")
    return [category_data_from_dict(c, f"categories[{i}]") for i, c in enumerate(payload)]


# =============================================================================
# SERIALIZATION
# =============================================================================

def place_to_dict(place: PlaceItem) -> dict:
    d = {"name": place.name, "rating": place.rating, "vicinity": place.vicinity}
    if place.location is not None:
        d["location"] = {"lat": place.location.lat, "lng": place.location.lng}
    else:
        d["location"] = None
    return d


def category_data_to_dict(category: CategoryData) -> dict:
    return {
        "type": category.place_type,
        "label": category.label,
        "walking_places": [place_to_dict(p) for p in category.walking_places],
        "driving_places": [place_to_dict(p) for p in category.driving_places],
        "urban_places": [place_to_dict(p) for p in category.urban_places],
    }


# =============================================================================
# SUMMARY INPUT
# =============================================================================

def top_rated_by_category(
    categories: Sequence[CategoryData],
    place_types: Iterable[str] = SUMMARY_TYPES,
    per_category: int = SUMMARY_PLACES_PER_CATEGORY,
) -> List[dict]:
    """Pick the best-rated places per category for the summary writer.

    Walking results are preferred; a category with none falls back to
    its first few driving results.  Unrated places are skipped and
    categories left empty are dropped.  Ties keep search order.
    """
    wanted = set(place_types)
    out = []
    for cat in categories:
        if cat.place_type not in wanted:
            continue
        is_walking = len(cat.walking_places) > 0
        source = cat.walking_places if is_walking else cat.driving_places[:SUMMARY_DRIVING_FALLBACK]
        rated = [p for p in source if p.rating is not None and not math.isnan(p.rating)]
        rated.sort(key=lambda p: p.rating, reverse=True)
        top = rated[:per_category]
        if not top:
            continue
        out.append({
            "category": cat.label,
            "places": [
                {"name": p.name, "rating": p.rating, "is_walking": is_walking}
                for p in top
            ],
        })
    return out
