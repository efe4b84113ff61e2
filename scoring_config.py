"""
Scoring model configuration for neighborhood scores.

Owns every numeric constant that affects the walk, drive, and urban
scores.  Search radii and the amenity catalogue live in amenities.py.

Frozen dataclasses provide type checking and IDE support without
the indirection of YAML/JSON config files.
"""

import math
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple


# =============================================================================
# Dataclasses
# =============================================================================

@dataclass(frozen=True)
class CategoryWeight:
    """Contribution ceiling and maximum countable occurrences for one place type."""
    place_type: str  # Places API type, e.g. "cafe"
    weight: float    # points earned once `cap` places are present
    cap: int         # occurrences beyond this add nothing


@dataclass(frozen=True)
class StepTier:
    """A single (threshold, score) step on a stepped lookup.

    Tiers are evaluated highest-first: the first entry whose threshold
    is met is used.
    """
    threshold: float
    score: int


@dataclass(frozen=True)
class ScoreBand:
    """Maps a minimum score threshold to a human-readable label."""
    threshold: int
    label: str


@dataclass(frozen=True)
class WalkConfig:
    weights: Tuple[CategoryWeight, ...]
    density_share: float = 0.5
    spacing_divisor_m: float = 30.0  # 100 - spacing/30 → 0 at 3000 m
    spacing_default: int = 50        # used when fewer than 2 located places
    sparse_min_places: int = 5
    sparse_cap: int = 25
    bands: Tuple[ScoreBand, ...] = ()


@dataclass(frozen=True)
class DriveConfig:
    # Count tiers match with >=, spacing tiers with > (strictly wider).
    count_tiers: Tuple[StepTier, ...]
    spacing_tiers: Tuple[StepTier, ...]
    spacing_default: int = 50
    bands: Tuple[ScoreBand, ...] = ()


@dataclass(frozen=True)
class UrbanLabelThresholds:
    """Tier boundaries for the urban label.

    Low urban scores are ambiguous between far suburb and isolated rural,
    so the drive score from the same evaluation disambiguates them.
    """
    urban_min: int = 75
    suburban_min: int = 50
    mixed_min: int = 25
    mixed_suburban_drive_min: int = 55
    low_suburban_drive_min: int = 65
    low_exurban_drive_min: int = 35


@dataclass(frozen=True)
class UrbanConfig:
    positive: Tuple[CategoryWeight, ...]
    negative: Tuple[CategoryWeight, ...]
    labels: UrbanLabelThresholds = UrbanLabelThresholds()


@dataclass(frozen=True)
class ScoringModel:
    """Top-level container for all scoring parameters.

    A single module-level instance (SCORING_MODEL) is the source of truth.
    Bump `version` on every change that alters score outputs.
    """
    version: str
    walk: WalkConfig
    drive: DriveConfig
    urban: UrbanConfig


# =============================================================================
# Pure scoring functions
# =============================================================================

def round_half_up(x: float) -> int:
    """Round to the nearest integer, .5 going up.

    Python's round() uses banker's rounding (round(6.5) -> 6), which
    shifts scores at .5 boundaries.
    """
    return int(math.floor(x + 0.5))


def clamp(value: float, lo: int = 0, hi: int = 100) -> float:
    return max(lo, min(hi, value))


def raw_score(count: int, weight: float, cap: int) -> float:
    """Diminishing-returns contribution: saturates at *cap* occurrences."""
    return min(count, cap) / cap * weight


def sum_weighted(
    counts_by_type: Mapping[str, int],
    table: Tuple[CategoryWeight, ...],
) -> float:
    """Sum raw_score() over every entry in *table*.

    Types absent from *counts_by_type* count as zero.
    """
    return sum(
        raw_score(counts_by_type.get(entry.place_type, 0), entry.weight, entry.cap)
        for entry in table
    )


def max_raw(table: Tuple[CategoryWeight, ...]) -> float:
    """Highest sum_weighted() value *table* can produce."""
    return sum(entry.weight for entry in table)


def apply_steps(
    tiers: Tuple[StepTier, ...],
    value: Optional[float],
    default: int,
    strict: bool = False,
) -> int:
    """Return the score of the first tier *value* reaches.

    Tiers are assumed sorted highest threshold first.  With *strict* the
    value must exceed the threshold rather than meet it.  Returns
    *default* when *value* is None, and 0 when no tier matches.
    """
    if value is None:
        return default
    for tier in tiers:
        if value > tier.threshold or (not strict and value == tier.threshold):
            return tier.score
    return 0


def band_label(bands: Tuple[ScoreBand, ...], score: int) -> str:
    """Return the label of the first band whose threshold <= score."""
    for band in bands:
        if score >= band.threshold:
            return band.label
    return bands[-1].label


# =============================================================================
# SCORING_MODEL — current production values
# =============================================================================

_WALK_WEIGHTS = (
    CategoryWeight("grocery_or_supermarket", weight=25, cap=2),
    CategoryWeight("pharmacy", weight=20, cap=2),
    CategoryWeight("cafe", weight=12, cap=3),
    CategoryWeight("park", weight=10, cap=2),
    CategoryWeight("transit_station", weight=18, cap=2),
    CategoryWeight("tourist_attraction", weight=10, cap=3),
)

# Driving access is a volume/coverage measure, so no category mix here.
_DRIVE_COUNT_TIERS = (
    StepTier(40, 100),
    StepTier(25, 80),
    StepTier(15, 60),
    StepTier(8, 40),
    StepTier(3, 20),
)

# Inverted relative to walking: wide spacing across a 10 mi catchment
# reads as regional coverage, not poor density.
_DRIVE_SPACING_TIERS = (
    StepTier(3000, 90),
    StepTier(1500, 70),
    StepTier(500, 50),
    StepTier(200, 30),
    StepTier(-math.inf, 10),
)

_URBAN_POSITIVE = (
    CategoryWeight("cafe", weight=15, cap=4),
    CategoryWeight("park", weight=12, cap=3),
    CategoryWeight("transit_station", weight=20, cap=3),
    CategoryWeight("pharmacy", weight=10, cap=2),
)

_URBAN_NEGATIVE = (
    CategoryWeight("gas_station", weight=12, cap=3),
)


SCORING_MODEL = ScoringModel(
    version="1.0.0",

    walk=WalkConfig(
        weights=_WALK_WEIGHTS,
        density_share=0.5,
        spacing_divisor_m=30.0,
        spacing_default=50,
        sparse_min_places=5,
        sparse_cap=25,
        bands=(
            ScoreBand(80, "Very Walkable"),
            ScoreBand(55, "Walkable"),
            ScoreBand(30, "Car-Friendly"),
            ScoreBand(0, "Car-Dependent"),
        ),
    ),

    drive=DriveConfig(
        count_tiers=_DRIVE_COUNT_TIERS,
        spacing_tiers=_DRIVE_SPACING_TIERS,
        spacing_default=50,
        bands=(
            ScoreBand(80, "Excellent"),
            ScoreBand(55, "Good"),
            ScoreBand(30, "Limited"),
            ScoreBand(0, "Remote"),
        ),
    ),

    urban=UrbanConfig(
        positive=_URBAN_POSITIVE,
        negative=_URBAN_NEGATIVE,
        labels=UrbanLabelThresholds(),
    ),
)

MAX_WALK_RAW = max_raw(SCORING_MODEL.walk.weights)
MAX_URBAN_POSITIVE = max_raw(SCORING_MODEL.urban.positive)
MAX_URBAN_NEGATIVE = max_raw(SCORING_MODEL.urban.negative)

# Validate table maxima at import time (ValueError, not assert,
# so validation is never stripped by python -O).
for _name, _got, _want in (
    ("walk", MAX_WALK_RAW, 95),
    ("urban positive", MAX_URBAN_POSITIVE, 57),
    ("urban negative", MAX_URBAN_NEGATIVE, 12),
):
    if abs(_got - _want) >= 0.001:
        raise ValueError(f"{_name} weights sum to {_got}, expected {_want}")
for _entry in SCORING_MODEL.walk.weights + SCORING_MODEL.urban.positive + SCORING_MODEL.urban.negative:
    if _entry.cap < 1:
        raise ValueError(f"{_entry.place_type!r} cap must be >= 1, got {_entry.cap}")
