#!/usr/bin/env python3
"""
Neighborhood Score Engine

Turns per-category nearby-place snapshots into three 0-100 scores:

- Walk score   – weighted category mix within walking range, blended with
                 how tightly those places are spaced
- Drive score  – sheer volume and spread of places within driving range
- Urban score  – urban-signal amenities (cafes, transit, ...) minus
                 car-oriented ones (gas stations) within a short radius

Every function here is pure: same snapshot in, same scores out.

Usage:
    python score_engine.py snapshot.json
    python score_engine.py snapshot.json --json
    cat snapshot.json | python score_engine.py -
"""

import sys
import json
import math
import logging
import argparse
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Sequence

from amenities import CategoryData, PlaceItem, categories_from_payload, top_rated_by_category
from geo import average_spacing_m, located_points
from scoring_config import (
    SCORING_MODEL,
    MAX_WALK_RAW,
    MAX_URBAN_POSITIVE,
    MAX_URBAN_NEGATIVE,
    apply_steps,
    band_label,
    clamp,
    round_half_up,
    sum_weighted,
)

logger = logging.getLogger(__name__)


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class Scores:
    walk_score: int
    walk_label: str
    drive_score: int
    drive_label: str
    urban_score: int
    urban_label: str


@dataclass(frozen=True)
class DimensionScore:
    """One scored dimension plus the inputs that produced it."""
    name: str
    score: int
    label: str
    scoring_inputs: dict  # e.g. {"density": 13, "spacing_m": 48.2}


@dataclass(frozen=True)
class ScoreReport:
    """Scores plus a per-dimension breakdown, for debugging and display."""
    scores: Scores
    walk: DimensionScore
    drive: DimensionScore
    urban: DimensionScore
    model_version: str


# =============================================================================
# HELPERS
# =============================================================================

def count_by_type(categories: Sequence[CategoryData], page: str) -> Dict[str, int]:
    """Number of places on *page* ("walking_places", ...) per category type.

    A type listed twice keeps its last entry.
    """
    return {c.place_type: len(getattr(c, page)) for c in categories}


def _all_places(categories: Sequence[CategoryData], page: str) -> List[PlaceItem]:
    return [p for c in categories for p in getattr(c, page)]


def _fmt_spacing(spacing: Optional[float]) -> Optional[float]:
    # Non-finite spacing (NaN coordinates) has no JSON form
    if spacing is None or not math.isfinite(spacing):
        return None
    return round(spacing, 1)


# =============================================================================
# SCORING
# =============================================================================

def score_walkability(categories: Sequence[CategoryData]) -> DimensionScore:
    """Blend category density with nearest-neighbor spacing.

    Fewer than sparse_min_places walkable places caps the score, so a
    handful of well-spaced places can't look walkable.
    """
    cfg = SCORING_MODEL.walk

    raw = sum_weighted(count_by_type(categories, "walking_places"), cfg.weights)
    density = round_half_up(min(100.0, raw / MAX_WALK_RAW * 100))

    places = _all_places(categories, "walking_places")
    spacing = average_spacing_m(located_points(places))
    if spacing is None:
        spacing_score = cfg.spacing_default
    else:
        # Clamp first: NaN coordinates give an infinite spacing
        spacing_score = round_half_up(clamp(100 - spacing / cfg.spacing_divisor_m))

    score = round_half_up(
        density * cfg.density_share + spacing_score * (1 - cfg.density_share)
    )
    sparse = len(places) < cfg.sparse_min_places
    if sparse:
        score = min(score, cfg.sparse_cap)
    score = min(100, score)

    inputs = {
        "raw": round(raw, 2),
        "density": density,
        "spacing_m": _fmt_spacing(spacing),
        "spacing_score": spacing_score,
        "place_count": len(places),
        "sparse_capped": sparse,
    }
    logger.debug("[walk] %s", inputs)
    return DimensionScore("walk", score, band_label(cfg.bands, score), inputs)


def score_drivability(categories: Sequence[CategoryData]) -> DimensionScore:
    """Average a count tier and a spacing tier over every driving-range place."""
    cfg = SCORING_MODEL.drive

    places = _all_places(categories, "driving_places")
    count = len(places)
    count_score = apply_steps(cfg.count_tiers, count, default=0)

    spacing = average_spacing_m(located_points(places))
    spacing_score = apply_steps(cfg.spacing_tiers, spacing, default=cfg.spacing_default, strict=True)

    score = round_half_up((count_score + spacing_score) / 2)

    inputs = {
        "place_count": count,
        "count_score": count_score,
        "spacing_m": _fmt_spacing(spacing),
        "spacing_score": spacing_score,
    }
    logger.debug("[drive] %s", inputs)
    return DimensionScore("drive", score, band_label(cfg.bands, score), inputs)


def urban_label(urban_score: int, drive_score: int) -> str:
    """Label for *urban_score*, using *drive_score* to split low scores.

    Both scores must come from the same snapshot.
    """
    t = SCORING_MODEL.urban.labels
    if urban_score >= t.urban_min:
        return "Urban"
    if urban_score >= t.suburban_min:
        return "Suburban"
    if urban_score >= t.mixed_min:
        return "Suburban" if drive_score >= t.mixed_suburban_drive_min else "Exurban"
    if drive_score >= t.low_suburban_drive_min:
        return "Suburban"
    if drive_score >= t.low_exurban_drive_min:
        return "Exurban"
    return "Rural"


def score_urban_character(categories: Sequence[CategoryData], drive_score: int) -> DimensionScore:
    """Net urban signal within the short radius, shifted so max negative maps to 0."""
    cfg = SCORING_MODEL.urban

    counts = count_by_type(categories, "urban_places")
    positive = sum_weighted(counts, cfg.positive)
    negative = sum_weighted(counts, cfg.negative)

    score = clamp(round_half_up(
        (positive - negative + MAX_URBAN_NEGATIVE) / (MAX_URBAN_POSITIVE + MAX_URBAN_NEGATIVE) * 100
    ))

    inputs = {
        "positive": round(positive, 2),
        "negative": round(negative, 2),
        "drive_score": drive_score,
    }
    logger.debug("[urban] %s", inputs)
    return DimensionScore("urban", score, urban_label(score, drive_score), inputs)


def compute_score_report(categories: Sequence[CategoryData]) -> ScoreReport:
    """Score one snapshot, keeping the per-dimension breakdown."""
    walk = score_walkability(categories)
    drive = score_drivability(categories)
    urban = score_urban_character(categories, drive.score)

    scores = Scores(
        walk_score=walk.score,
        walk_label=walk.label,
        drive_score=drive.score,
        drive_label=drive.label,
        urban_score=urban.score,
        urban_label=urban.label,
    )
    return ScoreReport(
        scores=scores,
        walk=walk,
        drive=drive,
        urban=urban,
        model_version=SCORING_MODEL.version,
    )


def compute_scores(categories: Sequence[CategoryData]) -> Scores:
    """Compute walk, drive, and urban scores for a full snapshot."""
    return compute_score_report(categories).scores


def report_to_dict(report: ScoreReport) -> dict:
    return {
        "scores": asdict(report.scores),
        "breakdown": {
            d.name: {"score": d.score, "label": d.label, "inputs": d.scoring_inputs}
            for d in (report.walk, report.drive, report.urban)
        },
        "model_version": report.model_version,
    }


# =============================================================================
# CLI
# =============================================================================

def format_result(report: ScoreReport, categories: Sequence[CategoryData]) -> str:
    """Format a score report as a readable text block"""
    lines = []
    s = report.scores

    lines.append("=" * 60)
    lines.append(f"NEIGHBORHOOD SCORES (model {report.model_version})")
    lines.append("=" * 60)
    lines.append(f"  Walk:  {s.walk_score:>3}/100  {s.walk_label}")
    lines.append(f"  Drive: {s.drive_score:>3}/100  {s.drive_label}")
    lines.append(f"  Urban: {s.urban_score:>3}/100  {s.urban_label}")

    lines.append("\nBREAKDOWN:")
    for dim in (report.walk, report.drive, report.urban):
        inputs = ", ".join(f"{k}={v}" for k, v in dim.scoring_inputs.items())
        lines.append(f"  - {dim.name}: {inputs}")

    lines.append("\nPLACES PER CATEGORY (walk / urban / drive):")
    for cat in categories:
        lines.append(
            f"  {cat.label:<20} {len(cat.walking_places):>3} / "
            f"{len(cat.urban_places):>3} / {len(cat.driving_places):>3}"
        )

    top = top_rated_by_category(categories)
    if top:
        lines.append("\nTOP RATED:")
        for entry in top:
            for p in entry["places"]:
                where = "walkable" if p["is_walking"] else "by car"
                lines.append(f"  • {entry['category']}: {p['name']} ({p['rating']:.1f}, {where})")

    return "\n".join(lines)


def main():
    parser = argparse.ArgumentParser(
        description="Score a nearby-places snapshot for walkability, drivability, and urban character"
    )
    parser.add_argument(
        "snapshot",
        help="Path to a JSON snapshot (list of categories or {\"categories\": [...]}); '-' for stdin"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON instead of formatted text"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log per-dimension scoring inputs"
    )

    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        if args.snapshot == "-":
            payload = json.load(sys.stdin)
        else:
            with open(args.snapshot, encoding="utf-8") as f:
                payload = json.load(f)
        categories = categories_from_payload(payload)
    except (OSError, ValueError) as e:
        # json.JSONDecodeError is a ValueError
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    report = compute_score_report(categories)

    if args.json:
        out = report_to_dict(report)
        out["top_by_category"] = top_rated_by_category(categories)
        print(json.dumps(out, indent=2))
    else:
        print(format_result(report, categories))


if __name__ == "__main__":
    main()
