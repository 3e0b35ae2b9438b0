#!/usr/bin/env python3
"""
GRADING SCALE - Resolve numeric marks to grade codes and comments
Map a mark (0-100) onto the school's configured grading bands

RESOLUTION RULES:
✅ Bands are inclusive on both ends (minMark <= mark <= maxMark)
✅ Bands are scanned in the order supplied; they need not be sorted
✅ No matching band: fall back to the lowest band, or "F" with no bands
✅ Legend ordering: highest band first, built from the live configuration

EDGE CASES HANDLED:
- Gaps in configuration: sentinel grade, never an exception
- Marks outside 0-100: sentinel grade
- Empty grading system: "F" everywhere
- Grade lookups are case-insensitive

Priority: CRITICAL - Every grade on the report card comes from here
Dependencies: data_models.py for GradeBand
"""

import logging
from typing import Iterable, List, Optional, Sequence

from report_card_engine.config import FALLBACK_GRADE
from report_card_engine.data_models import GradeBand, GradeLookup

logger = logging.getLogger(__name__)


def worst_grade(bands: Sequence[GradeBand]) -> GradeLookup:
    """Sentinel grade used when no band covers a mark"""
    if not bands:
        return GradeLookup(grade=FALLBACK_GRADE, comment="")
    lowest = min(bands, key=lambda band: band.min_mark)
    return GradeLookup(grade=lowest.grade, comment=lowest.comment)


def grade_for(mark: float, bands: Sequence[GradeBand]) -> GradeLookup:
    """
    Resolve a mark to its grade and comment

    Args:
        mark: Numeric mark, normally within 0-100
        bands: Configured grading bands (any order)

    Returns:
        GradeLookup for the first band covering the mark, or the worst grade
    """
    for band in bands:
        if band.covers(mark):
            return GradeLookup(grade=band.grade, comment=band.comment)

    fallback = worst_grade(bands)
    logger.debug(f"No grading band covers {mark} - using {fallback.grade}")
    return fallback


def find_band(grade: str, bands: Iterable[GradeBand]) -> Optional[GradeBand]:
    """Find the band for a grade code (case-insensitive)"""
    wanted = (grade or "").strip().upper()
    if not wanted:
        return None
    for band in bands:
        if band.grade == wanted:
            return band
    return None


def comment_for_grade(grade: str, bands: Sequence[GradeBand]) -> str:
    """Comment configured for a grade code, or empty if the grade is unknown"""
    band = find_band(grade, bands)
    return band.comment if band else ""


def legend_bands(bands: Sequence[GradeBand]) -> List[GradeBand]:
    """Bands ordered for the grading legend (highest marks first)"""
    return sorted(bands, key=lambda band: band.min_mark, reverse=True)


def validate_grading_bands(bands: Sequence[GradeBand]) -> List[str]:
    """
    Check a grading configuration for gaps, overlaps and coverage of 0-100

    Problems are returned as messages; a faulty configuration still grades
    marks through the sentinel fallback.
    """
    errors: List[str] = []

    if not bands:
        errors.append("Grading system is empty")
        return errors

    ordered = sorted(bands, key=lambda band: band.min_mark)

    for current, following in zip(ordered, ordered[1:]):
        if current.max_mark >= following.min_mark:
            errors.append(f"Overlap between grades {current.grade} and {following.grade}")
        if current.max_mark + 1 < following.min_mark:
            errors.append(
                f"Gap between grades {current.grade} ({current.max_mark:g}) "
                f"and {following.grade} ({following.min_mark:g})"
            )

    lowest_min = ordered[0].min_mark
    highest_max = max(band.max_mark for band in ordered)

    if lowest_min > 0:
        errors.append(f"Grading system doesn't cover scores below {lowest_min:g}")
    if highest_max < 100:
        errors.append(f"Grading system doesn't cover scores above {highest_max:g}")

    return errors
