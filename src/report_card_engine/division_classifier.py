#!/usr/bin/env python3
"""
DIVISION CLASSIFIER - Aggregate points and division over general subjects
Classify a student's overall performance from E.O.T grades

AGGREGATE POINTS (best to worst):
D1 = 1, D2 = 2, C3 = 3, C4 = 4, C5 = 5, C6 = 6, P7 = 7, P8 = 8, F9 = 9
Unrecognised or missing grade = 9 (unassessed counts as failing)

DIVISION THRESHOLDS (average aggregate points, upper bound inclusive):
✅ <= 2.5  DIVISION I
✅ <= 4.5  DIVISION II
✅ <= 6.5  DIVISION III
✅ <= 8.5  DIVISION IV
✅ otherwise FAIL

EDGE CASES HANDLED:
- Subsidiary subjects: shown on the card, excluded from every aggregate
- No general subjects: average of 9 (FAIL), no division by zero
- Class statistics: pass rate counts every division except FAIL

Priority: CRITICAL - Headline result of the report card
Dependencies: data_models.py
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from report_card_engine.config import SUBJECT_MAX_MARK
from report_card_engine.data_models import (
    Division,
    DivisionResult,
    DivisionStatistics,
    StageTotals,
    SubjectComputedRow,
)

logger = logging.getLogger(__name__)


# Ordered best to worst; lookups scan in this order
AGGREGATE_POINTS: Dict[str, int] = {
    "D1": 1,
    "D2": 2,
    "C3": 3,
    "C4": 4,
    "C5": 5,
    "C6": 6,
    "P7": 7,
    "P8": 8,
    "F9": 9,
}

WORST_POINTS = 9

DIVISION_THRESHOLDS: Tuple[Tuple[float, Division], ...] = (
    (2.5, Division.DIVISION_I),
    (4.5, Division.DIVISION_II),
    (6.5, Division.DIVISION_III),
    (8.5, Division.DIVISION_IV),
)


def aggregate_points(grade: Optional[str]) -> int:
    """
    Aggregate point value of a grade code

    Grade codes may carry extra text ("D1 - Distinction"); the first code
    found, best first, decides the value.
    """
    code = (grade or "").strip().upper()
    if not code:
        return WORST_POINTS
    if code in AGGREGATE_POINTS:
        return AGGREGATE_POINTS[code]
    for known, points in AGGREGATE_POINTS.items():
        if known in code:
            return points
    return WORST_POINTS


def classify_average(average: float) -> Division:
    """Division tier for an average aggregate point value"""
    for upper_bound, division in DIVISION_THRESHOLDS:
        if average <= upper_bound:
            return division
    return Division.FAIL


def general_rows(rows: Iterable[SubjectComputedRow]) -> List[SubjectComputedRow]:
    return [row for row in rows if row.is_general]


def classify(rows: Sequence[SubjectComputedRow]) -> DivisionResult:
    """
    Classify a student's division from their computed subject rows

    Args:
        rows: All computed rows; only GENERAL rows are considered

    Returns:
        DivisionResult with the average aggregate points and division
    """
    general = general_rows(rows)

    if not general:
        logger.debug("No general subjects - classifying at worst average")
        return DivisionResult(
            average_aggregate_points=float(WORST_POINTS),
            division=classify_average(WORST_POINTS),
            general_subjects=0,
            total_aggregate_points=0,
        )

    points = [aggregate_points(row.eot_grade) for row in general]
    total_points = sum(points)
    average = total_points / len(points)

    return DivisionResult(
        average_aggregate_points=average,
        division=classify_average(average),
        general_subjects=len(general),
        total_aggregate_points=total_points,
    )


def calculate_stage_totals(rows: Sequence[SubjectComputedRow]) -> StageTotals:
    """
    Totals row of the report card, over general subjects only

    Scores are summed as displayed (blank counts 0); aggregate totals use the
    same points table as the division, so an unassessed stage adds 9.
    """
    general = general_rows(rows)

    return StageTotals(
        homework=sum(row.homework or 0.0 for row in general),
        bot=sum(row.bot or 0.0 for row in general),
        midterm=sum(row.midterm or 0.0 for row in general),
        eot=sum(row.eot or 0.0 for row in general),
        out_of=SUBJECT_MAX_MARK * len(general),
        bot_aggregates=sum(aggregate_points(row.bot_grade) for row in general),
        midterm_aggregates=sum(aggregate_points(row.midterm_grade) for row in general),
        eot_aggregates=sum(aggregate_points(row.eot_grade) for row in general),
    )


def division_statistics(results: Iterable[Optional[DivisionResult]]) -> DivisionStatistics:
    """
    Division distribution and pass rate for a class

    Args:
        results: One DivisionResult per student; None entries are skipped

    Returns:
        DivisionStatistics with a count for every division
    """
    counts: Dict[Division, int] = {division: 0 for division in Division}
    total_students = 0
    passed = 0

    for result in results:
        if result is None:
            continue
        total_students += 1
        counts[result.division] += 1
        if result.division != Division.FAIL:
            passed += 1

    pass_rate = (passed / total_students) * 100 if total_students > 0 else 0.0

    return DivisionStatistics(
        total_students=total_students,
        divisions=counts,
        pass_rate=round(pass_rate, 2),
    )
