#!/usr/bin/env python3
"""
SUBJECT AGGREGATOR - Per-subject report card rows from raw mark records
Convert homework, B.O.T, M.O.T and E.O.T scores into a normalised row

ROW COMPUTATION:
✅ Scores: None and 0 both display blank; arithmetic treats them as 0
✅ Total: Explicit total if recorded, else homework + bot + midterm + eot
✅ Stage grades: Grading scale applied to each scored stage (> 0 only)
✅ Overall grade: Explicit grade, else grading scale applied to the total
✅ Remarks: Explicit, else E.O.T comment, else overall comment
✅ Initials: Assigned subject teacher, else recording user, else mark teacher

EDGE CASES HANDLED:
- Subject without marks: blank row, still listed on the report card
- Unscored stage: empty grade, never a computed worst grade
- Duplicate records for a subject: most recently updated wins

Priority: CRITICAL - Body of every report card
Dependencies: data_models.py, grading_scale.py, mark_reconciler.py
"""

import logging
from typing import Dict, List, Optional, Sequence

from report_card_engine.data_models import GradeBand, MarkRecord, Subject, SubjectComputedRow
from report_card_engine.grading_scale import comment_for_grade, grade_for
from report_card_engine.mark_reconciler import select_latest_marks

logger = logging.getLogger(__name__)


def teacher_initials(name: Optional[str]) -> str:
    """Uppercase first letter of each space-separated name token"""
    if not name:
        return ""
    return "".join(token[0].upper() for token in name.split(" ") if token)


def _score(value: Optional[float]) -> float:
    return float(value) if value else 0.0


def _display(value: float) -> Optional[float]:
    return value if value > 0 else None


class SubjectAggregator:
    """Build SubjectComputedRow records against a grading scale"""

    def __init__(self, grading_bands: Sequence[GradeBand]):
        """
        Initialize aggregator with the school's grading bands

        Args:
            grading_bands: Configured bands; empty falls back to the sentinel grade
        """
        self.grading_bands = list(grading_bands)

    def _stage_grade(self, score: float) -> str:
        return grade_for(score, self.grading_bands).grade if score > 0 else ""

    def _resolve_initials(self, subject: Subject, mark: MarkRecord) -> str:
        for name in (subject.teacher_name, mark.created_by, mark.teacher):
            initials = teacher_initials(name)
            if initials:
                return initials
        return ""

    def blank_row(self, subject: Subject) -> SubjectComputedRow:
        """Row for a subject that has not been assessed"""
        return SubjectComputedRow(
            subject_id=subject.id,
            name=subject.name,
            category=subject.category,
        )

    def aggregate(
        self,
        subject: Subject,
        mark: Optional[MarkRecord],
        calculation_log: Optional[List[str]] = None,
    ) -> SubjectComputedRow:
        """
        Compute the report card row for one subject

        Args:
            subject: Subject definition (category, assigned teacher)
            mark: The student's mark record for the subject, if any
            calculation_log: Audit trail list to append to, if given

        Returns:
            SubjectComputedRow with blank fields where nothing was assessed
        """
        log = calculation_log if calculation_log is not None else []

        if mark is None:
            log.append(f"   {subject.name}: no marks recorded")
            return self.blank_row(subject)

        homework = _score(mark.homework)
        bot = _score(mark.bot)
        midterm = _score(mark.midterm)
        eot = _score(mark.eot)

        if mark.total:
            total = float(mark.total)
        else:
            total = homework + bot + midterm + eot

        bot_grade = self._stage_grade(bot)
        midterm_grade = self._stage_grade(midterm)
        eot_grade = self._stage_grade(eot)

        if mark.grade:
            grade = mark.grade.upper()
        else:
            grade = self._stage_grade(total)

        if mark.remarks:
            remarks = mark.remarks
        elif eot > 0:
            remarks = comment_for_grade(eot_grade, self.grading_bands)
        elif total > 0:
            remarks = comment_for_grade(grade, self.grading_bands)
        else:
            remarks = ""

        row = SubjectComputedRow(
            subject_id=subject.id,
            name=subject.name,
            category=subject.category,
            homework=_display(homework),
            bot=_display(bot),
            bot_grade=bot_grade,
            midterm=_display(midterm),
            midterm_grade=midterm_grade,
            eot=_display(eot),
            eot_grade=eot_grade,
            total=_display(total),
            grade=grade,
            teacher_initials=self._resolve_initials(subject, mark),
            remarks=remarks,
        )

        log.append(
            f"   {subject.name}: total {total:g} grade {grade or '-'} eot {eot_grade or '-'}"
        )
        return row
    def aggregate_subjects(
        self,
        subjects: Sequence[Subject],
        marks: Sequence[MarkRecord],
        calculation_log: Optional[List[str]] = None,
    ) -> List[SubjectComputedRow]:
        """
        One row per class subject, in class order

        Args:
            subjects: The class's effective subject list
            marks: The student's marks, already filtered to the term/year
            calculation_log: Audit trail list owned by the caller, if any

        Returns:
            List of rows, including blank rows for unassessed subjects
        """
        log = calculation_log if calculation_log is not None else []
        log.append(f"📊 Aggregating {len(subjects)} subjects from {len(marks)} mark records")

        latest: Dict[str, MarkRecord] = select_latest_marks(marks)
        if len(latest) < len(marks):
            log.append(
                f"⚠️ {len(marks) - len(latest)} duplicate mark records ignored (latest update kept)"
            )

        known_subjects = {subject.id for subject in subjects}
        orphaned = [subject_id for subject_id in latest if subject_id not in known_subjects]
        if orphaned:
            logger.warning(f"⚠️ Marks for subjects outside the class list ignored: {orphaned}")

        return [self.aggregate(subject, latest.get(subject.id), log) for subject in subjects]
