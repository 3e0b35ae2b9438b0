#!/usr/bin/env python3
"""
REPORT BUILDER - Assemble computed report card data for students
Run the reconcile -> aggregate -> classify pipeline for one student or a class

PIPELINE:
1. Validate identity data (student id, class subject list)
2. Restrict the student's marks to its term and academic year
3. Aggregate one row per class subject
4. Classify the division over general subjects
5. Compute the general-subject totals row

The builder is a pure function of its inputs: the same student and grading
bands always produce the same StudentReport.

Priority: HIGH - Entry point for computed report card data
Dependencies: subject_aggregator.py, division_classifier.py, mark_reconciler.py
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from tqdm import tqdm

from report_card_engine.data_models import (
    DivisionStatistics,
    GradeBand,
    NextTermSchedule,
    ReportCardRemarks,
    ReportDataError,
    Student,
    StudentReport,
)
from report_card_engine.division_classifier import (
    calculate_stage_totals,
    classify,
    division_statistics,
)
from report_card_engine.grading_scale import validate_grading_bands
from report_card_engine.mark_reconciler import filter_marks_for_context
from report_card_engine.subject_aggregator import SubjectAggregator

logger = logging.getLogger(__name__)


class ReportBuilder:
    """Compute StudentReport records from students and the grading scale"""

    def __init__(self, grading_bands: Sequence[GradeBand]):
        self.grading_bands = list(grading_bands)
        self.aggregator = SubjectAggregator(self.grading_bands)

        for problem in validate_grading_bands(self.grading_bands):
            logger.warning(f"⚠️ Grading system: {problem}")

    @staticmethod
    def _check_identity(student: Student) -> None:
        if not student.id:
            raise ReportDataError("Student has no id")
        if student.school_class is None:
            raise ReportDataError(f"Student {student.id} has no class")
        if not student.school_class.subjects:
            raise ReportDataError(
                f"Class {student.school_class.name} of student {student.id} has no subject list"
            )

    def build(
        self,
        student: Student,
        next_term: Optional[NextTermSchedule] = None,
    ) -> StudentReport:
        """
        Compute the report card data for a single student

        Args:
            student: Student with class subjects and canonical marks
            next_term: Next term dates printed in the footer

        Returns:
            StudentReport with rows, totals and division

        Raises:
            ReportDataError: student id or class subject list missing
        """
        self._check_identity(student)

        marks = filter_marks_for_context(student)
        calculation_log: List[str] = []
        rows = self.aggregator.aggregate_subjects(student.subjects, marks, calculation_log)
        division = classify(rows)
        totals = calculate_stage_totals(rows)

        for line in calculation_log:
            logger.debug(line)
        logger.info(
            f"✅ {student.name}: {len(rows)} subjects, "
            f"average {division.average_aggregate_points:.2f} -> {division.division.value}"
        )

        return StudentReport(
            student=student,
            rows=rows,
            totals=totals,
            division=division,
            grading_bands=self.grading_bands,
            report_card=student.report_card or ReportCardRemarks(),
            next_term=next_term,
        )

    def build_class(
        self,
        students: Iterable[Student],
        next_term: Optional[NextTermSchedule] = None,
        progress: bool = False,
    ) -> List[StudentReport]:
        """
        Compute report card data for every student of a class

        Students with missing identity data are logged and skipped so the rest
        of the class still gets report cards.
        """
        students = list(students)
        logger.info(f"📊 Building report cards for {len(students)} students")

        iterator = tqdm(students, desc="Computing", unit="student") if progress else students

        reports = []
        for student in iterator:
            try:
                reports.append(self.build(student, next_term=next_term))
            except ReportDataError as e:
                logger.error(f"❌ Skipping student {student.id or '?'}: {e}")

        return reports

    @staticmethod
    def class_statistics(reports: Iterable[StudentReport]) -> DivisionStatistics:
        """Division distribution over already-built reports"""
        return division_statistics(report.division for report in reports)

    @staticmethod
    def to_dict(report: StudentReport) -> Dict:
        """Computed fields as JSON-ready data, for callers that skip rendering"""
        return report.model_dump(mode="json", include={"rows", "totals", "division"})
