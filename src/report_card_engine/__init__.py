"""
Report card engine: grading, division classification and report card rendering
"""

from report_card_engine.data_models import (
    Division,
    DivisionResult,
    GradeBand,
    MarkRecord,
    ReportDataError,
    Student,
    StudentReport,
    Subject,
    SubjectCategory,
    SubjectComputedRow,
)
from report_card_engine.division_classifier import classify
from report_card_engine.grading_scale import grade_for
from report_card_engine.mark_reconciler import normalize_student_payload, resolve_marks
from report_card_engine.report_builder import ReportBuilder
from report_card_engine.report_generator import ReportCardGenerator
from report_card_engine.subject_aggregator import SubjectAggregator

__version__ = "1.0.0"

__all__ = [
    'Division',
    'DivisionResult',
    'GradeBand',
    'MarkRecord',
    'ReportDataError',
    'Student',
    'StudentReport',
    'Subject',
    'SubjectCategory',
    'SubjectComputedRow',
    'classify',
    'grade_for',
    'normalize_student_payload',
    'resolve_marks',
    'ReportBuilder',
    'ReportCardGenerator',
    'SubjectAggregator',
]
