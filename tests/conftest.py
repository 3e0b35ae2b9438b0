"""
Pytest Configuration and Fixtures

Provides common fixtures for all tests including:
- Grading bands (D1-F9 scale)
- Class subjects (general and subsidiary)
- Student and mark factories
"""

from typing import Any, Dict, List, Optional

import pytest

from report_card_engine.config import DEFAULT_GRADING_BANDS
from report_card_engine.data_models import GradeBand, MarkRecord, Student, Subject


@pytest.fixture
def grading_bands() -> List[GradeBand]:
    """Standard D1-F9 grading bands"""
    return [GradeBand.model_validate(band) for band in DEFAULT_GRADING_BANDS]


@pytest.fixture
def class_subjects() -> List[Subject]:
    """Four general subjects and one subsidiary subject"""
    return [
        Subject(id="ENG", name="English", category="GENERAL", teacher_name="Grace Nakato"),
        Subject(id="MTC", name="Mathematics", category="GENERAL", teacher_name="John Paul Okello"),
        Subject(id="SCI", name="Science", category="GENERAL"),
        Subject(id="SST", name="S.St and R.E", category="GENERAL"),
        Subject(id="ART", name="Art and Craft", category="SUBSIDIARY"),
    ]


@pytest.fixture
def make_mark():
    """Factory for mark records in term T1 of academic year 2025"""

    def _make_mark(subject_id: str, student_id: str = "1001", **scores: Any) -> MarkRecord:
        data: Dict[str, Any] = {
            "studentId": student_id,
            "subjectId": subject_id,
            "termId": "T1",
            "academicYearId": "AY2025",
        }
        data.update(scores)
        return MarkRecord.model_validate(data)

    return _make_mark


@pytest.fixture
def make_student(class_subjects):
    """Factory for a P.7 student in term T1 of academic year 2025"""

    def _make_student(
        marks: Optional[List[MarkRecord]] = None,
        subjects: Optional[List[Subject]] = None,
        student_id: str = "1001",
        **extra: Any,
    ) -> Student:
        data: Dict[str, Any] = {
            "id": student_id,
            "name": "Jane Achieng",
            "class": {"id": "C7", "name": "P.7 East", "subjects": subjects if subjects is not None else class_subjects},
            "term": {"id": "T1", "name": "Term I"},
            "academicYear": {"id": "AY2025", "year": 2025},
            "marks": marks or [],
        }
        data.update(extra)
        return Student.model_validate(data)

    return _make_student


@pytest.fixture
def student_payload() -> Dict[str, Any]:
    """Raw student payload as an individual report request sends it"""
    return {
        "id": "1001",
        "name": "Jane Achieng",
        "dateOfBirth": "2012-03-15T00:00:00.000Z",
        "class": {
            "id": "C7",
            "name": "P.7 East",
            "subjects": [
                {"id": "MTC", "name": "Mathematics", "category": "GENERAL"},
                {"id": "ART", "name": "Art and Craft", "category": "SUBSIDIARY"},
            ],
        },
        "term": {"id": "T1", "name": "Term I"},
        "academicYear": {"id": "AY2025", "year": 2025},
    }
