#!/usr/bin/env python3
"""
INTEGRATION TEST - End-to-end report card computation and rendering
Test complete workflow from a raw API-shaped payload to the HTML document

TEST FLOW:
1. Normalise differently-shaped student payloads
2. Build report card data for the class
3. Render individual cards and the class bundle
4. Check class statistics

Priority: HIGH - Validates core functionality
"""

from datetime import date

import pytest

from report_card_engine import ReportBuilder, ReportCardGenerator, normalize_student_payload
from report_card_engine.data_models import Division

CLASS_DATA = {
    "id": "C7",
    "name": "P.7 East",
    "subjects": [
        {"id": 1, "name": "English", "category": "GENERAL", "teacherName": "Grace Nakato"},
        {"id": 2, "name": "Mathematics", "category": "general"},
        {"id": 3, "name": "Art and Craft", "category": "SUBSIDIARY"},
    ],
}


def _payload(student_id, name, **extra):
    payload = {
        "id": student_id,
        "name": name,
        "class": dict(CLASS_DATA),
        "term": {"id": "T1", "name": "Term I"},
        "academicYear": {"id": "AY2025", "year": 2025},
    }
    payload.update(extra)
    return payload


@pytest.fixture
def reports(grading_bands):
    request = {
        "marks": [
            {"studentId": 3, "subject": {"id": 1}, "termId": "T1", "academicYearId": "AY2025", "eot": 45},
            {"studentId": 3, "subject": {"id": 2}, "termId": "T1", "academicYearId": "AY2025", "eot": 30},
        ]
    }
    payloads = [
        # Marks directly on the student
        _payload(1, "Jane Achieng", marks=[
            {"subjectId": 1, "termId": "T1", "academicYearId": "AY2025", "bot": 85, "eot": 95},
            {"subjectId": 2, "termId": "T1", "academicYearId": "AY2025", "eot": 80,
             "createdBy": {"name": "John Okello"}},
            {"subjectId": 3, "termId": "T1", "academicYearId": "AY2025", "eot": 20},
        ]),
        # Marks inside a report wrapper, with an older duplicate
        _payload(2, "Peter Mukasa", reportCard={
            "classTeacherComment": "Can do better",
            "marks": [
                {"subjectId": 1, "termId": "T1", "academicYearId": "AY2025", "eot": 62,
                 "updatedAt": "2025-04-02T08:00:00Z"},
                {"subjectId": 1, "termId": "T1", "academicYearId": "AY2025", "eot": 10,
                 "updatedAt": "2025-03-02T08:00:00Z"},
                {"subjectId": 2, "termId": "T1", "academicYearId": "AY2025", "eot": 58},
            ],
        }),
        # Marks at the top of the request
        _payload(3, "Ruth Nambi"),
        # No marks yet
        _payload(4, "Sam Kato"),
    ]

    students = [normalize_student_payload(payload, request) for payload in payloads]
    return ReportBuilder(grading_bands).build_class(students)


def test_divisions_across_payload_shapes(reports):
    """Each payload shape resolves to the expected division"""
    divisions = {report.student.name: report.division for report in reports}

    # D1 + D2
    assert divisions["Jane Achieng"].average_aggregate_points == 1.5
    assert divisions["Jane Achieng"].division == Division.DIVISION_I
    # C4 + C5
    assert divisions["Peter Mukasa"].average_aggregate_points == 4.5
    assert divisions["Peter Mukasa"].division == Division.DIVISION_II
    # P7 + F9
    assert divisions["Ruth Nambi"].average_aggregate_points == 8.0
    assert divisions["Ruth Nambi"].division == Division.DIVISION_IV
    assert divisions["Sam Kato"].division == Division.FAIL


def test_report_details(reports):
    jane, peter = reports[0], reports[1]

    assert jane.rows[0].teacher_initials == "GN"
    assert jane.rows[1].teacher_initials == "JO"
    assert jane.rows[2].eot_grade == "F9"
    assert jane.totals.eot == 175
    assert peter.rows[0].eot == 62
    assert peter.report_card.class_teacher_comment == "Can do better"


def test_class_statistics(reports):
    stats = ReportBuilder.class_statistics(reports)

    assert stats.total_students == 4
    assert stats.pass_rate == 75.0


def test_class_bundle(reports, tmp_path):
    generator = ReportCardGenerator(output_dir=tmp_path)

    path = generator.generate_class_report_cards(reports, issue_date=date(2025, 4, 30))
    html = path.read_text(encoding="utf-8")

    assert path.name == "P_7_East_report_cards.html"
    assert html.count('class="report-card page"') == 4
    assert html.count("No marks recorded for this term.") == 1
    for name in ("Jane Achieng", "Peter Mukasa", "Ruth Nambi", "Sam Kato"):
        assert name in html
