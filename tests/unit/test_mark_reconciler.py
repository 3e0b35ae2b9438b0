"""
Unit Tests for the Mark Reconciler

Tests for:
- Candidate location priority
- Student filtering of class-level and request-level marks
- Term / academic year filtering
- Duplicate resolution by last update
- Payload normalisation
"""

import pytest

from report_card_engine.data_models import MarkRecord, ReportDataError
from report_card_engine.mark_reconciler import (
    filter_marks,
    locate_marks,
    normalize_student_payload,
    parse_mark_records,
    resolve_marks,
    select_latest_marks,
)


def _mark(subject_id, eot, student_id=None, **extra):
    record = {"subjectId": subject_id, "termId": "T1", "academicYearId": "AY2025", "eot": eot}
    if student_id is not None:
        record["studentId"] = student_id
    record.update(extra)
    return record


class TestLocateMarks:
    """Tests for candidate location priority"""

    def test_direct_marks_win(self, student_payload):
        student_payload["marks"] = [_mark("MTC", 85)]
        student_payload["reportCard"] = {"marks": [_mark("MTC", 10)]}
        student_payload["class"]["marks"] = [_mark("MTC", 20, student_id="1001")]

        source, marks = locate_marks(student_payload)

        assert source == "student"
        assert marks[0]["eot"] == 85

    def test_report_wrapper_used_when_no_direct_marks(self, student_payload):
        student_payload["marks"] = []
        student_payload["report"] = {"marks": [_mark("MTC", 70)]}

        source, marks = locate_marks(student_payload)

        assert source == "report"
        assert marks[0]["eot"] == 70

    def test_class_marks_filtered_by_student(self, student_payload):
        student_payload["class"]["marks"] = [
            _mark("MTC", 60, student_id="1001"),
            _mark("MTC", 90, student_id="1002"),
            _mark("MTC", 99),
        ]

        source, marks = locate_marks(student_payload)

        assert source == "class"
        assert [m["eot"] for m in marks] == [60]

    def test_class_marks_of_other_students_are_skipped(self, student_payload):
        student_payload["class"]["marks"] = [_mark("MTC", 90, student_id="1002")]
        request = {"marks": [_mark("MTC", 45)]}

        source, marks = locate_marks(student_payload, request)

        assert source == "request"
        assert marks[0]["eot"] == 45

    def test_request_marks_keep_unowned_records(self, student_payload):
        request = {"marks": [_mark("MTC", 45), _mark("MTC", 75, student_id="1002")]}

        source, marks = locate_marks(student_payload, request)

        assert source == "request"
        assert [m["eot"] for m in marks] == [45]

    def test_nested_student_id(self, student_payload):
        student_payload["class"]["marks"] = [_mark("MTC", 66, student={"id": 1001})]

        source, marks = locate_marks(student_payload)

        assert source == "class"
        assert len(marks) == 1

    def test_no_marks_anywhere(self, student_payload):
        assert locate_marks(student_payload) == ("none", [])


class TestFilterMarks:
    """Tests for term / academic year filtering"""

    def test_other_term_and_year_dropped(self):
        marks = parse_mark_records([
            _mark("MTC", 85),
            _mark("MTC", 40, termId="T2"),
            _mark("MTC", 30, academicYearId="AY2024"),
            {"subjectId": "MTC", "eot": 20},
        ])

        filtered = filter_marks(marks, "T1", "AY2025")

        assert [m.eot for m in filtered] == [85]

    def test_missing_context_keeps_everything(self):
        marks = parse_mark_records([_mark("MTC", 85), _mark("MTC", 40, termId="T2")])
        assert len(filter_marks(marks)) == 2

    def test_resolve_marks_uses_student_context(self, student_payload):
        student_payload["marks"] = [_mark("MTC", 85), _mark("ART", 50, termId="T3")]

        marks = resolve_marks(student_payload)

        assert len(marks) == 1
        assert marks[0].subject_id == "MTC"
        assert marks[0].eot == 85


class TestParseMarkRecords:
    """Tests for raw record conversion"""

    def test_nested_ids_are_lifted(self):
        records = parse_mark_records([{
            "subject": {"id": 7, "name": "Mathematics"},
            "term": {"id": "T1"},
            "academicYear": {"id": "AY2025"},
            "bot": "",
            "eot": 66,
        }])

        assert records[0].subject_id == "7"
        assert records[0].term_id == "T1"
        assert records[0].bot is None

    def test_malformed_record_skipped(self):
        records = parse_mark_records([{"eot": 40}, _mark("MTC", 85)])
        assert len(records) == 1


class TestSelectLatestMarks:
    """Tests for duplicate resolution"""

    def test_most_recent_update_wins(self):
        marks = parse_mark_records([
            _mark("MTC", 90, updatedAt="2025-04-01T10:00:00"),
            _mark("MTC", 40, updatedAt="2025-03-01T10:00:00"),
        ])

        assert select_latest_marks(marks)["MTC"].eot == 90

    def test_missing_timestamp_ranks_oldest(self):
        marks = parse_mark_records([
            _mark("MTC", 70, updatedAt="2025-03-01T10:00:00"),
            _mark("MTC", 20),
        ])

        assert select_latest_marks(marks)["MTC"].eot == 70

    def test_mixed_timezone_timestamps(self):
        marks = parse_mark_records([
            _mark("MTC", 90, updatedAt="2025-04-02T08:00:00Z"),
            _mark("MTC", 40, updatedAt="2025-03-02T08:00:00"),
            _mark("ENG", 55, updatedAt="2025-03-02T08:00:00Z"),
            _mark("ENG", 75, updatedAt="2025-04-02T08:00:00"),
        ])

        latest = select_latest_marks(marks)

        assert latest["MTC"].eot == 90
        assert latest["ENG"].eot == 75

    def test_naive_timestamp_read_as_utc(self):
        record = MarkRecord(subject_id="MTC", updated_at="2025-03-02T08:00:00")
        assert record.updated_at.utcoffset().total_seconds() == 0

    def test_tie_keeps_later_record(self):
        marks = [MarkRecord(subject_id="MTC", eot=50), MarkRecord(subject_id="MTC", eot=60)]
        assert select_latest_marks(marks)["MTC"].eot == 60


class TestNormalizeStudentPayload:
    """Tests for payload normalisation"""

    def test_marks_moved_to_canonical_location(self, student_payload):
        student_payload["reportCard"] = {"marks": [_mark("MTC", 85)], "discipline": "A"}

        student = normalize_student_payload(student_payload)

        assert [m.eot for m in student.marks] == [85]
        assert student.report_card.discipline == "A"
        assert student.school_class.name == "P.7 East"
        assert student.academic_year.name == "2025"
        assert str(student.date_of_birth) == "2012-03-15"

    def test_flat_context_ids(self, student_payload):
        del student_payload["term"]
        student_payload["termId"] = "T1"
        student_payload["marks"] = [_mark("MTC", 85), _mark("MTC", 10, termId="T2")]

        student = normalize_student_payload(student_payload)

        assert student.term.id == "T1"
        assert len(student.marks) == 1

    def test_missing_id_raises(self, student_payload):
        del student_payload["id"]
        with pytest.raises(ReportDataError):
            normalize_student_payload(student_payload)

    def test_missing_subjects_raises(self, student_payload):
        student_payload["class"]["subjects"] = []
        with pytest.raises(ReportDataError):
            normalize_student_payload(student_payload)
