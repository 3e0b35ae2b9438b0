#!/usr/bin/env python3
"""
MARK RECONCILER - Locate and filter a student's mark records
Normalise differently-shaped student payloads into one canonical marks list

CANDIDATE LOCATIONS (fixed priority, first non-empty list wins):
1. student["marks"]                      - individual report requests
2. student["reportCard"]["marks"]        - report wrapper (also "report")
3. student["class"]["marks"]             - bulk class payloads, filtered by studentId
4. request["marks"]                      - marks sent at the top of the request

CONTEXT FILTERING:
✅ Term: keep records stamped with the student's current term
✅ Academic year: keep records stamped with the student's academic year
✅ No context on the student: keep everything
✅ Duplicates: most recently updated record per subject wins

The lookup runs once, at the data-access boundary (normalize_student_payload).
Everything downstream reads Student.marks only.

Priority: HIGH - Every caller builds its payload differently
Dependencies: data_models.py
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from pydantic import ValidationError

from report_card_engine.data_models import MarkRecord, ReportDataError, Student

logger = logging.getLogger(__name__)

REPORT_WRAPPER_KEYS = ("reportCard", "report_card", "report")
CLASS_KEYS = ("class", "school_class")


def _non_empty_list(value: Any) -> Optional[list]:
    if isinstance(value, (list, tuple)) and len(value) > 0:
        return list(value)
    return None


def _record_student_id(record: Any) -> Optional[str]:
    if isinstance(record, MarkRecord):
        return record.student_id
    if isinstance(record, Mapping):
        value = record.get("studentId", record.get("student_id"))
        if value is None and isinstance(record.get("student"), Mapping):
            value = record["student"].get("id")
        return None if value is None else str(value).strip()
    return None


def _filter_by_student(records: list, student_id: Optional[str], strict: bool) -> list:
    if student_id is None:
        return records
    kept = []
    for record in records:
        owner = _record_student_id(record)
        if owner is None:
            if not strict:
                kept.append(record)
        elif owner == student_id:
            kept.append(record)
    return kept


def _payload_student_id(payload: Mapping[str, Any]) -> Optional[str]:
    value = payload.get("id", payload.get("studentId"))
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def locate_marks(
    payload: Mapping[str, Any],
    request_payload: Optional[Mapping[str, Any]] = None,
) -> Tuple[str, list]:
    """
    Find the authoritative raw marks list in a student payload

    Args:
        payload: Student payload as assembled by the caller
        request_payload: Enclosing request body, if marks may sit at its top level

    Returns:
        Tuple of (source name, raw records); ("none", []) when nothing is found
    """
    student_id = _payload_student_id(payload)

    direct = _non_empty_list(payload.get("marks"))
    if direct:
        return "student", direct

    for key in REPORT_WRAPPER_KEYS:
        wrapper = payload.get(key)
        if isinstance(wrapper, Mapping):
            wrapped = _non_empty_list(wrapper.get("marks"))
            if wrapped:
                return key, wrapped

    for key in CLASS_KEYS:
        class_data = payload.get(key)
        if isinstance(class_data, Mapping):
            class_marks = _non_empty_list(class_data.get("marks"))
            if class_marks:
                # Class-level marks belong to every student in the class
                owned = _filter_by_student(class_marks, student_id, strict=True)
                if owned:
                    return "class", owned

    if request_payload is not None:
        request_marks = _non_empty_list(request_payload.get("marks"))
        if request_marks:
            owned = _filter_by_student(request_marks, student_id, strict=False)
            if owned:
                return "request", owned

    return "none", []


def _flatten_record(record: Mapping[str, Any]) -> Dict[str, Any]:
    """Lift ids out of nested subject/term/academicYear objects"""
    flat = dict(record)
    for nested, key in (
        ("subject", "subjectId"),
        ("term", "termId"),
        ("academicYear", "academicYearId"),
        ("student", "studentId"),
    ):
        if flat.get(key) is None and isinstance(flat.get(nested), Mapping):
            flat[key] = flat[nested].get("id")
        flat.pop(nested, None)
    return flat


def parse_mark_records(records: Iterable[Any]) -> List[MarkRecord]:
    """Convert raw records into MarkRecord models, skipping malformed rows"""
    parsed = []
    for record in records:
        if isinstance(record, MarkRecord):
            parsed.append(record)
            continue
        try:
            parsed.append(MarkRecord.model_validate(_flatten_record(record)))
        except (ValidationError, TypeError) as e:
            logger.warning(f"⚠️ Skipping malformed mark record: {e}")
    return parsed


def filter_marks(
    marks: Iterable[MarkRecord],
    term_id: Optional[str] = None,
    academic_year_id: Optional[str] = None,
) -> List[MarkRecord]:
    """
    Keep the marks entered for the given term and academic year

    A missing context means "accept all" for that dimension; a present context
    rejects records that carry no stamp for it.
    """
    filtered = []
    for mark in marks:
        if term_id is not None and mark.term_id != term_id:
            continue
        if academic_year_id is not None and mark.academic_year_id != academic_year_id:
            continue
        filtered.append(mark)
    return filtered


def filter_marks_for_context(student: Student) -> List[MarkRecord]:
    """Marks of a student restricted to its own term and academic year"""
    term_id = student.term.id if student.term else None
    year_id = student.academic_year.id if student.academic_year else None
    return filter_marks(student.marks, term_id, year_id)


def _payload_context_id(payload: Mapping[str, Any], nested: str, flat: str) -> Optional[str]:
    value = payload.get(flat)
    if value is None and isinstance(payload.get(nested), Mapping):
        value = payload[nested].get("id")
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def resolve_marks(
    payload: Mapping[str, Any],
    request_payload: Optional[Mapping[str, Any]] = None,
) -> List[MarkRecord]:
    """
    Locate a student's marks and restrict them to the student's term/year

    Returns:
        Possibly empty list of MarkRecord; empty means "no marks yet"
    """
    source, raw_marks = locate_marks(payload, request_payload)
    marks = parse_mark_records(raw_marks)

    term_id = _payload_context_id(payload, "term", "termId")
    year_id = _payload_context_id(payload, "academicYear", "academicYearId")
    filtered = filter_marks(marks, term_id, year_id)

    logger.debug(
        f"Resolved {len(filtered)} of {len(marks)} marks from '{source}' "
        f"for student {_payload_student_id(payload)}"
    )
    return filtered


def select_latest_marks(marks: Sequence[MarkRecord]) -> Dict[str, MarkRecord]:
    """
    Pick one mark record per subject: the most recently updated wins

    Records without updated_at rank oldest; on a tie the later record wins.
    """
    latest: Dict[str, MarkRecord] = {}
    for mark in marks:
        current = latest.get(mark.subject_id)
        if current is None:
            latest[mark.subject_id] = mark
            continue
        if current.updated_at is not None and (
            mark.updated_at is None or mark.updated_at < current.updated_at
        ):
            continue
        latest[mark.subject_id] = mark
    return latest


def normalize_student_payload(
    payload: Mapping[str, Any],
    request_payload: Optional[Mapping[str, Any]] = None,
) -> Student:
    """
    Build a Student with its marks attached at the canonical location

    Raises:
        ReportDataError: payload has no student id or no class subject list
    """
    student_id = _payload_student_id(payload)
    if student_id is None:
        raise ReportDataError("Student payload has no id")

    class_data = next(
        (payload[key] for key in CLASS_KEYS if isinstance(payload.get(key), Mapping)),
        None,
    )
    if class_data is None or not class_data.get("subjects"):
        raise ReportDataError(f"Student {student_id} has no class subject list")

    marks = resolve_marks(payload, request_payload)

    data = {key: value for key, value in payload.items() if key not in CLASS_KEYS}
    data["id"] = student_id
    data["class"] = {key: value for key, value in class_data.items() if key != "marks"}
    data["marks"] = marks
    for nested, flat in (("term", "termId"), ("academicYear", "academicYearId")):
        if data.get(nested) is None and data.get(flat) is not None:
            data[nested] = {"id": data[flat]}

    wrapper = next(
        (payload[key] for key in REPORT_WRAPPER_KEYS if isinstance(payload.get(key), Mapping)),
        None,
    )
    for key in REPORT_WRAPPER_KEYS:
        data.pop(key, None)
    if wrapper is not None:
        data["reportCard"] = {key: value for key, value in wrapper.items() if key != "marks"}

    return Student.model_validate(data)
