#!/usr/bin/env python3
"""
DATA MODELS - Pydantic schemas for report card data validation
Type-safe data structures for students, marks, grading bands and computed results

COMPREHENSIVE DATA VALIDATION:
✅ Grading Bands: Inclusive mark ranges mapped to a grade and a comment
✅ Mark Records: Homework, B.O.T, M.O.T and E.O.T scores per subject and term
✅ Students: Identity, class, subjects, term and academic year context
✅ Computed Rows: Per-subject scores, stage grades, remarks, teacher initials
✅ Division Results: Average aggregate points and the division tier

VALIDATION RULES:
- Identifiers are normalised to strings (upstream sends ints or UUID strings)
- Empty score cells are treated as "not yet assessed" (None), never as 0
- Band minimum must not exceed band maximum
- Subject category is GENERAL or SUBSIDIARY (defaults to GENERAL)
- Inputs accept both camelCase (API payloads) and snake_case names

Priority: CRITICAL - Foundation for all report card computation
Dependencies: Pydantic for validation
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class ReportDataError(ValueError):
    """Raised when required identity data (student id, class subjects) is missing"""


def _to_identifier(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(int(value)) if float(value).is_integer() else str(value)
    if isinstance(value, str):
        return value.strip()
    return value


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _person_name(value: Any) -> Any:
    """Accept either a plain name or an object carrying a ``name`` key"""
    if isinstance(value, dict):
        value = value.get("name")
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


Identifier = Annotated[str, BeforeValidator(_to_identifier)]
Score = Annotated[Optional[float], BeforeValidator(_blank_to_none)]
PersonName = Annotated[Optional[str], BeforeValidator(_person_name)]


class EngineModel(BaseModel):
    """Base model accepting camelCase payload keys as well as field names"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SubjectCategory(str, Enum):
    """Whether a subject counts toward totals and division"""
    GENERAL = "GENERAL"
    SUBSIDIARY = "SUBSIDIARY"


class Division(str, Enum):
    """Overall performance classification"""
    DIVISION_I = "DIVISION I"
    DIVISION_II = "DIVISION II"
    DIVISION_III = "DIVISION III"
    DIVISION_IV = "DIVISION IV"
    FAIL = "FAIL"


class GradeBand(EngineModel):
    """Configured mark range mapped to a grade code and comment"""

    min_mark: float = Field(..., description="Lowest mark in the band (inclusive)")
    max_mark: float = Field(..., description="Highest mark in the band (inclusive)")
    grade: str = Field(..., description="Grade code, e.g. D1")
    comment: str = Field("", description="Descriptive comment used for remarks")

    @field_validator("grade")
    @classmethod
    def normalize_grade(cls, v):
        return v.strip().upper()

    @field_validator("comment", mode="before")
    @classmethod
    def default_comment(cls, v):
        return v or ""

    @model_validator(mode="after")
    def check_range(self):
        if self.min_mark > self.max_mark:
            raise ValueError(
                f"Band {self.grade} has minMark {self.min_mark} above maxMark {self.max_mark}"
            )
        return self

    def covers(self, mark: float) -> bool:
        """Check if a mark falls inside this band"""
        return self.min_mark <= mark <= self.max_mark


class GradeLookup(BaseModel):
    """Result of resolving a mark against the grading scale"""

    grade: str
    comment: str = ""


class MarkRecord(EngineModel):
    """One assessment row per student, subject, term and academic year"""

    student_id: Optional[Identifier] = Field(None, description="Student the marks belong to")
    subject_id: Identifier = Field(..., description="Subject assessed")
    term_id: Optional[Identifier] = Field(None, description="Term the marks were entered for")
    academic_year_id: Optional[Identifier] = Field(None, description="Academic year of the marks")

    homework: Score = Field(None, description="Homework score")
    bot: Score = Field(None, description="Beginning-of-Term score")
    midterm: Score = Field(None, description="Mid-Term score")
    eot: Score = Field(None, description="End-of-Term score")
    total: Score = Field(None, description="Explicit total, overrides the computed sum")

    grade: Optional[str] = Field(None, description="Explicit overall grade")
    remarks: Optional[str] = Field(None, description="Explicit remarks")
    created_by: PersonName = Field(None, description="Name of the user who recorded the marks")
    teacher: PersonName = Field(None, description="Teacher named on the mark itself")
    updated_at: Optional[datetime] = Field(None, description="Last update time of the record")

    @field_validator("grade", "remarks", mode="before")
    @classmethod
    def blank_text_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("updated_at")
    @classmethod
    def assume_utc(cls, v):
        # CSV exports carry naive timestamps, the API sends UTC ("...Z")
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class Subject(EngineModel):
    """Subject taught to a class"""

    id: Identifier = Field(..., description="Subject identifier")
    name: str = Field(..., description="Subject name")
    category: SubjectCategory = Field(SubjectCategory.GENERAL, description="GENERAL or SUBSIDIARY")
    teacher_name: PersonName = Field(None, description="Teacher assigned to this subject for the class")

    @field_validator("category", mode="before")
    @classmethod
    def parse_category(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return SubjectCategory.GENERAL
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @property
    def is_general(self) -> bool:
        return self.category == SubjectCategory.GENERAL


class SchoolClass(EngineModel):
    """Class with its effective subject list"""

    id: Optional[Identifier] = None
    name: str = Field(..., description="Class name, e.g. P.7 East")
    subjects: Optional[List[Subject]] = Field(None, description="Subjects taught to the class")


class Term(EngineModel):
    id: Identifier
    name: Optional[str] = None


class AcademicYear(EngineModel):
    id: Identifier
    name: Optional[str] = Field(None, description="Display name, e.g. 2025")

    @model_validator(mode="before")
    @classmethod
    def accept_year_field(cls, data):
        # Upstream academic years carry ``year`` instead of ``name``
        if isinstance(data, dict) and not data.get("name") and data.get("year"):
            data = {**data, "name": str(data["year"])}
        return data


class ReportCardRemarks(EngineModel):
    """Personal assessment grades and comments entered by teachers"""

    discipline: str = ""
    cleanliness: str = ""
    class_work_presentation: str = ""
    adherence_to_school: str = ""
    co_curricular_activities: str = ""
    consideration_to_others: str = ""
    speaking_english: str = ""
    class_teacher_comment: str = ""
    headteacher_comment: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def none_to_blank(cls, v):
        return "" if v is None else v


class NextTermSchedule(EngineModel):
    next_term_start_date: Optional[date] = None
    next_term_end_date: Optional[date] = None


class Student(EngineModel):
    """Student with context and the canonical list of mark records"""

    id: Identifier = Field(..., description="Student identifier")
    name: str = Field(..., description="Student full name")
    photo: Optional[str] = Field(None, description="Photo URL or path")
    date_of_birth: Optional[date] = Field(None, description="Date of birth, used for age")
    school_class: Optional[SchoolClass] = Field(None, alias="class", description="Current class")
    term: Optional[Term] = Field(None, description="Current term context")
    academic_year: Optional[AcademicYear] = Field(None, description="Current academic year context")
    marks: List[MarkRecord] = Field(default_factory=list, description="Mark records for this student")
    report_card: Optional[ReportCardRemarks] = Field(None, description="Personal assessment and comments")

    @field_validator("date_of_birth", mode="before")
    @classmethod
    def parse_birth_date(cls, v):
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return None
            # ISO timestamps from the API carry a time part
            return v[:10]
        return v

    @property
    def subjects(self) -> List[Subject]:
        if self.school_class is None or self.school_class.subjects is None:
            return []
        return self.school_class.subjects


class SubjectComputedRow(BaseModel):
    """Derived per-subject view; blank scores are None, blank text is empty"""

    subject_id: str
    name: str
    category: SubjectCategory = SubjectCategory.GENERAL

    homework: Optional[float] = None
    bot: Optional[float] = None
    bot_grade: str = ""
    midterm: Optional[float] = None
    midterm_grade: str = ""
    eot: Optional[float] = None
    eot_grade: str = ""
    total: Optional[float] = None
    grade: str = ""

    teacher_initials: str = ""
    remarks: str = ""

    @property
    def is_general(self) -> bool:
        return self.category == SubjectCategory.GENERAL


class DivisionResult(BaseModel):
    """Division classification over general subjects"""

    average_aggregate_points: float = Field(..., ge=1.0, le=9.0)
    division: Division
    general_subjects: int = Field(0, ge=0, description="General subjects considered")
    total_aggregate_points: int = Field(0, ge=0, description="Sum of E.O.T aggregate points")


class StageTotals(BaseModel):
    """Totals row of the report card (general subjects only)"""

    homework: float = 0.0
    bot: float = 0.0
    midterm: float = 0.0
    eot: float = 0.0
    out_of: int = 0
    bot_aggregates: int = 0
    midterm_aggregates: int = 0
    eot_aggregates: int = 0


class DivisionStatistics(BaseModel):
    """Division distribution for a class"""

    total_students: int = 0
    divisions: Dict[Division, int] = Field(default_factory=dict)
    pass_rate: float = 0.0


class StudentReport(BaseModel):
    """Everything the renderer needs for one report card"""

    student: Student
    rows: List[SubjectComputedRow]
    totals: StageTotals
    division: DivisionResult
    grading_bands: List[GradeBand]
    report_card: ReportCardRemarks = Field(default_factory=ReportCardRemarks)
    next_term: Optional[NextTermSchedule] = None

    @property
    def has_marks(self) -> bool:
        return any(
            row.total is not None or row.grade for row in self.rows
        )

    @property
    def general_rows(self) -> List[SubjectComputedRow]:
        return [row for row in self.rows if row.is_general]


# Export all models
__all__ = [
    'ReportDataError',
    'SubjectCategory',
    'Division',
    'GradeBand',
    'GradeLookup',
    'MarkRecord',
    'Subject',
    'SchoolClass',
    'Term',
    'AcademicYear',
    'ReportCardRemarks',
    'NextTermSchedule',
    'Student',
    'SubjectComputedRow',
    'DivisionResult',
    'StageTotals',
    'DivisionStatistics',
    'StudentReport',
]
