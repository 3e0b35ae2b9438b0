#!/usr/bin/env python3
"""
DATA PROCESSOR - CSV loading, validation, and student record assembly
Load the school exports the report card engine works from

DATA SOURCES:
✅ Students.csv - Student identity, class, term and academic year context
✅ Subjects.csv - Subjects per class with category and assigned teacher
✅ Marks.csv - One row per student, subject, term and academic year
✅ Grading System.csv - Grading bands (optional, defaults from config)
✅ Report Card Remarks.csv - Personal assessment and comments (optional)
✅ Next Term Schedule.csv - Next term dates (optional)

VALIDATION STRATEGY:
1. Schema Validation: Required columns must exist
2. Cross-Reference Validation: Marks must point at known students and subjects
3. Grading Validation: Gaps, overlaps and 0-100 coverage reported as warnings

Every assembled Student carries its marks at the canonical location
(Student.marks), so the engine never searches for them.

Priority: HIGH - Data-access boundary for command-line generation
Dependencies: pandas, pydantic for type-safe validation
"""

from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

import pandas as pd
from pydantic import ValidationError

from report_card_engine.config import DATA_DIR, DEFAULT_GRADING_BANDS
from report_card_engine.data_models import GradeBand, NextTermSchedule, Student, Subject
from report_card_engine.grading_scale import validate_grading_bands
from report_card_engine.mark_reconciler import parse_mark_records

logger = logging.getLogger(__name__)


STUDENT_COLUMNS = {
    "Student ID": "id",
    "Name": "name",
    "Date of Birth": "dateOfBirth",
    "Photo": "photo",
}

MARK_COLUMNS = {
    "Student ID": "studentId",
    "Subject ID": "subjectId",
    "Term ID": "termId",
    "Academic Year ID": "academicYearId",
    "Homework": "homework",
    "BOT": "bot",
    "MOT": "midterm",
    "EOT": "eot",
    "Total": "total",
    "Grade": "grade",
    "Remarks": "remarks",
    "Created By": "createdBy",
    "Teacher": "teacher",
    "Updated At": "updatedAt",
}

REMARK_COLUMNS = {
    "Discipline": "discipline",
    "Cleanliness": "cleanliness",
    "Class Work Presentation": "classWorkPresentation",
    "Adherence To School": "adherenceToSchool",
    "Co-curricular Activities": "coCurricularActivities",
    "Consideration To Others": "considerationToOthers",
    "Speaking English": "speakingEnglish",
    "Class Teacher Comment": "classTeacherComment",
    "Headteacher Comment": "headteacherComment",
}


def _records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """DataFrame rows as dicts with NaN cells turned into None"""
    return df.astype(object).where(pd.notna(df), None).to_dict(orient="records")


def _id(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    value = str(value).strip()
    return value or None


def _rename(record: Dict[str, Any], columns: Dict[str, str]) -> Dict[str, Any]:
    return {field: record.get(column) for column, field in columns.items() if column in record}


class ReportCardDataProcessor:
    """Load and validate the CSV exports used to build report cards"""

    def __init__(self, data_dir: Optional[Path] = None):
        self.data_dir = Path(data_dir) if data_dir else DATA_DIR

        # Data storage
        self.students: pd.DataFrame = None
        self.subjects: pd.DataFrame = None
        self.marks: pd.DataFrame = None
        self.report_remarks: pd.DataFrame = None

        self.grading_bands: List[GradeBand] = []
        self.next_term: Optional[NextTermSchedule] = None

        # Validation results
        self.validation_errors: List[str] = []
        self.validation_warnings: List[str] = []

    def load_all_data(self) -> bool:
        """Load all CSV data sources with validation"""

        logger.info("🔍 LOADING REPORT CARD DATA SOURCES")
        logger.info("=" * 60)

        self.validation_errors = []
        self.validation_warnings = []

        success = True
        success &= self._load_students()
        success &= self._load_subjects()
        success &= self._load_marks()

        # Optional sources - won't fail if missing
        self._load_grading_system()
        self._load_report_remarks()
        self._load_next_term_schedule()

        if success:
            logger.info("✅ All data sources loaded successfully")
            self._perform_cross_validation()
        else:
            logger.error("❌ Data loading failed - check validation errors")

        return success

    def _read_csv(self, filename: str, required_columns: List[str], optional: bool = False) -> Optional[pd.DataFrame]:
        file_path = self.data_dir / filename

        if not file_path.exists():
            message = f"{filename} not found in {self.data_dir}"
            if optional:
                self.validation_warnings.append(message)
                logger.info(f"  ℹ️ {message} - skipping")
            else:
                self.validation_errors.append(message)
                logger.error(f"  ❌ {message}")
            return None

        try:
            logger.info(f"📊 Loading {filename}")
            df = pd.read_csv(file_path, encoding="utf-8-sig")
        except (OSError, pd.errors.ParserError, UnicodeDecodeError) as e:
            self.validation_errors.append(f"Failed to load {filename}: {e}")
            logger.error(f"  ❌ Failed to load {filename}: {e}")
            return None

        df.columns = [str(column).strip() for column in df.columns]
        missing = [column for column in required_columns if column not in df.columns]
        if missing:
            self.validation_errors.append(f"{filename} missing columns: {missing}")
            logger.error(f"  ❌ {filename} missing columns: {missing}")
            return None

        logger.info(f"  ✅ Loaded {len(df)} rows")
        return df

    def _load_students(self) -> bool:
        self.students = self._read_csv("Students.csv", ["Student ID", "Name", "Class"])
        return self.students is not None

    def _load_subjects(self) -> bool:
        self.subjects = self._read_csv("Subjects.csv", ["Class", "Subject ID", "Subject"])
        return self.subjects is not None

    def _load_marks(self) -> bool:
        self.marks = self._read_csv("Marks.csv", ["Student ID", "Subject ID"])
        return self.marks is not None

    def _load_grading_system(self) -> None:
        df = self._read_csv("Grading System.csv", ["minMark", "maxMark", "grade"], optional=True)
        rows = _records(df) if df is not None else DEFAULT_GRADING_BANDS

        if df is None:
            logger.info("  ℹ️ Using default grading system")

        bands = []
        for row in rows:
            try:
                bands.append(GradeBand.model_validate(row))
            except ValidationError as e:
                self.validation_warnings.append(f"Skipping grading band {row}: {e}")
        self.grading_bands = bands

        for problem in validate_grading_bands(bands):
            self.validation_warnings.append(f"Grading system: {problem}")

    def _load_report_remarks(self) -> None:
        self.report_remarks = self._read_csv("Report Card Remarks.csv", ["Student ID"], optional=True)

    def _load_next_term_schedule(self) -> None:
        df = self._read_csv(
            "Next Term Schedule.csv", ["Next Term Start", "Next Term End"], optional=True
        )
        if df is None or df.empty:
            return
        row = _records(df)[0]
        try:
            self.next_term = NextTermSchedule(
                next_term_start_date=row["Next Term Start"],
                next_term_end_date=row["Next Term End"],
            )
        except ValidationError as e:
            self.validation_warnings.append(f"Invalid next term schedule: {e}")

    def _perform_cross_validation(self) -> None:
        """Verify marks reference known students and subjects"""
        student_ids = {_id(value) for value in self.students["Student ID"]}
        subject_ids = {_id(value) for value in self.subjects["Subject ID"]}

        unknown_students = {
            _id(value) for value in self.marks["Student ID"] if _id(value) not in student_ids
        }
        unknown_subjects = {
            _id(value) for value in self.marks["Subject ID"] if _id(value) not in subject_ids
        }

        if unknown_students:
            self.validation_warnings.append(
                f"Marks reference {len(unknown_students)} unknown students: {sorted(unknown_students)[:10]}"
            )
        if unknown_subjects:
            self.validation_warnings.append(
                f"Marks reference {len(unknown_subjects)} unknown subjects: {sorted(unknown_subjects)[:10]}"
            )

    def generate_validation_report(self) -> str:
        """Summary of errors and warnings collected while loading"""
        lines = ["📋 DATA VALIDATION REPORT", "=" * 60]
        if self.students is not None:
            lines.append(f"Students: {len(self.students)}")
        if self.marks is not None:
            lines.append(f"Mark records: {len(self.marks)}")
        lines.append(f"Grading bands: {len(self.grading_bands)}")

        lines.append(f"\n❌ Errors: {len(self.validation_errors)}")
        lines.extend(f"   - {error}" for error in self.validation_errors)
        lines.append(f"⚠️ Warnings: {len(self.validation_warnings)}")
        lines.extend(f"   - {warning}" for warning in self.validation_warnings)
        return "\n".join(lines)

    def get_all_student_ids(self) -> List[str]:
        return [_id(value) for value in self.students["Student ID"]]

    def get_class_names(self) -> List[str]:
        return sorted({str(value).strip() for value in self.students["Class"].dropna()})

    def _warn_once(self, message: str) -> None:
        if message not in self.validation_warnings:
            self.validation_warnings.append(message)
            logger.warning(f"⚠️ {message}")

    def _class_subjects(self, class_name: str) -> List[Subject]:
        """Valid subject rows of a class; invalid rows are reported and skipped"""
        df = self.subjects[self.subjects["Class"].astype(str).str.strip() == class_name]
        subjects = []
        for row in _records(df):
            try:
                subjects.append(Subject.model_validate({
                    "id": _id(row["Subject ID"]),
                    "name": row["Subject"],
                    "category": row.get("Category"),
                    "teacherName": row.get("Teacher"),
                }))
            except ValidationError as e:
                self._warn_once(
                    f"Skipping subject {row['Subject ID']} of class {class_name}: "
                    f"{e.errors()[0]['msg']}"
                )
        return subjects

    def _student_marks(self, student_id: str) -> List[Dict[str, Any]]:
        df = self.marks[self.marks["Student ID"].map(_id) == student_id]
        marks = []
        for row in _records(df):
            record = _rename(row, MARK_COLUMNS)
            for key in ("studentId", "subjectId", "termId", "academicYearId"):
                record[key] = _id(record.get(key))
            marks.append(record)
        return marks

    def _student_remarks(self, student_id: str) -> Optional[Dict[str, Any]]:
        if self.report_remarks is None:
            return None
        df = self.report_remarks[self.report_remarks["Student ID"].map(_id) == student_id]
        if df.empty:
            return None
        return _rename(_records(df)[0], REMARK_COLUMNS)

    def _build_student(self, row: Dict[str, Any]) -> Student:
        student_id = _id(row["Student ID"])
        class_name = str(row["Class"]).strip()

        data = _rename(row, STUDENT_COLUMNS)
        data["id"] = student_id
        data["class"] = {"name": class_name, "subjects": self._class_subjects(class_name)}
        data["marks"] = parse_mark_records(self._student_marks(student_id))
        data["reportCard"] = self._student_remarks(student_id)

        if row.get("Term ID") is not None:
            data["term"] = {"id": _id(row["Term ID"]), "name": row.get("Term")}
        if row.get("Academic Year ID") is not None:
            data["academicYear"] = {"id": _id(row["Academic Year ID"]), "name": _id(row.get("Academic Year"))}

        return Student.model_validate(data)

    def get_student(self, student_id: Any) -> Student:
        """
        Assemble one student with class subjects and canonical marks

        Raises:
            ValueError: student not found in Students.csv
        """
        student_id = _id(student_id)
        df = self.students[self.students["Student ID"].map(_id) == student_id]
        if len(df) == 0:
            raise ValueError(f"Student {student_id} not found")
        return self._build_student(_records(df)[0])

    def get_class_students(self, class_name: str) -> List[Student]:
        """
        Assemble every student of a class, in export order

        Students whose rows fail validation are reported in validation_warnings
        and left out, so the rest of the class still gets report cards.
        """
        class_name = class_name.strip()
        df = self.students[self.students["Class"].astype(str).str.strip() == class_name]

        students = []
        for row in _records(df):
            try:
                students.append(self._build_student(row))
            except ValidationError as e:
                self._warn_once(f"Skipping student {_id(row['Student ID'])}: {e.errors()[0]['msg']}")
        return students
