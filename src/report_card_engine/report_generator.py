#!/usr/bin/env python3
"""
REPORT CARD GENERATOR - Render computed report cards into HTML documents
Fixed-layout report cards for one student or a whole class

GENERATION PROCESS:
1. Take StudentReport data from the report builder
2. Prepare the template data (header, subject rows, totals, legend)
3. Render the Jinja2 template
4. Optionally write the document to the output directory

FEATURES:
✅ Subject table: B.O.T / M.O.T / E.O.T scores with stage grades
✅ Totals row over general subjects (subsidiary subjects listed, not totalled)
✅ Grading legend generated from the live grading bands
✅ Personal assessment, teacher comments and next-term dates
✅ Class bundle: summary preface, then one report card per page

Printing and PDF conversion happen downstream; the document is plain HTML.

Priority: HIGH - Final report card output
Dependencies: Jinja2, report_builder
"""

from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union
import logging

from jinja2 import Environment, FileSystemLoader, select_autoescape

from report_card_engine.config import OUTPUT_DIR, SCHOOL_INFO, SUBJECT_MAX_MARK, TEMPLATES_DIR
from report_card_engine.data_models import StudentReport
from report_card_engine.grading_scale import legend_bands

logger = logging.getLogger(__name__)

BLANK_DATE = "_" * 25


def format_mark(value: Optional[Union[int, float]]) -> str:
    """Display form of a score: blank for unset or zero, no trailing .0"""
    if value is None or value == 0:
        return ""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.1f}"


def calculate_age(date_of_birth: Optional[date], on: date) -> Optional[int]:
    """Age in whole years on a given date"""
    if date_of_birth is None:
        return None
    age = on.year - date_of_birth.year
    if (on.month, on.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


def _format_date(value: Optional[date]) -> str:
    return value.strftime("%d/%m/%Y") if value else BLANK_DATE


class ReportCardGenerator:
    """Render report cards from computed StudentReport data"""

    def __init__(
        self,
        templates_dir: Optional[Path] = None,
        output_dir: Optional[Path] = None,
        school_info: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize report card generator

        Args:
            templates_dir: Directory holding the Jinja2 templates
            output_dir: Where generated documents are written
            school_info: School details for the header (defaults from config)
        """
        self.templates_dir = Path(templates_dir) if templates_dir else TEMPLATES_DIR
        self.output_dir = Path(output_dir) if output_dir else OUTPUT_DIR
        self.school_info = dict(school_info) if school_info else dict(SCHOOL_INFO)

        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml"]),
        )
        self.env.filters["mark"] = format_mark

        logger.debug(f"Report card generator initialized (templates: {self.templates_dir})")

    def _prepare_template_data(self, report: StudentReport, issue_date: date) -> Dict[str, Any]:
        """Prepare data dictionary for one report card"""
        student = report.student
        school_class = student.school_class
        next_term = report.next_term

        return {
            "student": student,
            "student_name": student.name,
            "class_name": school_class.name if school_class else "",
            "term_name": (student.term.name or "") if student.term else "",
            "academic_year": (student.academic_year.name or "") if student.academic_year else "",
            "age": calculate_age(student.date_of_birth, issue_date),
            "division": report.division.division.value,
            "average_aggregate_points": report.division.average_aggregate_points,
            "rows": report.rows,
            "totals": report.totals,
            "subject_max_mark": SUBJECT_MAX_MARK,
            "has_marks": report.has_marks,
            "legend": legend_bands(report.grading_bands),
            "assessment": report.report_card,
            "next_term_start": _format_date(next_term.next_term_start_date if next_term else None),
            "next_term_end": _format_date(next_term.next_term_end_date if next_term else None),
            "issue_date": issue_date.strftime("%d/%m/%Y"),
        }

    def render(self, report: StudentReport, issue_date: Optional[date] = None) -> str:
        """
        Render a single student's report card

        Args:
            report: Computed report card data
            issue_date: Date printed on the card (defaults to today)

        Returns:
            HTML document
        """
        issue_date = issue_date or date.today()
        template = self.env.get_template("report_card.html")
        return template.render(
            card=self._prepare_template_data(report, issue_date),
            **self.school_info,
        )

    def render_class(
        self,
        reports: Sequence[StudentReport],
        class_name: Optional[str] = None,
        issue_date: Optional[date] = None,
        generated_at: Optional[datetime] = None,
    ) -> str:
        """
        Render a class bundle: summary preface, then one report card per page

        Args:
            reports: Computed report card data, one per student
            class_name: Class shown in the preface (defaults to the first student's class)
            issue_date: Date printed on the cards (defaults to the generation date)
            generated_at: Generation time shown in the preface; with neither this
                nor issue_date given, the current time is used

        Returns:
            HTML document containing every report card
        """
        if issue_date is None and generated_at is None:
            generated_at = datetime.now()
        if issue_date is None:
            issue_date = generated_at.date()

        if class_name is None:
            first_class = reports[0].student.school_class if reports else None
            class_name = first_class.name if first_class else "Unknown Class"

        cards = [self._prepare_template_data(report, issue_date) for report in reports]

        template = self.env.get_template("class_report_cards.html")
        html = template.render(
            cards=cards,
            class_name=class_name,
            student_count=len(cards),
            generated_on=issue_date.strftime("%d/%m/%Y"),
            generated_at=generated_at.strftime("%H:%M") if generated_at else "",
            **self.school_info,
        )

        logger.info(f"✅ Rendered {len(cards)} report cards for {class_name}")
        return html

    def write_document(self, html: str, output_path: Union[str, Path]) -> Path:
        """Write a rendered document to disk"""
        output_path = Path(output_path)
        if not output_path.is_absolute():
            output_path = self.output_dir / output_path

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(html, encoding="utf-8")

        logger.info(f"✅ Report card written: {output_path}")
        return output_path

    def generate_report_card(
        self,
        report: StudentReport,
        output_filename: Optional[str] = None,
        issue_date: Optional[date] = None,
    ) -> Path:
        """Render and save a single student's report card"""
        if output_filename is None:
            output_filename = f"{report.student.id}_{_safe_name(report.student.name)}_report_card.html"
        return self.write_document(self.render(report, issue_date), output_filename)

    def generate_class_report_cards(
        self,
        reports: List[StudentReport],
        class_name: Optional[str] = None,
        output_filename: Optional[str] = None,
        issue_date: Optional[date] = None,
        generated_at: Optional[datetime] = None,
    ) -> Path:
        """Render and save a class bundle"""
        html = self.render_class(reports, class_name, issue_date, generated_at)
        if output_filename is None:
            label = class_name or (reports[0].student.school_class.name if reports else "class")
            output_filename = f"{_safe_name(label)}_report_cards.html"
        return self.write_document(html, output_filename)


def _safe_name(value: str) -> str:
    return "".join(ch if ch.isalnum() else "_" for ch in value).strip("_") or "report"
