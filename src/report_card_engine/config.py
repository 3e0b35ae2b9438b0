"""Configuration settings for the report card engine."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Final, List

# --- Paths ---

PACKAGE_DIR: Final[Path] = Path(__file__).parent
TEMPLATES_DIR: Final[Path] = PACKAGE_DIR / "templates"
DATA_DIR: Final[Path] = Path(os.environ.get("REPORT_CARD_DATA_DIR", "data"))
OUTPUT_DIR: Final[Path] = Path(os.environ.get("REPORT_CARD_OUTPUT_DIR", "output"))

# --- Logging ---

LOG_LEVEL: Final[int] = getattr(
    logging, os.environ.get("REPORT_CARD_LOG_LEVEL", "INFO").upper(), logging.INFO
)
LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# --- School details printed in the report card header ---

SCHOOL_INFO: Final[Dict[str, str]] = {
    "school_name": os.environ.get("SCHOOL_NAME", "HOLY FAMILY JUNIOR SCHOOL-NAKASAJJA"),
    "school_motto": os.environ.get("SCHOOL_MOTTO", "TIMOR DEI PRINCIPUM SAPIENTIAE"),
    "school_address": os.environ.get("SCHOOL_ADDRESS", "P.O BOX 25258, KAMPALA 'U'"),
    "school_phone": os.environ.get("SCHOOL_PHONE", "0774-305717 / 0704-305747"),
    "report_title": os.environ.get("REPORT_TITLE", "PROGRESSIVE REPORT"),
}

# --- Grading ---

# Used by the data loader when no "Grading System.csv" export is supplied.
# Bands cover whole-number marks only: a fractional mark between two bands
# (e.g. 89.5) matches no band and takes the lowest band's grade. Schools that
# enter fractional marks must supply bands that meet, e.g. maxMark 89.99.
DEFAULT_GRADING_BANDS: Final[List[Dict[str, Any]]] = [
    {"minMark": 90, "maxMark": 100, "grade": "D1", "comment": "Excellent"},
    {"minMark": 80, "maxMark": 89, "grade": "D2", "comment": "Very good"},
    {"minMark": 70, "maxMark": 79, "grade": "C3", "comment": "Good"},
    {"minMark": 60, "maxMark": 69, "grade": "C4", "comment": "Fairly good"},
    {"minMark": 55, "maxMark": 59, "grade": "C5", "comment": "Fair"},
    {"minMark": 50, "maxMark": 54, "grade": "C6", "comment": "Fair"},
    {"minMark": 45, "maxMark": 49, "grade": "P7", "comment": "Pass"},
    {"minMark": 40, "maxMark": 44, "grade": "P8", "comment": "Weak pass"},
    {"minMark": 0, "maxMark": 39, "grade": "F9", "comment": "Fail"},
]

# Sentinel grade when no band covers a mark and no bands are configured
FALLBACK_GRADE: Final[str] = "F"

# Maximum mark per subject, printed in the OUT OF column
SUBJECT_MAX_MARK: Final[int] = 100
