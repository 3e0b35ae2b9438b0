#!/usr/bin/env python3
"""
Simple wrapper to generate a report card for a given student ID
Usage: python3 generate_report_card.py <student_id> <output_dir> [data_dir]
"""

import logging
import sys
from pathlib import Path

from report_card_engine.config import LOG_FORMAT, LOG_LEVEL
from report_card_engine.data_processor import ReportCardDataProcessor
from report_card_engine.report_builder import ReportBuilder
from report_card_engine.report_generator import ReportCardGenerator


def main() -> int:
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)

    if len(sys.argv) < 3:
        print("ERROR: Missing arguments")
        print("Usage: python3 generate_report_card.py <student_id> <output_dir> [data_dir]")
        return 1

    student_id = sys.argv[1]
    output_dir = Path(sys.argv[2]).expanduser()
    data_dir = Path(sys.argv[3]).expanduser() if len(sys.argv) > 3 else None

    print("Starting report card generation...")
    print(f"  Student ID: {student_id}")
    print(f"  Output Dir: {output_dir}")

    print("Loading all data...")
    processor = ReportCardDataProcessor(data_dir)
    if not processor.load_all_data():
        print(processor.generate_validation_report())
        return 1

    student = processor.get_student(student_id)

    builder = ReportBuilder(processor.grading_bands)
    report = builder.build(student, next_term=processor.next_term)

    generator = ReportCardGenerator(output_dir=output_dir)
    output_path = generator.generate_report_card(report)

    print(f"\n✅ SUCCESS!")
    print(f"  Division: {report.division.division.value} "
          f"(average {report.division.average_aggregate_points:.2f})")
    print(f"Report card saved to: {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
