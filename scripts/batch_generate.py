#!/usr/bin/env python3
"""
BATCH REPORT CARD GENERATOR
Generates class bundles plus individual report cards with error checking.

Output structure:
<output_dir>/
├── P.7_East_report_cards.html   (whole class, one card per page)
└── Individual/
    └── 1001_Jane_Doe_report_card.html

Usage: python3 scripts/batch_generate.py <class_name|--all> <output_dir> [data_dir]
"""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from report_card_engine.config import LOG_FORMAT, LOG_LEVEL
from report_card_engine.data_models import ReportDataError, StudentReport
from report_card_engine.data_processor import ReportCardDataProcessor
from report_card_engine.report_builder import ReportBuilder
from report_card_engine.report_generator import ReportCardGenerator


@dataclass
class GenerationResult:
    student_id: str
    student_name: str
    class_name: str
    success: bool
    division: Optional[str]
    error: Optional[str]


def generate_class(
    class_name: str,
    processor: ReportCardDataProcessor,
    builder: ReportBuilder,
    generator: ReportCardGenerator,
    progress: bool = True,
) -> List[GenerationResult]:
    """Generate individual cards and the class bundle for one class."""
    results = []
    reports: List[StudentReport] = []

    students = processor.get_class_students(class_name)
    iterator = tqdm(students, desc=class_name, unit="card") if progress else students

    for student in iterator:
        try:
            report = builder.build(student, next_term=processor.next_term)
            filename = f"Individual/{student.id}_{student.name.replace(' ', '_')}_report_card.html"
            generator.generate_report_card(report, output_filename=filename)
        except (ReportDataError, OSError) as e:
            results.append(GenerationResult(
                student_id=student.id,
                student_name=student.name,
                class_name=class_name,
                success=False,
                division=None,
                error=str(e),
            ))
            if progress:
                tqdm.write(f"  ❌ Failed {student.id}: {str(e)[:50]}")
            continue

        reports.append(report)
        results.append(GenerationResult(
            student_id=student.id,
            student_name=student.name,
            class_name=class_name,
            success=True,
            division=report.division.division.value,
            error=None,
        ))

    if reports:
        generator.generate_class_report_cards(reports, class_name=class_name)
        stats = builder.class_statistics(reports)
        print(f"\n📊 {class_name}: pass rate {stats.pass_rate:.2f}%")
        for division, count in stats.divisions.items():
            print(f"   {division.value}: {count}")

    return results


def print_summary(results: List[GenerationResult], output_base: Path):
    """Print generation summary."""
    success = [r for r in results if r.success]
    failed = [r for r in results if not r.success]

    print("\n" + "=" * 70)
    print("BATCH GENERATION SUMMARY")
    print("=" * 70)

    print(f"\n✅ Successful: {len(success)}")
    print(f"❌ Failed: {len(failed)}")

    if failed:
        print("\n❌ FAILED REPORT CARDS:")
        print("-" * 50)
        for r in failed:
            print(f"  [{r.student_id}] {r.student_name} ({r.class_name})")
            print(f"      Error: {r.error[:80]}..." if len(r.error) > 80 else f"      Error: {r.error}")

    print(f"\n📁 Output: {output_base}")
    print("=" * 70)


def main():
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
    # Per-student progress comes from tqdm
    logging.getLogger("report_card_engine.report_builder").setLevel(logging.WARNING)

    if len(sys.argv) < 3:
        print("Usage: python3 scripts/batch_generate.py <class_name|--all> <output_dir> [data_dir]")
        return 1

    class_arg = sys.argv[1]
    output_base = Path(sys.argv[2]).expanduser()
    data_dir = Path(sys.argv[3]).expanduser() if len(sys.argv) > 3 else None

    print("=" * 70)
    print("BATCH REPORT CARD GENERATOR")
    print("=" * 70)

    print("📊 Loading all data...")
    processor = ReportCardDataProcessor(data_dir)
    if not processor.load_all_data():
        print(processor.generate_validation_report())
        print("❌ Failed to load data!")
        return 1

    if processor.validation_warnings:
        print(f"   ⚠️  {len(processor.validation_warnings)} warnings")
        for warning in processor.validation_warnings:
            print(f"      {warning}")

    class_names = processor.get_class_names() if class_arg == "--all" else [class_arg]

    builder = ReportBuilder(processor.grading_bands)
    generator = ReportCardGenerator(output_dir=output_base)

    print("\n🚀 Starting batch generation...")
    results = []
    for class_name in class_names:
        results.extend(generate_class(class_name, processor, builder, generator))

    print_summary(results, output_base)

    failed_count = len([r for r in results if not r.success])
    if failed_count > 0:
        print(f"\n⚠️  {failed_count} report cards failed - review errors above")
        return 1

    print("\n✅ All report cards generated successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
