#!/usr/bin/env python
"""
Validate a throughput CSV export against schema requirements.

Usage:
    python scripts/validate_inputs.py
    python scripts/validate_inputs.py --csv /path/to/export.csv
"""
import argparse
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config import config, configure_logging
from src.data.loader import read_raw_csv
from src.data.parser import parse_csv_with_report
from src.data.records import available_dates, available_times, default_selection


def validate_file(csv_path: Path) -> dict:
    """Validate a single export file."""
    result = {
        "exists": csv_path.exists(),
        "valid": False,
        "report": None,
        "errors": [],
    }

    if not result["exists"]:
        result["errors"].append(f"File not found: {csv_path}")
        return result

    store, report = parse_csv_with_report(read_raw_csv(csv_path))
    result["report"] = report
    result["store"] = store

    if report.error:
        result["errors"].append(f"Parse failed: {report.error}")
    if report.schema and not report.schema["is_valid"]:
        result["errors"].append(f"Missing required columns: {report.schema['missing_required']}")
    if report.snapshot_count == 0 and not result["errors"]:
        result["errors"].append("No snapshots parsed")

    result["valid"] = len(result["errors"]) == 0
    return result


def main():
    parser = argparse.ArgumentParser(description="Validate a throughput CSV export")
    parser.add_argument(
        "--csv",
        type=str,
        default=None,
        help="Override export path"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log skipped rows"
    )

    args = parser.parse_args()
    configure_logging("DEBUG" if args.verbose else "WARNING")

    csv_path = Path(args.csv) if args.csv else config.source_path

    print("=" * 60)
    print("Throughput Export Validation")
    print("=" * 60)
    print(f"Source: {csv_path}")
    print()

    result = validate_file(csv_path)
    report = result["report"]

    if report is not None:
        print(f"  Lines read: {report.lines_read:,}")
        print(f"  Rows parsed: {report.rows_parsed:,}")
        print(f"  Rows skipped: {report.rows_skipped:,}")
        print(f"  Snapshots: {report.snapshot_count:,}")
        print(f"  Centers: {', '.join(report.center_names) or '-'}")
        print(f"  Column map: {report.column_map}")
        if report.schema.get("missing_optional"):
            print(f"  ⚠ Missing optional: {report.schema['missing_optional']}")
        store = result["store"]
        if not store.is_empty:
            print(f"  Dates (newest first): {available_dates(store)[1:]}")
            print(f"  Hours (latest first): {available_times(store)[1:]}")
            print(f"  Default selection: {default_selection(store)}")
        print()

    for err in result["errors"]:
        print(f"  ✗ Error: {err}")

    print("=" * 60)
    if result["valid"]:
        print("✓ Export is valid")
        sys.exit(0)
    else:
        print("✗ Validation failed - see errors above")
        sys.exit(1)


if __name__ == "__main__":
    main()
