"""
CSV normalizer: raw spreadsheet export text -> RecordStore.

The export is a comma-separated table with Korean headers, one row per
(date, hour, center). Numeric cells can carry thousands separators inside
double quotes ("1,234"), so lines are split with a small quote-aware scanner
rather than a plain split. The scanner treats every double quote as a toggle
and does not understand escaped "" pairs.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from src.config import (
    DEFAULT_EFFICIENCY,
    DEFAULT_QUALITY_SCORE,
    CAPACITY_FACTOR,
)
from src.data.hours import hour_of
from src.data.records import CenterSnapshot, TimeSnapshot, RecordStore, EMPTY_STORE
from src.data.schema import build_column_map, validate_schema

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_NUMBER_NOISE = re.compile(r"[\"',]")


@dataclass
class ParseReport:
    """Summary of one normalisation run."""
    lines_read: int = 0
    rows_parsed: int = 0
    rows_skipped: int = 0
    column_map: Dict[str, int] = field(default_factory=dict)
    schema: Dict = field(default_factory=dict)
    snapshot_count: int = 0
    center_names: List[str] = field(default_factory=list)
    error: Optional[str] = None


def split_csv_line(line: str) -> List[str]:
    """
    Split one line on commas that sit outside double quotes.

    Quote characters toggle the in-quotes state and are dropped from values.
    """
    values = []
    current = []
    in_quotes = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            values.append("".join(current))
            current = []
        else:
            current.append(char)
    values.append("".join(current))
    return values


def parse_int_value(value: Optional[str]) -> int:
    """Leading integer after removing quotes and thousands separators; 0 otherwise."""
    if value is None or value.strip() == "":
        return 0
    match = _LEADING_INT.match(_NUMBER_NOISE.sub("", value))
    return int(match.group(1)) if match else 0


def parse_float_value(value: Optional[str]) -> float:
    """Leading decimal number; 0.0 when blank or unparseable."""
    if value is None:
        return 0.0
    match = _LEADING_FLOAT.match(value)
    return float(match.group(1)) if match else 0.0


def _cell(values: List[str], column_map: Dict[str, int], key: str) -> Optional[str]:
    index = column_map.get(key)
    if index is None or index >= len(values):
        return None
    return values[index]


def _build_center(name: str, values: List[str], column_map: Dict[str, int]) -> CenterSnapshot:
    def number(key: str) -> int:
        return parse_int_value(_cell(values, column_map, key))

    total = number("total")
    return CenterSnapshot(
        name=name,
        total=total,
        closed=number("closed"),
        remaining=number("remaining"),
        completion=parse_float_value(_cell(values, column_map, "completion")),
        # Zero counts as "not supplied" for the scored measures
        efficiency=number("efficiency") or DEFAULT_EFFICIENCY,
        capacity=number("capacity") or total * CAPACITY_FACTOR,
        backlog=number("backlog"),
        quality_score=number("quality_score") or DEFAULT_QUALITY_SCORE,
        receipt=number("receipt"),
        assigned=number("assigned"),
        output=number("output"),
    )


def _parse(csv_text: str, report: ParseReport) -> RecordStore:
    lines = (csv_text or "").strip().split("\n")
    report.lines_read = len(lines)
    if len(lines) < 2:
        logger.info("CSV export has no data rows")
        return EMPTY_STORE

    headers = lines[0].split(",")
    column_map = build_column_map(headers)
    report.column_map = column_map

    report.schema = validate_schema(column_map.keys(), "throughput", strict=False)
    if not report.schema["is_valid"]:
        logger.warning("CSV export missing required columns: %s", report.schema["missing_required"])
        return EMPTY_STORE
    if report.schema["missing_optional"]:
        logger.info("CSV export missing optional columns: %s", report.schema["missing_optional"])

    groups: Dict[Tuple[str, str], List[CenterSnapshot]] = {}
    for line_no, raw_line in enumerate(lines[1:], start=1):
        line = raw_line.strip()
        if not line:
            continue

        values = split_csv_line(line)
        date = (_cell(values, column_map, "date") or "").strip()
        time = (_cell(values, column_map, "time") or "").strip()
        center_name = (_cell(values, column_map, "centerName") or "").strip()

        if not date or not time or not center_name:
            logger.debug("Row %d skipped, missing key: date=%r time=%r center=%r",
                         line_no, date, time, center_name)
            report.rows_skipped += 1
            continue

        try:
            hour_of(time)
        except ValueError:
            logger.debug("Row %d skipped, unreadable hour %r", line_no, time)
            report.rows_skipped += 1
            continue

        groups.setdefault((date, time), []).append(_build_center(center_name, values, column_map))
        report.rows_parsed += 1

    return RecordStore(tuple(
        TimeSnapshot(date=date, time=time, centers=tuple(centers))
        for (date, time), centers in groups.items()
    ))


def parse_csv_with_report(csv_text: str) -> Tuple[RecordStore, ParseReport]:
    """
    Normalise CSV text and describe what happened.

    Never raises: a failure anywhere yields an empty store and the error text
    in the report.
    """
    report = ParseReport()
    try:
        store = _parse(csv_text, report)
    except Exception as exc:
        logger.exception("CSV parse failed; falling back to an empty record store")
        report.error = str(exc)
        store = EMPTY_STORE

    report.snapshot_count = len(store)
    report.center_names = store.center_names()
    logger.debug("Parsed %d rows into %d snapshots (%d skipped)",
                 report.rows_parsed, report.snapshot_count, report.rows_skipped)
    return store, report


def parse_csv_text(csv_text: str) -> RecordStore:
    """Raw CSV text in, RecordStore out. Malformed input gives an empty store."""
    store, _ = parse_csv_with_report(csv_text)
    return store
