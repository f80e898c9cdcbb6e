"""
Hour label helpers for a business day that runs past midnight.

The tracked operation opens at 09:00/10:00 and closes at 01:00 the next
calendar day, so plain clock order puts 00:00 and 01:00 before the morning.
Ordinals shift the early-morning hours (00-08) to 24-32 so that sorting by
ordinal follows the working day.
"""
from __future__ import annotations

import re
from typing import Iterable, List

from src.config import ALL, BUSINESS_HOURS, OPENING_TIME, CLOSING_TIME


_LEADING_HOUR = re.compile(r"^\s*(\d+)")


def hour_of(label: str) -> int:
    """Parse the leading integer hour from an "HH:00" label."""
    match = _LEADING_HOUR.match(str(label))
    if match is None:
        raise ValueError(f"Not an hour label: {label!r}")
    return int(match.group(1))


def to_ordinal(label: str) -> int:
    """Map an hour label onto the business-day axis ("전체" -> -1)."""
    if label == ALL:
        return -1
    hour = hour_of(label)
    return hour + 24 if 0 <= hour < 9 else hour


def from_ordinal(ordinal: int) -> str:
    """Inverse of to_ordinal; ordinals past 23 fold back onto the clock."""
    if ordinal < 0:
        return ALL
    return f"{ordinal % 24:02d}:00"


def is_business_hour(label: str) -> bool:
    try:
        return hour_of(label) in BUSINESS_HOURS
    except ValueError:
        return False


def sort_hour_labels(labels: Iterable[str], descending: bool = False) -> List[str]:
    """
    Sort hour labels by ordinal, keeping the "전체" sentinel first.
    """
    labels = list(labels)
    has_all = ALL in labels
    hours = sorted((l for l in labels if l != ALL), key=to_ordinal, reverse=descending)
    return ([ALL] if has_all else []) + hours


def elapsed_business_hours(label: str, opening: str = OPENING_TIME) -> int:
    """
    Hours worked since opening, counting the current hour.

    "전체" is read as the end of the business day (01:00).
    """
    current = CLOSING_TIME if label == ALL else label
    elapsed = to_ordinal(current) - to_ordinal(opening) + 1
    return max(elapsed, 0)


def hours_until_close(label: str, closing: str = CLOSING_TIME) -> int:
    """Hours left until closing; "전체" is read as opening time."""
    current = OPENING_TIME if label == ALL else label
    return max(to_ordinal(closing) - to_ordinal(current), 0)
