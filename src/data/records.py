"""
Record store: normalised per-(date, hour) snapshots of every center.

The store is rebuilt wholesale on each ingestion and never mutated; every
derived view is recomputed from it.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Iterator, List, Optional, Sequence, Tuple

import pandas as pd

from src.config import ALL, DEFAULT_EFFICIENCY, DEFAULT_QUALITY_SCORE
from src.data.hours import to_ordinal, is_business_hour, sort_hour_labels
from src.data.schema import ensure_column_types


@dataclass(frozen=True)
class CenterSnapshot:
    """One center's measurements at one (date, hour)."""
    name: str
    total: int = 0
    closed: int = 0
    remaining: int = 0
    completion: float = 0.0
    efficiency: float = DEFAULT_EFFICIENCY
    capacity: float = 0.0
    backlog: int = 0
    quality_score: float = DEFAULT_QUALITY_SCORE
    receipt: int = 0
    assigned: int = 0
    output: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class TimeSnapshot:
    """All centers observed at one (date, hour)."""
    date: str
    time: str
    centers: Tuple[CenterSnapshot, ...] = ()

    @property
    def ordinal(self) -> int:
        return to_ordinal(self.time)

    def center(self, name: str) -> Optional[CenterSnapshot]:
        for center in self.centers:
            if center.name == name:
                return center
        return None

    def center_names(self) -> List[str]:
        return [c.name for c in self.centers]


def date_sort_key(value: str) -> pd.Timestamp:
    """Calendar key for a date string; unparseable dates sort oldest."""
    ts = pd.to_datetime(value, errors="coerce")
    if pd.isna(ts):
        return pd.Timestamp.min
    return ts


def chronological_key(snapshot: TimeSnapshot) -> Tuple[pd.Timestamp, int]:
    return date_sort_key(snapshot.date), snapshot.ordinal


def latest_snapshot(snapshots: Sequence[TimeSnapshot]) -> Optional[TimeSnapshot]:
    """
    Most recent snapshot by calendar date, then ordinal hour.

    Ties keep the later store position.
    """
    if len(snapshots) == 0:
        return None
    best_index = max(
        range(len(snapshots)),
        key=lambda i: (*chronological_key(snapshots[i]), i),
    )
    return snapshots[best_index]


@dataclass(frozen=True)
class RecordStore:
    """Immutable, ordered collection of TimeSnapshots."""
    snapshots: Tuple[TimeSnapshot, ...] = ()

    def __post_init__(self):
        seen = set()
        for snap in self.snapshots:
            key = (snap.date, snap.time)
            if key in seen:
                raise ValueError(f"Duplicate snapshot for {key}")
            seen.add(key)

    def __len__(self) -> int:
        return len(self.snapshots)

    def __iter__(self) -> Iterator[TimeSnapshot]:
        return iter(self.snapshots)

    @property
    def is_empty(self) -> bool:
        return len(self.snapshots) == 0

    def dates(self) -> List[str]:
        """Distinct dates in store order."""
        return list(dict.fromkeys(s.date for s in self.snapshots))

    def times(self) -> List[str]:
        """Distinct hour labels in store order."""
        return list(dict.fromkeys(s.time for s in self.snapshots))

    def center_names(self) -> List[str]:
        names = {}
        for snap in self.snapshots:
            for center in snap.centers:
                names.setdefault(center.name, None)
        return list(names)

    def latest_date(self) -> Optional[str]:
        dates = self.dates()
        if not dates:
            return None
        return max(dates, key=date_sort_key)

    def snapshots_for_date(self, date: str) -> List[TimeSnapshot]:
        """Snapshots of one date in business-day order."""
        return sorted(
            (s for s in self.snapshots if s.date == date),
            key=lambda s: s.ordinal,
        )

    def to_frame(self) -> pd.DataFrame:
        """Long table: one row per (date, time, center)."""
        rows = []
        for snap in self.snapshots:
            for center in snap.centers:
                row = {"date": snap.date, "time": snap.time, "ordinal": snap.ordinal}
                row.update(center.to_dict())
                rows.append(row)
        if not rows:
            return pd.DataFrame(columns=["date", "time", "ordinal"] + list(CenterSnapshot.__dataclass_fields__))
        return ensure_column_types(pd.DataFrame(rows))


EMPTY_STORE = RecordStore()


def filter_business_hours(store: RecordStore) -> RecordStore:
    """Keep snapshots at 09:00-23:00 and 00:00-01:00; drop 02:00-08:00."""
    return RecordStore(tuple(s for s in store.snapshots if is_business_hour(s.time)))


def available_dates(store: RecordStore) -> List[str]:
    """Date selector values: sentinel first, then newest date first."""
    return [ALL] + sorted(store.dates(), key=date_sort_key, reverse=True)


def available_times(store: RecordStore) -> List[str]:
    """Hour selector values: sentinel first, then latest hour first."""
    return sort_hour_labels([ALL] + store.times(), descending=True)


def default_selection(store: RecordStore) -> Tuple[str, str]:
    """Newest date and latest hour present in the store."""
    if store.is_empty:
        return ALL, ALL
    return available_dates(store)[1], available_times(store)[1]
