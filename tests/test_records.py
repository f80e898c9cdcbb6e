"""
Tests for the record store and the business-hour window.
"""
import pytest

from src.config import ALL
from src.data.records import (
    CenterSnapshot,
    TimeSnapshot,
    RecordStore,
    filter_business_hours,
    latest_snapshot,
    available_dates,
    available_times,
    default_selection,
)


def _snap(date: str, time: str, *names: str) -> TimeSnapshot:
    centers = names or ("A",)
    return TimeSnapshot(date=date, time=time, centers=tuple(CenterSnapshot(name=n, total=100) for n in centers))


class TestRecordStore:
    """Tests for store invariants and lookups."""

    def test_duplicate_date_hour_rejected(self):
        with pytest.raises(ValueError):
            RecordStore((_snap("2025-01-01", "21:00"), _snap("2025-01-01", "21:00")))

    def test_distinct_values_in_store_order(self):
        store = RecordStore((
            _snap("2025-01-02", "10:00", "B"),
            _snap("2025-01-01", "21:00", "A", "B"),
            _snap("2025-01-01", "10:00", "C"),
        ))

        assert store.dates() == ["2025-01-02", "2025-01-01"]
        assert store.times() == ["10:00", "21:00"]
        assert store.center_names() == ["B", "A", "C"]

    def test_latest_date_uses_calendar_order(self):
        store = RecordStore((
            _snap("2025-01-10", "10:00"),
            _snap("2025-01-09", "10:00"),
        ))
        assert store.latest_date() == "2025-01-10"

    def test_snapshots_for_date_in_business_order(self):
        store = RecordStore((
            _snap("2025-01-01", "01:00"),
            _snap("2025-01-01", "10:00"),
            _snap("2025-01-01", "00:00"),
            _snap("2025-01-01", "23:00"),
        ))
        times = [s.time for s in store.snapshots_for_date("2025-01-01")]
        assert times == ["10:00", "23:00", "00:00", "01:00"]

    def test_center_lookup(self):
        snap = _snap("2025-01-01", "10:00", "A", "B")
        assert snap.center("B").name == "B"
        assert snap.center("Z") is None

    def test_to_frame_long_format(self):
        store = RecordStore((_snap("2025-01-01", "00:00", "A", "B"),))
        df = store.to_frame()

        assert len(df) == 2
        assert list(df["name"]) == ["A", "B"]
        assert (df["ordinal"] == 24).all()

    def test_empty_store_frame(self):
        df = RecordStore().to_frame()
        assert len(df) == 0
        assert "completion" in df.columns


class TestBusinessHourFilter:
    """Tests for the 09:00-01:00 window."""

    def test_drops_early_morning(self):
        store = RecordStore(tuple(_snap("2025-01-01", f"{h:02d}:00") for h in range(24)))
        kept = [s.time for s in filter_business_hours(store)]

        assert "02:00" not in kept
        assert "08:00" not in kept
        assert kept[:3] == ["00:00", "01:00", "09:00"]
        assert len(kept) == 17


class TestSelectors:
    """Tests for selector lists and recency ordering."""

    def _store(self) -> RecordStore:
        return RecordStore((
            _snap("2025-01-01", "21:00"),
            _snap("2025-01-02", "10:00"),
            _snap("2025-01-02", "00:00"),
            _snap("2025-01-01", "23:00"),
        ))

    def test_available_dates_newest_first(self):
        assert available_dates(self._store()) == [ALL, "2025-01-02", "2025-01-01"]

    def test_available_times_latest_first(self):
        assert available_times(self._store()) == [ALL, "00:00", "23:00", "21:00", "10:00"]

    def test_default_selection(self):
        assert default_selection(self._store()) == ("2025-01-02", "00:00")
        assert default_selection(RecordStore()) == (ALL, ALL)

    def test_latest_snapshot_by_date_then_ordinal(self):
        latest = latest_snapshot(self._store().snapshots)
        assert (latest.date, latest.time) == ("2025-01-02", "00:00")

    def test_latest_snapshot_empty(self):
        assert latest_snapshot([]) is None
