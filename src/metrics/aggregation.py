"""
Filter & aggregation pack.

Turns the record store plus the dashboard's selector values into the
per-period center table and the hourly series for one business date.
Every call recomputes from the full store.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pandas as pd

from src.config import ALL, config
from src.data.records import (
    RecordStore,
    TimeSnapshot,
    filter_business_hours,
    latest_snapshot,
)
from src.metrics.performance import (
    EnhancedCenterMetric,
    enhance_center,
    generate_insights,
    performance_metrics_frame,
    closing_speed_per_hour,
    target_achievement,
    remaining_workload,
)

logger = logging.getLogger(__name__)

_METRIC_COLUMNS = list(EnhancedCenterMetric.__dataclass_fields__)
_SERIES_COLUMNS = ["time", "total_closed", "total_remaining", "avg_completion", "target", "is_prediction"]


@dataclass
class PeriodFilter:
    """Selector values; "전체" means no filter."""
    date: str = ALL
    time: str = ALL
    center: str = ALL
    target: float = field(default_factory=lambda: config.performance_target)


@dataclass
class PeriodView:
    """Everything the dashboard renders for one filter selection."""
    snapshot: Optional[TimeSnapshot]
    metrics: List[EnhancedCenterMetric]
    metrics_df: pd.DataFrame
    series_date: Optional[str]
    hourly_series: pd.DataFrame
    distribution: List[Dict]
    insights: List[Dict]
    scorecard: pd.DataFrame


def select_period_snapshot(store: RecordStore, date: str = ALL, time: str = ALL) -> Optional[TimeSnapshot]:
    """
    Pick the snapshot for a date/hour selection.

    Within business hours, keep exact date and hour matches and return the
    most recent of them. When nothing matches, fall back to the most recent
    business-hour snapshot. Returns None only when no business-hour data
    exists at all.
    """
    business = filter_business_hours(store)
    if business.is_empty:
        return None

    candidates = [
        s for s in business
        if (date == ALL or s.date == date) and (time == ALL or s.time == time)
    ]
    if not candidates:
        logger.debug("No snapshot for date=%s time=%s, using latest available", date, time)
        candidates = list(business)

    return latest_snapshot(candidates)


def compute_center_metrics(store: RecordStore, params: Optional[PeriodFilter] = None) -> List[EnhancedCenterMetric]:
    """Enhanced metrics for every (or the selected) center of the chosen snapshot."""
    params = params or PeriodFilter()
    snapshot = select_period_snapshot(store, params.date, params.time)
    if snapshot is None:
        return []

    centers = snapshot.centers
    if params.center != ALL:
        centers = [c for c in centers if c.name == params.center]

    return [enhance_center(c, snapshot.time, params.target) for c in centers]


def center_metrics_frame(metrics: List[EnhancedCenterMetric]) -> pd.DataFrame:
    """Flat per-center table of EnhancedCenterMetric fields."""
    if len(metrics) == 0:
        return pd.DataFrame(columns=_METRIC_COLUMNS)
    return pd.DataFrame([m.to_dict() for m in metrics], columns=_METRIC_COLUMNS)


def resolve_series_date(store: RecordStore, date: str = ALL) -> Optional[str]:
    """Selected date, or the newest business-hour date when "전체"."""
    if date != ALL:
        return date
    return filter_business_hours(store).latest_date()


def compute_hourly_series(store: RecordStore, date: str = ALL, target: Optional[float] = None) -> pd.DataFrame:
    """
    Chronological per-hour totals for one business date.

    Columns: time, total_closed, total_remaining, avg_completion, target,
    is_prediction, then "<center>" (closed) and "<center>_completion" for
    each center observed that day.
    """
    target = config.performance_target if target is None else target
    business = filter_business_hours(store)
    series_date = resolve_series_date(store, date)
    if series_date is None:
        return pd.DataFrame(columns=_SERIES_COLUMNS)

    rows = []
    for snap in business.snapshots_for_date(series_date):
        centers = snap.centers
        row = {
            "time": snap.time,
            "total_closed": sum(c.closed for c in centers),
            "total_remaining": sum(c.remaining for c in centers),
            "avg_completion": sum(c.completion for c in centers) / len(centers) if centers else 0.0,
            "target": target,
            "is_prediction": False,
        }
        for c in centers:
            row[c.name] = c.closed
            row[f"{c.name}_completion"] = c.completion
        rows.append(row)

    if not rows:
        return pd.DataFrame(columns=_SERIES_COLUMNS)
    return pd.DataFrame(rows)


def compute_distribution(metrics: List[EnhancedCenterMetric]) -> List[Dict]:
    """Closed-volume share per center, coloured by grade."""
    return [
        {
            "name": m.name,
            "value": m.closed,
            "completion": m.completion,
            "color": m.performance_color,
        }
        for m in metrics
    ]


def center_scorecard_frame(metrics: List[EnhancedCenterMetric], time_label: str = ALL,
                           target: Optional[float] = None) -> pd.DataFrame:
    """
    Performance-index table with the workload columns for the selected hour.

    Adds closing_speed_per_hour (per business hour since opening),
    target_achievement (% of target) and remaining_per_hour (volume per hour
    left until the 01:00 close). "전체" reads as end of day.
    """
    target = config.performance_target if target is None else target
    df = performance_metrics_frame(metrics)
    if len(df) == 0:
        return df

    by_name = {m.name: m for m in metrics}
    df["closing_speed_per_hour"] = [closing_speed_per_hour(by_name[n], time_label) for n in df["name"]]
    df["target_achievement"] = [target_achievement(by_name[n].completion, target) for n in df["name"]]
    df["remaining_per_hour"] = [remaining_workload(by_name[n], time_label) for n in df["name"]]
    return df


def build_period_view(store: RecordStore, params: Optional[PeriodFilter] = None) -> PeriodView:
    """Recompute the whole period view for one selector state."""
    params = params or PeriodFilter()
    snapshot = select_period_snapshot(store, params.date, params.time)
    metrics = compute_center_metrics(store, params)
    # Workload columns follow the hour actually shown, including after fallback
    scorecard_time = ALL if params.time == ALL or snapshot is None else snapshot.time
    return PeriodView(
        snapshot=snapshot,
        metrics=metrics,
        metrics_df=center_metrics_frame(metrics),
        series_date=resolve_series_date(store, params.date),
        hourly_series=compute_hourly_series(store, params.date, params.target),
        distribution=compute_distribution(metrics),
        insights=generate_insights(metrics, params.target),
        scorecard=center_scorecard_frame(metrics, scorecard_time, params.target),
    )
