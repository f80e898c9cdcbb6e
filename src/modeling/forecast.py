"""
Short-horizon completion forecast based on recent hourly trend.

This is a smoothing heuristic, not a fitted model: the last three hourly
changes in completion are blended with fixed weights and the blended delta
decays by 10% per forecast hour. Centers without a full four-point history
fall back to a flat +5 points per hour.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, asdict
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from src.config import (
    config,
    FORECAST_HISTORY_POINTS,
    TREND_WEIGHTS,
    TREND_DAMPING,
    LINEAR_STEP_PCT,
    LINEAR_BAND_PCT,
    HORIZON_RANGE,
    CONFIDENCE_RANGE,
)
from src.data.hours import hour_of, to_ordinal
from src.data.records import CenterSnapshot, RecordStore, TimeSnapshot
from src.metrics.performance import round_half_up

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PredictedCenterSnapshot:
    """A center's measurements projected forecast_hour hours ahead."""
    name: str
    total: int
    closed: int
    remaining: int
    completion: float
    efficiency: float
    capacity: float
    backlog: int
    quality_score: float
    receipt: int
    assigned: int
    output: int
    forecast_hour: int
    min_completion: float
    max_completion: float
    mode: str
    is_prediction: bool = True

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ForecastSnapshot:
    """
    All centers' predictions for one forecast step.

    `time` is the wall-clock label and can repeat across midnight; `ordinal`
    keeps counting past 23 so steps always order correctly.
    """
    date: str
    time: str
    ordinal: int
    forecast_hour: int
    centers: Tuple[PredictedCenterSnapshot, ...]
    is_prediction: bool = True

    def center(self, name: str) -> Optional[PredictedCenterSnapshot]:
        for center in self.centers:
            if center.name == name:
                return center
        return None


def _clamp(value: int, bounds: Tuple[int, int], label: str) -> int:
    low, high = bounds
    clamped = min(max(int(value), low), high)
    if clamped != value:
        logger.info("Forecast %s %s out of range, using %s", label, value, clamped)
    return clamped


def forecast_history(store: RecordStore) -> List[TimeSnapshot]:
    """Snapshots of the newest calendar date in business-day order."""
    latest = store.latest_date()
    if latest is None:
        return []
    return store.snapshots_for_date(latest)


def weighted_delta(completions: Sequence[float]) -> float:
    """Blend the successive changes of a 4-point history, newest weighted most."""
    deltas = np.diff(np.asarray(completions, dtype=float))
    return float(np.dot(deltas, TREND_WEIGHTS))


def adjusted_delta(weighted: float, forecast_hour: int) -> float:
    """Per-hour delta after damping by TREND_DAMPING ** forecast_hour."""
    return weighted * TREND_DAMPING ** forecast_hour


def uncertainty_band(forecast_hour: int, confidence: float) -> float:
    """Half-width of the band: widens with the hour, narrows with confidence."""
    return forecast_hour * (1 - confidence / 100) * 10


def _predicted(center: CenterSnapshot, forecast_hour: int, completion: float,
               closed: float, remaining: float, band: float, mode: str) -> PredictedCenterSnapshot:
    values = center.to_dict()
    values.update(
        completion=completion,
        closed=int(round_half_up(closed)),
        remaining=int(round_half_up(remaining)),
        forecast_hour=forecast_hour,
        min_completion=max(0.0, completion - band),
        max_completion=min(100.0, completion + band),
        mode=mode,
    )
    return PredictedCenterSnapshot(**values)


def project_linear(center: CenterSnapshot, forecast_hour: int) -> PredictedCenterSnapshot:
    """Flat +5 points per hour; used when the center lacks trend history."""
    completion = min(center.completion + forecast_hour * LINEAR_STEP_PCT, 100.0)
    closed = min(center.closed + forecast_hour * center.total * LINEAR_STEP_PCT / 100, center.total)
    remaining = center.total - closed
    return _predicted(center, forecast_hour, completion, closed, remaining, LINEAR_BAND_PCT, "linear")


def project_trend(center: CenterSnapshot, completions: Sequence[float],
                  forecast_hour: int, confidence: float) -> PredictedCenterSnapshot:
    """
    Damped weighted-trend projection.

    Closed and remaining follow from the projected completion against the
    center's fixed total, not from a separately projected closing rate.
    """
    delta = adjusted_delta(weighted_delta(completions), forecast_hour)
    completion = min(max(center.completion + delta * forecast_hour, 0.0), 100.0)
    closed = min(center.total * completion / 100, center.total)
    remaining = center.total - closed
    band = uncertainty_band(forecast_hour, confidence)
    return _predicted(center, forecast_hour, completion, closed, remaining, band, "trend")


def generate_forecast(store: RecordStore,
                      horizon: Optional[int] = None,
                      confidence: Optional[int] = None) -> List[ForecastSnapshot]:
    """
    Project every center of the latest snapshot 1..horizon hours ahead.

    Args:
        store: Record store (full, not business-hour filtered)
        horizon: Hours ahead, clamped to 1-6
        confidence: Band confidence percent, clamped to 70-95

    Returns:
        One ForecastSnapshot per hour ahead; empty when the newest date has
        fewer than four snapshots.
    """
    horizon = _clamp(config.forecast_horizon if horizon is None else horizon, HORIZON_RANGE, "horizon")
    confidence = _clamp(config.forecast_confidence if confidence is None else confidence,
                        CONFIDENCE_RANGE, "confidence")

    history = forecast_history(store)
    if len(history) < FORECAST_HISTORY_POINTS:
        logger.info("Forecast skipped: %d snapshots on latest date, need %d",
                    len(history), FORECAST_HISTORY_POINTS)
        return []

    window = history[-FORECAST_HISTORY_POINTS:]
    last = history[-1]
    last_hour = hour_of(last.time)
    last_ordinal = to_ordinal(last.time)

    predictions = []
    for h in range(1, horizon + 1):
        centers = []
        for center in last.centers:
            points = [snap.center(center.name) for snap in window]
            if any(p is None for p in points):
                centers.append(project_linear(center, h))
            else:
                centers.append(project_trend(center, [p.completion for p in points], h, confidence))

        predictions.append(ForecastSnapshot(
            date=last.date,
            time=f"{(last_hour + h) % 24:02d}:00",
            ordinal=last_ordinal + h,
            forecast_hour=h,
            centers=tuple(centers),
        ))

    return predictions


def forecast_frame(forecast: Sequence[ForecastSnapshot]) -> pd.DataFrame:
    """Long table: one row per (forecast step, center)."""
    rows = []
    for step in forecast:
        for center in step.centers:
            row = {"date": step.date, "time": step.time, "ordinal": step.ordinal}
            row.update(center.to_dict())
            rows.append(row)
    if not rows:
        return pd.DataFrame(columns=["date", "time", "ordinal"] + list(PredictedCenterSnapshot.__dataclass_fields__))
    return pd.DataFrame(rows)
