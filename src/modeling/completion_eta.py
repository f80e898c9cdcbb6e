"""Hours-to-completion estimates and forecast insights built on generate_forecast."""
from __future__ import annotations

import math
from typing import Dict, List, Optional, Sequence

import pandas as pd

from src.config import COMPLETION_TARGET_PCT
from src.modeling.forecast import ForecastSnapshot, PredictedCenterSnapshot

STATUS_UNPREDICTABLE = "예측 불가"
STATUS_PREDICTED = "완료 예상"

_ETA_COLUMNS = [
    "name",
    "estimated_hours",
    "current_completion",
    "predicted_completion",
    "status",
    "color",
]


def center_predictions(forecast: Sequence[ForecastSnapshot], name: str) -> List[PredictedCenterSnapshot]:
    """One center's predictions in forecast-hour order."""
    points = [step.center(name) for step in forecast]
    return [p for p in points if p is not None]


def hours_to_target(
    current_completion: float,
    predictions: Sequence[PredictedCenterSnapshot],
    target: float = COMPLETION_TARGET_PCT,
) -> Optional[int]:
    """
    Hours until a center reaches the target completion.

    Uses the first forecast step at or above target. When the forecast ends
    short of it, extrapolates with the average hourly gain across the
    forecast window, whose length is the last step's forecast_hour.
    Returns 0 if already at target and None when the gain is not positive
    (cannot predict).
    """
    reached = next((p for p in predictions if p.completion >= target), None)
    if reached is not None:
        return reached.forecast_hour

    final = predictions[-1] if len(predictions) > 0 else None
    if final is not None and current_completion < target:
        window = final.forecast_hour
        hourly_rate = (final.completion - current_completion) / window if window > 0 else 0
        if hourly_rate > 0:
            return math.ceil(window + (target - final.completion) / hourly_rate)
        return None

    if current_completion >= target:
        return 0
    return None


def _eta_color(hours: Optional[int]) -> str:
    if hours is None:
        return "#D83B01"
    if hours <= 3:
        return "#107C10"
    if hours <= 6:
        return "#0078D4"
    return "#FFB900"


def completion_eta_frame(
    current: Sequence,
    forecast: Sequence[ForecastSnapshot],
    target: float = COMPLETION_TARGET_PCT,
) -> pd.DataFrame:
    """
    Per-center expected hours to reach target, soonest first.

    Args:
        current: Objects with `name` and `completion` (period metrics)
        forecast: Output of generate_forecast
        target: Completion percentage treated as done

    Returns:
        DataFrame with name, estimated_hours (None when unpredictable),
        current_completion, predicted_completion, status, color. Centers
        that cannot be predicted sort last.
    """
    if len(forecast) == 0 or len(current) == 0:
        return pd.DataFrame(columns=_ETA_COLUMNS)

    rows = []
    for center in current:
        predictions = center_predictions(forecast, center.name)
        hours = hours_to_target(center.completion, predictions, target)
        rows.append({
            "name": center.name,
            "estimated_hours": hours,
            "current_completion": center.completion,
            "predicted_completion": predictions[-1].completion if predictions else center.completion,
            "status": STATUS_UNPREDICTABLE if hours is None else STATUS_PREDICTED,
            "color": _eta_color(hours),
        })

    rows.sort(key=lambda r: (r["estimated_hours"] is None, r["estimated_hours"] or 0))
    df = pd.DataFrame(rows, columns=_ETA_COLUMNS)
    # None, not NaN, marks centers that cannot be predicted
    df["estimated_hours"] = pd.Series([r["estimated_hours"] for r in rows], dtype=object)
    return df


def forecast_insights(
    current: Sequence,
    forecast: Sequence[ForecastSnapshot],
    performance_target: float,
    target: float = COMPLETION_TARGET_PCT,
) -> List[Dict]:
    """
    Fastest expected completion and the overall completion outlook.
    """
    insights = []

    etas = []
    for center in current:
        hours = hours_to_target(center.completion, center_predictions(forecast, center.name), target)
        if hours is not None:
            etas.append((hours, center.name))

    if etas:
        hours, name = min(etas, key=lambda item: item[0])
        if hours == 0:
            content = f"{name}은(는) 이미 {target:g}% 이상 마감되었습니다."
        else:
            content = f"{name}이(가) {hours}시간 후 {target:g}% 이상 마감될 것으로 예상됩니다."
        insights.append({"title": "가장 빠른 완료 예상", "content": content, "type": "positive"})

    avg_current = sum(c.completion for c in current) / len(current) if len(current) > 0 else 0.0
    final_centers = forecast[-1].centers if len(forecast) > 0 else ()
    if len(final_centers) > 0:
        avg_predicted = sum(c.completion for c in final_centers) / len(final_centers)
    else:
        avg_predicted = avg_current

    diff = avg_predicted - performance_target
    if diff >= 0:
        content = f"예측기간 후 전체 마감률은 {avg_predicted:.1f}%로 목표를 {diff:.1f}%p 초과할 것으로 예상됩니다."
    else:
        content = f"예측기간 후 전체 마감률은 {avg_predicted:.1f}%로 목표 대비 {-diff:.1f}%p 부족할 것으로 예상됩니다."
    insights.append({
        "title": "전체 목표 달성 예측",
        "content": content,
        "type": "positive" if diff >= 0 else "neutral",
    })

    return insights
