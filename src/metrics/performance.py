"""
Center performance metrics pack.

Single source of truth for: grade bands, index scores, closing speed,
target gap and the headline insights built on them.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, asdict
from typing import Dict, List, Sequence

import numpy as np
import pandas as pd

from src.config import (
    PERFORMANCE_GRADES,
    DEFAULT_EFFICIENCY,
    DEFAULT_QUALITY_SCORE,
    CAPACITY_FACTOR,
)
from src.data.hours import hour_of, elapsed_business_hours, hours_until_close
from src.data.records import CenterSnapshot


@dataclass(frozen=True)
class EnhancedCenterMetric:
    """CenterSnapshot plus the derived period metrics."""
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
    performance_grade: str
    performance_color: str
    index_score: int
    closing_speed: float
    target: float
    gap: float

    def to_dict(self) -> dict:
        return asdict(self)


def round_half_up(value: float, decimals: int = 0) -> float:
    """Round halves upwards; Python's round() rounds half to even."""
    factor = 10 ** decimals
    return math.floor(value * factor + 0.5) / factor


def get_performance_grade(completion: float) -> Dict:
    """
    Grade band for a completion percentage.

    Bands are half-open [lo, hi) except the last, which includes 100.
    Values below 0 or above 100 are clamped first; anything still
    unmatched (NaN) falls back to the last band.
    """
    if not pd.isna(completion):
        completion = min(max(completion, 0.0), 100.0)
    for grade in PERFORMANCE_GRADES:
        low, high = grade["range"]
        if low <= completion < high:
            return grade
    return PERFORMANCE_GRADES[-1]


def compute_index_score(completion: float, efficiency: float) -> int:
    efficiency = efficiency or DEFAULT_EFFICIENCY
    return int(round_half_up(completion * 0.6 + efficiency * 0.4))


def compute_closing_speed(closed: int, time_label: str) -> float:
    """Closed volume per clock hour of the snapshot; hour 0 counts as 1."""
    return closed / max(1, hour_of(time_label))


def enhance_center(center: CenterSnapshot, time_label: str, target: float) -> EnhancedCenterMetric:
    """CenterSnapshot -> EnhancedCenterMetric for a snapshot taken at time_label."""
    grade = get_performance_grade(center.completion)
    return EnhancedCenterMetric(
        name=center.name,
        total=center.total,
        closed=center.closed,
        remaining=center.remaining,
        completion=center.completion,
        efficiency=center.efficiency,
        capacity=center.capacity,
        backlog=center.backlog,
        quality_score=center.quality_score,
        receipt=center.receipt,
        assigned=center.assigned,
        output=center.output,
        performance_grade=grade["label"],
        performance_color=grade["color"],
        index_score=compute_index_score(center.completion, center.efficiency),
        closing_speed=compute_closing_speed(center.closed, time_label),
        target=target,
        gap=center.completion - target,
    )


def compute_performance_index(center) -> int:
    """Weighted blend: 50% completion, 30% efficiency, 20% quality."""
    completion = center.completion or 0
    efficiency = center.efficiency or DEFAULT_EFFICIENCY
    quality = center.quality_score or DEFAULT_QUALITY_SCORE
    return int(round_half_up(completion * 0.5 + efficiency * 0.3 + quality * 0.2))


def performance_metrics_frame(metrics: Sequence[EnhancedCenterMetric]) -> pd.DataFrame:
    """
    Per-center scorecard sorted by performance index (best first).
    """
    if len(metrics) == 0:
        return pd.DataFrame()

    rows = []
    for m in metrics:
        rows.append({
            "name": m.name,
            "performance_index": compute_performance_index(m),
            "completion": m.completion,
            "efficiency": m.efficiency,
            "quality": m.quality_score,
            "backlog": m.backlog,
            "capacity": m.capacity or m.total * CAPACITY_FACTOR,
            "closed": m.closed,
            "remaining": m.remaining,
            "total": m.total,
            "receipt": m.receipt,
            "assigned": m.assigned,
            "output": m.output,
        })

    df = pd.DataFrame(rows)
    return df.sort_values("performance_index", ascending=False, kind="stable").reset_index(drop=True)


def closing_speed_per_hour(center, time_label: str) -> float:
    """Closed volume per business hour elapsed since opening, 1 decimal."""
    elapsed = elapsed_business_hours(time_label)
    if elapsed <= 0:
        return 0.0
    return round_half_up(center.closed / elapsed, 1)


def target_achievement(completion: float, target: float) -> float:
    """Completion as a percentage of the target."""
    if not target:
        return 0.0
    return completion / target * 100


def remaining_workload(center, time_label: str) -> float:
    """Remaining volume that must close per hour to finish by 01:00."""
    hours_left = hours_until_close(time_label)
    if hours_left <= 0:
        return 0.0
    return center.remaining / hours_left


def generate_insights(metrics: Sequence[EnhancedCenterMetric], target: float) -> List[Dict]:
    """
    Headline insights for the selected period.

    Returns a list of {"title", "content", "type"} dicts where type is one of
    positive | warning | neutral | action.
    """
    if len(metrics) == 0:
        return []

    insights = []

    top = max(metrics, key=lambda m: m.completion)
    insights.append({
        "title": "최고 성과 센터",
        "content": f"{top.name}이(가) {top.completion:.1f}% 마감률로 최고 성과를 보이고 있습니다.",
        "type": "positive",
    })

    low = min(metrics, key=lambda m: m.completion)
    if low.completion < 70:
        insights.append({
            "title": "개선 필요 센터",
            "content": f"{low.name}의 마감률이 {low.completion:.1f}%로 목표치에 미달합니다.",
            "type": "warning",
        })

    above = sum(1 for m in metrics if m.completion >= target)
    insights.append({
        "title": "목표 달성 현황",
        "content": (
            f"전체 {len(metrics)}개 센터 중 {above}개 센터가 "
            f"목표 마감률({target:g}%)을 달성했습니다."
        ),
        "type": "positive" if above / len(metrics) >= 0.7 else "neutral",
    })

    total_closed = int(np.sum([m.closed for m in metrics]))
    total_items = int(np.sum([m.total for m in metrics]))
    closed_pct = total_closed / total_items * 100 if total_items > 0 else 0.0
    if closed_pct >= 80:
        closed_type = "positive"
    elif closed_pct >= 60:
        closed_type = "neutral"
    else:
        closed_type = "warning"
    insights.append({
        "title": "전체 마감 현황",
        "content": (
            f"전체 물량 {total_items:,}개 중 {total_closed:,}개"
            f"({closed_pct:.1f}%)가 마감되었습니다."
        ),
        "type": closed_type,
    })

    backlog = max(metrics, key=lambda m: m.remaining)
    insights.append({
        "title": "잔여 물량 우선순위",
        "content": f"{backlog.name}에 {backlog.remaining:,}개의 잔여 물량이 있습니다.",
        "type": "action",
    })

    return insights
