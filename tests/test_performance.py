"""
Tests for grade bands and per-center metric derivation.
"""
import math

import pytest

from src.data.records import CenterSnapshot
from src.metrics.performance import (
    round_half_up,
    get_performance_grade,
    compute_index_score,
    compute_closing_speed,
    enhance_center,
    compute_performance_index,
    performance_metrics_frame,
    closing_speed_per_hour,
    target_achievement,
    remaining_workload,
    generate_insights,
)


def _center(name="A", total=1000, closed=800, remaining=200, completion=80.0, **kwargs) -> CenterSnapshot:
    return CenterSnapshot(name=name, total=total, closed=closed, remaining=remaining,
                          completion=completion, **kwargs)


class TestPerformanceGrade:
    """Tests for completion grade lookup."""

    @pytest.mark.parametrize("completion,label", [
        (-5, "저조함"),
        (0, "저조함"),
        (49.9, "저조함"),
        (50, "개선 필요"),
        (69.9, "개선 필요"),
        (70, "양호"),
        (85, "우수"),
        (94.9, "우수"),
        (95, "최상위"),
        (100, "최상위"),
        (150, "최상위"),
    ])
    def test_grade_bands(self, completion, label):
        assert get_performance_grade(completion)["label"] == label

    def test_nan_falls_back_to_last_band(self):
        assert get_performance_grade(math.nan)["label"] == "최상위"

    def test_grade_carries_color(self):
        assert get_performance_grade(40)["color"] == "#D83B01"


class TestCenterMetrics:
    """Tests for EnhancedCenterMetric derivation."""

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(0.25, 1) == pytest.approx(0.3)

    def test_index_score(self):
        assert compute_index_score(84.0, 92) == 87
        assert compute_index_score(84.0, 0) == compute_index_score(84.0, 80)

    def test_closing_speed_guards_midnight(self):
        assert compute_closing_speed(3500, "21:00") == pytest.approx(3500 / 21)
        assert compute_closing_speed(120, "00:00") == 120
        assert compute_closing_speed(120, "01:00") == 120

    def test_enhance_center(self):
        center = _center(completion=84.0, closed=3500, remaining=667, total=4167, efficiency=92)
        metric = enhance_center(center, "21:00", target=85)

        assert metric.name == "A"
        assert metric.total == 4167
        assert metric.performance_grade == "양호"
        assert metric.performance_color == "#107C10"
        assert metric.index_score == 87
        assert metric.closing_speed == pytest.approx(3500 / 21)
        assert metric.target == 85
        assert metric.gap == pytest.approx(-1.0)

    def test_performance_index(self):
        center = _center(completion=84.0, efficiency=92, quality_score=92)
        assert compute_performance_index(center) == 88

    def test_performance_frame_sorted_best_first(self):
        metrics = [
            enhance_center(_center("Low", completion=40.0), "21:00", 85),
            enhance_center(_center("High", completion=95.0), "21:00", 85),
        ]
        df = performance_metrics_frame(metrics)

        assert list(df["name"]) == ["High", "Low"]
        assert df["performance_index"].iloc[0] > df["performance_index"].iloc[1]

    def test_performance_frame_empty(self):
        assert len(performance_metrics_frame([])) == 0

    def test_closing_speed_per_business_hour(self):
        center = _center(closed=1200)
        assert closing_speed_per_hour(center, "21:00") == pytest.approx(100.0)
        assert closing_speed_per_hour(center, "10:00") == pytest.approx(1200.0)

    def test_target_achievement(self):
        assert target_achievement(85, 85) == pytest.approx(100.0)
        assert target_achievement(50, 0) == 0.0

    def test_remaining_workload(self):
        center = _center(remaining=400)
        assert remaining_workload(center, "21:00") == pytest.approx(100.0)
        assert remaining_workload(center, "01:00") == 0.0


class TestInsights:
    """Tests for headline insights."""

    def _metrics(self):
        return [
            enhance_center(_center("A", completion=90.0, closed=900, remaining=100), "21:00", 85),
            enhance_center(_center("B", completion=60.0, closed=600, remaining=400), "21:00", 85),
        ]

    def test_insight_titles(self):
        titles = [i["title"] for i in generate_insights(self._metrics(), 85)]
        assert titles == ["최고 성과 센터", "개선 필요 센터", "목표 달성 현황", "전체 마감 현황", "잔여 물량 우선순위"]

    def test_insight_content(self):
        insights = {i["title"]: i for i in generate_insights(self._metrics(), 85)}

        assert insights["최고 성과 센터"]["content"].startswith("A이(가) 90.0%")
        assert insights["목표 달성 현황"]["content"] == "전체 2개 센터 중 1개 센터가 목표 마감률(85%)을 달성했습니다."
        assert insights["목표 달성 현황"]["type"] == "neutral"
        assert "1,500개(75.0%)" in insights["전체 마감 현황"]["content"]
        assert insights["전체 마감 현황"]["type"] == "neutral"
        assert insights["잔여 물량 우선순위"]["content"].startswith("B에 400개")

    def test_no_low_performer_warning_above_70(self):
        metrics = [enhance_center(_center("A", completion=90.0), "21:00", 85)]
        titles = [i["title"] for i in generate_insights(metrics, 85)]
        assert "개선 필요 센터" not in titles

    def test_empty_metrics(self):
        assert generate_insights([], 85) == []
