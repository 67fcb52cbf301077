"""Tests for rolling history statistics."""

import pytest

from boiler_ots.history.log import HistoryPoint
from boiler_ots.safety.statistics import analyze_history, trend_of, window_stats


def _make_point(i: int, sh5: float = 610.0, barycenter: float = 2.7) -> HistoryPoint:
    return HistoryPoint(
        id=str(i),
        timestamp=f"2024-01-01T00:{i // 60:02d}:{i % 60:02d}",
        zone1_flow=17000.0,
        zone2_flow=5300.0,
        zone3_flow=5600.0,
        sh5_temp=sh5,
        o2_level=6.0,
        steam_flow=30.6,
        barycenter=barycenter,
    )


class TestAnalyzeHistory:
    def test_needs_ten_points(self):
        assert analyze_history([_make_point(i) for i in range(9)]) is None
        assert analyze_history([_make_point(i) for i in range(10)]) is not None

    def test_constant_series(self):
        stats = analyze_history([_make_point(i) for i in range(20)])
        sh5 = stats["sh5_temp"]
        assert sh5.mean == pytest.approx(610.0)
        assert sh5.std == 0.0
        assert sh5.z_score == 0.0
        assert sh5.trend == "stable"
        assert not sh5.is_anomaly

    def test_outlier_flagged(self):
        points = [_make_point(i) for i in range(29)] + [_make_point(29, sh5=700.0)]
        stats = analyze_history(points)
        assert stats["sh5_temp"].is_anomaly
        assert stats["sh5_temp"].latest == 700.0
        assert not stats["barycenter"].is_anomaly

    def test_uses_last_window_only(self):
        old = [_make_point(i, sh5=500.0) for i in range(50)]
        recent = [_make_point(50 + i, sh5=620.0) for i in range(30)]
        stats = analyze_history(old + recent)
        assert stats["sh5_temp"].mean == pytest.approx(620.0)


class TestTrend:
    def test_increasing(self):
        assert trend_of([600.0 + i for i in range(10)]) == "increasing"

    def test_decreasing(self):
        assert trend_of([600.0 - 0.5 * i for i in range(10)]) == "decreasing"

    def test_small_slope_is_stable(self):
        assert trend_of([600.0 + 0.05 * i for i in range(10)]) == "stable"

    def test_too_few_points(self):
        assert trend_of([1.0, 5.0, 9.0]) == "stable"

    def test_population_std(self):
        stats = window_stats([1.0, 3.0])
        assert stats.std == pytest.approx(1.0)
        assert stats.z_score == pytest.approx(1.0)
