"""Rolling statistics over recent history: z-score outliers and trend direction."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence

import numpy as np

from boiler_ots.history.log import HistoryPoint

WINDOW = 30
MIN_POINTS = 10
Z_LIMIT = 2.5
SLOPE_DEADBAND = 0.1


@dataclass(frozen=True)
class WindowStats:
    latest: float
    mean: float
    std: float
    z_score: float
    trend: str  # "stable", "increasing" or "decreasing"

    @property
    def is_anomaly(self) -> bool:
        return abs(self.z_score) > Z_LIMIT


def trend_of(values: Sequence[float]) -> str:
    """Sign of the least-squares slope against sample index."""
    if len(values) < 5:
        return "stable"
    y = np.asarray(values, dtype=float)
    x = np.arange(len(y), dtype=float)
    x_c = x - x.mean()
    slope = float(np.sum(x_c * (y - y.mean())) / np.sum(x_c ** 2))
    if abs(slope) < SLOPE_DEADBAND:
        return "stable"
    return "increasing" if slope > 0 else "decreasing"


def window_stats(values: Sequence[float]) -> WindowStats:
    y = np.asarray(values, dtype=float)
    mean = float(y.mean())
    std = float(y.std()) if len(y) >= 2 else 0.0
    latest = float(y[-1])
    z = 0.0 if std == 0 else (latest - mean) / std
    return WindowStats(latest=latest, mean=mean, std=std, z_score=z, trend=trend_of(values))


def analyze_history(
    points: Sequence[HistoryPoint], window: int = WINDOW
) -> Optional[Dict[str, WindowStats]]:
    """SH5 and barycenter statistics over the last ``window`` points.

    Returns None when fewer than 10 points are available.
    """
    if len(points) < MIN_POINTS:
        return None
    recent = list(points)[-window:]
    return {
        "sh5_temp": window_stats([p.sh5_temp for p in recent]),
        "barycenter": window_stats([p.barycenter for p in recent]),
    }
