"""Bounded, timestamped log of plant snapshots."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, asdict, fields
from typing import Any, Deque, Dict, Iterable, Iterator, List, Optional, Sequence, TypeVar

import pandas as pd

from boiler_ots.models.constants import REGULATION

TECHNICAL_STOP_SH5 = 500.0

T = TypeVar("T")


@dataclass(frozen=True)
class HistoryPoint:
    """One recorded (or imported) plant sample."""

    id: str
    timestamp: str
    zone1_flow: float        # Nm3/h
    zone2_flow: float
    zone3_flow: float
    sh5_temp: float          # deg C
    o2_level: float          # %
    steam_flow: float        # t/h
    barycenter: float
    is_technical_stop: bool = False
    waste_mix_ratio: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> HistoryPoint:
        valid_keys = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in d.items() if k in valid_keys})


class HistoryLog:
    """Append-only history that keeps only the most recent ``capacity`` points."""

    def __init__(self, points: Iterable[HistoryPoint] = (), capacity: int = REGULATION.history_capacity):
        self.capacity = capacity
        self._points: Deque[HistoryPoint] = deque(points, maxlen=capacity)
        self.revision = 0

    def append(self, point: HistoryPoint) -> None:
        self._points.append(point)
        self.revision += 1

    def replace(self, points: Iterable[HistoryPoint]) -> None:
        """Swap the whole log, e.g. after a CSV import."""
        self._points = deque(points, maxlen=self.capacity)
        self.revision += 1

    def clear(self) -> None:
        self.replace(())

    def points(self, exclude_stops: bool = False) -> List[HistoryPoint]:
        if not exclude_stops:
            return list(self._points)
        return [p for p in self._points if p.sh5_temp >= TECHNICAL_STOP_SH5]

    def latest(self) -> Optional[HistoryPoint]:
        return self._points[-1] if self._points else None

    def to_dataframe(self, exclude_stops: bool = False) -> pd.DataFrame:
        rows = [p.to_dict() for p in self.points(exclude_stops)]
        columns = [f.name for f in fields(HistoryPoint)]
        return pd.DataFrame(rows, columns=columns)

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[HistoryPoint]:
        return iter(list(self._points))


def sample_points(data: Sequence[T], target_count: int = 500) -> List[T]:
    """Downsample by a fixed stride for charting, always keeping the last point."""
    if not data or len(data) <= target_count:
        return list(data)

    step = -(-len(data) // target_count)
    sampled = list(data[::step])
    if sampled[-1] is not data[-1]:
        sampled.append(data[-1])
    return sampled
