"""File-backed persistence: debounced history log and saved configurations."""

from __future__ import annotations

import json
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from boiler_ots.history.log import HistoryPoint
from boiler_ots.logger import get_logger
from boiler_ots.models.plant_state import WasteMix, ZoneConfiguration

logger = get_logger(__name__)


def _read_json(path: Path) -> Optional[Any]:
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Could not read %s: %s", path, exc)
        return None


def _write_json(path: Path, payload: Any) -> bool:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(json.dumps(payload), encoding="utf-8")
        tmp.replace(path)
    except OSError as exc:
        logger.error("Could not write %s: %s", path, exc)
        return False
    return True


class HistoryStore:
    """Persist the history log, writing at most once per debounce period."""

    def __init__(
        self,
        path: Path,
        debounce_s: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.path = Path(path)
        self.debounce_s = debounce_s
        self._clock = clock
        self._pending: Optional[List[HistoryPoint]] = None
        self._last_flush: Optional[float] = None

    def load(self) -> List[HistoryPoint]:
        data = _read_json(self.path)
        if not isinstance(data, list):
            return []
        points = []
        for item in data:
            if not isinstance(item, dict):
                logger.warning("Dropping non-object history entry in %s", self.path)
                continue
            try:
                points.append(HistoryPoint.from_dict(item))
            except (TypeError, ValueError):
                logger.warning("Dropping malformed history entry in %s", self.path)
        return points

    @property
    def dirty(self) -> bool:
        return self._pending is not None

    def mark_dirty(self, points: Sequence[HistoryPoint]) -> None:
        self._pending = list(points)

    def maybe_flush(self, now: Optional[float] = None) -> bool:
        """Write the pending history if the debounce period has elapsed."""
        if self._pending is None:
            return False
        now = self._clock() if now is None else now
        if self._last_flush is not None and now - self._last_flush < self.debounce_s:
            return False
        return self.flush(now)

    def flush(self, now: Optional[float] = None) -> bool:
        if self._pending is None:
            return False
        ok = _write_json(self.path, [p.to_dict() for p in self._pending])
        if ok:
            self._pending = None
            self._last_flush = self._clock() if now is None else now
        return ok


@dataclass(frozen=True)
class BoilerConfig:
    """Named snapshot of a zone configuration and waste mix."""

    id: str
    name: str
    timestamp: int  # epoch milliseconds
    zones: ZoneConfiguration
    waste_mix: WasteMix
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "timestamp": self.timestamp,
            "zones": self.zones.to_dict(),
            "waste_mix": self.waste_mix.to_dict(),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> BoilerConfig:
        return cls(
            id=str(d["id"]),
            name=str(d["name"]),
            timestamp=int(d.get("timestamp", 0)),
            zones=ZoneConfiguration.from_dict(d["zones"]),
            waste_mix=WasteMix.from_dict(d.get("waste_mix", {})),
            description=d.get("description"),
        )


@dataclass
class ConfigurationStore:
    """Saved operator configurations, kept in one JSON file."""

    path: Path
    configs: List[BoilerConfig] = field(default_factory=list)

    def __post_init__(self):
        self.path = Path(self.path)
        data = _read_json(self.path)
        if isinstance(data, list):
            for item in data:
                try:
                    self.configs.append(BoilerConfig.from_dict(item))
                except (KeyError, TypeError, ValueError) as exc:
                    logger.error("Failed to parse saved configuration: %s", exc)

    def _persist(self) -> None:
        _write_json(self.path, [c.to_dict() for c in self.configs])

    def save(
        self,
        name: str,
        zones: ZoneConfiguration,
        waste_mix: WasteMix,
        description: Optional[str] = None,
    ) -> BoilerConfig:
        config = BoilerConfig(
            id=str(uuid.uuid4()),
            name=name,
            timestamp=int(time.time() * 1000),
            zones=zones,
            waste_mix=waste_mix,
            description=description,
        )
        self.configs.append(config)
        self._persist()
        return config

    def load(self, config_id: str) -> Optional[BoilerConfig]:
        return next((c for c in self.configs if c.id == config_id), None)

    def delete(self, config_id: str) -> bool:
        before = len(self.configs)
        self.configs = [c for c in self.configs if c.id != config_id]
        if len(self.configs) == before:
            return False
        self._persist()
        return True
