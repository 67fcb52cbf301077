"""Plant state records: operator settings, waste bed, and derived results."""

from __future__ import annotations

import math
from dataclasses import dataclass, asdict, fields, replace
from typing import Any, Dict

import numpy as np

from boiler_ots.logger import get_logger
from boiler_ots.models.constants import (
    DEFAULT_BED,
    DEFAULT_SETPOINTS,
    DEFAULT_WASTE_MIX,
    DEFAULT_ZONES,
    REGULATION_MODES,
    SETPOINT_RANGES,
    WasteCategory,
)

logger = get_logger(__name__)


def clip_setpoint(key: str, value: float) -> float:
    """Clamp an operator value to its range in SETPOINT_RANGES; NaN maps to the lower bound."""
    lo, hi = SETPOINT_RANGES[key]
    value = float(value)
    if math.isnan(value):
        logger.warning("Non-numeric %s value, using %s", key, lo)
        return float(lo)
    return float(np.clip(value, lo, hi))


def coerce_mode(mode: Any) -> int:
    """Map any value onto the nearest regulation mode (1 or 2)."""
    try:
        value = float(mode)
    except (TypeError, ValueError):
        logger.warning("Unknown regulation mode %r, using mode 1", mode)
        return REGULATION_MODES[0]
    return REGULATION_MODES[1] if value >= 1.5 else REGULATION_MODES[0]


def coerce_category(category: Any) -> WasteCategory:
    """Accept a WasteCategory or its name; unknown names fall back to STANDARD."""
    if isinstance(category, WasteCategory):
        return category
    try:
        return WasteCategory(str(category).upper())
    except ValueError:
        logger.warning("Unknown waste category %r, using STANDARD", category)
        return WasteCategory.STANDARD


def _from_dict(cls, d: Dict[str, Any]):
    valid_keys = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in d.items() if k in valid_keys})


@dataclass(frozen=True)
class ZoneConfiguration:
    """Primary-air split across the three grate zones and their roller pairs.

    zone1..zone3 are percentages of total primary air and sum to 100.
    sub_zoneN is the share (0-100) of zone N going to its first roller.
    """

    zone1: float
    zone2: float
    zone3: float
    sub_zone1: float = 50.0
    sub_zone2: float = 50.0
    sub_zone3: float = 50.0

    def zone(self, zone_id: int) -> float:
        return getattr(self, f"zone{zone_id}")

    def sub_zone(self, zone_id: int) -> float:
        return getattr(self, f"sub_zone{zone_id}")

    @property
    def total(self) -> float:
        return self.zone1 + self.zone2 + self.zone3

    def flows(self, total_primary_air: float) -> tuple:
        """Absolute zone flows (Nm3/h) for a given total primary air."""
        return tuple(z / 100.0 * total_primary_air for z in (self.zone1, self.zone2, self.zone3))

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    def normalized(self) -> ZoneConfiguration:
        """Clamp every share to 0-100 and rescale the zones so they sum to 100."""
        zones = [clip_setpoint("zone", z) for z in (self.zone1, self.zone2, self.zone3)]
        total = sum(zones)
        if total <= 0.0:
            logger.warning("Zone split sums to zero, using the default split")
            zones = [DEFAULT_ZONES[f"zone{i}"] for i in (1, 2, 3)]
        elif abs(total - 100.0) > 1e-6:
            zones = [z * 100.0 / total for z in zones]
        subs = [
            clip_setpoint("sub_zone", s) for s in (self.sub_zone1, self.sub_zone2, self.sub_zone3)
        ]
        return ZoneConfiguration(*zones, *subs)

    @classmethod
    def from_dict(cls, d: Dict[str, float]) -> ZoneConfiguration:
        return _from_dict(cls, d).normalized()

    @classmethod
    def default(cls) -> ZoneConfiguration:
        return cls(**DEFAULT_ZONES)


@dataclass(frozen=True)
class WasteMix:
    """Declared waste category blended against the STANDARD baseline."""

    category: WasteCategory = WasteCategory.STANDARD
    mix_ratio: float = 0.2

    def clamped(self) -> WasteMix:
        return WasteMix(
            category=coerce_category(self.category),
            mix_ratio=clip_setpoint("mix_ratio", self.mix_ratio),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"category": self.category.value, "mix_ratio": self.mix_ratio}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> WasteMix:
        return cls(
            category=coerce_category(d.get("category", DEFAULT_WASTE_MIX["category"])),
            mix_ratio=float(d.get("mix_ratio", DEFAULT_WASTE_MIX["mix_ratio"])),
        ).clamped()


@dataclass(frozen=True)
class ControlSetpoints:
    """Operator-settable plant controls."""

    steam_target: float      # Steam flow target (t/h)
    measured_o2: float       # Measured / assumed flue-gas O2 (%)
    kap: float               # Manual offset (Nm3/h)
    mode: int                # 1 = fixed law, 2 = automatic air balance
    grate_speed: float       # %
    pusher_speed: float      # %
    total_primary_air: float  # Nm3/h
    unstable: bool = False   # Inject random noise

    def clamped(self) -> ControlSetpoints:
        """Return a copy with every value pulled inside its operating range."""
        return ControlSetpoints(
            steam_target=clip_setpoint("steam_target", self.steam_target),
            measured_o2=clip_setpoint("measured_o2", self.measured_o2),
            kap=clip_setpoint("kap", self.kap),
            mode=coerce_mode(self.mode),
            grate_speed=clip_setpoint("grate_speed", self.grate_speed),
            pusher_speed=clip_setpoint("pusher_speed", self.pusher_speed),
            total_primary_air=clip_setpoint("total_primary_air", self.total_primary_air),
            unstable=bool(self.unstable),
        )

    def updated(self, **changes: Any) -> ControlSetpoints:
        return replace(self, **changes).clamped()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> ControlSetpoints:
        return _from_dict(cls, {**DEFAULT_SETPOINTS, **d}).clamped()

    @classmethod
    def default(cls) -> ControlSetpoints:
        return cls(**DEFAULT_SETPOINTS)


@dataclass(frozen=True)
class WasteBedState:
    """Persistent grate state: waste deposit (0-100) and boiler fouling (0-100 %)."""

    deposit: float
    fouling: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def default(cls) -> WasteBedState:
        return cls(**DEFAULT_BED)


@dataclass(frozen=True)
class SimulationResult:
    """Output of one evaluation of the combustion step function."""

    simulated_o2: float      # %
    kp: float                # Waste-bed control variable
    new_deposit: float       # 0-100
    air_efficiency: float    # Secondary air / total air
    sh5_target: float        # Instantaneous SH5 target (deg C)
    safe: bool               # sh5_target < 620
    secondary_air: float     # Nm3/h
    zone_air: float          # Primary air through the zones (Nm3/h)
    total_air: float         # Nm3/h
    dynamic_pci: float       # kJ/kg
    pci_factor: float
    steam_flow: float        # Simulated steam output (t/h)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
