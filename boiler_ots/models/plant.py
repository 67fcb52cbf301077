"""Incineration boiler with thermal inertia, fouling and automatic regulation.

The whole persisted plant state lives in a single immutable ``BoilerState``
held by the ``Boiler``. Each tick reads that cell once, computes the next
state (step function, fouling, thermal lag, mode-2 regulation, history) and
commits it in one assignment, so nothing can observe a half-updated tick and
the regulation loop always works from what it last committed.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Dict, Optional, Tuple

import numpy as np

from boiler_ots.controllers.air_balance import AirBalanceController
from boiler_ots.controllers.base import Controller
from boiler_ots.history.log import HistoryLog, HistoryPoint
from boiler_ots.logger import get_logger
from boiler_ots.models.barycenter import barycenter_for
from boiler_ots.models.constants import (
    DEFAULT_LOCKS,
    DEFAULT_REAL_SH5,
    REGULATION,
    TIME_ACCELERATIONS,
    WasteCategory,
)
from boiler_ots.models.plant_state import (
    ControlSetpoints,
    SimulationResult,
    WasteBedState,
    WasteMix,
    ZoneConfiguration,
)
from boiler_ots.models.simulation import StepInputs, run_simulation
from boiler_ots.models import zones as zone_ops

logger = get_logger(__name__)


def coerce_time_acceleration(value: float) -> int:
    """Snap any multiplier onto the nearest supported acceleration."""
    try:
        target = float(value)
    except (TypeError, ValueError):
        return TIME_ACCELERATIONS[0]
    return min(TIME_ACCELERATIONS, key=lambda a: (abs(a - target), a))


def record_every(time_acceleration: int) -> int:
    """History decimation: one point per N ticks at high acceleration."""
    if time_acceleration >= 30:
        return 5
    if time_acceleration >= 10:
        return 2
    return 1


@dataclass(frozen=True)
class BoilerState:
    """Snapshot of everything the tick loop owns."""

    setpoints: ControlSetpoints
    zones: ZoneConfiguration
    waste_mix: WasteMix
    bed: WasteBedState
    real_sh5: float
    locks: Dict[int, bool] = field(default_factory=lambda: dict(DEFAULT_LOCKS))
    time_acceleration: int = 1
    tick: int = 0
    barycenter: float = 3.5
    result: Optional[SimulationResult] = None

    @property
    def sim_time_s(self) -> float:
        return self.tick * REGULATION.base_interval_s

    @property
    def sh5_target(self) -> Optional[float]:
        return self.result.sh5_target if self.result is not None else None


class Boiler:
    """Stateful tick loop around the pure combustion step function."""

    def __init__(
        self,
        setpoints: ControlSetpoints | None = None,
        zones: ZoneConfiguration | None = None,
        waste_mix: WasteMix | None = None,
        bed: WasteBedState | None = None,
        real_sh5: float = DEFAULT_REAL_SH5,
        time_acceleration: int = 1,
        rng: Optional[np.random.Generator] = None,
        controller: Controller | None = None,
        history: HistoryLog | None = None,
        start_time: datetime | None = None,
    ):
        self.rng = rng if rng is not None else np.random.default_rng()
        self.controller = controller or AirBalanceController()
        self.history = history if history is not None else HistoryLog()
        self.start_time = start_time or datetime.now()
        self._state = BoilerState(
            setpoints=(setpoints or ControlSetpoints.default()).clamped(),
            zones=zones or ZoneConfiguration.default(),
            waste_mix=(waste_mix or WasteMix()).clamped(),
            bed=bed or WasteBedState.default(),
            real_sh5=float(real_sh5),
            time_acceleration=coerce_time_acceleration(time_acceleration),
        )
        barycenter, result = self.evaluate(self._state)
        self._state = replace(self._state, barycenter=barycenter, result=result)

    @property
    def state(self) -> BoilerState:
        return self._state

    # ------------------------------------------------------------------
    # Physics
    # ------------------------------------------------------------------

    def evaluate(self, state: BoilerState | None = None) -> Tuple[float, SimulationResult]:
        """Run the step function on a state without committing anything."""
        x = state or self._state
        sp = x.setpoints
        barycenter = barycenter_for(x.zones, x.waste_mix.mix_ratio)
        zone_air = sum(x.zones.flows(sp.total_primary_air))
        inputs = StepInputs(
            steam_target=sp.steam_target,
            zone_air=zone_air,
            measured_o2=sp.measured_o2,
            mode=sp.mode,
            kap=sp.kap,
            grate_speed=sp.grate_speed,
            pusher_speed=sp.pusher_speed,
            fire_barycenter=barycenter,
            unstable=sp.unstable,
            previous_deposit=x.bed.deposit,
            fouling=x.bed.fouling,
            category=x.waste_mix.category,
            mix_ratio=x.waste_mix.mix_ratio,
        )
        return barycenter, run_simulation(inputs, self.rng)

    def tick(self) -> BoilerState:
        """Advance the plant by one tick and commit the new state."""
        x = self._state
        barycenter, result = self.evaluate(x)

        # Waste bed and fouling
        fouling = min(100.0, x.bed.fouling + REGULATION.fouling_per_tick)
        bed = WasteBedState(deposit=result.new_deposit, fouling=fouling)

        # Thermal inertia: first-order lag toward the instantaneous target
        alpha = min(REGULATION.base_alpha * x.time_acceleration, 1.0)
        delta = result.sh5_target - x.real_sh5
        if abs(delta) < REGULATION.snap_band:
            real_sh5 = result.sh5_target
        else:
            real_sh5 = x.real_sh5 + delta * alpha

        setpoints, zones = x.setpoints, x.zones
        if setpoints.mode == 2:
            action = self.controller.decide(setpoints, zones, result)
            setpoints = setpoints.updated(pusher_speed=action.pusher_speed)
            zones = action.zones

        tick = x.tick + 1
        x_next = replace(
            x,
            setpoints=setpoints,
            zones=zones,
            bed=bed,
            real_sh5=float(real_sh5),
            tick=tick,
            barycenter=barycenter,
            result=result,
        )
        self.commit(x_next)

        if tick % record_every(x.time_acceleration) == 0:
            self.history.append(self._history_point(x_next))
        return x_next

    def commit(self, x_next: BoilerState) -> None:
        """Accept a computed state as the new plant state."""
        self._state = x_next

    def _history_point(self, x: BoilerState) -> HistoryPoint:
        z1, z2, z3 = x.zones.flows(x.setpoints.total_primary_air)
        stamp = self.start_time + timedelta(seconds=x.sim_time_s)
        return HistoryPoint(
            id=f"{int(stamp.timestamp() * 1000)}-{x.tick}",
            timestamp=stamp.isoformat(timespec="seconds"),
            zone1_flow=z1,
            zone2_flow=z2,
            zone3_flow=z3,
            sh5_temp=round(x.real_sh5),
            o2_level=round(x.result.simulated_o2, 1),
            steam_flow=round(x.result.steam_flow, 1),
            barycenter=x.barycenter,
            is_technical_stop=False,
            waste_mix_ratio=x.waste_mix.mix_ratio,
        )

    # ------------------------------------------------------------------
    # Operator actions
    # ------------------------------------------------------------------

    def _refresh(self, x: BoilerState) -> None:
        """Commit an operator change with an up-to-date instantaneous result."""
        barycenter, result = self.evaluate(x)
        self.commit(replace(x, barycenter=barycenter, result=result))

    def set_setpoints(self, **changes) -> ControlSetpoints:
        x = self._state
        self._refresh(replace(x, setpoints=x.setpoints.updated(**changes)))
        return self._state.setpoints

    def update_zone(self, zone_id: int, value: float) -> ZoneConfiguration:
        x = self._state
        self._refresh(replace(x, zones=zone_ops.update_zone(x.zones, x.locks, zone_id, value)))
        return self._state.zones

    def update_sub_zone(self, zone_id: int, value: float) -> ZoneConfiguration:
        x = self._state
        self._refresh(replace(x, zones=zone_ops.update_sub_zone(x.zones, zone_id, value)))
        return self._state.zones

    def toggle_lock(self, zone_id: int) -> Dict[int, bool]:
        x = self._state
        self.commit(replace(x, locks=zone_ops.toggle_lock(x.locks, zone_id)))
        return self._state.locks

    def set_zones(self, zones: ZoneConfiguration) -> None:
        """Load a full zone configuration (e.g. from a saved snapshot)."""
        self._refresh(replace(self._state, zones=zones.normalized()))

    def set_waste_mix(
        self, category: WasteCategory | str | None = None, mix_ratio: float | None = None
    ) -> WasteMix:
        x = self._state
        mix = WasteMix(
            category=x.waste_mix.category if category is None else category,
            mix_ratio=x.waste_mix.mix_ratio if mix_ratio is None else mix_ratio,
        ).clamped()
        self._refresh(replace(x, waste_mix=mix))
        return mix

    def set_time_acceleration(self, value: float) -> int:
        accel = coerce_time_acceleration(value)
        self.commit(replace(self._state, time_acceleration=accel))
        return accel

    def soot_blow(self) -> float:
        """Clean the exchanger surfaces: fouling drops by 30 points."""
        x = self._state
        fouling = max(0.0, x.bed.fouling - REGULATION.soot_blow_step)
        self._refresh(replace(x, bed=replace(x.bed, fouling=fouling)))
        logger.info("Soot blow: fouling %.1f%% -> %.1f%%", x.bed.fouling, fouling)
        return fouling
