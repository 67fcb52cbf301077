"""Cooperative scheduling of one simulation session.

Three periodic activities share one logical clock and never block:

  physics ticks    rate set by the time acceleration, period >= 16 ms
  UI snapshots     capped at 25 Hz
  history flush    debounced, every few seconds at most

Streamlit reruns the script on a timer; each rerun calls ``pump`` which asks
the scheduler how many ticks are due since the last call and runs them
against the boiler's single state cell.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional, Union

import numpy as np

from boiler_ots.config import Settings, load_settings
from boiler_ots.history.csv_import import CsvSource, parse_history_csv
from boiler_ots.history.log import HistoryLog
from boiler_ots.history.store import ConfigurationStore, HistoryStore
from boiler_ots.logger import get_logger
from boiler_ots.models.barycenter import FireStatus, fire_status
from boiler_ots.models.constants import REGULATION
from boiler_ots.models.pci import MovingAverage, calculate_estimated_pci
from boiler_ots.models.plant import Boiler, BoilerState, coerce_time_acceleration
from boiler_ots.safety.anomaly_detector import AnomalyDetector, AnomalyState, RiskLevel
from boiler_ots.safety.statistics import analyze_history
from boiler_ots.scenarios.library import Scenario, get_scenario

logger = get_logger(__name__)

Clock = Callable[[], float]

MAX_CATCH_UP_TICKS = 600
SNAPSHOT_MAX_HZ = 25.0
EVENT_LOG_SIZE = 200


class TickScheduler:
    """Turn wall-clock time into a count of due physics ticks."""

    def __init__(
        self,
        time_acceleration: int = 1,
        clock: Clock = time.monotonic,
        max_catch_up: int = MAX_CATCH_UP_TICKS,
    ):
        self._clock = clock
        self.max_catch_up = max_catch_up
        self.time_acceleration = coerce_time_acceleration(time_acceleration)
        self._anchor = clock()

    @property
    def period_s(self) -> float:
        return max(
            REGULATION.base_interval_s / self.time_acceleration,
            REGULATION.min_period_s,
        )

    def due_ticks(self, now: Optional[float] = None) -> int:
        """Number of whole periods elapsed since the last call."""
        now = self._clock() if now is None else now
        elapsed = now - self._anchor
        if elapsed < 0:
            self._anchor = now
            return 0

        n = int(math.floor(elapsed / self.period_s))
        if n > self.max_catch_up:
            logger.warning(
                "Scheduler fell behind by %d ticks, running %d", n, self.max_catch_up
            )
            self._anchor = now
            return self.max_catch_up
        self._anchor += n * self.period_s
        return n

    def set_time_acceleration(self, value: float, now: Optional[float] = None) -> int:
        """Switch rate; returns the ticks still due at the old rate."""
        settled = self.due_ticks(now)
        self.time_acceleration = coerce_time_acceleration(value)
        return settled

    def reset(self, now: Optional[float] = None) -> None:
        self._anchor = self._clock() if now is None else now


class SnapshotSampler:
    """Hand out a fresh copy of a value at most ``max_hz`` times per second."""

    def __init__(self, max_hz: float = SNAPSHOT_MAX_HZ, clock: Clock = time.monotonic):
        self.min_interval_s = 1.0 / max_hz
        self._clock = clock
        self._last: Optional[float] = None
        self._value = None

    def sample(self, produce: Callable[[], object], now: Optional[float] = None):
        now = self._clock() if now is None else now
        if self._last is None or now - self._last >= self.min_interval_s or now < self._last:
            self._value = produce()
            self._last = now
        return self._value

    def invalidate(self) -> None:
        self._last = None


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of the session for display."""

    state: BoilerState
    anomaly: AnomalyState
    estimated_pci: float
    smoothed_pci: float
    smoothed_barycenter: float
    fire: FireStatus


class SimulationSession:
    """One operator's isolated simulator: boiler, detector, smoothers, stores."""

    def __init__(
        self,
        scenario: Union[Scenario, str, None] = None,
        settings: Optional[Settings] = None,
        seed: Optional[int] = None,
        clock: Clock = time.monotonic,
        persist: bool = True,
    ):
        self.settings = settings or load_settings()
        self._clock = clock
        self.rng = np.random.default_rng(seed)

        self.history_store: Optional[HistoryStore] = None
        self.configurations: Optional[ConfigurationStore] = None
        history = HistoryLog()
        if persist:
            self.history_store = HistoryStore(
                self.settings.history_file,
                debounce_s=self.settings.history_flush_s,
                clock=clock,
            )
            history.replace(self.history_store.load())
            self.configurations = ConfigurationStore(self.settings.configurations_file)
        self.history = history
        self._saved_revision = history.revision

        self.detector = AnomalyDetector()
        self.pci_smoother = MovingAverage()
        self.barycenter_smoother = MovingAverage()
        self.sampler = SnapshotSampler(clock=clock)
        self.events: List[Dict[str, str]] = []
        self.anomaly = AnomalyState()
        self.scenario = self._resolve(scenario)
        self.boiler = self._new_boiler(self.scenario)
        self.scheduler = TickScheduler(self.boiler.state.time_acceleration, clock=clock)

    # ------------------------------------------------------------------
    # Scenario handling
    # ------------------------------------------------------------------

    @staticmethod
    def _resolve(scenario: Union[Scenario, str, None]) -> Scenario:
        if isinstance(scenario, Scenario):
            return scenario
        found = get_scenario(scenario or "Normal Operations")
        if found is None:
            logger.warning("Unknown scenario %r, loading Normal Operations", scenario)
            found = get_scenario("Normal Operations")
        return found

    def _new_boiler(self, scenario: Scenario, time_acceleration: int = 1) -> Boiler:
        return Boiler(
            setpoints=scenario.control_setpoints(),
            zones=scenario.zone_configuration(),
            waste_mix=scenario.waste_mix(),
            bed=scenario.bed(),
            time_acceleration=time_acceleration,
            rng=self.rng,
            history=self.history,
        )

    def load_scenario(self, scenario: Union[Scenario, str, None]) -> Scenario:
        """Restart the plant at a scenario's initial conditions."""
        self.scenario = self._resolve(scenario)
        accel = self.boiler.state.time_acceleration
        self.boiler = self._new_boiler(self.scenario, accel)
        self.detector.reset()
        self.pci_smoother.reset()
        self.barycenter_smoother.reset()
        self.anomaly = AnomalyState()
        self.scheduler.reset()
        self.sampler.invalidate()
        self.log_event("info", f"Scenario loaded: {self.scenario.name}")
        return self.scenario

    def reset(self) -> Scenario:
        return self.load_scenario(self.scenario)

    # ------------------------------------------------------------------
    # Tick loop
    # ------------------------------------------------------------------

    def step(self) -> BoilerState:
        """Run one physics tick and the checks that follow it."""
        state = self.boiler.tick()
        result = state.result
        self.barycenter_smoother.push(state.barycenter)
        self.pci_smoother.push(
            calculate_estimated_pci(result.steam_flow, result.total_air, result.simulated_o2)
        )

        previous = self.anomaly.risk_level
        self.anomaly = self.detector.evaluate(
            barycenter=state.barycenter,
            o2=result.simulated_o2,
            sh5=state.real_sh5,
            t=state.sim_time_s,
        )
        if self.anomaly.risk_level != previous:
            self._log_risk_change(previous)
        return state

    def pump(self, now: Optional[float] = None) -> int:
        """Run every tick due since the last call, then flush history if needed."""
        now = self._clock() if now is None else now
        n = self.scheduler.due_ticks(now)
        for _ in range(n):
            self.step()
        self._persist_history(now)
        return n

    def _persist_history(self, now: Optional[float] = None) -> None:
        if self.history_store is None:
            return
        if self.history.revision != self._saved_revision:
            self.history_store.mark_dirty(self.history.points())
            self._saved_revision = self.history.revision
        self.history_store.maybe_flush(now)

    def set_time_acceleration(self, value: float, now: Optional[float] = None) -> int:
        """Change speed without losing the ticks already due at the old speed."""
        for _ in range(self.scheduler.set_time_acceleration(value, now)):
            self.step()
        accel = self.boiler.set_time_acceleration(self.scheduler.time_acceleration)
        logger.info("Time acceleration set to x%d", accel)
        return accel

    # ------------------------------------------------------------------
    # Operator actions
    # ------------------------------------------------------------------

    def soot_blow(self) -> float:
        before = self.boiler.state.bed.fouling
        fouling = self.boiler.soot_blow()
        self.log_event("action", f"Soot blow: fouling {before:.1f}% -> {fouling:.1f}%")
        return fouling

    def import_history(self, source: CsvSource) -> int:
        """Replace the history log with a data-logger CSV export."""
        points = parse_history_csv(source)
        self.history.replace(points)
        if self.history_store is not None:
            self.history_store.mark_dirty(self.history.points())
            self._saved_revision = self.history.revision
            self.history_store.flush()
        self.log_event("info", f"History imported: {len(points)} points")
        return len(points)

    def clear_history(self) -> None:
        self.history.clear()
        self._persist_history()

    def save_configuration(self, name: str, description: Optional[str] = None):
        if self.configurations is None:
            return None
        state = self.boiler.state
        config = self.configurations.save(name, state.zones, state.waste_mix, description)
        self.log_event("info", f"Configuration saved: {name}")
        return config

    def apply_configuration(self, config_id: str) -> bool:
        config = self.configurations.load(config_id) if self.configurations else None
        if config is None:
            return False
        self.boiler.set_zones(config.zones)
        self.boiler.set_waste_mix(config.waste_mix.category, config.waste_mix.mix_ratio)
        self.log_event("info", f"Configuration applied: {config.name}")
        return True

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def _build_snapshot(self) -> SessionSnapshot:
        state = self.boiler.state
        result = state.result
        estimated = calculate_estimated_pci(
            result.steam_flow, result.total_air, result.simulated_o2
        )
        smoothed_pci = self.pci_smoother.value
        smoothed_bary = self.barycenter_smoother.value
        return SessionSnapshot(
            state=state,
            anomaly=self.anomaly,
            estimated_pci=estimated,
            smoothed_pci=estimated if smoothed_pci is None else smoothed_pci,
            smoothed_barycenter=state.barycenter if smoothed_bary is None else smoothed_bary,
            fire=fire_status(state.barycenter),
        )

    def snapshot(self, now: Optional[float] = None) -> SessionSnapshot:
        return self.sampler.sample(self._build_snapshot, now)

    def statistics(self):
        return analyze_history(self.history.points(exclude_stops=True))

    def log_event(self, severity: str, message: str) -> None:
        self.events.append({
            "time": datetime.now().strftime("%H:%M:%S"),
            "tick": str(self.boiler.state.tick),
            "severity": severity,
            "message": message,
        })
        del self.events[:-EVENT_LOG_SIZE]

    def _log_risk_change(self, previous: RiskLevel) -> None:
        level = self.anomaly.risk_level
        severity = {
            RiskLevel.NORMAL: "info",
            RiskLevel.WARNING: "warning",
            RiskLevel.CRITICAL: "critical",
            RiskLevel.EMERGENCY: "emergency",
        }[level]
        self.log_event(
            severity,
            f"Risk {previous.value} -> {level.value} "
            f"(score {self.anomaly.explosion_risk_score:.0f})",
        )
        for anomaly in self.anomaly.active_anomalies:
            self.log_event(severity, anomaly.message)
