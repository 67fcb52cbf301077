"""Tests for tick scheduling, snapshot sampling and the simulation session."""

import io

import pytest

from boiler_ots.config import Settings
from boiler_ots.models.plant_state import ZoneConfiguration
from boiler_ots.safety import RiskLevel
from boiler_ots.session import SimulationSession, SnapshotSampler, TickScheduler


class FakeClock:
    def __init__(self, t: float = 0.0):
        self.t = t

    def __call__(self) -> float:
        return self.t


def _make_session(tmp_path=None, scenario=None, clock=None) -> SimulationSession:
    settings = Settings(data_dir=tmp_path) if tmp_path is not None else Settings()
    return SimulationSession(
        scenario=scenario,
        settings=settings,
        seed=0,
        clock=clock or FakeClock(),
        persist=tmp_path is not None,
    )


class TestTickScheduler:
    def test_whole_periods_only(self):
        sched = TickScheduler(1, clock=FakeClock())
        assert sched.due_ticks(0.5) == 0
        assert sched.due_ticks(1.0) == 1
        assert sched.due_ticks(3.5) == 2

    def test_period_floor(self):
        sched = TickScheduler(60, clock=FakeClock())
        assert sched.period_s == pytest.approx(1.0 / 60.0)
        assert sched.due_ticks(1.01) == 60

    def test_no_tick_lost_on_rate_change(self):
        sched = TickScheduler(1, clock=FakeClock())
        assert sched.set_time_acceleration(5, now=2.5) == 2
        assert sched.time_acceleration == 5
        # The half second already elapsed counts at the new rate
        assert sched.due_ticks(2.5) == 2

    def test_catch_up_capped(self):
        sched = TickScheduler(1, clock=FakeClock(), max_catch_up=10)
        assert sched.due_ticks(100.0) == 10
        assert sched.due_ticks(100.5) == 0

    def test_clock_going_back(self):
        sched = TickScheduler(1, clock=FakeClock(10.0))
        assert sched.due_ticks(5.0) == 0
        assert sched.due_ticks(6.0) == 1

    def test_invalid_acceleration_snapped(self):
        assert TickScheduler(7, clock=FakeClock()).time_acceleration == 5


class TestSnapshotSampler:
    def test_rate_capped(self):
        calls = []

        def produce():
            calls.append(1)
            return len(calls)

        sampler = SnapshotSampler(max_hz=25.0, clock=FakeClock())
        assert sampler.sample(produce, now=0.0) == 1
        assert sampler.sample(produce, now=0.01) == 1
        assert sampler.sample(produce, now=0.05) == 2
        sampler.invalidate()
        assert sampler.sample(produce, now=0.06) == 3


class TestSimulationSession:
    def test_pump_runs_due_ticks(self):
        clock = FakeClock()
        session = _make_session(clock=clock)
        assert session.pump(now=5.0) == 5
        assert session.boiler.state.tick == 5
        assert len(session.history) == 5
        assert len(session.detector) == 5
        assert len(session.pci_smoother) == 5

    def test_snapshot(self):
        session = _make_session()
        session.pump(now=3.0)
        snap = session.snapshot(now=3.0)
        assert snap.state is session.boiler.state
        assert snap.fire.status
        assert snap.smoothed_barycenter == pytest.approx(2.69)
        assert 0.0 <= snap.smoothed_pci <= 25000.0
        assert snap.anomaly.risk_level == RiskLevel.NORMAL

    def test_snapshot_before_first_tick(self):
        snap = _make_session().snapshot(now=0.0)
        assert snap.smoothed_pci == snap.estimated_pci

    def test_load_scenario_resets(self):
        session = _make_session()
        session.pump(now=10.0)
        session.load_scenario("Heavy Fouling")
        state = session.boiler.state
        assert state.tick == 0
        assert state.bed.fouling == 60.0
        assert len(session.detector) == 0
        assert session.pci_smoother.value is None
        assert session.barycenter_smoother.value is None
        assert session.events[-1]["message"] == "Scenario loaded: Heavy Fouling"

    def test_unknown_scenario_falls_back(self):
        session = _make_session(scenario="Nonexistent")
        assert session.scenario.name == "Normal Operations"

    def test_time_acceleration_settles_old_rate(self):
        clock = FakeClock()
        session = _make_session(clock=clock)
        assert session.set_time_acceleration(30, now=3.0) == 30
        assert session.boiler.state.tick == 3
        assert session.boiler.state.time_acceleration == 30

    def test_soot_blow_logged(self):
        session = _make_session(scenario="Heavy Fouling")
        assert session.soot_blow() == pytest.approx(30.0)
        assert "Soot blow" in session.events[-1]["message"]

    def test_risk_change_logged(self):
        session = _make_session()
        session.boiler.set_zones(ZoneConfiguration(0.0, 0.0, 100.0, 50.0, 50.0, 0.0))
        session.pump(now=2.0)
        assert session.anomaly.risk_level == RiskLevel.WARNING
        assert any(e["message"].startswith("Risk NORMAL -> WARNING") for e in session.events)

    def test_history_persisted(self, tmp_path):
        session = _make_session(tmp_path)
        session.pump(now=4.0)
        assert session.settings.history_file.exists()

        restored = _make_session(tmp_path)
        assert len(restored.history) == 4

    def test_import_history(self, tmp_path):
        session = _make_session(tmp_path)
        text = (
            "Timestamp;Inc_AP3_FT10342N_YOUT;Chaud_Vap_TT12115_YOUT\n"
            "2024-01-15 08:00:00;\"5822,113\";610\n"
            "2024-01-15 08:00:10;5800;450\n"
        )
        assert session.import_history(io.StringIO(text)) == 2
        assert len(session.history) == 2
        assert session.history.points()[0].zone1_flow == pytest.approx(5822.113)
        assert len(session.history.points(exclude_stops=True)) == 1

    def test_configurations(self, tmp_path):
        session = _make_session(tmp_path)
        session.boiler.update_zone(1, 50.0)
        config = session.save_configuration("Half front")
        session.load_scenario("Normal Operations")
        assert session.boiler.state.zones.zone1 == pytest.approx(61.0)
        assert session.apply_configuration(config.id)
        assert session.boiler.state.zones.zone1 == pytest.approx(50.0)
        assert not session.apply_configuration("missing")

    def test_statistics(self):
        session = _make_session()
        assert session.statistics() is None
        session.pump(now=12.0)
        stats = session.statistics()
        assert set(stats) == {"sh5_temp", "barycenter"}

    def test_sessions_isolated(self):
        a = _make_session()
        b = _make_session()
        a.pump(now=5.0)
        assert b.boiler.state.tick == 0
        assert len(b.history) == 0
