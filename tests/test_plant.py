"""Tests for the boiler tick loop, thermal inertia and operator actions."""

import numpy as np
import pytest

from boiler_ots.history.log import HistoryLog
from boiler_ots.models.constants import DEFAULT_SETPOINTS, WasteCategory
from boiler_ots.models.plant import Boiler, BoilerState, coerce_time_acceleration, record_every
from boiler_ots.models.plant_state import ControlSetpoints, WasteBedState, ZoneConfiguration


def _make_boiler(mode: int = 2, **kwargs) -> Boiler:
    setpoints = ControlSetpoints.default().updated(mode=mode)
    kwargs.setdefault("rng", np.random.default_rng(0))
    return Boiler(setpoints=setpoints, **kwargs)


class TestControlSetpoints:
    def test_to_dict_roundtrip(self):
        sp = ControlSetpoints.default()
        assert ControlSetpoints.from_dict(sp.to_dict()) == sp

    def test_from_dict_ignores_extra_keys(self):
        sp = ControlSetpoints.from_dict({**DEFAULT_SETPOINTS, "extra_key": 999})
        assert sp.steam_target == DEFAULT_SETPOINTS["steam_target"]

    def test_out_of_range_is_clamped(self):
        sp = ControlSetpoints.default().updated(
            steam_target=100.0, measured_o2=0.0, kap=-9000.0, total_primary_air=50000.0
        )
        assert sp.steam_target == 40.0
        assert sp.measured_o2 == 3.0
        assert sp.kap == -5000.0
        assert sp.total_primary_air == 30000.0

    def test_immutability(self):
        sp = ControlSetpoints.default()
        with pytest.raises(AttributeError):
            sp.steam_target = 25.0


class TestBoilerInit:
    def test_default_state(self):
        boiler = _make_boiler()
        state = boiler.state
        assert isinstance(state, BoilerState)
        assert state.tick == 0
        assert state.real_sh5 == 625.0
        assert state.zones == ZoneConfiguration.default()
        assert state.locks == {1: False, 2: False, 3: True}
        assert state.barycenter == pytest.approx(2.69)
        assert state.result is not None

    def test_evaluate_does_not_mutate_state(self):
        boiler = _make_boiler()
        before = boiler.state
        boiler.evaluate()
        assert boiler.state is before


class TestTick:
    def test_thermal_inertia_converges(self):
        boiler = _make_boiler(mode=1)
        for _ in range(300):
            state = boiler.tick()
        assert abs(state.real_sh5 - state.result.sh5_target) < 0.5

    def test_lag_moves_a_tenth_of_the_gap(self):
        boiler = _make_boiler(mode=1)
        start = boiler.state.real_sh5
        state = boiler.tick()
        gap = state.result.sh5_target - start
        if abs(gap) >= 0.5:
            assert state.real_sh5 == pytest.approx(start + 0.1 * gap)

    def test_higher_acceleration_moves_faster(self):
        slow = _make_boiler(mode=1, real_sh5=500.0)
        fast = _make_boiler(mode=1, real_sh5=500.0, time_acceleration=5)
        slow.tick()
        fast.tick()
        assert abs(fast.state.real_sh5 - 500.0) > abs(slow.state.real_sh5 - 500.0)

    def test_fouling_accumulates(self):
        boiler = _make_boiler()
        for _ in range(100):
            boiler.tick()
        assert boiler.state.bed.fouling == pytest.approx(0.5)

    def test_fouling_capped(self):
        boiler = _make_boiler(bed=WasteBedState(deposit=50.0, fouling=99.999))
        for _ in range(5):
            boiler.tick()
        assert boiler.state.bed.fouling == 100.0

    def test_mode2_keeps_zone_sum(self):
        boiler = _make_boiler(mode=2)
        for _ in range(200):
            boiler.tick()
            assert boiler.state.zones.total == pytest.approx(100.0)

    def test_mode1_leaves_controls_alone(self):
        boiler = _make_boiler(mode=1)
        before = boiler.state
        for _ in range(20):
            boiler.tick()
        assert boiler.state.setpoints == before.setpoints
        assert boiler.state.zones == before.zones

    def test_mode2_thick_bed_slows_pusher(self):
        boiler = _make_boiler(mode=2, bed=WasteBedState(deposit=90.0, fouling=0.0))
        boiler.tick()
        assert boiler.state.setpoints.pusher_speed == pytest.approx(49.5)

    def test_sim_time(self):
        boiler = _make_boiler()
        for _ in range(3):
            boiler.tick()
        assert boiler.state.sim_time_s == pytest.approx(3.0)


class TestHistoryRecording:
    def test_every_tick_at_normal_speed(self):
        boiler = _make_boiler()
        for _ in range(10):
            boiler.tick()
        assert len(boiler.history) == 10

    @pytest.mark.parametrize("accel, expected", [(1, 10), (5, 10), (10, 5), (30, 2), (60, 2)])
    def test_decimation(self, accel, expected):
        boiler = _make_boiler(time_acceleration=accel)
        for _ in range(10):
            boiler.tick()
        assert len(boiler.history) == expected

    def test_capacity(self):
        boiler = _make_boiler(history=HistoryLog(capacity=5))
        for _ in range(12):
            boiler.tick()
        assert len(boiler.history) == 5
        assert boiler.history.latest().id.endswith("-12")

    def test_point_content(self):
        boiler = _make_boiler()
        state = boiler.tick()
        point = boiler.history.latest()
        z1, z2, z3 = state.zones.flows(state.setpoints.total_primary_air)
        assert point.zone1_flow == pytest.approx(z1)
        assert point.sh5_temp == round(state.real_sh5)
        assert point.barycenter == state.barycenter
        assert point.waste_mix_ratio == pytest.approx(0.2)
        assert not point.is_technical_stop


class TestOperatorActions:
    def test_soot_blow(self):
        boiler = _make_boiler(bed=WasteBedState(deposit=50.0, fouling=50.0))
        assert boiler.soot_blow() == pytest.approx(20.0)
        assert boiler.soot_blow() == 0.0
        assert boiler.state.bed.fouling == 0.0

    def test_set_setpoints_clamps_and_refreshes(self):
        boiler = _make_boiler()
        sp = boiler.set_setpoints(steam_target=100.0)
        assert sp.steam_target == 40.0
        assert boiler.state.result.total_air == pytest.approx(40.0 * 1330.0)

    def test_update_zone_uses_locks(self):
        boiler = _make_boiler()
        zones = boiler.update_zone(1, 70.0)
        assert zones.zone1 == pytest.approx(70.0)
        assert zones.zone2 == pytest.approx(10.0)
        assert zones.zone3 == pytest.approx(20.0)

    def test_update_zone_changes_barycenter(self):
        boiler = _make_boiler()
        before = boiler.state.barycenter
        boiler.update_zone(1, 30.0)
        assert boiler.state.barycenter > before

    def test_toggle_lock_keeps_one_free(self):
        boiler = _make_boiler()
        boiler.toggle_lock(1)
        locks = boiler.toggle_lock(2)
        assert locks == {1: True, 2: False, 3: True}

    def test_set_waste_mix(self):
        boiler = _make_boiler()
        mix = boiler.set_waste_mix("inert", 1.0)
        assert mix.category == WasteCategory.INERT
        assert boiler.state.result.steam_flow == pytest.approx(0.0)

    def test_set_waste_mix_clamps_ratio(self):
        boiler = _make_boiler()
        assert boiler.set_waste_mix(mix_ratio=2.0).mix_ratio == 1.0

    def test_time_acceleration(self):
        boiler = _make_boiler()
        assert boiler.set_time_acceleration(7) == 5
        assert boiler.state.time_acceleration == 5


class TestHelpers:
    @pytest.mark.parametrize("value, expected", [
        (1, 1), (0, 1), (3, 1), (4, 5), (7, 5), (20, 10), (45, 30), (1000, 60), ("x", 1),
    ])
    def test_coerce_time_acceleration(self, value, expected):
        assert coerce_time_acceleration(value) == expected

    def test_record_every(self):
        assert record_every(1) == 1
        assert record_every(10) == 2
        assert record_every(60) == 5


class TestNonFiniteControls:
    def test_nan_zone_keeps_ticking(self):
        boiler = _make_boiler()
        boiler.update_zone(1, float("nan"))
        assert boiler.state.zones.total == pytest.approx(100.0)
        for _ in range(5):
            state = boiler.tick()
        assert np.isfinite(state.real_sh5)
        assert np.isfinite(state.barycenter)

    def test_nan_setpoint_clamped(self):
        boiler = _make_boiler()
        sp = boiler.set_setpoints(pusher_speed=float("nan"))
        assert np.isfinite(sp.pusher_speed)
        assert np.isfinite(boiler.tick().real_sh5)

    def test_set_zones_normalizes(self):
        boiler = _make_boiler()
        boiler.set_zones(ZoneConfiguration(float("nan"), 30.0, 30.0))
        zones = boiler.state.zones
        assert zones.zone1 == 0.0
        assert zones.total == pytest.approx(100.0)
        assert np.isfinite(boiler.tick().real_sh5)
