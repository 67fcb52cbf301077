"""Tests for the automatic air-balance controller."""

import pytest

from boiler_ots.controllers import AirBalanceController, ControlAction, Controller
from boiler_ots.controllers.air_balance import shift_zone2_to_zone3
from boiler_ots.models.plant_state import ControlSetpoints, SimulationResult, ZoneConfiguration


def _make_result(kp: float = 100.0, o2: float = 6.0) -> SimulationResult:
    return SimulationResult(
        simulated_o2=o2,
        kp=kp,
        new_deposit=kp / 1.5,
        air_efficiency=0.3,
        sh5_target=610.0,
        safe=True,
        secondary_air=12700.0,
        zone_air=28000.0,
        total_air=40700.0,
        dynamic_pci=8500.0,
        pci_factor=8500.0 / 9000.0,
        steam_flow=30.0,
    )


def _decide(kp=100.0, o2=6.0, pusher=50.0, zones=None) -> ControlAction:
    ctrl = AirBalanceController()
    setpoints = ControlSetpoints.default().updated(pusher_speed=pusher)
    return ctrl.decide(setpoints, zones or ZoneConfiguration.default(), _make_result(kp, o2))


class TestAirBalanceController:
    def test_is_controller(self):
        ctrl = AirBalanceController()
        assert isinstance(ctrl, Controller)
        assert ctrl.name == "Air balance (mode 2)"

    def test_thick_bed_slows_pusher_fast(self):
        action = _decide(kp=130.0)
        assert action.pusher_speed == pytest.approx(49.5)
        assert action.zones == ZoneConfiguration.default()

    def test_thin_bed_speeds_pusher_slowly(self):
        action = _decide(kp=70.0)
        assert action.pusher_speed == pytest.approx(50.1)

    def test_on_target_holds(self):
        action = _decide(kp=100.0, o2=6.0)
        assert action.pusher_speed == pytest.approx(50.0)
        assert action.zones == ZoneConfiguration.default()

    def test_low_o2_trims_pusher_and_shifts_air(self):
        action = _decide(kp=100.0, o2=5.0)
        assert action.pusher_speed == pytest.approx(49.95)
        assert action.zones.zone2 == pytest.approx(19.02)
        assert action.zones.zone3 == pytest.approx(19.98)
        assert action.zones.zone1 == pytest.approx(61.0)

    def test_small_o2_error_only_trims_pusher(self):
        action = _decide(kp=100.0, o2=5.7)
        assert action.pusher_speed == pytest.approx(50.0 - 0.3 * 0.05)
        assert action.zones == ZoneConfiguration.default()

    def test_o2_trim_limited_to_range(self):
        action = _decide(kp=100.0, o2=3.0, pusher=95.0)
        assert action.pusher_speed == pytest.approx(90.0)

    def test_pusher_floor(self):
        action = _decide(kp=200.0, pusher=0.2)
        assert action.pusher_speed == 0.0


class TestShiftZone2ToZone3:
    def test_sum_preserved(self):
        zones = shift_zone2_to_zone3(ZoneConfiguration.default(), 0.5)
        assert zones.total == pytest.approx(100.0)

    def test_zone3_floor(self):
        zones = shift_zone2_to_zone3(ZoneConfiguration(61.0, 30.0, 9.0), 5.0)
        assert zones.zone3 == 5.0
        assert zones.zone2 == pytest.approx(34.0)
        assert zones.total == pytest.approx(100.0)

    def test_zone1_gives_way_when_nothing_left(self):
        zones = shift_zone2_to_zone3(ZoneConfiguration(96.0, 2.0, 2.0), 0.0)
        assert zones.zone1 == pytest.approx(95.0)
        assert zones.zone2 == 0.0
        assert zones.zone3 == 5.0

    def test_zone2_range(self):
        zones = shift_zone2_to_zone3(ZoneConfiguration(20.0, 59.0, 21.0), 5.0)
        assert zones.zone2 == 60.0
        assert zones.zone3 == pytest.approx(20.0)
