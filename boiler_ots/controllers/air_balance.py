"""Automatic air-balance regulation (mode 2).

A two-stage PLC-style loop. Kp, proportional to the waste-bed depth, drives
the pusher: a thick bed slows feeding quickly, a thin bed speeds it up
slowly. Once Kp is near its reference, the O2 error trims the pusher further
and, past a wider deadband, shifts primary air between zone 2 and zone 3.
Zone 1 is left to the operator.
"""

from __future__ import annotations

from dataclasses import replace

import numpy as np

from boiler_ots.controllers.base import ControlAction, Controller
from boiler_ots.models.constants import REGULATION, SETPOINT_RANGES
from boiler_ots.models.plant_state import ControlSetpoints, SimulationResult, ZoneConfiguration


def shift_zone2_to_zone3(zones: ZoneConfiguration, delta: float) -> ZoneConfiguration:
    """Move ``delta`` points of air into zone 2, taking them from zone 3.

    Keeps the 100 % sum. Zone 2 stays within its regulation range and zone 3
    never drops below its floor; when it would, zone 2 takes the remainder
    left by zone 1 instead.
    """
    z2_lo, z2_hi = REGULATION.zone2_range
    floor = REGULATION.zone3_floor

    z1 = zones.zone1
    z2 = float(np.clip(zones.zone2 + delta, z2_lo, z2_hi))
    z3 = max(floor, zones.zone3 - (z2 - zones.zone2))
    if z3 <= floor:
        z2 = 100.0 - z1 - floor
        if z2 < 0.0:
            z2 = 0.0
            z1 = 100.0 - floor
    return replace(zones, zone1=z1, zone2=z2, zone3=z3)


class AirBalanceController(Controller):
    """Kp / O2 feedback on pusher speed and the zone 2 / zone 3 split."""

    @property
    def name(self) -> str:
        return "Air balance (mode 2)"

    def decide(
        self,
        setpoints: ControlSetpoints,
        zones: ZoneConfiguration,
        result: SimulationResult,
    ) -> ControlAction:
        tuning = REGULATION
        pusher = setpoints.pusher_speed
        p_lo, p_hi = SETPOINT_RANGES["pusher_speed"]

        # Stage 1: bed depth
        kp_error = result.kp - tuning.kp_reference
        if kp_error > tuning.kp_band:
            pusher = max(p_lo, pusher - tuning.pusher_down_step)
        elif kp_error < -tuning.kp_band:
            pusher = min(p_hi, pusher + tuning.pusher_up_step)

        # Stage 2: oxygen
        if abs(kp_error) < tuning.kp_o2_band:
            o2_error = tuning.o2_target - result.simulated_o2
            if abs(o2_error) > tuning.o2_pusher_deadband:
                pusher = float(
                    np.clip(pusher - o2_error * tuning.o2_pusher_gain, *tuning.pusher_trim_range)
                )
            if abs(o2_error) > tuning.o2_zone_deadband:
                zones = shift_zone2_to_zone3(zones, o2_error * tuning.o2_zone_gain)

        return ControlAction(pusher_speed=float(pusher), zones=zones)
