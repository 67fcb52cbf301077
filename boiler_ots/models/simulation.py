"""Closed-form combustion step function.

Maps the control panel, the waste mix and the current waste-bed state to the
plant's instantaneous response: O2, SH5 target, secondary air, steam output
and the next waste deposit. No hidden state: the only source of variation
between two calls with equal inputs is the optional noise generator, which is
consulted solely when the instability flag is set.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from boiler_ots.models.constants import COMBUSTION, SETPOINT_RANGES, WasteCategory
from boiler_ots.models.pci import calculate_dynamic_pci
from boiler_ots.models.plant_state import SimulationResult, coerce_category, coerce_mode

C = COMBUSTION


@dataclass(frozen=True)
class StepInputs:
    """Everything one evaluation of the step function depends on."""

    steam_target: float       # t/h
    zone_air: float           # Sum of the three zone flows (Nm3/h)
    measured_o2: float        # %
    mode: int                 # 1 or 2
    kap: float                # Manual offset, carried for display
    grate_speed: float        # %
    pusher_speed: float       # %
    fire_barycenter: float
    unstable: bool
    previous_deposit: float   # 0-100
    fouling: float            # 0-100 %
    category: WasteCategory
    mix_ratio: float          # 0-1


def _bounded(value: float, lo: float, hi: float) -> float:
    return float(np.clip(value, lo, hi))


def run_simulation(
    inputs: StepInputs, rng: Optional[np.random.Generator] = None
) -> SimulationResult:
    """Compute the plant response for one instant.

    Args:
        inputs: Controls and persisted bed state.
        rng: Noise source for the instability flag. A fresh entropy-seeded
             generator is used when omitted.

    Returns:
        SimulationResult. Out-of-range inputs are clamped, never rejected.
    """
    category = coerce_category(inputs.category)
    mode = coerce_mode(inputs.mode)
    mix_ratio = _bounded(inputs.mix_ratio, 0.0, 1.0)
    grate = _bounded(inputs.grate_speed, *SETPOINT_RANGES["grate_speed"])
    pusher = _bounded(inputs.pusher_speed, *SETPOINT_RANGES["pusher_speed"])
    steam_target = max(0.0, float(inputs.steam_target))
    zone_air = max(0.0, float(inputs.zone_air))
    fouling = _bounded(inputs.fouling, 0.0, 100.0)
    previous_deposit = _bounded(inputs.previous_deposit, 0.0, 100.0)

    # --- Calorific value of the feed ---
    dynamic_pci = calculate_dynamic_pci(category, steam_target, pusher, mix_ratio)
    pci_factor = dynamic_pci / C.pci_reference

    # --- Waste bed mass balance ---
    delta_stock = (pusher - grate) * C.deposit_gain
    new_deposit = _bounded(previous_deposit + delta_stock, 0.0, 100.0)

    # --- Secondary air demand ---
    if mode == 2:
        secondary_air = max(C.min_secondary_air, steam_target * C.air_per_steam_ton - zone_air)
    else:
        secondary_air = max(C.min_secondary_air, steam_target * C.fixed_law_air_per_steam)
    total_air = zone_air + secondary_air
    air_efficiency = secondary_air / total_air
    air_ratio = total_air / C.base_air_flow

    # --- Steam actually produced (may diverge from the target) ---
    steam_flow = 30.0 * pci_factor * air_ratio

    noise = None
    if inputs.unstable:
        noise = rng if rng is not None else np.random.default_rng()

    # --- Kp and O2 ---
    kp = new_deposit * C.kp_per_deposit
    if noise is not None:
        kp += (noise.random() - 0.5) * 5.0

    effective_fuel = (new_deposit / 50.0) * pci_factor
    if category == WasteCategory.INERT and mix_ratio > C.inert_ratio_threshold:
        effective_fuel = C.inert_fuel_factor
    simulated_o2 = C.o2_base + (air_ratio - effective_fuel) * C.o2_air_gain
    simulated_o2 = _bounded(simulated_o2, C.o2_min, C.o2_max)

    # --- SH5 target ---
    position_term = (inputs.fire_barycenter - C.barycenter_center) * C.position_gain
    load_term = new_deposit - 50.0
    fouling_term = fouling * C.fouling_gain
    pci_temp_delta = (pci_factor - 1.0) * C.pci_temp_gain
    if category == WasteCategory.INERT:
        pci_temp_delta -= mix_ratio * C.inert_absorption
    cooling_term = max(0.0, simulated_o2 - C.o2_base) * C.o2_cooling_gain
    air_cooling_term = (
        (secondary_air - C.min_secondary_air) / C.secondary_air_span * C.secondary_air_cooling
    )
    mode_bonus = air_efficiency * C.mode2_bonus_gain if mode == 2 else 0.0

    sh5_target = (
        C.sh5_base + position_term + load_term + fouling_term + pci_temp_delta
        - cooling_term - air_cooling_term - mode_bonus
    )
    if noise is not None:
        sh5_target += (noise.random() - 0.5) * 10.0

    return SimulationResult(
        simulated_o2=simulated_o2,
        kp=kp,
        new_deposit=new_deposit,
        air_efficiency=air_efficiency,
        sh5_target=sh5_target,
        safe=sh5_target < C.sh5_safe_limit,
        secondary_air=secondary_air,
        zone_air=zone_air,
        total_air=total_air,
        dynamic_pci=dynamic_pci,
        pci_factor=pci_factor,
        steam_flow=steam_flow,
    )
