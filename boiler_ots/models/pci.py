"""Calorific value (PCI) estimation.

Two estimators coexist and are never reconciled:

* ``calculate_dynamic_pci`` starts from the waste the crane operator declared
  and corrects it by the observed steam yield per unit of pusher speed.
* ``calculate_estimated_pci`` is a virtual sensor that infers PCI from an
  energy balance of steam produced versus oxygen consumed.

``classify_pci`` maps either value back onto a waste category so the two can
be compared against the declared one.
"""

from __future__ import annotations

from collections import deque
from typing import Deque, Optional

import numpy as np

from boiler_ots.models.constants import COMBUSTION, WASTE_CATEGORIES, WasteCategory


def get_pci_for_category(category: WasteCategory) -> float:
    info = WASTE_CATEGORIES.get(category)
    return info.pci if info is not None else WASTE_CATEGORIES[WasteCategory.STANDARD].pci


def _clamp_pci(pci: float) -> float:
    return float(np.clip(pci, COMBUSTION.pci_min, COMBUSTION.pci_max))


def calculate_dynamic_pci(
    category: WasteCategory,
    steam_flow: float,
    pusher_speed: float,
    mix_ratio: float = 1.0,
) -> float:
    """Declared-mix PCI corrected by the steam/pusher yield.

    Args:
        category: Waste family added to the STANDARD baseline.
        steam_flow: Steam flow (t/h).
        pusher_speed: Feed pusher speed (%), floored at 10 for the yield.
        mix_ratio: Share (0-1) of the selected category in the blend.

    Returns:
        PCI in kJ/kg, clamped to [0, 25000]. Pure inert waste is exactly 0.
    """
    if category == WasteCategory.INERT and mix_ratio == 1.0:
        return 0.0

    base_pci = get_pci_for_category(WasteCategory.STANDARD)
    pci_theoretical = base_pci
    if category != WasteCategory.STANDARD:
        target_pci = get_pci_for_category(category)
        pci_theoretical = base_pci * (1.0 - mix_ratio) + target_pci * mix_ratio

    safe_pusher = max(COMBUSTION.min_pusher_for_yield, pusher_speed)
    current_yield = steam_flow / safe_pusher
    nominal_yield = COMBUSTION.nominal_steam / COMBUSTION.nominal_pusher
    correction = current_yield / nominal_yield

    return _clamp_pci(pci_theoretical * correction)


def calculate_estimated_pci(steam_flow: float, total_air_flow: float, o2_real: float) -> float:
    """Virtual PCI sensor from steam output versus oxygen consumed.

    PCI = steam * enthalpy / (air mass * O2 consumed / 21), with steam in t/h
    and air mass in t/h. Returns 9200 kJ/kg when steam or air is not positive
    or when less than 0.5 % of oxygen was consumed.
    """
    o2_consumed = COMBUSTION.ambient_o2 - o2_real
    if steam_flow <= 0 or total_air_flow <= 0 or o2_consumed <= COMBUSTION.min_o2_consumed:
        return COMBUSTION.pci_sensor_default

    steam_energy = steam_flow * COMBUSTION.steam_enthalpy
    air_mass = total_air_flow * COMBUSTION.air_density
    pci = steam_energy / (air_mass * (o2_consumed / COMBUSTION.ambient_o2))
    return float(round(_clamp_pci(pci)))


def classify_pci(pci: float) -> WasteCategory:
    """Map a PCI value onto the waste category it most resembles."""
    if pci <= 0:
        return WasteCategory.INERT
    if pci < 7000:
        return WasteCategory.WET
    if pci < 11000:
        return WasteCategory.STANDARD
    if pci < 16000:
        return WasteCategory.BOOST
    return WasteCategory.HIGH_POWER


class MovingAverage:
    """Fixed-window FIFO mean used to steady displayed PCI and barycenter values."""

    def __init__(self, window: int = 5):
        self.window = max(1, int(window))
        self._values: Deque[float] = deque(maxlen=self.window)

    def push(self, value: float) -> float:
        self._values.append(float(value))
        return self.value

    @property
    def value(self) -> Optional[float]:
        if not self._values:
            return None
        return float(np.mean(self._values))

    def reset(self) -> None:
        self._values.clear()

    def __len__(self) -> int:
        return len(self._values)
