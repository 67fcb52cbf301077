"""Fire barycenter: weighted position of the combustion front along the grate.

Low values mean the fire sits forward (drying zone), high values mean it has
drifted towards the burnout rollers where it overheats superheater 5.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from boiler_ots.models.plant_state import ZoneConfiguration
from boiler_ots.models.zones import calculate_roller_flows

ZONE_WEIGHTS = (1.5, 3.5, 5.5)
ROLLER_WEIGHTS = (1.0, 2.0, 3.0, 4.0, 5.0, 6.0)

# Returned when no air flows at all
DEFAULT_BARYCENTER = 3.5

# Blended PCI of the barycenter mix model: pure household (8500) to pure DIB (12000)
MIX_PCI_BASE = 8500.0
MIX_PCI_SPAN = 3500.0
MIX_PCI_NEUTRAL = 10000.0
MIX_PCI_SCALE = 2000.0
MAX_WEIGHT_SHIFT = 0.15


def _weighted_position(flows: Sequence[float], weights: Sequence[float]) -> float:
    total = sum(flows)
    if total <= 0:
        return DEFAULT_BARYCENTER
    weighted = sum(f * w for f, w in zip(flows, weights))
    return round(weighted / total, 2)


def calculate_barycenter(z1: float, z2: float, z3: float) -> float:
    """Zone-weighted barycenter: (1.5*Z1 + 3.5*Z2 + 5.5*Z3) / (Z1 + Z2 + Z3)."""
    return _weighted_position((z1, z2, z3), ZONE_WEIGHTS)


def calculate_pci_influence(dib_ratio: float) -> List[float]:
    """Roller weights shifted by the calorific value of the waste mix.

    A rich mix (high PCI) burns early, so rear weights shrink and the
    centroid moves forward; a poor, wet mix does the opposite. Each weight
    moves by at most 15 %.
    """
    pci = MIX_PCI_BASE + dib_ratio * MIX_PCI_SPAN
    shift_factor = (pci - MIX_PCI_NEUTRAL) / MIX_PCI_SCALE

    weights = []
    for idx, weight in enumerate(ROLLER_WEIGHTS):
        position_factor = (idx - 2.5) / 2.5  # -1 (R1) .. +1 (R6)
        weights.append(weight * (1.0 - position_factor * shift_factor * MAX_WEIGHT_SHIFT))
    return weights


def calculate_barycenter_with_waste(
    z1: float, z2: float, z3: float,
    sub1: float = 50.0, sub2: float = 50.0, sub3: float = 50.0,
    dib_ratio: float = 0.5,
) -> float:
    """Roller-weighted barycenter (weights 1..6) adjusted by the waste mix."""
    rollers = calculate_roller_flows(z1, z2, z3, sub1, sub2, sub3)
    return _weighted_position(rollers, calculate_pci_influence(dib_ratio))


def barycenter_for(zones: ZoneConfiguration, dib_ratio: float) -> float:
    return calculate_barycenter_with_waste(
        zones.zone1, zones.zone2, zones.zone3,
        zones.sub_zone1, zones.sub_zone2, zones.sub_zone3,
        dib_ratio,
    )


@dataclass(frozen=True)
class FireStatus:
    status: str
    color: tuple  # RGB, used by the schematic and dashboard


def fire_status(barycenter: float) -> FireStatus:
    if barycenter <= 0:
        return FireStatus("Out of service", (150, 160, 175))
    if barycenter < 2.0:
        return FireStatus("Forward fire (drying)", (70, 130, 220))
    if barycenter > 3.5:
        return FireStatus("Rear fire (SH5 risk)", (220, 50, 50))
    return FireStatus("Centered (optimal)", (50, 200, 100))
