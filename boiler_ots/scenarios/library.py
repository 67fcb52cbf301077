"""Pre-built training scenarios with progressive difficulty."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from boiler_ots.models.constants import DEFAULT_ZONES, WasteCategory
from boiler_ots.models.plant_state import (
    ControlSetpoints,
    WasteBedState,
    WasteMix,
    ZoneConfiguration,
)


@dataclass(frozen=True)
class Scenario:
    """A training scenario: initial plant conditions plus metadata."""

    name: str
    description: str
    difficulty: str  # "Beginner", "Intermediate", "Advanced", "Custom"
    category: WasteCategory = WasteCategory.STANDARD
    mix_ratio: float = 0.2
    fouling: float = 0.0
    deposit: float = 50.0
    zones: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_ZONES))
    setpoints: Dict[str, Any] = field(default_factory=dict)

    def control_setpoints(self) -> ControlSetpoints:
        return ControlSetpoints.from_dict(self.setpoints)

    def zone_configuration(self) -> ZoneConfiguration:
        return ZoneConfiguration.from_dict({**DEFAULT_ZONES, **self.zones})

    def waste_mix(self) -> WasteMix:
        return WasteMix(self.category, self.mix_ratio).clamped()

    def bed(self) -> WasteBedState:
        return WasteBedState(deposit=self.deposit, fouling=self.fouling)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "setpoints": self.control_setpoints().to_dict(),
            "zones": self.zone_configuration().to_dict(),
            "waste_mix": self.waste_mix().to_dict(),
            "fouling": self.fouling,
            "deposit": self.deposit,
        }


SCENARIO_LIBRARY = [
    Scenario(
        name="Normal Operations",
        description="Nominal household waste, automatic air balance. Keep SH5 steady.",
        difficulty="Beginner",
    ),
    Scenario(
        name="Manual Control",
        description="Fixed air law (mode 1). Trim secondary air and pusher by hand.",
        difficulty="Beginner",
        setpoints={"mode": 1},
    ),
    Scenario(
        name="Wet Waste",
        description="Grass cuttings and bio-waste dampen the fire. Watch steam output.",
        difficulty="Intermediate",
        category=WasteCategory.WET,
        mix_ratio=0.6,
    ),
    Scenario(
        name="High-PCI Boost",
        description="Plastics load raises the calorific value. SH5 will climb.",
        difficulty="Intermediate",
        category=WasteCategory.HIGH_POWER,
        mix_ratio=0.5,
    ),
    Scenario(
        name="Heavy Fouling",
        description="Exchanger surfaces fouled. Decide when to soot-blow.",
        difficulty="Intermediate",
        fouling=60.0,
    ),
    Scenario(
        name="Inert Ballast",
        description="Rubble and soil in the hopper. The fire starves.",
        difficulty="Advanced",
        category=WasteCategory.INERT,
        mix_ratio=0.9,
    ),
    Scenario(
        name="Rear Fire",
        description="Air pushed to the back of the grate with a rich load. Re-center the fire.",
        difficulty="Advanced",
        category=WasteCategory.BOOST,
        mix_ratio=0.8,
        fouling=30.0,
        zones={"zone1": 15.0, "zone2": 25.0, "zone3": 60.0,
               "sub_zone1": 50.0, "sub_zone2": 40.0, "sub_zone3": 20.0},
        setpoints={"measured_o2": 4.0, "pusher_speed": 70.0},
    ),
    Scenario(
        name="Custom",
        description="Start from the nominal point and set your own conditions.",
        difficulty="Custom",
    ),
]


def get_scenario(name: str) -> Optional[Scenario]:
    """Look up a scenario by name."""
    for s in SCENARIO_LIBRARY:
        if s.name == name:
            return s
    return None
