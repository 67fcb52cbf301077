from boiler_ots.models.constants import (
    ANOMALY_THRESHOLDS,
    COMBUSTION,
    DEFAULT_SETPOINTS,
    DEFAULT_ZONES,
    REGULATION,
    SETPOINT_RANGES,
    TIME_ACCELERATIONS,
    WASTE_CATEGORIES,
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

__all__ = [
    "ANOMALY_THRESHOLDS",
    "COMBUSTION",
    "DEFAULT_SETPOINTS",
    "DEFAULT_ZONES",
    "REGULATION",
    "SETPOINT_RANGES",
    "TIME_ACCELERATIONS",
    "WASTE_CATEGORIES",
    "WasteCategory",
    "ControlSetpoints",
    "SimulationResult",
    "WasteBedState",
    "WasteMix",
    "ZoneConfiguration",
    "StepInputs",
    "run_simulation",
]
