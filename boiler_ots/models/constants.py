"""Process constants, operating ranges, and detection thresholds for the boiler."""

from dataclasses import dataclass
from enum import Enum


class WasteCategory(str, Enum):
    """Declared waste family added on top of the standard household baseline."""

    WET = "WET"
    STANDARD = "STANDARD"
    BOOST = "BOOST"
    HIGH_POWER = "HIGH_POWER"
    INERT = "INERT"


@dataclass(frozen=True)
class WasteCategoryInfo:
    label: str
    pci: float          # Reference lower calorific value (kJ/kg)
    description: str


WASTE_CATEGORIES = {
    WasteCategory.WET: WasteCategoryInfo(
        "Wet (the extinguisher)", 4000.0, "Grass cuttings, bio-waste (800-1200 kcal)"
    ),
    WasteCategory.STANDARD: WasteCategoryInfo(
        "Standard (the base)", 8500.0, "Residual household waste (2000 kcal)"
    ),
    WasteCategory.BOOST: WasteCategoryInfo(
        "Boost (the turbo)", 13000.0, "Dry industrial waste, wood (3000 kcal)"
    ),
    WasteCategory.HIGH_POWER: WasteCategoryInfo(
        "High power (the flame)", 21000.0, "Plastics, HDPE (5000 kcal)"
    ),
    WasteCategory.INERT: WasteCategoryInfo(
        "Inert (the ballast)", 0.0, "Rubble, soil (0 kcal)"
    ),
}


@dataclass(frozen=True)
class CombustionConstants:
    """Empirically tuned constants of the closed-form combustion model."""

    # PCI normalisation and bounds (kJ/kg)
    pci_reference: float = 9000.0
    pci_min: float = 0.0
    pci_max: float = 25000.0
    pci_sensor_default: float = 9200.0

    # Nominal steam yield: 30.6 t/h at 50 % pusher speed
    nominal_steam: float = 30.6
    nominal_pusher: float = 50.0
    min_pusher_for_yield: float = 10.0

    # Air
    base_air_flow: float = 38000.0          # Nm3/h of total air at nominal load
    air_per_steam_ton: float = 1330.0       # Nm3 of air per t/h of steam (air-balance law)
    fixed_law_air_per_steam: float = 250.0  # Nm3/h of secondary air per t/h (fixed law)
    min_secondary_air: float = 5000.0
    secondary_air_span: float = 15000.0
    secondary_air_cooling: float = 30.0

    # Energy-balance virtual sensor
    steam_enthalpy: float = 2675.0          # kJ/kg
    air_density: float = 0.00129            # t/Nm3
    ambient_o2: float = 21.0                # %
    min_o2_consumed: float = 0.5

    # SH5 model (deg C)
    sh5_base: float = 625.0
    sh5_safe_limit: float = 620.0
    barycenter_center: float = 3.5
    position_gain: float = 15.0
    fouling_gain: float = 0.5
    pci_temp_gain: float = 200.0
    inert_absorption: float = 50.0
    o2_cooling_gain: float = 10.0
    mode2_bonus_gain: float = 20.0

    # O2 model (%)
    o2_base: float = 6.0
    o2_air_gain: float = 5.0
    o2_min: float = 0.5
    o2_max: float = 20.5
    inert_fuel_factor: float = 0.1
    inert_ratio_threshold: float = 0.8

    # Waste bed
    deposit_gain: float = 0.02
    kp_per_deposit: float = 1.5


COMBUSTION = CombustionConstants()


@dataclass(frozen=True)
class RegulationTuning:
    """Automatic air-balance (mode 2) loop parameters and tick-loop rates."""

    kp_reference: float = 100.0
    kp_band: float = 15.0
    kp_o2_band: float = 20.0
    pusher_down_step: float = 0.5
    pusher_up_step: float = 0.1
    o2_target: float = 6.0
    o2_pusher_deadband: float = 0.2
    o2_pusher_gain: float = 0.05
    o2_zone_deadband: float = 0.5
    o2_zone_gain: float = 0.02
    pusher_trim_range: tuple = (10.0, 90.0)
    zone2_range: tuple = (5.0, 60.0)
    zone3_floor: float = 5.0

    fouling_per_tick: float = 0.005
    soot_blow_step: float = 30.0
    base_alpha: float = 0.1
    snap_band: float = 0.5

    base_interval_s: float = 1.0
    min_period_s: float = 0.016
    history_capacity: int = 2000


REGULATION = RegulationTuning()


@dataclass(frozen=True)
class AnomalyThresholds:
    """Rear-fire / low-O2 / temperature-spike detection (tuned on a real incident)."""

    barycenter_max: float = 4.5
    barycenter_critical: float = 5.0
    o2_min: float = 4.0
    o2_critical: float = 3.0
    temp_delta_max: float = 10.0
    temp_delta_critical: float = 20.0
    temp_delta_window_s: float = 120.0
    buffer_size: int = 600

    score_high: float = 25.0
    score_critical: float = 40.0
    score_temp_high: float = 20.0
    score_temp_critical: float = 35.0
    score_compound: float = 20.0
    score_compound_all: float = 30.0

    risk_score_warning: float = 40.0
    risk_score_critical: float = 70.0
    risk_score_emergency: float = 90.0


ANOMALY_THRESHOLDS = AnomalyThresholds()


# Operator setpoint ranges: out-of-range input is clamped to these bounds
SETPOINT_RANGES = {
    "steam_target": (20.0, 40.0),          # t/h
    "measured_o2": (3.0, 10.0),            # %
    "kap": (-5000.0, 5000.0),              # Nm3/h manual offset
    "grate_speed": (0.0, 100.0),           # %
    "pusher_speed": (0.0, 100.0),          # %
    "total_primary_air": (10000.0, 30000.0),  # Nm3/h
    "zone": (0.0, 100.0),                  # % of primary air
    "sub_zone": (0.0, 100.0),              # % to the first roller of the pair
    "mix_ratio": (0.0, 1.0),
}

REGULATION_MODES = (1, 2)
TIME_ACCELERATIONS = (1, 5, 10, 30, 60)


# Nominal operating point
DEFAULT_ZONES = {
    "zone1": 61.0,
    "zone2": 19.0,
    "zone3": 20.0,
    "sub_zone1": 40.0,
    "sub_zone2": 60.0,
    "sub_zone3": 70.0,
}

DEFAULT_LOCKS = {1: False, 2: False, 3: True}

DEFAULT_SETPOINTS = {
    "steam_target": 30.6,
    "measured_o2": 6.0,
    "kap": 0.0,
    "mode": 2,
    "grate_speed": 50.0,
    "pusher_speed": 50.0,
    "total_primary_air": 28000.0,
    "unstable": False,
}

DEFAULT_WASTE_MIX = {"category": WasteCategory.STANDARD, "mix_ratio": 0.2}

DEFAULT_BED = {"deposit": 50.0, "fouling": 0.0}

DEFAULT_REAL_SH5 = 625.0
