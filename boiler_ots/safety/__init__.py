from boiler_ots.safety.anomaly_detector import (
    AnomalyDetector,
    AnomalySignature,
    AnomalyState,
    AnomalyType,
    RiskLevel,
    risk_level_for,
)
from boiler_ots.safety.statistics import WindowStats, analyze_history

__all__ = [
    "AnomalyDetector",
    "AnomalySignature",
    "AnomalyState",
    "AnomalyType",
    "RiskLevel",
    "risk_level_for",
    "WindowStats",
    "analyze_history",
]
