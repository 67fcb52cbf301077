"""Explosion-risk detection for the incineration grate.

Three independent checks run on every evaluation:

  Rear fire:   barycenter beyond the burnout threshold.
  Low O2:      flue-gas oxygen below the unburnt-gas limit.
  Temp spike:  SH5 rising faster than allowed over a two-minute window.

Two or more simultaneous signatures are the pattern that preceded past
furnace puffs, so they add a compound explosion-risk signature on top of the
individual contributions. The result is advisory only.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Deque, List, Optional, Tuple

from boiler_ots.models.constants import ANOMALY_THRESHOLDS, AnomalyThresholds


class RiskLevel(str, Enum):
    NORMAL = "NORMAL"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"
    EMERGENCY = "EMERGENCY"


class AnomalyType(str, Enum):
    BARYCENTER_REAR = "BARYCENTER_REAR"
    O2_LOW = "O2_LOW"
    TEMP_SPIKE = "TEMP_SPIKE"
    EXPLOSION_RISK = "EXPLOSION_RISK"


@dataclass(frozen=True)
class AnomalySignature:
    type: AnomalyType
    timestamp: str
    value: float
    threshold: float
    severity: str  # "high" or "critical"
    message: str
    action: str


@dataclass(frozen=True)
class AnomalyState:
    risk_level: RiskLevel = RiskLevel.NORMAL
    active_anomalies: List[AnomalySignature] = field(default_factory=list)
    last_check: str = ""
    explosion_risk_score: float = 0.0
    temp_delta: float = 0.0

    @property
    def is_clear(self) -> bool:
        return not self.active_anomalies


def risk_level_for(score: float, limits: AnomalyThresholds = ANOMALY_THRESHOLDS) -> RiskLevel:
    if score >= limits.risk_score_emergency:
        return RiskLevel.EMERGENCY
    if score >= limits.risk_score_critical:
        return RiskLevel.CRITICAL
    if score >= limits.risk_score_warning:
        return RiskLevel.WARNING
    return RiskLevel.NORMAL


class AnomalyDetector:
    """Threshold detector with its own rolling buffer of (time, SH5) samples."""

    def __init__(self, limits: AnomalyThresholds = ANOMALY_THRESHOLDS):
        self.limits = limits
        self._samples: Deque[Tuple[float, float]] = deque(maxlen=limits.buffer_size)

    def reset(self) -> None:
        self._samples.clear()

    def __len__(self) -> int:
        return len(self._samples)

    def record(self, t: float, sh5: float) -> None:
        """Add a sample and drop those no longer needed for the window."""
        if self._samples and t < self._samples[-1][0]:
            # Clock went backwards (scenario reset): start a fresh window
            self._samples.clear()
        self._samples.append((float(t), float(sh5)))

        horizon = t - self.limits.temp_delta_window_s
        # Keep exactly one sample at or before the horizon as the reference
        while len(self._samples) >= 2 and self._samples[1][0] <= horizon:
            self._samples.popleft()

    def temp_delta(self) -> float:
        """SH5 rise between the newest sample and the one a full window earlier.

        Returns 0 when the buffer does not yet span the window.
        """
        if len(self._samples) < 2:
            return 0.0
        t_now, sh5_now = self._samples[-1]
        t_ref, sh5_ref = self._samples[0]
        if t_now - t_ref < self.limits.temp_delta_window_s:
            return 0.0
        return sh5_now - sh5_ref

    def evaluate(
        self,
        barycenter: float,
        o2: float,
        sh5: float,
        t: float,
        timestamp: Optional[str] = None,
    ) -> AnomalyState:
        """Record the SH5 sample and assess the current risk.

        Args:
            barycenter: Fire barycenter.
            o2: Flue-gas O2 (%).
            sh5: Superheater 5 temperature (deg C).
            t: Simulated time of the sample (seconds).
            timestamp: Label stored on signatures; defaults to now.
        """
        lim = self.limits
        stamp = timestamp or datetime.now().isoformat(timespec="seconds")
        self.record(t, sh5)
        delta = self.temp_delta()

        anomalies: List[AnomalySignature] = []
        score = 0.0

        if barycenter > lim.barycenter_max:
            critical = barycenter > lim.barycenter_critical
            anomalies.append(AnomalySignature(
                type=AnomalyType.BARYCENTER_REAR,
                timestamp=stamp,
                value=barycenter,
                threshold=lim.barycenter_max,
                severity="critical" if critical else "high",
                message=f"Fire too far back: barycenter {barycenter:.2f} > {lim.barycenter_max}",
                action="Reduce zone 3 air and shift primary air towards zones 1-2.",
            ))
            score += lim.score_critical if critical else lim.score_high

        if o2 < lim.o2_min:
            critical = o2 < lim.o2_critical
            anomalies.append(AnomalySignature(
                type=AnomalyType.O2_LOW,
                timestamp=stamp,
                value=o2,
                threshold=lim.o2_min,
                severity="critical" if critical else "high",
                message=f"Low O2: {o2:.1f}% < {lim.o2_min}% (unburnt gas risk)",
                action="Slow the pusher and raise secondary air until O2 recovers.",
            ))
            score += lim.score_critical if critical else lim.score_high

        if delta > lim.temp_delta_max:
            critical = delta > lim.temp_delta_critical
            minutes = lim.temp_delta_window_s / 60.0
            anomalies.append(AnomalySignature(
                type=AnomalyType.TEMP_SPIKE,
                timestamp=stamp,
                value=delta,
                threshold=lim.temp_delta_max,
                severity="critical" if critical else "high",
                message=f"SH5 rising fast: +{delta:.1f} C in {minutes:.0f} min",
                action="Check the fire position and prepare a soot blow.",
            ))
            score += lim.score_temp_critical if critical else lim.score_temp_high

        if len(anomalies) >= 2:
            every_check = len(anomalies) == 3
            kinds = ", ".join(a.type.value for a in anomalies)
            anomalies.append(AnomalySignature(
                type=AnomalyType.EXPLOSION_RISK,
                timestamp=stamp,
                value=float(len(anomalies)),
                threshold=2.0,
                severity="critical",
                message=f"Explosion risk signature: {kinds}",
                action="Cut the pusher, center the fire and call the shift supervisor.",
            ))
            score += lim.score_compound_all if every_check else lim.score_compound

        score = min(100.0, score)
        return AnomalyState(
            risk_level=risk_level_for(score, lim),
            active_anomalies=anomalies,
            last_check=stamp,
            explosion_risk_score=score,
            temp_delta=delta,
        )
