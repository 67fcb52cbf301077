"""Abstract controller interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from boiler_ots.models.plant_state import ControlSetpoints, SimulationResult, ZoneConfiguration


@dataclass(frozen=True)
class ControlAction:
    """Machine-adjusted controls to commit with the tick that computed them."""

    pusher_speed: float
    zones: ZoneConfiguration


class Controller(ABC):
    """Base class for automated regulation loops."""

    @abstractmethod
    def decide(
        self,
        setpoints: ControlSetpoints,
        zones: ZoneConfiguration,
        result: SimulationResult,
    ) -> ControlAction:
        """Compute the control action from the latest step result.

        Returns:
            ControlAction with the new pusher speed and zone split.
        """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable controller name."""
