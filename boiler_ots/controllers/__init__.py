from boiler_ots.controllers.base import ControlAction, Controller
from boiler_ots.controllers.air_balance import AirBalanceController, shift_zone2_to_zone3

__all__ = ["ControlAction", "Controller", "AirBalanceController", "shift_zone2_to_zone3"]
