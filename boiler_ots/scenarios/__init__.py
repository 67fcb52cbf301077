from boiler_ots.scenarios.library import SCENARIO_LIBRARY, Scenario, get_scenario

__all__ = ["SCENARIO_LIBRARY", "Scenario", "get_scenario"]
