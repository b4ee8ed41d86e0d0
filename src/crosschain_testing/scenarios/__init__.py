"""Gas limit estimation scenario definitions.

Each JSON file in this directory describes one run: chain selector,
workload sizes, initial gas limit, margin and fee settings.
"""

from .scenario_loader import (
    Scenario,
    ScenarioLoader,
    TokenSettings,
    load_scenario,
    list_scenarios,
)

__all__ = [
    "Scenario",
    "ScenarioLoader",
    "TokenSettings",
    "load_scenario",
    "list_scenarios",
]
