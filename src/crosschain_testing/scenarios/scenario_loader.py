"""Scenario loader for gas limit estimation runs.

A scenario pins down everything a run needs:
- Chain selector shared by sender and receiver
- Workload sizes (iterations) to estimate
- Initial gas limit and safety margin
- Token, router fee and gas schedule settings
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Optional

from ..harness.deployment import Deployment, deploy
from ..harness.estimator import EstimatorConfig
from ..harness.event_store import JsonlEventStore
from ..harness.meter import GasSchedule
from ..harness.router import RouterConfig
from ..harness.stubs import FungibleTokenStub
from ..models.messaging import Domain


@dataclass
class TokenSettings:
    """Fee token parameters."""
    name: str = "ChainLink Token"
    symbol: str = "LINK"
    decimals: int = 18
    max_supply: Optional[int] = 10 ** 27
    sender_funding: int = 0


@dataclass
class Scenario:
    """A complete estimation scenario."""
    scenario_id: str
    name: str
    description: str
    chain_selector: Domain
    workloads: List[int]
    estimator: EstimatorConfig
    token: TokenSettings = field(default_factory=TokenSettings)
    router: RouterConfig = field(default_factory=RouterConfig)
    gas_schedule: GasSchedule = field(default_factory=GasSchedule)

    def deploy(self, store: Optional[JsonlEventStore] = None) -> Deployment:
        token = FungibleTokenStub(
            name=self.token.name,
            symbol=self.token.symbol,
            decimals=self.token.decimals,
            max_supply=self.token.max_supply,
        )
        return deploy(
            self.chain_selector,
            token=token,
            router_config=self.router,
            schedule=self.gas_schedule,
            sender_funding=self.token.sender_funding,
            store=store,
        )


class ScenarioLoader:
    """Loads and caches scenario files."""

    def __init__(self, scenarios_dir: Optional[Path] = None):
        if scenarios_dir is None:
            scenarios_dir = Path(__file__).parent
        self.scenarios_dir = Path(scenarios_dir)
        self._cache: Dict[str, Scenario] = {}

    def list_available(self) -> List[str]:
        """List available scenario files."""
        return sorted(f.stem for f in self.scenarios_dir.glob("*.json"))

    def load(self, scenario_name: str) -> Scenario:
        """Load a scenario by name."""
        if scenario_name in self._cache:
            return self._cache[scenario_name]

        path = self.scenarios_dir / f"{scenario_name}.json"
        if not path.exists():
            raise FileNotFoundError(f"Scenario not found: {scenario_name}")

        with open(path) as f:
            data = json.load(f)

        scenario = self.parse(data)
        self._cache[scenario_name] = scenario
        return scenario

    @staticmethod
    def parse(data: Dict) -> Scenario:
        """Parse a scenario from already-decoded JSON."""
        estimator = EstimatorConfig(
            initial_budget=int(data.get("initial_budget", EstimatorConfig.initial_budget)),
            # Margin kept as a string in JSON so 1.10 stays exact
            margin=Decimal(str(data.get("margin", EstimatorConfig.margin))),
        )

        tok_data = data.get("token", {})
        defaults = TokenSettings()
        token = TokenSettings(
            name=tok_data.get("name", defaults.name),
            symbol=tok_data.get("symbol", defaults.symbol),
            decimals=tok_data.get("decimals", defaults.decimals),
            max_supply=tok_data.get("max_supply", defaults.max_supply),
            sender_funding=int(tok_data.get("sender_funding", 0)),
        )

        rt_data = data.get("router", {})
        router = RouterConfig(
            flat_fee=int(rt_data.get("flat_fee", 0)),
            fee_per_budget_unit=int(rt_data.get("fee_per_budget_unit", 0)),
        )

        gs_data = data.get("gas_schedule", {})
        schedule = GasSchedule(**{k: int(v) for k, v in gs_data.items()})

        workloads = [int(n) for n in data["workloads"]]
        if any(n < 0 for n in workloads):
            raise ValueError("workloads must be >= 0")

        return Scenario(
            scenario_id=data["scenario_id"],
            name=data["name"],
            description=data.get("description", ""),
            chain_selector=Domain(int(data["chain_selector"])),
            workloads=workloads,
            estimator=estimator,
            token=token,
            router=router,
            gas_schedule=schedule,
        )


# Module-level convenience functions
_default_loader: Optional[ScenarioLoader] = None


def _get_loader() -> ScenarioLoader:
    global _default_loader
    if _default_loader is None:
        _default_loader = ScenarioLoader()
    return _default_loader


def load_scenario(name: str) -> Scenario:
    """Load a built-in scenario by name."""
    return _get_loader().load(name)


def list_scenarios() -> List[str]:
    """List built-in scenarios."""
    return _get_loader().list_available()
