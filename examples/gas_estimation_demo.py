#!/usr/bin/env python3
"""
Gas limit estimation example.

Deploys a sender, receiver and router on one chain selector, sends each
workload with a hardcoded gas limit, then resends with the measured gas
plus a 10% margin.
"""

import sys
import os

# Add the src directory to the path so we can import crosschain_testing
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from crosschain_testing import evaluate_invariants, load_scenario, render_report
from crosschain_testing.utils import LogConfig, logs


def main(scenario_name: str = "gas_limit_feedback"):
    """Run one scenario and print the gas usage report."""
    logs.configure(LogConfig(level="INFO"))

    scenario = load_scenario(scenario_name)
    print(f"Scenario: {scenario.name} ({scenario.scenario_id})")
    print(f"Chain selector: {scenario.chain_selector}")
    print(f"Workloads: {scenario.workloads}")
    print(f"Initial gas limit: {scenario.estimator.initial_budget}")
    print(f"Margin: {scenario.estimator.margin}")
    print()

    deployment = scenario.deploy()
    estimator = deployment.estimator(scenario.estimator)
    report = estimator.run(
        deployment.domain,
        deployment.receiver.address,
        scenario.workloads,
    )

    for line in render_report(report):
        print(line)

    events = deployment.router.list_events()
    violations = evaluate_invariants(events)
    print(f"\nDelivery events: {len(events)}")
    print(f"Invariant violations: {len(violations)}")
    for v in violations:
        print(f"  {v.code} seq={v.sequence}: {v.message}")

    return 0 if report.converged and not violations else 1


if __name__ == "__main__":
    sys.exit(main(*sys.argv[1:2]))
