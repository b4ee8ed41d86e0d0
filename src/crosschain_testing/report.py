"""Gas usage report rendering.

Answers the operator question: "What gas limit should each workload be sent with?"
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

from .harness.estimator import EstimationReport, WorkloadEstimate


REPORT_TITLE = "Final Gas Usage Report:"


def _estimate_to_dict(est: WorkloadEstimate) -> Dict[str, Any]:
    return {
        "iterations": est.iterations,
        "initial_budget": est.initial_budget,
        "gas_used": est.consumed,
        "new_gas_limit": est.next_budget,
        "resend_gas_used": est.resend_consumed,
        "state": est.state.value,
        "cost_drift": est.cost_drift,
        "succeeded": est.succeeded,
    }


def report_to_dict(report: EstimationReport) -> Dict[str, Any]:
    return {
        "margin": str(report.margin),
        "converged": report.converged,
        "estimates": [_estimate_to_dict(e) for e in report.estimates],
    }


def report_to_json(report: EstimationReport, indent: int = 2) -> str:
    return json.dumps(report_to_dict(report), indent=indent)


def render_report(report: EstimationReport) -> List[str]:
    lines = [REPORT_TITLE]
    for est in report.estimates:
        lines.append(
            f"Number of iterations {est.iterations} - Gas used: {est.consumed} "
            f"- New Gas Limit: {est.next_budget}"
        )
    for est in report.failures:
        if est.cost_drift:
            lines.append(
                f"FAILED iterations {est.iterations}: cost drifted "
                f"{est.consumed} -> {est.resend_consumed}"
            )
        else:
            lines.append(
                f"FAILED iterations {est.iterations}: resend ended {est.state.value} "
                f"at gas limit {est.next_budget}"
            )
    return lines
