"""
Cross-Chain Testing Framework

A deterministic harness for metered cross-chain message delivery and
gas limit estimation.
"""

__version__ = "0.1.0"

from .errors import (
    HarnessError,
    Unauthorized,
    InvalidMessage,
    InsufficientFunds,
    BudgetExhausted,
)

# Models
from .models.messaging import (
    Domain,
    Address,
    Message,
    DeliveryOutcome,
    DeliveryEvent,
    FailureReason,
    DomainKey,
    DomainAddressKey,
)

# Harness components
from .harness import (
    ExecutionMeter,
    GasSchedule,
    AccessControlList,
    FungibleTokenStub,
    Receiver,
    Router,
    RouterConfig,
    Sender,
    AdaptiveEstimator,
    EstimatorConfig,
    EstimationReport,
    JsonlEventStore,
    Deployment,
    deploy,
    evaluate_invariants,
)

from .scenarios import load_scenario, list_scenarios
from .report import render_report, report_to_dict

__all__ = [
    "__version__",
    # Errors
    "HarnessError",
    "Unauthorized",
    "InvalidMessage",
    "InsufficientFunds",
    "BudgetExhausted",
    # Models
    "Domain",
    "Address",
    "Message",
    "DeliveryOutcome",
    "DeliveryEvent",
    "FailureReason",
    "DomainKey",
    "DomainAddressKey",
    # Harness
    "ExecutionMeter",
    "GasSchedule",
    "AccessControlList",
    "FungibleTokenStub",
    "Receiver",
    "Router",
    "RouterConfig",
    "Sender",
    "AdaptiveEstimator",
    "EstimatorConfig",
    "EstimationReport",
    "JsonlEventStore",
    "Deployment",
    "deploy",
    "evaluate_invariants",
    # Scenarios / reporting
    "load_scenario",
    "list_scenarios",
    "render_report",
    "report_to_dict",
]
