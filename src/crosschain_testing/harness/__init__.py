from .meter import ExecutionMeter, GasSchedule, charge
from .acl import AccessControlList
from .stubs import FungibleTokenStub, TokenTransfer
from .receiver import Receiver, ReceivedMessage
from .event_store import JsonlEventStore
from .router import Router, RouterConfig
from .sender import Sender
from .estimator import (
    AdaptiveEstimator,
    EstimatorConfig,
    EstimationReport,
    EstimateState,
    InvalidTransition,
    WorkloadEstimate,
    next_budget,
)
from .invariants import InvariantViolation, evaluate_invariants
from .deployment import Deployment, deploy
