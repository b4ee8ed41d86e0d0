"""Pytest configuration and fixtures for crosschain-testing."""

import pytest

from crosschain_testing.harness import (
    AdaptiveEstimator,
    EstimatorConfig,
    FungibleTokenStub,
    GasSchedule,
    Receiver,
    Router,
    deploy,
)
from crosschain_testing.utils import LogConfig, logs

from tests.test_constants import CHAIN_SELECTOR, INITIAL_GAS_LIMIT, MARGIN, OWNER


# =============================================================================
# Pytest configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "prio1: Priority 1 (critical) tests")
    config.addinivalue_line("markers", "prio2: Priority 2 (important) tests")
    config.addinivalue_line("markers", "case(id): Test case identifier (e.g., XC-RT-001)")
    logs.configure(LogConfig(level="WARNING"))


# =============================================================================
# Deployment fixtures
# =============================================================================

@pytest.fixture
def deployment():
    """Token, router, sender and receiver with allowlists set up."""
    return deploy(CHAIN_SELECTOR, owner=OWNER)


@pytest.fixture
def router(deployment):
    return deployment.router


@pytest.fixture
def sender(deployment):
    return deployment.sender


@pytest.fixture
def receiver(deployment):
    return deployment.receiver


@pytest.fixture
def token(deployment):
    return deployment.token


@pytest.fixture
def estimator(deployment):
    """AdaptiveEstimator with the reference 400000 / 1.10 settings."""
    return AdaptiveEstimator(
        deployment.sender,
        EstimatorConfig(initial_budget=INITIAL_GAS_LIMIT, margin=MARGIN),
    )


# =============================================================================
# Standalone component fixtures
# =============================================================================

@pytest.fixture
def schedule():
    return GasSchedule()


@pytest.fixture
def bare_router():
    """Router with nothing registered."""
    return Router()


@pytest.fixture
def lone_receiver(schedule):
    """Receiver allowlisting CHAIN_SELECTOR and the default 'sender' address."""
    rcv = Receiver("lone-receiver", owner=OWNER, schedule=schedule)
    rcv.allowlist_source_chain(OWNER, CHAIN_SELECTOR, True)
    rcv.allowlist_sender(OWNER, "sender", True)
    return rcv


@pytest.fixture
def funded_token():
    tok = FungibleTokenStub()
    tok.mint("sender", 10 ** 18)
    return tok
