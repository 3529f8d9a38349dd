"""Pytest configuration and fixtures."""

import pytest

from intent_solver.config import SolverConfig
from intent_solver.models.venue import Venue
from intent_solver.optimizer.batch import BatchOptimizer
from intent_solver.venues.snapshot import VenueSnapshot
from tests.helpers import ARBITRUM, DAI, ETH, NOW, USDC, make_venue


@pytest.fixture
def now():
    """Fixed reference time for expiry checks."""
    return NOW


@pytest.fixture
def eth_usdc_venue() -> Venue:
    """ETH/USDC constant product venue on mainnet (1 ETH ~ 2000 USDC)."""
    return make_venue("eth-usdc", ETH, USDC, "100", "200000")


@pytest.fixture
def mainnet_venues() -> list[Venue]:
    """ETH/USDC, ETH/DAI and DAI/USDC on mainnet."""
    return [
        make_venue("eth-usdc", ETH, USDC, "100", "200000"),
        make_venue("eth-dai", ETH, DAI, "100", "200000"),
        make_venue("dai-usdc", DAI, USDC, "1000000", "1000000", fee="0.0005"),
    ]


@pytest.fixture
def arbitrum_venues() -> list[Venue]:
    """A deeper ETH/USDC venue on Arbitrum."""
    return [make_venue("arb-eth-usdc", ETH, USDC, "1000", "2200000", chain_id=ARBITRUM)]


@pytest.fixture
def snapshot(mainnet_venues) -> VenueSnapshot:
    return VenueSnapshot(venues=tuple(mainnet_venues))


@pytest.fixture
def config() -> SolverConfig:
    return SolverConfig()


@pytest.fixture
def optimizer(config) -> BatchOptimizer:
    return BatchOptimizer(config)


@pytest.fixture
def global_optimizer() -> BatchOptimizer:
    return BatchOptimizer(SolverConfig(mode="global"))
