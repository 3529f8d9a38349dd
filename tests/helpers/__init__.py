"""Test helpers module for shared test utilities.

- constants: Token symbols, chain ids and reference times
- factories: Intent and venue factory functions
"""

from tests.helpers.constants import (
    ARBITRUM,
    DAI,
    ETH,
    FAR_FUTURE,
    LINK,
    MAINNET,
    NOW,
    OPTIMISM,
    PAST,
    USDC,
    WBTC,
)
from tests.helpers.factories import make_intent, make_venue

__all__ = [
    # Constants
    "ETH",
    "USDC",
    "DAI",
    "WBTC",
    "LINK",
    "MAINNET",
    "ARBITRUM",
    "OPTIMISM",
    "NOW",
    "FAR_FUTURE",
    "PAST",
    # Factories
    "make_intent",
    "make_venue",
]
