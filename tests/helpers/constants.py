"""Shared token and chain constants for tests.

Tokens are plain symbols; the solver normalizes identifiers to lowercase.

Usage:
    from tests.helpers import ETH, USDC
    # or
    from tests.helpers.constants import ETH, USDC
"""

from datetime import UTC, datetime, timedelta

# =============================================================================
# Tokens
# =============================================================================

ETH = "eth"
USDC = "usdc"
DAI = "dai"
WBTC = "wbtc"
LINK = "link"

# =============================================================================
# Chains
# =============================================================================

MAINNET = 1
ARBITRUM = 42161
OPTIMISM = 10

# =============================================================================
# Times
# =============================================================================

# Fixed reference time so expiry checks are deterministic
NOW = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)
FAR_FUTURE = NOW + timedelta(hours=1)
PAST = NOW - timedelta(minutes=1)
