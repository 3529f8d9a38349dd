"""Solver parameters and their defaults.

Centralizes the tunable numbers of the batch pipeline so that the
configuration layer, the optimizer and the tests agree on them.
"""

from decimal import Decimal

# Routing depth: paths of 1..MAX_HOPS venues are explored
DEFAULT_MAX_HOPS = 3

# Upper bound on paths enumerated per (intent, chain); BFS returns shorter first
DEFAULT_MAX_PATHS = 64

# A swap may consume at most this share of the input-side reserve
DEFAULT_LIQUIDITY_FRACTION = Decimal("0.3")

# Cross-chain routes must beat the best local route by this fraction
DEFAULT_MIN_CROSS_CHAIN_IMPROVEMENT = Decimal("0.02")

# Venue snapshot time-to-live
DEFAULT_VENUE_TTL_SECONDS = 60.0

# Wall-clock budget for one batch run
DEFAULT_BATCH_TIMEOUT_MS = 5_000

# Timer period for the batch loop
DEFAULT_BATCH_INTERVAL_SECONDS = 10.0

# Cumulative allocation per venue slot, as a share of its reserve (global mode)
DEFAULT_SLOT_CAPACITY_FRACTION = Decimal("1")

# Bridge cost model: flat fee (output-token units) times an overhead factor
DEFAULT_BRIDGE_BASE_FEE = Decimal("0")
DEFAULT_BRIDGE_OVERHEAD_MULTIPLIER = Decimal("1.2")
DEFAULT_BRIDGE_FEE_TTL_SECONDS = 300.0

# Weights assumed for weighted venues that do not publish any
DEFAULT_WEIGHT = Decimal("0.5")

# Routing modes understood by the batch optimizer
MODE_DIRECT = "direct"
MODE_GLOBAL = "global"
ROUTING_MODES = frozenset({MODE_DIRECT, MODE_GLOBAL})

# Execution confidence: CoW settles with certainty, each pool hop and a
# bridge crossing add settlement risk
COW_CONFIDENCE = 1.0
POOL_HOP_CONFIDENCE = 0.95
CROSS_CHAIN_CONFIDENCE_FACTOR = 0.9

# Extra time the batch service waits past the optimizer's own deadline
SERVICE_TIMEOUT_GRACE_SECONDS = 1.0

# Error recorded on intents left unrouted when the batch deadline passes
BATCH_TIMEOUT_ERROR = "batch_timeout"
