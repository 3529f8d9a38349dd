"""Cross-chain cost estimation."""

from intent_solver.bridge.fees import BridgeFeeEstimator

__all__ = ["BridgeFeeEstimator"]
