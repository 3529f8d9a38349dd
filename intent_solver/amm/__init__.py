"""Swap curve implementations and single-venue simulation."""

from intent_solver.amm.base import AMM, SwapCalculator, SwapResult
from intent_solver.amm.constant_product import ConstantProductAMM, constant_product
from intent_solver.amm.simulator import (
    dynamic_fee,
    exceeds_liquidity_bound,
    is_candidate,
    simulate_swap,
)
from intent_solver.amm.weighted import WeightedAMM, weighted

__all__ = [
    # Base classes
    "AMM",
    "SwapCalculator",
    "SwapResult",
    # Curves
    "ConstantProductAMM",
    "constant_product",
    "WeightedAMM",
    "weighted",
    # Simulation
    "simulate_swap",
    "dynamic_fee",
    "exceeds_liquidity_bound",
    "is_candidate",
]
