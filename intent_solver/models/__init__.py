"""Pydantic models for intents, venues and execution plans."""

from intent_solver.models.intent import Intent, IntentStatus
from intent_solver.models.plan import Execution, ExecutionPlan, MatchType
from intent_solver.models.request import SolveRequest
from intent_solver.models.types import Amount, ChainId, normalize_token
from intent_solver.models.venue import CurveType, Venue

__all__ = [
    # Types
    "Amount",
    "ChainId",
    "normalize_token",
    # Intents
    "Intent",
    "IntentStatus",
    # Venues
    "CurveType",
    "Venue",
    # Plans
    "Execution",
    "ExecutionPlan",
    "MatchType",
    # Requests
    "SolveRequest",
]
