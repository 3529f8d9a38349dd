"""Intent storage and lifecycle."""

from intent_solver.intents.pool import IntentPool

__all__ = ["IntentPool"]
