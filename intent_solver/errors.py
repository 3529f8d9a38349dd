"""Error classes for the intent solver.

Infeasible swaps are not errors: simulation returns None for them and the
caller moves on to the next candidate. These exceptions cover the failures
that have to cross a component boundary.
"""


class SolverError(Exception):
    """Base error for solver operations."""

    pass


class ConfigError(SolverError):
    """A configuration value is missing or out of range."""

    pass


class VenueFetchError(SolverError):
    """The external chain reader could not produce a venue list."""

    pass


class IntentEvaluationError(SolverError):
    """A single intent could not be evaluated (malformed, unknown token)."""

    pass


class AllocationError(SolverError):
    """The global assignment problem could not be solved."""

    pass


class IntentStateError(SolverError):
    """An intent lifecycle transition was not allowed."""

    pass
