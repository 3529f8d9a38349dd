"""Batch optimization: CoW pass, route pass and global assignment."""

from intent_solver.optimizer.allocation import (
    AssignmentProblem,
    AssignmentSolution,
    Candidate,
    Constraint,
    ConstraintKey,
    ConstraintKind,
    VariableKey,
    solve_assignment,
)
from intent_solver.optimizer.batch import (
    BatchOptimizer,
    BatchPhase,
    cow_executions,
    route_execution,
)
from intent_solver.optimizer.competition import select_best_plan

__all__ = [
    # Global assignment
    "AssignmentProblem",
    "AssignmentSolution",
    "Candidate",
    "Constraint",
    "ConstraintKey",
    "ConstraintKind",
    "VariableKey",
    "solve_assignment",
    # Batch runs
    "BatchOptimizer",
    "BatchPhase",
    "cow_executions",
    "route_execution",
    "select_best_plan",
]
