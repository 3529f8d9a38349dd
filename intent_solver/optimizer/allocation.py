"""Global assignment of intents to routes as a binary program.

Problem Formulation
-------------------
Variables: one binary x(i, p) per (intent i, candidate route p).

Objective: maximize sum of x(i, p) * value(i, p), where value is the route's
utility net of gas and bridge costs. Only candidates with a positive value
are ever added, so an empty assignment is always feasible and never better
than a non-empty one.

Constraints:
- intent: sum over p of x(i, p) <= 1 for every intent i
- venue_slot: for every (venue, input token) slot, the input amounts of all
  selected hops through it stay within the slot capacity, which is the
  reserve of the input token times `slot_capacity_fraction`

Capacity rows are scaled by their bound before solving so that coefficients
are O(1) whatever the token decimals.
"""

from __future__ import annotations

import decimal
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

import numpy as np
import structlog
from scipy.optimize import Bounds, LinearConstraint, milp

from intent_solver.constants import DEFAULT_SLOT_CAPACITY_FRACTION
from intent_solver.errors import AllocationError
from intent_solver.models.intent import Intent
from intent_solver.models.types import DECIMAL_HIGH_PREC_CONTEXT, to_float
from intent_solver.routing.types import Route

logger = structlog.get_logger()


class ConstraintKind(str, Enum):
    """Kinds of rows in the assignment problem."""

    INTENT = "intent"
    VENUE_SLOT = "venue_slot"


@dataclass(frozen=True)
class VariableKey:
    """Identifies the binary variable for one candidate route of an intent."""

    intent_id: str
    path_index: int


@dataclass(frozen=True)
class ConstraintKey:
    """Identifies one constraint row.

    `id` is the intent id for intent rows and (venue id, input token) for
    venue slot rows.
    """

    kind: ConstraintKind
    id: str | tuple[str, str]


@dataclass
class Constraint:
    """A `sum(coefficient * x) <= upper_bound` row."""

    upper_bound: Decimal
    coefficients: dict[VariableKey, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class Candidate:
    """A route an intent could be settled through.

    Attributes:
        intent: The intent being routed
        route: Evaluated route, on the intent's chain or another one
        bridge_cost: Cross-chain cost in output-token units (0 when local)
    """

    intent: Intent
    route: Route
    bridge_cost: Decimal = Decimal(0)

    @property
    def requires_cross_chain(self) -> bool:
        return self.route.chain_id != self.intent.chain_id

    @property
    def total_cost(self) -> Decimal:
        return self.route.gas_cost + self.bridge_cost

    @property
    def net_value(self) -> Decimal:
        """Final output net of gas and bridge costs."""
        return self.route.amount_out - self.total_cost

    @property
    def objective_value(self) -> Decimal:
        """Route utility net of gas and bridge costs."""
        return self.route.utility - self.total_cost


class AssignmentProblem:
    """Incrementally built assignment problem.

    Usage:
        problem = AssignmentProblem()
        for candidate in candidates:
            problem.add_candidate(candidate)
        solution = solve_assignment(problem)
    """

    def __init__(self, slot_capacity_fraction: Decimal = DEFAULT_SLOT_CAPACITY_FRACTION) -> None:
        self.slot_capacity_fraction = slot_capacity_fraction
        self.variables: list[VariableKey] = []
        self.candidates: dict[VariableKey, Candidate] = {}
        self.constraints: dict[ConstraintKey, Constraint] = {}
        self._path_counts: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self.variables)

    @property
    def objective(self) -> dict[VariableKey, Decimal]:
        return {key: self.candidates[key].objective_value for key in self.variables}

    def add_candidate(self, candidate: Candidate) -> VariableKey:
        """Add a candidate route as a new variable and update its rows.

        Raises:
            AllocationError: If the candidate has no route hops
        """
        if not candidate.route.hops:
            raise AllocationError(f"Candidate for {candidate.intent.id} has no hops")

        intent_id = candidate.intent.id
        path_index = self._path_counts.get(intent_id, 0)
        self._path_counts[intent_id] = path_index + 1

        key = VariableKey(intent_id=intent_id, path_index=path_index)
        self.variables.append(key)
        self.candidates[key] = candidate

        intent_row = self.constraints.setdefault(
            ConstraintKey(ConstraintKind.INTENT, intent_id),
            Constraint(upper_bound=Decimal(1)),
        )
        intent_row.coefficients[key] = Decimal(1)

        for hop in candidate.route.hops:
            slot_key = ConstraintKey(ConstraintKind.VENUE_SLOT, (hop.venue.id, hop.token_in))
            slot_row = self.constraints.get(slot_key)
            if slot_row is None:
                reserve_in, _ = hop.venue.get_reserves(hop.token_in)
                with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
                    capacity = reserve_in * self.slot_capacity_fraction
                slot_row = Constraint(upper_bound=capacity)
                self.constraints[slot_key] = slot_row
            # A path never reuses a venue, so each slot sees a key at most once
            slot_row.coefficients[key] = hop.amount_in

        return key

    def candidates_for(self, intent_id: str) -> list[VariableKey]:
        return [k for k in self.variables if k.intent_id == intent_id]


@dataclass
class AssignmentSolution:
    """Selected variables of a solved assignment problem."""

    selected: list[VariableKey] = field(default_factory=list)
    objective_value: float = 0.0
    status: int = 0
    message: str = ""

    def is_selected(self, key: VariableKey) -> bool:
        return key in self.selected


def _build_matrices(
    problem: AssignmentProblem,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Build (c, A, b) for `min c @ x subject to A @ x <= b`."""
    index = {key: i for i, key in enumerate(problem.variables)}
    n_vars = len(problem.variables)

    # milp minimizes, so we negate
    c = np.array([-to_float(problem.candidates[k].objective_value) for k in problem.variables])

    rows = []
    bounds = []
    for constraint_key, constraint in problem.constraints.items():
        row = np.zeros(n_vars)
        if constraint_key.kind == ConstraintKind.VENUE_SLOT:
            scale = constraint.upper_bound
            for key, coefficient in constraint.coefficients.items():
                with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
                    row[index[key]] = to_float(coefficient / scale)
            bounds.append(1.0)
        else:
            for key, coefficient in constraint.coefficients.items():
                row[index[key]] = to_float(coefficient)
            bounds.append(to_float(constraint.upper_bound))
        rows.append(row)

    return c, np.array(rows), np.array(bounds)


def solve_assignment(
    problem: AssignmentProblem,
    time_limit: float | None = None,
) -> AssignmentSolution:
    """Solve the assignment problem with scipy's MILP solver (HiGHS).

    Args:
        problem: The built assignment problem
        time_limit: Solver wall-clock limit in seconds; the best feasible
            assignment found so far is used when it is hit

    Returns:
        AssignmentSolution with the selected variables in problem order

    Raises:
        AllocationError: If the solver finds no feasible assignment
    """
    if not problem.variables:
        return AssignmentSolution()

    c, A, b = _build_matrices(problem)
    options = {}
    if time_limit is not None:
        options["time_limit"] = max(time_limit, 0.01)

    try:
        result = milp(
            c,
            constraints=LinearConstraint(A, -np.inf, b),
            integrality=np.ones(len(problem.variables)),
            bounds=Bounds(0, 1),
            options=options,
        )
    except ValueError as e:
        raise AllocationError(f"Assignment problem rejected by solver: {e}") from e

    if result.x is None:
        raise AllocationError(
            f"Assignment problem has no solution (status {result.status}): {result.message}"
        )

    selected = [key for key, value in zip(problem.variables, result.x) if value > 0.5]

    logger.debug(
        "assignment_solved",
        variables=len(problem.variables),
        constraints=len(problem.constraints),
        selected=len(selected),
        status=result.status,
        objective=-float(result.fun),
    )

    return AssignmentSolution(
        selected=selected,
        objective_value=-float(result.fun),
        status=int(result.status),
        message=str(result.message),
    )


__all__ = [
    "AssignmentProblem",
    "AssignmentSolution",
    "Candidate",
    "Constraint",
    "ConstraintKey",
    "ConstraintKind",
    "VariableKey",
    "solve_assignment",
]
