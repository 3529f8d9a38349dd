"""Solver configuration."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from intent_solver.constants import (
    DEFAULT_BATCH_INTERVAL_SECONDS,
    DEFAULT_BATCH_TIMEOUT_MS,
    DEFAULT_BRIDGE_BASE_FEE,
    DEFAULT_BRIDGE_OVERHEAD_MULTIPLIER,
    DEFAULT_LIQUIDITY_FRACTION,
    DEFAULT_MAX_HOPS,
    DEFAULT_MAX_PATHS,
    DEFAULT_MIN_CROSS_CHAIN_IMPROVEMENT,
    DEFAULT_SLOT_CAPACITY_FRACTION,
    DEFAULT_VENUE_TTL_SECONDS,
    MODE_DIRECT,
    ROUTING_MODES,
)
from intent_solver.errors import ConfigError

ENV_PREFIX = "INTENT_SOLVER_"


@dataclass(frozen=True)
class SolverConfig:
    """Centralized configuration for a batch run.

    Instances are immutable; adaptive tuning produces a new instance via
    `with_updates` instead of patching fields in place.

    Attributes:
        max_hops: Maximum venues in one route
        max_paths: Cap on enumerated paths per intent and chain
        liquidity_fraction: Max share of the input reserve a swap may consume
        min_cross_chain_improvement: Margin a cross-chain route must win by
        venue_ttl_seconds: Age after which the venue snapshot is refreshed
        batch_timeout_ms: Wall-clock budget for one batch run
        batch_interval_seconds: Timer period of the batch loop
        mode: Routing mode, "direct" (per-intent best swap) or "global" (MILP)
        slot_capacity_fraction: Share of a venue reserve that the global
            assignment may allocate across all intents
        dynamic_fees: If True, venue fees grow with utilization
        bridge_base_fee: Flat cross-chain cost in output-token units
        bridge_overhead_multiplier: Safety factor applied to bridge fees
    """

    max_hops: int = DEFAULT_MAX_HOPS
    max_paths: int = DEFAULT_MAX_PATHS
    liquidity_fraction: Decimal = DEFAULT_LIQUIDITY_FRACTION
    min_cross_chain_improvement: Decimal = DEFAULT_MIN_CROSS_CHAIN_IMPROVEMENT
    venue_ttl_seconds: float = DEFAULT_VENUE_TTL_SECONDS
    batch_timeout_ms: int = DEFAULT_BATCH_TIMEOUT_MS
    batch_interval_seconds: float = DEFAULT_BATCH_INTERVAL_SECONDS
    mode: str = MODE_DIRECT
    slot_capacity_fraction: Decimal = DEFAULT_SLOT_CAPACITY_FRACTION
    dynamic_fees: bool = False
    bridge_base_fee: Decimal = DEFAULT_BRIDGE_BASE_FEE
    bridge_overhead_multiplier: Decimal = DEFAULT_BRIDGE_OVERHEAD_MULTIPLIER

    def __post_init__(self) -> None:
        self.validate()

    @property
    def batch_timeout_seconds(self) -> float:
        return self.batch_timeout_ms / 1000

    def validate(self) -> None:
        """Check that every parameter is in range.

        Raises:
            ConfigError: If a value is out of range
        """
        if self.max_hops < 1:
            raise ConfigError(f"max_hops must be >= 1, got {self.max_hops}")
        if self.max_paths < 1:
            raise ConfigError(f"max_paths must be >= 1, got {self.max_paths}")
        if not Decimal(0) < self.liquidity_fraction <= Decimal(1):
            raise ConfigError(
                f"liquidity_fraction must be in (0, 1], got {self.liquidity_fraction}"
            )
        if self.min_cross_chain_improvement < 0:
            raise ConfigError(
                "min_cross_chain_improvement cannot be negative, "
                f"got {self.min_cross_chain_improvement}"
            )
        if self.venue_ttl_seconds <= 0:
            raise ConfigError(f"venue_ttl_seconds must be positive, got {self.venue_ttl_seconds}")
        if self.batch_timeout_ms <= 0:
            raise ConfigError(f"batch_timeout_ms must be positive, got {self.batch_timeout_ms}")
        if self.batch_interval_seconds <= 0:
            raise ConfigError(
                f"batch_interval_seconds must be positive, got {self.batch_interval_seconds}"
            )
        if self.mode not in ROUTING_MODES:
            raise ConfigError(f"mode must be one of {sorted(ROUTING_MODES)}, got {self.mode!r}")
        if self.slot_capacity_fraction <= 0:
            raise ConfigError(
                f"slot_capacity_fraction must be positive, got {self.slot_capacity_fraction}"
            )
        if self.bridge_base_fee < 0:
            raise ConfigError(f"bridge_base_fee cannot be negative, got {self.bridge_base_fee}")
        if self.bridge_overhead_multiplier < 1:
            raise ConfigError(
                "bridge_overhead_multiplier must be >= 1, "
                f"got {self.bridge_overhead_multiplier}"
            )

    def with_updates(self, **changes: Any) -> SolverConfig:
        """Return a copy with the given fields replaced (validated)."""
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> SolverConfig:
        """Build a config from INTENT_SOLVER_* environment variables.

        Unset variables keep their defaults. For example
        INTENT_SOLVER_MAX_HOPS=2 sets max_hops.

        Raises:
            ConfigError: If a variable cannot be parsed or is out of range
        """
        env = os.environ if environ is None else environ
        changes: dict[str, Any] = {}

        for field in dataclasses.fields(cls):
            raw = env.get(ENV_PREFIX + field.name.upper())
            if raw is None or raw.strip() == "":
                continue
            changes[field.name] = _parse_value(field.name, field.type, raw.strip())

        return cls(**changes)


def _parse_value(name: str, type_name: Any, raw: str) -> Any:
    """Parse one environment value according to the field's annotation."""
    # Annotations are strings under `from __future__ import annotations`
    type_str = type_name if isinstance(type_name, str) else type_name.__name__
    try:
        if type_str == "int":
            return int(raw)
        if type_str == "float":
            return float(raw)
        if type_str == "Decimal":
            return Decimal(raw)
        if type_str == "bool":
            return raw.lower() in ("true", "1", "yes")
    except (ValueError, InvalidOperation) as err:
        raise ConfigError(f"Invalid value for {name}: {raw!r}") from err
    return raw


# Default configuration instance
DEFAULT_SOLVER_CONFIG = SolverConfig()

__all__ = ["SolverConfig", "DEFAULT_SOLVER_CONFIG", "ENV_PREFIX"]
