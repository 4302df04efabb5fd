from __future__ import annotations

import os
from dataclasses import dataclass


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return max(1, int(raw))
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return abs(float(raw))
    except ValueError:
        return default


@dataclass(frozen=True)
class TraversalLimits:
    """Safety bounds shared by every walk over the task graph."""

    max_depth: int = 1000
    max_iterations: int = 50_000
    max_chains: int = 10_000
    max_visited_tasks: int = 10_000
    float_tolerance: float = 0.001

    @classmethod
    def from_env(cls) -> "TraversalLimits":
        defaults = cls()
        return cls(
            max_depth=_env_int("CPL_MAX_DEPTH", defaults.max_depth),
            max_iterations=_env_int("CPL_MAX_ITERATIONS", defaults.max_iterations),
            max_chains=_env_int("CPL_MAX_CHAINS", defaults.max_chains),
            max_visited_tasks=_env_int("CPL_MAX_VISITED_TASKS", defaults.max_visited_tasks),
            float_tolerance=_env_float("CPL_FLOAT_TOLERANCE", defaults.float_tolerance),
        )


DEFAULT_LIMITS = TraversalLimits()

__all__ = ["TraversalLimits", "DEFAULT_LIMITS"]
