from .criticality import (
    AnalysisConfig,
    CriticalityEngine,
    CriticalityResult,
    TaskGraph,
    TraversalLimits,
)

__all__ = [
    "CriticalityEngine",
    "TaskGraph",
    "AnalysisConfig",
    "CriticalityResult",
    "TraversalLimits",
]
