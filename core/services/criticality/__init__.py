from .chains import ChainEnumerator
from .driving import DrivingRelationshipClassifier
from .engine import CriticalityEngine
from .float_based import FloatBasedCriticalityEngine
from .graph import TaskGraph
from .limits import DEFAULT_LIMITS, TraversalLimits
from .models import (
    AnalysisConfig,
    AnalysisIssue,
    Chain,
    ChainSummary,
    CriticalityResult,
    RelationshipAnalysis,
    TaskAnalysis,
    TraceResult,
    TruncationNotice,
)
from .near_critical import NearCriticalClassifier
from .selection import PathSelector
from .state import AnalysisState
from .tracing import Tracer

__all__ = [
    "CriticalityEngine",
    "TaskGraph",
    "AnalysisState",
    "DrivingRelationshipClassifier",
    "ChainEnumerator",
    "PathSelector",
    "NearCriticalClassifier",
    "Tracer",
    "FloatBasedCriticalityEngine",
    "TraversalLimits",
    "DEFAULT_LIMITS",
    "AnalysisConfig",
    "AnalysisIssue",
    "Chain",
    "ChainSummary",
    "CriticalityResult",
    "RelationshipAnalysis",
    "TaskAnalysis",
    "TraceResult",
    "TruncationNotice",
]
