from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Set

from core.domain.enums import CriticalityMode, TraceDirection
from core.domain.task import Relationship
from core.exceptions import ValidationError

MISSING_REFERENCE = "MISSING_REFERENCE"
UNBOUNDED_TRAVERSAL = "UNBOUNDED_TRAVERSAL"
INVALID_TARGET = "INVALID_TARGET"
EMPTY_GRAPH = "EMPTY_GRAPH"
NO_PROJECT_FINISH = "NO_PROJECT_FINISH"


@dataclass(frozen=True)
class AnalysisConfig:
    mode: CriticalityMode = CriticalityMode.LONGEST_PATH
    float_threshold: float = 0.0
    show_near_critical: bool = True
    multi_path_enabled: bool = False
    selected_path_index: int = 1
    selected_task_id: Optional[str] = None
    trace_direction: TraceDirection = TraceDirection.BACKWARD
    show_all_tasks: bool = True

    def __post_init__(self) -> None:
        threshold = float(self.float_threshold or 0.0)
        if math.isnan(threshold) or threshold < 0:
            raise ValidationError(
                f"Float threshold must be zero or positive, got {self.float_threshold!r}.",
                code="FLOAT_THRESHOLD_INVALID",
            )
        object.__setattr__(self, "float_threshold", threshold)
        object.__setattr__(self, "mode", CriticalityMode.parse(self.mode))
        object.__setattr__(self, "trace_direction", TraceDirection.parse(self.trace_direction))

    @property
    def near_critical_enabled(self) -> bool:
        return self.show_near_critical and self.float_threshold > 0

    def with_changes(self, **changes) -> "AnalysisConfig":
        return replace(self, **changes)


@dataclass
class TaskAnalysis:
    task_id: str
    is_critical: bool = False
    is_critical_by_float: bool = False
    is_critical_by_rel: bool = False
    is_near_critical: bool = False
    total_float: float = math.inf

    def mark_critical(self) -> None:
        self.is_critical = True
        self.is_critical_by_float = True
        self.is_near_critical = False
        self.total_float = 0.0


@dataclass
class RelationshipAnalysis:
    relationship_float: float = math.inf
    is_driving: bool = False
    is_critical: bool = False


@dataclass
class Chain:
    """Driving chain: member ids (unordered), traversed relationships, summed duration."""

    task_ids: Set[str]
    relationships: List[Relationship]
    total_duration: float
    root_task_id: str
    terminal_task_id: str

    def summary(self, index: int) -> "ChainSummary":
        return ChainSummary(
            index=index,
            member_count=len(self.task_ids),
            total_duration=self.total_duration,
            root_task_id=self.root_task_id,
            terminal_task_id=self.terminal_task_id,
        )


@dataclass(frozen=True)
class ChainSummary:
    index: int
    member_count: int
    total_duration: float
    root_task_id: str
    terminal_task_id: str


@dataclass(frozen=True)
class AnalysisIssue:
    code: str
    message: str
    task_id: Optional[str] = None


@dataclass(frozen=True)
class TruncationNotice:
    operation: str
    task_id: Optional[str]
    bound: str
    limit: int


@dataclass
class TraceResult:
    direction: TraceDirection
    task_ids: Set[str] = field(default_factory=set)
    truncated: bool = False
    free_float: Dict[str, float] = field(default_factory=dict)


@dataclass
class CriticalityResult:
    mode: CriticalityMode
    tasks: Dict[str, TaskAnalysis]
    relationships: Dict[Relationship, RelationshipAnalysis]
    chains: List[ChainSummary] = field(default_factory=list)
    selected_chain: Optional[ChainSummary] = None
    selected_path_index: int = 0
    project_finish_task_id: Optional[str] = None
    selected_task_id: Optional[str] = None
    traced_task_ids: Set[str] = field(default_factory=set)
    issues: List[AnalysisIssue] = field(default_factory=list)

    def critical_task_ids(self) -> Set[str]:
        return {task_id for task_id, info in self.tasks.items() if info.is_critical}

    def near_critical_task_ids(self) -> Set[str]:
        return {task_id for task_id, info in self.tasks.items() if info.is_near_critical}

    def driving_relationships(self) -> List[Relationship]:
        return [rel for rel, info in self.relationships.items() if info.is_driving]

    def issue_codes(self) -> List[str]:
        return [issue.code for issue in self.issues]

    def visible_task_ids(self, show_all_tasks: bool = True) -> Set[str]:
        """Task ids a host should display for the current selection/toggle state."""
        highlighted = self.critical_task_ids() | self.near_critical_task_ids()
        if self.selected_task_id is not None:
            if show_all_tasks or self.mode == CriticalityMode.FLOAT_BASED:
                visible = set(self.traced_task_ids)
                if not show_all_tasks:
                    visible &= highlighted
            else:
                visible = highlighted
            visible.add(self.selected_task_id)
            return visible
        if show_all_tasks or not highlighted:
            return set(self.tasks)
        return highlighted


__all__ = [
    "MISSING_REFERENCE",
    "UNBOUNDED_TRAVERSAL",
    "INVALID_TARGET",
    "EMPTY_GRAPH",
    "NO_PROJECT_FINISH",
    "AnalysisConfig",
    "TaskAnalysis",
    "RelationshipAnalysis",
    "Chain",
    "ChainSummary",
    "AnalysisIssue",
    "TruncationNotice",
    "TraceResult",
    "CriticalityResult",
]
