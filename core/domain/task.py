from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from core.domain.enums import RelationshipType


@dataclass(eq=False)
class Task:
    id: str
    name: str = ""
    duration_days: float = 0.0
    start_date: Optional[date] = None
    finish_date: Optional[date] = None
    total_float_days: Optional[float] = None
    free_float_days: Optional[float] = None
    predecessor_ids: List[str] = field(default_factory=list)
    is_placeholder: bool = False

    # Rebuildable reference cache, owned by TaskGraph.
    successors: List["Task"] = field(default_factory=list, repr=False)
    predecessors: List["Task"] = field(default_factory=list, repr=False)

    is_critical: bool = False
    is_critical_by_float: bool = False
    is_critical_by_rel: bool = False
    is_near_critical: bool = False
    total_float: float = math.inf

    @staticmethod
    def placeholder(task_id: str) -> "Task":
        """Zero-duration stand-in for a predecessor id with no task record."""
        return Task(id=task_id, name=str(task_id), is_placeholder=True)

    def reset_analysis(self) -> None:
        self.is_critical = False
        self.is_critical_by_float = False
        self.is_critical_by_rel = False
        self.is_near_critical = False
        self.total_float = math.inf


@dataclass(eq=False)
class Relationship:
    predecessor_id: str
    successor_id: str
    relationship_type: RelationshipType = RelationshipType.FINISH_TO_START
    lag_days: Optional[float] = None
    free_float_days: Optional[float] = None

    relationship_float: float = math.inf
    is_driving: bool = False
    is_critical: bool = False

    def reset_analysis(self) -> None:
        self.relationship_float = math.inf
        self.is_driving = False
        self.is_critical = False


__all__ = ["Task", "Relationship"]
