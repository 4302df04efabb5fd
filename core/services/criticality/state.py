from __future__ import annotations

import logging
from typing import Dict, List, Optional

from core.domain.task import Relationship
from core.services.criticality.graph import TaskGraph
from core.services.criticality.models import (
    UNBOUNDED_TRAVERSAL,
    AnalysisIssue,
    RelationshipAnalysis,
    TaskAnalysis,
    TruncationNotice,
)

logger = logging.getLogger(__name__)


class AnalysisState:
    """Derived values of one recomputation, keyed by task id and relationship record."""

    def __init__(self, graph: TaskGraph):
        self.graph = graph
        self.tasks: Dict[str, TaskAnalysis] = {}
        self.relationships: Dict[Relationship, RelationshipAnalysis] = {}
        self.issues: List[AnalysisIssue] = []
        self.truncations: List[TruncationNotice] = []
        self.reset()

    def reset(self) -> None:
        self.tasks = {task.id: TaskAnalysis(task_id=task.id) for task in self.graph}
        self.relationships = {rel: RelationshipAnalysis() for rel in self.graph.relationships}
        self.issues = []
        self.truncations = []

    def task(self, task_id: str) -> TaskAnalysis:
        info = self.tasks.get(task_id)
        if info is None:
            info = TaskAnalysis(task_id=task_id)
            self.tasks[task_id] = info
        return info

    def relationship(self, rel: Relationship) -> RelationshipAnalysis:
        info = self.relationships.get(rel)
        if info is None:
            info = RelationshipAnalysis()
            self.relationships[rel] = info
        return info

    def is_driving(self, rel: Relationship) -> bool:
        info = self.relationships.get(rel)
        return info is not None and info.is_driving

    def is_critical(self, task_id: str) -> bool:
        info = self.tasks.get(task_id)
        return info is not None and info.is_critical

    def record_issue(self, code: str, message: str, task_id: Optional[str] = None) -> None:
        self.issues.append(AnalysisIssue(code=code, message=message, task_id=task_id))

    def note_truncation(self, operation: str, task_id: Optional[str], bound: str, limit: int) -> None:
        logger.warning(
            "%s from task %s stopped at %s=%d; returning a partial result.",
            operation,
            task_id,
            bound,
            limit,
        )
        self.truncations.append(
            TruncationNotice(operation=operation, task_id=task_id, bound=bound, limit=limit)
        )
        self.record_issue(
            UNBOUNDED_TRAVERSAL,
            f"{operation} exceeded {bound}={limit}; result truncated.",
            task_id=task_id,
        )


__all__ = ["AnalysisState"]
