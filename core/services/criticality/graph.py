from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Set

from core.domain.enums import RelationshipType
from core.domain.task import Relationship, Task
from core.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class TaskGraph:
    """
    Tasks and relationships plus the derived lookup indices:
    - predecessor index: task id -> ids of tasks that list it as predecessor
    - relationship index: successor id -> incoming relationships
    - outgoing index: predecessor id -> outgoing relationships

    Ids are the source of truth. The successors/predecessors object lists on
    each Task are a cache rebuilt by link_references().
    """

    def __init__(
        self,
        tasks: Iterable[Task],
        relationships: Iterable[Relationship] | None = None,
    ):
        self._tasks: List[Task] = []
        self._tasks_by_id: Dict[str, Task] = {}
        self._relationships: List[Relationship] = []
        self._successor_ids: Dict[str, Set[str]] = {}
        self._predecessor_ids: Dict[str, List[str]] = {}
        self._incoming: Dict[str, List[Relationship]] = {}
        self._outgoing: Dict[str, List[Relationship]] = {}
        self._placeholder_ids: List[str] = []

        for task in tasks:
            if task.id in self._tasks_by_id:
                logger.debug("Duplicate task id %s ignored; first record wins.", task.id)
                continue
            self._tasks.append(task)
            self._tasks_by_id[task.id] = task

        explicit = list(relationships or [])
        covered = {(rel.predecessor_id, rel.successor_id) for rel in explicit}
        for task in list(self._tasks):
            for pred_id in task.predecessor_ids:
                if pred_id == task.id or (pred_id, task.id) in covered:
                    continue
                covered.add((pred_id, task.id))
                explicit.append(
                    Relationship(
                        predecessor_id=pred_id,
                        successor_id=task.id,
                        relationship_type=RelationshipType.FINISH_TO_START,
                    )
                )

        for rel in explicit:
            self._add_relationship(rel)

        self.link_references()
        if self._placeholder_ids:
            logger.info(
                "Synthesized %d placeholder task(s) for dangling predecessor ids.",
                len(self._placeholder_ids),
            )

    def _ensure_task(self, task_id: str) -> Task:
        task = self._tasks_by_id.get(task_id)
        if task is None:
            task = Task.placeholder(task_id)
            self._tasks.append(task)
            self._tasks_by_id[task_id] = task
            self._placeholder_ids.append(task_id)
        return task

    def _add_relationship(self, rel: Relationship) -> None:
        self._ensure_task(rel.predecessor_id)
        self._ensure_task(rel.successor_id)
        self._relationships.append(rel)
        self._successor_ids.setdefault(rel.predecessor_id, set()).add(rel.successor_id)
        preds = self._predecessor_ids.setdefault(rel.successor_id, [])
        if rel.predecessor_id not in preds:
            preds.append(rel.predecessor_id)
        self._incoming.setdefault(rel.successor_id, []).append(rel)
        self._outgoing.setdefault(rel.predecessor_id, []).append(rel)

    def link_references(self) -> None:
        for task in self._tasks:
            task.successors = [self._tasks_by_id[sid] for sid in sorted(self._successor_ids.get(task.id, ()))]
            task.predecessors = [self._tasks_by_id[pid] for pid in self._predecessor_ids.get(task.id, [])]

    @property
    def tasks(self) -> List[Task]:
        return list(self._tasks)

    @property
    def relationships(self) -> List[Relationship]:
        return list(self._relationships)

    @property
    def placeholder_ids(self) -> List[str]:
        return list(self._placeholder_ids)

    def is_empty(self) -> bool:
        return not self._tasks

    def get(self, task_id: Optional[str]) -> Optional[Task]:
        if task_id is None:
            return None
        return self._tasks_by_id.get(task_id)

    def require(self, task_id: str) -> Task:
        task = self._tasks_by_id.get(task_id)
        if task is None:
            raise NotFoundError(f"Task '{task_id}' is not in the graph.", code="TASK_NOT_FOUND")
        return task

    def incoming(self, task_id: str) -> List[Relationship]:
        return self._incoming.get(task_id, [])

    def outgoing(self, task_id: str) -> List[Relationship]:
        return self._outgoing.get(task_id, [])

    def successor_ids(self, task_id: str) -> Set[str]:
        return self._successor_ids.get(task_id, set())

    def predecessor_ids(self, task_id: str) -> List[str]:
        return self._predecessor_ids.get(task_id, [])

    def relationships_by_successor(self) -> Dict[str, List[Relationship]]:
        return {succ_id: list(rels) for succ_id, rels in self._incoming.items()}

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks_by_id

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(self._tasks)


__all__ = ["TaskGraph"]
