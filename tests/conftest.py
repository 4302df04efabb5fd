# tests/conftest.py
from __future__ import annotations

from datetime import date, timedelta

import pytest

from core.domain import Relationship, RelationshipType, Task
from core.events.domain_events import AnalysisEvents
from core.services.criticality import (
    AnalysisState,
    CriticalityEngine,
    DrivingRelationshipClassifier,
    TaskGraph,
    TraversalLimits,
)

BASE_DATE = date(2024, 1, 1)


def day(offset: float) -> date:
    return BASE_DATE + timedelta(days=offset)


def make_task(task_id: str, start: float | None, finish: float | None, duration: float | None = None, **kwargs) -> Task:
    """Task scheduled on day offsets from BASE_DATE; duration defaults to finish - start."""
    if duration is None:
        duration = (finish - start) if start is not None and finish is not None else 0.0
    return Task(
        id=task_id,
        name=kwargs.pop("name", task_id),
        duration_days=duration,
        start_date=day(start) if start is not None else None,
        finish_date=day(finish) if finish is not None else None,
        **kwargs,
    )


def fs(pred_id: str, succ_id: str, **kwargs) -> Relationship:
    return Relationship(pred_id, succ_id, RelationshipType.FINISH_TO_START, **kwargs)


def classified_state(tasks, relationships=None) -> AnalysisState:
    state = AnalysisState(TaskGraph(tasks, relationships))
    DrivingRelationshipClassifier().classify(state)
    return state


@pytest.fixture
def events():
    # fresh bus per test so subscribers never leak between tests
    return AnalysisEvents()


@pytest.fixture
def limits():
    return TraversalLimits()


@pytest.fixture
def linear_tasks():
    # A(5) -> B(3) -> C(2), finish-to-start, no lag
    return [
        make_task("A", 0, 5),
        make_task("B", 5, 8, predecessor_ids=["A"]),
        make_task("C", 8, 10, predecessor_ids=["B"]),
    ]


@pytest.fixture
def parallel_tasks():
    # R fans out to A (8d) and B (5d); both drive S. Chains: {R,A,S}=10, {R,B,S}=7.
    tasks = [
        make_task("R", 0, 1),
        make_task("A", 1, 9),
        make_task("B", 4, 9),
        make_task("S", 9, 10),
    ]
    rels = [fs("R", "A"), fs("R", "B"), fs("A", "S"), fs("B", "S")]
    return tasks, rels


@pytest.fixture
def make_engine(events, limits):
    def _factory(tasks, relationships=None, **overrides):
        return CriticalityEngine.from_records(
            tasks,
            relationships,
            limits=overrides.get("limits", limits),
            events=overrides.get("events", events),
        )

    return _factory
