from __future__ import annotations

import pytest

from conftest import fs, make_task
from core.domain import Relationship, RelationshipType, Task
from core.exceptions import NotFoundError
from core.services.criticality import TaskGraph


def test_predecessor_ids_are_synthesized_into_finish_to_start_relationships(linear_tasks):
    graph = TaskGraph(linear_tasks)

    rels = graph.relationships
    assert [(r.predecessor_id, r.successor_id) for r in rels] == [("A", "B"), ("B", "C")]
    assert all(r.relationship_type == RelationshipType.FINISH_TO_START for r in rels)
    assert graph.successor_ids("A") == {"B"}
    assert graph.predecessor_ids("C") == ["B"]
    assert graph.placeholder_ids == []


def test_explicit_relationship_is_not_duplicated_by_predecessor_ids():
    tasks = [make_task("A", 0, 2), make_task("B", 3, 5, predecessor_ids=["A"])]
    explicit = Relationship("A", "B", RelationshipType.START_TO_START, lag_days=1)

    graph = TaskGraph(tasks, [explicit])

    assert graph.relationships == [explicit]
    assert graph.incoming("B") == [explicit]
    assert graph.outgoing("A") == [explicit]


def test_self_reference_is_ignored():
    graph = TaskGraph([make_task("A", 0, 2, predecessor_ids=["A"])])

    assert graph.relationships == []
    assert graph.successor_ids("A") == set()


def test_missing_predecessor_becomes_zero_duration_placeholder():
    graph = TaskGraph([make_task("B", 3, 5, predecessor_ids=["GHOST"])])

    ghost = graph.get("GHOST")
    assert ghost is not None
    assert ghost.is_placeholder is True
    assert ghost.duration_days == 0.0
    assert graph.placeholder_ids == ["GHOST"]
    assert len(graph) == 2


def test_duplicate_task_ids_keep_first_record():
    first = make_task("A", 0, 2)
    second = make_task("A", 5, 9)

    graph = TaskGraph([first, second])

    assert len(graph) == 1
    assert graph.get("A") is first


def test_link_references_rebuilds_object_cache(linear_tasks):
    graph = TaskGraph(linear_tasks)
    a, b, c = linear_tasks

    assert a.successors == [b]
    assert c.predecessors == [b]

    b.successors = []
    graph.link_references()
    assert b.successors == [c]


def test_require_raises_not_found_with_code():
    graph = TaskGraph([make_task("A", 0, 1)])

    with pytest.raises(NotFoundError) as exc:
        graph.require("Z")
    assert exc.value.code == "TASK_NOT_FOUND"
    assert graph.get("Z") is None
    assert graph.get(None) is None


def test_relationships_by_successor_groups_incoming_edges():
    tasks = [make_task("A", 0, 2), make_task("B", 0, 3), make_task("C", 3, 4)]
    rels = [fs("A", "C"), fs("B", "C")]

    grouped = TaskGraph(tasks, rels).relationships_by_successor()

    assert list(grouped) == ["C"]
    assert grouped["C"] == rels


def test_empty_graph():
    graph = TaskGraph([])

    assert graph.is_empty()
    assert "A" not in graph
    assert list(graph) == []


def test_placeholder_task_has_no_dates():
    placeholder = Task.placeholder("P1")

    assert placeholder.start_date is None
    assert placeholder.finish_date is None
    assert placeholder.name == "P1"
