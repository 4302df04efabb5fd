from __future__ import annotations

import math

from conftest import fs, make_task
from core.services.criticality import AnalysisState, FloatBasedCriticalityEngine, TaskGraph


def _state(*tasks, relationships=None):
    return AnalysisState(TaskGraph(list(tasks), relationships))


def test_float_thresholds_classify_tasks():
    state = _state(
        make_task("late", 0, 1, total_float_days=-1),
        make_task("zero", 0, 1, total_float_days=0),
        make_task("close", 0, 1, total_float_days=2),
        make_task("slack", 0, 1, total_float_days=10),
    )

    FloatBasedCriticalityEngine().apply(state, threshold=3)

    assert state.task("late").is_critical and state.task("late").is_critical_by_float
    assert state.task("zero").is_critical
    assert state.task("close").is_near_critical and not state.task("close").is_critical
    assert not state.task("slack").is_critical and not state.task("slack").is_near_critical
    assert state.task("close").total_float == 2


def test_threshold_boundary_is_inclusive():
    state = _state(make_task("edge", 0, 1, total_float_days=3))

    FloatBasedCriticalityEngine().apply(state, threshold=3)

    assert state.task("edge").is_near_critical


def test_near_critical_disabled_by_toggle_or_zero_threshold():
    state = _state(make_task("close", 0, 1, total_float_days=2))
    engine = FloatBasedCriticalityEngine()

    engine.apply(state, threshold=3, show_near_critical=False)
    assert not state.task("close").is_near_critical

    engine.apply(state, threshold=0)
    assert not state.task("close").is_near_critical


def test_missing_total_float_is_infinite_and_never_flagged():
    state = _state(make_task("unknown", 0, 1))

    FloatBasedCriticalityEngine().apply(state, threshold=5)

    info = state.task("unknown")
    assert math.isinf(info.total_float)
    assert not info.is_critical and not info.is_near_critical


def test_relationships_are_never_critical():
    rel = fs("A", "B")
    state = _state(
        make_task("A", 0, 1, total_float_days=0),
        make_task("B", 1, 2, total_float_days=0),
        relationships=[rel],
    )
    state.relationship(rel).is_critical = True

    FloatBasedCriticalityEngine().apply(state)

    assert state.relationship(rel).is_critical is False
    assert not state.task("A").is_critical_by_rel
