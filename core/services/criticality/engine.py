from __future__ import annotations

import logging
import time
from typing import Iterable, List, Optional

from core.domain.enums import CriticalityMode, TraceDirection
from core.domain.task import Relationship, Task
from core.events.domain_events import AnalysisEvents, analysis_events
from core.services.criticality.chains import ChainEnumerator
from core.services.criticality.driving import DrivingRelationshipClassifier
from core.services.criticality.float_based import FloatBasedCriticalityEngine
from core.services.criticality.graph import TaskGraph
from core.services.criticality.limits import TraversalLimits
from core.services.criticality.models import (
    EMPTY_GRAPH,
    INVALID_TARGET,
    MISSING_REFERENCE,
    NO_PROJECT_FINISH,
    AnalysisConfig,
    Chain,
    CriticalityResult,
)
from core.services.criticality.near_critical import NearCriticalClassifier
from core.services.criticality.selection import PathSelector
from core.services.criticality.state import AnalysisState
from core.services.criticality.tracing import Tracer

logger = logging.getLogger(__name__)


class CriticalityEngine:
    """
    Schedule-criticality analysis over already scheduled tasks:
    - Longest-Path mode: driving relationships -> project finish -> chains -> selected path
    - Float-Based mode: criticality from supplied total float
    - optional near-critical pass, optional trace from a selected task

    Every recalculate() starts from reset values and ends by publishing the
    derived flags onto the Task/Relationship records.
    """

    def __init__(
        self,
        graph: TaskGraph,
        limits: TraversalLimits | None = None,
        events: AnalysisEvents | None = None,
    ):
        self._graph: TaskGraph = graph
        self._limits: TraversalLimits = limits or TraversalLimits.from_env()
        self._events: AnalysisEvents = events or analysis_events
        self._classifier = DrivingRelationshipClassifier(self._limits)
        self._enumerator = ChainEnumerator(self._limits)
        self._near_critical = NearCriticalClassifier(self._limits)
        self._tracer = Tracer(self._limits)
        self._float_engine = FloatBasedCriticalityEngine()
        self._last_result: Optional[CriticalityResult] = None

    @classmethod
    def from_records(
        cls,
        tasks: Iterable[Task],
        relationships: Iterable[Relationship] | None = None,
        limits: TraversalLimits | None = None,
        events: AnalysisEvents | None = None,
    ) -> "CriticalityEngine":
        return cls(TaskGraph(tasks, relationships), limits=limits, events=events)

    @property
    def graph(self) -> TaskGraph:
        return self._graph

    @property
    def limits(self) -> TraversalLimits:
        return self._limits

    @property
    def last_result(self) -> Optional[CriticalityResult]:
        return self._last_result

    def rebuild(self, tasks: Iterable[Task], relationships: Iterable[Relationship] | None = None) -> TaskGraph:
        """Data refresh: replace the graph; the next recalculate() starts from scratch."""
        self._graph = TaskGraph(tasks, relationships)
        self._last_result = None
        return self._graph

    def recalculate(self, config: AnalysisConfig | None = None) -> CriticalityResult:
        config = config or AnalysisConfig()
        started = time.perf_counter()
        graph = self._graph
        state = AnalysisState(graph)

        for placeholder_id in graph.placeholder_ids:
            state.record_issue(
                MISSING_REFERENCE,
                f"Predecessor '{placeholder_id}' has no task record; using a zero-duration placeholder.",
                task_id=placeholder_id,
            )

        result = CriticalityResult(mode=config.mode, tasks=state.tasks, relationships=state.relationships)

        if graph.is_empty():
            state.record_issue(EMPTY_GRAPH, "No tasks to analyse.")
            logger.debug("Criticality pass skipped: empty graph.")
            return self._finish(state, result, started)

        selected_id = config.selected_task_id
        if selected_id is not None and selected_id not in graph:
            logger.warning("Selected task %s not found; analysing the whole project.", selected_id)
            state.record_issue(
                INVALID_TARGET,
                f"Selected task '{selected_id}' is not in the graph.",
                task_id=selected_id,
            )
            selected_id = None

        if config.mode == CriticalityMode.FLOAT_BASED:
            self._float_engine.apply(state, config.float_threshold, config.show_near_critical)
        else:
            self._classifier.classify(state)
            self._apply_longest_path(state, config, selected_id, result)
            if config.near_critical_enabled:
                self._near_critical.classify(state, config.float_threshold)

        if selected_id is not None:
            trace = self._tracer.trace(state, selected_id, config.trace_direction, config.mode)
            result.selected_task_id = selected_id
            result.traced_task_ids = trace.task_ids

        return self._finish(state, result, started)

    def _apply_longest_path(
        self,
        state: AnalysisState,
        config: AnalysisConfig,
        selected_id: Optional[str],
        result: CriticalityResult,
    ) -> None:
        if selected_id is None:
            finish_id = self._enumerator.find_project_finish_task(state)
            if finish_id is None:
                logger.warning("Could not identify a project finish task; no task has a finish date.")
                state.record_issue(NO_PROJECT_FINISH, "No task has a finish date.")
                return
            result.project_finish_task_id = finish_id
            chains = self._enumerator.find_all_driving_chains_to_task(state, finish_id)
            self._select_chain(state, config, chains, result)
            return

        if config.trace_direction == TraceDirection.BACKWARD and (
            config.show_all_tasks or config.multi_path_enabled
        ):
            chains = self._enumerator.find_all_driving_chains_to_task(state, selected_id)
        else:
            best = self._tracer.best_chain_from(state, selected_id, config.trace_direction)
            chains = [best] if best is not None else []
        self._select_chain(state, config, chains, result)
        state.task(selected_id).mark_critical()

    @staticmethod
    def _select_chain(
        state: AnalysisState,
        config: AnalysisConfig,
        chains: List[Chain],
        result: CriticalityResult,
    ) -> None:
        selector = PathSelector(chains)
        index = selector.clamp_index(config.selected_path_index, config.multi_path_enabled)
        chain = selector.select(index, config.multi_path_enabled)
        selector.apply(chain, state)
        result.chains = selector.summaries()
        result.selected_path_index = index
        result.selected_chain = chain.summary(index) if chain is not None else None

    def _finish(self, state: AnalysisState, result: CriticalityResult, started: float) -> CriticalityResult:
        self._publish(state)
        result.issues = list(state.issues)
        self._last_result = result

        elapsed_ms = (time.perf_counter() - started) * 1000.0
        logger.info(
            "Criticality pass (%s): %d task(s), %d critical, %d near-critical, %d chain(s) in %.1f ms.",
            result.mode.value,
            len(result.tasks),
            len(result.critical_task_ids()),
            len(result.near_critical_task_ids()),
            len(result.chains),
            elapsed_ms,
        )
        for notice in state.truncations:
            self._events.traversal_truncated.emit(notice)
        self._events.analysis_recalculated.emit(result)
        return result

    @staticmethod
    def _publish(state: AnalysisState) -> None:
        for task in state.graph:
            info = state.tasks.get(task.id)
            if info is None:
                task.reset_analysis()
                continue
            task.is_critical = info.is_critical
            task.is_critical_by_float = info.is_critical_by_float
            task.is_critical_by_rel = info.is_critical_by_rel
            task.is_near_critical = info.is_near_critical
            task.total_float = info.total_float
        for rel in state.graph.relationships:
            info = state.relationships.get(rel)
            if info is None:
                rel.reset_analysis()
                continue
            rel.relationship_float = info.relationship_float
            rel.is_driving = info.is_driving
            rel.is_critical = info.is_critical


__all__ = ["CriticalityEngine"]
