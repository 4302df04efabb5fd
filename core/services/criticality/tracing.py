from __future__ import annotations

import logging
import math
from collections import deque
from typing import Callable, Deque, FrozenSet, Iterable, List, Optional, Set, Tuple

from core.domain.enums import CriticalityMode, TraceDirection
from core.domain.task import Relationship
from core.services.criticality.date_compute import day_number
from core.services.criticality.limits import DEFAULT_LIMITS, TraversalLimits
from core.services.criticality.models import Chain, TraceResult
from core.services.criticality.state import AnalysisState

logger = logging.getLogger(__name__)

NeighborFn = Callable[[str], Iterable[str]]
_Frame = Tuple[str, FrozenSet[str], Tuple[Relationship, ...], int]


class Tracer:
    """
    Walks outward from a selected task.

    - driving trace (Longest-Path mode): only driving relationships are followed
    - free-float trace (Float-Based mode): the full predecessor/successor index
    - best chain: one driving chain from the selection, ranked by dates

    Every walk is bounded by max_visited_tasks and max_iterations and returns
    what it reached so far when a bound is hit.
    """

    def __init__(self, limits: TraversalLimits = DEFAULT_LIMITS):
        self._limits = limits

    def trace(
        self,
        state: AnalysisState,
        start_id: str,
        direction: TraceDirection,
        mode: CriticalityMode,
    ) -> TraceResult:
        if mode == CriticalityMode.FLOAT_BASED:
            return self.free_float_trace(state, start_id, direction)
        return self.driving_trace(state, start_id, direction)

    def driving_trace(self, state: AnalysisState, start_id: str, direction: TraceDirection) -> TraceResult:
        graph = state.graph
        if direction == TraceDirection.FORWARD:
            def neighbors(task_id: str) -> Iterable[str]:
                return [rel.successor_id for rel in graph.outgoing(task_id) if state.is_driving(rel)]
        else:
            def neighbors(task_id: str) -> Iterable[str]:
                return [rel.predecessor_id for rel in graph.incoming(task_id) if state.is_driving(rel)]

        result = self._breadth_first(state, start_id, direction, neighbors, "driving trace")
        logger.debug("Driving %s trace from %s: %d task(s)", direction.value, start_id, len(result.task_ids))
        return result

    def free_float_trace(self, state: AnalysisState, start_id: str, direction: TraceDirection) -> TraceResult:
        graph = state.graph
        if direction == TraceDirection.FORWARD:
            def neighbors(task_id: str) -> Iterable[str]:
                return sorted(graph.successor_ids(task_id))
        else:
            def neighbors(task_id: str) -> Iterable[str]:
                return graph.predecessor_ids(task_id)

        result = self._breadth_first(state, start_id, direction, neighbors, "free-float trace")
        if direction == TraceDirection.FORWARD:
            for task_id in result.task_ids:
                task = graph.get(task_id)
                if task is not None and task.free_float_days is not None:
                    result.free_float[task_id] = float(task.free_float_days)
        logger.debug("Float-Based %s trace from %s: %d task(s)", direction.value, start_id, len(result.task_ids))
        return result

    def _breadth_first(
        self,
        state: AnalysisState,
        start_id: str,
        direction: TraceDirection,
        neighbors: NeighborFn,
        operation: str,
    ) -> TraceResult:
        result = TraceResult(direction=direction)
        if start_id not in state.graph:
            return result

        limits = self._limits
        visited: Set[str] = {start_id}
        queue: Deque[str] = deque([start_id])
        iterations = 0

        while queue:
            iterations += 1
            if iterations > limits.max_iterations:
                state.note_truncation(operation, start_id, "max_iterations", limits.max_iterations)
                result.truncated = True
                break
            current = queue.popleft()
            for next_id in neighbors(current):
                if next_id in visited or next_id not in state.graph:
                    continue
                if len(visited) >= limits.max_visited_tasks:
                    state.note_truncation(operation, start_id, "max_visited_tasks", limits.max_visited_tasks)
                    result.truncated = True
                    queue.clear()
                    break
                visited.add(next_id)
                queue.append(next_id)

        result.task_ids = visited
        return result

    def best_chain_from(
        self,
        state: AnalysisState,
        start_id: str,
        direction: TraceDirection,
    ) -> Optional[Chain]:
        """
        Single best driving chain through the selected task.

        Backward: the chain whose root starts earliest wins, longer duration
        breaks ties. Forward: the chain whose end finishes latest wins, longer
        duration breaks ties. The forward walk shares one visited set across
        all branches, so it returns a best chain without enumerating them all.
        A task reached by an earlier branch is not entered again, so a later
        branch into it ends one task early; the duration tie-break only
        compares chains with distinct end tasks.
        """
        if start_id not in state.graph:
            return None
        if direction == TraceDirection.FORWARD:
            return self._best_forward_chain(state, start_id)
        return self._best_backward_chain(state, start_id)

    def _best_backward_chain(self, state: AnalysisState, target_id: str) -> Optional[Chain]:
        graph = state.graph
        limits = self._limits
        best: Optional[Chain] = None
        best_key: Tuple[float, float] = (math.inf, math.inf)
        stack: List[_Frame] = [(target_id, frozenset((target_id,)), (), 1)]
        iterations = 0
        explored = 0
        depth_capped = False

        while stack:
            iterations += 1
            if iterations > limits.max_iterations:
                state.note_truncation("best backward chain", target_id, "max_iterations", limits.max_iterations)
                break

            task_id, members, rels, depth = stack.pop()
            preds = [
                rel
                for rel in graph.incoming(task_id)
                if state.is_driving(rel) and rel.predecessor_id not in members
            ]
            if preds and depth >= limits.max_depth and not depth_capped:
                state.note_truncation("best backward chain", target_id, "max_depth", limits.max_depth)
                depth_capped = True
            if preds and depth < limits.max_depth:
                for rel in reversed(preds):
                    pred_id = rel.predecessor_id
                    stack.append((pred_id, members | {pred_id}, rels + (rel,), depth + 1))
                continue

            chain = self._build_chain(state, members, rels, root_id=task_id, terminal_id=target_id)
            root_start = day_number(graph.require(task_id).start_date)
            key = (math.inf if root_start is None else root_start, -chain.total_duration)
            if best is None or key < best_key:
                best, best_key = chain, key
            explored += 1
            if explored >= limits.max_chains:
                if stack:
                    state.note_truncation("best backward chain", target_id, "max_chains", limits.max_chains)
                break

        return best

    def _best_forward_chain(self, state: AnalysisState, source_id: str) -> Optional[Chain]:
        graph = state.graph
        limits = self._limits
        best: Optional[Chain] = None
        best_key: Tuple[float, float] = (math.inf, math.inf)
        visited: Set[str] = set()
        stack: List[_Frame] = [(source_id, frozenset((source_id,)), (), 1)]
        iterations = 0
        depth_capped = False

        while stack:
            iterations += 1
            if iterations > limits.max_iterations:
                state.note_truncation("best forward chain", source_id, "max_iterations", limits.max_iterations)
                break

            task_id, members, rels, depth = stack.pop()
            if task_id in visited:
                continue
            visited.add(task_id)

            succs = [
                rel
                for rel in graph.outgoing(task_id)
                if state.is_driving(rel) and rel.successor_id not in visited
            ]
            if succs and depth >= limits.max_depth and not depth_capped:
                state.note_truncation("best forward chain", source_id, "max_depth", limits.max_depth)
                depth_capped = True
            if succs and depth < limits.max_depth:
                for rel in reversed(succs):
                    succ_id = rel.successor_id
                    stack.append((succ_id, members | {succ_id}, rels + (rel,), depth + 1))
                continue

            chain = self._build_chain(state, members, rels, root_id=source_id, terminal_id=task_id)
            end_finish = day_number(graph.require(task_id).finish_date)
            key = (math.inf if end_finish is None else -end_finish, -chain.total_duration)
            if best is None or key < best_key:
                best, best_key = chain, key

        return best

    @staticmethod
    def _build_chain(
        state: AnalysisState,
        members: FrozenSet[str],
        rels: Tuple[Relationship, ...],
        root_id: str,
        terminal_id: str,
    ) -> Chain:
        total = sum(float(state.graph.require(task_id).duration_days or 0.0) for task_id in members)
        return Chain(
            task_ids=set(members),
            relationships=list(rels),
            total_duration=total,
            root_task_id=root_id,
            terminal_task_id=terminal_id,
        )


__all__ = ["Tracer"]
