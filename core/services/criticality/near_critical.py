from __future__ import annotations

import logging
import math
from collections import deque
from typing import Deque, Dict, Tuple

from core.services.criticality.limits import DEFAULT_LIMITS, TraversalLimits
from core.services.criticality.state import AnalysisState

logger = logging.getLogger(__name__)


class NearCriticalClassifier:
    """
    Marks non-critical tasks whose float distance to the critical set is
    within the configured threshold.

    Each task gets its own forward walk over successor links. Every hop adds
    the smallest non-negative relationship float towards that successor; a
    successor is revisited whenever a rejoining path reaches it cheaper, so
    overlapping paths are each accounted for.
    """

    def __init__(self, limits: TraversalLimits = DEFAULT_LIMITS):
        self._limits = limits

    def classify(self, state: AnalysisState, threshold: float) -> int:
        if threshold <= 0:
            logger.debug("Float threshold is 0; near-critical pass skipped.")
            return 0

        marked = 0
        for task in state.graph:
            info = state.task(task.id)
            if info.is_critical:
                continue
            distance = self.float_to_critical(state, task.id)
            if distance <= threshold:
                info.is_near_critical = True
                info.total_float = distance
                marked += 1

        logger.debug("Near-critical tasks within %s day(s): %d", threshold, marked)
        return marked

    def float_to_critical(self, state: AnalysisState, start_id: str) -> float:
        graph = state.graph
        limits = self._limits
        best: Dict[str, float] = {start_id: 0.0}
        queue: Deque[Tuple[str, float]] = deque([(start_id, 0.0)])
        min_to_critical = math.inf
        iterations = 0

        while queue:
            iterations += 1
            if iterations > limits.max_iterations:
                state.note_truncation("near-critical walk", start_id, "max_iterations", limits.max_iterations)
                break

            task_id, accumulated = queue.popleft()
            if accumulated > best.get(task_id, math.inf) or accumulated >= min_to_critical:
                continue
            if task_id != start_id and state.is_critical(task_id):
                min_to_critical = accumulated
                continue

            successor_floats: Dict[str, float] = {}
            for rel in graph.outgoing(task_id):
                rel_float = state.relationship(rel).relationship_float
                current = successor_floats.get(rel.successor_id, math.inf)
                successor_floats[rel.successor_id] = min(current, rel_float)

            for succ_id, rel_float in successor_floats.items():
                if math.isinf(rel_float) or math.isnan(rel_float):
                    continue
                candidate = accumulated + max(0.0, rel_float)
                if candidate < best.get(succ_id, math.inf):
                    best[succ_id] = candidate
                    queue.append((succ_id, candidate))

        return min_to_critical


__all__ = ["NearCriticalClassifier"]
