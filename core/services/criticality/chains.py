from __future__ import annotations

import logging
from typing import FrozenSet, List, Optional, Tuple

from core.domain.task import Relationship
from core.services.criticality.date_compute import day_number
from core.services.criticality.limits import DEFAULT_LIMITS, TraversalLimits
from core.services.criticality.models import Chain
from core.services.criticality.state import AnalysisState

logger = logging.getLogger(__name__)

_Frame = Tuple[str, int, FrozenSet[str], Tuple[Relationship, ...]]


class ChainEnumerator:
    """Backward enumeration of every driving chain that ends at a target task."""

    def __init__(self, limits: TraversalLimits = DEFAULT_LIMITS):
        self._limits = limits

    def find_all_driving_chains_to_task(self, state: AnalysisState, target_id: str) -> List[Chain]:
        """
        Depth-first walk from the target over driving relationships only.

        A branch ends at a task with no driving predecessor (the chain root);
        a task with several driving predecessors forks the walk. Predecessors
        already on the current branch are skipped so cycles cannot recurse.
        A chain holds at most max_depth tasks.
        """
        graph = state.graph
        if graph.get(target_id) is None:
            return []

        limits = self._limits
        chains: List[Chain] = []
        stack: List[_Frame] = [(target_id, 1, frozenset((target_id,)), ())]
        iterations = 0
        depth_capped = False

        while stack:
            iterations += 1
            if iterations > limits.max_iterations:
                state.note_truncation("chain enumeration", target_id, "max_iterations", limits.max_iterations)
                break

            task_id, depth, members, rels = stack.pop()
            driving_preds = [
                rel
                for rel in graph.incoming(task_id)
                if state.is_driving(rel) and rel.predecessor_id not in members
            ]

            if driving_preds and depth >= limits.max_depth:
                if not depth_capped:
                    state.note_truncation("chain enumeration", target_id, "max_depth", limits.max_depth)
                    depth_capped = True
                driving_preds = []

            if not driving_preds:
                chains.append(self._build_chain(state, members, rels, root_id=task_id, terminal_id=target_id))
                if len(chains) >= limits.max_chains:
                    if stack:
                        state.note_truncation("chain enumeration", target_id, "max_chains", limits.max_chains)
                    break
                continue

            # Reverse push keeps discovery order equal to relationship order.
            for rel in reversed(driving_preds):
                pred_id = rel.predecessor_id
                stack.append((pred_id, depth + 1, members | {pred_id}, rels + (rel,)))

        if not chains:
            chains.append(self._build_chain(state, frozenset((target_id,)), (), target_id, target_id))

        logger.debug("Found %d driving chain(s) to task %s.", len(chains), target_id)
        return chains

    def find_project_finish_task(self, state: AnalysisState) -> Optional[str]:
        """
        Latest-finishing task; ties within tolerance go to the candidate whose
        best driving chain has the greatest total duration.
        """
        tolerance = self._limits.float_tolerance
        latest: Optional[float] = None
        candidates: List[str] = []

        for task in state.graph:
            finish = day_number(task.finish_date)
            if finish is None:
                continue
            if latest is None or finish > latest + tolerance:
                latest = finish
                candidates = [task.id]
            elif abs(finish - latest) <= tolerance:
                candidates.append(task.id)

        if not candidates:
            return None
        if len(candidates) == 1:
            return candidates[0]

        best_id = candidates[0]
        best_duration = 0.0
        for candidate_id in candidates:
            chains = self.find_all_driving_chains_to_task(state, candidate_id)
            longest = max((chain.total_duration for chain in chains), default=0.0)
            if longest > best_duration:
                best_id = candidate_id
                best_duration = longest
        return best_id

    @staticmethod
    def _build_chain(
        state: AnalysisState,
        members: FrozenSet[str],
        rels: Tuple[Relationship, ...],
        root_id: str,
        terminal_id: str,
    ) -> Chain:
        total = 0.0
        for task_id in members:
            task = state.graph.get(task_id)
            if task is not None:
                total += float(task.duration_days or 0.0)
        return Chain(
            task_ids=set(members),
            relationships=list(rels),
            total_duration=total,
            root_task_id=root_id,
            terminal_task_id=terminal_id,
        )


__all__ = ["ChainEnumerator"]
