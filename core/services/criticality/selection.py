from __future__ import annotations

import logging
from typing import List, Optional

from core.services.criticality.models import Chain, ChainSummary
from core.services.criticality.state import AnalysisState

logger = logging.getLogger(__name__)


class PathSelector:
    """
    Ranks enumerated chains and applies the selected one.

    Chains are ordered by total duration, longest first; equal durations keep
    discovery order. Selection indices are 1-based.
    """

    def __init__(self, chains: List[Chain]):
        self._chains: List[Chain] = sorted(chains, key=lambda chain: -chain.total_duration)

    @property
    def chains(self) -> List[Chain]:
        return list(self._chains)

    @property
    def count(self) -> int:
        return len(self._chains)

    def clamp_index(self, index: int, multi_path_enabled: bool = True) -> int:
        if not self._chains:
            return 0
        if not multi_path_enabled:
            return 1
        try:
            requested = int(index)
        except (TypeError, ValueError):
            requested = 1
        return min(max(requested, 1), len(self._chains))

    def select(self, index: int, multi_path_enabled: bool = True) -> Optional[Chain]:
        clamped = self.clamp_index(index, multi_path_enabled)
        if clamped == 0:
            return None
        return self._chains[clamped - 1]

    def summaries(self) -> List[ChainSummary]:
        return [chain.summary(position) for position, chain in enumerate(self._chains, start=1)]

    @staticmethod
    def apply(chain: Optional[Chain], state: AnalysisState) -> None:
        if chain is None:
            return
        for task_id in chain.task_ids:
            if task_id in state.graph:
                state.task(task_id).mark_critical()
        for rel in chain.relationships:
            state.relationship(rel).is_critical = True
        logger.debug(
            "Applied chain ending at %s: %d task(s), duration %s.",
            chain.terminal_task_id,
            len(chain.task_ids),
            chain.total_duration,
        )


__all__ = ["PathSelector"]
