from __future__ import annotations

import logging
import math

from core.domain.task import Relationship
from core.services.criticality.date_compute import relationship_float_from_dates
from core.services.criticality.limits import DEFAULT_LIMITS, TraversalLimits
from core.services.criticality.state import AnalysisState

logger = logging.getLogger(__name__)


class DrivingRelationshipClassifier:
    """
    Marks the relationships that drive each successor.

    Within a successor's incoming group every relationship whose float is
    within tolerance of the group minimum is driving, so ties keep several
    driving predecessors. Only finite floats take part in the minimum.
    """

    def __init__(self, limits: TraversalLimits = DEFAULT_LIMITS):
        self._tolerance = limits.float_tolerance

    def classify(self, state: AnalysisState) -> int:
        groups = state.graph.relationships_by_successor()

        driving_count = 0
        for rels in groups.values():
            for rel in rels:
                info = state.relationship(rel)
                info.relationship_float = self.relationship_float(rel, state)
                info.is_driving = False
                info.is_critical = False

            finite = [
                state.relationship(rel).relationship_float
                for rel in rels
                if math.isfinite(state.relationship(rel).relationship_float)
            ]
            if not finite:
                continue
            min_float = min(finite)
            for rel in rels:
                rel_float = state.relationship(rel).relationship_float
                if math.isfinite(rel_float) and abs(rel_float - min_float) <= self._tolerance:
                    state.relationship(rel).is_driving = True
                    driving_count += 1

        logger.debug(
            "Identified %d driving relationship(s) across %d successor(s).",
            driving_count,
            len(groups),
        )
        return driving_count

    @staticmethod
    def relationship_float(rel: Relationship, state: AnalysisState) -> float:
        # Supplied free float is trusted as-is, even when dates disagree; non-finite values count as absent.
        if rel.free_float_days is not None and math.isfinite(rel.free_float_days):
            return float(rel.free_float_days)
        graph = state.graph
        return relationship_float_from_dates(
            rel,
            graph.get(rel.predecessor_id),
            graph.get(rel.successor_id),
        )


__all__ = ["DrivingRelationshipClassifier"]
