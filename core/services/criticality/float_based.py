from __future__ import annotations

import logging
import math

from core.services.criticality.state import AnalysisState

logger = logging.getLogger(__name__)


class FloatBasedCriticalityEngine:
    """
    Criticality straight from supplied total float; no graph walk.

    Critical when total float <= 0, near-critical when 0 < total float <= threshold.
    Tasks without a supplied value keep total float = inf and are never flagged.
    Relationships are never critical in this mode.
    """

    def apply(self, state: AnalysisState, threshold: float = 0.0, show_near_critical: bool = True) -> None:
        near_enabled = show_near_critical and threshold > 0
        critical_count = 0
        near_count = 0

        for task in state.graph:
            info = state.task(task.id)
            info.is_critical_by_rel = False
            total_float = task.total_float_days
            if total_float is None or math.isnan(total_float):
                info.total_float = math.inf
                info.is_critical = False
                info.is_critical_by_float = False
                info.is_near_critical = False
                continue

            info.total_float = float(total_float)
            info.is_critical = info.total_float <= 0
            info.is_critical_by_float = info.is_critical
            info.is_near_critical = (
                near_enabled and not info.is_critical and 0 < info.total_float <= threshold
            )
            critical_count += int(info.is_critical)
            near_count += int(info.is_near_critical)

        for info in state.relationships.values():
            info.is_critical = False

        logger.debug(
            "Float-Based criticality: %d critical, %d near-critical task(s).",
            critical_count,
            near_count,
        )


__all__ = ["FloatBasedCriticalityEngine"]
