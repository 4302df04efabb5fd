"""Notifies hosts when a criticality pass finishes or a traversal is truncated."""
from __future__ import annotations

from core.events.signal import Signal


class AnalysisEvents:
    def __init__(self) -> None:
        self.analysis_recalculated: Signal[object] = Signal()  # CriticalityResult
        self.traversal_truncated: Signal[object] = Signal()    # TruncationNotice


# SINGLE global instance
analysis_events = AnalysisEvents()
