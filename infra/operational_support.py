from __future__ import annotations

import json
import logging
import math
import os
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, is_dataclass
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Iterator, Mapping

from core.events.domain_events import AnalysisEvents, analysis_events
from infra.path import logs_dir
from infra.version import get_app_version

logger = logging.getLogger(__name__)

_TRACE_ID_CTX: ContextVar[str | None] = ContextVar("cpl_trace_id", default=None)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_run_id() -> str:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    return f"run-{stamp}-{uuid.uuid4().hex[:8]}"


def current_trace_id() -> str | None:
    value = _TRACE_ID_CTX.get()
    if value is None:
        return None
    cleaned = str(value).strip()
    return cleaned or None


@contextmanager
def bind_trace_id(trace_id: str | None = None) -> Iterator[str]:
    """Tag every log record and support event inside the block with one id."""
    normalized = (trace_id or "").strip() or create_run_id()
    token = _TRACE_ID_CTX.set(normalized)
    try:
        yield normalized
    finally:
        _TRACE_ID_CTX.reset(token)


def to_jsonable(value: Any, *, _depth: int = 0) -> Any:
    if _depth >= 8:
        return "<max-depth>"
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        if math.isinf(value):
            return "inf" if value > 0 else "-inf"
        if math.isnan(value):
            return "nan"
        return value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Path):
        return str(value)
    if is_dataclass(value) and not isinstance(value, type):
        return to_jsonable(asdict(value), _depth=_depth + 1)
    if isinstance(value, Mapping):
        return {str(key): to_jsonable(item, _depth=_depth + 1) for key, item in value.items()}
    if isinstance(value, (set, frozenset)):
        return [to_jsonable(item, _depth=_depth + 1) for item in sorted(value, key=str)]
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item, _depth=_depth + 1) for item in value]
    return str(value)


class TraceIdLogFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = current_trace_id() or "-"
        return True


class OperationalSupport:
    """Append-only JSONL sink for support events (one object per line)."""

    def __init__(self, events_path: str | Path | None = None) -> None:
        if events_path is None:
            events_path = logs_dir() / "support-events.jsonl"
        self._events_path = Path(events_path)
        self._events_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = Lock()

    @property
    def events_path(self) -> Path:
        return self._events_path

    def emit_event(
        self,
        *,
        event_type: str,
        message: str,
        level: str = "INFO",
        trace_id: str | None = None,
        data: Mapping[str, Any] | None = None,
    ) -> str:
        normalized_type = (event_type or "").strip() or "support.event"
        normalized_level = (level or "INFO").strip().upper()
        resolved_trace = (trace_id or current_trace_id() or create_run_id()).strip()

        payload: dict[str, Any] = {
            "timestamp_utc": _utc_now_iso(),
            "event_type": normalized_type,
            "level": normalized_level,
            "trace_id": resolved_trace,
            "message": message or "",
            "app_version": get_app_version(),
            "pid": os.getpid(),
        }
        if data:
            payload["data"] = to_jsonable(dict(data))

        line = json.dumps(payload, ensure_ascii=True, sort_keys=True)
        with self._lock:
            with self._events_path.open("a", encoding="utf-8") as handle:
                handle.write(line)
                handle.write("\n")
        return resolved_trace

    def read_events(
        self,
        *,
        event_type: str | None = None,
        trace_id: str | None = None,
    ) -> list[dict[str, Any]]:
        if not self._events_path.exists():
            return []
        expected_type = (event_type or "").strip()
        expected_trace = (trace_id or "").strip()
        events: list[dict[str, Any]] = []
        for line in self._events_path.read_text(encoding="utf-8", errors="ignore").splitlines():
            if not line.strip():
                continue
            try:
                payload = json.loads(line)
            except json.JSONDecodeError:
                continue
            if not isinstance(payload, dict):
                continue
            if expected_type and payload.get("event_type") != expected_type:
                continue
            if expected_trace and str(payload.get("trace_id") or "").strip() != expected_trace:
                continue
            events.append(payload)
        return events


def record_analysis_events(
    support: OperationalSupport,
    events: AnalysisEvents | None = None,
) -> Callable[[], None]:
    """
    Mirror core analysis notifications into the support log.
    Returns a callable that disconnects both subscriptions.
    """
    source = events or analysis_events

    def _on_recalculated(result: Any) -> None:
        support.emit_event(
            event_type="analysis.recalculated",
            message=(
                f"{result.mode.value} pass: {len(result.critical_task_ids())} critical of "
                f"{len(result.tasks)} task(s)"
            ),
            data={
                "mode": result.mode,
                "task_count": len(result.tasks),
                "critical_count": len(result.critical_task_ids()),
                "near_critical_count": len(result.near_critical_task_ids()),
                "chain_count": len(result.chains),
                "selected_path_index": result.selected_path_index,
                "project_finish_task_id": result.project_finish_task_id,
                "selected_task_id": result.selected_task_id,
                "issues": result.issue_codes(),
            },
        )

    def _on_truncated(notice: Any) -> None:
        support.emit_event(
            event_type="analysis.traversal_truncated",
            level="WARNING",
            message=f"{notice.operation} stopped at {notice.bound}={notice.limit}",
            data=to_jsonable(notice),
        )

    source.analysis_recalculated.connect(_on_recalculated)
    source.traversal_truncated.connect(_on_truncated)

    def _disconnect() -> None:
        source.analysis_recalculated.disconnect(_on_recalculated)
        source.traversal_truncated.disconnect(_on_truncated)

    return _disconnect


_GLOBAL_SUPPORT: OperationalSupport | None = None


def get_operational_support() -> OperationalSupport:
    global _GLOBAL_SUPPORT
    if _GLOBAL_SUPPORT is None:
        _GLOBAL_SUPPORT = OperationalSupport()
    return _GLOBAL_SUPPORT


__all__ = [
    "OperationalSupport",
    "TraceIdLogFilter",
    "bind_trace_id",
    "create_run_id",
    "current_trace_id",
    "get_operational_support",
    "record_analysis_events",
    "to_jsonable",
]
