from __future__ import annotations

import json
import math

from conftest import make_task
from core.events.domain_events import AnalysisEvents
from core.services.criticality import AnalysisConfig, CriticalityEngine, TraversalLimits
from core.services.criticality.models import TruncationNotice
from infra.operational_support import (
    OperationalSupport,
    bind_trace_id,
    create_run_id,
    current_trace_id,
    record_analysis_events,
    to_jsonable,
)


def test_operational_support_emits_structured_event(tmp_path, monkeypatch):
    monkeypatch.setenv("CPL_APP_VERSION", "1.2.3")
    events_path = tmp_path / "support-events.jsonl"
    support = OperationalSupport(events_path=events_path)

    with bind_trace_id("inc-test-123"):
        trace_id = support.emit_event(
            event_type="support.test",
            message="pass finished",
            data={"float": math.inf, "ids": {"B", "A"}},
        )

    assert trace_id == "inc-test-123"
    rows = events_path.read_text(encoding="utf-8").splitlines()
    assert len(rows) == 1
    payload = json.loads(rows[0])
    assert payload["trace_id"] == "inc-test-123"
    assert payload["event_type"] == "support.test"
    assert payload["app_version"] == "1.2.3"
    assert payload["data"] == {"float": "inf", "ids": ["A", "B"]}


def test_read_events_filters_by_type_and_trace(tmp_path):
    support = OperationalSupport(events_path=tmp_path / "events.jsonl")
    support.emit_event(event_type="a", message="one", trace_id="t-1")
    support.emit_event(event_type="b", message="two", trace_id="t-1")
    support.emit_event(event_type="a", message="three", trace_id="t-2")
    with support.events_path.open("a", encoding="utf-8") as handle:
        handle.write("not json\n")

    assert [e["message"] for e in support.read_events(event_type="a")] == ["one", "three"]
    assert [e["message"] for e in support.read_events(trace_id="t-1")] == ["one", "two"]
    assert len(support.read_events()) == 3


def test_trace_id_binding_is_scoped():
    assert current_trace_id() is None
    with bind_trace_id() as generated:
        assert generated.startswith("run-")
        assert current_trace_id() == generated
    assert current_trace_id() is None
    assert create_run_id() != create_run_id()


def test_to_jsonable_handles_dataclasses_and_enums():
    notice = TruncationNotice(operation="chain enumeration", task_id="S", bound="max_chains", limit=1)
    config = AnalysisConfig(mode="floatBased")

    assert to_jsonable(notice) == {
        "operation": "chain enumeration",
        "task_id": "S",
        "bound": "max_chains",
        "limit": 1,
    }
    assert to_jsonable(config)["mode"] == "floatBased"


def test_record_analysis_events_mirrors_passes_into_support_log(tmp_path):
    support = OperationalSupport(events_path=tmp_path / "events.jsonl")
    events = AnalysisEvents()
    disconnect = record_analysis_events(support, events)

    tasks = [
        make_task("R", 0, 1),
        make_task("A", 1, 9, predecessor_ids=["R"]),
        make_task("B", 4, 9, predecessor_ids=["R"]),
        make_task("S", 9, 10, predecessor_ids=["A", "B"]),
    ]
    engine = CriticalityEngine.from_records(tasks, limits=TraversalLimits(max_chains=1), events=events)
    engine.recalculate(AnalysisConfig(multi_path_enabled=True))

    recalculated = support.read_events(event_type="analysis.recalculated")
    truncated = support.read_events(event_type="analysis.traversal_truncated")
    assert len(recalculated) == 1
    assert recalculated[0]["data"]["mode"] == "longestPath"
    assert recalculated[0]["data"]["critical_count"] == 3
    assert recalculated[0]["data"]["project_finish_task_id"] == "S"
    assert "UNBOUNDED_TRAVERSAL" in recalculated[0]["data"]["issues"]
    assert truncated[0]["level"] == "WARNING"
    assert truncated[0]["data"]["bound"] == "max_chains"

    disconnect()
    engine.recalculate()
    assert len(support.read_events(event_type="analysis.recalculated")) == 1
    assert events.analysis_recalculated.subscriber_count == 0
