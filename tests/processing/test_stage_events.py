import json
import logging

import pytest

from config.logging_config import JsonFormatter
from processing.errors import TruncatedDataError
from processing.stage_events import StageEvent, StageTracker, log_stage_event


def test_tracker_emits_success_and_failure():
    events = []
    tracker = StageTracker("pool-address", sink=events.append)
    tracker.protocol = "raydium_clmm"

    with tracker.stage("decode"):
        pass
    with pytest.raises(TruncatedDataError) as exc_info:
        with tracker.stage("resolve"):
            raise TruncatedDataError("token account too small")

    assert [e.stage for e in events] == ["decode", "resolve"]
    assert events[0].success and events[0].error is None
    assert not events[1].success
    assert events[1].protocol == "raydium_clmm"
    assert exc_info.value.stage == "resolve"
    assert exc_info.value.account == "pool-address"
    assert "token account too small" in events[1].error


def test_default_sink_logs_json(caplog):
    event = StageEvent(stage="fetch", account="a", duration_ms=1.5, success=True)
    with caplog.at_level(logging.INFO, logger="pipeline.stages"):
        log_stage_event(event)
    record = caplog.records[-1]
    rendered = json.loads(JsonFormatter().format(record))
    assert rendered["logger_name"] == "pipeline.stages"
    assert rendered["event"]["stage"] == "fetch"
    assert rendered["event"]["duration_ms"] == 1.5
