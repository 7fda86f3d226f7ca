from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from tokenguard.alerts.decider import AlertDecider, AlertLevel, AlertState, describe, level_for_status
from tokenguard.alerts.sinks import Event, FileSink, LoggingSink, Sink, dispatch, event_from_decision
from tokenguard.health.report import HealthReport
from tokenguard.health.status import HealthStatus


def _warning_report(*messages: str) -> HealthReport:
    report = HealthReport()
    for message in messages or ("Burner authority SOL balance is low",):
        report.add_warning(message)
    return report


def _critical_report() -> HealthReport:
    return HealthReport.critical("Mint account does not exist")


@pytest.fixture
def state(tmp_path: Path) -> AlertState:
    return AlertState(tmp_path / "state" / "alert_state.json")


def test_level_mapping():
    assert level_for_status(HealthStatus.HEALTHY) is None
    assert level_for_status(HealthStatus.WARNING) is AlertLevel.WARN
    assert level_for_status(HealthStatus.CRITICAL) is AlertLevel.CRITICAL


def test_first_unhealthy_report_alerts(state, fake_clock):
    decider = AlertDecider(state, min_interval=3600, clock=fake_clock)
    decision = decider.decide(_critical_report())

    assert decision is not None
    assert decision.level is AlertLevel.CRITICAL
    assert decision.title == "Health check failed"
    assert decision.detail == "Mint account does not exist"
    assert state.last_sent() == fake_clock.current


def test_repeat_alerts_are_suppressed_within_window(state, fake_clock):
    decider = AlertDecider(state, min_interval=3600, clock=fake_clock)
    assert decider.decide(_warning_report()) is not None

    fake_clock.advance(1800)
    assert decider.decide(_critical_report()) is None

    fake_clock.advance(1800)
    decision = decider.decide(_warning_report())
    assert decision is not None
    assert decision.level is AlertLevel.WARN


def test_healthy_report_clears_suppression(state, fake_clock):
    decider = AlertDecider(state, min_interval=3600, clock=fake_clock)
    assert decider.decide(_warning_report()) is not None

    fake_clock.advance(10)
    assert decider.decide(HealthReport()) is None
    assert state.last_sent() is None

    fake_clock.advance(10)
    assert decider.decide(_warning_report()) is not None


def test_corrupt_state_is_treated_as_empty(state, fake_clock):
    state.path.parent.mkdir(parents=True)
    state.path.write_text("{not json", encoding="utf-8")
    assert state.last_sent() is None
    assert AlertDecider(state, clock=fake_clock).decide(_warning_report()) is not None


def test_describe_truncates_long_lists():
    report = _warning_report(*(f"warning {n}" for n in range(7)))
    title, detail = describe(report)
    assert title == "Health check warnings"
    assert detail.endswith("(+2 more)")
    assert "warning 5" not in detail


class _BrokenSink(Sink):
    def send(self, event: Event) -> bool:
        raise RuntimeError("sink down")


def test_dispatch_continues_past_failing_sink(tmp_path: Path, state, fake_clock, caplog):
    decision = AlertDecider(state, clock=fake_clock).decide(_critical_report())
    assert decision is not None
    event = event_from_decision(decision, host="monitor-1")
    log_path = tmp_path / "alerts" / "alerts.jsonl"

    with caplog.at_level(logging.WARNING):
        results = dispatch(event, [_BrokenSink(), LoggingSink(), FileSink(str(log_path))])

    assert results == {"_BrokenSink": False, "LoggingSink": True, "FileSink": True}
    assert "ALERT: CRITICAL - Health check failed" in caplog.text
    written = json.loads(log_path.read_text(encoding="utf-8").strip())
    assert written["severity"] == "CRITICAL"
    assert written["tags"] == {"status": "critical", "host": "monitor-1"}
    assert written["ts"] > 0


def test_unwritable_state_does_not_block_alerts(tmp_path: Path, fake_clock, caplog):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    state = AlertState(blocker / "alert_state.json")

    assert state.record(fake_clock.current) is False
    assert state.last_sent() is None
    with caplog.at_level(logging.ERROR):
        decision = AlertDecider(state, clock=fake_clock).decide(_critical_report())
    assert decision is not None
    assert decision.level is AlertLevel.CRITICAL
    assert "alerts.state_write_failed" in caplog.text
