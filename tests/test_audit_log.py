from __future__ import annotations

import json

from consentkeeper.core.audit import AuditAction, AuditLog, JsonlAuditSink

from .helpers.fakes import FailingAuditSink, FakeClock, RecordingLogger


def test_jsonl_sink_appends_one_line_per_entry(tmp_path):
    path = tmp_path / "data" / "audit.log"
    log = AuditLog(sink=JsonlAuditSink(path=str(path)), clock=FakeClock(1_700_000_000.5), logger=RecordingLogger())

    r1 = log.append(AuditAction.export, "u1", "127.0.0.1", {"exportedAt": "x"})
    r2 = log.append("delete", "u1", None, {})
    assert r1.ok and r2.ok

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first == {"ts": "2023-11-14T22:13:20.500Z", "action": "export", "userId": "u1", "requester": "127.0.0.1", "details": {"exportedAt": "x"}}
    second = json.loads(lines[1])
    assert second["action"] == "delete"
    assert second["requester"] is None


def test_existing_lines_are_never_rewritten(tmp_path):
    path = tmp_path / "audit.log"
    path.write_text('{"ts": "old", "action": "export", "userId": null, "requester": null, "details": {}}\n', encoding="utf-8")
    sink = JsonlAuditSink(path=str(path))
    AuditLog(sink=sink, clock=FakeClock()).append(AuditAction.consent_change, "u1", None, {"consent": True})
    rows = sink.tail(10)
    assert [r["action"] for r in rows] == ["export", "consent_change"]
    assert rows[0]["ts"] == "old"


def test_tail_skips_garbage_lines(tmp_path):
    path = tmp_path / "audit.log"
    path.write_text("garbage\n\n[1]\n", encoding="utf-8")
    sink = JsonlAuditSink(path=str(path))
    assert sink.tail() == []
    assert JsonlAuditSink(path=str(tmp_path / "missing.log")).tail() == []


def test_sink_failure_is_logged_not_raised():
    logger = RecordingLogger()
    result = AuditLog(sink=FailingAuditSink(), clock=FakeClock(), logger=logger).append(AuditAction.delete, "u1", None, {})
    assert result.ok is False
    assert "disk full" in (result.error or "")
    assert len(logger.messages("error")) == 1


def test_unknown_action_is_captured_as_failure():
    logger = RecordingLogger()
    result = AuditLog(sink=FailingAuditSink(), clock=FakeClock(), logger=logger).append("purge", None, None, None)
    assert result.ok is False
    assert logger.messages("error")
