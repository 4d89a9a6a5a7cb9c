from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from consentkeeper.core.audit import AuditLog
from consentkeeper.core.error_reporter import ErrorReporter
from consentkeeper.core.events import EventLogger
from consentkeeper.core.store import InMemoryRecordStore
from consentkeeper.core.users import UserService
from consentkeeper.web.api import create_app

from .helpers.fakes import MemoryAuditSink, RecordingLogger, SequenceIds, TickingClock


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def audit_sink():
    return MemoryAuditSink()


@pytest.fixture
def logger():
    return RecordingLogger()


@pytest.fixture
def service(store, audit_sink, clock, logger):
    audit = AuditLog(sink=audit_sink, clock=clock, logger=logger)
    return UserService(store=store, audit=audit, ids=SequenceIds("abc"), clock=clock)


@pytest.fixture
def client(service, logger, tmp_path):
    app = create_app(
        service,
        logger=logger,
        event_logger=EventLogger(str(tmp_path / "logs" / "events.jsonl")),
        error_reporter=ErrorReporter(path=str(tmp_path / "logs" / "errors.jsonl")),
        allowed_origins=["*"],
    )
    return TestClient(app)
