from __future__ import annotations

import os
from typing import Optional

from fastapi import FastAPI

from consentkeeper.core.audit import AuditLog, JsonlAuditSink
from consentkeeper.core.clock import Clock, SystemClock
from consentkeeper.core.config.models import ServerConfig
from consentkeeper.core.error_reporter import ErrorReporter
from consentkeeper.core.events import EventLogger
from consentkeeper.core.ids import IdGenerator, IdSource
from consentkeeper.core.store import InMemoryRecordStore, JsonFileRecordStore, RecordStore
from consentkeeper.core.users import UserService
from consentkeeper.web.api import create_app


def build_store(cfg: ServerConfig, *, root: str = ".", logger=None, in_memory: bool = False) -> RecordStore:
    if in_memory:
        return InMemoryRecordStore()
    store = JsonFileRecordStore(path=cfg.db_path(root), backups_dir=cfg.backups_dir(root), logger=logger)
    store.ensure_exists()
    return store


def build_app(
    cfg: ServerConfig,
    *,
    root: str = ".",
    logger=None,
    in_memory: bool = False,
    clock: Optional[Clock] = None,
    ids: Optional[IdSource] = None,
) -> FastAPI:
    """Wire store, audit log and handlers. Creates the data files on first boot."""
    os.makedirs(cfg.resolve_data_dir(root), exist_ok=True)
    log_dir = cfg.resolve_log_dir(root)
    clock = clock or SystemClock()

    store = build_store(cfg, root=root, logger=logger, in_memory=in_memory)
    sink = JsonlAuditSink(path=cfg.audit_path(root))
    sink.ensure_exists()
    audit = AuditLog(sink=sink, clock=clock, logger=logger)
    service = UserService(store=store, audit=audit, ids=ids or IdGenerator(), clock=clock)

    return create_app(
        service,
        logger=logger,
        event_logger=EventLogger(os.path.join(log_dir, "events.jsonl")),
        error_reporter=ErrorReporter(path=os.path.join(log_dir, "errors.jsonl")),
        allowed_origins=list(cfg.allowed_origins),
        access_log=cfg.access_log,
    )
