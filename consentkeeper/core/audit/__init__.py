from __future__ import annotations

from consentkeeper.core.audit.log import AuditLog, AuditWriteResult
from consentkeeper.core.audit.models import AuditAction, AuditEntry
from consentkeeper.core.audit.store_jsonl import AuditSink, JsonlAuditSink

__all__ = ["AuditAction", "AuditEntry", "AuditLog", "AuditSink", "AuditWriteResult", "JsonlAuditSink"]
