from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from consentkeeper.core.audit.models import AuditAction, AuditEntry
from consentkeeper.core.audit.store_jsonl import AuditSink
from consentkeeper.core.clock import Clock, SystemClock, iso_now
from consentkeeper.core.logger import get_logger


@dataclass(frozen=True)
class AuditWriteResult:
    ok: bool
    entry: Optional[AuditEntry] = None
    error: Optional[str] = None


class AuditLog:
    """
    Best-effort audit trail for consent-relevant actions.

    `append` never raises: a failed write is logged and reported in the
    returned result, and the caller's primary operation carries on.
    """

    def __init__(self, *, sink: AuditSink, clock: Optional[Clock] = None, logger=None):
        self.sink = sink
        self.clock = clock or SystemClock()
        self.logger = logger or get_logger()

    def append(
        self,
        action: AuditAction | str,
        subject_id: Optional[str],
        requester: Optional[str],
        details: Optional[Dict[str, Any]] = None,
    ) -> AuditWriteResult:
        try:
            entry = AuditEntry(
                ts=iso_now(self.clock),
                action=AuditAction(action),
                user_id=subject_id or None,
                requester=requester or None,
                details=dict(details or {}),
            )
            self.sink.write(entry)
        except Exception as e:  # noqa: BLE001
            self.logger.error(f"Failed to write audit log entry action={action} user_id={subject_id}: {e!r}")
            return AuditWriteResult(ok=False, error=f"{type(e).__name__}: {e}")
        return AuditWriteResult(ok=True, entry=entry)
