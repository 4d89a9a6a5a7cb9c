from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class AuditAction(str, Enum):
    export = "export"
    delete = "delete"
    consent_change = "consent_change"


class AuditEntry(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    ts: str
    action: AuditAction
    user_id: Optional[str] = Field(default=None, alias="userId")
    requester: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)

    def to_line(self) -> str:
        return self.model_dump_json(by_alias=True)
