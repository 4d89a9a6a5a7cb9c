from __future__ import annotations

"""
User consent lifecycle: create, read, export, erase, update consent.

Every mutating call follows the same order: load the whole collection, apply
one change, save the whole collection, append one audit entry. Export also
audits but never saves. Nothing here knows about HTTP.
"""

import math
from typing import Any, Dict, List, Mapping, Optional

from consentkeeper.core.audit import AuditAction, AuditLog
from consentkeeper.core.clock import Clock, SystemClock, iso_now
from consentkeeper.core.errors import NotFoundError, ValidationError
from consentkeeper.core.ids import IdGenerator, IdSource
from consentkeeper.core.store import RecordStore, UserRecord

DEFAULT_CONSENT_SOURCE = "web"


def is_truthy(value: Any) -> bool:
    """JSON truthiness: null, false, 0, NaN and "" are falsy; [] and {} are not."""
    if value is None or value is False:
        return False
    if isinstance(value, (int, float)):
        return value != 0 and not (isinstance(value, float) and math.isnan(value))
    if isinstance(value, str):
        return value != ""
    return True


class UserService:
    def __init__(self, *, store: RecordStore, audit: AuditLog, ids: Optional[IdSource] = None, clock: Optional[Clock] = None):
        self.store = store
        self.audit = audit
        self.ids = ids or IdGenerator()
        self.clock = clock or SystemClock()

    def create_user(
        self,
        *,
        email: Any,
        consent: Any,
        name: Any = None,
        data: Any = None,
        requester: Optional[str] = None,
    ) -> str:
        # consent is checked before email
        if not is_truthy(consent):
            raise ValidationError("consent_required", "Consent is required to create a user.")
        if not isinstance(email, str) or not email:
            raise ValidationError("email_required", "Email is required.")
        if name is not None and not isinstance(name, str):
            raise ValidationError("invalid_request", "Name must be a string.", field="name")
        if data is not None and not isinstance(data, Mapping):
            raise ValidationError("invalid_request", "Data must be an object.", field="data")

        collection = self.store.load()
        now = iso_now(self.clock)
        record = UserRecord(
            id=self.ids.next(),
            name=name or None,
            email=email,
            data=dict(data or {}),
            consent=True,
            consent_timestamp=now,
            consent_source=requester or DEFAULT_CONSENT_SOURCE,
            created_at=now,
        )
        collection.add(record)
        self.store.save(collection)
        return record.id

    def list_users(self) -> List[Dict[str, Any]]:
        return [s.model_dump(by_alias=True) for s in self.store.load().summaries()]

    def get_user(self, user_id: str) -> UserRecord:
        user = self.store.load().find(user_id)
        if user is None:
            raise NotFoundError(user_id=user_id)
        return user

    def export_user(self, user_id: str, *, requester: Optional[str] = None) -> Dict[str, Any]:
        user = self.get_user(user_id)
        exported_at = iso_now(self.clock)
        out = {
            "exportedAt": exported_at,
            "exportedBy": requester or None,
            "user": user.to_public(),
        }
        self.audit.append(AuditAction.export, user.id, requester, {"exportedAt": exported_at})
        return out

    def delete_user(self, user_id: str, *, requester: Optional[str] = None) -> Dict[str, Any]:
        collection = self.store.load()
        if not collection.remove(user_id):
            raise NotFoundError(user_id=user_id)
        self.store.save(collection)
        self.audit.append(AuditAction.delete, user_id, requester, {})
        return {"deleted": True}

    def update_consent(self, user_id: str, consent: Any, *, requester: Optional[str] = None) -> Dict[str, Any]:
        # type check comes before the lookup
        if not isinstance(consent, bool):
            raise ValidationError("consent_boolean_required", "Consent must be a boolean.")
        collection = self.store.load()
        user = collection.find(user_id)
        if user is None:
            raise NotFoundError(user_id=user_id)
        user.consent = consent
        user.consent_timestamp = iso_now(self.clock)
        user.consent_source = requester or user.consent_source or None
        self.store.save(collection)
        self.audit.append(
            AuditAction.consent_change,
            user.id,
            requester,
            {"consent": user.consent, "consentTimestamp": user.consent_timestamp},
        )
        return {"id": user.id, "consent": user.consent, "consentTimestamp": user.consent_timestamp}
