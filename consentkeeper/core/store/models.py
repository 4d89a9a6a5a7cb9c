from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class UserRecord(BaseModel):
    # Persisted keys are camelCase. Unknown keys found on disk are kept so a
    # rewrite never drops them.
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    name: Optional[str] = None
    email: str
    data: Dict[str, Any] = Field(default_factory=dict)
    consent: bool = False
    consent_timestamp: Optional[str] = Field(default=None, alias="consentTimestamp")
    consent_source: Optional[str] = Field(default=None, alias="consentSource")
    created_at: str = Field(alias="createdAt")

    def to_public(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class UserSummary(BaseModel):
    """Listing view: no name, data or consent fields."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    email: str
    created_at: str = Field(alias="createdAt")


class UserCollection(BaseModel):
    model_config = ConfigDict(extra="allow")

    users: List[UserRecord] = Field(default_factory=list)

    def find(self, user_id: str) -> Optional[UserRecord]:
        for u in self.users:
            if u.id == user_id:
                return u
        return None

    def add(self, record: UserRecord) -> None:
        self.users.append(record)

    def remove(self, user_id: str) -> bool:
        for idx, u in enumerate(self.users):
            if u.id == user_id:
                del self.users[idx]
                return True
        return False

    def summaries(self) -> List[UserSummary]:
        return [UserSummary(id=u.id, email=u.email, created_at=u.created_at) for u in self.users]

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
