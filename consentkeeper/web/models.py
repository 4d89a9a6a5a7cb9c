from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

# Create body fields stay untyped: the user service checks consent, then
# email, then the optional fields, and each check has its own error code.


class CreateUserRequest(BaseModel):
    name: Any = None
    email: Any = None
    data: Any = None
    consent: Any = None


class ConsentUpdateRequest(BaseModel):
    consent: Any = None


class CreateUserResponse(BaseModel):
    id: str


class DeleteUserResponse(BaseModel):
    deleted: bool = True


class HealthResponse(BaseModel):
    status: str = Field(default="ok")
