from __future__ import annotations

import uuid
from typing import Protocol


class IdSource(Protocol):
    def next(self) -> str: ...


class IdGenerator:
    """Random 128-bit ids as 32 hex chars. Collisions are not checked."""

    def next(self) -> str:
        return uuid.uuid4().hex
