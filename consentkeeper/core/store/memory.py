from __future__ import annotations

import threading
from typing import Any, Dict

from consentkeeper.core.store.models import UserCollection


class InMemoryRecordStore:
    """Process-local store. Loads and saves copy, so callers never share state."""

    def __init__(self, initial: Dict[str, Any] | None = None):
        self._lock = threading.Lock()
        self._doc: Dict[str, Any] = UserCollection.model_validate(initial or {"users": []}).to_document()
        self.saves = 0

    def load(self) -> UserCollection:
        with self._lock:
            return UserCollection.model_validate(self._doc)

    def save(self, collection: UserCollection) -> None:
        with self._lock:
            self._doc = collection.to_document()
            self.saves += 1

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return UserCollection.model_validate(self._doc).to_document()
