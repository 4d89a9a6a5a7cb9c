from __future__ import annotations

from typing import Protocol

from consentkeeper.core.store.models import UserCollection


class RecordStore(Protocol):
    def load(self) -> UserCollection:
        """Current collection. Never raises; missing or corrupt state reads as empty."""
        ...

    def save(self, collection: UserCollection) -> None:
        """Replace the stored collection. Raises StorageError on I/O failure."""
        ...
