from __future__ import annotations

import os
import threading
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError

from consentkeeper.core.config.io import atomic_write_json, backup_file, quarantine_corrupt, read_json_file
from consentkeeper.core.errors import StorageError
from consentkeeper.core.logger import get_logger
from consentkeeper.core.store.models import UserCollection, UserRecord


class JsonFileRecordStore:
    """
    `{"users": [...]}` in a single JSON file, re-read on every load and
    rewritten atomically on every save.
    """

    def __init__(self, *, path: str, backups_dir: Optional[str] = None, logger=None):
        self.path = path
        self.backups_dir = backups_dir or os.path.join(os.path.dirname(path) or ".", "backups")
        self.logger = logger or get_logger()
        self._lock = threading.Lock()

    def ensure_exists(self) -> bool:
        """Create an empty store file if absent. Returns True when one was written."""
        if os.path.exists(self.path):
            return False
        self.save(UserCollection())
        self.logger.info(f"Created empty record store at {self.path}")
        return True

    def load(self) -> UserCollection:
        with self._lock:
            rr = read_json_file(self.path)
            if not rr.ok:
                if rr.error != "missing":
                    self._quarantine(rr.error or "unreadable")
                return UserCollection()
            users_raw = rr.data.get("users")
            if users_raw is None:
                users_raw = []
            if not isinstance(users_raw, list):
                self._quarantine("users_not_a_list")
                return UserCollection()
            good: List[UserRecord] = []
            dropped: List[str] = []
            for idx, raw in enumerate(users_raw):
                try:
                    good.append(UserRecord.model_validate(raw))
                except PydanticValidationError:
                    rid = raw.get("id") if isinstance(raw, dict) else None
                    dropped.append(str(rid) if rid is not None else f"#{idx}")
            if dropped:
                # The live file is left alone; it is only replaced by the next save.
                copied = backup_file(self.path, self.backups_dir, reason="partial")
                self.logger.warning(f"Record store {self.path}: skipped {len(dropped)} invalid record(s) {dropped}. Full copy: {copied}")
            return UserCollection.model_validate({**rr.data, "users": good})

    def save(self, collection: UserCollection) -> None:
        with self._lock:
            try:
                atomic_write_json(self.path, collection.to_document())
            except OSError as e:
                raise StorageError("Could not write record store.", path=self.path, error=str(e)) from e

    def _quarantine(self, reason: str) -> None:
        moved = quarantine_corrupt(self.path, self.backups_dir)
        self.logger.warning(f"Record store {self.path} unreadable ({reason}); starting empty. Corrupt copy: {moved}")
