from __future__ import annotations

"""
User record storage.

The whole collection is loaded and rewritten as one unit. There is no
indexing, no partial write and no concurrency token: with more than one
writer the last full rewrite wins.
"""

from consentkeeper.core.store.base import RecordStore
from consentkeeper.core.store.json_file import JsonFileRecordStore
from consentkeeper.core.store.memory import InMemoryRecordStore
from consentkeeper.core.store.models import UserCollection, UserRecord, UserSummary

__all__ = [
    "InMemoryRecordStore",
    "JsonFileRecordStore",
    "RecordStore",
    "UserCollection",
    "UserRecord",
    "UserSummary",
]
