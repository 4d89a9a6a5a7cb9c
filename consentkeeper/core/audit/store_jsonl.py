from __future__ import annotations

import json
import os
import threading
from typing import Any, Dict, Iterator, List, Protocol

from consentkeeper.core.audit.models import AuditEntry


class AuditSink(Protocol):
    def write(self, entry: AuditEntry) -> None: ...


class JsonlAuditSink:
    """Append-only audit file, one JSON object per line. Lines are never rewritten."""

    def __init__(self, *, path: str):
        self.path = path
        self._lock = threading.Lock()

    def ensure_exists(self) -> None:
        parent = os.path.dirname(self.path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(self.path, "a", encoding="utf-8"):
            pass

    def write(self, entry: AuditEntry) -> None:
        line = entry.to_line()
        with self._lock:
            parent = os.path.dirname(self.path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
                try:
                    f.flush()
                    os.fsync(f.fileno())
                except OSError:
                    pass

    def iter_entries(self) -> Iterator[Dict[str, Any]]:
        if not os.path.exists(self.path):
            return iter(())

        def _gen() -> Iterator[Dict[str, Any]]:
            with open(self.path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        obj = json.loads(line)
                    except ValueError:
                        continue
                    if isinstance(obj, dict):
                        yield obj

        return _gen()

    def tail(self, n: int = 200) -> List[Dict[str, Any]]:
        return list(self.iter_entries())[-max(1, int(n)) :]
