from __future__ import annotations

import json
import os
import shutil
import tempfile
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ReadResult:
    ok: bool
    data: Dict[str, Any]
    error: Optional[str] = None


def _ts() -> str:
    return time.strftime("%Y%m%d_%H%M%S", time.gmtime())


def ensure_dirs(*dirs: str) -> None:
    for d in dirs:
        if d:
            os.makedirs(d, exist_ok=True)


def read_json_file(path: str) -> ReadResult:
    if not os.path.exists(path):
        return ReadResult(ok=False, data={}, error="missing")
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = f.read()
        # An empty file reads as an empty object.
        obj = json.loads(raw or "{}")
        if not isinstance(obj, dict):
            return ReadResult(ok=False, data={}, error="not_object")
        return ReadResult(ok=True, data=obj)
    except json.JSONDecodeError as e:
        return ReadResult(ok=False, data={}, error=f"corrupt_json:{e}")
    except (OSError, UnicodeDecodeError) as e:
        return ReadResult(ok=False, data={}, error=str(e))


def atomic_write_json(path: str, data: Dict[str, Any]) -> None:
    """Write via a temp file in the same directory, then os.replace. OSError propagates."""
    ensure_dirs(os.path.dirname(path))
    fd, tmp = tempfile.mkstemp(prefix=".tmp_", suffix=".json", dir=os.path.dirname(path) or ".")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp, path)
    finally:
        try:
            if os.path.exists(tmp):
                os.remove(tmp)
        except OSError:
            pass


def quarantine_corrupt(path: str, backups_dir: str) -> Optional[str]:
    """
    Move an unreadable file aside as backups/<name>.<ts>.corrupt.json.
    Returns the new location, or None if nothing was moved.
    """
    if not os.path.exists(path):
        return None
    try:
        ensure_dirs(backups_dir)
        out = os.path.join(backups_dir, f"{os.path.basename(path)}.{_ts()}.corrupt.json")
        shutil.move(path, out)
        return out
    except OSError:
        return None


def backup_file(path: str, backups_dir: str, *, reason: str) -> Optional[str]:
    """Copy (not move) path to backups/<name>.<ts>.<reason>.json."""
    if not os.path.exists(path):
        return None
    try:
        ensure_dirs(backups_dir)
        out = os.path.join(backups_dir, f"{os.path.basename(path)}.{_ts()}.{reason}.json")
        shutil.copy2(path, out)
        return out
    except OSError:
        return None
