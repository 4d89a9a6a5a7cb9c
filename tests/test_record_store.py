from __future__ import annotations

import json
import os

import pytest

from consentkeeper.core.errors import StorageError
from consentkeeper.core.store import JsonFileRecordStore, UserCollection, UserRecord

from .helpers.fakes import RecordingLogger


def _user(uid: str = "u1", **kw) -> UserRecord:
    base = dict(id=uid, email=f"{uid}@x.com", consent=True, consent_timestamp="2024-01-01T00:00:00.000Z", consent_source="web", created_at="2024-01-01T00:00:00.000Z")
    base.update(kw)
    return UserRecord(**base)


def _store(tmp_path, logger=None) -> JsonFileRecordStore:
    return JsonFileRecordStore(path=str(tmp_path / "data" / "db.json"), backups_dir=str(tmp_path / "data" / "backups"), logger=logger or RecordingLogger())


def test_missing_file_loads_empty(tmp_path):
    s = _store(tmp_path)
    assert s.load().users == []
    assert not os.path.exists(s.path)


def test_ensure_exists_creates_empty_document_once(tmp_path):
    s = _store(tmp_path)
    assert s.ensure_exists() is True
    with open(s.path, "r", encoding="utf-8") as f:
        assert json.load(f) == {"users": []}
    assert s.ensure_exists() is False


def test_save_then_load_uses_camel_case_on_disk(tmp_path):
    s = _store(tmp_path)
    c = UserCollection()
    c.add(_user("u1", name="Ada", data={"k": [1, 2]}))
    s.save(c)
    with open(s.path, "r", encoding="utf-8") as f:
        doc = json.load(f)
    assert set(doc["users"][0]) == {"id", "name", "email", "data", "consent", "consentTimestamp", "consentSource", "createdAt"}
    loaded = s.load()
    assert loaded.find("u1").data == {"k": [1, 2]}


def test_every_load_rereads_the_file(tmp_path):
    s = _store(tmp_path)
    s.save(UserCollection())
    with open(s.path, "w", encoding="utf-8") as f:
        json.dump({"users": [_user("ext").model_dump(by_alias=True)]}, f)
    assert s.load().find("ext") is not None


def test_unknown_keys_survive_rewrite(tmp_path):
    s = _store(tmp_path)
    os.makedirs(os.path.dirname(s.path), exist_ok=True)
    doc = {"users": [{**_user("u1").model_dump(by_alias=True), "legacyFlag": 1}], "meta": {"v": 1}}
    with open(s.path, "w", encoding="utf-8") as f:
        json.dump(doc, f)
    c = s.load()
    c.add(_user("u2"))
    s.save(c)
    with open(s.path, "r", encoding="utf-8") as f:
        after = json.load(f)
    assert after["meta"] == {"v": 1}
    assert after["users"][0]["legacyFlag"] == 1
    assert [u["id"] for u in after["users"]] == ["u1", "u2"]


@pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]", '{"users": 5}'])
def test_corrupt_file_loads_empty_and_is_quarantined(tmp_path, content):
    logger = RecordingLogger()
    s = _store(tmp_path, logger)
    os.makedirs(os.path.dirname(s.path), exist_ok=True)
    with open(s.path, "w", encoding="utf-8") as f:
        f.write(content)

    assert s.load().users == []
    assert not os.path.exists(s.path)
    backups = os.listdir(s.backups_dir)
    assert len(backups) == 1 and backups[0].startswith("db.json.") and backups[0].endswith(".corrupt.json")
    assert logger.messages("warning")


def test_invalid_records_are_skipped_one_by_one(tmp_path):
    logger = RecordingLogger()
    s = _store(tmp_path, logger)
    os.makedirs(os.path.dirname(s.path), exist_ok=True)
    doc = {"users": [_user("good").model_dump(by_alias=True), {"id": "bad", "email": 5}, "junk"]}
    with open(s.path, "w", encoding="utf-8") as f:
        json.dump(doc, f)

    loaded = s.load()
    assert [u.id for u in loaded.users] == ["good"]
    # live file untouched until the next save
    with open(s.path, "r", encoding="utf-8") as f:
        assert json.load(f) == doc
    backups = os.listdir(s.backups_dir)
    assert len(backups) == 1 and backups[0].startswith("db.json.") and backups[0].endswith(".partial.json")
    warnings = logger.messages("warning")
    assert len(warnings) == 1
    assert "skipped 2" in warnings[0] and "bad" in warnings[0] and "#2" in warnings[0]


def test_save_after_partial_load_keeps_valid_records(tmp_path):
    s = _store(tmp_path)
    os.makedirs(os.path.dirname(s.path), exist_ok=True)
    with open(s.path, "w", encoding="utf-8") as f:
        json.dump({"users": [{"id": "x"}, _user("u1").model_dump(by_alias=True)]}, f)

    c = s.load()
    c.add(_user("u2"))
    s.save(c)
    assert [u.id for u in s.load().users] == ["u1", "u2"]


def test_empty_file_loads_empty(tmp_path):
    s = _store(tmp_path)
    os.makedirs(os.path.dirname(s.path), exist_ok=True)
    open(s.path, "w", encoding="utf-8").close()
    assert s.load().users == []
    assert os.path.exists(s.path)


def test_save_failure_raises_storage_error(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x", encoding="utf-8")
    s = JsonFileRecordStore(path=str(blocker / "db.json"), logger=RecordingLogger())
    with pytest.raises(StorageError) as ei:
        s.save(UserCollection())
    assert ei.value.code == "storage_error"


def test_collection_remove(tmp_path):
    c = UserCollection(users=[_user("a"), _user("b")])
    assert c.remove("a") is True
    assert c.remove("a") is False
    assert [u.id for u in c.users] == ["b"]
