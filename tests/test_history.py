"""Tests for the upload history store."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from picser.history import (
    HISTORY_LIMIT,
    STORAGE_KEY,
    JsonFileBackend,
    KeyValueBackend,
    KeyValueHistoryStore,
    MemoryBackend,
    record_from_result,
)
from picser.schemas import HistoryRecord, RepositoryTarget, UploadResult
from picser.uploader import RepoTarget, UploadRequest, upload_image
from picser.urls import derive_urls
from tests.conftest import FakeWriter


def _record(i: int) -> HistoryRecord:
    return HistoryRecord(
        id=str(i),
        filename=f"uploads/{i}.png",
        url=f"https://raw.githubusercontent.com/acme/imgs/main/uploads/{i}.png",
        upload_date="2024-05-01T10:20:30+00:00",
        size=i,
        type="image/png",
    )


class BrokenBackend(KeyValueBackend):
    def get(self, key):
        raise OSError("storage unavailable")

    def set(self, key, value):
        raise OSError("quota exceeded")

    def remove(self, key):
        raise OSError("storage unavailable")


class ReadOnlyBackend(MemoryBackend):
    def set(self, key, value):
        raise OSError("quota exceeded")


def test_empty_history() -> None:
    assert KeyValueHistoryStore(MemoryBackend()).list() == []


def test_append_puts_newest_first() -> None:
    store = KeyValueHistoryStore(MemoryBackend())

    store.append(_record(1))
    store.append(_record(2))

    assert [r.id for r in store.list()] == ["2", "1"]


def test_history_is_capped_at_fifty() -> None:
    """After any number of insertions the list holds at most 50, newest first."""
    store = KeyValueHistoryStore(MemoryBackend())

    for i in range(HISTORY_LIMIT + 15):
        returned = store.append(_record(i))
        assert len(returned) <= HISTORY_LIMIT
        assert returned[0].id == str(i)

    records = store.list()
    assert len(records) == HISTORY_LIMIT
    assert records[0].id == str(HISTORY_LIMIT + 14)
    assert records[-1].id == "15"


def test_append_with_custom_cap() -> None:
    store = KeyValueHistoryStore(MemoryBackend())
    for i in range(5):
        store.append(_record(i), cap=3)

    assert [r.id for r in store.list()] == ["4", "3", "2"]


def test_clear_removes_everything() -> None:
    backend = MemoryBackend()
    store = KeyValueHistoryStore(backend)
    store.append(_record(1))

    store.clear()

    assert store.list() == []
    assert backend.get(STORAGE_KEY) is None


def test_history_is_stored_as_json_under_single_key() -> None:
    backend = MemoryBackend()
    KeyValueHistoryStore(backend).append(_record(1))

    stored = json.loads(backend.get(STORAGE_KEY))
    assert isinstance(stored, list)
    assert stored[0]["filename"] == "uploads/1.png"


def test_unreadable_history_reads_as_empty() -> None:
    backend = MemoryBackend()
    backend.set(STORAGE_KEY, "{not json")

    assert KeyValueHistoryStore(backend).list() == []


def test_non_list_history_reads_as_empty() -> None:
    backend = MemoryBackend()
    backend.set(STORAGE_KEY, json.dumps({"id": "1"}))

    assert KeyValueHistoryStore(backend).list() == []


def test_storage_failures_degrade_silently() -> None:
    store = KeyValueHistoryStore(BrokenBackend())

    assert store.list() == []
    assert store.append(_record(1)) == []
    store.clear()


def test_failed_write_leaves_list_unchanged() -> None:
    backend = ReadOnlyBackend()
    MemoryBackend.set(backend, STORAGE_KEY, json.dumps([_record(1).model_dump(by_alias=True)]))
    store = KeyValueHistoryStore(backend)

    returned = store.append(_record(2))

    assert [r.id for r in returned] == ["1"]
    assert [r.id for r in store.list()] == ["1"]


def test_json_file_backend_persists_across_instances(tmp_path: Path) -> None:
    path = tmp_path / "state" / "history.json"
    KeyValueHistoryStore(JsonFileBackend(path)).append(_record(1))

    reopened = KeyValueHistoryStore(JsonFileBackend(path))

    assert [r.id for r in reopened.list()] == ["1"]
    assert STORAGE_KEY in json.loads(path.read_text(encoding="utf-8"))


def test_json_file_backend_keeps_other_keys(tmp_path: Path) -> None:
    backend = JsonFileBackend(tmp_path / "history.json")
    backend.set("other", "value")
    store = KeyValueHistoryStore(backend)
    store.append(_record(1))

    store.clear()

    assert backend.get("other") == "value"
    assert backend.get(STORAGE_KEY) is None


def test_json_file_backend_corrupt_file_degrades(tmp_path: Path) -> None:
    path = tmp_path / "history.json"
    path.write_text("garbage", encoding="utf-8")
    store = KeyValueHistoryStore(JsonFileBackend(path))

    assert store.list() == []


def test_json_file_backend_recovers_from_corrupt_file(tmp_path: Path) -> None:
    """A corrupt file is overwritten by the next write or clear."""
    # Given: A history file holding unreadable content
    path = tmp_path / "history.json"
    path.write_text("garbage", encoding="utf-8")
    store = KeyValueHistoryStore(JsonFileBackend(path))

    # When: Clearing and then appending
    store.clear()
    returned = store.append(_record(1))

    # Then: The write succeeds and the file is valid JSON again
    assert [r.id for r in returned] == ["1"]
    assert [r.id for r in store.list()] == ["1"]
    assert STORAGE_KEY in json.loads(path.read_text(encoding="utf-8"))

    store.clear()
    assert store.list() == []


def test_record_from_result() -> None:
    urls = derive_urls("acme", "imgs", "main", "c0ffee", "pics/a.png")
    result = UploadResult(
        url=urls.raw,
        urls=urls,
        filename="pics/a.png",
        size=42,
        type="image/png",
        commit_sha="c0ffee",
        github_url="https://github.com/acme/imgs/blob/main/pics/a.png",
        repository=RepositoryTarget(owner="acme", repo="imgs", branch="main", folder="pics"),
    )
    now = datetime(2024, 5, 1, 10, 20, 30, tzinfo=timezone.utc)

    record = record_from_result(result, now=now)

    assert record.id == str(int(now.timestamp() * 1000))
    assert record.upload_date == "2024-05-01T10:20:30+00:00"
    assert record.url == urls.raw
    assert record.urls == urls
    assert record.size == 42


@pytest.mark.parametrize("count", [0, 1, 49, 50, 51, 120])
def test_cap_holds_for_any_insertion_count(count: int) -> None:
    store = KeyValueHistoryStore(MemoryBackend())
    for i in range(count):
        store.append(_record(i))

    records = store.list()
    assert len(records) == min(count, HISTORY_LIMIT)
    if count:
        assert records[0].id == str(count - 1)


def test_reads_history_written_with_camel_case_date() -> None:
    """Records saved by the browser front-end use the uploadDate key."""
    # Given: A stored list in the front-end's localStorage format
    backend = MemoryBackend()
    backend.set(
        STORAGE_KEY,
        json.dumps([
            {
                "id": "1714558830000",
                "filename": "uploads/a.png",
                "url": "https://raw.githubusercontent.com/acme/imgs/main/uploads/a.png",
                "uploadDate": "2024-05-01T10:20:30.000Z",
                "size": 42,
                "type": "image/png",
            }
        ]),
    )
    store = KeyValueHistoryStore(backend)

    # When: Reading and appending
    records = store.list()
    store.append(_record(2))

    # Then: The record is readable and the stored key name is preserved
    assert [r.upload_date for r in records] == ["2024-05-01T10:20:30.000Z"]
    stored = json.loads(backend.get(STORAGE_KEY))
    assert [item["uploadDate"] for item in stored] == ["2024-05-01T10:20:30+00:00", "2024-05-01T10:20:30.000Z"]
    assert all("upload_date" not in item for item in stored)


def test_client_saves_upload_result_to_history(tmp_path: Path) -> None:
    """A client keeps each successful upload in its local history."""
    # Given: A successful upload result and a file-backed store

    upload = UploadRequest(content=b"\x89PNG", filename="cat.png", content_type="image/png", size=4)
    result = upload_image(upload, lambda: RepoTarget(token="t", owner="acme", repo="imgs"), write_file=FakeWriter())
    store = KeyValueHistoryStore(JsonFileBackend(tmp_path / "history.json"))

    # When: Saving the result
    store.append(record_from_result(result))

    # Then: The newest record points at the committed file
    saved = store.list()[0]
    assert saved.filename == result.filename
    assert saved.url == result.urls.raw
    assert saved.urls == result.urls
