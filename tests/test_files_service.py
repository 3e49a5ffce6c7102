"""Handler logic against in-memory fakes of the store and upload directory."""
import asyncio
from io import BytesIO
from types import SimpleNamespace

import pytest
from fastapi import UploadFile
from sqlalchemy.exc import OperationalError

from filedrop.files.service import upload_files, list_files, delete_file, download_url
from filedrop.shared.errors import (
    NoFilesError, TooManyFilesError, RecordNotFoundError, StorageError, MetadataError,
)

class MemoryStore:
    def __init__(self):
        self.rows = {}
        self.counter = None
        self.fail_insert = False
        self.fail_delete = False

    def count(self):
        return len(self.rows)

    def reserve_indices(self, n):
        if self.counter is None:
            self.counter = self.count()
        self.counter += n
        return list(range(self.counter - n + 1, self.counter + 1))

    def insert_many(self, rows):
        if self.fail_insert:
            raise OperationalError("INSERT", {}, Exception("down"))
        for filename, index in rows:
            rid = f"id{len(self.rows) + 1}"
            self.rows[rid] = SimpleNamespace(
                id=rid, filename=filename, index=index, upload_date="2024-01-01T00:00:00Z"
            )

    def find_all(self):
        return sorted(self.rows.values(), key=lambda r: r.index)

    def find_by_id(self, file_id):
        return self.rows.get(file_id)

    def delete_by_id(self, file_id):
        if self.fail_delete:
            raise OperationalError("DELETE", {}, Exception("down"))
        removed = self.rows.pop(file_id, None) is not None
        if removed and self.counter is not None:
            self.counter -= 1
        return removed

class MemoryUploads:
    root = "memory"

    def __init__(self):
        self.blobs = {}
        self.fail_remove = False

    async def save(self, file):
        name = f"{len(self.blobs) + 1000}-{file.filename}"
        self.blobs[name] = await file.read()
        return name

    def remove(self, name):
        if self.fail_remove:
            raise PermissionError(13, "Permission denied", name)
        del self.blobs[name]

def _part(name, data=b"data"):
    return UploadFile(file=BytesIO(data), filename=name)

def _upload(store, uploads, *parts, max_files=10):
    return asyncio.run(upload_files(store, uploads, list(parts), max_files=max_files))

@pytest.fixture
def store():
    return MemoryStore()

@pytest.fixture
def uploads():
    return MemoryUploads()

def test_indices_follow_existing_count(store, uploads):
    _upload(store, uploads, _part("a"), _part("b"))
    names = _upload(store, uploads, _part("c"), _part("d"), _part("e"))
    by_name = {r.filename: r.index for r in store.find_all()}
    assert [by_name[n] for n in names] == [3, 4, 5]

def test_no_files_has_no_side_effects(store, uploads):
    with pytest.raises(NoFilesError):
        _upload(store, uploads)
    with pytest.raises(NoFilesError):
        asyncio.run(upload_files(store, uploads, None))
    assert store.rows == {} and uploads.blobs == {}

def test_parts_without_filename_are_ignored(store, uploads):
    with pytest.raises(NoFilesError):
        _upload(store, uploads, _part(""))
    names = _upload(store, uploads, _part(""), _part("real.txt"))
    assert len(names) == 1 and names[0].endswith("real.txt")

def test_too_many_files(store, uploads):
    with pytest.raises(TooManyFilesError):
        _upload(store, uploads, _part("a"), _part("b"), _part("c"), max_files=2)
    assert uploads.blobs == {}

def test_insert_failure_keeps_bytes(store, uploads):
    store.fail_insert = True
    with pytest.raises(MetadataError) as exc:
        _upload(store, uploads, _part("a.txt", b"A"))
    assert exc.value.status_code == 500
    assert list(uploads.blobs.values()) == [b"A"]
    assert store.rows == {}

def test_write_failure_is_storage_error(store, uploads, monkeypatch):
    async def broken(file):
        raise OSError(28, "No space left on device")
    monkeypatch.setattr(uploads, "save", broken)
    with pytest.raises(StorageError):
        _upload(store, uploads, _part("a.txt"))
    assert store.rows == {}

def test_list_builds_urls(store, uploads):
    _upload(store, uploads, _part("a b.txt"))
    [out] = list_files(store, "https://files.example.com/", "/uploads")
    assert out.index == 1
    assert out.url == f"https://files.example.com/uploads/{out.filename.replace(' ', '%20')}"
    assert "uploadDate" in out.model_dump(by_alias=True)

def test_download_url_normalizes_slashes():
    assert download_url("http://h:3000/", "uploads/", "x.txt") == "http://h:3000/uploads/x.txt"

def test_delete_unknown(store, uploads):
    with pytest.raises(RecordNotFoundError):
        delete_file(store, uploads, "nope")

def test_delete_removes_file_then_record(store, uploads):
    _upload(store, uploads, _part("a"), _part("b"))
    first = store.find_all()[0]
    delete_file(store, uploads, first.id)
    assert first.filename not in uploads.blobs
    assert [r.id for r in store.find_all()] != [first.id]
    assert store.find_by_id(first.id) is None

def test_delete_keeps_record_when_file_removal_fails(store, uploads):
    _upload(store, uploads, _part("a"))
    rec = store.find_all()[0]
    uploads.fail_remove = True
    with pytest.raises(StorageError):
        delete_file(store, uploads, rec.id)
    assert store.find_by_id(rec.id) is rec
    assert rec.filename in uploads.blobs

def test_delete_record_failure_leaves_orphan_record(store, uploads):
    _upload(store, uploads, _part("a"))
    rec = store.find_all()[0]
    store.fail_delete = True
    with pytest.raises(MetadataError):
        delete_file(store, uploads, rec.id)
    assert rec.filename not in uploads.blobs
    assert store.find_by_id(rec.id) is rec

def test_indices_follow_count_after_delete(store, uploads):
    _upload(store, uploads, _part("a"), _part("b"), _part("c"))
    delete_file(store, uploads, store.find_all()[0].id)
    [name] = _upload(store, uploads, _part("d"))
    assert {r.filename: r.index for r in store.find_all()}[name] == 3
