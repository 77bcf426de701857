import json

import pytest

from errors import StoreError
from store import JsonDocumentStore


def test_missing_file_reads_as_empty(store):
    assert store.find("posts") == []


def test_insert_creates_file_under_database(store, data_path):
    doc_id = store.insert_one("posts", {"title": "Hi"})

    raw = json.loads(data_path.read_text(encoding="utf-8"))
    assert raw == {"blog": {"posts": [{"_id": doc_id, "title": "Hi"}]}}
    assert len(doc_id) == 32


def test_find_one_and_update(store):
    doc_id = store.insert_one("posts", {"title": "Hi", "n": 1})

    assert store.update_one("posts", doc_id, {"n": 2, "_id": "ignored"}) == 1
    assert store.find_one("posts", doc_id) == {"_id": doc_id, "title": "Hi", "n": 2}


def test_update_and_delete_report_zero_for_unknown_id(store):
    unknown = "0" * 32
    assert store.update_one("posts", unknown, {"n": 1}) == 0
    assert store.delete_one("posts", unknown) == 0
    assert store.find_one("posts", unknown) is None


def test_delete_removes_only_matching_document(store):
    keep = store.insert_one("posts", {"title": "keep"})
    drop = store.insert_one("posts", {"title": "drop"})

    assert store.delete_one("posts", drop) == 1
    assert [doc["_id"] for doc in store.find("posts")] == [keep]


@pytest.mark.parametrize("bad_id", ["", "abc", "z" * 32, "0" * 33])
def test_malformed_identifier_is_a_store_error(store, bad_id):
    with pytest.raises(StoreError, match="not a valid identifier"):
        store.find_one("posts", bad_id)
    with pytest.raises(StoreError):
        store.delete_one("posts", bad_id)


def test_corrupt_file_is_a_store_error(data_path):
    data_path.parent.mkdir(parents=True)
    data_path.write_text("{not json", encoding="utf-8")

    with pytest.raises(StoreError, match="Could not read"):
        JsonDocumentStore(data_path).find("posts")


def test_find_returns_copies(store):
    store.insert_one("posts", {"title": "Hi"})
    store.find("posts")[0]["title"] = "changed"

    assert store.find("posts")[0]["title"] == "Hi"
