"""Tests for the page store and its JSON cache."""

import json

import pytest

from page_translate_ai.store import (
    PageRecord,
    PageStatus,
    PageStore,
    cache_file_name,
    sanitize_filename,
)


def _record(index, text="text", status=PageStatus.SUCCESS):
    return PageRecord(index=index, text=text, status=status)


# ---------------------------------------------------------------------------
# In-memory behaviour
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_upsert_replaces_record_at_same_index(tmp_path):
    store = PageStore(tmp_path)
    store.upsert(_record(1, "first", PageStatus.ERROR))
    store.upsert(_record(1, "second"))

    assert len(store) == 1
    assert store.get(1) == _record(1, "second")


@pytest.mark.unit
def test_ordered_sorts_by_index(tmp_path):
    store = PageStore(tmp_path, [_record(2), _record(0), _record(1)])
    assert [r.index for r in store.ordered()] == [0, 1, 2]


@pytest.mark.unit
def test_upsert_rejects_negative_index(tmp_path):
    store = PageStore(tmp_path)
    with pytest.raises(ValueError):
        store.upsert(_record(-1))


@pytest.mark.unit
def test_drop_beyond_removes_out_of_range_records(tmp_path):
    store = PageStore(tmp_path, [_record(0), _record(3), _record(5)])
    assert store.drop_beyond(3) == [3, 5]
    assert [r.index for r in store.ordered()] == [0]
    assert 3 not in store


@pytest.mark.unit
def test_get_missing_index_returns_none(tmp_path):
    assert PageStore(tmp_path).get(7) is None


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_save_writes_ordered_json(tmp_path):
    store = PageStore(tmp_path, [_record(1, "Глава"), _record(0, "Самость")])
    assert store.save("book.pdf") is True

    data = json.loads((tmp_path / "book.pdf.json").read_text(encoding="utf-8"))
    assert data == [
        {"index": 0, "text": "Самость", "status": "success"},
        {"index": 1, "text": "Глава", "status": "success"},
    ]
    # Non-ASCII text is stored as-is
    assert "Самость" in (tmp_path / "book.pdf.json").read_text(encoding="utf-8")


@pytest.mark.unit
def test_save_then_load_restores_records(tmp_path):
    original = PageStore(
        tmp_path,
        [
            _record(0),
            _record(1, "⚠️ failed", PageStatus.ERROR),
            _record(2, "", PageStatus.PENDING),
        ],
    )
    original.save("book.pdf")

    loaded = PageStore.load(tmp_path, "book.pdf")
    assert loaded is not None
    assert loaded.ordered() == original.ordered()


@pytest.mark.unit
def test_save_leaves_no_temp_files(tmp_path):
    PageStore(tmp_path, [_record(0)]).save("book.pdf")
    assert [p.name for p in tmp_path.iterdir()] == ["book.pdf.json"]


@pytest.mark.unit
def test_save_reports_failure_instead_of_raising(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x")
    store = PageStore(blocker / "cache", [_record(0)])
    assert store.save("book.pdf") is False


@pytest.mark.unit
def test_load_missing_cache_returns_none(tmp_path):
    assert PageStore.load(tmp_path, "missing.pdf") is None


@pytest.mark.unit
@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        '{"index": 0}',
        '[{"index": 0, "text": "x", "status": "done"}]',
        '[{"index": -2, "text": "x", "status": "success"}]',
        '[{"text": "x", "status": "success"}]',
        "[1, 2]",
    ],
)
def test_load_corrupt_cache_returns_none(tmp_path, content):
    (tmp_path / "book.pdf.json").write_text(content, encoding="utf-8")
    assert PageStore.load(tmp_path, "book.pdf") is None


@pytest.mark.unit
def test_load_keeps_last_duplicate(tmp_path):
    payload = [
        {"index": 0, "text": "old", "status": "error"},
        {"index": 0, "text": "new", "status": "success"},
    ]
    (tmp_path / "book.pdf.json").write_text(json.dumps(payload), encoding="utf-8")

    loaded = PageStore.load(tmp_path, "book.pdf")
    assert loaded is not None
    assert loaded.ordered() == [_record(0, "new")]


@pytest.mark.unit
def test_clear_deletes_file_and_records(tmp_path):
    store = PageStore(tmp_path, [_record(0)])
    store.save("book.pdf")

    assert store.clear("book.pdf") is True
    assert len(store) == 0
    assert not (tmp_path / "book.pdf.json").exists()


@pytest.mark.unit
def test_clear_tolerates_missing_file(tmp_path):
    assert PageStore(tmp_path).clear("never-saved.pdf") is True


@pytest.mark.unit
def test_cache_file_name_replaces_path_separators():
    assert cache_file_name("dir/evil:name.pdf") == "dir_evil_name.pdf.json"


@pytest.mark.unit
def test_sanitize_filename_keeps_safe_characters():
    assert sanitize_filename("Книга 1_v2.final-ru") == "Книга 1_v2.final-ru"
    assert sanitize_filename('a\\b*c?"') == "a_b_c__"
