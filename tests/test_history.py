import asyncio
import json
from app.api.schemas import UploadRecord
from app.client.history import HistoryCache, UploadHistory

def record(n, url=None):
    return UploadRecord(url=url or f"http://host/uploads/{n}-s.png", filename=f"{n}-s.png", timestamp=n)

def test_replace_all_sorts_newest_first_and_dedupes():
    history = UploadHistory([record(1), record(3), record(2), record(3)])

    assert [r.timestamp for r in history] == [3, 2, 1]
    assert len(history) == 3

def test_prepend_puts_record_first():
    history = UploadHistory([record(1)])

    history.prepend(record(2))

    assert history[0] == record(2)
    assert history.urls == [record(2).url, record(1).url]

def test_remove():
    history = UploadHistory([record(1), record(2)])

    assert history.remove(record(1).url) is True
    assert history.remove(record(1).url) is False
    assert history.records == [record(2)]

def test_reconcile_prefers_backend():
    """Local records the backend no longer has are dropped; new remote ones appear."""
    history = UploadHistory([record(1), record(2)])

    history.reconcile([record(2), record(5)])

    assert [r.timestamp for r in history] == [5, 2]

def test_cache_round_trip(tmp_path):
    cache = HistoryCache(tmp_path / "history.json")

    asyncio.run(cache.save([record(2), record(1)]))

    document = json.loads((tmp_path / "history.json").read_text())
    assert list(document) == ["uploads"]
    assert asyncio.run(cache.load()) == [record(2), record(1)]

def test_cache_missing_or_corrupt(tmp_path):
    path = tmp_path / "history.json"
    cache = HistoryCache(path)

    assert asyncio.run(cache.load()) == []

    path.write_text("{not json")
    assert asyncio.run(cache.load()) == []

    path.write_text(json.dumps({"other": []}))
    assert asyncio.run(cache.load()) == []
