"""
Unit tests for ShortenerManager.

Covers:
    - URL validation (valid/invalid)
    - shorten: created vs. conflict (idempotent answer with the existing code)
    - shorten_batch: validation before minting, ordering, empty batch
    - owner listing as an empty list when the owner has nothing
    - backend errors propagating unchanged
"""

import asyncio

import pytest

from shortener_platform.manager.code_generator import BatchItem
from shortener_platform.manager.shortener_manager import ShortenerManager
from shortener_platform.storage.exceptions import GoneError, StorageError, UnsupportedOperationError
from shortener_platform.storage.memory_storage import MemoryStorage


@pytest.mark.parametrize(
    "url,is_valid",
    [
        ("https://example.com", True),
        ("http://sub.example.co/path?q=1", True),
        ("ftp://bad.example.com", False),
        ("not-a-url", False),
        ("https://localhost", False),
        ("", False),
    ],
)
def test_validate_url(manager, url, is_valid):
    if is_valid:
        result = manager.shorten(url, "u1")
        assert result.created is True
    else:
        with pytest.raises(ValueError, match="Invalid URL format"):
            manager.shorten(url, "u1")


def test_shorten_round_trip(manager, storage):
    result = manager.shorten("https://example.com", "u1")
    code = result.short_url.rsplit("/", 1)[-1]
    assert result.short_url == f"http://localhost:8080/{code}"
    assert len(code) == 8
    assert manager.resolve(code) == "https://example.com"
    assert storage.get_urls_by_user_id("u1")[0].original_url == "https://example.com"


def test_shorten_conflict_returns_existing_short_url():
    storage = MemoryStorage(base_url="http://localhost:8080", enforce_unique_original=True)
    manager = ShortenerManager(storage)
    first = manager.shorten("https://example.com", "u1")
    second = manager.shorten("https://example.com", "u2")
    assert first.created is True
    assert second.created is False
    assert second.short_url == first.short_url
    assert storage.get_stats().urls == 1


def test_shorten_without_uniqueness_creates_new_code(manager):
    first = manager.shorten("https://example.com", "u1")
    second = manager.shorten("https://example.com", "u1")
    assert second.created is True
    assert second.short_url != first.short_url


def test_shorten_batch(manager, storage):
    items = [BatchItem("1", "https://a.com"), BatchItem("2", "https://b.com")]
    results = manager.shorten_batch(items, "u1")
    assert [r.correlation_id for r in results] == ["1", "2"]
    assert len({r.short_url for r in results}) == 2
    for result, item in zip(results, items):
        assert manager.resolve(result.short_url.rsplit("/", 1)[-1]) == item.original_url


def test_shorten_batch_validates_before_minting(manager, storage):
    items = [BatchItem("1", "https://a.com"), BatchItem("2", "bad")]
    with pytest.raises(ValueError):
        manager.shorten_batch(items, "u1")
    assert storage.get_stats().urls == 0


def test_shorten_batch_empty(manager):
    with pytest.raises(ValueError, match="Empty batch"):
        manager.shorten_batch([], "u1")


def test_user_urls_empty_list(manager):
    assert manager.user_urls("nobody") == []


def test_storage_error_propagates(manager, monkeypatch):
    def fail(record):
        raise StorageError("disk full")

    monkeypatch.setattr(manager.storage, "put", fail)
    with pytest.raises(StorageError, match="disk full"):
        manager.shorten("https://example.com", "u1")


def test_delete_async_tombstones_only_owner_records(manager):
    mine = manager.shorten("https://mine.com", "u1").short_url.rsplit("/", 1)[-1]
    theirs = manager.shorten("https://theirs.com", "u2").short_url.rsplit("/", 1)[-1]

    async def scenario():
        manager.delete_async([mine, theirs], "u1")
        await manager.pipeline.drain()

    asyncio.run(scenario())
    with pytest.raises(GoneError):
        manager.resolve(mine)
    assert manager.resolve(theirs) == "https://theirs.com"


def test_stats_and_ping(manager):
    manager.shorten("https://a.com", "u1")
    assert manager.stats().urls == 1
    with pytest.raises(UnsupportedOperationError):
        manager.ping()
