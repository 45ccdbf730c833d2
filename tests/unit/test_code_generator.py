"""
Unit tests for shortener_platform.manager.code_generator.

Covers:
    - length and alphabet of drawn codes
    - redraw while the backend reports a code as taken
    - the attempt bound turning a livelock into CodeGenerationError
    - backend errors propagating unchanged
    - in-batch duplicate detection not advancing the batch index
"""

import re
from itertools import chain, repeat

import pytest

from shortener_platform.manager import code_generator
from shortener_platform.manager.code_generator import (
    BatchItem,
    BatchResult,
    generate_short_batch,
    generate_short_code,
    random_code,
)
from shortener_platform.storage.exceptions import CodeGenerationError, StorageError
from shortener_platform.storage.models import URLRecord

CODE_PATTERN = re.compile(r"^[0-9a-zA-Z]{8}$")


class AlwaysTaken:
    def exists(self, short_code):
        return True


class Broken:
    def exists(self, short_code):
        raise StorageError("db down")


def _feed(monkeypatch, codes):
    it = iter(codes)
    monkeypatch.setattr(code_generator, "random_code", lambda length=None: next(it))


def test_random_code_length_charset_and_diversity():
    samples = [random_code() for _ in range(200)]
    assert all(CODE_PATTERN.match(code) for code in samples)
    assert len(set(samples)) > 190


def test_random_code_length_is_clamped():
    assert len(random_code(2)) == 4
    assert len(random_code(100)) == 32


def test_generate_short_code_skips_taken(monkeypatch, storage):
    storage.put(URLRecord("taken001", "https://a.com"))
    _feed(monkeypatch, ["taken001", "taken001", "free0001"])
    assert generate_short_code(storage) == "free0001"


def test_generate_short_code_bounded():
    with pytest.raises(CodeGenerationError):
        generate_short_code(AlwaysTaken(), max_attempts=5)


def test_generate_short_code_propagates_storage_error():
    with pytest.raises(StorageError, match="db down"):
        generate_short_code(Broken())


def test_generated_codes_are_unique(storage):
    codes = set()
    for i in range(500):
        code = generate_short_code(storage)
        storage.put(URLRecord(code, f"https://{i}.example.com"))
        codes.add(code)
    assert len(codes) == 500


def test_generate_short_batch(storage):
    items = [BatchItem("1", "https://a.com"), BatchItem("2", "https://b.com")]
    results, records = generate_short_batch(storage, items, "u1")
    assert [r.correlation_id for r in results] == ["1", "2"]
    assert [r.owner_id for r in records] == ["u1", "u1"]
    assert [r.original_url for r in records] == ["https://a.com", "https://b.com"]
    for result, record in zip(results, records):
        assert result == BatchResult(result.correlation_id, f"http://localhost:8080/{record.short_code}")
    assert storage.get_stats().urls == 0  # nothing persisted yet


def test_generate_short_batch_retries_in_batch_duplicates(monkeypatch, storage):
    _feed(monkeypatch, ["code0001", "code0001", "code0001", "code0002"])
    items = [BatchItem("a", "https://a.com"), BatchItem("b", "https://b.com")]
    results, records = generate_short_batch(storage, items, "u1")
    assert [r.short_code for r in records] == ["code0001", "code0002"]
    assert [r.correlation_id for r in results] == ["a", "b"]


def test_generate_short_batch_bounded_on_duplicates(monkeypatch, storage):
    _feed(monkeypatch, chain(["same0001"], repeat("same0001")))
    items = [BatchItem("a", "https://a.com"), BatchItem("b", "https://b.com")]
    with pytest.raises(CodeGenerationError):
        generate_short_batch(storage, items, "u1", max_attempts=3)
