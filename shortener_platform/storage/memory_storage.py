"""
Storage module for Shortener Platform (in-memory implementation).

Responsibilities:
    - Keep an append-only, ordered list of URL records in process memory
    - Look records up by short code (and by original URL when uniqueness is enforced)
    - Tombstone records on batch delete; never remove them
    - Serialize every read and write behind a single lock

Design:
    - No persistence across restarts. FileStorage subclasses this class and
      overrides the `_persist_*` hooks to mirror writes to a journal file.
    - Hooks run inside the lock and before the in-memory structures change,
      so a failed journal write never leaves memory ahead of the journal.
    - Uniqueness on `short_code` is always enforced. Uniqueness on
      `original_url` is opt-in (`enforce_unique_original`) to match the
      historical behavior of the non-relational backends.
"""

import logging
import threading
from typing import Dict, Iterable, List, Optional, Sequence

from .base import BaseStorage
from .exceptions import (
    ConflictError,
    GoneError,
    NotFoundError,
    ShortCodeTakenError,
    StorageError,
    UnsupportedOperationError,
)
from .models import Stats, URLRecord, UserURL

logger = logging.getLogger(__name__)


class MemoryStorage(BaseStorage):
    backend_name = "memory"

    def __init__(self, base_url: str, enforce_unique_original: bool = False) -> None:
        """
        Initialize empty storage.

        Internal schema:
            self._records  = [URLRecord, ...]            # insertion order
            self._by_code  = {short_code: URLRecord}
            self._by_url   = {original_url: short_code}  # first code stored for a URL
        """
        super().__init__(base_url)
        self.enforce_unique_original = enforce_unique_original
        self._lock = threading.Lock()
        self._records: List[URLRecord] = []
        self._by_code: Dict[str, URLRecord] = {}
        self._by_url: Dict[str, str] = {}

    # ---- Persistence hooks (overridden by FileStorage) --------------------

    def _persist_records(self, records: Sequence[URLRecord]) -> None:
        """Called under the lock before `records` become visible."""

    def _persist_tombstones(self, short_codes: Sequence[str]) -> None:
        """Called under the lock before `short_codes` are marked deleted."""

    # ---- Internal helpers -------------------------------------------------

    def _copy(self, record: URLRecord) -> URLRecord:
        return URLRecord(record.short_code, record.original_url, record.owner_id, record.deleted)

    def _validate(self, records: Sequence[URLRecord], batch: bool) -> None:
        """
        Reject the whole write if any record collides with stored data or with itself.

        A single `put` reports a stored original URL as ConflictError. A batch
        never does: there the collision is a StorageError, like a rolled back
        relational transaction.
        """
        seen_codes: Dict[str, str] = {}
        seen_urls: Dict[str, str] = {}
        for record in records:
            code, url = record.short_code, record.original_url
            if code in self._by_code or code in seen_codes:
                raise ShortCodeTakenError(code)
            if self.enforce_unique_original:
                if url in seen_urls:
                    raise StorageError(f"batch rejected: original URL {url!r} appears twice")
                existing = self._by_url.get(url)
                if existing is not None:
                    if batch:
                        raise StorageError(f"batch rejected: original URL {url!r} already stored under {existing}")
                    raise ConflictError(existing)
            seen_codes[code] = url
            seen_urls[url] = code

    def _apply(self, records: Sequence[URLRecord]) -> None:
        for record in records:
            stored = self._copy(record)
            self._records.append(stored)
            self._by_code[stored.short_code] = stored
            self._by_url.setdefault(stored.original_url, stored.short_code)

    def _load(self, record: URLRecord) -> None:
        """Insert a record without validation or persistence (journal replay)."""
        self._apply([record])

    def _store(self, records: Sequence[URLRecord], batch: bool) -> None:
        with self._lock:
            self._validate(records, batch)
            self._persist_records(records)
            self._apply(records)

    # ---- Contract methods -------------------------------------------------

    def get_original(self, short_code: str) -> str:
        with self._lock:
            record = self._by_code.get(short_code)
            if record is None:
                raise NotFoundError(f"URL not found: {short_code}")
            if record.deleted:
                raise GoneError(short_code)
            return record.original_url

    def put(self, record: URLRecord) -> None:
        try:
            self._store([record], batch=False)
        except ConflictError as exc:
            logger.info("Original URL already stored under %s", exc.existing_code)
            raise

    def put_batch(self, records: Sequence[URLRecord]) -> None:
        records = list(records)
        if records:
            self._store(records, batch=True)

    def exists(self, short_code: str) -> bool:
        with self._lock:
            return short_code in self._by_code

    def get_urls_by_user_id(self, owner_id: str) -> List[UserURL]:
        if not owner_id:
            raise NotFoundError("no URLs for an anonymous owner")
        with self._lock:
            urls = [
                UserURL(self.short_url_for(r.short_code), r.original_url)
                for r in self._records
                if r.owner_id == owner_id and not r.deleted
            ]
        if not urls:
            raise NotFoundError(f"no URLs found for userID: {owner_id}")
        return urls

    def batch_delete(self, short_codes: Iterable[str], owner_id: str) -> None:
        if not owner_id:
            return
        with self._lock:
            owned: List[str] = []
            for code in dict.fromkeys(short_codes):
                record: Optional[URLRecord] = self._by_code.get(code)
                if record is not None and record.owner_id == owner_id and not record.deleted:
                    owned.append(code)
            if not owned:
                return
            self._persist_tombstones(owned)
            for code in owned:
                self._by_code[code].deleted = True
        logger.debug("Tombstoned %d code(s) for owner %s", len(owned), owner_id)

    def ping(self) -> None:
        raise UnsupportedOperationError(f"ping is not supported for {self.backend_name} storage")

    def close(self) -> None:
        return None

    def get_stats(self) -> Stats:
        with self._lock:
            owners = {r.owner_id for r in self._records if r.owner_id}
            return Stats(urls=len(self._records), users=len(owners))
