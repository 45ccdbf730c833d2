"""
FileStorage - append-only journal backend for Shortener Platform
================================================================

Mirrors the in-memory backend to a journal file holding one JSON object per
line. On construction the whole journal is replayed front-to-back to rebuild
the in-memory index; afterwards every write is appended and flushed to disk
*before* it becomes visible in memory, under the same lock that guards reads.

Journal format
--------------
    {"short_url": "abcd1234", "original_url": "https://example.com", "user_id": "u1"}
    {"short_url": "abcd1234", "is_deleted": true}

- `user_id` is omitted for anonymous records.
- A line carrying only `short_url` and `is_deleted` is a tombstone for a
  record written earlier; replay marks that record deleted.
- There is no compaction; the journal only grows.

Known gap: a crash in the middle of a batch write can leave a prefix of the
batch on disk. A final line cut off before its newline is dropped on replay
and truncated away; the complete lines before it are all loaded, so replay
never loses an acknowledged write. Corrupt lines anywhere else are an error.

Example
-------
>>> storage = FileStorage(path="/tmp/short-url-db.json", base_url="http://localhost:8080")
>>> storage.put(URLRecord("abcd1234", "https://example.com", "u1"))
>>> FileStorage(path="/tmp/short-url-db.json", base_url="http://localhost:8080").get_original("abcd1234")
'https://example.com'
"""

import json
import logging
import os
from typing import Sequence

from .exceptions import StorageError
from .memory_storage import MemoryStorage
from .models import URLRecord, tombstone_line

logger = logging.getLogger(__name__)


class FileStorage(MemoryStorage):
    """Journal-backed implementation of the storage contract.

    Parameters
    ----------
    path : str
        Journal file; created if missing.
    base_url : str
        Prefix used when rendering short URLs for owner listings.
    enforce_unique_original : bool
        Reject a second record for an already stored original URL.
    """

    backend_name = "file"

    def __init__(self, path: str, base_url: str, enforce_unique_original: bool = False) -> None:
        super().__init__(base_url, enforce_unique_original=enforce_unique_original)
        self.path = path
        try:
            self._file = open(path, "a+", encoding="utf-8", newline="")
        except OSError as exc:
            raise StorageError(f"failed to open journal {path!r}: {exc}") from exc
        try:
            self._replay()
        except Exception:
            self._file.close()
            raise

    # ---- Journal replay ---------------------------------------------------

    def _parse(self, lineno: int, line: str):
        try:
            data = json.loads(line)
            return data, data["short_url"]
        except (ValueError, KeyError, TypeError) as exc:
            raise StorageError(f"corrupt journal {self.path!r} at line {lineno}: {exc}") from exc

    def _replay_entry(self, lineno: int, data: dict, code: str) -> bool:
        """Apply one decoded line; returns True when it added a record."""
        existing = self._by_code.get(code)
        if existing is not None:
            if data.get("is_deleted"):
                existing.deleted = True
            else:
                logger.warning("Journal line %d repeats short code %s; ignored", lineno, code)
            return False
        if "original_url" not in data:
            logger.warning("Journal line %d tombstones unknown short code %s; ignored", lineno, code)
            return False
        self._load(URLRecord.from_journal(data))
        return True

    def _replay(self) -> None:
        """
        Rebuild the in-memory index from the journal, front to back.

        Every newline-terminated line must decode. The text after the last
        newline is a write that was cut short: it is kept when it decodes
        (and given its newline), otherwise dropped and truncated away.
        """
        self._file.seek(0)
        content = self._file.read()
        lines = content.split("\n")
        tail = lines.pop()
        loaded = 0
        for lineno, line in enumerate(lines, start=1):
            line = line.strip()
            if line:
                loaded += self._replay_entry(lineno, *self._parse(lineno, line))

        if tail.strip():
            lineno = len(lines) + 1
            try:
                data, code = self._parse(lineno, tail.strip())
            except StorageError as exc:
                logger.warning("Dropping torn final line of %s: %s", self.path, exc)
                self._truncate(len(content.encode("utf-8")) - len(tail.encode("utf-8")))
            else:
                loaded += self._replay_entry(lineno, data, code)
                self._file.seek(0, os.SEEK_END)
                self._append([""])
        self._file.seek(0, os.SEEK_END)
        logger.info("Replayed %d record(s) from %s", loaded, self.path)

    def _truncate(self, size: int) -> None:
        try:
            self._file.flush()
            os.ftruncate(self._file.fileno(), size)
            os.fsync(self._file.fileno())
        except OSError as exc:
            raise StorageError(f"failed to truncate journal {self.path!r}: {exc}") from exc

    # ---- Persistence hooks --------------------------------------------------

    def _append(self, lines: Sequence[str]) -> None:
        payload = "".join(f"{line}\n" for line in lines)
        try:
            self._file.write(payload)
            self._file.flush()
            os.fsync(self._file.fileno())
        except (OSError, ValueError) as exc:
            raise StorageError(f"failed to append to journal {self.path!r}: {exc}") from exc

    def _persist_records(self, records: Sequence[URLRecord]) -> None:
        self._append([record.to_journal() for record in records])

    def _persist_tombstones(self, short_codes: Sequence[str]) -> None:
        self._append([tombstone_line(code) for code in short_codes])

    def close(self) -> None:
        with self._lock:
            if not self._file.closed:
                self._file.close()
