"""
Base storage interface for Shortener Platform.

Purpose:
    Define a small, stable contract that the in-memory, file-journal and
    PostgreSQL backends implement, so handlers and the code generator stay
    backend-agnostic.

Batch atomicity differs per backend and is part of the contract:
    - PostgreSQL: `put_batch` is one transaction; any failure rolls back
      the whole batch.
    - Memory / file journal: the whole batch is validated before anything is
      mutated, so conflicts and taken codes reject the batch as a unit; a
      crash in the middle of the journal write can still leave a prefix
      durable.

Original-URL uniqueness also differs: PostgreSQL always enforces it, the
in-memory and file backends only when built with `enforce_unique_original`.

Testing & Coverage:
    These are abstract methods and are not executed directly in tests.
    We annotate them with `# pragma: no cover` so coverage tools don't
    penalize the project for un-runnable abstract declarations.
"""

import uuid
from abc import ABC, abstractmethod
from typing import Iterable, List, Sequence

from .models import Stats, URLRecord, UserURL


class BaseStorage(ABC):
    """Abstract base class for storage backends."""

    def __init__(self, base_url: str) -> None:
        self.base_url = base_url.rstrip("/")

    def short_url_for(self, short_code: str) -> str:
        """Render the externally addressable short URL for a code."""
        return f"{self.base_url}/{short_code}"

    def generate_new_owner_id(self) -> str:
        """Return a fresh opaque owner identifier."""
        return str(uuid.uuid4())

    @abstractmethod  # pragma: no cover
    def get_original(self, short_code: str) -> str:
        """
        Return the original URL stored for `short_code`.

        Raises:
            NotFoundError: code was never stored.
            GoneError: code exists but is tombstoned.
            StorageError: the store failed.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def put(self, record: URLRecord) -> None:
        """
        Durably store a single record.

        Raises:
            ConflictError: the original URL already maps to a code (carries that code).
            ShortCodeTakenError: the short code is already stored.
            StorageError: the store failed.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def put_batch(self, records: Sequence[URLRecord]) -> None:
        """
        Store several records in submission order.

        See the module docstring for the per-backend atomicity guarantee.

        Raises:
            StorageError: any collision or failure; never ConflictError.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def exists(self, short_code: str) -> bool:
        """Return True if the code is stored, tombstoned records included."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def get_urls_by_user_id(self, owner_id: str) -> List[UserURL]:
        """
        Return the live records owned by `owner_id`, rendered with absolute short URLs.

        Raises:
            NotFoundError: the owner is empty or has no live records (an empty
                result, not a failure).
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def batch_delete(self, short_codes: Iterable[str], owner_id: str) -> None:
        """Tombstone the codes owned by `owner_id`; codes of other owners are skipped."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def ping(self) -> None:
        """
        Check liveness of the underlying store.

        Raises:
            UnsupportedOperationError: the backend has nothing to ping.
            StorageError: the store is unreachable.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def close(self) -> None:
        """Release files or connections held by the backend."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def get_stats(self) -> Stats:
        """Return total record count (tombstones included) and distinct owner count."""
        raise NotImplementedError
