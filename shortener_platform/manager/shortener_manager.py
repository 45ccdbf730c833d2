"""
ShortenerManager module for Shortener Platform.

Responsibilities:
    - Validate long URLs before anything touches storage
    - Mint a fresh code and store the mapping for an owner
    - Turn a Conflict from the backend into an idempotent answer carrying the
      existing short URL
    - Mint and store whole batches
    - Hand delete requests to the asynchronous pipeline

Design notes:
    - Storage is an injected dependency; the manager never knows which backend
      it talks to.
    - Backend StorageErrors propagate unchanged; the HTTP layer maps them to 500.
    - An owner without records is an empty list here, not an error.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional

from ..storage.base import BaseStorage
from ..storage.exceptions import ConflictError, NotFoundError
from ..storage.models import Stats, URLRecord, UserURL
from .code_generator import BatchItem, BatchResult, generate_short_batch, generate_short_code
from .delete_pipeline import DeletePipeline

logger = logging.getLogger(__name__)

URL_PATTERN = re.compile(r"^https?://([a-zA-Z0-9-]+\.)*[a-zA-Z0-9-]+\.[a-zA-Z]{2,}(/.*)?$")


@dataclass(frozen=True)
class ShortenResult:
    short_url: str
    created: bool


class ShortenerManager:
    """Coordinates code allocation, storage and deletion for the HTTP layer."""

    def __init__(self, storage: BaseStorage, pipeline: Optional[DeletePipeline] = None):
        """
        Args:
            storage (BaseStorage): Backend storage instance.
            pipeline (Optional[DeletePipeline]): Delete pipeline; built on `storage` when omitted.
        """
        self.storage = storage
        self.pipeline = pipeline or DeletePipeline(storage)

    # ---------------------------------------------------------------------
    # Validation
    # ---------------------------------------------------------------------
    @staticmethod
    def validate_url(url: str) -> None:
        """
        Validate that a URL is http/https with a dotted host.

        Raises:
            ValueError: If the URL is malformed.
        """
        if not url or not URL_PATTERN.match(url):
            raise ValueError("Invalid URL format")

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------
    def shorten(self, url: str, owner_id: str) -> ShortenResult:
        """
        Store `url` under a fresh code for `owner_id`.

        Returns:
            ShortenResult: `created` is False when the backend reported the URL
            as already stored; `short_url` then points at the existing code.

        Raises:
            ValueError: invalid URL.
            StorageError: backend failure or no free code found.
        """
        self.validate_url(url)
        code = generate_short_code(self.storage)
        try:
            self.storage.put(URLRecord(short_code=code, original_url=url, owner_id=owner_id))
        except ConflictError as exc:
            return ShortenResult(self.storage.short_url_for(exc.existing_code), created=False)
        return ShortenResult(self.storage.short_url_for(code), created=True)

    def shorten_batch(self, items: Iterable[BatchItem], owner_id: str) -> List[BatchResult]:
        """
        Store a whole batch; every URL is validated before any code is minted.

        Raises:
            ValueError: empty batch or any invalid URL.
            StorageError: backend failure (see BaseStorage.put_batch for atomicity).
        """
        items = list(items)
        if not items:
            raise ValueError("Empty batch")
        for item in items:
            self.validate_url(item.original_url)
        results, records = generate_short_batch(self.storage, items, owner_id)
        self.storage.put_batch(records)
        logger.info("Stored batch of %d URL(s) for owner %s", len(records), owner_id or "<anonymous>")
        return results

    def resolve(self, short_code: str) -> str:
        """Return the original URL; NotFoundError / GoneError propagate."""
        return self.storage.get_original(short_code)

    def user_urls(self, owner_id: str) -> List[UserURL]:
        """Return the owner's live URLs, or an empty list."""
        try:
            return self.storage.get_urls_by_user_id(owner_id)
        except NotFoundError:
            return []

    def delete_async(self, short_codes: Iterable[str], owner_id: str) -> None:
        """Schedule tombstoning; returns before anything is deleted."""
        self.pipeline.submit(short_codes, owner_id)

    def stats(self) -> Stats:
        return self.storage.get_stats()

    def ping(self) -> None:
        self.storage.ping()
