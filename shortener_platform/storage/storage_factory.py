"""
Storage factory - switch storage backend from config (lazy env version)
=======================================================================

This module centralizes selection of the storage backend (memory, file
journal, PostgreSQL) so the rest of the app can stay ignorant of where data
lives. One backend instance is built per app and injected into every caller.

Key points
----------
- Reads the backend selection **at call time** to avoid stale values in tests.
- Imports the DB backend **only if** the selected backend is "postgres".
- Remaining knobs come from `shortener_platform.config.settings` unless passed
  explicitly as keyword arguments.

Environment variables
---------------------
- SHORTENER_STORAGE_BACKEND:   "memory" (default), "file" or "postgres"
- SHORTENER_DB_DSN:            DSN string if backend == "postgres"
- SHORTENER_FILE_STORAGE_PATH: journal path if backend == "file"
"""

import logging
import os
from typing import Optional

from shortener_platform.config import settings
from shortener_platform.storage.base import BaseStorage
from shortener_platform.storage.memory_storage import MemoryStorage

logger = logging.getLogger(__name__)


def get_storage(backend: Optional[str] = None, **kwargs) -> BaseStorage:
    """
    Return a storage backend based on configuration.

    Parameters
    ----------
    backend : str, optional
        "memory", "file" or "postgres". If omitted, reads SHORTENER_STORAGE_BACKEND.
    kwargs : dict
        Overrides: base_url, enforce_unique_original, path (file), dsn and
        delete_batch_size (postgres).

    Returns
    -------
    BaseStorage
    """
    be = (backend or os.getenv("SHORTENER_STORAGE_BACKEND", "memory")).strip().lower()
    base_url = kwargs.get("base_url") or settings.BASE_URL
    unique = kwargs.get("enforce_unique_original", settings.ENFORCE_UNIQUE_ORIGINAL)

    logger.info("Selected storage backend: %r", be)

    if be == "memory":
        return MemoryStorage(base_url=base_url, enforce_unique_original=unique)

    if be == "file":
        from shortener_platform.storage.file_storage import FileStorage

        path = kwargs.get("path") or os.getenv("SHORTENER_FILE_STORAGE_PATH", settings.FILE_STORAGE_PATH)
        if not path:
            raise ValueError("FILE_STORAGE_PATH is required for file backend (env SHORTENER_FILE_STORAGE_PATH)")
        return FileStorage(path=path, base_url=base_url, enforce_unique_original=unique)

    if be == "postgres":
        dsn = kwargs.get("dsn") or os.getenv("SHORTENER_DB_DSN", "")
        if not dsn:
            raise ValueError("DB_DSN is required for postgres backend (env SHORTENER_DB_DSN)")
        # Local import to avoid hard dependency when not using postgres
        from shortener_platform.storage.db_storage import DBStorage

        return DBStorage(
            dsn=dsn,
            base_url=base_url,
            delete_batch_size=kwargs.get("delete_batch_size", settings.DELETE_BATCH_SIZE),
        )

    raise ValueError(f"Unknown storage backend: {be!r}")
