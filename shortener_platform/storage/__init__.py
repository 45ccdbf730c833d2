"""
Storage backends for Shortener Platform.
"""

from .base import BaseStorage
from .exceptions import (
    CodeGenerationError,
    ConflictError,
    GoneError,
    NotFoundError,
    ShortCodeTakenError,
    ShortenerError,
    StorageError,
    UnsupportedOperationError,
)
from .memory_storage import MemoryStorage
from .models import Stats, URLRecord, UserURL
from .storage_factory import get_storage

__all__ = [
    "BaseStorage",
    "MemoryStorage",
    "URLRecord",
    "UserURL",
    "Stats",
    "get_storage",
    "ShortenerError",
    "NotFoundError",
    "GoneError",
    "ConflictError",
    "StorageError",
    "ShortCodeTakenError",
    "CodeGenerationError",
    "UnsupportedOperationError",
]
