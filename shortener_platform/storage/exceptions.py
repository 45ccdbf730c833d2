"""
Error taxonomy shared by every storage backend and the code generator.

Callers (HTTP handlers) translate these into responses:
    NotFoundError             -> 404, or an empty result for owner listings
    GoneError                 -> 410 (record exists but is tombstoned)
    ConflictError             -> 409 carrying the already stored code
    StorageError              -> 500 (disk, network, database failures)
    UnsupportedOperationError -> operation has no meaning for this backend
"""


class ShortenerError(Exception):
    """Root of all Shortener Platform errors."""


class NotFoundError(ShortenerError):
    """Raised when a short code (or an owner's record set) does not exist."""


class GoneError(NotFoundError):
    """Raised when a short code exists but has been tombstoned."""

    def __init__(self, short_code: str):
        super().__init__(f"URL has been deleted: {short_code}")
        self.short_code = short_code


class ConflictError(ShortenerError):
    """Raised when the original URL is already mapped; carries the existing code."""

    def __init__(self, existing_code: str):
        super().__init__(f"original URL already exists, short URL for it is: {existing_code}")
        self.existing_code = existing_code


class StorageError(ShortenerError):
    """Raised when the underlying store fails (I/O, connection, constraint we did not expect)."""


class ShortCodeTakenError(StorageError):
    """Raised when inserting a short code that is already stored."""

    def __init__(self, short_code: str):
        super().__init__(f"short code already exists: {short_code}")
        self.short_code = short_code


class CodeGenerationError(StorageError):
    """Raised when no free short code could be found within the attempt limit."""


class UnsupportedOperationError(ShortenerError):
    """Raised when a backend has no meaningful implementation of an operation."""
