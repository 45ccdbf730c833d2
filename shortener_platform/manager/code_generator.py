"""
Short-code allocation for Shortener Platform.

Codes are drawn uniformly at random from the 62 ASCII letters and digits
(default length 8, so 62**8 ~ 2.2e14 candidates) and checked against the
storage backend they will be inserted into.

Collision handling:
- `generate_short_code` redraws while `storage.exists(candidate)` is true.
  The loop is bounded by `CODE_MAX_ATTEMPTS`: a backend that always answers
  "taken" fails with `CodeGenerationError` instead of spinning forever.
- `generate_short_batch` additionally remembers the codes minted for the
  current batch, because none of them is persisted until `put_batch` runs.
  A candidate already minted in this batch is discarded and the same item is
  retried; only an accepted code advances to the next item.

The generator holds no state; all shared state lives in the backend.
"""

import logging
import random
import string
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set, Tuple

from shortener_platform.config import settings
from shortener_platform.storage.base import BaseStorage
from shortener_platform.storage.exceptions import CodeGenerationError
from shortener_platform.storage.models import URLRecord

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_letters + string.digits

_rng = random.SystemRandom()


@dataclass(frozen=True)
class BatchItem:
    """One entry of a batch shortening request."""
    correlation_id: str
    original_url: str


@dataclass(frozen=True)
class BatchResult:
    """One entry of a batch shortening response."""
    correlation_id: str
    short_url: str


def _safe_len(length: Optional[int]) -> int:
    """Resolve code length from arg or config, clamped to [4, 32]."""
    L = int(length) if length is not None else int(settings.CODE_LENGTH)
    return max(4, min(32, L))


def random_code(length: Optional[int] = None) -> str:
    """Draw one candidate code; no uniqueness check."""
    L = _safe_len(length)
    return "".join(_rng.choice(CODE_ALPHABET) for _ in range(L))


def generate_short_code(
    storage: BaseStorage,
    *,
    length: Optional[int] = None,
    max_attempts: Optional[int] = None,
) -> str:
    """
    Return a code that `storage` does not hold yet.

    Raises:
        CodeGenerationError: every one of `max_attempts` candidates was taken.
        StorageError: propagated unchanged from `storage.exists`.
    """
    attempts = max_attempts if max_attempts is not None else settings.CODE_MAX_ATTEMPTS
    for _ in range(attempts):
        candidate = random_code(length)
        if not storage.exists(candidate):
            return candidate
    raise CodeGenerationError(f"could not generate a free short code after {attempts} attempts")


def generate_short_batch(
    storage: BaseStorage,
    items: Iterable[BatchItem],
    owner_id: str,
    *,
    length: Optional[int] = None,
    max_attempts: Optional[int] = None,
) -> Tuple[List[BatchResult], List[URLRecord]]:
    """
    Mint one distinct code per item.

    Returns:
        (results, records): `results` pairs each correlation id with its absolute
        short URL, `records` is ready to hand to `storage.put_batch`. Both keep
        the order of `items`.
    """
    attempts = max_attempts if max_attempts is not None else settings.CODE_MAX_ATTEMPTS
    items = list(items)
    minted: Set[str] = set()
    results: List[BatchResult] = []
    records: List[URLRecord] = []

    n = 0
    duplicates = 0
    while n < len(items):
        code = generate_short_code(storage, length=length, max_attempts=attempts)
        if code in minted:
            duplicates += 1
            if duplicates >= attempts:
                raise CodeGenerationError(f"too many in-batch duplicates after {duplicates} attempts")
            continue
        minted.add(code)
        item = items[n]
        results.append(BatchResult(item.correlation_id, storage.short_url_for(code)))
        records.append(URLRecord(short_code=code, original_url=item.original_url, owner_id=owner_id))
        n += 1

    if duplicates:
        logger.debug("Discarded %d in-batch duplicate code(s)", duplicates)
    return results, records
