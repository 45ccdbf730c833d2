"""
Asynchronous batch soft-delete for Shortener Platform.

Flow per submission:
    submit(codes, owner) --> producer --> asyncio.Queue (bounded) --> consumer
                                                                     |
                                         chunks of `batch_size` ----> storage.batch_delete

- `submit` only schedules the work and returns; the HTTP caller answers
  "202 Accepted" before any tombstone is written.
- The producer streams codes one by one and then puts an end marker.
- A single consumer accumulates codes into fixed-size chunks, flushes every
  full chunk and the remaining partial chunk at end of stream.
- Flushes run `storage.batch_delete` in a worker thread so blocking file or
  database I/O never stalls the event loop.
- Each chunk is attempted at most once. Failures are logged and dropped:
  nobody is waiting for the result. There is no cancellation tied to the
  originating request.
"""

import asyncio
import logging
from typing import Iterable, List, Optional, Set

from shortener_platform.config import settings
from shortener_platform.storage.base import BaseStorage
from shortener_platform.storage.exceptions import StorageError

logger = logging.getLogger(__name__)

_END = object()


class DeletePipeline:
    def __init__(
        self,
        storage: BaseStorage,
        batch_size: Optional[int] = None,
        queue_size: Optional[int] = None,
    ) -> None:
        self.storage = storage
        self.batch_size = max(1, batch_size or settings.DELETE_BATCH_SIZE)
        self.queue_size = max(1, queue_size or settings.DELETE_QUEUE_SIZE)
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of submissions not finished yet."""
        return sum(1 for task in self._tasks if not task.done())

    def submit(self, short_codes: Iterable[str], owner_id: str) -> None:
        """Accept codes for deletion; must be called from a running event loop."""
        codes = list(short_codes)
        if not codes:
            return
        task = asyncio.get_running_loop().create_task(self._run(codes, owner_id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        """Wait for every in-flight submission (shutdown and tests)."""
        while True:
            running = [task for task in self._tasks if not task.done()]
            if not running:
                return
            await asyncio.gather(*running, return_exceptions=True)

    async def _run(self, codes: List[str], owner_id: str) -> None:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.queue_size)
        producer = asyncio.create_task(self._produce(queue, codes))
        await self._consume(queue, owner_id)
        await producer

    async def _produce(self, queue: asyncio.Queue, codes: List[str]) -> None:
        for code in codes:
            await queue.put(code)
        await queue.put(_END)

    async def _consume(self, queue: asyncio.Queue, owner_id: str) -> None:
        chunk: List[str] = []
        while True:
            item = await queue.get()
            if item is _END:
                break
            chunk.append(item)
            if len(chunk) == self.batch_size:
                await self._flush(chunk, owner_id)
                chunk = []
        if chunk:
            await self._flush(chunk, owner_id)

    async def _flush(self, chunk: List[str], owner_id: str) -> None:
        try:
            await asyncio.to_thread(self.storage.batch_delete, list(chunk), owner_id)
        except StorageError as exc:
            logger.warning("Dropped delete of %d code(s) for owner %s: %s", len(chunk), owner_id, exc)
        except Exception:
            logger.exception("Unexpected failure deleting %d code(s) for owner %s", len(chunk), owner_id)
