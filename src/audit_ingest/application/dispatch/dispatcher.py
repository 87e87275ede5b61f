"""Dispatch – BufferedDispatcher.

Many producers call :meth:`BufferedDispatcher.submit`, which never blocks:
the event is either placed on a bounded :class:`asyncio.Queue` or rejected
at once.  A single background task drains the queue into a local batch and
hands it to the :class:`EventSink` when one of three things happens first:

* the batch reaches ``batch_size`` (size trigger);
* ``flush_interval`` seconds pass since the previous flush (interval trigger);
* :meth:`BufferedDispatcher.shutdown` is called (final flush).

A failed write is logged and the batch is discarded.  There is no retry
and no requeue, so a persistently failing sink sheds events instead of
growing memory or stalling producers.
"""

from __future__ import annotations

import asyncio
import contextlib
import dataclasses
from typing import Any

from audit_ingest.application.dispatch.sink import EventSink
from audit_ingest.kernel.errors import (
    BufferFullError,
    DispatchRejectedError,
    DispatcherClosedError,
    SinkError,
)
from audit_ingest.kernel.events import Event
from audit_ingest.kernel.time import Clock, SystemClock
from audit_ingest.kernel.types import Err, Ok, Result
from audit_ingest.observability.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CAPACITY = 1000
DEFAULT_BATCH_SIZE = 100
DEFAULT_FLUSH_INTERVAL = 5.0


@dataclasses.dataclass
class DispatcherStats:
    """Running counters; :meth:`BufferedDispatcher.stats` returns a copy."""

    accepted: int = 0
    rejected_full: int = 0
    rejected_closed: int = 0
    flushed: int = 0
    dropped: int = 0
    flushes: int = 0
    failed_flushes: int = 0

    def to_dict(self) -> dict[str, int]:
        return dataclasses.asdict(self)


class BufferedDispatcher:
    """Bounded multi-producer / single-consumer batching writer.

    Parameters
    ----------
    sink:
        Destination for flushed batches.  Only the consumer task uses it.
    capacity:
        Maximum number of events waiting in the queue.
    batch_size:
        Accumulated events that force an immediate flush.
    flush_interval:
        Seconds between timer-driven flushes; the timer re-arms after
        every flush, whatever triggered it.
    clock:
        Source of ``ingested_at`` timestamps.

    Usage::

        async with BufferedDispatcher(sink, batch_size=50) as dispatcher:
            result = dispatcher.submit(event)
            if result.is_err():
                ...  # BufferFullError / DispatcherClosedError
    """

    def __init__(
        self,
        sink: EventSink,
        *,
        capacity: int = DEFAULT_CAPACITY,
        batch_size: int = DEFAULT_BATCH_SIZE,
        flush_interval: float = DEFAULT_FLUSH_INTERVAL,
        clock: Clock | None = None,
    ) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        if not flush_interval > 0:
            raise ValueError("flush_interval must be positive")
        self._sink = sink
        self._capacity = capacity
        self._batch_size = batch_size
        self._flush_interval = flush_interval
        self._clock = clock or SystemClock()
        self._queue: asyncio.Queue[Event] = asyncio.Queue(maxsize=capacity)
        self._stopping = asyncio.Event()
        self._closed = False
        self._task: asyncio.Task[None] | None = None
        self._stats = DispatcherStats()

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def batch_size(self) -> int:
        return self._batch_size

    @property
    def flush_interval(self) -> float:
        return self._flush_interval

    def qsize(self) -> int:
        """Events waiting in the queue (not yet moved into a batch)."""
        return self._queue.qsize()

    def usage(self) -> float:
        """Queue fill level as a percentage of capacity."""
        return self._queue.qsize() / self._capacity * 100

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def closed(self) -> bool:
        return self._closed

    def stats(self) -> DispatcherStats:
        return dataclasses.replace(self._stats)

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------

    def submit(self, event: Event) -> Result[Event, DispatchRejectedError]:
        """Enqueue *event* without blocking.

        Returns ``Ok(event)`` with ``ingested_at`` stamped, or ``Err`` with
        :class:`BufferFullError` when the queue is at capacity or
        :class:`DispatcherClosedError` once shutdown has begun.
        """
        if self._closed:
            self._stats.rejected_closed += 1
            return Err(DispatcherClosedError())
        stamped = event.with_ingested_at(self._clock.now())
        try:
            self._queue.put_nowait(stamped)
        except asyncio.QueueFull:
            self._stats.rejected_full += 1
            return Err(BufferFullError(capacity=self._capacity))
        self._stats.accepted += 1
        return Ok(stamped)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start the consumer task on the running loop; a second call is a no-op."""
        if self._task is not None:
            return
        if self._closed:
            raise DispatcherClosedError("Dispatcher has already been shut down")
        self._task = asyncio.get_running_loop().create_task(self._consume(), name="buffered-dispatcher")
        logger.info(
            "dispatcher.started",
            capacity=self._capacity,
            batch_size=self._batch_size,
            flush_interval=self._flush_interval,
        )

    async def shutdown(self, timeout: float | None = None) -> None:
        """Stop admitting events, run the final flush and wait for the consumer.

        Waits at most *timeout* seconds (``None`` waits for the final flush
        to finish).  On timeout the consumer is cancelled and whatever it
        still held is lost.
        """
        if self._closed:
            if self._task is not None and not self._task.done():
                await self._wait_for_consumer(timeout)
            return
        self._closed = True
        self._stopping.set()
        if self._task is None:
            lost = self._queue.qsize()
            if lost:
                self._stats.dropped += lost
                logger.warning("dispatcher.stopped_before_start", lost=lost)
            return
        await self._wait_for_consumer(timeout)
        logger.info("dispatcher.stopped", **self._stats.to_dict())

    async def _wait_for_consumer(self, timeout: float | None) -> None:
        assert self._task is not None
        try:
            await asyncio.wait_for(asyncio.shield(self._task), timeout=timeout)
        except asyncio.TimeoutError:
            lost = self._queue.qsize()
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._stats.dropped += lost
            logger.error("dispatcher.shutdown_timeout", timeout=timeout, lost=lost)

    async def __aenter__(self) -> "BufferedDispatcher":
        await self.start()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.shutdown()

    # ------------------------------------------------------------------
    # Consumer side
    # ------------------------------------------------------------------

    async def _consume(self) -> None:
        loop = asyncio.get_running_loop()
        batch: list[Event] = []
        deadline = loop.time() + self._flush_interval
        stop_waiter = asyncio.ensure_future(self._stopping.wait())
        getter: asyncio.Future[Event] | None = None
        try:
            while not stop_waiter.done():
                if getter is None:
                    getter = asyncio.ensure_future(self._queue.get())
                timeout = max(0.0, deadline - loop.time())
                done, _ = await asyncio.wait(
                    {getter, stop_waiter},
                    timeout=timeout,
                    return_when=asyncio.FIRST_COMPLETED,
                )
                if getter in done:
                    batch.append(getter.result())
                    getter = None
                    if len(batch) >= self._batch_size:
                        await self._flush(batch, "size")
                        batch = []
                        deadline = loop.time() + self._flush_interval
                        continue
                if loop.time() >= deadline:
                    await self._flush(batch, "interval")
                    batch = []
                    deadline = loop.time() + self._flush_interval

            # Shutdown: collect what the pending getter already holds, then
            # drain the queue (no producer can add to it any more).
            if getter is not None:
                if getter.done():
                    batch.append(getter.result())
                else:
                    getter.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await getter
                getter = None
            while True:
                try:
                    batch.append(self._queue.get_nowait())
                except asyncio.QueueEmpty:
                    break
                if len(batch) >= self._batch_size:
                    await self._flush(batch, "shutdown")
                    batch = []
            await self._flush(batch, "shutdown")
            batch = []
        finally:
            if getter is not None and not getter.done():
                getter.cancel()
            if not stop_waiter.done():
                stop_waiter.cancel()
            if batch:
                self._stats.dropped += len(batch)
                logger.error("dispatcher.batch_abandoned", count=len(batch))

    async def _flush(self, batch: list[Event], trigger: str) -> None:
        if not batch:
            return
        count = len(batch)
        self._stats.flushes += 1
        try:
            await self._sink.write(tuple(batch))
        except SinkError as exc:
            self._stats.failed_flushes += 1
            self._stats.dropped += count
            logger.error("dispatcher.flush_failed", count=count, trigger=trigger, error=exc.message)
        except Exception as exc:  # noqa: BLE001
            self._stats.failed_flushes += 1
            self._stats.dropped += count
            logger.exception("dispatcher.flush_failed", count=count, trigger=trigger, error=repr(exc))
        else:
            self._stats.flushed += count
            logger.info("dispatcher.flushed", count=count, trigger=trigger)


__all__ = [
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_CAPACITY",
    "DEFAULT_FLUSH_INTERVAL",
    "BufferedDispatcher",
    "DispatcherStats",
]
