"""Bounded worker pool with a paused accumulation phase.

This module provides the WorkerPool class. Work is submitted while the pool is
paused, so the caller knows the full queue size before any worker starts;
release() then lets every worker drain the shared queue at once.

Example:
    pool = WorkerPool(handler=process_item, size=4)
    for item in items:
        pool.submit(item)
    print(f"{pool.waiting_queue_size()} items queued")
    pool.release()
    pool.stop_wait()
"""

import logging
import os
import queue
import threading
from typing import Callable, Generic, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Queued once per worker by stop_wait(); a worker exits when it takes one
_STOP = object()


def default_pool_size() -> int:
    """Number of workers to use when none is given: the logical CPU count."""
    return os.cpu_count() or 1


class WorkerPool(Generic[T]):
    """Fixed-size pool of threads consuming a shared queue.

    Worker threads are started by the constructor but stay parked until
    release() is called. Each worker then takes items from the queue and
    passes them to the handler until it receives a stop sentinel.

    A handler exception is treated as fatal for the run: the first one is
    kept, remaining items are drained without being handled, and
    stop_wait() re-raises it once every worker has exited.

    Attributes:
        size: Number of worker threads.
        _handler: Callable invoked with each submitted item.
        _queue: Shared FIFO of pending items and stop sentinels.
        _released: Event workers wait on during the accumulation phase.
        _fatal_error: First exception raised by the handler, if any.
    """

    def __init__(
        self,
        handler: Callable[[T], None],
        size: Optional[int] = None,
        name: str = "treedigest-worker",
    ) -> None:
        """Initialize the pool and start its parked workers.

        Args:
            handler: Callable run by a worker for each item.
            size: Number of workers. Defaults to the logical CPU count.
            name: Thread name prefix.

        Raises:
            ValueError: If size is given and is less than 1.
        """
        if size is None:
            size = default_pool_size()
        if size < 1:
            raise ValueError(f"Worker pool size must be at least 1, got {size}")

        self.size = size
        self._handler = handler
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._released = threading.Event()
        self._lock = threading.Lock()
        self._stopped = False
        self._cancelled = False
        self._fatal_error: Optional[Exception] = None
        self._processed = 0

        self._threads: List[threading.Thread] = []
        for i in range(size):
            thread = threading.Thread(target=self._run_worker, name=f"{name}-{i}", daemon=True)
            thread.start()
            self._threads.append(thread)

        logger.debug("Started %d paused workers", size)

    def submit(self, item: T) -> None:
        """Queue an item for processing.

        Raises:
            RuntimeError: If the pool has already been stopped.
        """
        with self._lock:
            if self._stopped:
                raise RuntimeError("Cannot submit to a stopped worker pool")
            self._queue.put(item)

    def waiting_queue_size(self) -> int:
        """Number of items queued and not yet taken by a worker."""
        return self._queue.qsize()

    @property
    def is_released(self) -> bool:
        """Whether the pool has left the accumulation phase."""
        return self._released.is_set()

    @property
    def processed(self) -> int:
        """Number of items handed to the handler so far."""
        with self._lock:
            return self._processed

    def release(self) -> None:
        """Release all parked workers at once. Calling it again is a no-op."""
        if not self._released.is_set():
            logger.info("Releasing %d workers on %d queued items", self.size, self.waiting_queue_size())
            self._released.set()

    def stop_wait(self) -> None:
        """Process every queued item, then stop all workers and wait for them.

        Releases the pool if it is still paused. No queued item is dropped.

        Raises:
            Exception: The first exception raised by the handler, once
                all workers have exited.
        """
        self._shutdown()

        if self._fatal_error is not None:
            raise self._fatal_error

    def cancel(self) -> None:
        """Stop the pool without handling the items still queued.

        Used when the run is abandoned before stop_wait(). Queued items are
        drained unhandled, every worker exits, and no handler error is
        re-raised.
        """
        with self._lock:
            self._cancelled = True
        logger.info("Cancelling worker pool with %d items queued", self.waiting_queue_size())
        self._shutdown()

    def _shutdown(self) -> None:
        """Queue one stop sentinel per worker, release, and join them all."""
        with self._lock:
            if not self._stopped:
                self._stopped = True
                for _ in self._threads:
                    self._queue.put(_STOP)

        self.release()

        for thread in self._threads:
            thread.join()

        logger.debug("All workers stopped after %d items", self._processed)

    def _run_worker(self) -> None:
        """Worker loop: wait for release, then drain the queue until stopped."""
        self._released.wait()

        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return

                if self._cancelled or self._fatal_error is not None:
                    continue

                try:
                    self._handler(item)  # type: ignore[arg-type]
                except Exception as e:
                    with self._lock:
                        if self._fatal_error is None:
                            self._fatal_error = e
                    logger.error("Worker aborted the run: %s", e)
                    continue

                with self._lock:
                    self._processed += 1
            finally:
                self._queue.task_done()
