"""Work scheduling package for treedigest.

- WorkerPool: Fixed-size thread pool that accumulates work while paused and
  drains it once released.
"""

from .worker_pool import WorkerPool, default_pool_size

__all__ = ["WorkerPool", "default_pool_size"]
