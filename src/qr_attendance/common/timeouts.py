from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Callable, Optional, TypeVar

from ..core.exceptions import StorageTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BoundedCaller:
    """Run store calls on a worker pool and stop waiting after `timeout` seconds.

    The worker thread itself cannot be interrupted; a call that overruns keeps
    running in the background and its result is discarded.
    """

    def __init__(self, *, timeout: Optional[float], max_workers: int = 4):
        self._timeout = timeout
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="store-call")

    @property
    def timeout(self) -> Optional[float]:
        return self._timeout

    def call(self, fn: Callable[..., T], *args, **kwargs) -> T:
        if self._timeout is None:
            return fn(*args, **kwargs)

        future = self._pool.submit(fn, *args, **kwargs)
        try:
            return future.result(timeout=self._timeout)
        except FutureTimeout as e:
            future.cancel()
            name = getattr(fn, "__qualname__", repr(fn))
            logger.warning("store call %s exceeded %.2fs", name, self._timeout)
            raise StorageTimeoutError(f"{name} timed out after {self._timeout}s") from e

    def shutdown(self) -> None:
        self._pool.shutdown(wait=False)
