from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")
R = TypeVar("R")

_CLOSED = object()


class WorkPool:
    """Fixed number of worker tasks draining a bounded queue.

    Workers take items until they see the close marker. ``map`` waits for
    every worker, returns results in input order and raises the error of the
    earliest failing item, if any.
    """

    def __init__(self, size: int) -> None:
        if size <= 0:
            raise ValueError("worker pool size must be positive")
        self.size = size

    async def map(self, func: Callable[[T], Awaitable[R]], items: Sequence[T]) -> List[R]:
        queue: "asyncio.Queue[object]" = asyncio.Queue(maxsize=self.size)
        results: Dict[int, R] = {}
        errors: Dict[int, Exception] = {}

        async def worker() -> None:
            while True:
                entry = await queue.get()
                if entry is _CLOSED:
                    return
                index, item = entry  # type: ignore[misc]
                try:
                    results[index] = await func(item)
                except Exception as exc:
                    errors[index] = exc

        workers = [
            asyncio.create_task(worker(), name=f"work-pool-{n}") for n in range(self.size)
        ]
        try:
            for entry in enumerate(items):
                await queue.put(entry)
            for _ in workers:
                await queue.put(_CLOSED)
            await asyncio.gather(*workers)
        except BaseException:
            for task in workers:
                task.cancel()
            raise

        first_error: Optional[Tuple[int, Exception]] = min(errors.items(), default=None)
        if first_error is not None:
            raise first_error[1]
        return [results[index] for index in range(len(items))]
