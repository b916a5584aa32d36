from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Awaitable, Callable, Optional

if TYPE_CHECKING:
    from .base import Sample, SampleSink

Producer = Callable[["SampleSink"], Awaitable[None]]

_CLOSED = object()


class _HandoffSink:
    def __init__(self, queue: "asyncio.Queue[object]") -> None:
        self._queue = queue

    async def send(self, sample: Sample) -> None:
        await self._queue.put(sample)


class SampleRelay:
    """Fan-in relay between one producer and a shared output sink.

    The producer runs as its own task and writes into a bounded hand-off
    queue, which is closed when the producer returns or fails. A forwarder
    task drains the queue into ``out`` and then releases the completion
    barrier. ``relay`` only returns once the barrier is released, so the
    caller never finalizes ``out`` while samples are still in flight.
    """

    def __init__(self, buffer_size: int = 64) -> None:
        self.buffer_size = buffer_size

    async def relay(self, producer: Producer, out: SampleSink) -> None:
        queue: "asyncio.Queue[object]" = asyncio.Queue(maxsize=self.buffer_size)
        barrier = asyncio.Event()
        forward_error: Optional[BaseException] = None

        async def run_producer() -> None:
            try:
                await producer(_HandoffSink(queue))
            finally:
                await queue.put(_CLOSED)

        async def run_forwarder() -> None:
            nonlocal forward_error
            try:
                while True:
                    item = await queue.get()
                    if item is _CLOSED:
                        break
                    if forward_error is None:
                        try:
                            await out.send(item)  # type: ignore[arg-type]
                        except Exception as exc:
                            # Keep draining so the producer never blocks on a full queue.
                            forward_error = exc
            finally:
                barrier.set()

        producer_task = asyncio.create_task(run_producer(), name="sample-producer")
        forwarder_task = asyncio.create_task(run_forwarder(), name="sample-forwarder")
        try:
            await barrier.wait()
            await forwarder_task
            await producer_task
        except BaseException:
            producer_task.cancel()
            forwarder_task.cancel()
            raise

        if forward_error is not None:
            raise forward_error
