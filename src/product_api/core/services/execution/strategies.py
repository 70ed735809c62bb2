"""Execution strategies wrapping synchronous store calls.

Both strategies expose the same two entry points so the product service can
pick one at call time without duplicating per-operation branches:

- ``call`` runs a single store operation and returns its result.
- ``stream`` turns a synchronous iterator into an async iterator.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable, Iterator
from functools import partial
from typing import Any, TypeVar

import anyio
import anyio.to_thread

T = TypeVar("T")

_EXHAUSTED = object()


class ExecutionStrategy(ABC):
    """Common interface of the delayed and immediate execution paths."""

    name: str

    @abstractmethod
    async def call(self, fn: Callable[..., T], *args: Any) -> T:
        """Run ``fn(*args)`` and return its result."""

    @abstractmethod
    def stream(self, source: Callable[[], Iterator[T]]) -> AsyncIterator[T]:
        """Lazily produce the items of the iterator returned by ``source``."""


class ImmediateExecution(ExecutionStrategy):
    """Run store calls inline on the caller's context, without added latency."""

    name = "immediate"

    async def call(self, fn: Callable[..., T], *args: Any) -> T:
        return fn(*args)

    async def stream(self, source: Callable[[], Iterator[T]]) -> AsyncIterator[T]:
        for item in source():
            yield item


class DelayedExecution(ExecutionStrategy):
    """Simulate asynchronous I/O around store calls.

    ``call`` waits ``operation_delay`` seconds and then runs the store call in
    a worker thread. ``stream`` pulls each item in a worker thread and waits
    ``item_delay`` seconds before yielding it.

    The waits are cancellable: a request cancelled during the delay never
    reaches the store. A store call already handed to a worker thread always
    runs to completion.
    """

    name = "delayed"

    def __init__(self, operation_delay: float = 0.02, item_delay: float = 0.01) -> None:
        self.operation_delay = operation_delay
        self.item_delay = item_delay

    async def call(self, fn: Callable[..., T], *args: Any) -> T:
        await anyio.sleep(self.operation_delay)
        return await anyio.to_thread.run_sync(partial(fn, *args))

    async def stream(self, source: Callable[[], Iterator[T]]) -> AsyncIterator[T]:
        iterator = await anyio.to_thread.run_sync(lambda: iter(source()))
        while True:
            item = await anyio.to_thread.run_sync(next, iterator, _EXHAUSTED)
            if item is _EXHAUSTED:
                return
            await anyio.sleep(self.item_delay)
            yield item
