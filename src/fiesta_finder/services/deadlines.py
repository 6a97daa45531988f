"""Cancellable network operations bounded by a deadline."""

import asyncio
import contextlib
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


class OperationTimeoutError(Exception):
    """Raised when an operation does not finish before its deadline."""

    def __init__(self, timeout_seconds: float) -> None:
        super().__init__(f"Operation timed out after {timeout_seconds:g}s")
        self.timeout_seconds = timeout_seconds


@dataclass
class CancellableOperation(Generic[T]):
    """Handle for an in-flight operation with a deadline on the loop clock."""

    task: "asyncio.Task[T]"
    deadline: float
    timeout_seconds: float

    def cancel(self) -> None:
        """Abort the operation if it is still running."""
        self.task.cancel()

    def remaining(self) -> float:
        """Seconds left until the deadline, never negative."""
        loop = self.task.get_loop()
        return max(self.deadline - loop.time(), 0.0)

    async def wait(self) -> T:
        """Return the result, or cancel and raise once the deadline passes."""
        done, _ = await asyncio.wait({self.task}, timeout=self.remaining())
        if not done:
            self.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self.task
            raise OperationTimeoutError(self.timeout_seconds)
        return self.task.result()


def start_with_deadline(
    awaitable: Awaitable[T], timeout_seconds: float
) -> CancellableOperation[T]:
    """Schedule an awaitable and return its cancellable handle.

    Must be called from within a running event loop.
    """
    loop = asyncio.get_running_loop()
    task = asyncio.ensure_future(awaitable)
    return CancellableOperation(
        task=task,
        deadline=loop.time() + timeout_seconds,
        timeout_seconds=timeout_seconds,
    )
