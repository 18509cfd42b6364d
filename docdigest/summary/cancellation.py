"""Cooperative cancellation shared by every operation of one batch run."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from loguru import logger

from .errors import OperationCancelled

T = TypeVar("T")


class CancellationToken:
    """A one-shot signal passed explicitly into every suspending call.

    The token itself holds only a flag and a list of callbacks, so it can be
    created and cancelled without an event loop. :meth:`run` is the single place
    that ties it to asyncio.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        callbacks, self._callbacks = self._callbacks, []
        logger.debug("Cancellation requested; notifying {} pending operation(s)", len(callbacks))
        for callback in callbacks:
            callback()

    def register(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Call ``callback`` on cancellation and return a function that unregisters it.

        Registering on an already cancelled token invokes the callback immediately.
        """

        if self._cancelled:
            callback()
            return lambda: None
        self._callbacks.append(callback)

        def _unregister() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return _unregister

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise OperationCancelled()

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the token fires first.

        Raises :class:`OperationCancelled` when the wait was aborted by this token.
        A cancellation coming from anywhere else propagates unchanged.
        """

        if self._cancelled:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise OperationCancelled()

        task = asyncio.ensure_future(awaitable)
        unregister = self.register(task.cancel)
        try:
            return await task
        except asyncio.CancelledError:
            if self._cancelled and task.cancelled():
                raise OperationCancelled() from None
            raise
        finally:
            unregister()


__all__ = ["CancellationToken"]
