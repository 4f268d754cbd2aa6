"""Cooperative cancellation shared by the scheduler and the provider adapter."""

from __future__ import annotations

import asyncio


class CancellationToken:
    """One-shot cancellation signal for a pipeline run.

    cancel() may be called from any thread; waiters are woken on the
    event loop the token was bound to by its first wait().
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._cancelled = False
        self._loop: asyncio.AbstractEventLoop | None = None
        self.reason = ""

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def bind(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Attach the token to the running event loop."""
        self._loop = loop or asyncio.get_running_loop()

    def cancel(self, reason: str = "cancelled") -> None:
        """Signal cancellation. Repeated calls keep the first reason."""
        if self._cancelled:
            return
        self._cancelled = True
        self.reason = reason

        loop = self._loop
        if loop is None or loop.is_closed():
            self._event.set()
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            self._event.set()
        else:
            loop.call_soon_threadsafe(self._event.set)

    async def wait(self) -> None:
        """Suspend until cancel() is called."""
        if self._loop is None:
            self.bind()
        if self._cancelled:
            return
        await self._event.wait()
