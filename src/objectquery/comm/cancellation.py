"""
Cancellation Tokens.

A `CancellationToken` is handed to the [`QueryClient`][objectquery.comm.QueryClient]
operations. Cancelling it before a query is dispatched prevents any call to the
executor; cancelling it while the query is in flight aborts the pending
executor call.
"""

import asyncio
from typing import Set

from ..exceptions import QueryCancelledError


class CancellationToken:
    """
    A one-shot cancellation signal shared between a caller and in-flight queries.

    Note: Thread Safety
        `cancel()` must run on the event loop thread that awaits the query.
        From another thread use `loop.call_soon_threadsafe(token.cancel)`.
    """

    def __init__(self):
        self._cancelled = False
        self._waiters: Set[asyncio.Future] = set()

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def cancel(self):
        """Signals cancellation; later calls are no-ops."""
        if self._cancelled:
            return
        self._cancelled = True
        for waiter in self._waiters:
            if not waiter.done():
                waiter.set_result(None)
        self._waiters.clear()

    def raise_if_cancelled(self):
        """
        Raises:
            QueryCancelledError: If the token has been cancelled.
        """
        if self._cancelled:
            raise QueryCancelledError("The query was cancelled.")

    async def wait(self):
        """Suspends until the token is cancelled."""
        if self._cancelled:
            return
        waiter = asyncio.get_running_loop().create_future()
        self._waiters.add(waiter)
        try:
            await waiter
        finally:
            self._waiters.discard(waiter)
