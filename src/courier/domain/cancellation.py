"""Cooperative cancellation threaded through a single send/publish call.

The dispatcher never interrupts running handler code. Handlers and
behaviors observe the token themselves, either by polling
:attr:`CancellationToken.cancelled`, by calling
:meth:`CancellationToken.raise_if_cancelled` between steps, or by racing
their own work against :meth:`CancellationToken.wait`.
"""

from __future__ import annotations

import asyncio
import logging

from courier.domain.errors import OperationCancelledError

logger = logging.getLogger(__name__)


class CancellationToken:
    """One-shot cancellation signal shared by every stage of a call."""

    __slots__ = ("_event", "_reason")

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: str | None = None

    @classmethod
    def cancelled_token(cls, reason: str | None = None) -> CancellationToken:
        """Return a token that is already cancelled."""
        token = cls()
        token.cancel(reason)
        return token

    @property
    def cancelled(self) -> bool:
        """Whether cancellation has been requested."""
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str | None = None) -> None:
        """Request cancellation. Later calls are no-ops."""
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()
        logger.debug("Cancellation requested: %s", reason or "no reason given")

    def cancel_after(self, delay: float, reason: str | None = None) -> asyncio.TimerHandle:
        """Schedule :meth:`cancel` on the running loop after *delay* seconds.

        Returns the timer handle so the caller can call ``cancel()`` on it
        when the work finishes first.
        """
        loop = asyncio.get_running_loop()
        return loop.call_later(delay, self.cancel, reason or f"timed out after {delay}s")

    def raise_if_cancelled(self) -> None:
        """Raise :class:`OperationCancelledError` if cancellation was requested."""
        if self._event.is_set():
            raise OperationCancelledError(self._reason)

    async def wait(self) -> None:
        """Suspend until cancellation is requested."""
        await self._event.wait()

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "active"
        return f"<CancellationToken {state}>"
