"""Cooperative cancellation token.

A request observes its token at every point where it may block: the backoff
sleep between attempts, the rate-limiter wait and the stream producer loop.
Cancelling a token wakes those waits at once and runs the callbacks
registered with :meth:`CancellationToken.on_cancel`, which close in-flight
HTTP responses so blocked reads return.
"""

from __future__ import annotations

from threading import Lock
from typing import Callable, List, Optional

from .cancelled_error import CancelledError
from .state import State


class CancellationToken:
    """Cancellation flag shared between a caller and the request it started.

    Tokens form a tree: cancelling a token cancels every token derived from it
    with :meth:`child`, but never its parent. ``ChunkStream`` relies on this to
    stop its own producer without cancelling the caller's token.
    """

    def __init__(self, *, parent: Optional["CancellationToken"] = None) -> None:
        self._state = State()
        self._lock = Lock()
        self._children: List[CancellationToken] = []
        self._callbacks: List[Callable[[], None]] = []
        if parent is not None:
            parent._attach(self)

    @property
    def cancelled(self) -> bool:
        return self._state.cancelled

    @property
    def reason(self) -> Optional[str]:
        return self._state.reason

    def cancel(self, reason: Optional[str] = None) -> None:
        """Mark the token cancelled and wake blocked waiters. Later calls are no-ops."""
        with self._lock:
            if self._state.cancelled:
                return
            self._state.cancelled = True
            self._state.reason = reason
            children = self._children[:]
            callbacks = self._callbacks[:]
            self._callbacks.clear()
        self._state.event.set()
        for child in children:
            child.cancel(reason)
        for callback in callbacks:
            callback()

    def _attach(self, child: "CancellationToken") -> None:
        with self._lock:
            self._children.append(child)
            already = self._state.cancelled
        if already:
            child.cancel(self._state.reason)

    def on_cancel(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Run ``callback`` when the token is cancelled.

        Runs it immediately if the token is already cancelled. Returns a
        function that unregisters the callback; calling it after the callback
        ran is a no-op.
        """
        with self._lock:
            registered = not self._state.cancelled
            if registered:
                self._callbacks.append(callback)
        if not registered:
            callback()
            return lambda: None

        def unregister() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return unregister

    def child(self) -> "CancellationToken":
        """Return a new token cancelled together with this one."""
        return CancellationToken(parent=self)

    def raise_if_cancelled(self) -> None:
        if self._state.cancelled:
            raise CancelledError(self._state.reason or "operation cancelled")

    def wait(self, seconds: float) -> bool:
        """Block up to ``seconds``; True when the token was cancelled meanwhile."""
        if seconds <= 0:
            return self._state.cancelled
        return self._state.event.wait(seconds)

    def sleep(self, seconds: float) -> None:
        """Sleep ``seconds`` unless cancelled first.

        Raises:
            CancelledError: The token was cancelled before or during the sleep.
        """
        if self.wait(seconds):
            self.raise_if_cancelled()

    def __repr__(self) -> str:  # pragma: no cover
        return f"CancellationToken(cancelled={self.cancelled}, reason={self.reason!r})"


__all__ = ["CancellationToken"]
