"""Internal state holder for cancellation tokens."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class State:
    """Internal state for cooperative cancellation tokens.

    ``event`` is set exactly once, when cancellation is requested, so blocking
    waits can be woken up immediately.
    """

    cancelled: bool = False
    reason: Optional[str] = None
    event: threading.Event = field(default_factory=threading.Event)


__all__ = ["State"]
