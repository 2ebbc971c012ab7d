"""Cancellation parts package public surface.

Re-exports the token, its state holder and the error type for optional
direct imports. Prefer importing from `mistral_client.base.cancellation`
for the stable surface.
"""

from .cancelled_error import CancelledError
from .state import State
from .cancellation_token import CancellationToken

__all__ = ["CancellationToken", "CancelledError", "State"]
