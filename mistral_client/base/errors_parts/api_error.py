"""
API error raised for non-retryable 4xx responses.

The error body is kept as an opaque JSON mapping because its shape varies:

- ``{"type": ..., "message": "flat string"}``
- ``{"type": ..., "message": {"detail": [{"type", "loc", "msg", "input"}, ...]}}``
- ``{"detail": "Unauthorized"}`` (authorization failures)

``format_api_error`` renders all of them as
``"[<code>] <errorType>: <detail>; <detail>"``, dropping the ``<errorType>:``
segment when no type is present and the bracketed code when it is zero.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from .client_error import ClientError
from .error_code import ErrorCode

_STATUS_CODES: Dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION,
    401: ErrorCode.AUTH,
    403: ErrorCode.AUTH,
    404: ErrorCode.NOT_FOUND,
    408: ErrorCode.TIMEOUT,
    409: ErrorCode.CONFLICT,
    422: ErrorCode.VALIDATION,
    429: ErrorCode.RATE_LIMIT,
}


def _format_detail(detail: Mapping[str, Any]) -> str:
    """Render one ``{type, loc, msg}`` record as ``"type: msg (a.b)"``."""
    out = ""
    detail_type = detail.get("type")
    if detail_type:
        out += f"{detail_type}: "
    out += str(detail.get("msg") or "")
    loc = detail.get("loc")
    if loc:
        out += " (" + ".".join(str(part) for part in loc) + ")"
    return out


def extract_details(content: Optional[Mapping[str, Any]]) -> List[str]:
    """Return the human-readable detail strings carried by an error body.

    Extraction order: ``message`` as a string, then ``message.detail[]``, then a
    top-level ``detail`` string.
    """
    if not content:
        return []
    message = content.get("message")
    if isinstance(message, str):
        return [message]
    if isinstance(message, Mapping):
        detail = message.get("detail")
        if isinstance(detail, list):
            return [_format_detail(d) for d in detail if isinstance(d, Mapping)]
        if isinstance(detail, str):
            return [detail]
    detail = content.get("detail")
    if isinstance(detail, str):
        return [detail]
    return []


def format_api_error(code: int, content: Optional[Mapping[str, Any]]) -> str:
    """Build the canonical error message for a status code and error body."""
    error_type = ""
    if content and isinstance(content.get("type"), str):
        error_type = content["type"]
    joined = "; ".join(extract_details(content))

    if error_type and joined:
        body = f"{error_type}: {joined}"
    else:
        body = error_type or joined

    if not code:
        return body
    return f"[{code}] {body}" if body else f"[{code}]"


class ApiError(ClientError):
    """HTTP status code plus opaque JSON error body.

    Constructed once when a non-2xx, non-retryable 4xx response is received.

    Attributes:
        status_code: HTTP status of the failed response.
        content: Decoded JSON error body, or ``None`` when it was not JSON.
    """

    def __init__(self, status_code: int, content: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            code=_STATUS_CODES.get(status_code, ErrorCode.UNKNOWN),
            message=format_api_error(status_code, content),
            retryable=False,
        )
        self.status_code = status_code
        self.content = content

    @property
    def details(self) -> List[str]:
        """Detail strings extracted from the error body."""
        return extract_details(self.content)


class ModelNotFoundError(ApiError):
    """``GET /v1/models/{id}`` answered 404."""

    def __init__(self, model_id: str, content: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(404, content)
        self.model_id = model_id
        self.message = f"model not found: {model_id}"


__all__ = [
    "ApiError",
    "ModelNotFoundError",
    "extract_details",
    "format_api_error",
]
