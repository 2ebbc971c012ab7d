"""ApiError message formatting across the error body shapes the API returns."""
from __future__ import annotations

import json

import pytest

from mistral_client.base.errors import ApiError, ErrorCode, ModelNotFoundError, format_api_error

_DETAIL_PARALLEL = {
    "type": "extra_forbidden",
    "loc": ["body", "parallel_tool_calls"],
    "msg": "Extra inputs are not permitted",
    "input": True,
}
_DETAIL_MESSAGES = {
    "type": "missing_required",
    "loc": ["body", "messages"],
    "msg": "Missing required property: messages",
    "input": False,
}


def _structured(*details):
    return {
        "object": "error",
        "message": {"detail": list(details)},
        "type": "invalid_request_error",
        "param": None,
        "code": None,
    }


def test_single_structured_detail():
    err = ApiError(400, _structured(_DETAIL_PARALLEL))
    assert str(err) == (  # nosec B101
        "[400] invalid_request_error: extra_forbidden: Extra inputs are not permitted (body.parallel_tool_calls)"
    )
    assert err.code is ErrorCode.VALIDATION  # nosec B101
    assert err.retryable is False  # nosec B101


def test_multiple_structured_details_joined_with_semicolon():
    err = ApiError(400, _structured(_DETAIL_PARALLEL, _DETAIL_MESSAGES))
    assert str(err) == (  # nosec B101
        "[400] invalid_request_error: extra_forbidden: Extra inputs are not permitted (body.parallel_tool_calls); "
        "missing_required: Missing required property: messages (body.messages)"
    )
    assert len(err.details) == 2  # nosec B101


def test_structured_details_from_json_text():
    content = json.loads(json.dumps(_structured(_DETAIL_PARALLEL, _DETAIL_MESSAGES)))
    assert str(ApiError(400, content)).endswith("messages (body.messages)")  # nosec B101


def test_flat_string_message():
    content = {
        "object": "error",
        "message": "This model does not support output_dimension.",
        "type": "invalid_request_invalid_args",
        "param": None,
        "code": "3051",
    }
    assert str(ApiError(400, content)) == (  # nosec B101
        "[400] invalid_request_invalid_args: This model does not support output_dimension."
    )


def test_top_level_detail_for_auth_failures():
    err = ApiError(401, {"detail": "Unauthorized"})
    assert str(err) == "[401] Unauthorized"  # nosec B101
    assert err.code is ErrorCode.AUTH  # nosec B101


@pytest.mark.parametrize(
    "code, content, expected",
    [
        (0, {"detail": "x"}, "x"),
        (0, {"type": "t", "message": "m"}, "t: m"),
        (422, None, "[422]"),
        (404, {"type": "not_found"}, "[404] not_found"),
    ],
)
def test_format_edge_cases(code, content, expected):
    assert format_api_error(code, content) == expected  # nosec B101


def test_model_not_found_is_an_api_error():
    err = ModelNotFoundError("ghost-model")
    assert isinstance(err, ApiError)  # nosec B101
    assert err.status_code == 404  # nosec B101
    assert err.code is ErrorCode.NOT_FOUND  # nosec B101
    assert "ghost-model" in str(err)  # nosec B101
