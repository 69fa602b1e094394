import json
from logging import getLogger
from typing import Any, Optional

import httpx
from pydantic import PydanticUserError, TypeAdapter, ValidationError

from .._utils.constants import SUCCESS_STATUS_RANGE, UNPARSABLE_BODY_FALLBACK
from ..models.errors import Reason
from ..models.outcome import CallResult, Nothing, Success, failure

logger = getLogger("restcall")


def is_success_status(status_code: int) -> bool:
    return status_code in SUCCESS_STATUS_RANGE


def _diagnostic_body(data: Optional[bytes]) -> Any:
    if data is None:
        return None
    try:
        return json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return UNPARSABLE_BODY_FALLBACK


def _debug_body(data: bytes) -> Any:
    try:
        return json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


def resolve_response(
    data: Optional[bytes],
    response: Optional[Any],
    error: Optional[BaseException],
    expecting: Optional[Any],
) -> CallResult:
    """Classify a transport outcome and decode its body.

    Args:
        data: The raw response body, if any was received.
        response: The transport's response metadata. Only ``httpx.Response``
            instances are treated as HTTP responses.
        error: The transport-level error, if the transfer failed.
        expecting: The type to decode a successful body into. ``Nothing`` skips
            decoding; ``None`` means the call site declared no usable type.

    Returns:
        CallResult: The outcome and, on success, the decoded value.
    """
    if not isinstance(response, httpx.Response):
        if error is not None:
            return failure(Reason.UNWRAPPING_RESPONSE)
        return failure(Reason.INVALID_RESPONSE_TYPE)

    status_code = response.status_code

    if error is not None or not is_success_status(status_code):
        return failure(
            Reason.REQUEST_FAILED, status_code, json=_diagnostic_body(data)
        )

    if expecting is None:
        return failure(Reason.CASTING_TO_EXPECTED_TYPE, status_code)

    if expecting is Nothing:
        return CallResult(Success(status_code), None)

    body = data if data is not None else b""

    try:
        value = TypeAdapter(expecting).validate_json(body)
    except (ValidationError, PydanticUserError) as e:
        logger.warning(
            f"Failed to build {getattr(expecting, '__name__', expecting)} from JSON: "
            f"{_debug_body(body)!r}\n\nError: {e}"
        )
        return failure(Reason.CASTING_TO_EXPECTED_TYPE, status_code)

    return CallResult(Success(status_code), value)
