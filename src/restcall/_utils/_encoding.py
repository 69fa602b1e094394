"""Serialization of typed payloads into query strings and request bodies."""

import uuid
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Optional, Tuple
from urllib.parse import quote

from pydantic import PydanticUserError, TypeAdapter
from pydantic_core import PydanticSerializationError

from ..models.errors import NetworkError, Reason
from ._endpoint import (
    EncodingType,
    FormEncoding,
    JSONEncoding,
    MultipartForm,
    MultipartFormEncoding,
)
from .constants import CONTENT_TYPE_FORM, CONTENT_TYPE_JSON, CONTENT_TYPE_MULTIPART

# Characters left unescaped in form keys and values. This is the URL query
# character set minus the pair delimiters "&", "=" and "+".
_FORM_SAFE = "!$'()*,-./:;?@_~"

_DUMP_ERRORS = (PydanticSerializationError, PydanticUserError, TypeError, ValueError)


class EncodedBody(NamedTuple):
    content: bytes
    content_type: str


def _adapter(payload: Any) -> TypeAdapter:
    return TypeAdapter(type(payload))


def payload_as_dict(payload: Any) -> Dict[str, Any]:
    """Dump a payload to a JSON-compatible mapping of its fields.

    Raises:
        NetworkError: With ``BUILDING_PAYLOAD`` if the payload cannot be
            serialized or does not serialize to a mapping.
    """
    try:
        dumped = _adapter(payload).dump_python(payload, mode="json", by_alias=True)
    except _DUMP_ERRORS as e:
        raise NetworkError(Reason.BUILDING_PAYLOAD) from e

    if not isinstance(dumped, dict):
        raise NetworkError(Reason.BUILDING_PAYLOAD)
    return dumped


def _string_fields(payload: Any) -> List[Tuple[str, str]]:
    to_query_parameters: Optional[Callable[[], Any]] = getattr(
        payload, "to_query_parameters", None
    )
    if callable(to_query_parameters):
        try:
            declared = to_query_parameters()
            pairs = [
                (key, value)
                for key, value in (
                    declared.items() if isinstance(declared, Mapping) else declared
                )
            ]
        except Exception as e:
            raise NetworkError(Reason.BUILDING_PAYLOAD) from e
    else:
        pairs = list(payload_as_dict(payload).items())

    # Only string values are sent; numbers, booleans and nested values are dropped.
    return [(str(key), value) for key, value in pairs if isinstance(value, str)]


def encode_query_parameters(payload: Any) -> List[Tuple[str, str]]:
    """Return the payload's string fields as ordered query parameters."""
    return _string_fields(payload)


def encode_body(
    payload: Any, encoding: EncodingType, *, boundary: Optional[str] = None
) -> EncodedBody:
    """Serialize a request body according to the endpoint's encoding.

    Args:
        payload: The body object, a pydantic model, dataclass or mapping.
        encoding: The endpoint's declared encoding.
        boundary: Multipart boundary. A random one is used when omitted.

    Returns:
        EncodedBody: The body bytes and the matching ``Content-Type`` value.

    Raises:
        NetworkError: With ``BUILDING_PAYLOAD`` when the payload cannot be encoded.
    """
    if isinstance(encoding, JSONEncoding):
        return _encode_json(payload)
    if isinstance(encoding, FormEncoding):
        return _encode_form(payload)
    if isinstance(encoding, MultipartFormEncoding):
        return _encode_multipart(payload, encoding.parts, boundary or _new_boundary())
    raise NetworkError(Reason.BUILDING_PAYLOAD)


def _encode_json(payload: Any) -> EncodedBody:
    try:
        content = _adapter(payload).dump_json(payload, by_alias=True)
    except _DUMP_ERRORS as e:
        raise NetworkError(Reason.BUILDING_PAYLOAD) from e
    return EncodedBody(content, CONTENT_TYPE_JSON)


def _encode_form(payload: Any) -> EncodedBody:
    fields = _string_fields(payload)
    if not fields:
        raise NetworkError(Reason.BUILDING_PAYLOAD)

    body = "".join(
        f"{quote(key, safe=_FORM_SAFE)}={quote(value, safe=_FORM_SAFE)}&"
        for key, value in fields
    )
    return EncodedBody(body.encode("utf-8"), CONTENT_TYPE_FORM)


def _new_boundary() -> str:
    return f"Boundary-{uuid.uuid4()}"


def _header_value(value: str) -> str:
    if "\r" in value or "\n" in value:
        raise NetworkError(Reason.BUILDING_PAYLOAD)
    return value


def _quoted_param(value: str) -> str:
    # Quotes in form-data names are sent percent-escaped.
    return _header_value(value).replace('"', "%22")


def _encode_multipart(
    payload: Any, parts: Tuple[MultipartForm, ...], boundary: str
) -> EncodedBody:
    fields = _string_fields(payload)
    if not fields and not parts:
        raise NetworkError(Reason.BUILDING_PAYLOAD)

    delimiter = f"--{boundary}\r\n".encode("utf-8")
    body = bytearray()

    for name, value in fields:
        body += delimiter
        body += (
            f'Content-Disposition: form-data; name="{_quoted_param(name)}"\r\n\r\n'
        ).encode("utf-8")
        body += f"{value}\r\n".encode("utf-8")

    for part in parts:
        body += delimiter
        body += (
            f'Content-Disposition: form-data; name="{_quoted_param(part.field_name)}"; '
            f'filename="{_quoted_param(part.file_name)}"\r\n'
        ).encode("utf-8")
        body += f"Content-Type: {_header_value(part.mime_type)}\r\n\r\n".encode(
            "utf-8"
        )
        body += part.data
        body += b"\r\n"

    body += f"--{boundary}--\r\n".encode("utf-8")

    return EncodedBody(
        bytes(body), f"{CONTENT_TYPE_MULTIPART}; boundary={boundary}"
    )


def as_json_string(value: Any) -> Optional[str]:
    """Best-effort JSON rendering of a payload, for logging."""
    try:
        return _adapter(value).dump_json(value, by_alias=True).decode("utf-8")
    except _DUMP_ERRORS:
        return None
