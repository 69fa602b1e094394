"""Declarative endpoints and typed payloads mapped onto single HTTP calls."""

from ._config import ClientConfig
from ._services import NetworkManager, is_success_status, resolve_response
from ._transport import (
    AsyncHttpxTransport,
    AsyncTransport,
    HttpxTask,
    HttpxTransport,
    Transport,
    TransportTask,
)
from ._utils import (
    EncodedBody,
    Endpoint,
    EncodingType,
    HTTPMethod,
    MultipartForm,
    RequestSpec,
    encode_body,
    encode_query_parameters,
    setup_logging,
)
from .models import (
    BaseUrlMissingError,
    CallResult,
    Failure,
    NetworkError,
    Nothing,
    Outcome,
    Reason,
    Success,
)

__all__ = [
    "AsyncHttpxTransport",
    "AsyncTransport",
    "BaseUrlMissingError",
    "CallResult",
    "ClientConfig",
    "EncodedBody",
    "Endpoint",
    "EncodingType",
    "Failure",
    "HTTPMethod",
    "HttpxTask",
    "HttpxTransport",
    "MultipartForm",
    "NetworkError",
    "NetworkManager",
    "Nothing",
    "Outcome",
    "Reason",
    "RequestSpec",
    "Success",
    "Transport",
    "TransportTask",
    "encode_body",
    "encode_query_parameters",
    "is_success_status",
    "resolve_response",
    "setup_logging",
]
