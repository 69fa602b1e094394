from ._encoding import (
    EncodedBody,
    as_json_string,
    encode_body,
    encode_query_parameters,
    payload_as_dict,
)
from ._endpoint import (
    Endpoint,
    EncodingType,
    FormEncoding,
    HTTPMethod,
    JSONEncoding,
    MultipartForm,
    MultipartFormEncoding,
)
from ._logs import setup_logging
from ._request_spec import RequestSpec

__all__ = [
    "EncodedBody",
    "Endpoint",
    "EncodingType",
    "FormEncoding",
    "HTTPMethod",
    "JSONEncoding",
    "MultipartForm",
    "MultipartFormEncoding",
    "RequestSpec",
    "as_json_string",
    "encode_body",
    "encode_query_parameters",
    "payload_as_dict",
    "setup_logging",
]
