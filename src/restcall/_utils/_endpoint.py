from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Mapping, Optional, Tuple, Union


class HTTPMethod(str, Enum):
    """Standard HTTP request methods."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @classmethod
    def parse(cls, value: Union["HTTPMethod", str]) -> "HTTPMethod":
        if isinstance(value, HTTPMethod):
            return value
        return cls(value.upper())


@dataclass(frozen=True)
class MultipartForm:
    """A binary part attached to a ``multipart/form-data`` body."""

    data: bytes
    field_name: str
    file_name: str
    mime_type: str


class EncodingType:
    """How a request body is serialized for an endpoint.

    Use the ``EncodingType.JSON`` and ``EncodingType.FORM`` singletons, or
    ``EncodingType.multipart_form(parts)`` for multipart uploads.
    """

    JSON: "JSONEncoding"
    FORM: "FormEncoding"

    @staticmethod
    def multipart_form(parts: Iterable[MultipartForm]) -> "MultipartFormEncoding":
        return MultipartFormEncoding(tuple(parts))


@dataclass(frozen=True)
class JSONEncoding(EncodingType):
    pass


@dataclass(frozen=True)
class FormEncoding(EncodingType):
    pass


@dataclass(frozen=True)
class MultipartFormEncoding(EncodingType):
    parts: Tuple[MultipartForm, ...] = ()


EncodingType.JSON = JSONEncoding()
EncodingType.FORM = FormEncoding()


def _normalize_methods(
    methods: Iterable[Union[HTTPMethod, str]],
) -> frozenset:
    return frozenset(HTTPMethod.parse(method) for method in methods)


@dataclass(frozen=True)
class Endpoint:
    """Describes a route on the remote API.

    An endpoint is either a literal path (``url``) or a pattern containing
    ``<name>`` placeholders that are filled from call arguments. When both are
    set the literal path wins.

    Example:
        ```python
        user = Endpoint(pattern="/users/<id>", methods=[HTTPMethod.GET])
        user.resolve_path({"id": "1"})  # "/users/1"
        ```
    """

    url: Optional[str] = None
    pattern: Optional[str] = None
    methods: frozenset = field(default_factory=lambda: frozenset({HTTPMethod.GET}))
    encoding: EncodingType = EncodingType.JSON

    def __post_init__(self) -> None:
        object.__setattr__(self, "methods", _normalize_methods(self.methods))

    def resolve_path(self, args: Optional[Mapping[str, str]] = None) -> Optional[str]:
        """Return the concrete path for this endpoint, or None if it has none."""
        if self.url is not None:
            return self.url

        if self.pattern is None or args is None:
            return None

        return _substitute(self.pattern, args)

    def with_args(self, args: Optional[Mapping[str, str]]) -> Optional["Endpoint"]:
        """Return a copy of this endpoint with its pattern resolved from ``args``.

        Endpoints built from a literal path cannot take arguments and return None.
        """
        if self.pattern is None:
            return None

        if not args:
            return self

        return replace(self, url=_substitute(self.pattern, args), pattern=None)

    def is_method_allowed(self, method: Union[HTTPMethod, str]) -> bool:
        try:
            return HTTPMethod.parse(method) in self.methods
        except ValueError:
            return False


def _substitute(pattern: str, args: Mapping[str, str]) -> str:
    result = pattern
    for key, value in args.items():
        result = result.replace(f"<{key}>", value)
    return result
