import threading
from concurrent.futures import Future
from logging import getLogger
from typing import Any, Callable, Dict, Mapping, Optional, Union
from urllib.parse import unquote

from httpx import URL, InvalidURL

from .._config import ClientConfig
from .._transport import (
    AsyncHttpxTransport,
    AsyncTransport,
    HttpxTransport,
    Transport,
)
from .._utils import (
    Endpoint,
    HTTPMethod,
    RequestSpec,
    as_json_string,
    encode_body,
    encode_query_parameters,
)
from .._utils.constants import HEADER_CONTENT_TYPE
from ..models.errors import NetworkError, Reason
from ..models.outcome import CallResult, Failure, Outcome, failure
from ._response_resolver import resolve_response

Completion = Callable[[Outcome, Any], None]

# Marks a payload slot that the public entry point does not use.
_NO_PAYLOAD: Any = object()


class _Delivery:
    """Hands a result to the caller exactly once."""

    def __init__(self, completion: Optional[Completion], logger) -> None:
        self.future: "Future[CallResult]" = Future()
        self._completion = completion
        self._logger = logger
        self._lock = threading.Lock()
        self._delivered = False

    def __call__(self, result: CallResult) -> None:
        with self._lock:
            if self._delivered:
                self._logger.warning("Ignoring duplicate response for a completed call")
                return
            self._delivered = True

        if self._completion is not None:
            try:
                self._completion(result.outcome, result.value)
            except Exception:
                self._logger.exception("Completion handler raised")

        self.future.set_result(result)


class NetworkManager:
    """Maps endpoint descriptions and typed payloads onto HTTP calls.

    Every call resolves to a ``Success`` or ``Failure`` outcome; failures are
    never raised to the caller. The callback API (``call``, ``call_with_params``,
    ``post``) returns immediately after handing the request to the transport,
    and the ``*_async`` variants await the response instead.

    Args:
        base_url: Absolute URL every endpoint path is appended to. Read from the
            ``RESTCALL_BASE_URL`` environment variable when omitted.
        headers: Default headers applied to every request.
        transport: Callback transport. An ``HttpxTransport`` is created on first
            use if omitted.
        async_transport: Transport for the async API. An ``AsyncHttpxTransport``
            is created on first use if omitted.
        config: A prebuilt configuration, used instead of ``base_url`` and ``headers``.

    Raises:
        pydantic.ValidationError: If the base URL is malformed.
        BaseUrlMissingError: If no base URL is given or configured.

    Example:
        ```python
        manager = NetworkManager("https://api.example.com")
        user = Endpoint(pattern="/users/<id>")

        outcome, value = await manager.call_async(user, {"id": "1"}, expecting=User)
        ```
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        headers: Optional[Mapping[str, str]] = None,
        transport: Optional[Transport] = None,
        async_transport: Optional[AsyncTransport] = None,
        config: Optional[ClientConfig] = None,
    ) -> None:
        self._logger = getLogger("restcall")

        if config is None:
            if base_url is not None:
                config = ClientConfig(base_url=base_url, headers=dict(headers or {}))
            else:
                config = ClientConfig.from_env(dict(headers or {}))
        self._config = config

        # Owned transports are created on first use and closed with the manager.
        self._owns_transport = transport is None
        self._transport: Optional[Transport] = transport
        self._owns_async_transport = async_transport is None
        self._async_transport: Optional[AsyncTransport] = async_transport
        self._transport_lock = threading.Lock()

        self._logger.debug(f"BASE URL: {self._config.base_url}")

    @property
    def base_url(self) -> str:
        return self._config.base_url

    @property
    def headers(self) -> Dict[str, str]:
        """Default headers applied to every request."""
        return dict(self._config.headers)

    @headers.setter
    def headers(self, value: Optional[Mapping[str, str]]) -> None:
        self._config = self._config.model_copy(update={"headers": dict(value or {})})

    # Callback API

    def call(
        self,
        endpoint: Endpoint,
        args: Optional[Mapping[str, str]] = None,
        method: Union[HTTPMethod, str] = HTTPMethod.GET,
        *,
        expecting: Optional[Any],
        completion: Optional[Completion] = None,
    ) -> "Future[CallResult]":
        """Send a request without query parameters or body.

        Args:
            endpoint: The route to call.
            args: Values for the endpoint's ``<placeholder>`` pattern.
            method: HTTP method, which must be allowed by the endpoint.
            expecting: Type to decode the response into, ``Nothing`` to skip
                decoding, or None.
            completion: Invoked once with ``(outcome, value)``.

        Returns:
            Future[CallResult]: Resolved once the outcome is known.
        """
        return self._dispatch(
            endpoint, args, _NO_PAYLOAD, method, _NO_PAYLOAD, expecting, completion
        )

    def call_with_params(
        self,
        endpoint: Endpoint,
        args: Optional[Mapping[str, str]] = None,
        *,
        params: Any,
        method: Union[HTTPMethod, str] = HTTPMethod.GET,
        expecting: Optional[Any],
        completion: Optional[Completion] = None,
    ) -> "Future[CallResult]":
        """Send a request whose string fields from ``params`` form the query string."""
        return self._dispatch(
            endpoint, args, params, method, _NO_PAYLOAD, expecting, completion
        )

    def post(
        self,
        endpoint: Endpoint,
        args: Optional[Mapping[str, str]] = None,
        method: Union[HTTPMethod, str] = HTTPMethod.POST,
        *,
        body: Any,
        expecting: Optional[Any],
        completion: Optional[Completion] = None,
    ) -> "Future[CallResult]":
        """Send a request with ``body`` encoded per the endpoint's encoding.

        A ``None`` body fails with ``BUILDING_PAYLOAD``.
        """
        return self._dispatch(
            endpoint, args, _NO_PAYLOAD, method, body, expecting, completion
        )

    # Async API

    async def call_async(
        self,
        endpoint: Endpoint,
        args: Optional[Mapping[str, str]] = None,
        method: Union[HTTPMethod, str] = HTTPMethod.GET,
        *,
        expecting: Optional[Any],
    ) -> CallResult:
        return await self._dispatch_async(
            endpoint, args, _NO_PAYLOAD, method, _NO_PAYLOAD, expecting
        )

    async def call_with_params_async(
        self,
        endpoint: Endpoint,
        args: Optional[Mapping[str, str]] = None,
        *,
        params: Any,
        method: Union[HTTPMethod, str] = HTTPMethod.GET,
        expecting: Optional[Any],
    ) -> CallResult:
        return await self._dispatch_async(
            endpoint, args, params, method, _NO_PAYLOAD, expecting
        )

    async def post_async(
        self,
        endpoint: Endpoint,
        args: Optional[Mapping[str, str]] = None,
        method: Union[HTTPMethod, str] = HTTPMethod.POST,
        *,
        body: Any,
        expecting: Optional[Any],
    ) -> CallResult:
        return await self._dispatch_async(
            endpoint, args, _NO_PAYLOAD, method, body, expecting
        )

    # Lifecycle

    @property
    def transport(self) -> Transport:
        with self._transport_lock:
            if self._transport is None:
                self._transport = HttpxTransport()
            return self._transport

    @property
    def async_transport(self) -> AsyncTransport:
        with self._transport_lock:
            if self._async_transport is None:
                self._async_transport = AsyncHttpxTransport()
            return self._async_transport

    def close(self) -> None:
        """Close the owned callback transport.

        An owned async transport can only be closed with ``aclose``.
        """
        if self._owns_transport and self._transport is not None:
            self._transport.close()
        if self._owns_async_transport and self._async_transport is not None:
            self._logger.warning(
                "The async transport is still open; use aclose() to close it"
            )

    async def aclose(self) -> None:
        """Close every transport this manager created."""
        if self._owns_transport and self._transport is not None:
            self._transport.close()
        if self._owns_async_transport and self._async_transport is not None:
            await self._async_transport.aclose()

    def __enter__(self) -> "NetworkManager":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    async def __aenter__(self) -> "NetworkManager":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    # Pipeline

    def _dispatch(
        self,
        endpoint: Endpoint,
        args: Optional[Mapping[str, str]],
        params: Any,
        method: Union[HTTPMethod, str],
        body: Any,
        expecting: Optional[Any],
        completion: Optional[Completion],
    ) -> "Future[CallResult]":
        deliver = _Delivery(completion, self._logger)

        try:
            request = self.build_request(endpoint, args, params, method, body)
        except NetworkError as e:
            self._logger.debug(f"Request not sent: {e.reason.value}")
            deliver(CallResult(Failure(None, e), None))
            return deliver.future

        def on_response(
            data: Optional[bytes], response: Optional[Any], error: Optional[BaseException]
        ) -> None:
            self._log_exchange(request, params, body, data)
            deliver(self._resolve(data, response, error, expecting))

        task = self.transport.submit(request, on_response)
        task.start()

        return deliver.future

    async def _dispatch_async(
        self,
        endpoint: Endpoint,
        args: Optional[Mapping[str, str]],
        params: Any,
        method: Union[HTTPMethod, str],
        body: Any,
        expecting: Optional[Any],
    ) -> CallResult:
        try:
            request = self.build_request(endpoint, args, params, method, body)
        except NetworkError as e:
            self._logger.debug(f"Request not sent: {e.reason.value}")
            return CallResult(Failure(None, e), None)

        data, response, error = await self.async_transport.send(request)
        self._log_exchange(request, params, body, data)

        return self._resolve(data, response, error, expecting)

    def _resolve(
        self,
        data: Optional[bytes],
        response: Optional[Any],
        error: Optional[BaseException],
        expecting: Optional[Any],
    ) -> CallResult:
        try:
            return resolve_response(data, response, error, expecting)
        except Exception:
            self._logger.exception("Failed to resolve response")
            return failure(Reason.UNWRAPPING_RESPONSE)

    def build_request(
        self,
        endpoint: Endpoint,
        args: Optional[Mapping[str, str]] = None,
        params: Any = _NO_PAYLOAD,
        method: Union[HTTPMethod, str] = HTTPMethod.GET,
        body: Any = _NO_PAYLOAD,
    ) -> RequestSpec:
        """Assemble the outgoing request without sending it.

        Raises:
            NetworkError: ``INVALID_URL``, ``METHOD_NOT_ALLOWED`` or
                ``BUILDING_PAYLOAD``, checked in that order.
        """
        url = self._build_url(endpoint, args, params)

        if not endpoint.is_method_allowed(method):
            raise NetworkError(Reason.METHOD_NOT_ALLOWED)
        method = HTTPMethod.parse(method)

        headers = dict(self._config.headers)
        content: Optional[bytes] = None

        if body is not _NO_PAYLOAD:
            if body is None:
                raise NetworkError(Reason.BUILDING_PAYLOAD)

            encoded = encode_body(body, endpoint.encoding)
            content = encoded.content

            for name in [h for h in headers if h.lower() == HEADER_CONTENT_TYPE.lower()]:
                del headers[name]
            headers[HEADER_CONTENT_TYPE] = encoded.content_type

        return RequestSpec(method=method, url=url, headers=headers, content=content)

    def _build_url(
        self, endpoint: Endpoint, args: Optional[Mapping[str, str]], params: Any
    ) -> URL:
        try:
            base = URL(self._config.base_url)
        except InvalidURL as e:
            raise NetworkError(Reason.INVALID_URL) from e

        path = endpoint.resolve_path(args)
        if path is None:
            raise NetworkError(Reason.INVALID_URL)

        # A URL with a host can only carry an empty or absolute path.
        if path and not path.startswith("/"):
            raise NetworkError(Reason.INVALID_URL)

        query = []
        if params is not _NO_PAYLOAD and params is not None:
            try:
                query = encode_query_parameters(params)
            except NetworkError:
                self._logger.debug("Parameters are not a mapping, sending no query")

        try:
            url = base.copy_with(path=base.path.rstrip("/") + path)
            if query:
                url = url.copy_with(params=query)
            # Undo the escaping added while assembling, then let httpx
            # escape the result once.
            return URL(unquote(str(url)))
        except InvalidURL as e:
            raise NetworkError(Reason.INVALID_URL) from e

    def _log_exchange(
        self, request: RequestSpec, params: Any, body: Any, data: Optional[bytes]
    ) -> None:
        output = f"URL\n{request.url}\n\n"
        if params is not _NO_PAYLOAD:
            output += f"PARAMETERS\n{as_json_string(params) or 'No Parameters'}\n\n"
        if body is not _NO_PAYLOAD:
            output += f"BODY\n{as_json_string(body) or 'No Body'}\n\n"
        if data is not None:
            output += f"RESPONSE\n{data.decode('utf-8', errors='replace') or 'No Response Content'}"
        self._logger.debug(output)
