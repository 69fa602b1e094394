"""Transports that carry an assembled request over the network.

A transport is the only component that performs I/O. The synchronous contract
is callback based: ``submit`` registers the request and returns a task, and the
transfer begins only when ``start`` is called on that task. The callback is
invoked once with ``(data, response, error)``.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from logging import getLogger
from typing import Any, Callable, Optional, Protocol, Tuple

import httpx

from ._utils._request_spec import RequestSpec

ResponseCallback = Callable[
    [Optional[bytes], Optional[Any], Optional[BaseException]], None
]
TransportResult = Tuple[Optional[bytes], Optional[Any], Optional[BaseException]]

logger = getLogger("restcall.transport")


class TransportTask(Protocol):
    def start(self) -> None: ...


class Transport(Protocol):
    def submit(self, request: RequestSpec, callback: ResponseCallback) -> TransportTask: ...

    def close(self) -> None: ...


class AsyncTransport(Protocol):
    async def send(self, request: RequestSpec) -> TransportResult: ...

    async def aclose(self) -> None: ...


class HttpxTask:
    """A deferred transfer on an ``httpx.Client``, run on a worker thread."""

    def __init__(
        self,
        client: httpx.Client,
        executor: ThreadPoolExecutor,
        request: RequestSpec,
        callback: ResponseCallback,
    ) -> None:
        self._client = client
        self._executor = executor
        self._request = request
        self._callback = callback
        self._lock = threading.Lock()
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    def start(self) -> None:
        with self._lock:
            if self._started:
                return
            self._started = True
        try:
            self._executor.submit(self._run)
        except RuntimeError as e:
            # The pool was shut down with the transport.
            logger.debug(
                f"{self._request.method.value} {self._request.url} not started: {e}"
            )
            self._callback(None, None, e)

    def _run(self) -> None:
        try:
            response = self._client.send(self._request.to_httpx_request())
        except httpx.HTTPError as e:
            logger.debug(f"{self._request.method.value} {self._request.url} failed: {e}")
            result: TransportResult = (None, None, e)
        except Exception as e:
            logger.warning(
                f"{self._request.method.value} {self._request.url} could not be sent: {e!r}"
            )
            result = (None, None, e)
        else:
            result = (response.content, response, None)

        self._callback(*result)


class HttpxTransport:
    """Callback transport backed by ``httpx.Client`` and a thread pool.

    Args:
        client: Client to send requests with. One is created, and closed with
            the transport, when omitted.
        max_workers: Size of the worker pool running transfers.
    """

    def __init__(
        self, client: Optional[httpx.Client] = None, max_workers: Optional[int] = None
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="restcall"
        )

    def submit(self, request: RequestSpec, callback: ResponseCallback) -> HttpxTask:
        return HttpxTask(self._client, self._executor, request, callback)

    def close(self) -> None:
        self._executor.shutdown(wait=True)
        if self._owns_client:
            self._client.close()


class AsyncHttpxTransport:
    """Awaitable transport backed by ``httpx.AsyncClient``."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()

    async def send(self, request: RequestSpec) -> TransportResult:
        try:
            response = await self._client.send(request.to_httpx_request())
        except httpx.HTTPError as e:
            logger.debug(f"{request.method.value} {request.url} failed: {e}")
            return None, None, e
        except Exception as e:
            logger.warning(
                f"{request.method.value} {request.url} could not be sent: {e!r}"
            )
            return None, None, e

        return response.content, response, None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
