import json
import threading
from typing import Any, List

import httpx
import pytest
from pytest_httpx import HTTPXMock

from restcall import AsyncHttpxTransport, HTTPMethod, HttpxTransport, RequestSpec


@pytest.fixture
def request_spec(base_url: str) -> RequestSpec:
    return RequestSpec(
        method=HTTPMethod.POST,
        url=httpx.URL(f"{base_url}/users"),
        headers={"Content-Type": "application/json"},
        content=b'{"name": "Jane"}',
    )


class Collector:
    def __init__(self) -> None:
        self.results: List[Any] = []
        self.done = threading.Event()

    def __call__(self, data, response, error) -> None:
        self.results.append((data, response, error))
        self.done.set()


class TestHttpxTransport:
    def test_nothing_is_sent_before_start(
        self, httpx_mock: HTTPXMock, request_spec: RequestSpec
    ):
        transport = HttpxTransport()
        collector = Collector()

        task = transport.submit(request_spec, collector)
        transport.close()

        assert not task.started
        assert collector.results == []
        assert httpx_mock.get_requests() == []

    def test_start_sends_request_once(
        self, httpx_mock: HTTPXMock, request_spec: RequestSpec, base_url: str
    ):
        httpx_mock.add_response(
            url=f"{base_url}/users", method="POST", status_code=201, json={"id": 1}
        )
        transport = HttpxTransport()
        collector = Collector()

        task = transport.submit(request_spec, collector)
        task.start()
        task.start()
        transport.close()

        assert len(collector.results) == 1
        data, response, error = collector.results[0]
        assert json.loads(data) == {"id": 1}
        assert response.status_code == 201
        assert error is None

        sent_request = httpx_mock.get_request()
        assert sent_request is not None
        assert sent_request.headers["Content-Type"] == "application/json"
        assert sent_request.content == b'{"name": "Jane"}'

    def test_transport_error_has_no_response(
        self, httpx_mock: HTTPXMock, request_spec: RequestSpec
    ):
        httpx_mock.add_exception(httpx.ConnectError("refused"))
        transport = HttpxTransport()
        collector = Collector()

        transport.submit(request_spec, collector).start()
        assert collector.done.wait(timeout=5)
        transport.close()

        data, response, error = collector.results[0]
        assert data is None
        assert response is None
        assert isinstance(error, httpx.ConnectError)

    def test_uses_given_client(
        self, httpx_mock: HTTPXMock, request_spec: RequestSpec, base_url: str
    ):
        httpx_mock.add_response(url=f"{base_url}/users", method="POST")
        client = httpx.Client()
        transport = HttpxTransport(client=client, max_workers=1)

        transport.submit(request_spec, Collector()).start()
        transport.close()

        assert not client.is_closed
        client.close()

    def test_closed_client_reports_error(self, request_spec: RequestSpec):
        client = httpx.Client()
        client.close()
        transport = HttpxTransport(client=client)
        collector = Collector()

        transport.submit(request_spec, collector).start()
        assert collector.done.wait(timeout=5)
        transport.close()

        data, response, error = collector.results[0]
        assert data is None
        assert response is None
        assert isinstance(error, RuntimeError)

    def test_unencodable_header_reports_error(
        self, httpx_mock: HTTPXMock, request_spec: RequestSpec
    ):
        request_spec.headers["X-Name"] = "José"
        transport = HttpxTransport()
        collector = Collector()

        transport.submit(request_spec, collector).start()
        assert collector.done.wait(timeout=5)
        transport.close()

        assert isinstance(collector.results[0][2], UnicodeEncodeError)
        assert httpx_mock.get_requests() == []

    def test_start_after_close_reports_error(self, request_spec: RequestSpec):
        transport = HttpxTransport()
        collector = Collector()
        task = transport.submit(request_spec, collector)
        transport.close()

        task.start()

        assert len(collector.results) == 1
        assert isinstance(collector.results[0][2], RuntimeError)


class TestAsyncHttpxTransport:
    @pytest.mark.anyio
    async def test_send(
        self, httpx_mock: HTTPXMock, request_spec: RequestSpec, base_url: str
    ):
        httpx_mock.add_response(
            url=f"{base_url}/users", method="POST", status_code=201, json={"id": 1}
        )
        transport = AsyncHttpxTransport()

        data, response, error = await transport.send(request_spec)
        await transport.aclose()

        assert json.loads(data) == {"id": 1}
        assert response.status_code == 201
        assert error is None

    @pytest.mark.anyio
    async def test_send_error(self, httpx_mock: HTTPXMock, request_spec: RequestSpec):
        httpx_mock.add_exception(httpx.ReadTimeout("slow"))
        transport = AsyncHttpxTransport()

        data, response, error = await transport.send(request_spec)
        await transport.aclose()

        assert data is None
        assert response is None
        assert isinstance(error, httpx.ReadTimeout)
