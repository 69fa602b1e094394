from typing import Generator

import pytest

from restcall import NetworkManager
from tests.utils.transports import FakeAsyncTransport, FakeTransport

BASE_URL = "http://localhost:3000"


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clean environment variables before each test."""
    monkeypatch.delenv("RESTCALL_BASE_URL", raising=False)


@pytest.fixture
def base_url() -> str:
    return BASE_URL


@pytest.fixture
def manager(base_url: str) -> Generator[NetworkManager, None, None]:
    """NetworkManager on the real httpx transports, mocked by pytest-httpx."""
    manager = NetworkManager(base_url)
    yield manager
    manager.close()


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def fake_async_transport() -> FakeAsyncTransport:
    return FakeAsyncTransport()
