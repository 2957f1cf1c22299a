"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-operator-sessions-0123456789")

from typing import Any, Generator, List

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from stockscan.api.deps import get_sap_client
from stockscan.core.config import Settings, get_settings
from stockscan.core.security import create_access_token
from stockscan.main import app

SAP_BASE_URL = "https://sap.example.com/"

PRODUCT_PAYLOAD = {
    "value": [
        {
            "Product": "P100",
            "BaseUnit": "PC",
            "BaseISOUnit": "PCE",
            "_ProductBasicText": {"ProductLongText": "Widget"},
            "_ProductUnitOfMeasure": [
                {"AlternativeUnit": "PC", "QuantityNumerator": 1, "QuantityDenominator": 1},
                {
                    "AlternativeUnit": "BOX",
                    "AlternativeUnitISOCode": "BX",
                    "QuantityNumerator": 12,
                    "QuantityDenominator": 1,
                },
            ],
        }
    ]
}

STOCK_PAYLOAD = {
    "value": [
        {
            "to_MatlStkInAcctMod": [
                {
                    "StorageLocation": "FG01",
                    "InventoryStockType": "01",
                    "MatlWrhsStkQtyInMatlBaseUnit": 42,
                }
            ]
        }
    ]
}


class FakeSap:
    """Stand-in for the SAP gateway behind an httpx.MockTransport.

    ``product`` and ``stock`` are either an exception to raise or a
    ``(status, body)`` tuple; bytes bodies are sent verbatim, anything else
    as JSON.
    """

    def __init__(self):
        self.product: Any = (200, PRODUCT_PAYLOAD)
        self.stock: Any = (200, STOCK_PAYLOAD)
        self.requests: List[httpx.Request] = []

    @property
    def product_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/Product")]

    @property
    def stock_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/A_MaterialStock")]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.product if request.url.path.endswith("/Product") else self.stock
        if isinstance(reply, Exception):
            raise reply
        status, body = reply
        if isinstance(body, bytes):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def fake_sap() -> FakeSap:
    return FakeSap()


@pytest.fixture
def sap_settings() -> Settings:
    """Settings pointing at the fake SAP gateway."""
    return Settings(
        _env_file=None,
        sap_base_api_url=SAP_BASE_URL,
        sap_basic_auth_user="scanner",
        sap_basic_auth_pass="secret",
    )


@pytest_asyncio.fixture
async def sap_client(fake_sap: FakeSap):
    async with httpx.AsyncClient(transport=fake_sap.transport) as client:
        yield client


@pytest.fixture
def client(sap_settings: Settings, fake_sap: FakeSap) -> Generator[TestClient, None, None]:
    """Create a test client wired to the fake SAP gateway."""

    async def override_sap_client():
        async with httpx.AsyncClient(transport=fake_sap.transport) as sap_client:
            yield sap_client

    app.dependency_overrides[get_settings] = lambda: sap_settings
    app.dependency_overrides[get_sap_client] = override_sap_client
    # Disable rate limiter during tests to avoid flaky failures
    from stockscan.core.rate_limit import limiter
    limiter.enabled = False
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture
def auth_token() -> str:
    """Session token as issued by the identity provider."""
    return create_access_token(
        data={"sub": "auth0|operator-1", "email": "picker@example.com", "name": "Pat Picker"}
    )


@pytest.fixture
def auth_headers(auth_token: str) -> dict:
    return {"Authorization": f"Bearer {auth_token}"}
