"""
Pytest configuration and shared fixtures for the Hydra reference client tests.

This module provides client configurations, a recording HTTP endpoint built
on httpx.MockTransport, and an in-memory admin API gateway used across the
test modules.
"""

import pytest
import pytest_asyncio
import secrets
from typing import AsyncIterator, Callable, Dict, List, Optional
from unittest.mock import patch

import httpx

from src.shared.config import ClientConfig
from src.shared.oauth_models import AcceptConsentRequest, ConsentRequest, OAuth2RedirectTo


@pytest.fixture
def client_config() -> ClientConfig:
    """Fully configured confidential client."""
    return ClientConfig(
        client_id="reference-app",
        client_secret="reference-secret",
        redirect_uri="http://127.0.0.1:8080/callback",
        token_endpoint="http://hydra.test/oauth2/token",
        admin_url="http://hydra-admin.test"
    )


@pytest.fixture
def mock_authorization_code() -> str:
    """Generate a mock authorization code for testing."""
    return secrets.token_urlsafe(32)


class RecordingEndpoint:
    """
    httpx transport handler that records requests and answers with a fixed response.

    ``calls`` holds every request seen, so tests can assert on call counts
    and on the exact bytes that went over the wire.
    """

    def __init__(self, status_code: int = 200, body: str = "",
                 headers: Optional[Dict[str, str]] = None,
                 raise_error: Optional[Exception] = None):
        self.status_code = status_code
        self.body = body
        self.headers = headers or {"content-type": "application/json"}
        self.raise_error = raise_error
        self.calls: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if self.raise_error is not None:
            raise self.raise_error
        return httpx.Response(self.status_code, text=self.body, headers=self.headers)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def http_endpoint() -> Callable[..., RecordingEndpoint]:
    """Factory for recording HTTP endpoints."""
    return RecordingEndpoint


@pytest_asyncio.fixture
async def async_http_client() -> AsyncIterator[Callable[..., httpx.AsyncClient]]:
    """Factory for httpx clients, closed when the test finishes."""
    clients: List[httpx.AsyncClient] = []

    def _make(transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
        client = httpx.AsyncClient(transport=transport)
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()


class FakeAdminGateway:
    """
    In-memory admin API gateway.

    Returns the configured consent request and records every call made.
    """

    def __init__(self, consent_request: Optional[ConsentRequest] = None,
                 accept_redirect: str = "http://hydra.test/oauth2/auth?consent_verifier=accepted",
                 reject_redirect: str = "http://hydra.test/oauth2/auth?consent_verifier=rejected",
                 error: Optional[Exception] = None):
        self.consent_request = consent_request or ConsentRequest()
        self.accept_redirect = accept_redirect
        self.reject_redirect = reject_redirect
        self.error = error
        self.get_calls: List[str] = []
        self.accept_calls: List[AcceptConsentRequest] = []
        self.reject_calls: List[str] = []

    async def get_consent_request(self, consent_challenge: str) -> ConsentRequest:
        self.get_calls.append(consent_challenge)
        if self.error is not None:
            raise self.error
        return self.consent_request

    async def accept_consent_request(self, accept_request: AcceptConsentRequest) -> OAuth2RedirectTo:
        self.accept_calls.append(accept_request)
        if self.error is not None:
            raise self.error
        return OAuth2RedirectTo(redirect_to=self.accept_redirect)

    async def reject_consent_request(self, consent_challenge: str) -> OAuth2RedirectTo:
        self.reject_calls.append(consent_challenge)
        if self.error is not None:
            raise self.error
        return OAuth2RedirectTo(redirect_to=self.reject_redirect)


@pytest.fixture
def fake_admin_gateway() -> Callable[..., FakeAdminGateway]:
    """Factory for in-memory admin gateways."""
    return FakeAdminGateway


@pytest.fixture(autouse=True)
def silence_console_output():
    """Keep colored console output out of the test report."""
    with patch('builtins.print'):
        yield


@pytest.fixture(autouse=True)
def disable_logging():
    """Disable logging during tests to reduce noise."""
    import logging
    logging.disable(logging.CRITICAL)
    yield
    logging.disable(logging.NOTSET)


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers automatically."""
    for item in items:
        if "application" in item.nodeid:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
