"""
Unit tests for the authorization code token exchange.

Tests credential checks, the form-encoded request sent to the token endpoint,
and how status, transport and parse failures are reported.
"""

import base64
import json
import pytest
from urllib.parse import parse_qs

import httpx

from src.client.token_exchange import (
    CLIENT_ID_NOT_CONFIGURED,
    CLIENT_SECRET_NOT_CONFIGURED,
    TokenExchangeClient,
    TokenExchangeError,
)
from src.shared.config import ClientConfig


@pytest.fixture
def make_client(async_http_client):
    """Build a TokenExchangeClient that talks to a recording endpoint."""
    def _make(config: ClientConfig, endpoint) -> TokenExchangeClient:
        return TokenExchangeClient(config, async_http_client(endpoint.transport))
    return _make


class TestCredentialChecks:
    """Missing credentials short-circuit before any network call."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("client_id", [None, "", "   "])
    async def test_missing_client_id(self, client_config, http_endpoint, make_client, client_id):
        endpoint = http_endpoint(body='{"access_token":"abc","token_type":"bearer"}')
        config = client_config.model_copy(update={"client_id": client_id})

        result = await make_client(config, endpoint).process_callback("code-123", "state", "openid")

        assert result.token_response is None
        assert result.error == CLIENT_ID_NOT_CONFIGURED
        assert "client-id" in result.error
        assert len(endpoint.calls) == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("client_secret", [None, "", "\t"])
    async def test_missing_client_secret(self, client_config, http_endpoint, make_client, client_secret):
        endpoint = http_endpoint(body='{"access_token":"abc","token_type":"bearer"}')
        config = client_config.model_copy(update={"client_secret": client_secret})

        result = await make_client(config, endpoint).process_callback("code-123", None, None)

        assert result.token_response is None
        assert result.error == CLIENT_SECRET_NOT_CONFIGURED
        assert "client-secret" in result.error
        assert len(endpoint.calls) == 0

    @pytest.mark.asyncio
    async def test_client_id_checked_before_secret(self, http_endpoint, make_client):
        endpoint = http_endpoint()
        config = ClientConfig()

        result = await make_client(config, endpoint).process_callback("code-123")

        assert result.error == CLIENT_ID_NOT_CONFIGURED
        assert len(endpoint.calls) == 0


class TestTokenRequest:
    """The request sent to the token endpoint."""

    @pytest.mark.asyncio
    async def test_request_shape(self, client_config, http_endpoint, make_client):
        endpoint = http_endpoint(body='{"access_token":"abc","token_type":"bearer"}')

        await make_client(client_config, endpoint).process_callback("code-123", "s", "openid")

        assert len(endpoint.calls) == 1
        request = endpoint.calls[0]
        assert request.method == "POST"
        assert str(request.url) == "http://hydra.test/oauth2/token"
        assert request.headers["content-type"] == "application/x-www-form-urlencoded"

        form = parse_qs(request.content.decode("ascii"), strict_parsing=True)
        assert form == {
            "grant_type": ["authorization_code"],
            "code": ["code-123"],
            "redirect_uri": ["http://127.0.0.1:8080/callback"],
            "client_id": ["reference-app"],
        }

    @pytest.mark.asyncio
    async def test_basic_authorization_header(self, client_config, http_endpoint, make_client):
        endpoint = http_endpoint(body='{"access_token":"abc","token_type":"bearer"}')

        await make_client(client_config, endpoint).process_callback("code-123")

        authorization = endpoint.calls[0].headers["authorization"]
        scheme, encoded = authorization.split(" ", 1)
        assert scheme == "Basic"
        assert base64.b64decode(encoded).decode("utf-8") == "reference-app:reference-secret"

    @pytest.mark.asyncio
    async def test_client_secret_never_in_body(self, client_config, http_endpoint, make_client):
        endpoint = http_endpoint(body='{"access_token":"abc","token_type":"bearer"}')

        await make_client(client_config, endpoint).process_callback("code-123")

        body = endpoint.calls[0].content.decode("ascii")
        assert "reference-secret" not in body
        assert "client_secret" not in body

    @pytest.mark.asyncio
    async def test_code_with_reserved_characters_round_trips(self, client_config, http_endpoint, make_client):
        code = "a&b=c d+e%f/?#"
        client = make_client(client_config, http_endpoint())

        body = client.build_token_request_body(code)

        assert "&b=" not in body
        assert parse_qs(body)["code"] == [code]

    @pytest.mark.asyncio
    async def test_redirect_uri_encoded_independently(self, client_config, http_endpoint, make_client):
        config = client_config.model_copy(update={"redirect_uri": "http://127.0.0.1:8080/callback?x=1&y=2"})
        client = make_client(config, http_endpoint())

        form = parse_qs(client.build_token_request_body("code"))

        assert form["redirect_uri"] == ["http://127.0.0.1:8080/callback?x=1&y=2"]
        assert form["grant_type"] == ["authorization_code"]

    @pytest.mark.asyncio
    async def test_single_attempt_on_failure(self, client_config, http_endpoint, make_client):
        endpoint = http_endpoint(status_code=503, body="unavailable", headers={"content-type": "text/plain"})

        await make_client(client_config, endpoint).process_callback("code-123")

        assert len(endpoint.calls) == 1


class TestTokenResponseHandling:
    """Parsing of successful responses and reporting of failures."""

    @pytest.mark.asyncio
    async def test_minimal_success(self, client_config, http_endpoint, make_client):
        endpoint = http_endpoint(body='{"access_token":"abc","token_type":"bearer"}')

        result = await make_client(client_config, endpoint).process_callback("code-123")

        assert result.error is None
        token = result.token_response
        assert token.access_token == "abc"
        assert token.token_type == "bearer"
        assert token.expires_in is None
        assert token.refresh_token is None
        assert token.id_token is None
        assert token.scope is None

    @pytest.mark.asyncio
    async def test_full_success_ignores_unknown_fields(self, client_config, http_endpoint, make_client):
        endpoint = http_endpoint(body=json.dumps({
            "access_token": "ory_at_abc",
            "token_type": "bearer",
            "expires_in": 3599,
            "refresh_token": "ory_rt_def",
            "id_token": "eyJhbGciOi.payload.sig",
            "scope": "openid offline",
            "not_a_field": {"nested": True}
        }))

        result = await make_client(client_config, endpoint).process_callback("code-123")

        assert result.error is None
        assert result.token_response.expires_in == 3599
        assert result.token_response.refresh_token == "ory_rt_def"
        assert result.token_response.id_token == "eyJhbGciOi.payload.sig"
        assert result.token_response.scope == "openid offline"

    @pytest.mark.asyncio
    async def test_error_status_reports_status_and_body(self, client_config, http_endpoint, make_client):
        endpoint = http_endpoint(status_code=400, body="invalid_grant", headers={"content-type": "text/plain"})

        result = await make_client(client_config, endpoint).process_callback("code-123")

        assert result.token_response is None
        assert result.error.startswith("Token exchange failed: ")
        assert "400" in result.error
        assert "invalid_grant" in result.error

    @pytest.mark.asyncio
    async def test_non_200_success_status_is_failure(self, client_config, http_endpoint, make_client):
        endpoint = http_endpoint(status_code=201, body='{"access_token":"abc","token_type":"bearer"}')

        result = await make_client(client_config, endpoint).process_callback("code-123")

        assert result.token_response is None
        assert "201" in result.error

    @pytest.mark.asyncio
    async def test_malformed_json_is_failure(self, client_config, http_endpoint, make_client):
        endpoint = http_endpoint(body="{not json")

        result = await make_client(client_config, endpoint).process_callback("code-123")

        assert result.token_response is None
        assert result.error.startswith("Token exchange failed: ")

    @pytest.mark.asyncio
    async def test_missing_access_token_is_failure(self, client_config, http_endpoint, make_client):
        endpoint = http_endpoint(body='{"token_type":"bearer"}')

        result = await make_client(client_config, endpoint).process_callback("code-123")

        assert result.token_response is None
        assert "access_token" in result.error

    @pytest.mark.asyncio
    async def test_network_failure_is_reported(self, client_config, http_endpoint, make_client):
        endpoint = http_endpoint(raise_error=httpx.ConnectError("connection refused"))

        result = await make_client(client_config, endpoint).process_callback("code-123")

        assert result.token_response is None
        assert result.error == "Token exchange failed: connection refused"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token_endpoint", ["http://[::1/oauth2/token", "http://hydra.test:port/oauth2/token"])
    async def test_malformed_token_endpoint_is_reported(self, client_config, http_endpoint, make_client,
                                                        token_endpoint):
        endpoint = http_endpoint(body='{"access_token":"abc","token_type":"bearer"}')
        config = client_config.model_copy(update={"token_endpoint": token_endpoint})

        result = await make_client(config, endpoint).process_callback("code-123")

        assert result.token_response is None
        assert result.error.startswith("Token exchange failed: ")
        assert len(endpoint.calls) == 0

    @pytest.mark.asyncio
    async def test_exchange_raises_for_error_status(self, client_config, http_endpoint, make_client):
        endpoint = http_endpoint(status_code=401, body='{"error":"invalid_client"}')
        client = make_client(client_config, endpoint)

        with pytest.raises(TokenExchangeError) as exc_info:
            await client.exchange_code_for_tokens("code-123")

        assert exc_info.value.status_code == 401
        assert exc_info.value.body == '{"error":"invalid_client"}'
