"""
Authorization code token exchange.

Redeems a one-time authorization code at the authorization server's token
endpoint over the back channel, authenticating as a confidential client with
HTTP Basic credentials.
"""

from typing import Optional
from urllib.parse import urlencode

import httpx

from ..shared.config import ClientConfig
from ..shared.oauth_models import CallbackResult, GrantType, TokenResponse
from ..shared.logging_utils import ComponentType, create_logger
from ..shared.security import ClientCredentials, is_blank

logger = create_logger(ComponentType.CLIENT.value)

CLIENT_ID_NOT_CONFIGURED = (
    "Client ID not configured. Set client-id via the OAUTH_CLIENT_ID environment variable"
)
CLIENT_SECRET_NOT_CONFIGURED = (
    "Client secret not configured. Set client-secret via the OAUTH_CLIENT_SECRET environment variable"
)


class TokenExchangeError(Exception):
    """The token endpoint answered with a non-200 status."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"token endpoint returned status {status_code}: {body}")


class TokenExchangeClient:
    """
    Back-channel client for the token endpoint.

    Holds no per-call state; one instance and its pooled ``httpx.AsyncClient``
    serve every concurrent callback.
    """

    def __init__(self, config: ClientConfig, http_client: httpx.AsyncClient):
        self.config = config
        self.http_client = http_client

    async def process_callback(self, code: str, state: Optional[str] = None,
                               scope: Optional[str] = None) -> CallbackResult:
        """
        Exchange an authorization code and report the outcome.

        Missing credentials short-circuit before any network call. Transport,
        status and parse failures are folded into ``CallbackResult.error``.
        """
        if is_blank(self.config.client_id):
            logger.log_error(
                "configuration_error",
                "Client ID not configured - returning code without token exchange",
                {"state": state}
            )
            return CallbackResult.failure(CLIENT_ID_NOT_CONFIGURED)

        if is_blank(self.config.client_secret):
            logger.log_error(
                "configuration_error",
                "Client secret not configured - returning code without token exchange",
                {"state": state}
            )
            return CallbackResult.failure(CLIENT_SECRET_NOT_CONFIGURED)

        try:
            token_response = await self.exchange_code_for_tokens(code)
        except (httpx.HTTPError, httpx.InvalidURL, TokenExchangeError, ValueError) as e:
            logger.log_error(
                "token_exchange_failed",
                str(e),
                {
                    "token_endpoint": self.config.token_endpoint,
                    "state": state,
                    "scope": scope
                }
            )
            return CallbackResult.failure(f"Token exchange failed: {e}")

        return CallbackResult.success(token_response)

    def build_token_request_body(self, code: str) -> str:
        """Form-encode the token request; each key and value is encoded on its own."""
        return urlencode({
            "grant_type": GrantType.AUTHORIZATION_CODE.value,
            "code": code,
            "redirect_uri": self.config.redirect_uri,
            "client_id": self.config.client_id,
        })

    async def exchange_code_for_tokens(self, code: str) -> TokenResponse:
        """
        POST the code to the token endpoint and parse the JSON response.

        Raises:
            TokenExchangeError: the endpoint answered with a status other than 200
            httpx.HTTPError: the request could not be sent
            httpx.InvalidURL: the token endpoint is not a valid URL
            pydantic.ValidationError: the 200 body is not a valid token response
        """
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Authorization": ClientCredentials.basic_authorization(
                self.config.client_id, self.config.client_secret
            ),
        }

        logger.log_http_request(
            "POST", self.config.token_endpoint,
            params={
                "grant_type": GrantType.AUTHORIZATION_CODE.value,
                "code": code,
                "redirect_uri": self.config.redirect_uri,
                "client_id": self.config.client_id
            },
            headers=headers
        )

        response = await self.http_client.post(
            self.config.token_endpoint,
            content=self.build_token_request_body(code),
            headers=headers
        )

        if response.status_code != 200:
            raise TokenExchangeError(response.status_code, response.text)

        token_response = TokenResponse.from_json(response.text)

        logger.log_token_exchange(
            {
                "status_code": response.status_code,
                "access_token": token_response.access_token,
                "token_type": token_response.token_type,
                "expires_in": token_response.expires_in,
                "scope": token_response.scope,
                "id_token_present": token_response.id_token is not None,
                "refresh_token_present": token_response.refresh_token is not None
            }
        )

        return token_response
