"""
Ory Hydra admin API gateway.

Consent requests are fetched, accepted and rejected through the
authorization server's admin interface. Failures are raised as
AdminApiError and are never retried.
"""

from typing import Optional, Protocol

import httpx

from ..shared.oauth_models import AcceptConsentRequest, ConsentRequest, OAuth2RedirectTo
from ..shared.logging_utils import ComponentType, create_logger

logger = create_logger(ComponentType.HYDRA_ADMIN.value)

CONSENT_REQUEST_PATH = "/admin/oauth2/auth/requests/consent"
CONSENT_ACCEPT_PATH = "/admin/oauth2/auth/requests/consent/accept"
CONSENT_REJECT_PATH = "/admin/oauth2/auth/requests/consent/reject"

REJECT_PAYLOAD = {
    "error": "access_denied",
    "error_description": "The resource owner denied the request",
}


class AdminApiError(Exception):
    """An admin API call failed with an error status or could not be sent."""

    def __init__(self, operation: str, consent_challenge: str,
                 message: str, status_code: Optional[int] = None):
        self.operation = operation
        self.consent_challenge = consent_challenge
        self.status_code = status_code
        super().__init__(f"{operation} failed for challenge {consent_challenge}: {message}")


class AdminApiGateway(Protocol):
    """Consent operations of the authorization server admin API."""

    async def get_consent_request(self, consent_challenge: str) -> ConsentRequest:
        ...

    async def accept_consent_request(self, accept_request: AcceptConsentRequest) -> OAuth2RedirectTo:
        ...

    async def reject_consent_request(self, consent_challenge: str) -> OAuth2RedirectTo:
        ...


class HydraAdminClient:
    """
    httpx implementation of AdminApiGateway.

    Shares the application's pooled ``httpx.AsyncClient``.
    """

    def __init__(self, http_client: httpx.AsyncClient, admin_url: str):
        self.http_client = http_client
        self.admin_url = admin_url.rstrip("/")

    async def get_consent_request(self, consent_challenge: str) -> ConsentRequest:
        response = await self._send(
            "get_consent_request", consent_challenge,
            "GET", CONSENT_REQUEST_PATH
        )
        return ConsentRequest.model_validate_json(response.text)

    async def accept_consent_request(self, accept_request: AcceptConsentRequest) -> OAuth2RedirectTo:
        response = await self._send(
            "accept_consent_request", accept_request.consent_challenge,
            "PUT", CONSENT_ACCEPT_PATH,
            json=accept_request.to_admin_payload()
        )
        return OAuth2RedirectTo.model_validate_json(response.text)

    async def reject_consent_request(self, consent_challenge: str) -> OAuth2RedirectTo:
        response = await self._send(
            "reject_consent_request", consent_challenge,
            "PUT", CONSENT_REJECT_PATH,
            json=REJECT_PAYLOAD
        )
        return OAuth2RedirectTo.model_validate_json(response.text)

    async def _send(self, operation: str, consent_challenge: str,
                    method: str, path: str, json: Optional[dict] = None) -> httpx.Response:
        url = f"{self.admin_url}{path}"

        logger.log_oauth_message(
            "CONSENT", "HYDRA-ADMIN",
            f"{method} {path}",
            {"operation": operation, "consent_challenge": consent_challenge}
        )

        try:
            response = await self.http_client.request(
                method, url,
                params={"consent_challenge": consent_challenge},
                json=json
            )
        except httpx.HTTPError as e:
            logger.log_error(
                "admin_api_unreachable", str(e),
                {"operation": operation, "consent_challenge": consent_challenge, "admin_url": self.admin_url}
            )
            raise AdminApiError(operation, consent_challenge, str(e)) from e

        if not response.is_success:
            logger.log_error(
                "admin_api_error",
                f"{operation} returned status {response.status_code}",
                {
                    "operation": operation,
                    "consent_challenge": consent_challenge,
                    "status_code": response.status_code,
                    "body": response.text
                }
            )
            raise AdminApiError(
                operation, consent_challenge,
                f"status {response.status_code}: {response.text}",
                status_code=response.status_code
            )

        return response
