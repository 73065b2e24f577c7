"""
Consent decision workflow.

Decides whether a consent request is accepted automatically, shown to the
user, accepted or rejected. Admin API failures are not caught here: there is
no safe partial-consent state to fall back to.
"""

from ..hydra.admin_client import AdminApiGateway
from ..shared.oauth_models import (
    AcceptConsentRequest,
    Accepted,
    ConsentForm,
    ConsentResponse,
    DisplayUI,
    Rejected,
    Skip,
)
from ..shared.logging_utils import ComponentType, create_logger
from ..shared.security import is_blank

logger = create_logger(ComponentType.CONSENT.value)

# Value of the deny button on the consent page. Any other submit value
# counts as acceptance.
DENY_ACCESS_SUBMIT_VALUE = "Deny access"


def _require_challenge(consent_challenge: str) -> None:
    if is_blank(consent_challenge):
        raise ValueError("consent_challenge is required")


class ConsentService:
    """Stateless consent workflow over an admin API gateway."""

    def __init__(self, admin_gateway: AdminApiGateway):
        self.admin_gateway = admin_gateway

    async def process_initial_consent_request(self, consent_challenge: str) -> ConsentResponse:
        """
        Handle the first visit to the consent endpoint.

        If the subject already granted consent (``skip``), accept again with the
        requested scopes and audience and return ``Skip``. Otherwise return
        ``DisplayUI`` so the user can decide.
        """
        _require_challenge(consent_challenge)
        consent_request = await self.admin_gateway.get_consent_request(consent_challenge)

        if consent_request.skip:
            accept_request = AcceptConsentRequest(
                consent_challenge=consent_challenge,
                remember=True,
                grant_access_token_audience=consent_request.requested_access_token_audience,
                scopes=consent_request.requested_scope
            )
            redirect = await self.admin_gateway.accept_consent_request(accept_request)

            logger.log_consent_decision(
                consent_challenge, "skip",
                {
                    "subject": consent_request.subject,
                    "grant_scope": accept_request.scopes,
                    "grant_access_token_audience": accept_request.grant_access_token_audience
                }
            )
            return Skip(redirect_to=redirect.redirect_to)

        logger.log_consent_decision(
            consent_challenge, "display_ui",
            {"requested_scope": consent_request.requested_scope}
        )
        return DisplayUI(
            requested_scope=consent_request.requested_scope,
            consent_challenge=consent_challenge
        )

    async def process_consent_form(self, consent_form: ConsentForm) -> ConsentResponse:
        """
        Handle the consent page submission.

        The audience granted always comes from a fresh admin API fetch, never
        from the form.
        """
        consent_challenge = consent_form.consent_challenge
        _require_challenge(consent_challenge)

        if consent_form.submit == DENY_ACCESS_SUBMIT_VALUE:
            redirect = await self.admin_gateway.reject_consent_request(consent_challenge)
            logger.log_consent_decision(consent_challenge, "rejected")
            return Rejected(redirect_to=redirect.redirect_to)

        consent_request = await self.admin_gateway.get_consent_request(consent_challenge)

        accept_request = AcceptConsentRequest(
            consent_challenge=consent_challenge,
            remember=consent_form.remember,
            grant_access_token_audience=consent_request.requested_access_token_audience,
            scopes=consent_form.scopes
        )
        redirect = await self.admin_gateway.accept_consent_request(accept_request)

        logger.log_consent_decision(
            consent_challenge, "accepted",
            {
                "remember": consent_form.remember,
                "grant_scope": accept_request.scopes,
                "grant_access_token_audience": accept_request.grant_access_token_audience
            }
        )
        return Accepted(redirect_to=redirect.redirect_to)
