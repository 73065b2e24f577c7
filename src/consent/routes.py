"""
Consent Routes

The authorization server redirects the user agent here with a
``consent_challenge`` whenever a client asks for scopes. The page either
auto-accepts a remembered grant or asks the user.
"""

from typing import List, Optional, assert_never

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import RedirectResponse

from .service import ConsentService, DENY_ACCESS_SUBMIT_VALUE
from ..client.views import render
from ..shared.oauth_models import (
    Accepted,
    ConsentForm,
    ConsentResponse,
    DisplayUI,
    Rejected,
    Skip,
)
from ..shared.security import is_blank

router = APIRouter()

TRUTHY_FORM_VALUES = ("true", "on", "1", "yes")


def get_consent_service(request: Request) -> ConsentService:
    return request.app.state.consent_service


def _missing_challenge() -> HTTPException:
    return HTTPException(
        status_code=400,
        detail={
            "error": "invalid_request",
            "error_description": "Missing consent_challenge parameter"
        }
    )


def _to_http_response(request: Request, outcome: ConsentResponse):
    if isinstance(outcome, DisplayUI):
        return render(request, "consent", {
            "consent_challenge": outcome.consent_challenge,
            "requested_scope": outcome.requested_scope,
            "deny_value": DENY_ACCESS_SUBMIT_VALUE
        })
    elif isinstance(outcome, Skip):
        return RedirectResponse(outcome.redirect_to, status_code=302)
    elif isinstance(outcome, Accepted):
        return RedirectResponse(outcome.redirect_to, status_code=302)
    elif isinstance(outcome, Rejected):
        return RedirectResponse(outcome.redirect_to, status_code=302)
    else:
        assert_never(outcome)


@router.get("/consent")
async def consent_page(request: Request,
                       consent_challenge: Optional[str] = None,
                       service: ConsentService = Depends(get_consent_service)):
    """Start the consent workflow for a challenge."""
    if is_blank(consent_challenge):
        raise _missing_challenge()

    outcome = await service.process_initial_consent_request(consent_challenge)
    return _to_http_response(request, outcome)


@router.post("/consent")
async def consent_submit(request: Request,
                         consent_challenge: Optional[str] = Form(None),
                         submit: str = Form(""),
                         remember: Optional[str] = Form(None),
                         grant_scope: List[str] = Form(default=[]),
                         service: ConsentService = Depends(get_consent_service)):
    """
    Process the consent page form.

    The granted audience is not read from the form; it is looked up again
    from the authorization server.
    """
    if is_blank(consent_challenge):
        raise _missing_challenge()

    consent_form = ConsentForm(
        consent_challenge=consent_challenge,
        submit=submit,
        remember=(remember or "").lower() in TRUTHY_FORM_VALUES,
        scopes=grant_scope
    )

    outcome = await service.process_consent_form(consent_form)
    return _to_http_response(request, outcome)
