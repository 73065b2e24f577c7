"""
OAuth Client Routes

Redirect-back endpoint of the authorization code flow. The authorization
server sends the user agent here with either a code or an error.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from .callback import CallbackHandler
from .views import render

router = APIRouter()


def get_callback_handler(request: Request) -> CallbackHandler:
    return request.app.state.callback_handler


@router.get("/callback", response_class=HTMLResponse)
async def oauth_callback(request: Request,
                         code: Optional[str] = None,
                         state: Optional[str] = None,
                         scope: Optional[str] = None,
                         error: Optional[str] = None,
                         error_description: Optional[str] = None,
                         handler: CallbackHandler = Depends(get_callback_handler)):
    """
    Handle the authorization server redirect.

    Renders ``callback`` with the token exchange outcome, or
    ``callback-error`` for upstream errors and a missing code.
    """
    result = await handler.handle_callback(code, state, scope, error, error_description)
    return render(request, result.view, result.context)
