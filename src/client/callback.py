"""
Redirect-back handling for the authorization code flow.

Decides, per callback, whether to surface an upstream error, report a
missing code, or run the token exchange, and returns what to render.
"""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

from .token_exchange import TokenExchangeClient
from ..shared.logging_utils import ComponentType, create_logger

logger = create_logger(ComponentType.CLIENT.value)

CALLBACK_VIEW = "callback"
CALLBACK_ERROR_VIEW = "callback-error"

MISSING_CODE_ERROR = "missing_code"
MISSING_CODE_DESCRIPTION = "No authorization code was received"


class PresentationResult(BaseModel):
    """Named view plus the values it displays."""
    view: Literal["callback", "callback-error"]
    context: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def error(cls, error: Optional[str], error_description: Optional[str]) -> "PresentationResult":
        return cls(
            view=CALLBACK_ERROR_VIEW,
            context={"error": error, "error_description": error_description}
        )


class CallbackHandler:
    """Coordinates one redirect-back event. No retries at this layer."""

    def __init__(self, token_exchange: TokenExchangeClient):
        self.token_exchange = token_exchange

    async def handle_callback(self,
                              code: Optional[str],
                              state: Optional[str],
                              scope: Optional[str],
                              error: Optional[str],
                              error_description: Optional[str]) -> PresentationResult:
        """
        Handle the authorization server redirect.

        First match wins:
        1. ``error`` present: show it verbatim.
        2. ``code`` absent: show the ``missing_code`` error.
        3. Otherwise exchange the code and show the outcome.
        """
        logger.log_oauth_message(
            "HYDRA-PUBLIC", "CLIENT",
            "Authorization Callback Received",
            {
                "code": "present" if code is not None else "absent",
                "state": state,
                "scope": scope
            }
        )

        if error is not None:
            logger.log_oauth_message(
                "HYDRA-PUBLIC", "CLIENT",
                "OAuth Error Received",
                {
                    "error": error,
                    "error_description": error_description,
                    "state": state
                },
                success=False
            )
            return PresentationResult.error(error, error_description)

        if code is None:
            logger.log_oauth_message(
                "CLIENT", "CLIENT",
                "No Authorization Code Received",
                {"state": state},
                success=False
            )
            return PresentationResult.error(MISSING_CODE_ERROR, MISSING_CODE_DESCRIPTION)

        callback_result = await self.token_exchange.process_callback(code, state, scope)

        return PresentationResult(
            view=CALLBACK_VIEW,
            context={
                "code": code,
                "state": state,
                "scope": scope,
                "token_response": callback_result.token_response,
                "error": callback_result.error
            }
        )
