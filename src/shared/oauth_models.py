"""
OAuth2 / OIDC Pydantic models for the authorization code client and consent app.

This module defines the value objects exchanged with the authorization server:
the token endpoint response, the admin API consent request and accept payloads,
and the closed set of consent decisions produced by the consent workflow.
All models are request-scoped and immutable once built.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Literal, Union, Dict, Any
from enum import Enum


class GrantType(str, Enum):
    """OAuth2 grant types used by this client."""
    AUTHORIZATION_CODE = "authorization_code"


class TokenResponse(BaseModel):
    """
    Token endpoint response.

    Only ``access_token`` and ``token_type`` are required. Optional fields the
    server leaves out stay ``None`` and unknown fields are ignored.
    """
    access_token: str = Field(..., description="OAuth access token")
    token_type: str = Field(..., description="Token type, usually 'bearer'")
    expires_in: Optional[int] = Field(default=None, description="Token lifetime in seconds")
    refresh_token: Optional[str] = Field(default=None, description="Refresh token")
    id_token: Optional[str] = Field(default=None, description="OpenID Connect ID token")
    scope: Optional[str] = Field(default=None, description="Granted scope")

    @classmethod
    def from_json(cls, body: str) -> "TokenResponse":
        """
        Parse a raw token endpoint body.

        Raises:
            pydantic.ValidationError: if the body is not JSON or misses a required field
        """
        return cls.model_validate_json(body)

    model_config = ConfigDict(extra="ignore", frozen=True)


class CallbackResult(BaseModel):
    """Outcome of processing an authorization code: tokens or an error message."""
    token_response: Optional[TokenResponse] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, token_response: TokenResponse) -> "CallbackResult":
        return cls(token_response=token_response)

    @classmethod
    def failure(cls, error: str) -> "CallbackResult":
        return cls(error=error)

    model_config = ConfigDict(frozen=True)


class ConsentRequest(BaseModel):
    """
    Consent request as returned by the authorization server admin API.

    ``requested_scope`` keeps the server's order so it can be shown to the user
    as-is. The audience list is authoritative and must never be taken from
    user input.
    """
    challenge: Optional[str] = Field(default=None, description="Consent challenge identifier")
    skip: bool = Field(default=False, description="Subject already granted consent")
    subject: Optional[str] = Field(default=None, description="Authenticated subject")
    client: Optional[Dict[str, Any]] = Field(default=None, description="Requesting OAuth client")
    requested_scope: List[str] = Field(default_factory=list, description="Scopes requested by the client")
    requested_access_token_audience: List[str] = Field(
        default_factory=list,
        description="Audiences requested for the access token"
    )

    @field_validator('requested_scope', 'requested_access_token_audience', mode='before')
    @classmethod
    def null_as_empty(cls, v):
        # The admin API sends null instead of [] for some clients
        return [] if v is None else v

    model_config = ConfigDict(extra="ignore", frozen=True)


class ConsentForm(BaseModel):
    """Fields posted by the consent page."""
    consent_challenge: str = Field(..., description="Consent challenge identifier")
    submit: str = Field(default="", description="Raw value of the pressed submit button")
    remember: bool = Field(default=False, description="Remember this decision")
    scopes: List[str] = Field(default_factory=list, description="Scopes the user ticked")

    model_config = ConfigDict(frozen=True)


class AcceptConsentRequest(BaseModel):
    """Payload for accepting a consent request."""
    consent_challenge: str
    remember: bool = False
    grant_access_token_audience: List[str] = Field(default_factory=list)
    scopes: List[str] = Field(default_factory=list)

    def to_admin_payload(self) -> Dict[str, Any]:
        """Render the JSON body expected by the admin accept endpoint."""
        return {
            "grant_scope": list(self.scopes),
            "grant_access_token_audience": list(self.grant_access_token_audience),
            "remember": self.remember,
        }

    model_config = ConfigDict(frozen=True)


class OAuth2RedirectTo(BaseModel):
    """Redirect returned by the admin API after accepting or rejecting a request."""
    redirect_to: str = Field(..., description="Where to send the user agent next")

    model_config = ConfigDict(extra="ignore", frozen=True)


# Consent decisions. ConsentResponse is a closed union: every consumer handles
# all four variants and ends with typing.assert_never.

class DisplayUI(BaseModel):
    """Consent must be asked from the user."""
    kind: Literal["display_ui"] = "display_ui"
    requested_scope: List[str]
    consent_challenge: str

    model_config = ConfigDict(frozen=True)


class Skip(BaseModel):
    """Consent was granted earlier and has been accepted automatically."""
    kind: Literal["skip"] = "skip"
    redirect_to: str

    model_config = ConfigDict(frozen=True)


class Accepted(BaseModel):
    """User granted consent."""
    kind: Literal["accepted"] = "accepted"
    redirect_to: str

    model_config = ConfigDict(frozen=True)


class Rejected(BaseModel):
    """User denied consent."""
    kind: Literal["rejected"] = "rejected"
    redirect_to: str

    model_config = ConfigDict(frozen=True)


ConsentResponse = Union[DisplayUI, Skip, Accepted, Rejected]
