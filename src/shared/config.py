"""
Client configuration for the authorization code flow.

Values are read once from the environment at startup. Missing client
credentials are a valid state here; the token exchange reports them
before making any network call.
"""

import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_REDIRECT_URI = "http://127.0.0.1:8080/callback"
DEFAULT_TOKEN_ENDPOINT = "http://localhost:4444/oauth2/token"
DEFAULT_ADMIN_URL = "http://localhost:4445"
DEFAULT_PORT = 8080


class ClientConfig(BaseModel):
    """Immutable OAuth client settings shared by every request."""
    client_id: Optional[str] = Field(default=None, description="OAuth client identifier")
    client_secret: Optional[str] = Field(default=None, description="OAuth client secret")
    redirect_uri: str = Field(default=DEFAULT_REDIRECT_URI, description="Registered callback URL")
    token_endpoint: str = Field(default=DEFAULT_TOKEN_ENDPOINT, description="Token endpoint URL")
    admin_url: str = Field(default=DEFAULT_ADMIN_URL, description="Authorization server admin API base URL")
    port: int = Field(default=DEFAULT_PORT, description="Port the application listens on")

    model_config = ConfigDict(frozen=True)


def _getenv(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def load_client_config() -> ClientConfig:
    """
    Build a ClientConfig from environment variables.

    Reads OAUTH_CLIENT_ID, OAUTH_CLIENT_SECRET, OAUTH_REDIRECT_URI,
    OAUTH_TOKEN_ENDPOINT, HYDRA_ADMIN_URL and CLIENT_PORT. Unset or empty
    variables fall back to the defaults (or stay absent for the credentials).
    """
    return ClientConfig(
        client_id=_getenv("OAUTH_CLIENT_ID"),
        client_secret=_getenv("OAUTH_CLIENT_SECRET"),
        redirect_uri=_getenv("OAUTH_REDIRECT_URI") or DEFAULT_REDIRECT_URI,
        token_endpoint=_getenv("OAUTH_TOKEN_ENDPOINT") or DEFAULT_TOKEN_ENDPOINT,
        admin_url=_getenv("HYDRA_ADMIN_URL") or DEFAULT_ADMIN_URL,
        port=int(_getenv("CLIENT_PORT") or DEFAULT_PORT),
    )
