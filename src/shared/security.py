"""
Security utilities for the Hydra reference client.

This module provides confidential client authentication for the token
endpoint and the standard security headers applied to every response.
"""

import base64
from typing import Optional


def is_blank(value: Optional[str]) -> bool:
    """Return True when a value is absent, empty or whitespace only."""
    return value is None or not value.strip()


class ClientCredentials:
    """
    HTTP Basic client authentication (client_secret_basic).

    The client secret is only ever sent in the Authorization header, never
    in the request body.
    """

    @staticmethod
    def basic_authorization(client_id: str, client_secret: str) -> str:
        """
        Build the Authorization header value for a confidential client.

        Args:
            client_id: OAuth client identifier
            client_secret: OAuth client secret

        Returns:
            str: ``"Basic " + base64(client_id + ":" + client_secret)``

        Example:
            ClientCredentials.basic_authorization("app", "s3cret")
            # Returns: "Basic YXBwOnMzY3JldA=="
        """
        credentials = f"{client_id}:{client_secret}".encode("utf-8")
        return "Basic " + base64.b64encode(credentials).decode("ascii")


class SecurityHeaders:
    """
    Security headers for HTTP responses.

    Provides standard security headers to protect against
    common web vulnerabilities.
    """

    @staticmethod
    def get_oauth_security_headers() -> dict:
        """
        Get security headers for OAuth endpoints.

        Returns:
            dict: Dictionary of security headers
        """
        return {
            'X-Content-Type-Options': 'nosniff',
            'X-Frame-Options': 'DENY',
            'X-XSS-Protection': '1; mode=block',
            'Cache-Control': 'no-cache, no-store, must-revalidate',
            'Pragma': 'no-cache',
            'Expires': '0'
        }
