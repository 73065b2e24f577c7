"""
Hydra Reference Client Application

This FastAPI application completes the OAuth2 / OpenID Connect authorization
code flow against an Ory Hydra authorization server and serves the consent
endpoint Hydra redirects users to.

Key Endpoints:
- /callback - redirect-back endpoint, exchanges the code for tokens
- /consent  - consent page (GET) and consent form submission (POST)
- /health   - health check

Configuration is read once at startup from the environment
(see src/shared/config.py).
"""

from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request

from .routes import router as callback_router
from .callback import CallbackHandler
from .token_exchange import TokenExchangeClient
from .views import render
from ..consent.routes import router as consent_router
from ..consent.service import ConsentService
from ..hydra.admin_client import AdminApiError, AdminApiGateway, HydraAdminClient
from ..shared.config import ClientConfig, load_client_config
from ..shared.logging_utils import ComponentType, create_logger
from ..shared.security import SecurityHeaders, is_blank

logger = create_logger(ComponentType.SYSTEM.value)

SERVICE_NAME = "hydra-reference-client"


def create_app(config: Optional[ClientConfig] = None,
               transport: Optional[httpx.AsyncBaseTransport] = None,
               admin_gateway: Optional[AdminApiGateway] = None) -> FastAPI:
    """
    Build the application.

    Args:
        config: Client settings; loaded from the environment when omitted
        transport: Transport for the shared HTTP client (tests pass a MockTransport)
        admin_gateway: Admin API gateway; a HydraAdminClient when omitted

    Returns:
        FastAPI: Configured application
    """
    if config is None:
        config = load_client_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # One pooled client for every request, closed on shutdown
        async with httpx.AsyncClient(transport=transport) as http_client:
            token_exchange = TokenExchangeClient(config, http_client)
            gateway = admin_gateway or HydraAdminClient(http_client, config.admin_url)

            app.state.config = config
            app.state.callback_handler = CallbackHandler(token_exchange)
            app.state.consent_service = ConsentService(gateway)

            logger.log_startup(config.port, {
                "client_id": config.client_id or "(not configured)",
                "client_secret_configured": not is_blank(config.client_secret),
                "redirect_uri": config.redirect_uri,
                "token_endpoint": config.token_endpoint,
                "admin_url": config.admin_url
            })
            yield

    app = FastAPI(
        title="Hydra Reference Client",
        description="OAuth2 / OIDC authorization code client and consent app for Ory Hydra",
        version="1.0.0",
        lifespan=lifespan
    )

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        """Add standard security headers to every response."""
        response = await call_next(request)
        for header_name, header_value in SecurityHeaders.get_oauth_security_headers().items():
            response.headers[header_name] = header_value
        return response

    @app.exception_handler(AdminApiError)
    async def admin_api_error_handler(request: Request, exc: AdminApiError):
        """
        Report a failed admin API call.

        No consent decision is made; the user sees an error page.
        """
        logger.log_error(
            "admin_api_error", str(exc),
            {
                "operation": exc.operation,
                "consent_challenge": exc.consent_challenge,
                "status_code": exc.status_code,
                "path": str(request.url.path)
            }
        )
        return render(request, "callback-error", {
            "error": "admin_api_error",
            "error_description": "The authorization server could not process the consent request"
        }, status_code=502)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "service": SERVICE_NAME}

    app.include_router(callback_router)
    app.include_router(consent_router)

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=load_client_config().port)
