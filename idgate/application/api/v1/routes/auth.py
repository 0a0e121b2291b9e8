"""Authentication routes for the OAuth login and linking flow."""

import logging
from typing import Annotated, Any
from urllib.parse import quote

from dishka import FromDishka
from dishka.integrations.fastapi import DishkaRoute
from fastapi import APIRouter, Query, Response
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from idgate.config import Config
from idgate.domain.auth.command.login import (
    CompleteOAuth,
    CompleteOAuthHandler,
    GetAuthorizationUrl,
    GetAuthorizationUrlHandler,
)
from idgate.domain.auth.query.current_user import GetCurrentUser, GetCurrentUserHandler
from idgate.domain.auth.query.validate_token import (
    ValidateProviderToken,
    ValidateProviderTokenHandler,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"], route_class=DishkaRoute)


class AuthUrlResponse(BaseModel):
    """Response carrying the provider consent URL."""

    authUrl: str


class ValidateTokenResponse(BaseModel):
    """Result of checking a provider access token."""

    valid: bool
    user: dict[str, Any] | None = None
    error: str | None = None


@router.get("/validate", response_model=ValidateTokenResponse, response_model_exclude_none=True)
async def validate_token(
    handler: FromDishka[ValidateProviderTokenHandler],
    token: Annotated[str, Query()],
    provider: Annotated[str, Query()] = "github",
) -> ValidateTokenResponse:
    """Check a provider access token against the provider's profile endpoint."""
    result = await handler.run(ValidateProviderToken(token=token, provider=provider))
    return ValidateTokenResponse(valid=result.valid, user=result.user, error=result.error)


@router.get("/me")
async def get_me(handler: FromDishka[GetCurrentUserHandler]) -> dict[str, Any]:
    """Get the signed-in user's profile."""
    result = await handler.run(GetCurrentUser())
    return {**result.user, "displayName": result.display_name}


@router.get("/{provider}/url", response_model=AuthUrlResponse)
async def get_authorization_url(
    provider: str,
    handler: FromDishka[GetAuthorizationUrlHandler],
    from_path: Annotated[str, Query(alias="from")] = "/",
    mode: Annotated[str, Query()] = "auth",
    report_id: Annotated[str, Query(alias="reportId")] = "",
    origin: Annotated[str | None, Query()] = None,
    user_id: Annotated[str | None, Query(alias="userId")] = None,
) -> AuthUrlResponse:
    """Build the provider consent URL.

    Passing ``userId`` starts a link of this provider to an existing user and
    requires a bearer token for that same user.
    """
    result = await handler.run(
        GetAuthorizationUrl(
            provider=provider,
            path=from_path,
            mode=mode,
            report_id=report_id,
            origin=origin,
            user_id=user_id,
        )
    )
    return AuthUrlResponse(authUrl=result.auth_url)


@router.get("/{provider}/callback")
async def handle_oauth_callback(
    provider: str,
    config: FromDishka[Config],
    handler: FromDishka[CompleteOAuthHandler],
    code: Annotated[str | None, Query()] = None,
    state: Annotated[str | None, Query()] = None,
) -> Response:
    """Handle the provider's redirect and send the browser on to the frontend."""
    try:
        result = await handler.run(CompleteOAuth(provider=provider, code=code, state=state))
    except Exception as e:
        # Failures the orchestrator could not turn into a redirect still end on the error page
        logger.exception("OAuth callback failed: provider=%s, error=%s", provider, e)
        message = quote("Authentication failed. Please try again.")
        return RedirectResponse(
            url=f"{config.frontend.url.rstrip('/')}/auth/error?message={message}",
            status_code=302,
        )

    return RedirectResponse(url=result.redirect_url, status_code=302)
