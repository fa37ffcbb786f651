"""Authentication endpoints: login, logout and access token refresh.

Login returns an access token in the body and sets the refresh token as an
HTTP-only, secure cookie. Refresh reads only that cookie and returns a new
access token. Logout clears the cookie.

Example Usage:
    Login:
        POST /auth
        {"username": "alice", "password": "secret"}

    Refresh:
        POST /auth/refresh        (cookie: jwt=<refresh token>)

    Logout:
        POST /auth/logout
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status

from ..core.dependencies import get_auth_service, refresh_identity
from ..core.logging import ContextLogger
from ..core.security import TokenClaim
from ..core.settings import settings
from ..schemas.auth import LoginRequest, TokenResponse
from ..schemas.common import MessageResponse
from ..services.auth import AuthService

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
    responses={
        400: {"description": "Missing credentials"},
        401: {"description": "Unknown user, wrong password or missing cookie"},
        403: {"description": "Refresh token invalid or expired"},
    },
)

logger = ContextLogger(__name__)


def _cookie_options() -> dict:
    security = settings.security
    return {
        "httponly": True,
        "secure": security.cookie_secure,
        "samesite": security.cookie_samesite,
    }


@router.post(
    "",
    response_model=TokenResponse,
    summary="Log in",
    description="Checks credentials, returns an access token and sets the refresh cookie",
)
async def login(
    body: LoginRequest,
    response: Response,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> TokenResponse:
    """Log a user in.

    Returns:
        TokenResponse: The access token. The refresh token travels in the
        ``Set-Cookie`` header with a max-age equal to its lifetime.
    """
    async with logger.track_time("login"):
        pair = await service.login(body.username, body.password)

    response.set_cookie(
        settings.security.cookie_name,
        pair.refresh_token,
        max_age=int(service.tokens.refresh_lifetime.total_seconds()),
        **_cookie_options(),
    )
    return TokenResponse(access_token=pair.access_token)


@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Refresh the access token",
    description="Issues a new access token from the refresh cookie",
)
async def refresh(
    claim: Annotated[TokenClaim, Depends(refresh_identity)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> TokenResponse:
    access_token = await service.refresh(claim)
    return TokenResponse(access_token=access_token)


@router.post(
    "/logout",
    response_model=MessageResponse,
    responses={204: {"description": "No refresh cookie was present"}},
    summary="Log out",
    description="Clears the refresh cookie",
)
async def logout(request: Request) -> Response:
    """Clear the refresh cookie. Calling it without a cookie is a no-op."""
    if not request.cookies.get(settings.security.cookie_name):
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    response = Response(
        content=MessageResponse(message="Cookie cleared!").model_dump_json(),
        media_type="application/json",
    )
    response.delete_cookie(settings.security.cookie_name, **_cookie_options())
    return response
