"""OAuth endpoints for linking the host Spotify account.

Only mounted when SPOTIFY_OAUTH_ENABLED=true. The host opens /oauth/login once,
approves on Spotify, lands on /oauth/callback and copies the refresh token from
the logs into SPOTIFY_REFRESH_TOKEN. After that OAuth can be switched off again.
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse, RedirectResponse

from muzikant.api.dependencies import get_auth_service
from muzikant.application.services.spotify_auth_service import SpotifyAuthService
from muzikant.domain.exceptions import ValidationException

logger = logging.getLogger(__name__)

router = APIRouter()

INVALID_STATE_MESSAGE = "Invalid state parameter."
MISSING_CODE_MESSAGE = "Missing authorization code."
LINKED_MESSAGE = "Spotify account linked successfully. You may close this window."


@router.get("/login", status_code=status.HTTP_302_FOUND)
async def login(
    auth_service: SpotifyAuthService = Depends(get_auth_service),
) -> RedirectResponse:
    """Redirect to Spotify's consent page."""
    url = await auth_service.build_login_url()
    return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)


# Hey future me, both 400s are raised as ValidationException so the plain-text body
# comes from exception_handlers.py like every other domain error.
@router.get("/callback", response_class=PlainTextResponse)
async def callback(
    code: str | None = None,
    state: str | None = None,
    auth_service: SpotifyAuthService = Depends(get_auth_service),
) -> PlainTextResponse:
    """Validate state, exchange the code and store the tokens."""
    if not await auth_service.is_state_valid(state):
        raise ValidationException(INVALID_STATE_MESSAGE)
    if code is None or not code.strip():
        raise ValidationException(MISSING_CODE_MESSAGE)

    token = await auth_service.exchange_code_for_token(code)
    if token.refresh_token and token.refresh_token.strip():
        # Printing the secret is the point here: it is how the host learns it.
        logger.info(
            "Spotify refresh token obtained. Save this value to SPOTIFY_REFRESH_TOKEN: %s",
            token.refresh_token,
        )
    return PlainTextResponse(LINKED_MESSAGE)
