"""Authentication API router for the WHOOP OAuth flow."""

import logging

from fastapi import APIRouter, Depends, Query

from whoop_digest.dependencies import get_token_service, get_whoop_client, to_http_exception
from whoop_digest.schemas.notes import AuthorizationUrlResponse
from whoop_digest.schemas.whoop import UserProfile
from whoop_digest.services.auth_service import WhoopAuthError, WhoopTokenService
from whoop_digest.services.whoop_client import WhoopAPIError, WhoopClient

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/url", response_model=AuthorizationUrlResponse)
async def get_authorization_url(
    tokens: WhoopTokenService = Depends(get_token_service),
) -> AuthorizationUrlResponse:
    """Get the URL that starts the WHOOP authorization flow."""
    url, state = tokens.get_authorization_url()
    return AuthorizationUrlResponse(url=url, state=state)


@router.get("/callback", response_model=UserProfile)
async def oauth_callback(
    code: str = Query(..., description="Authorization code or full callback URL"),
    tokens: WhoopTokenService = Depends(get_token_service),
    client: WhoopClient = Depends(get_whoop_client),
) -> UserProfile:
    """
    Complete authorization by exchanging the code for tokens.

    Returns the member's profile as confirmation that the tokens work.
    """
    try:
        await tokens.exchange_code(code)
        profile = await client.get_user_profile()
    except (WhoopAuthError, WhoopAPIError) as e:
        raise to_http_exception(e)

    logger.info(f"Authorized WHOOP user {profile.user_id}")
    return profile
