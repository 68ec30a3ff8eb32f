"""
WHOOP OAuth token service.

Handles the authorization URL, code exchange, and keeping the access token
fresh for API requests.
"""

import asyncio
import logging
import secrets
import time
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlparse

import httpx

from whoop_digest.config import settings
from whoop_digest.schemas.notes import TokenResponse

logger = logging.getLogger(__name__)


class WhoopAuthError(Exception):
    """Exception raised when no usable WHOOP token can be obtained."""

    def __init__(self, message: str, status_code: int = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


def _now_ms() -> int:
    return int(time.time() * 1000)


def extract_code(value: str) -> str:
    """
    Accept either a bare authorization code or the full callback URL.

    Example:
        >>> extract_code("http://localhost/callback?code=abc&state=xyz")
        'abc'
        >>> extract_code("abc")
        'abc'
    """
    value = value.strip()
    parsed = urlparse(value)
    if parsed.scheme and parsed.query:
        codes = parse_qs(parsed.query).get("code")
        if codes:
            return codes[0]
    return value


class WhoopTokenService:
    """
    Service for obtaining and refreshing WHOOP OAuth tokens.

    Tokens start from settings and are replaced in memory whenever they are
    refreshed. Refreshes are serialised so concurrent requests that find the
    token expiring trigger a single refresh.
    """

    # OAuth scopes required for the application
    SCOPES = "offline read:profile read:body_measurement read:cycles read:recovery read:sleep read:workout"

    def __init__(
        self,
        tokens: Optional[TokenResponse] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the token service with configuration from settings."""
        self.client_id = settings.WHOOP_CLIENT_ID
        self.client_secret = settings.WHOOP_CLIENT_SECRET
        self.redirect_uri = settings.WHOOP_REDIRECT_URI
        self.auth_url = settings.WHOOP_AUTH_URL
        self.token_url = settings.WHOOP_TOKEN_URL
        self.refresh_margin_ms = settings.TOKEN_REFRESH_MARGIN_SECONDS * 1000
        self._transport = transport
        self._lock = asyncio.Lock()

        if tokens is None and settings.WHOOP_ACCESS_TOKEN:
            tokens = TokenResponse(
                access_token=settings.WHOOP_ACCESS_TOKEN,
                refresh_token=settings.WHOOP_REFRESH_TOKEN or None,
                expires_at=settings.WHOOP_TOKEN_EXPIRES_AT,
            )
        self.tokens = tokens

    @property
    def is_authenticated(self) -> bool:
        return self.tokens is not None

    def get_authorization_url(self, state: Optional[str] = None) -> tuple[str, str]:
        """
        Generate the WHOOP OAuth authorization URL.

        Args:
            state: Optional CSRF state; a random one is generated if omitted

        Returns:
            tuple: (authorization URL, state)
        """
        state = state or secrets.token_hex(16)
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": self.SCOPES,
            "state": state,
        }
        return f"{self.auth_url}?{urlencode(params)}", state

    async def _token_request(self, data: dict) -> TokenResponse:
        async with httpx.AsyncClient(timeout=settings.WHOOP_REQUEST_TIMEOUT, transport=self._transport) as client:
            try:
                response = await client.post(self.token_url, data=data)
            except httpx.HTTPError as e:
                raise WhoopAuthError(f"Token request failed: {str(e)}")

        if response.status_code != 200:
            logger.error(f"WHOOP token endpoint returned {response.status_code}")
            raise WhoopAuthError(
                f"Token request failed: {response.status_code} {response.text}",
                status_code=response.status_code,
            )

        # ValidationError is a ValueError
        try:
            payload = response.json()
            expires_in = int(payload.get("expires_in", 0))
            return TokenResponse(
                access_token=payload["access_token"],
                refresh_token=payload.get("refresh_token"),
                expires_in=expires_in,
                token_type=payload.get("token_type", "bearer"),
                scope=payload.get("scope", ""),
                expires_at=_now_ms() + expires_in * 1000,
            )
        except (ValueError, KeyError, AttributeError) as e:
            logger.error(f"Malformed response from WHOOP token endpoint: {str(e)}")
            raise WhoopAuthError(
                f"Malformed token response: {str(e)}",
                status_code=response.status_code,
            )

    async def exchange_code(self, code: str) -> TokenResponse:
        """
        Exchange an authorization code for access and refresh tokens.

        Args:
            code: The authorization code, or the full callback URL

        Returns:
            TokenResponse: The new tokens, also stored on the service

        Raises:
            WhoopAuthError: If the exchange fails
        """
        logger.info("Exchanging authorization code for tokens")
        tokens = await self._token_request({
            "grant_type": "authorization_code",
            "code": extract_code(code),
            "redirect_uri": self.redirect_uri,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        })
        self.tokens = tokens
        logger.info("Token exchange successful")
        return tokens

    async def refresh_tokens(self, refresh_token: str) -> TokenResponse:
        """
        Refresh the access token using a refresh token.

        Raises:
            WhoopAuthError: If the refresh fails
        """
        logger.info("Refreshing WHOOP access token")
        tokens = await self._token_request({
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "scope": "offline",
        })
        if tokens.refresh_token is None:
            tokens = tokens.model_copy(update={"refresh_token": refresh_token})
        self.tokens = tokens
        logger.info("Token refresh successful")
        return tokens

    def _needs_refresh(self) -> bool:
        # expires_at == 0 means the expiry is unknown; use the token as is.
        expires_at = self.tokens.expires_at
        return expires_at > 0 and _now_ms() + self.refresh_margin_ms >= expires_at

    async def get_valid_token(self) -> str:
        """
        Return a usable access token, refreshing it if it expires soon.

        Raises:
            WhoopAuthError: If not authenticated or the refresh fails
        """
        if self.tokens is None:
            raise WhoopAuthError("Not authenticated. Please authorize with WHOOP first.")

        if not self._needs_refresh():
            return self.tokens.access_token

        async with self._lock:
            # Another request may have refreshed while we waited.
            if self._needs_refresh():
                if not self.tokens.refresh_token:
                    raise WhoopAuthError("Access token expired and no refresh token is available.")
                await self.refresh_tokens(self.tokens.refresh_token)
        return self.tokens.access_token


# Singleton instance for use across the application
token_service = WhoopTokenService()
