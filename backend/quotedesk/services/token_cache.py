"""OAuth2 client-credentials token cache for the Amadeus API."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

import httpx

from quotedesk.errors import TransportError, UpstreamAuthError

logger = logging.getLogger(__name__)

TOKEN_PATH = "/v1/security/oauth2/token"
EXPIRY_MARGIN = timedelta(seconds=300)
DEFAULT_LIFETIME_S = 1799


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SearchToken:
    token: str
    expires_at: datetime

    def is_valid(self, now: datetime) -> bool:
        return now < self.expires_at


class AccessTokenCache:
    """Holds one bearer token and refreshes it when it is about to expire.

    Refreshes are serialized by a lock so that concurrent cold callers share a
    single token request.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        client_id: str,
        client_secret: str,
        *,
        token_path: str = TOKEN_PATH,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._client = client
        self._client_id = client_id
        self._client_secret = client_secret
        self._token_path = token_path
        self._clock = clock
        self._token: SearchToken | None = None
        self._lock = asyncio.Lock()

    @property
    def token(self) -> SearchToken | None:
        return self._token

    def invalidate(self) -> None:
        self._token = None

    async def get_access_token(self) -> str:
        """Return a valid bearer token, fetching a new one if needed."""
        cached = self._token
        if cached and cached.is_valid(self._clock()):
            return cached.token

        async with self._lock:
            # Another caller may have refreshed while we waited
            cached = self._token
            if cached and cached.is_valid(self._clock()):
                return cached.token
            self._token = await self._fetch_token()
            return self._token.token

    async def _fetch_token(self) -> SearchToken:
        try:
            resp = await self._client.post(
                self._token_path,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                },
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
        except httpx.RequestError as e:
            logger.error(f"Amadeus token request failed: {e}")
            raise TransportError(detail=str(e)) from e

        if not resp.is_success:
            logger.error(f"Amadeus token error: {resp.status_code} {resp.text}")
            raise UpstreamAuthError(resp.status_code, resp.text)

        try:
            data = resp.json()
            access_token = data["access_token"]
            lifetime = int(data.get("expires_in", DEFAULT_LIFETIME_S))
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Amadeus token response unreadable: {e}")
            raise TransportError(detail=f"bad token response: {e}") from e

        expires_at = self._clock() + timedelta(seconds=lifetime) - EXPIRY_MARGIN
        logger.info("Amadeus token refreshed")
        return SearchToken(token=access_token, expires_at=expires_at)
