"""Amadeus API client: bearer-authenticated GETs with error classification."""

import logging
from typing import Any

import httpx

from quotedesk.config import Settings
from quotedesk.errors import (
    InvalidRequestError,
    TransportError,
    UpstreamAuthError,
    UpstreamSearchError,
)
from quotedesk.services.token_cache import AccessTokenCache

logger = logging.getLogger(__name__)

# Provider answers that mean the search parameters themselves are wrong
INVALID_REQUEST_STATUSES = (400, 422)


class AmadeusClient:
    """Adapter for the Amadeus Self-Service API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        token_cache: AccessTokenCache,
    ):
        self._client = client
        self.token_cache = token_cache

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> "AmadeusClient":
        client = httpx.AsyncClient(
            base_url=settings.amadeus_base_url,
            timeout=settings.amadeus_timeout,
            transport=transport,
        )
        token_cache = AccessTokenCache(
            client,
            settings.amadeus_client_id,
            settings.amadeus_client_secret,
        )
        return cls(client, token_cache)

    async def get(
        self,
        path: str,
        params: dict[str, Any],
        *,
        invalid_message: str,
        failure_message: str,
    ) -> dict:
        """GET ``path`` and return the decoded JSON body.

        Provider 400/422 answers become ``InvalidRequestError(invalid_message)``,
        401/403 become ``UpstreamAuthError``, anything else that is not a
        success (429 included) becomes ``UpstreamSearchError(failure_message)``.
        """
        token = await self.token_cache.get_access_token()

        try:
            resp = await self._client.get(
                path,
                params=params,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.RequestError as e:
            logger.error(f"Amadeus request error on {path}: {e}")
            raise TransportError(detail=str(e)) from e

        if not resp.is_success:
            logger.error(
                f"Amadeus API error on {path}: {resp.status_code} {resp.reason_phrase} {resp.text}"
            )
            if resp.status_code in (401, 403):
                # Token revoked or expired early; next call fetches a fresh one
                self.token_cache.invalidate()
                raise UpstreamAuthError(resp.status_code, resp.text)
            if resp.status_code in INVALID_REQUEST_STATUSES:
                raise InvalidRequestError(invalid_message, detail=resp.text)
            # Rate limits (429) and the rest are worth retrying later
            raise UpstreamSearchError(failure_message, detail=resp.text)

        try:
            data = resp.json()
        except ValueError as e:
            logger.error(f"Amadeus response on {path} is not JSON: {e}")
            raise TransportError(detail=f"invalid JSON from {path}") from e
        if not isinstance(data, dict):
            raise TransportError(detail=f"unexpected payload from {path}")
        return data

    async def close(self):
        await self._client.aclose()
