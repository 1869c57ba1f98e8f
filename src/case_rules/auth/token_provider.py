"""Dataverse access token provider with automatic caching and refresh."""

import asyncio
import logging
import time
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

AUTHORITY_URL = "https://login.microsoftonline.com"


class DataverseTokenProvider:
    """Manages OAuth2 client-credentials tokens for the Dataverse Web API.

    This class handles:
    1. Fetching tokens from the Microsoft identity platform
    2. Caching tokens until shortly before they expire
    3. Serialising concurrent refreshes behind an asyncio lock

    Usage:
        provider = DataverseTokenProvider(
            tenant_id="00000000-0000-0000-0000-000000000000",
            client_id="app-id",
            client_secret="secret",
            scope="https://contoso.crm.dynamics.com/.default",
        )

        token = await provider.get_token()
        headers = {"Authorization": f"Bearer {token}"}
    """

    def __init__(
        self,
        tenant_id: str,
        client_id: str,
        client_secret: str,
        scope: str,
        authority_url: str = AUTHORITY_URL,
        refresh_buffer_seconds: int = 300,  # Refresh 5 minutes before expiration
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize token provider.

        Args:
            tenant_id: Entra ID tenant of the app registration
            client_id: Application (client) ID
            client_secret: Client secret
            scope: Requested scope, "<organization url>/.default"
            authority_url: Identity platform base URL
            refresh_buffer_seconds: Refresh token this many seconds before expiration
            timeout_seconds: HTTP request timeout
            transport: Optional httpx transport (tests)
        """
        self.tenant_id = tenant_id
        self.client_id = client_id
        self.client_secret = client_secret
        self.scope = scope
        self.authority_url = authority_url.rstrip("/")
        self.refresh_buffer_seconds = refresh_buffer_seconds
        self.timeout_seconds = timeout_seconds
        self._transport = transport

        # Token cache
        self._token: Optional[str] = None
        self._token_expires_at: float = 0
        self._lock = asyncio.Lock()

        logger.info(
            f"Initialized DataverseTokenProvider: client_id={client_id}, scope={scope}"
        )

    @property
    def token_url(self) -> str:
        return f"{self.authority_url}/{self.tenant_id}/oauth2/v2.0/token"

    async def get_token(self) -> str:
        """Get current access token (fetches a new one if expired or missing).

        Returns:
            Bearer token for the Web API

        Raises:
            httpx.HTTPError: If token request fails
        """
        if self._needs_refresh():
            async with self._lock:
                # Another caller may have refreshed while we waited
                if self._needs_refresh():
                    await self._refresh_token()

        if self._token is None:
            raise RuntimeError("Failed to obtain Dataverse access token")

        return self._token

    def _needs_refresh(self) -> bool:
        return self._token is None or time.time() >= (
            self._token_expires_at - self.refresh_buffer_seconds
        )

    async def _refresh_token(self) -> None:
        """Fetch a new token from the identity platform.

        Raises:
            httpx.HTTPError: If token request fails
        """
        logger.info(f"Refreshing Dataverse access token for {self.client_id}")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self._transport
            ) as client:
                response = await client.post(
                    self.token_url,
                    data={
                        "grant_type": "client_credentials",
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "scope": self.scope,
                    },
                )
                response.raise_for_status()

                data = response.json()
                self._token = data["access_token"]
                self._token_expires_at = time.time() + float(data.get("expires_in", 3600))

                logger.info(
                    f"Successfully refreshed Dataverse access token "
                    f"(expires in {int(self._token_expires_at - time.time())}s)"
                )

        except httpx.HTTPError as e:
            logger.error(f"Failed to refresh Dataverse access token: {e}")
            raise

    async def invalidate_token(self) -> None:
        """Force token refresh on next get_token() call.

        Useful for handling 401 responses (token may have been revoked).
        """
        async with self._lock:
            logger.info(f"Invalidating cached token for {self.client_id}")
            self._token = None
            self._token_expires_at = 0

    @property
    def is_token_valid(self) -> bool:
        """Check if cached token is still valid (not expired, with buffer)."""
        if self._token is None:
            return False

        return not self._needs_refresh()
