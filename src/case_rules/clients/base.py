"""Base client for the Dataverse Web API."""

import logging
from typing import Optional, Protocol

import httpx

logger = logging.getLogger(__name__)


class TokenProvider(Protocol):
    async def get_token(self) -> str: ...


class BaseDataverseClient:
    """Base class for Dataverse Web API clients.

    Requests carry a bearer token and the OData headers the Web API expects.
    Calls made on behalf of a user are impersonated via ``MSCRMCallerID``.

    Usage:
        class AccountClient(BaseDataverseClient):
            async def get_account(self, account_id: str) -> dict:
                async with self._get_client() as client:
                    response = await client.get(
                        self._url(f"accounts({account_id})"),
                        headers=await self._headers(),
                    )
                    response.raise_for_status()
                    return response.json()
    """

    def __init__(
        self,
        web_api_url: str,
        token_provider: TokenProvider,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize Web API client.

        Args:
            web_api_url: Web API base URL (e.g., https://contoso.crm.dynamics.com/api/data/v9.2)
            token_provider: Source of bearer tokens
            timeout: Request timeout in seconds (default: 30.0)
            transport: Optional httpx transport (tests)
        """
        self.web_api_url = web_api_url.rstrip("/")
        self.token_provider = token_provider
        self.timeout = timeout
        self._transport = transport

        logger.info(f"Initialized {self.__class__.__name__} with web_api_url={web_api_url}")

    async def _headers(
        self,
        caller_id: Optional[str] = None,
        correlation_id: Optional[str] = None,
        include_annotations: bool = True,
    ) -> dict:
        """Generate request headers.

        Args:
            caller_id: systemuserid to impersonate (MSCRMCallerID header)
            correlation_id: Optional correlation ID for request tracing
            include_annotations: Ask for formatted values and lookup logical names

        Returns:
            Headers dict with authorization and OData headers
        """
        token = await self.token_provider.get_token()
        headers = {
            "Authorization": f"Bearer {token}",
            "OData-MaxVersion": "4.0",
            "OData-Version": "4.0",
            "Accept": "application/json",
            "Content-Type": "application/json; charset=utf-8",
        }

        # Lookup logical names let callers tell account and contact customers apart
        if include_annotations:
            headers["Prefer"] = (
                'odata.include-annotations="'
                "OData.Community.Display.V1.FormattedValue,"
                "Microsoft.Dynamics.CRM.lookuplogicalname"
                '"'
            )

        if caller_id:
            headers["MSCRMCallerID"] = caller_id

        if correlation_id:
            headers["x-ms-correlation-request-id"] = correlation_id

        return headers

    def _url(self, path: str) -> str:
        return f"{self.web_api_url}/{path.lstrip('/')}"

    def _get_client(self) -> httpx.AsyncClient:
        """Get HTTP client instance with configured timeout.

        Returns:
            Configured AsyncClient ready for use with async context manager
        """
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def close(self):
        """Close any persistent connections.

        Override this if your client maintains a persistent httpx.AsyncClient.
        """
        pass
