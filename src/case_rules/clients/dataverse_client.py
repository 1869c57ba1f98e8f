"""HTTP client for the Dataverse Web API."""

import logging
from typing import Any, Dict, List, Optional

import httpx

from case_rules.clients.base import BaseDataverseClient
from case_rules.exceptions import DataverseRequestError
from case_rules.models.references import format_guid
from case_rules.query import QueryExpression, entity_set_name

logger = logging.getLogger(__name__)


class DataverseClient(BaseDataverseClient):
    """Async client exposing the read operations the Case rules need.

    Usage:
        client = DataverseClient(web_api_url=settings.web_api_url, token_provider=provider)
        account = await client.retrieve_record("account", account_id, "?$select=name")
        service = client.create_organization_service(user_id)
        rows = await service.retrieve_multiple(query)
    """

    async def _get(
        self,
        path: str,
        caller_id: Optional[str] = None,
        correlation_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        url = self._url(path)
        async with self._get_client() as client:
            response = await client.get(
                url,
                headers=await self._headers(caller_id=caller_id, correlation_id=correlation_id),
            )
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            body = (response.text or "").strip()
            raise DataverseRequestError(
                f"Dataverse GET {url} failed: HTTP {response.status_code}. {body}",
                status_code=response.status_code,
                body=body,
            ) from e
        return response.json()

    async def retrieve_record(
        self,
        entity_name: str,
        record_id: str,
        options: str = "",
        caller_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Retrieve one record by id.

        Args:
            entity_name: Logical name (e.g. "account")
            record_id: Record GUID, braces allowed
            options: OData query options starting with "?"
            caller_id: Optional user to impersonate

        Returns:
            Record as a dict

        Raises:
            DataverseRequestError: If the record is missing or the call fails
        """
        path = f"{entity_set_name(entity_name)}({format_guid(record_id)}){options}"
        return await self._get(path, caller_id=caller_id)

    async def retrieve_multiple_records(
        self,
        entity_name: str,
        options: str = "",
        caller_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Retrieve records matching raw OData query options.

        Returns:
            The ``value`` array of the response
        """
        data = await self._get(f"{entity_set_name(entity_name)}{options}", caller_id=caller_id)
        return data.get("value", [])

    async def retrieve_multiple(
        self, query: QueryExpression, caller_id: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Retrieve records matching a query expression."""
        logger.debug(f"RetrieveMultiple {query.entity_set}{query.to_odata()}")
        return await self.retrieve_multiple_records(
            query.entity_name, query.to_odata(), caller_id=caller_id
        )

    async def who_am_i(self) -> Dict[str, Any]:
        """Call the WhoAmI function; used to verify connectivity."""
        return await self._get("WhoAmI")

    def create_organization_service(self, user_id: Optional[str]) -> "OrganizationService":
        """Create a query service acting as ``user_id`` (None: the application user)."""
        return OrganizationService(self, caller_id=user_id)


class OrganizationService:
    """Query facade bound to one user's identity."""

    def __init__(self, client: DataverseClient, caller_id: Optional[str] = None):
        self.client = client
        self.caller_id = caller_id

    async def retrieve_multiple(self, query: QueryExpression) -> List[Dict[str, Any]]:
        return await self.client.retrieve_multiple(query, caller_id=self.caller_id)
