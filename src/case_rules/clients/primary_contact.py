"""Lookup of an Account's primary contact.

Two sources are in use and they can disagree when an Account's
``primarycontactid`` and its ``isprimary``-flagged Contact diverge:

- AccountRelationshipFetcher reads ``account.primarycontactid``
- FlaggedContactFetcher queries contacts flagged ``isprimary`` under the account

Both are kept; the configured one is chosen by create_primary_contact_fetcher().
"""

import logging
from typing import Optional, Protocol

from case_rules.clients.dataverse_client import DataverseClient
from case_rules.config import PrimaryContactSource
from case_rules.models.references import ContactRecord, format_guid
from case_rules.query import ConditionExpression, QueryExpression

logger = logging.getLogger(__name__)


class PrimaryContactFetcher(Protocol):
    async def fetch(self, account_id: str) -> Optional[ContactRecord]: ...


class AccountRelationshipFetcher:
    """Reads the Account's own primarycontactid relationship."""

    OPTIONS = "?$select=primarycontactid&$expand=primarycontactid($select=contactid,fullname)"

    def __init__(self, client: DataverseClient):
        self.client = client

    async def fetch(self, account_id: str) -> Optional[ContactRecord]:
        record = await self.client.retrieve_record("account", account_id, self.OPTIONS)
        contact = record.get("primarycontactid")
        if not contact:
            return None
        return ContactRecord(**contact)


class FlaggedContactFetcher:
    """Returns the first Contact of the Account flagged as primary."""

    def __init__(
        self,
        client: DataverseClient,
        account_attribute: str = "accountid",
        primary_flag_attribute: str = "isprimary",
    ):
        self.client = client
        self.account_attribute = account_attribute
        self.primary_flag_attribute = primary_flag_attribute

    def build_query(self, account_id: str) -> QueryExpression:
        return QueryExpression(
            entity_name="contact",
            columns=["contactid", "fullname"],
            conditions=[
                ConditionExpression(
                    attribute=self.account_attribute, value=format_guid(account_id), lookup=True
                ),
                ConditionExpression(attribute=self.primary_flag_attribute, value=True),
            ],
            top=1,
        )

    async def fetch(self, account_id: str) -> Optional[ContactRecord]:
        rows = await self.client.retrieve_multiple(self.build_query(account_id))
        if not rows:
            return None
        return ContactRecord(**rows[0])


def create_primary_contact_fetcher(
    client: DataverseClient, source: PrimaryContactSource
) -> PrimaryContactFetcher:
    """Build the fetcher for the configured primary contact source."""
    logger.info(f"Using primary contact source: {source.value}")
    if source == PrimaryContactSource.FLAGGED:
        return FlaggedContactFetcher(client)
    return AccountRelationshipFetcher(client)
