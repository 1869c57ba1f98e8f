"""Dataverse Web API clients."""

from case_rules.clients.base import BaseDataverseClient, TokenProvider
from case_rules.clients.dataverse_client import DataverseClient, OrganizationService
from case_rules.clients.primary_contact import (
    AccountRelationshipFetcher,
    FlaggedContactFetcher,
    PrimaryContactFetcher,
    create_primary_contact_fetcher,
)

__all__ = [
    "BaseDataverseClient",
    "TokenProvider",
    "DataverseClient",
    "OrganizationService",
    "PrimaryContactFetcher",
    "AccountRelationshipFetcher",
    "FlaggedContactFetcher",
    "create_primary_contact_fetcher",
]
