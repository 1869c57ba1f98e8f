"""
Shared data models for the Case rules.

Pydantic models used by both the form rules and the duplicate case guard.
"""

from case_rules.models.references import (
    ACCOUNT,
    CONTACT,
    AccountCustomer,
    ContactCustomer,
    ContactRecord,
    Customer,
    EntityReference,
    LookupValue,
    OtherCustomer,
    RequirementLevel,
    customer_from_lookup,
    customer_from_reference,
    format_guid,
)
from case_rules.models.plugin import (
    CREATE_MESSAGE,
    TARGET_PARAMETER,
    Entity,
    GuardDecision,
    PluginExecutionContext,
)

__all__ = [
    # References
    "ACCOUNT", "CONTACT", "EntityReference", "LookupValue", "ContactRecord",
    "RequirementLevel", "format_guid",
    # Customer tagged union
    "Customer", "AccountCustomer", "ContactCustomer", "OtherCustomer",
    "customer_from_lookup", "customer_from_reference",
    # Pipeline
    "CREATE_MESSAGE", "TARGET_PARAMETER", "Entity", "PluginExecutionContext",
    "GuardDecision",
]
