"""Lookup and Customer models.

This module defines the value types shared by the form rules and the guard:
- EntityReference / LookupValue: a typed pointer to a record
- Customer: tagged union over the Case's polymorphic ``customerid`` lookup
- ContactRecord: the primary contact returned by a fetch
- RequirementLevel: requirement levels a form attribute can take
"""

import logging
from enum import Enum
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)


ACCOUNT = "account"
CONTACT = "contact"


def format_guid(guid: str) -> str:
    """Strip surrounding braces and whitespace from a GUID and lower-case it."""
    value = guid.strip()
    if value.startswith("{") and value.endswith("}"):
        value = value[1:-1]
    return value.lower()


class RequirementLevel(str, Enum):
    """Requirement level of a form attribute."""

    NONE = "none"
    REQUIRED = "required"
    RECOMMENDED = "recommended"


class EntityReference(BaseModel):
    """Reference to a record by logical name and identifier."""

    id: str = Field(..., description="Record identifier (GUID, brace-free)")
    entity_type: str = Field(..., description="Logical name, e.g. 'account'")
    name: Optional[str] = Field(None, description="Primary name of the record")

    @field_validator("id")
    @classmethod
    def normalize_id(cls, v: str) -> str:
        return format_guid(v)

    @field_validator("entity_type")
    @classmethod
    def normalize_entity_type(cls, v: str) -> str:
        return v.strip().lower()


class LookupValue(EntityReference):
    """One entry of a form lookup attribute value."""


class AccountCustomer(BaseModel):
    kind: Literal["account"] = ACCOUNT
    id: str


class ContactCustomer(BaseModel):
    kind: Literal["contact"] = CONTACT
    id: str


class OtherCustomer(BaseModel):
    """Customer resolved to a logical name no rule is defined for."""

    kind: Literal["other"] = "other"
    id: str
    entity_type: str


Customer = Union[AccountCustomer, ContactCustomer, OtherCustomer]


def customer_from_reference(reference: EntityReference) -> Customer:
    """Tag an entity reference by its logical name."""
    if reference.entity_type == ACCOUNT:
        return AccountCustomer(id=reference.id)
    if reference.entity_type == CONTACT:
        return ContactCustomer(id=reference.id)
    return OtherCustomer(id=reference.id, entity_type=reference.entity_type)


def customer_from_lookup(value: Any) -> Optional[Customer]:
    """Resolve a ``customerid`` lookup value into a Customer.

    Lookup values arrive as a list of references (or dicts with ``id`` and
    ``entity_type``/``entityType``). An empty list or None means no customer.
    An entry without an entity type resolves to an OtherCustomer so no rule
    acts on it. Only the first entry is considered.
    """
    if not value:
        return None

    first = value[0]
    if isinstance(first, EntityReference):
        return customer_from_reference(first)

    if isinstance(first, dict):
        entity_type = first.get("entity_type") or first.get("entityType")
        if not first.get("id"):
            return None
        if not entity_type:
            logger.warning(f"Lookup entry {first.get('id')} has no entity type")
            return OtherCustomer(id=format_guid(first["id"]), entity_type="")
        return customer_from_reference(
            EntityReference(id=first["id"], entity_type=entity_type, name=first.get("name"))
        )

    return None


class ContactRecord(BaseModel):
    """Contact row as returned by the Web API."""

    contactid: str
    fullname: Optional[str] = None

    @field_validator("contactid")
    @classmethod
    def normalize_contactid(cls, v: str) -> str:
        return format_guid(v)

    def to_lookup(self) -> List[LookupValue]:
        """Lookup value suitable for writing into ``primarycontactid``."""
        return [LookupValue(id=self.contactid, entity_type=CONTACT, name=self.fullname)]
