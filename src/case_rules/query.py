"""Query expressions rendered as Dataverse Web API query options.

A small counterpart of the platform's ``QueryExpression``: an entity, the
columns to select, AND-ed conditions and an optional row limit.
"""

import re
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

_GUID_RE = re.compile(r"^\{?[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}\}?$")

# Logical names whose collection name is not simply "<name>s"
ENTITY_SET_NAMES: Dict[str, str] = {
    "incident": "incidents",
    "account": "accounts",
    "contact": "contacts",
    "opportunity": "opportunities",
    "activityparty": "activityparties",
}


def entity_set_name(logical_name: str) -> str:
    """Web API collection name for an entity logical name."""
    return ENTITY_SET_NAMES.get(logical_name, f"{logical_name}s")


def odata_literal(value: Any) -> str:
    """Render a Python value as an OData filter literal."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, UUID):
        return str(value)

    text = str(value)
    if _GUID_RE.match(text):
        return text.strip("{}").lower()
    # OData strings are single-quoted; quotes are escaped by doubling them
    return "'" + text.replace("'", "''") + "'"


class ConditionOperator(str, Enum):
    EQUAL = "eq"
    NOT_EQUAL = "ne"


class ConditionExpression(BaseModel):
    """One ``<attribute> <operator> <value>`` condition."""

    attribute: str
    operator: ConditionOperator = ConditionOperator.EQUAL
    value: Any = None
    lookup: bool = Field(False, description="Attribute is a lookup, filtered via _<name>_value")

    def to_odata(self) -> str:
        attribute = f"_{self.attribute}_value" if self.lookup else self.attribute
        return f"{attribute} {self.operator.value} {odata_literal(self.value)}"


class QueryExpression(BaseModel):
    """Retrieve-multiple query against one entity."""

    entity_name: str
    columns: List[str] = Field(default_factory=list)
    conditions: List[ConditionExpression] = Field(default_factory=list)
    top: Optional[int] = None

    @property
    def entity_set(self) -> str:
        return entity_set_name(self.entity_name)

    def to_odata(self) -> str:
        """Render ``?$select=...&$filter=...&$top=...``."""
        options = []
        if self.columns:
            options.append("$select=" + ",".join(self.columns))
        if self.conditions:
            options.append("$filter=" + " and ".join(c.to_odata() for c in self.conditions))
        if self.top is not None:
            options.append(f"$top={self.top}")
        return "?" + "&".join(options) if options else ""
