"""Plugin pipeline models.

Dataverse posts a serialized ``RemoteExecutionContext`` to registered
webhooks. Collections in that payload are lists of ``{"key", "value"}``
pairs, and typed values carry a ``__type`` marker such as
``"Entity:http://schemas.microsoft.com/xrm/2011/Contracts"``. The models
below flatten those into plain dicts holding Entity / EntityReference
objects.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from case_rules.models.references import EntityReference


CREATE_MESSAGE = "Create"
TARGET_PARAMETER = "Target"


def _type_marker(value: Dict[str, Any]) -> str:
    return str(value.get("__type", ""))


def _convert_value(value: Any) -> Any:
    """Turn a serialized Entity / EntityReference into its model."""
    if isinstance(value, dict):
        marker = _type_marker(value)
        if marker.startswith("EntityReference:"):
            return EntityReference(
                id=value.get("Id") or "",
                entity_type=value.get("LogicalName") or "",
                name=value.get("Name"),
            )
        if marker.startswith("Entity:"):
            return Entity.model_validate(value)
    return value


def _pairs_to_dict(value: Any) -> Any:
    if isinstance(value, list):
        return {
            item["key"]: _convert_value(item.get("value"))
            for item in value
            if isinstance(item, dict) and "key" in item
        }
    if isinstance(value, dict):
        return {key: _convert_value(item) for key, item in value.items()}
    return value


class Entity(BaseModel):
    """A record with its logical name and proposed attribute values."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    logical_name: str = Field(..., alias="LogicalName")
    id: Optional[str] = Field(None, alias="Id")
    attributes: Dict[str, Any] = Field(default_factory=dict, alias="Attributes")

    @field_validator("attributes", mode="before")
    @classmethod
    def parse_attributes(cls, v: Any) -> Any:
        return _pairs_to_dict(v)


class PluginExecutionContext(BaseModel):
    """Execution context of a message passing through the pipeline."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    message_name: str = Field(..., alias="MessageName")
    primary_entity_name: str = Field(..., alias="PrimaryEntityName")
    user_id: Optional[str] = Field(None, alias="UserId")
    initiating_user_id: Optional[str] = Field(None, alias="InitiatingUserId")
    correlation_id: Optional[str] = Field(None, alias="CorrelationId")
    organization_name: Optional[str] = Field(None, alias="OrganizationName")
    stage: Optional[int] = Field(None, alias="Stage")
    depth: int = Field(1, alias="Depth")
    input_parameters: Dict[str, Any] = Field(default_factory=dict, alias="InputParameters")

    @field_validator("input_parameters", mode="before")
    @classmethod
    def parse_input_parameters(cls, v: Any) -> Any:
        return _pairs_to_dict(v)

    @property
    def target(self) -> Any:
        """The ``Target`` input parameter, whatever its type."""
        return self.input_parameters.get(TARGET_PARAMETER)


class GuardDecision(BaseModel):
    """Outcome of evaluating a creation request."""

    allowed: bool
    reason: Optional[str] = None
    unexpected: bool = False
