"""Form runtime abstractions.

The form rules talk to the host form through the structural protocols below.
``Form`` and friends are an in-memory implementation used by headless hosts
and tests.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from case_rules.models.references import RequirementLevel


class Attribute(Protocol):
    name: str

    def get_value(self) -> Any: ...

    def set_value(self, value: Any) -> None: ...

    def get_required_level(self) -> RequirementLevel: ...

    def set_required_level(self, level: RequirementLevel) -> None: ...


class Control(Protocol):
    name: str

    def get_visible(self) -> bool: ...

    def set_visible(self, visible: bool) -> None: ...

    def get_disabled(self) -> bool: ...

    def set_disabled(self, disabled: bool) -> None: ...


class QuickViewControl(Protocol):
    def get_control(self, name: str) -> Optional[Control]: ...

    def get_attribute(self, name: str) -> Optional[Attribute]: ...

    def get_attributes(self) -> List[Attribute]: ...


class FormContext(Protocol):
    def get_attribute(self, name: str) -> Optional[Attribute]: ...

    def get_control(self, name: str) -> Optional[Control]: ...

    def get_quick_view(self, name: str) -> Optional[QuickViewControl]: ...


class ExecutionContext(Protocol):
    def get_form_context(self) -> FormContext: ...


@dataclass
class FormAttribute:
    name: str
    value: Any = None
    required_level: RequirementLevel = RequirementLevel.NONE

    def get_value(self) -> Any:
        return self.value

    def set_value(self, value: Any) -> None:
        self.value = value

    def get_required_level(self) -> RequirementLevel:
        return self.required_level

    def set_required_level(self, level: RequirementLevel) -> None:
        self.required_level = RequirementLevel(level)


@dataclass
class FormControl:
    name: str
    visible: bool = True
    disabled: bool = False

    def get_visible(self) -> bool:
        return self.visible

    def set_visible(self, visible: bool) -> None:
        self.visible = visible

    def get_disabled(self) -> bool:
        return self.disabled

    def set_disabled(self, disabled: bool) -> None:
        self.disabled = disabled


@dataclass
class _FieldContainer:
    attributes: Dict[str, FormAttribute] = field(default_factory=dict)
    controls: Dict[str, FormControl] = field(default_factory=dict)

    def add_field(self, name: str, value: Any = None, with_control: bool = True) -> FormAttribute:
        """Add an attribute and, unless told otherwise, its control."""
        attribute = FormAttribute(name=name, value=value)
        self.attributes[name] = attribute
        if with_control:
            self.controls[name] = FormControl(name=name)
        return attribute

    def get_attribute(self, name: str) -> Optional[FormAttribute]:
        return self.attributes.get(name)

    def get_control(self, name: str) -> Optional[FormControl]:
        return self.controls.get(name)


@dataclass
class QuickViewForm(_FieldContainer):
    """Read-only embedded view of a related record."""

    def get_attributes(self) -> List[FormAttribute]:
        return list(self.attributes.values())


@dataclass
class Form(_FieldContainer):
    quick_views: Dict[str, QuickViewForm] = field(default_factory=dict)

    def add_quick_view(self, name: str) -> QuickViewForm:
        quick_view = QuickViewForm()
        self.quick_views[name] = quick_view
        return quick_view

    def get_quick_view(self, name: str) -> Optional[QuickViewForm]:
        return self.quick_views.get(name)


@dataclass
class FormExecutionContext:
    """Execution context handed to event handlers."""

    form: Form

    def get_form_context(self) -> Form:
        return self.form
