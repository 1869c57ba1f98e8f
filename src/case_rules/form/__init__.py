"""Case form rules."""

from case_rules.form.alerts import AlertChannel, LoggingAlertChannel
from case_rules.form.context import (
    Attribute,
    Control,
    ExecutionContext,
    Form,
    FormAttribute,
    FormContext,
    FormControl,
    FormExecutionContext,
    QuickViewControl,
    QuickViewForm,
)
from case_rules.form.evaluator import FormRuleEvaluator

__all__ = [
    "FormRuleEvaluator",
    "AlertChannel",
    "LoggingAlertChannel",
    # Protocols
    "Attribute", "Control", "QuickViewControl", "FormContext", "ExecutionContext",
    # In-memory form
    "Form", "FormAttribute", "FormControl", "QuickViewForm", "FormExecutionContext",
]
