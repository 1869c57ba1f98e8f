"""CRM Case rules

Form rules for the Case Customer lookup and the single-active-case guard.
"""

__version__ = "0.1.0"

# Export shared models first (no dependencies)
from case_rules.models import (
    AccountCustomer, ContactCustomer, OtherCustomer, Customer,
    ContactRecord, EntityReference, LookupValue, RequirementLevel,
    PluginExecutionContext, GuardDecision,
)
from case_rules.exceptions import (
    CaseRulesError,
    DataverseRequestError,
    InvalidPluginExecutionError,
)
from case_rules.config import Settings, PrimaryContactSource, get_settings, reset_settings
from case_rules.form import FormRuleEvaluator
from case_rules.guard import DuplicateActiveCaseGuard


# Lazy import for the webhook app so importing the rules does not load FastAPI
def __getattr__(name):
    """Lazy import for create_app."""
    if name == "create_app":
        from case_rules.webhook import create_app
        return create_app
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    # Models
    "AccountCustomer", "ContactCustomer", "OtherCustomer", "Customer",
    "ContactRecord", "EntityReference", "LookupValue", "RequirementLevel",
    "PluginExecutionContext", "GuardDecision",
    # Errors
    "CaseRulesError", "DataverseRequestError", "InvalidPluginExecutionError",
    # Configuration
    "Settings", "PrimaryContactSource", "get_settings", "reset_settings",
    # Rules
    "FormRuleEvaluator", "DuplicateActiveCaseGuard",
    # Webhook (lazy loaded)
    "create_app",
]
