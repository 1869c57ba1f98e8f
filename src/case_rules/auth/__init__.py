"""Authentication utilities.

Outbound: client-credentials tokens for the Dataverse Web API.
Inbound: shared-key verification and header context for webhook calls.
"""

from case_rules.auth.request_context import WebhookRequestContext, get_webhook_context
from case_rules.auth.token_provider import DataverseTokenProvider
from case_rules.auth.webhook_auth import WebhookKeyMiddleware

__all__ = [
    "DataverseTokenProvider",
    "WebhookKeyMiddleware",
    "WebhookRequestContext",
    "get_webhook_context",
]
