"""Request context extraction from Dataverse webhook headers.

Dataverse adds ``x-ms-dynamics-*`` headers describing the organization and
the message that triggered the call, plus a correlation id shared with the
platform's own trace.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

logger = logging.getLogger(__name__)


@dataclass
class WebhookRequestContext:
    """Caller context of one webhook invocation.

    Attributes:
        organization: Organization host from x-ms-dynamics-organization
        entity_name: Primary entity from x-ms-dynamics-entity-name
        request_name: Message name from x-ms-dynamics-request-name
        correlation_id: Platform correlation id from x-ms-correlation-request-id
    """

    organization: Optional[str] = None
    entity_name: Optional[str] = None
    request_name: Optional[str] = None
    correlation_id: Optional[str] = None


def get_webhook_context(request: Request) -> WebhookRequestContext:
    """Extract the webhook context from request headers.

    Missing headers are left as None; the body remains the authoritative
    description of the message.
    """
    context = WebhookRequestContext(
        organization=request.headers.get("x-ms-dynamics-organization"),
        entity_name=request.headers.get("x-ms-dynamics-entity-name"),
        request_name=request.headers.get("x-ms-dynamics-request-name"),
        correlation_id=request.headers.get("x-ms-correlation-request-id"),
    )

    if context.organization is None:
        logger.debug(f"Webhook call to {request.url.path} without x-ms-dynamics-organization header")

    return context
