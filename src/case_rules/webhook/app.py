"""FastAPI service exposing the duplicate case guard as a Dataverse webhook.

Register the endpoint as a synchronous webhook step on Create of incident.
A non-2xx response aborts the creation and rolls back the transaction.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.responses import JSONResponse

from case_rules.auth.request_context import WebhookRequestContext, get_webhook_context
from case_rules.auth.token_provider import DataverseTokenProvider
from case_rules.auth.webhook_auth import WebhookKeyMiddleware
from case_rules.clients.dataverse_client import DataverseClient
from case_rules.config import Settings, get_settings
from case_rules.guard.duplicate_case import DuplicateActiveCaseGuard, QueryServiceFactory
from case_rules.models.plugin import PluginExecutionContext
from case_rules.utils.resilience import verify_dataverse_connection

logger = logging.getLogger(__name__)


def build_dataverse_client(settings: Settings) -> DataverseClient:
    """Dataverse client authenticated with the configured app registration."""
    token_provider = DataverseTokenProvider(
        tenant_id=settings.tenant_id,
        client_id=settings.client_id,
        client_secret=settings.client_secret,
        scope=settings.token_scope,
    )
    return DataverseClient(
        web_api_url=settings.web_api_url,
        token_provider=token_provider,
        timeout=settings.timeout,
    )


def create_app(
    settings: Optional[Settings] = None,
    service_factory: Optional[QueryServiceFactory] = None,
    verify_connection: Optional[bool] = None,
) -> FastAPI:
    """Build the webhook application.

    Args:
        settings: Configuration (default: global settings from the environment)
        service_factory: Query service factory (default: a DataverseClient built
            from settings)
        verify_connection: Call WhoAmI at startup (default: only when the
            client was built here)

    Raises:
        ValueError: If no service_factory is given and DATAVERSE_URL is unset
    """
    settings = settings or get_settings()

    client: Optional[DataverseClient] = None
    if service_factory is None:
        if not settings.dataverse_url:
            raise ValueError(
                "DATAVERSE_URL is not set; configure the organization URL "
                "(e.g. https://contoso.crm.dynamics.com) or pass a service_factory"
            )
        client = build_dataverse_client(settings)
        service_factory = client

    if verify_connection is None:
        verify_connection = client is not None

    guard = DuplicateActiveCaseGuard(service_factory=service_factory)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if verify_connection and client is not None:
            await verify_dataverse_connection(client)
        yield
        if client is not None:
            await client.close()

    app = FastAPI(title="Case rules webhook", lifespan=lifespan)
    app.state.guard = guard

    if settings.webhook_key:
        app.add_middleware(WebhookKeyMiddleware, webhook_key=settings.webhook_key)
    else:
        logger.warning("WEBHOOK_KEY not set; webhook endpoints are unauthenticated")

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.post("/api/v1/webhooks/case-create")
    async def case_create(
        context: PluginExecutionContext,
        request: Request,
        webhook: WebhookRequestContext = Depends(get_webhook_context),
    ):
        logger.info(
            f"Case create webhook: message={context.message_name}, "
            f"entity={context.primary_entity_name}, "
            f"organization={webhook.organization}, correlation={webhook.correlation_id}"
        )

        decision = await request.app.state.guard.evaluate(context)
        if decision.allowed:
            return {"allowed": True}

        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "allowed": False,
                "message": decision.reason,
                "unexpected": decision.unexpected,
            },
        )

    return app
