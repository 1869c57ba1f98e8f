"""Shared-key authentication for Dataverse webhook endpoints."""

import hmac
import logging
from typing import List, Optional

from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

WEBHOOK_KEY_HEADER = "x-webhook-key"
WEBHOOK_KEY_QUERY = "code"


class WebhookKeyMiddleware(BaseHTTPMiddleware):
    """Middleware to verify the shared key sent by a webhook registration.

    Dataverse webhooks authenticate with either an HTTP header
    (``HttpHeader`` auth type) or a ``code`` query parameter (``WebhookKey``
    auth type). Either is accepted.

    Usage:
        app.add_middleware(WebhookKeyMiddleware, webhook_key=settings.webhook_key)
    """

    def __init__(
        self,
        app,
        webhook_key: str,
        skip_paths: Optional[List[str]] = None,
    ):
        """Initialize middleware.

        Args:
            app: FastAPI application
            webhook_key: Expected shared key
            skip_paths: Paths served without a key (e.g., ["/health"])
        """
        super().__init__(app)
        self.webhook_key = webhook_key
        self.skip_paths = skip_paths or ["/health", "/docs", "/openapi.json"]

    async def dispatch(self, request: Request, call_next) -> Response:
        """Reject requests that do not carry the shared key."""
        if request.url.path in self.skip_paths:
            return await call_next(request)

        provided = request.headers.get(WEBHOOK_KEY_HEADER) or request.query_params.get(
            WEBHOOK_KEY_QUERY
        )

        if not provided:
            logger.warning(f"Missing webhook key for {request.url.path}")
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Missing webhook key"},
            )

        if not hmac.compare_digest(provided.encode(), self.webhook_key.encode()):
            logger.warning(f"Invalid webhook key for {request.url.path}")
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid webhook key"},
            )

        return await call_next(request)
