"""User-facing alert channel of the form rules."""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class AlertChannel(Protocol):
    def open_alert_dialog(self, text: str) -> None: ...


class LoggingAlertChannel:
    """Alert channel for hosts without a dialog surface."""

    def open_alert_dialog(self, text: str) -> None:
        logger.warning(f"[Alert] {text}")
