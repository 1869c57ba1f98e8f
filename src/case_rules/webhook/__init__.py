"""Webhook service for the Case creation guard."""

from case_rules.webhook.app import build_dataverse_client, create_app

__all__ = ["create_app", "build_dataverse_client"]
