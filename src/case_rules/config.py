"""Environment-driven settings for the Case rules.

Environment Variables:
    DATAVERSE_URL: Organization URL (e.g. https://contoso.crm.dynamics.com)
    DATAVERSE_API_VERSION: Web API version (default: "v9.2")
    DATAVERSE_TIMEOUT: HTTP timeout in seconds (default: 30.0)
    AZURE_TENANT_ID / AZURE_CLIENT_ID / AZURE_CLIENT_SECRET: App registration
        used for the client-credentials token
    PRIMARY_CONTACT_SOURCE: "relationship" (default) or "flagged"
    WEBHOOK_KEY: Shared key expected on webhook calls (unset disables the check)
"""

import logging
import os
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class PrimaryContactSource(Enum):
    """Where an Account's primary contact is read from."""

    RELATIONSHIP = "relationship"  # account.primarycontactid
    FLAGGED = "flagged"  # contact with isprimary = true under the account


class Settings:
    """Resolved configuration.

    Constructor arguments override the matching environment variables.

    Example:
        ```python
        settings = Settings()
        settings.web_api_url
        # https://contoso.crm.dynamics.com/api/data/v9.2
        ```
    """

    DEFAULT_API_VERSION = "v9.2"
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        dataverse_url: Optional[str] = None,
        api_version: Optional[str] = None,
        timeout: Optional[float] = None,
        tenant_id: Optional[str] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        primary_contact_source: Optional[str] = None,
        webhook_key: Optional[str] = None,
    ):
        self.dataverse_url = (dataverse_url or os.getenv("DATAVERSE_URL", "")).rstrip("/")
        self.api_version = api_version or os.getenv("DATAVERSE_API_VERSION", self.DEFAULT_API_VERSION)

        self.timeout = self.DEFAULT_TIMEOUT
        if timeout is not None:
            self.timeout = float(timeout)
        else:
            env_timeout = os.getenv("DATAVERSE_TIMEOUT")
            if env_timeout:
                try:
                    self.timeout = float(env_timeout)
                except ValueError:
                    logger.warning(
                        f"Invalid DATAVERSE_TIMEOUT '{env_timeout}', defaulting to {self.DEFAULT_TIMEOUT}"
                    )

        self.tenant_id = tenant_id or os.getenv("AZURE_TENANT_ID", "")
        self.client_id = client_id or os.getenv("AZURE_CLIENT_ID", "")
        self.client_secret = client_secret or os.getenv("AZURE_CLIENT_SECRET", "")

        source_str = primary_contact_source or os.getenv("PRIMARY_CONTACT_SOURCE", "relationship")
        try:
            self.primary_contact_source = PrimaryContactSource(source_str.lower())
        except ValueError:
            logger.warning(
                f"Invalid PRIMARY_CONTACT_SOURCE '{source_str}', defaulting to 'relationship'"
            )
            self.primary_contact_source = PrimaryContactSource.RELATIONSHIP

        self.webhook_key = webhook_key if webhook_key is not None else os.getenv("WEBHOOK_KEY")

        logger.info(
            f"Settings initialized: dataverse_url={self.dataverse_url or '<unset>'}, "
            f"api_version={self.api_version}, "
            f"primary_contact_source={self.primary_contact_source.value}"
        )

    @property
    def web_api_url(self) -> str:
        """Base URL of the Web API endpoint."""
        return f"{self.dataverse_url}/api/data/{self.api_version}"

    @property
    def token_scope(self) -> str:
        """OAuth scope granting access to the organization."""
        return f"{self.dataverse_url}/.default"


# Singleton instance for global access
_settings_instance: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the global Settings instance."""
    global _settings_instance

    if _settings_instance is None:
        _settings_instance = Settings()

    return _settings_instance


def reset_settings():
    """Reset the global Settings instance.

    Used for testing or reconfiguration.
    """
    global _settings_instance
    _settings_instance = None
    logger.warning("Settings instance reset")
