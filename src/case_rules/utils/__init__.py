"""Utility Functions"""

from case_rules.utils.resilience import (
    service_startup_retry,
    verify_dataverse_connection,
)

__all__ = [
    "service_startup_retry",
    "verify_dataverse_connection",
]
