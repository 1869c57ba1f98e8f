"""Server-side Case creation guard."""

from case_rules.guard.duplicate_case import (
    DUPLICATE_CASE_MESSAGE,
    DuplicateActiveCaseGuard,
    build_active_case_query,
    has_active_case_for_customer,
)

__all__ = [
    "DUPLICATE_CASE_MESSAGE",
    "DuplicateActiveCaseGuard",
    "build_active_case_query",
    "has_active_case_for_customer",
]
