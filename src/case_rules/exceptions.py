"""Exception types raised by the Case rules."""

from typing import Optional


class CaseRulesError(Exception):
    """Base class for Case rule errors."""


class InvalidPluginExecutionError(CaseRulesError):
    """Rejects the operation in progress and aborts the platform transaction.

    Raised both for business-rule violations and for unexpected failures.
    The latter set ``unexpected`` and chain the original error via
    ``raise ... from`` so diagnostics keep the root cause.
    """

    def __init__(self, message: str, unexpected: bool = False):
        super().__init__(message)
        self.message = message
        self.unexpected = unexpected


class DataverseRequestError(CaseRulesError):
    """A Dataverse Web API call returned a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
