"""Startup connection verification.

Per-event calls (form fetches, guard queries) are attempted exactly once.
Only the one-off connectivity check a service runs at startup is retried,
to ride out a cold identity endpoint or organization.
"""

import logging
from typing import Any, Dict

from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    before_sleep_log,
    RetryCallState,
)

from case_rules.clients.dataverse_client import DataverseClient

logger = logging.getLogger(__name__)


def _log_retry_attempt(retry_state: RetryCallState) -> None:
    """Retry logging naming the function and the last failure."""
    if retry_state.attempt_number > 1:
        logger.warning(
            f"[Resilience] Retry attempt {retry_state.attempt_number} for "
            f"{retry_state.fn.__name__} after {retry_state.seconds_since_start:.1f}s. "
            f"Exception: {retry_state.outcome.exception() if retry_state.outcome else 'Unknown'}"
        )


# Standard retry policy for service startup connections
# - Wait 2^x * 1 seconds between retries (2s, 4s, 8s, 16s)
# - Stop after 5 attempts
# - Re-raise the exception if all retries fail
service_startup_retry = retry(
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=1, min=2, max=32),
    before=_log_retry_attempt,
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)


@service_startup_retry
async def verify_dataverse_connection(client: DataverseClient) -> Dict[str, Any]:
    """Call WhoAmI until it succeeds or the retry budget is spent.

    Returns:
        The WhoAmI response (UserId, BusinessUnitId, OrganizationId)
    """
    identity = await client.who_am_i()
    logger.info(
        f"Connected to Dataverse as user {identity.get('UserId')} "
        f"in organization {identity.get('OrganizationId')}"
    )
    return identity
