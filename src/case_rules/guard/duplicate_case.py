"""Guard allowing at most one active Case per Customer.

The check runs once, when the Case is created. It is a query followed by a
decision, so two creations racing for the same Customer can both pass.
"""

import logging
from typing import Any, Dict, List, Optional, Protocol

from case_rules.exceptions import InvalidPluginExecutionError
from case_rules.models.plugin import CREATE_MESSAGE, Entity, GuardDecision, PluginExecutionContext
from case_rules.models.references import EntityReference
from case_rules.query import ConditionExpression, QueryExpression

logger = logging.getLogger(__name__)

CASE_ENTITY = "incident"
CUSTOMER_ATTRIBUTE = "customerid"
ACTIVE_STATE = 0

DUPLICATE_CASE_MESSAGE = (
    "An active case already exists for this customer. "
    "Please resolve the active case before creating a new one."
)
UNEXPECTED_ERROR_PREFIX = "An error occurred in the Case creation plugin."


class QueryService(Protocol):
    async def retrieve_multiple(self, query: QueryExpression) -> List[Dict[str, Any]]: ...


class QueryServiceFactory(Protocol):
    def create_organization_service(self, user_id: Optional[str]) -> QueryService: ...


def build_active_case_query(customer_id: str) -> QueryExpression:
    """Active Cases of a Customer, selecting only the id.

    The Customer's type is not part of the filter; accounts and contacts
    share one identifier space.
    """
    return QueryExpression(
        entity_name=CASE_ENTITY,
        columns=["incidentid"],
        conditions=[
            ConditionExpression(attribute=CUSTOMER_ATTRIBUTE, value=customer_id, lookup=True),
            ConditionExpression(attribute="statecode", value=ACTIVE_STATE),
        ],
    )


async def has_active_case_for_customer(service: QueryService, customer_id: str) -> bool:
    cases = await service.retrieve_multiple(build_active_case_query(customer_id))
    return len(cases) > 0


class DuplicateActiveCaseGuard:
    """Rejects creation of a Case when its Customer already has an active one.

    Usage:
        guard = DuplicateActiveCaseGuard(service_factory=dataverse_client)
        await guard.execute(context)       # raises InvalidPluginExecutionError to reject
        decision = await guard.evaluate(context)
    """

    def __init__(self, service_factory: QueryServiceFactory):
        self.service_factory = service_factory

    async def execute(self, context: PluginExecutionContext) -> None:
        """Run the check for one pipeline message.

        Returns normally when the creation may proceed, including every
        message the rule does not apply to.

        Raises:
            InvalidPluginExecutionError: Duplicate active case, or any
                unexpected failure (``unexpected`` set, cause chained)
        """
        try:
            incident = self._get_created_case(context)
            if incident is None:
                logger.info("The guard cannot work with this context.")
                return

            customer = self._get_customer(incident)
            if customer is None:
                logger.info("The customer is not available.")
                return

            service = self.service_factory.create_organization_service(context.user_id)
            logger.info(f"Retrieving all active cases for customer {customer.id}.")

            if await has_active_case_for_customer(service, customer.id):
                raise InvalidPluginExecutionError(DUPLICATE_CASE_MESSAGE)

            logger.info("No active cases found for the customer. Creating case.")
        except InvalidPluginExecutionError as e:
            logger.info(e.message)
            raise
        except Exception as e:
            logger.error(f"An error occurred in the Case creation plugin: {e!r}")
            raise InvalidPluginExecutionError(
                f"{UNEXPECTED_ERROR_PREFIX} {e}", unexpected=True
            ) from e

    async def evaluate(self, context: PluginExecutionContext) -> GuardDecision:
        """Run the check and report the outcome instead of raising."""
        try:
            await self.execute(context)
        except InvalidPluginExecutionError as e:
            return GuardDecision(allowed=False, reason=e.message, unexpected=e.unexpected)
        return GuardDecision(allowed=True)

    @staticmethod
    def _get_created_case(context: PluginExecutionContext) -> Optional[Entity]:
        if context.message_name != CREATE_MESSAGE or context.primary_entity_name != CASE_ENTITY:
            return None
        target = context.target
        if not isinstance(target, Entity) or target.logical_name != CASE_ENTITY:
            return None
        return target

    @staticmethod
    def _get_customer(incident: Entity) -> Optional[EntityReference]:
        customer = incident.attributes.get(CUSTOMER_ATTRIBUTE)
        if not isinstance(customer, EntityReference) or not customer.id:
            return None
        return customer
