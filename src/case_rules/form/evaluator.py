"""Case form rules driven by the Customer lookup.

Handlers:
- on_load / initialize: display field visibility, then primary contact requirement
- on_customer_change: requirement, then primary contact population

Every handler reports failures through the alert channel and never raises
past its own boundary. Nothing is rolled back on failure.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Sequence

from case_rules.clients.primary_contact import PrimaryContactFetcher
from case_rules.form.alerts import AlertChannel, LoggingAlertChannel
from case_rules.form.context import ExecutionContext, FormContext
from case_rules.models.references import (
    AccountCustomer,
    ContactCustomer,
    ContactRecord,
    RequirementLevel,
    customer_from_lookup,
)

logger = logging.getLogger(__name__)

CUSTOMER_FIELD = "customerid"
PRIMARY_CONTACT_FIELD = "primarycontactid"
PRIMARY_CONTACT_QUICK_VIEW = "PrimaryContactQV"
DISPLAY_FIELDS = ("emailaddress1", "mobilephone")


class FormRuleEvaluator:
    """Applies the Case form rules to a form execution context.

    Usage:
        evaluator = FormRuleEvaluator(contact_fetcher=AccountRelationshipFetcher(client))
        evaluator.on_load(execution_context)
        task = evaluator.on_customer_change(execution_context)
        await task
    """

    def __init__(
        self,
        contact_fetcher: PrimaryContactFetcher,
        alerts: Optional[AlertChannel] = None,
        customer_field: str = CUSTOMER_FIELD,
        primary_contact_field: str = PRIMARY_CONTACT_FIELD,
        quick_view_name: str = PRIMARY_CONTACT_QUICK_VIEW,
        display_fields: Sequence[str] = DISPLAY_FIELDS,
    ):
        self.contact_fetcher = contact_fetcher
        self.alerts = alerts or LoggingAlertChannel()
        self.customer_field = customer_field
        self.primary_contact_field = primary_contact_field
        self.quick_view_name = quick_view_name
        self.display_fields = tuple(display_fields)

        # In-flight populate task per form, keyed by id() of the form context
        self._pending_populates: Dict[int, asyncio.Task] = {}

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def on_load(self, context: ExecutionContext) -> None:
        self.initialize(context)

    def on_customer_change(self, context: ExecutionContext) -> asyncio.Task:
        """Re-evaluate the requirement and repopulate the primary contact.

        A populate task still in flight from an earlier change on the same
        form is cancelled so its result can never overwrite the newer
        selection. Other forms served by this evaluator are unaffected.
        Must be called from a running event loop.

        Returns:
            The task populating the primary contact
        """
        self.reconcile_requirement(context)

        key = self._form_key(context)
        pending = self._pending_populates.get(key)
        if pending is not None and not pending.done():
            logger.debug("Cancelling in-flight primary contact fetch")
            pending.cancel()

        task = asyncio.get_running_loop().create_task(self.populate_primary_contact(context))
        self._pending_populates[key] = task
        task.add_done_callback(lambda done: self._forget_populate(key, done))
        return task

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def initialize(self, context: ExecutionContext) -> None:
        self.reconcile_display_visibility(context)
        self.reconcile_requirement(context)

    def reconcile_display_visibility(self, context: ExecutionContext) -> None:
        """Show each display field of the quick view only when it holds data."""
        try:
            form = context.get_form_context()
            quick_view = form.get_quick_view(self.quick_view_name)
            if quick_view is None or not quick_view.get_attributes():
                logger.warning(
                    f"Quick view '{self.quick_view_name}' not found or has no attributes"
                )
                return

            for field_name in self.display_fields:
                control = quick_view.get_control(field_name)
                attribute = quick_view.get_attribute(field_name)
                if control is None or attribute is None:
                    continue
                control.set_visible(bool(attribute.get_value()))
        except Exception as e:
            self._report("reconcile_display_visibility", e)

    def reconcile_requirement(self, context: ExecutionContext) -> None:
        """Set the primary contact requirement and lock state from the Customer type."""
        try:
            form = context.get_form_context()
            customer = customer_from_lookup(self._get_value(form, self.customer_field))

            if customer is None:
                self._reset_requirements(form)
                self._set_disabled(form, self.primary_contact_field, False)
            elif isinstance(customer, AccountCustomer):
                self._set_requirement(form, self.primary_contact_field, RequirementLevel.REQUIRED)
                self._set_disabled(form, self.primary_contact_field, False)
            elif isinstance(customer, ContactCustomer):
                self._set_requirement(form, self.primary_contact_field, RequirementLevel.NONE)
                self._set_disabled(form, self.primary_contact_field, True)
            else:
                logger.debug(f"No requirement rule for customer type '{customer.entity_type}'")
        except Exception as e:
            self._report("reconcile_requirement", e)

    async def populate_primary_contact(self, context: ExecutionContext) -> None:
        """Copy the Account customer's primary contact into the Case."""
        try:
            form = context.get_form_context()
            customer = customer_from_lookup(self._get_value(form, self.customer_field))

            if not isinstance(customer, AccountCustomer):
                self._clear_primary_contact(form)
                return

            contact = await self.contact_fetcher.fetch(customer.id)
            if contact is None:
                logger.info(f"Account {customer.id} has no primary contact")
                self._clear_primary_contact(form)
                return

            self._set_primary_contact(form, contact)
        except Exception as e:
            self._report("populate_primary_contact", e)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _form_key(context: ExecutionContext) -> int:
        try:
            return id(context.get_form_context())
        except Exception:
            # populate_primary_contact reports the failure
            return id(context)

    def _forget_populate(self, key: int, task: asyncio.Task) -> None:
        if self._pending_populates.get(key) is task:
            del self._pending_populates[key]

    def _report(self, operation: str, error: Exception) -> None:
        logger.exception(f"Error in {operation}: {error}")
        self.alerts.open_alert_dialog(f"An unexpected error occurred: {error}")

    @staticmethod
    def _get_value(form: FormContext, name: str) -> Any:
        attribute = form.get_attribute(name)
        return attribute.get_value() if attribute is not None else None

    @staticmethod
    def _set_requirement(form: FormContext, name: str, level: RequirementLevel) -> None:
        attribute = form.get_attribute(name)
        if attribute is not None:
            attribute.set_required_level(level)

    @staticmethod
    def _set_disabled(form: FormContext, name: str, disabled: bool) -> None:
        control = form.get_control(name)
        if control is not None:
            control.set_disabled(disabled)

    def _reset_requirements(self, form: FormContext) -> None:
        self._set_requirement(form, self.primary_contact_field, RequirementLevel.NONE)
        for field_name in self.display_fields:
            self._set_requirement(form, field_name, RequirementLevel.NONE)

    def _set_primary_contact(self, form: FormContext, contact: ContactRecord) -> None:
        attribute = form.get_attribute(self.primary_contact_field)
        if attribute is not None:
            attribute.set_value(contact.to_lookup())

    def _clear_primary_contact(self, form: FormContext) -> None:
        attribute = form.get_attribute(self.primary_contact_field)
        if attribute is not None:
            attribute.set_value(None)
