"""Tests for Customer resolution and pipeline context parsing."""

import pytest

from case_rules.models import (
    AccountCustomer,
    ContactCustomer,
    ContactRecord,
    Entity,
    EntityReference,
    LookupValue,
    OtherCustomer,
    PluginExecutionContext,
    customer_from_lookup,
    format_guid,
)

from conftest import ACCOUNT_ID, CONTACT_ID, create_payload, customer_reference, lookup


class TestCustomerFromLookup:
    @pytest.mark.parametrize("value", [None, []])
    def test_empty_lookup_is_no_customer(self, value):
        assert customer_from_lookup(value) is None

    def test_account(self):
        assert customer_from_lookup(lookup("account", ACCOUNT_ID)) == AccountCustomer(id=ACCOUNT_ID)

    def test_contact(self):
        assert customer_from_lookup(lookup("contact", CONTACT_ID)) == ContactCustomer(id=CONTACT_ID)

    def test_unrecognised_type(self):
        customer = customer_from_lookup(lookup("lead", ACCOUNT_ID))

        assert customer == OtherCustomer(id=ACCOUNT_ID, entity_type="lead")

    def test_accepts_lookup_models(self):
        value = [LookupValue(id=ACCOUNT_ID, entity_type="Account")]

        assert customer_from_lookup(value) == AccountCustomer(id=ACCOUNT_ID)

    def test_entry_without_id_is_no_customer(self):
        assert customer_from_lookup([{"entityType": "account"}]) is None

    def test_entry_without_type_is_other_customer(self):
        customer = customer_from_lookup([{"id": "{" + ACCOUNT_ID.upper() + "}"}])

        assert customer == OtherCustomer(id=ACCOUNT_ID, entity_type="")


def test_format_guid_strips_braces_and_lowercases():
    assert format_guid("{5A9E2F10-1C2B-4D3E-8F40-112233445566}") == ACCOUNT_ID


def test_contact_record_to_lookup():
    record = ContactRecord(contactid="{" + CONTACT_ID.upper() + "}", fullname="Dana Reyes")

    assert record.to_lookup() == [
        LookupValue(id=CONTACT_ID, entity_type="contact", name="Dana Reyes")
    ]


class TestPluginExecutionContext:
    def test_parses_remote_execution_context(self):
        context = PluginExecutionContext.model_validate(
            create_payload(customer=customer_reference("account", ACCOUNT_ID.upper()))
        )

        assert context.message_name == "Create"
        assert context.primary_entity_name == "incident"
        assert context.stage == 20
        target = context.target
        assert isinstance(target, Entity)
        assert target.logical_name == "incident"
        assert target.attributes["title"] == "Printer jammed"
        assert target.attributes["customerid"] == EntityReference(id=ACCOUNT_ID, entity_type="account")

    def test_missing_target(self):
        context = PluginExecutionContext(message_name="Create", primary_entity_name="incident")

        assert context.target is None
