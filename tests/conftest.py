"""Shared fixtures and fakes for the Case rules tests."""

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from case_rules.form import Form, FormExecutionContext
from case_rules.models import ContactRecord
from case_rules.query import QueryExpression

ACCOUNT_ID = "5a9e2f10-1c2b-4d3e-8f40-112233445566"
CONTACT_ID = "9b8a7c6d-0000-4e5f-a1b2-c3d4e5f60718"
USER_ID = "0d1e2f3a-4b5c-6d7e-8f90-a1b2c3d4e5f6"


class StaticTokenProvider:
    def __init__(self, token: str = "test-token"):
        self.token = token

    async def get_token(self) -> str:
        return self.token


class RecordingAlerts:
    def __init__(self):
        self.messages: List[str] = []

    def open_alert_dialog(self, text: str) -> None:
        self.messages.append(text)


class StubContactFetcher:
    """Returns a fixed contact per account id, optionally after a gate opens."""

    def __init__(self, contacts: Optional[Dict[str, ContactRecord]] = None, error: Optional[Exception] = None):
        self.contacts = contacts or {}
        self.error = error
        self.calls: List[str] = []
        self.gates: Dict[str, asyncio.Event] = {}

    async def fetch(self, account_id: str) -> Optional[ContactRecord]:
        self.calls.append(account_id)
        if account_id in self.gates:
            await self.gates[account_id].wait()
        if self.error is not None:
            raise self.error
        return self.contacts.get(account_id)


class FakeOrganizationService:
    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None, error: Optional[Exception] = None):
        self.rows = rows or []
        self.error = error
        self.queries: List[QueryExpression] = []

    async def retrieve_multiple(self, query: QueryExpression) -> List[Dict[str, Any]]:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return self.rows


class FakeServiceFactory:
    def __init__(self, service: FakeOrganizationService):
        self.service = service
        self.user_ids: List[Optional[str]] = []

    def create_organization_service(self, user_id: Optional[str]) -> FakeOrganizationService:
        self.user_ids.append(user_id)
        return self.service


def lookup(entity_type: str, record_id: str, name: Optional[str] = None) -> List[Dict[str, Any]]:
    return [{"id": "{" + record_id.upper() + "}", "entityType": entity_type, "name": name}]


def build_case_form(customer: Any = None, email: Any = None, mobile: Any = None, with_quick_view: bool = True) -> Form:
    form = Form()
    form.add_field("customerid", customer)
    form.add_field("primarycontactid")
    if with_quick_view:
        quick_view = form.add_quick_view("PrimaryContactQV")
        quick_view.add_field("emailaddress1", email)
        quick_view.add_field("mobilephone", mobile)
    return form


def create_payload(customer: Optional[Dict[str, Any]] = None, message: str = "Create", entity: str = "incident") -> Dict[str, Any]:
    """RemoteExecutionContext body as posted by a Dataverse webhook."""
    attributes = [{"key": "title", "value": "Printer jammed"}]
    if customer is not None:
        attributes.append({"key": "customerid", "value": customer})
    return {
        "MessageName": message,
        "PrimaryEntityName": entity,
        "UserId": USER_ID,
        "InitiatingUserId": USER_ID,
        "CorrelationId": "corr-1",
        "Stage": 20,
        "Depth": 1,
        "InputParameters": [
            {
                "key": "Target",
                "value": {
                    "__type": "Entity:http://schemas.microsoft.com/xrm/2011/Contracts",
                    "LogicalName": entity,
                    "Id": "00000000-0000-0000-0000-000000000000",
                    "Attributes": attributes,
                },
            }
        ],
    }


def customer_reference(entity_type: str = "account", record_id: str = ACCOUNT_ID) -> Dict[str, Any]:
    return {
        "__type": "EntityReference:http://schemas.microsoft.com/xrm/2011/Contracts",
        "Id": record_id,
        "LogicalName": entity_type,
        "Name": None,
    }


@pytest.fixture
def alerts():
    return RecordingAlerts()


@pytest.fixture
def token_provider():
    return StaticTokenProvider()


@pytest.fixture
def execution_context():
    def _build(**kwargs) -> FormExecutionContext:
        return FormExecutionContext(build_case_form(**kwargs))

    return _build
