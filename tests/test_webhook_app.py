"""Tests for the webhook service."""

import pytest
from fastapi.testclient import TestClient

from case_rules.config import Settings
from case_rules.guard import DUPLICATE_CASE_MESSAGE
from case_rules.webhook import create_app

from conftest import (
    FakeOrganizationService,
    FakeServiceFactory,
    create_payload,
    customer_reference,
)

ENDPOINT = "/api/v1/webhooks/case-create"


def make_client(rows=None, error=None, webhook_key=""):
    settings = Settings(dataverse_url="https://contoso.crm.dynamics.com", webhook_key=webhook_key)
    factory = FakeServiceFactory(FakeOrganizationService(rows=rows, error=error))
    return TestClient(create_app(settings=settings, service_factory=factory))


def test_health():
    response = make_client().get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_allows_case_without_active_duplicate():
    response = make_client(rows=[]).post(ENDPOINT, json=create_payload(customer=customer_reference()))

    assert response.status_code == 200
    assert response.json() == {"allowed": True}


def test_rejects_duplicate_with_400():
    client = make_client(rows=[{"incidentid": "c0ffee00-0000-0000-0000-000000000001"}])

    response = client.post(
        ENDPOINT,
        json=create_payload(customer=customer_reference()),
        headers={"x-ms-dynamics-organization": "contoso.crm.dynamics.com"},
    )

    assert response.status_code == 400
    assert response.json() == {
        "allowed": False,
        "message": DUPLICATE_CASE_MESSAGE,
        "unexpected": False,
    }


def test_unexpected_failure_rejects():
    response = make_client(error=RuntimeError("boom")).post(
        ENDPOINT, json=create_payload(customer=customer_reference())
    )

    assert response.status_code == 400
    assert response.json()["unexpected"] is True


def test_malformed_body_is_unprocessable():
    response = make_client().post(ENDPOINT, json={"InputParameters": []})

    assert response.status_code == 422


def test_missing_dataverse_url_fails_fast(monkeypatch):
    monkeypatch.delenv("DATAVERSE_URL", raising=False)

    with pytest.raises(ValueError, match="DATAVERSE_URL"):
        create_app(settings=Settings(webhook_key=""))


def test_injected_service_factory_needs_no_dataverse_url(monkeypatch):
    monkeypatch.delenv("DATAVERSE_URL", raising=False)
    factory = FakeServiceFactory(FakeOrganizationService())

    app = create_app(settings=Settings(webhook_key=""), service_factory=factory)

    assert TestClient(app).get("/health").status_code == 200


class TestWebhookKey:
    def test_missing_key_is_rejected(self):
        response = make_client(webhook_key="s3cret").post(
            ENDPOINT, json=create_payload(customer=customer_reference())
        )

        assert response.status_code == 401

    def test_wrong_key_is_rejected(self):
        response = make_client(webhook_key="s3cret").post(
            ENDPOINT,
            json=create_payload(customer=customer_reference()),
            headers={"x-webhook-key": "nope"},
        )

        assert response.status_code == 401

    def test_header_key_is_accepted(self):
        response = make_client(rows=[], webhook_key="s3cret").post(
            ENDPOINT,
            json=create_payload(customer=customer_reference()),
            headers={"x-webhook-key": "s3cret"},
        )

        assert response.status_code == 200

    def test_query_code_is_accepted(self):
        response = make_client(rows=[], webhook_key="s3cret").post(
            f"{ENDPOINT}?code=s3cret", json=create_payload(customer=customer_reference())
        )

        assert response.status_code == 200

    def test_health_skips_key(self):
        response = make_client(webhook_key="s3cret").get("/health")

        assert response.status_code == 200
