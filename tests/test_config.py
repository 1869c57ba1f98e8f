"""Tests for environment-driven settings."""

import pytest

from case_rules.config import PrimaryContactSource, Settings, get_settings, reset_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "DATAVERSE_URL",
        "DATAVERSE_API_VERSION",
        "DATAVERSE_TIMEOUT",
        "PRIMARY_CONTACT_SOURCE",
        "WEBHOOK_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


def test_defaults():
    settings = Settings()

    assert settings.api_version == "v9.2"
    assert settings.timeout == 30.0
    assert settings.primary_contact_source == PrimaryContactSource.RELATIONSHIP
    assert settings.webhook_key is None


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("DATAVERSE_URL", "https://contoso.crm.dynamics.com/")
    monkeypatch.setenv("DATAVERSE_TIMEOUT", "12.5")
    monkeypatch.setenv("PRIMARY_CONTACT_SOURCE", "Flagged")
    monkeypatch.setenv("WEBHOOK_KEY", "s3cret")

    settings = Settings()

    assert settings.web_api_url == "https://contoso.crm.dynamics.com/api/data/v9.2"
    assert settings.token_scope == "https://contoso.crm.dynamics.com/.default"
    assert settings.timeout == 12.5
    assert settings.primary_contact_source == PrimaryContactSource.FLAGGED
    assert settings.webhook_key == "s3cret"


def test_invalid_values_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("DATAVERSE_TIMEOUT", "soon")
    monkeypatch.setenv("PRIMARY_CONTACT_SOURCE", "crystal-ball")

    settings = Settings()

    assert settings.timeout == 30.0
    assert settings.primary_contact_source == PrimaryContactSource.RELATIONSHIP


def test_arguments_override_environment(monkeypatch):
    monkeypatch.setenv("DATAVERSE_API_VERSION", "v9.0")

    assert Settings(api_version="v9.2").api_version == "v9.2"


def test_get_settings_is_a_singleton():
    assert get_settings() is get_settings()
