from __future__ import annotations

import pytest
from supabase import SupabaseException

from src.backend.client import create_backend_client
from src.backend.settings import BackendConfigError, BackendSettings, is_configured


def _settings() -> BackendSettings:
    return BackendSettings(url="https://demo.supabase.co/", anon_key="anon-key", request_timeout_seconds=7.5)


def test_settings_from_mapping_applies_defaults() -> None:
    settings = BackendSettings.from_mapping(
        {"SUPABASE_URL": "https://demo.supabase.co/", "SUPABASE_ANON_KEY": "anon"}
    )

    assert settings.url == "https://demo.supabase.co"
    assert settings.catalog_table == "scholarships"
    assert settings.request_timeout_seconds == 20.0


@pytest.mark.parametrize(
    "values",
    [
        {"SUPABASE_ANON_KEY": "anon"},
        {"SUPABASE_URL": "https://demo.supabase.co"},
        {
            "SUPABASE_URL": "https://demo.supabase.co",
            "SUPABASE_ANON_KEY": "anon",
            "SCHOLARMATCH_REQUEST_TIMEOUT": "soon",
        },
    ],
)
def test_settings_from_mapping_rejects_incomplete_config(values) -> None:
    with pytest.raises(BackendConfigError):
        BackendSettings.from_mapping(values)


def test_is_configured_reads_environment(monkeypatch) -> None:
    monkeypatch.setattr("src.backend.settings.load_dotenv", lambda: False)
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)
    assert not is_configured()

    monkeypatch.setenv("SUPABASE_URL", "https://demo.supabase.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
    monkeypatch.setenv("SCHOLARMATCH_CATALOG_TABLE", "listings")
    assert is_configured()
    assert BackendSettings.from_env().catalog_table == "listings"


def test_create_backend_client_passes_settings_to_supabase(monkeypatch) -> None:
    captured: dict = {}

    def _fake_create_client(url, key, options=None):  # noqa: ANN001
        captured.update(url=url, key=key, options=options)
        return "client"

    monkeypatch.setattr("src.backend.client.create_client", _fake_create_client)

    assert create_backend_client(_settings()) == "client"
    assert captured["url"] == "https://demo.supabase.co"
    assert captured["key"] == "anon-key"
    assert captured["options"].postgrest_client_timeout == 7.5
    assert captured["options"].auto_refresh_token is False
    assert captured["options"].persist_session is False


def test_create_backend_client_reports_rejected_settings(monkeypatch) -> None:
    def _reject(url, key, options=None):  # noqa: ANN001
        raise SupabaseException("Invalid API key")

    monkeypatch.setattr("src.backend.client.create_client", _reject)

    with pytest.raises(BackendConfigError, match="Invalid API key"):
        create_backend_client(_settings())
