from __future__ import annotations

from datetime import date
from pathlib import Path

from streamlit.testing.v1 import AppTest

from src.auth.gateway import AuthFailureKind, AuthGateway, AuthResult
from src.catalog.remote import CatalogFetchError
from src.catalog.store import load_bundled_catalog
from src.io.snapshotting import write_catalog_snapshot

APP_PATH = Path(__file__).resolve().parents[1] / "app" / "main.py"


def _app() -> AppTest:
    return AppTest.from_file(str(APP_PATH), default_timeout=30)


def _configure_backend(monkeypatch) -> None:
    monkeypatch.setattr("src.backend.settings.load_dotenv", lambda: False)
    monkeypatch.setenv("SUPABASE_URL", "https://demo.supabase.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
    monkeypatch.delenv("SCHOLARMATCH_CATALOG_TABLE", raising=False)
    monkeypatch.setattr("src.backend.client.create_backend_client", lambda settings: object())


def _click(at: AppTest, label: str) -> None:
    next(button for button in at.button if button.label == label).click().run()


def _markdown_values(at: AppTest) -> list[str]:
    return [element.value for element in at.markdown]


def test_live_catalog_is_fetched_once_per_session(monkeypatch) -> None:
    _configure_backend(monkeypatch)
    fetched_tables: list[str] = []

    def _fake_fetch(client, table):  # noqa: ANN001
        fetched_tables.append(table)
        return load_bundled_catalog()

    monkeypatch.setattr("src.catalog.remote.fetch_remote_catalog", _fake_fetch)

    at = _app()
    at.session_state["catalog_source"] = "live"
    at.run()
    at.text_input(key="filter_search").set_value("d").run()
    at.text_input(key="filter_search").set_value("da").run()
    at.button(key="save_2").click().run()

    assert not at.exception
    assert fetched_tables == ["scholarships"]

    at.button(key="refresh_live_catalog").click().run()

    assert fetched_tables == ["scholarships", "scholarships"]


def test_failed_live_fetch_is_not_retried_on_rerun(monkeypatch) -> None:
    _configure_backend(monkeypatch)
    attempts: list[str] = []

    def _failing_fetch(client, table):  # noqa: ANN001
        attempts.append(table)
        raise CatalogFetchError("Could not load the 'scholarships' table: timeout")

    monkeypatch.setattr("src.catalog.remote.fetch_remote_catalog", _failing_fetch)

    at = _app()
    at.session_state["catalog_source"] = "live"
    at.run()
    at.run()

    assert [element.value for element in at.error] == ["Error loading scholarships."]
    assert attempts == ["scholarships"]


def test_snapshot_source_picks_up_newer_snapshot(monkeypatch, tmp_path: Path) -> None:
    catalog = load_bundled_catalog()
    first = write_catalog_snapshot(catalog.head(1), processed_dir=tmp_path, run_date=date(2026, 1, 5))
    latest = {"path": first}
    monkeypatch.setattr(
        "src.io.snapshotting.get_latest_snapshot_path", lambda processed_dir: latest["path"]
    )

    at = _app()
    at.session_state["catalog_source"] = "snapshot"
    at.run()
    assert "Found 1 scholarship" in _markdown_values(at)

    latest["path"] = write_catalog_snapshot(
        catalog.head(2), processed_dir=tmp_path, run_date=date(2026, 1, 6)
    )
    at.run()

    assert "Found 2 scholarships" in _markdown_values(at)


def test_failed_sign_in_stays_on_account_view(monkeypatch) -> None:
    _configure_backend(monkeypatch)
    monkeypatch.setattr(
        AuthGateway,
        "sign_in",
        lambda self, email, password: AuthResult.failed(
            AuthFailureKind.INVALID_CREDENTIALS, "Invalid login credentials"
        ),
    )

    at = _app()
    at.session_state["nav_view"] = "Account"
    at.run()
    at.text_input(key="auth_email").set_value("student@example.com")
    at.text_input(key="auth_password").set_value("wrong-password")
    _click(at, "Log In")

    assert not at.exception
    assert at.session_state["nav_view"] == "Account"
    assert [element.value for element in at.error] == ["Invalid login credentials"]
    assert at.session_state["auth_session"] is None


def test_successful_sign_in_redirects_to_discover(monkeypatch) -> None:
    _configure_backend(monkeypatch)
    monkeypatch.setattr("src.auth.gateway.REDIRECT_DELAY_SECONDS", 0)
    monkeypatch.setattr(
        AuthGateway,
        "sign_in",
        lambda self, email, password: AuthResult.succeeded(
            "Successfully logged in!", session={"access_token": "token-123"}
        ),
    )

    at = _app()
    at.session_state["nav_view"] = "Account"
    at.run()
    at.text_input(key="auth_email").set_value("student@example.com")
    at.text_input(key="auth_password").set_value("hunter22")
    _click(at, "Log In")

    assert not at.exception
    assert at.session_state["nav_view"] == "Discover"
    assert at.session_state["auth_session"] == {"access_token": "token-123"}
