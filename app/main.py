from __future__ import annotations

import logging
import sys
import time
from datetime import date
from pathlib import Path

import pandas as pd
import streamlit as st

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app.helpers import (
    EMPTY_COLUMN_TEXT,
    NEXT_ACTION_LABELS,
    STATUS_COLUMN_TITLES,
    format_days_remaining,
    format_deadline,
    format_match_score,
    format_short_deadline,
    option_label,
    result_count_text,
)
from src.auth.gateway import REDIRECT_DELAY_SECONDS, AuthGateway, AuthResult, guidance_for
from src.backend.client import create_backend_client
from src.backend.settings import BackendConfigError, BackendSettings, is_configured
from src.catalog.remote import CATALOG_ERROR_MESSAGE, CatalogFetchError, fetch_remote_catalog
from src.catalog.schema import CatalogValidationError
from src.catalog.store import (
    MAJOR_OPTIONS,
    REGION_OPTIONS,
    country_options,
    load_bundled_catalog,
    load_catalog_file,
)
from src.discover.filters import ANY, DeadlineBucket, FilterState, apply_filters, days_remaining
from src.io.snapshotting import get_latest_snapshot_path
from src.tracker.status import (
    TRACKED_STATUSES,
    ApplicationStatus,
    InvalidTransitionError,
    StatusBoard,
    list_by_status,
    status_counts,
)

PROCESSED_DIR = ROOT_DIR / "data" / "processed"
VIEWS = ("Discover", "My Tracker", "Account")
CATALOG_SOURCES = {
    "bundled": "Bundled sample",
    "snapshot": "Latest snapshot",
    "live": "Live backend",
}

logger = logging.getLogger(__name__)


def _ensure_session_state() -> None:
    st.session_state.setdefault("nav_view", VIEWS[0])
    st.session_state.setdefault("catalog_source", "bundled")
    st.session_state.setdefault("filter_state", FilterState())
    st.session_state.setdefault("status_board", StatusBoard())
    st.session_state.setdefault("tracker_error", None)
    st.session_state.setdefault("auth_mode", "sign_in")
    st.session_state.setdefault("auth_result", None)
    st.session_state.setdefault("auth_session", None)
    st.session_state.setdefault("pending_view", None)
    st.session_state.setdefault("live_catalog", None)
    st.session_state.setdefault("live_catalog_fetched", False)

    st.session_state.setdefault("filter_search", "")
    st.session_state.setdefault("filter_country", ANY)
    st.session_state.setdefault("filter_major", ANY)
    for bucket in DeadlineBucket:
        st.session_state.setdefault(f"filter_bucket_{bucket.value}", False)
    for region in REGION_OPTIONS:
        st.session_state.setdefault(f"filter_region_{region}", False)


def _filter_state_from_widgets() -> FilterState:
    return FilterState(
        search_text=str(st.session_state.get("filter_search") or ""),
        country=str(st.session_state.get("filter_country") or ANY),
        major=str(st.session_state.get("filter_major") or ANY),
        deadline_buckets=frozenset(
            bucket for bucket in DeadlineBucket if st.session_state.get(f"filter_bucket_{bucket.value}")
        ),
        regions=frozenset(
            region for region in REGION_OPTIONS if st.session_state.get(f"filter_region_{region}")
        ),
    )


@st.cache_data(show_spinner=False)
def _load_bundled_cached() -> pd.DataFrame:
    return load_bundled_catalog()


@st.cache_data(show_spinner=False)
def _load_snapshot_cached(snapshot_path_text: str, modified_ns: int) -> pd.DataFrame:
    return load_catalog_file(Path(snapshot_path_text))


def _load_latest_snapshot() -> pd.DataFrame:
    latest_path = get_latest_snapshot_path(PROCESSED_DIR)
    if latest_path is None:
        raise FileNotFoundError(
            f"No catalog snapshot found in '{PROCESSED_DIR}'. Run scripts/fetch_catalog.py first."
        )
    return _load_snapshot_cached(str(latest_path), latest_path.stat().st_mtime_ns)


def _fetch_live_catalog() -> pd.DataFrame:
    settings = BackendSettings.from_env()
    client = create_backend_client(settings)
    return fetch_remote_catalog(client, settings.catalog_table)


def _read_catalog(source: str) -> pd.DataFrame | None:
    try:
        if source == "live":
            return _fetch_live_catalog()
        if source == "snapshot":
            return _load_latest_snapshot()
        return _load_bundled_cached()
    except (BackendConfigError, CatalogFetchError, CatalogValidationError, FileNotFoundError) as exc:
        logger.error("Error loading scholarships from %s: %s", source, exc)
        return None


def _load_catalog(source: str) -> pd.DataFrame | None:
    # The live table is queried once per session, failures included.
    if source == "live":
        if not st.session_state.live_catalog_fetched:
            st.session_state.live_catalog = _read_catalog(source)
            st.session_state.live_catalog_fetched = True
        return st.session_state.live_catalog
    return _read_catalog(source)


def _refresh_live_catalog() -> None:
    st.session_state.live_catalog = None
    st.session_state.live_catalog_fetched = False


def _dispatch_toggle_save(scholarship_id: int) -> None:
    board: StatusBoard = st.session_state.status_board
    try:
        st.session_state.status_board = board.toggle_save(scholarship_id)
        st.session_state.tracker_error = None
    except InvalidTransitionError as exc:
        st.session_state.tracker_error = str(exc)


def _dispatch_advance(scholarship_id: int, target: ApplicationStatus) -> None:
    board: StatusBoard = st.session_state.status_board
    try:
        st.session_state.status_board = board.advance(scholarship_id, target)
        st.session_state.tracker_error = None
    except InvalidTransitionError as exc:
        st.session_state.tracker_error = str(exc)


def _switch_auth_mode() -> None:
    st.session_state.auth_mode = "sign_up" if st.session_state.auth_mode == "sign_in" else "sign_in"
    st.session_state.auth_result = None


def _render_filters(catalog: pd.DataFrame) -> None:
    st.header("Filters")
    countries = country_options(catalog)
    if st.session_state.filter_country not in countries:
        st.session_state.filter_country = ANY
    st.selectbox(
        "Country",
        options=countries,
        format_func=lambda value: option_label(value, "All Countries"),
        key="filter_country",
    )
    st.selectbox(
        "Field of study",
        options=MAJOR_OPTIONS,
        format_func=lambda value: option_label(value, "All Majors"),
        key="filter_major",
    )

    st.subheader("Deadline")
    for bucket in DeadlineBucket:
        st.checkbox(bucket.label, key=f"filter_bucket_{bucket.value}")

    st.subheader("Region")
    for region in REGION_OPTIONS:
        st.checkbox(region, key=f"filter_region_{region}")


def _render_scholarship_card(row: pd.Series, board: StatusBoard, today: date) -> None:
    scholarship_id = int(row["id"])
    with st.container(border=True):
        title_col, action_col = st.columns([4, 1])
        title_col.subheader(str(row["title"]))
        title_col.caption(f"{row['provider']} · {row['country']} · {row['region']}")

        saved = board.is_saved(scholarship_id)
        action_col.button(
            "Saved" if saved else "Save",
            key=f"save_{scholarship_id}",
            type="primary" if saved else "secondary",
            on_click=_dispatch_toggle_save,
            args=(scholarship_id,),
            use_container_width=True,
        )

        badges = [format_match_score(row["match_score"])]
        if bool(row["fully_funded"]):
            badges.insert(0, str(row["funding_type"]))
        st.write(" | ".join(badges))
        st.write(str(row["description"]))

        remaining = days_remaining(row["deadline"], today)
        st.caption(
            f"Deadline: {format_deadline(row['deadline'])} ({format_days_remaining(remaining)})"
            f" · Fields: {', '.join(row['eligible_fields'])}"
        )


def _render_discover(catalog: pd.DataFrame, today: date) -> None:
    st.header("Discover Your Path to Success")
    st.caption("Find fully-funded undergraduate scholarships tailored to your profile")

    search_col, smart_col = st.columns([4, 1])
    search_col.text_input(
        "Search",
        placeholder="Search scholarships by title, country, or provider...",
        key="filter_search",
        label_visibility="collapsed",
    )
    smart_col.toggle(
        "Smart Match",
        key="smart_match",
        help="Personalised matching is not available yet; results are unaffected.",
    )

    filter_state: FilterState = st.session_state.filter_state
    filtered = apply_filters(catalog, filter_state, today=today)
    st.write(result_count_text(len(filtered)))

    board: StatusBoard = st.session_state.status_board
    for _, row in filtered.iterrows():
        _render_scholarship_card(row, board, today)

    if filtered.empty:
        st.subheader("No scholarships found")
        st.caption("Try adjusting your filters or search terms")


def _render_tracker(catalog: pd.DataFrame) -> None:
    st.header("My Scholarship Tracker")
    st.caption("Manage your scholarship applications in one place")

    board: StatusBoard = st.session_state.status_board
    counts = status_counts(catalog, board)
    columns = st.columns(len(TRACKED_STATUSES))
    for column, status in zip(columns, TRACKED_STATUSES):
        with column:
            st.subheader(f"{STATUS_COLUMN_TITLES[status]} ({counts[status]})")
            records = list_by_status(catalog, board, status)
            for _, row in records.iterrows():
                _render_tracker_card(row, status)
            if records.empty:
                st.caption(EMPTY_COLUMN_TEXT[status])


def _render_tracker_card(row: pd.Series, status: ApplicationStatus) -> None:
    scholarship_id = int(row["id"])
    with st.container(border=True):
        st.markdown(f"**{row['title']}**")
        st.caption(str(row["provider"]))
        st.write(format_short_deadline(row["deadline"]))
        if status is ApplicationStatus.SAVED:
            st.button(
                NEXT_ACTION_LABELS[status],
                key=f"advance_{scholarship_id}",
                type="primary",
                on_click=_dispatch_advance,
                args=(scholarship_id, ApplicationStatus.IN_PROGRESS),
                use_container_width=True,
            )
        elif status is ApplicationStatus.IN_PROGRESS:
            st.button(
                NEXT_ACTION_LABELS[status],
                key=f"advance_{scholarship_id}",
                on_click=_dispatch_advance,
                args=(scholarship_id, ApplicationStatus.APPLIED),
                use_container_width=True,
            )
        else:
            st.success("Application Submitted")


def _render_auth_message(result: AuthResult) -> None:
    if result.ok:
        st.success(result.message)
        return
    st.error(result.message)
    if result.failure is not None:
        st.caption(guidance_for(result.failure.kind))


def _submit_auth(email: str, password: str, *, sign_up: bool) -> AuthResult:
    settings = BackendSettings.from_env()
    gateway = AuthGateway(create_backend_client(settings))
    if sign_up:
        return gateway.sign_up(email, password)
    return gateway.sign_in(email, password)


def _render_account() -> None:
    sign_up = st.session_state.auth_mode == "sign_up"
    st.header("Create an Account" if sign_up else "Welcome Back")

    if st.session_state.auth_session:
        st.info("You are signed in.")

    with st.form("auth_form"):
        email = st.text_input("Email", placeholder="you@example.com", key="auth_email")
        password = st.text_input("Password", type="password", key="auth_password")
        submitted = st.form_submit_button("Sign Up" if sign_up else "Log In", type="primary")

    if submitted:
        try:
            with st.spinner("Processing..."):
                result = _submit_auth(email, password, sign_up=sign_up)
        except BackendConfigError as exc:
            st.error(f"Authentication is unavailable: {exc}")
            result = None
        st.session_state.auth_result = result
        if result is not None and result.ok and not sign_up:
            st.session_state.auth_session = result.session
            _render_auth_message(result)
            time.sleep(REDIRECT_DELAY_SECONDS)
            st.session_state.pending_view = VIEWS[0]
            st.rerun()

    stored_result = st.session_state.auth_result
    if isinstance(stored_result, AuthResult):
        _render_auth_message(stored_result)

    prompt = "Already have an account?" if sign_up else "Don't have an account?"
    st.caption(prompt)
    st.button("Log In" if sign_up else "Sign Up", on_click=_switch_auth_mode)


def main() -> None:
    st.set_page_config(page_title="ScholarMatch", layout="wide")
    _ensure_session_state()

    pending_view = st.session_state.pending_view
    if pending_view is not None:
        st.session_state.nav_view = pending_view
        st.session_state.pending_view = None
        st.session_state.auth_result = None

    with st.sidebar:
        st.title("ScholarMatch")
        view = st.radio("View", options=VIEWS, key="nav_view")
        st.selectbox(
            "Catalog source",
            options=tuple(CATALOG_SOURCES),
            format_func=CATALOG_SOURCES.get,
            key="catalog_source",
        )
        if st.session_state.catalog_source == "live":
            st.button("Refresh catalog", key="refresh_live_catalog", on_click=_refresh_live_catalog)
        if not is_configured():
            st.caption("Set SUPABASE_URL and SUPABASE_ANON_KEY to use the live backend and sign-in.")

    if view == "Account":
        _render_account()
        return

    catalog = _load_catalog(st.session_state.catalog_source)
    if catalog is None:
        st.error(CATALOG_ERROR_MESSAGE)
        return

    today = date.today()
    if view == "Discover":
        with st.sidebar:
            st.divider()
            _render_filters(catalog)
        st.session_state.filter_state = _filter_state_from_widgets()

    if st.session_state.tracker_error:
        st.warning(st.session_state.tracker_error)

    if view == "Discover":
        _render_discover(catalog, today)
    else:
        _render_tracker(catalog)


if __name__ == "__main__":
    main()
