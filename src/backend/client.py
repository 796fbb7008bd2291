from __future__ import annotations

import logging

from supabase import Client, ClientOptions, SupabaseException, create_client

from src.backend.settings import BackendConfigError, BackendSettings

logger = logging.getLogger(__name__)


def create_backend_client(settings: BackendSettings) -> Client:
    """Build a Supabase client for one unit of work.

    Sessions are not persisted or refreshed in the background; the view layer
    keeps whatever it needs in Streamlit session state.
    """

    options = ClientOptions(
        postgrest_client_timeout=settings.request_timeout_seconds,
        auto_refresh_token=False,
        persist_session=False,
    )
    try:
        client = create_client(settings.url, settings.anon_key, options=options)
    except SupabaseException as exc:
        raise BackendConfigError(f"Supabase rejected the backend settings: {exc}") from exc
    logger.debug("Created Supabase client for %s", settings.url)
    return client
