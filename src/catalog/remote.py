from __future__ import annotations

import logging
import time

import httpx
import pandas as pd
from supabase import Client, PostgrestAPIError

from src.backend.settings import DEFAULT_CATALOG_TABLE
from src.catalog.store import normalize_records

logger = logging.getLogger(__name__)

CATALOG_ERROR_MESSAGE = "Error loading scholarships."
_SLOW_QUERY_SECONDS = 5.0


class CatalogFetchError(RuntimeError):
    """Raised when the catalog query cannot be completed."""


def fetch_remote_catalog(client: Client, table: str = DEFAULT_CATALOG_TABLE) -> pd.DataFrame:
    """Read every scholarship row from the backend table and validate it.

    One query, no retry. Malformed rows surface as ``CatalogValidationError``.
    """

    started_at = time.monotonic()
    try:
        response = client.table(table).select("*").execute()
    except PostgrestAPIError as exc:
        logger.error("Catalog query against table %s was rejected: %s", table, exc.message)
        raise CatalogFetchError(f"Could not load the '{table}' table: {exc.message}") from exc
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("Catalog query against table %s failed: %s", table, exc)
        raise CatalogFetchError(f"Could not load the '{table}' table: {exc}") from exc

    elapsed = time.monotonic() - started_at
    if elapsed > _SLOW_QUERY_SECONDS:
        logger.warning("Slow catalog query %.3fs on table %s", elapsed, table)

    rows = response.data
    if not isinstance(rows, list):
        raise CatalogFetchError(
            f"Catalog query returned {type(rows).__name__}, expected a list of rows."
        )

    catalog = normalize_records(rows)
    logger.info("Fetched %d scholarships from table %s", len(catalog), table)
    return catalog
