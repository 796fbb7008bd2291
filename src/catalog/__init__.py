"""Scholarship catalog: record schema, validation and loading."""

from src.catalog.schema import CATALOG_COLUMNS, CatalogValidationError, ScholarshipRecord
from src.catalog.store import (
    ANY_OPTION,
    MAJOR_OPTIONS,
    REGION_OPTIONS,
    country_options,
    load_bundled_catalog,
    normalize_records,
    record_by_id,
)

__all__ = [
    "ANY_OPTION",
    "CATALOG_COLUMNS",
    "CatalogValidationError",
    "MAJOR_OPTIONS",
    "REGION_OPTIONS",
    "ScholarshipRecord",
    "country_options",
    "load_bundled_catalog",
    "normalize_records",
    "record_by_id",
]
