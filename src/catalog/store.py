from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

import pandas as pd

from src.catalog.schema import CATALOG_COLUMNS, CatalogValidationError, ScholarshipRecord

ROOT_DIR = Path(__file__).resolve().parents[2]
BUNDLED_CATALOG_PATH = ROOT_DIR / "data" / "catalog" / "scholarships.json"

ANY_OPTION = "any"
MAJOR_OPTIONS = (
    ANY_OPTION,
    "Engineering",
    "Computer Science",
    "Business",
    "Sciences",
    "Humanities",
    "Arts",
)
REGION_OPTIONS = ("Asia", "Europe", "Oceania", "Americas")

logger = logging.getLogger(__name__)


def normalize_records(rows: Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    """Validate raw catalog rows and return them as a DataFrame in input order.

    Every row is checked before raising, so a single ``CatalogValidationError``
    reports all malformed rows and duplicate ids at once.
    """

    records: list[ScholarshipRecord] = []
    problems: list[str] = []
    seen_ids: set[int] = set()

    for position, row in enumerate(rows):
        if not isinstance(row, Mapping):
            problems.append(f"row {position}: expected an object, got {type(row).__name__}.")
            continue
        try:
            record = ScholarshipRecord.from_mapping(row)
        except CatalogValidationError as exc:
            problems.append(str(exc))
            continue
        if record.id in seen_ids:
            problems.append(f"row id={record.id!r}: duplicate id.")
            continue
        seen_ids.add(record.id)
        records.append(record)

    if problems:
        raise CatalogValidationError(
            f"Catalog has {len(problems)} invalid row(s): " + " ".join(problems)
        )

    if not records:
        return pd.DataFrame(columns=CATALOG_COLUMNS)

    df = pd.DataFrame([record.to_dict() for record in records])
    return df[CATALOG_COLUMNS].reset_index(drop=True)


def load_catalog_file(path: Path) -> pd.DataFrame:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        payload = payload.get("records")
    if not isinstance(payload, list):
        raise CatalogValidationError(f"{path.name} must contain a list of scholarship rows.")
    catalog = normalize_records(payload)
    logger.info("Loaded %d scholarships from %s", len(catalog), path)
    return catalog


def load_bundled_catalog(path: Path | None = None) -> pd.DataFrame:
    return load_catalog_file(path or BUNDLED_CATALOG_PATH)


def country_options(catalog: pd.DataFrame) -> list[str]:
    if catalog.empty:
        return [ANY_OPTION]
    return [ANY_OPTION, *catalog["country"].drop_duplicates().tolist()]


def record_by_id(catalog: pd.DataFrame, record_id: int) -> ScholarshipRecord | None:
    if catalog.empty:
        return None
    matches = catalog[catalog["id"] == record_id]
    if matches.empty:
        return None
    row = matches.iloc[0].to_dict()
    row["id"] = int(row["id"])
    row["match_score"] = int(row["match_score"])
    row["fully_funded"] = bool(row["fully_funded"])
    return ScholarshipRecord.from_mapping(row)
