from __future__ import annotations

import json
import re
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

import pandas as pd

from src.catalog.schema import CATALOG_COLUMNS
from src.catalog.store import load_catalog_file

SNAPSHOT_PREFIX = "catalog_snapshot_"
SNAPSHOT_PATTERN = re.compile(r"^catalog_snapshot_(\d{8})\.json$")


def _coerce_output_date(run_date: date | str | None) -> date:
    if run_date is None:
        return datetime.now(tz=UTC).date()
    if isinstance(run_date, date):
        return run_date
    return datetime.strptime(run_date, "%Y%m%d").date()


def _snapshot_filename(run_date: date) -> str:
    return f"{SNAPSHOT_PREFIX}{run_date.strftime('%Y%m%d')}.json"


def _jsonable(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if hasattr(value, "item") and not isinstance(value, (str, bytes)):
        # numpy scalars from DataFrame rows
        return value.item()
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def catalog_to_rows(catalog: pd.DataFrame) -> list[dict[str, Any]]:
    if catalog.empty:
        return []
    rows = catalog[CATALOG_COLUMNS].to_dict(orient="records")
    return [_jsonable(row) for row in rows]


def list_snapshot_files(processed_dir: Path) -> list[Path]:
    snapshots: list[tuple[datetime, Path]] = []
    for candidate in processed_dir.glob(f"{SNAPSHOT_PREFIX}*.json"):
        match = SNAPSHOT_PATTERN.match(candidate.name)
        if not match:
            continue
        snapshot_date = datetime.strptime(match.group(1), "%Y%m%d")
        snapshots.append((snapshot_date, candidate))

    snapshots.sort(key=lambda item: item[0])
    return [item[1] for item in snapshots]


def get_latest_snapshot_path(processed_dir: Path) -> Path | None:
    snapshots = list_snapshot_files(processed_dir)
    if not snapshots:
        return None
    return snapshots[-1]


def load_latest_snapshot_df(processed_dir: Path) -> pd.DataFrame:
    latest_path = get_latest_snapshot_path(processed_dir)
    if latest_path is None:
        raise FileNotFoundError(
            f"No catalog snapshot found in '{processed_dir}'. "
            "Run scripts/fetch_catalog.py to write catalog_snapshot_YYYYMMDD.json."
        )
    return load_catalog_file(latest_path)


def write_json_atomic(payload: Any, output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = output_path.parent / f"{output_path.name}.{uuid4().hex}.tmp"
    try:
        temp_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
        temp_path.replace(output_path)
    finally:
        if temp_path.exists():
            temp_path.unlink()


def write_catalog_snapshot(
    catalog: pd.DataFrame,
    *,
    processed_dir: Path,
    run_date: date | str | None = None,
) -> Path:
    snapshot_path = processed_dir / _snapshot_filename(_coerce_output_date(run_date))
    write_json_atomic(catalog_to_rows(catalog), snapshot_path)
    return snapshot_path
