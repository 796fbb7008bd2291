from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from src.catalog.store import normalize_records
from src.io.snapshotting import (
    get_latest_snapshot_path,
    list_snapshot_files,
    load_latest_snapshot_df,
    write_catalog_snapshot,
)


def _catalog():
    return normalize_records(
        [
            {
                "id": 7,
                "title": "Netherlands Fellowship Programme",
                "provider": "Dutch Government",
                "country": "Netherlands",
                "region": "Europe",
                "funding_type": "Fully Funded",
                "description": "Full scholarship for studies at Dutch institutions",
                "deadline": "2026-05-01",
                "match_score": 85,
                "fully_funded": True,
                "eligible_fields": ["Social Sciences", "Engineering"],
            }
        ]
    )


def test_write_catalog_snapshot_serializes_dates_and_numbers(tmp_path: Path) -> None:
    path = write_catalog_snapshot(_catalog(), processed_dir=tmp_path, run_date=date(2026, 2, 28))

    assert path.name == "catalog_snapshot_20260228.json"
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload == [
        {
            "country": "Netherlands",
            "deadline": "2026-05-01",
            "description": "Full scholarship for studies at Dutch institutions",
            "eligible_fields": ["Social Sciences", "Engineering"],
            "fully_funded": True,
            "funding_type": "Fully Funded",
            "id": 7,
            "match_score": 85,
            "provider": "Dutch Government",
            "region": "Europe",
            "title": "Netherlands Fellowship Programme",
        }
    ]
    assert list(tmp_path.glob("*.tmp")) == []


def test_latest_snapshot_is_picked_by_date_and_reloaded(tmp_path: Path) -> None:
    write_catalog_snapshot(_catalog(), processed_dir=tmp_path, run_date="20260105")
    newest = write_catalog_snapshot(_catalog(), processed_dir=tmp_path, run_date="20260301")
    (tmp_path / "catalog_snapshot_latest.json").write_text("[]", encoding="utf-8")

    assert [path.name for path in list_snapshot_files(tmp_path)] == [
        "catalog_snapshot_20260105.json",
        "catalog_snapshot_20260301.json",
    ]
    assert get_latest_snapshot_path(tmp_path) == newest

    reloaded = load_latest_snapshot_df(tmp_path)
    assert reloaded["id"].tolist() == [7]
    assert reloaded.loc[0, "deadline"] == date(2026, 5, 1)


def test_load_latest_snapshot_without_files_raises(tmp_path: Path) -> None:
    assert get_latest_snapshot_path(tmp_path) is None
    with pytest.raises(FileNotFoundError, match="fetch_catalog"):
        load_latest_snapshot_df(tmp_path)
