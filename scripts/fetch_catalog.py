from __future__ import annotations

import argparse
import logging
import sys
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from src.backend.client import create_backend_client
from src.backend.settings import BackendConfigError, BackendSettings
from src.catalog.remote import CatalogFetchError, fetch_remote_catalog
from src.catalog.schema import CatalogValidationError
from src.io.snapshotting import write_catalog_snapshot

logger = logging.getLogger("fetch_catalog")

DEFAULT_PROCESSED_DIR = ROOT_DIR / "data" / "processed"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Fetch the scholarship catalog from the backend and write a local snapshot."
    )
    parser.add_argument("--processed-dir", type=Path, default=DEFAULT_PROCESSED_DIR)
    parser.add_argument(
        "--date",
        type=str,
        default=None,
        help="Snapshot date in YYYYMMDD format. Defaults to current UTC date.",
    )
    return parser.parse_args(argv)


def _coerce_run_date(run_date: str | None) -> date:
    if run_date is None:
        return datetime.now(tz=UTC).date()
    return datetime.strptime(run_date, "%Y%m%d").date()


def _resolve_repo_path(path: Path) -> Path:
    if path.is_absolute():
        return path
    return ROOT_DIR / path


def fetch_catalog(
    *,
    run_date: date | None = None,
    processed_dir: Path | None = None,
    settings: BackendSettings | None = None,
) -> dict[str, Any]:
    resolved_settings = settings or BackendSettings.from_env()
    resolved_processed_dir = _resolve_repo_path(processed_dir or DEFAULT_PROCESSED_DIR)

    client = create_backend_client(resolved_settings)
    catalog = fetch_remote_catalog(client, resolved_settings.catalog_table)

    snapshot_path = write_catalog_snapshot(
        catalog,
        processed_dir=resolved_processed_dir,
        run_date=run_date,
    )
    logger.info("Wrote %d scholarships to %s", len(catalog), snapshot_path)
    return {
        "snapshot": str(snapshot_path.resolve()),
        "records": len(catalog),
        "table": resolved_settings.catalog_table,
    }


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        summary = fetch_catalog(
            run_date=_coerce_run_date(args.date),
            processed_dir=args.processed_dir,
        )
    except BackendConfigError as exc:
        logger.error("Backend is not configured: %s", exc)
        return 1
    except (CatalogFetchError, CatalogValidationError):
        logger.exception("Catalog fetch failed.")
        return 1

    print(f"Wrote snapshot: {summary['snapshot']}")
    print(f"Records: {summary['records']} (table={summary['table']})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
