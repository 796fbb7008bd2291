from __future__ import annotations

from types import SimpleNamespace

import httpx
import pytest
from supabase import PostgrestAPIError

from src.catalog.remote import CatalogFetchError, fetch_remote_catalog
from src.catalog.schema import CatalogValidationError


class _FakeQuery:
    def __init__(self, client: _FakeClient) -> None:
        self.client = client

    def select(self, columns: str) -> _FakeQuery:
        self.client.calls.append(("select", columns))
        return self

    def execute(self):
        self.client.calls.append(("execute", None))
        if self.client.error is not None:
            raise self.client.error
        return SimpleNamespace(data=self.client.rows)


class _FakeClient:
    def __init__(self, rows=None, error: Exception | None = None) -> None:  # noqa: ANN001
        self.rows = rows
        self.error = error
        self.calls: list[tuple[str, str | None]] = []

    def table(self, name: str) -> _FakeQuery:
        self.calls.append(("table", name))
        return _FakeQuery(self)


def _row(record_id: int) -> dict:
    return {
        "id": record_id,
        "title": "Korean Government Scholarship Program",
        "provider": "Korean Government",
        "country": "South Korea",
        "region": "Asia",
        "funding_type": "Fully Funded",
        "description": "Complete financial support including language training",
        "deadline": "2026-03-31",
        "match_score": 93,
        "fully_funded": True,
        "eligible_fields": ["Technology", "Business"],
    }


def test_fetch_remote_catalog_queries_table_once() -> None:
    client = _FakeClient(rows=[_row(6), _row(7)])

    catalog = fetch_remote_catalog(client)

    assert client.calls == [("table", "scholarships"), ("select", "*"), ("execute", None)]
    assert catalog["id"].tolist() == [6, 7]


def test_fetch_remote_catalog_uses_configured_table() -> None:
    client = _FakeClient(rows=[])

    catalog = fetch_remote_catalog(client, "listings")

    assert client.calls[0] == ("table", "listings")
    assert catalog.empty


def test_fetch_remote_catalog_wraps_transport_errors() -> None:
    client = _FakeClient(error=httpx.ConnectError("connection refused"))

    with pytest.raises(CatalogFetchError, match="scholarships"):
        fetch_remote_catalog(client)
    assert client.calls.count(("execute", None)) == 1


def test_fetch_remote_catalog_wraps_rejected_queries() -> None:
    error = PostgrestAPIError(
        {"message": 'relation "public.scholarships" does not exist', "code": "42P01"}
    )

    with pytest.raises(CatalogFetchError, match="does not exist"):
        fetch_remote_catalog(_FakeClient(error=error))


def test_fetch_remote_catalog_rejects_non_list_payload() -> None:
    client = _FakeClient(rows={"message": "permission denied"})

    with pytest.raises(CatalogFetchError, match="expected a list"):
        fetch_remote_catalog(client)


def test_fetch_remote_catalog_treats_null_fields_as_validation_errors() -> None:
    row = _row(6)
    row["deadline"] = None
    client = _FakeClient(rows=[row])

    with pytest.raises(CatalogValidationError, match="deadline"):
        fetch_remote_catalog(client)
