from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping

CATALOG_COLUMNS = [
    "id",
    "title",
    "provider",
    "country",
    "region",
    "funding_type",
    "description",
    "deadline",
    "match_score",
    "fully_funded",
    "eligible_fields",
]

_TEXT_FIELDS = ("title", "provider", "country", "region", "funding_type", "description")


class CatalogValidationError(ValueError):
    """Raised when catalog rows do not match the scholarship record shape."""


@dataclass(frozen=True, slots=True)
class ScholarshipRecord:
    """One scholarship as read from the catalog. Never mutated after load."""

    id: int
    title: str
    provider: str
    country: str
    region: str
    funding_type: str
    description: str
    deadline: date
    match_score: int
    fully_funded: bool
    eligible_fields: tuple[str, ...]

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> ScholarshipRecord:
        label = _row_label(row)
        missing = [column for column in CATALOG_COLUMNS if row.get(column) is None]
        if missing:
            raise CatalogValidationError(f"{label}: missing required field(s) {', '.join(missing)}.")

        record_id = row["id"]
        if isinstance(record_id, bool) or not isinstance(record_id, int):
            raise CatalogValidationError(f"{label}: 'id' must be an integer.")

        text_values: dict[str, str] = {}
        for column in _TEXT_FIELDS:
            value = row[column]
            if not isinstance(value, str):
                raise CatalogValidationError(f"{label}: '{column}' must be text.")
            text_values[column] = value

        match_score = row["match_score"]
        if isinstance(match_score, bool) or not isinstance(match_score, int):
            raise CatalogValidationError(f"{label}: 'match_score' must be an integer.")
        if match_score < 0 or match_score > 100:
            raise CatalogValidationError(f"{label}: 'match_score' must be between 0 and 100.")

        fully_funded = row["fully_funded"]
        if not isinstance(fully_funded, bool):
            raise CatalogValidationError(f"{label}: 'fully_funded' must be a boolean.")

        return cls(
            id=record_id,
            deadline=_coerce_deadline(row["deadline"], label),
            match_score=match_score,
            fully_funded=fully_funded,
            eligible_fields=_coerce_fields(row["eligible_fields"], label),
            **text_values,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "provider": self.provider,
            "country": self.country,
            "region": self.region,
            "funding_type": self.funding_type,
            "description": self.description,
            "deadline": self.deadline,
            "match_score": self.match_score,
            "fully_funded": self.fully_funded,
            "eligible_fields": list(self.eligible_fields),
        }


def _row_label(row: Mapping[str, Any]) -> str:
    record_id = row.get("id")
    return f"row id={record_id!r}" if record_id is not None else "row without id"


def _coerce_deadline(value: Any, label: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        cleaned = value.strip()
        try:
            return date.fromisoformat(cleaned)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(cleaned.replace("Z", "+00:00")).date()
        except ValueError:
            pass
    raise CatalogValidationError(f"{label}: 'deadline' is not a valid ISO date ({value!r}).")


def _coerce_fields(value: Any, label: str) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple, set, frozenset)):
        raise CatalogValidationError(f"{label}: 'eligible_fields' must be a list of tags.")
    fields: list[str] = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise CatalogValidationError(f"{label}: 'eligible_fields' contains an empty or non-text tag.")
        if item not in fields:
            fields.append(item)
    return tuple(fields)
