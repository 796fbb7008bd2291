from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from dotenv import load_dotenv

DEFAULT_CATALOG_TABLE = "scholarships"
DEFAULT_TIMEOUT_SECONDS = 20.0


class BackendConfigError(RuntimeError):
    """Raised when the hosted backend is not configured."""


@dataclass(frozen=True, slots=True)
class BackendSettings:
    url: str
    anon_key: str
    catalog_table: str = DEFAULT_CATALOG_TABLE
    request_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if not self.url.strip():
            raise BackendConfigError("SUPABASE_URL is required to reach the backend.")
        if not self.anon_key.strip():
            raise BackendConfigError("SUPABASE_ANON_KEY is required to reach the backend.")
        if self.request_timeout_seconds <= 0:
            raise BackendConfigError("Request timeout must be positive.")
        object.__setattr__(self, "url", self.url.strip().rstrip("/"))

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> BackendSettings:
        timeout_text = values.get("SCHOLARMATCH_REQUEST_TIMEOUT") or str(DEFAULT_TIMEOUT_SECONDS)
        try:
            timeout = float(timeout_text)
        except ValueError:
            raise BackendConfigError(
                f"SCHOLARMATCH_REQUEST_TIMEOUT must be a number (received {timeout_text!r})."
            ) from None
        return cls(
            url=values.get("SUPABASE_URL") or "",
            anon_key=values.get("SUPABASE_ANON_KEY") or "",
            catalog_table=values.get("SCHOLARMATCH_CATALOG_TABLE") or DEFAULT_CATALOG_TABLE,
            request_timeout_seconds=timeout,
        )

    @classmethod
    def from_env(cls) -> BackendSettings:
        load_dotenv()
        return cls.from_mapping(os.environ)


def is_configured() -> bool:
    try:
        BackendSettings.from_env()
    except BackendConfigError:
        return False
    return True
