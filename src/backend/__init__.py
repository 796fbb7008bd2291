from __future__ import annotations

from .client import create_backend_client
from .settings import BackendConfigError, BackendSettings, is_configured

__all__ = ["BackendConfigError", "BackendSettings", "create_backend_client", "is_configured"]
