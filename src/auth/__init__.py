from __future__ import annotations

from .gateway import (
    REDIRECT_DELAY_SECONDS,
    AuthFailure,
    AuthFailureKind,
    AuthGateway,
    AuthResult,
    guidance_for,
)

__all__ = [
    "REDIRECT_DELAY_SECONDS",
    "AuthFailure",
    "AuthFailureKind",
    "AuthGateway",
    "AuthResult",
    "guidance_for",
]
