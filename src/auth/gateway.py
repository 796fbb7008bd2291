from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from supabase import AuthApiError, AuthError, AuthRetryableError, Client

logger = logging.getLogger(__name__)

SIGN_UP_SUCCESS_MESSAGE = "Success! Check your email for the confirmation link."
SIGN_IN_SUCCESS_MESSAGE = "Successfully logged in!"
DEFAULT_ERROR_MESSAGE = "An error occurred during authentication."
NETWORK_ERROR_MESSAGE = "Could not reach the authentication service."
REDIRECT_DELAY_SECONDS = 1.5

_INVALID_CREDENTIAL_CODES = {"invalid_credentials", "invalid_grant"}
_VALIDATION_CODES = {
    "validation_failed",
    "weak_password",
    "email_address_invalid",
    "email_address_not_authorized",
    "signup_disabled",
    "user_already_exists",
    "email_exists",
}


class AuthFailureKind(str, Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    NETWORK_ERROR = "network_error"
    VALIDATION_ERROR = "validation_error"
    UNKNOWN = "unknown"


_GUIDANCE = {
    AuthFailureKind.INVALID_CREDENTIALS: "Check your email and password and try again.",
    AuthFailureKind.NETWORK_ERROR: "Check your connection, then submit the form again.",
    AuthFailureKind.VALIDATION_ERROR: "Fix the highlighted details and resubmit.",
    AuthFailureKind.UNKNOWN: "Please try again in a moment.",
}


def guidance_for(kind: AuthFailureKind) -> str:
    return _GUIDANCE[kind]


@dataclass(frozen=True, slots=True)
class AuthFailure:
    kind: AuthFailureKind
    message: str


@dataclass(frozen=True, slots=True)
class AuthResult:
    ok: bool
    message: str
    failure: AuthFailure | None = None
    session: dict[str, Any] | None = None

    @classmethod
    def succeeded(cls, message: str, session: dict[str, Any] | None = None) -> AuthResult:
        return cls(ok=True, message=message, session=session)

    @classmethod
    def failed(cls, kind: AuthFailureKind, message: str) -> AuthResult:
        return cls(ok=False, message=message, failure=AuthFailure(kind=kind, message=message))


def _provider_message(message: str | None) -> str:
    if isinstance(message, str) and message.strip():
        return message.strip()
    return DEFAULT_ERROR_MESSAGE


def classify_auth_error(status: int | None, code: str | None, message: str | None) -> AuthFailureKind:
    error_code = str(code or "").lower()
    text = _provider_message(message).lower()
    if error_code in _INVALID_CREDENTIAL_CODES or "invalid login credentials" in text:
        return AuthFailureKind.INVALID_CREDENTIALS
    if error_code in _VALIDATION_CODES or status == 422:
        return AuthFailureKind.VALIDATION_ERROR
    return AuthFailureKind.UNKNOWN


def _session_payload(response: Any) -> dict[str, Any] | None:
    session = response.session
    if session is None:
        return None
    user = response.user or session.user
    return {
        "access_token": session.access_token,
        "refresh_token": session.refresh_token,
        "expires_at": session.expires_at,
        "user_id": user.id if user is not None else None,
        "email": user.email if user is not None else None,
    }


def _validate_credentials(email: str, password: str) -> AuthResult | None:
    if not email.strip() or not password:
        return AuthResult.failed(AuthFailureKind.VALIDATION_ERROR, "Email and password are required.")
    if "@" not in email:
        return AuthResult.failed(AuthFailureKind.VALIDATION_ERROR, "Enter a valid email address.")
    return None


class AuthGateway:
    """Email/password sign-up and sign-in through the Supabase auth client."""

    def __init__(self, client: Client) -> None:
        self._client = client

    def sign_up(self, email: str, password: str) -> AuthResult:
        invalid = _validate_credentials(email, password)
        if invalid is not None:
            return invalid
        outcome = self._call("sign_up", self._client.auth.sign_up, email, password)
        if isinstance(outcome, AuthResult):
            return outcome
        logger.info("Sign-up accepted for %s", email.strip())
        return AuthResult.succeeded(SIGN_UP_SUCCESS_MESSAGE)

    def sign_in(self, email: str, password: str) -> AuthResult:
        invalid = _validate_credentials(email, password)
        if invalid is not None:
            return invalid
        outcome = self._call(
            "sign_in", self._client.auth.sign_in_with_password, email, password
        )
        if isinstance(outcome, AuthResult):
            return outcome
        logger.info("Signed in %s", email.strip())
        return AuthResult.succeeded(SIGN_IN_SUCCESS_MESSAGE, session=_session_payload(outcome))

    def _call(
        self,
        action: str,
        method: Callable[[dict[str, str]], Any],
        email: str,
        password: str,
    ) -> Any:
        credentials = {"email": email.strip(), "password": password}
        try:
            return method(credentials)
        except AuthRetryableError as exc:
            logger.warning("Auth %s could not reach the provider: %s", action, exc.message)
            return AuthResult.failed(AuthFailureKind.NETWORK_ERROR, NETWORK_ERROR_MESSAGE)
        except AuthApiError as exc:
            code = getattr(exc, "code", None)
            kind = classify_auth_error(exc.status, code, exc.message)
            message = _provider_message(exc.message)
            logger.warning(
                "Auth %s failed (%s, status=%s, code=%s): %s",
                action,
                kind.value,
                exc.status,
                code,
                message,
            )
            return AuthResult.failed(kind, message)
        except AuthError as exc:
            logger.exception("Auth %s failed unexpectedly.", action)
            return AuthResult.failed(AuthFailureKind.UNKNOWN, _provider_message(exc.message))
