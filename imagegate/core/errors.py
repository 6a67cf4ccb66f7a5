"""Canonical error taxonomy shared by provider clients and the HTTP adapter.

Architectural role:
    Defines the only error shape allowed to cross the image-generation core. Every
    upstream failure (HTTP status, free-text message, malformed payload) is mapped
    into a `CanonicalError` before it leaves a provider client.

HTTP mapping:
    Each `ErrorKind` owns a fixed HTTP status used by `imagegate.api.http_api` when
    rendering the `{"error": {"kind", "message"}}` envelope.

Determinism:
    Pure data definitions and constructors; no I/O.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed vocabulary of failure kinds surfaced to API callers."""

    RATE_LIMITED = "rate_limited"
    QUOTA_EXCEEDED = "quota_exceeded"
    AUTH_INVALID = "auth_invalid"
    AUTH_REQUIRED = "auth_required"
    TIMEOUT = "timeout"
    PROVIDER_ERROR = "provider_error"
    INVALID_PARAMS = "invalid_params"
    INVALID_PROMPT = "invalid_prompt"


HTTP_STATUS = {
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.QUOTA_EXCEEDED: 429,
    ErrorKind.AUTH_INVALID: 401,
    ErrorKind.AUTH_REQUIRED: 401,
    ErrorKind.TIMEOUT: 504,
    ErrorKind.PROVIDER_ERROR: 502,
    ErrorKind.INVALID_PARAMS: 400,
    ErrorKind.INVALID_PROMPT: 400,
}


class CanonicalError(Exception):
    """Classified failure carrying kind, provider label and caller-safe message."""

    def __init__(self, kind: ErrorKind, message: str, provider: str | None = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.provider = provider

    @property
    def status_code(self) -> int:
        return HTTP_STATUS[self.kind]

    def to_dict(self) -> dict:
        """Return the public error envelope body."""
        return {"error": {"kind": self.kind.value, "message": self.message}}

    def __repr__(self):
        return f"CanonicalError({self.kind.value!r}, {self.message!r}, provider={self.provider!r})"


# ============================================================
# Constructors
# ============================================================

def rate_limited(provider: str) -> CanonicalError:
    return CanonicalError(
        ErrorKind.RATE_LIMITED,
        f"{provider} rate limit reached, please retry later",
        provider,
    )


def quota_exceeded(provider: str) -> CanonicalError:
    return CanonicalError(
        ErrorKind.QUOTA_EXCEEDED,
        f"{provider} quota exceeded",
        provider,
    )


def auth_invalid(provider: str, detail: str | None = None) -> CanonicalError:
    message = f"{provider} rejected the supplied credentials"
    if detail:
        message = f"{message}: {detail}"
    return CanonicalError(ErrorKind.AUTH_INVALID, message, provider)


def auth_required(provider: str) -> CanonicalError:
    return CanonicalError(
        ErrorKind.AUTH_REQUIRED,
        f"{provider} requires an API token (Authorization: Bearer <token>)",
        provider,
    )


def timeout(provider: str) -> CanonicalError:
    return CanonicalError(ErrorKind.TIMEOUT, f"{provider} request timed out", provider)


def provider_error(provider: str, message: str) -> CanonicalError:
    return CanonicalError(ErrorKind.PROVIDER_ERROR, message, provider)


def invalid_params(field: str, message: str) -> CanonicalError:
    return CanonicalError(ErrorKind.INVALID_PARAMS, f"Invalid '{field}': {message}")


def invalid_prompt(message: str) -> CanonicalError:
    return CanonicalError(ErrorKind.INVALID_PROMPT, message)
