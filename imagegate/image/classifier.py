"""Upstream failure classification into the canonical error taxonomy.

Classification order (first match wins, case-insensitive substring checks):
    1. HTTP 429 or "rate limit" / "too many requests" -> rate_limited
    2. "quota" / "exceeded"                          -> quota_exceeded
    3. HTTP 401/403 or "unauthorized" / "forbidden"  -> auth_invalid
    4. "timeout" / "timed out"                       -> timeout
    5. HTTP 503 or "unavailable" / "loading"         -> provider_error (cold start note)
    6. anything else                                 -> provider_error (raw message)

Quota and rate-limit checks deliberately precede the generic fallback so callers can
branch on them.

Transport exceptions (`classify_transport`) are mapped by type, not by text:
    timeouts -> timeout, everything else -> provider_error.

Determinism:
    Pure function of its inputs; no I/O.
"""

import requests

from imagegate.core import errors
from imagegate.core.errors import CanonicalError

HUGGINGFACE = "HuggingFace"

UNAVAILABLE_MESSAGE = "Service is temporarily unavailable or loading"


def classify(message: str, status: int | None = None, provider: str = HUGGINGFACE) -> CanonicalError:
    """Map a raw upstream error message and optional HTTP status to a `CanonicalError`.

    Args:
        message: Upstream error text (response body, SSE error field, exception text).
        status: Upstream HTTP status code when one is available.
        provider: Provider label attached to the resulting error.

    Returns:
        Classified error instance. The caller decides whether to raise it.
    """
    lower_msg = (message or "").lower()

    if status == 429 or "rate limit" in lower_msg or "too many requests" in lower_msg:
        return errors.rate_limited(provider)

    if "quota" in lower_msg or "exceeded" in lower_msg:
        return errors.quota_exceeded(provider)

    if status in (401, 403) or "unauthorized" in lower_msg or "forbidden" in lower_msg:
        return errors.auth_invalid(provider, message)

    if "timeout" in lower_msg or "timed out" in lower_msg:
        return errors.timeout(provider)

    if status == 503 or "unavailable" in lower_msg or "loading" in lower_msg:
        return errors.provider_error(provider, UNAVAILABLE_MESSAGE)

    return errors.provider_error(provider, message)


def classify_transport(err: requests.RequestException, phase: str, provider: str = HUGGINGFACE) -> CanonicalError:
    """Map a `requests` transport exception to a `CanonicalError` by exception type.

    The exception text is not run through `classify`: urllib3 wording such as
    "Max retries exceeded" would otherwise read as a quota failure.
    """
    if isinstance(err, requests.Timeout):
        return errors.timeout(provider)
    return errors.provider_error(provider, f"{phase} request failed: {type(err).__name__}")
