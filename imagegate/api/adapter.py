"""OpenAI `images/generations` request/response adapter.

Architectural role:
    Bridges the public OpenAI-shaped contract and the provider layer under
    `imagegate.image`. All adapter-level validation happens here, before any
    network call is made.

Request lifecycle (`generate_from_body`):
1. Parse the JSON body (`invalid_params("body")` on failure).
2. Validate `prompt` (`invalid_prompt`), `n` (only 1), `response_format` (only "url").
3. Validate remaining field types (pydantic) and parse `size`.
4. Resolve the target provider/model from `model`.
5. Parse the bearer credential; reject a provider-hint mismatch
   (`invalid_params("Authorization")`) and a missing token for providers that
   require one (`auth_required`).
6. Convert to `ImageRequest`, dispatch via `service.generate_image`.
7. Rewrite the asset URL for the same-origin proxy and build the public response.

Error handling strategy:
    Every failure raises `CanonicalError`; rendering to HTTP is done by `http_api`.
"""

import json
import logging
import time
from dataclasses import replace

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from imagegate.api.model_resolver import resolve_model
from imagegate.api.url import to_proxy_url
from imagegate.core import errors
from imagegate.core.image_types import (
    Credential,
    GenerationRequest,
    ImageRequest,
    ImageResult,
    ResolvedTarget,
)
from imagegate.image import service
from imagegate.image.provider_config import PROVIDER_CONFIGS, TOKEN_PREFIXES

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "
DEFAULT_SIZE = 1024
MIN_SIZE = 256
MAX_SIZE = 2048


# ============================================================
# Public Schemas
# ============================================================

class ImageGenerationBody(BaseModel):
    """Field types accepted on `POST /images/generations`."""

    model_config = ConfigDict(extra="ignore")

    prompt: str
    model: str | None = None
    n: int | None = None
    response_format: str | None = None
    size: str | None = None
    negative_prompt: str | None = None
    seed: int | None = Field(default=None, ge=0)
    steps: int | None = Field(default=None, ge=1, le=100)


class ImageData(BaseModel):
    url: str
    seed: int | None = None
    width: int | None = None
    height: int | None = None


class ImagesResponse(BaseModel):
    created: int
    data: list[ImageData]


# ============================================================
# Credential Parsing
# ============================================================

def parse_bearer_token(header_value: str | None) -> Credential:
    """Extract token and provider hint from an `Authorization` header value.

    A case-insensitive `Bearer ` prefix is stripped. A known provider prefix on the
    token (`hf:`, `gitee:`, `ms:`) becomes `provider_hint` and is removed from the
    stored token. Absent or blank headers yield an empty credential.
    """
    if not header_value:
        return Credential()

    value = header_value.strip()
    if value.lower().startswith(BEARER_PREFIX):
        value = value[len(BEARER_PREFIX):].strip()

    if not value:
        return Credential()

    for prefix, provider in TOKEN_PREFIXES.items():
        if value.startswith(prefix):
            token = value[len(prefix):].strip()
            return Credential(token=token or None, provider_hint=provider)

    return Credential(token=value)


# ============================================================
# Request Validation / Conversion
# ============================================================

def parse_body(raw: bytes | str):
    """Decode a raw request body as a JSON object."""
    try:
        body = json.loads(raw)
    except (TypeError, ValueError):
        raise errors.invalid_params("body", "Invalid JSON body") from None
    if not isinstance(body, dict):
        raise errors.invalid_params("body", "Invalid JSON body")
    return body


def validate_request(body: dict) -> GenerationRequest:
    """Validate a decoded request body in contract order.

    Raises:
        CanonicalError: `invalid_prompt` or `invalid_params` for the first violation.
    """
    prompt = body.get("prompt")
    if not prompt or (isinstance(prompt, str) and not prompt.strip()):
        raise errors.invalid_prompt("Prompt is required")

    if body.get("n") is not None and body["n"] != 1:
        raise errors.invalid_params("n", "Only n=1 is supported")

    if body.get("response_format") is not None and body["response_format"] != "url":
        raise errors.invalid_params("response_format", "Only response_format='url' is supported")

    try:
        parsed = ImageGenerationBody.model_validate(body)
    except ValidationError as err:
        first = err.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or "body"
        raise errors.invalid_params(field, first.get("msg", "Invalid value")) from None

    return GenerationRequest(
        prompt=parsed.prompt,
        model=parsed.model or "",
        size=parsed.size,
        negative_prompt=parsed.negative_prompt,
        seed=parsed.seed,
        steps=parsed.steps,
    )


def parse_size(size: str | None) -> tuple[int, int]:
    """Parse an OpenAI `WIDTHxHEIGHT` size string."""
    if not size:
        return DEFAULT_SIZE, DEFAULT_SIZE

    parts = size.lower().split("x")
    if len(parts) != 2 or not all(part.strip().isdecimal() for part in parts):
        raise errors.invalid_params("size", "Expected WIDTHxHEIGHT, for example 1024x1024")

    width, height = (int(part) for part in parts)
    if not (MIN_SIZE <= width <= MAX_SIZE and MIN_SIZE <= height <= MAX_SIZE):
        raise errors.invalid_params("size", f"Width and height must be between {MIN_SIZE} and {MAX_SIZE}")
    return width, height


def convert_request(request: GenerationRequest, target: ResolvedTarget, credential: Credential) -> ImageRequest:
    """Convert a validated public request into the provider invocation shape."""
    width, height = parse_size(request.size)
    return ImageRequest(
        prompt=request.prompt,
        model=target.model,
        width=width,
        height=height,
        negative_prompt=request.negative_prompt,
        steps=request.steps,
        seed=request.seed,
        auth_token=credential.token,
    )


def check_credential(target: ResolvedTarget, credential: Credential) -> None:
    """Reject credentials pinned to another provider or missing where required."""
    if credential.provider_hint and credential.provider_hint != target.provider:
        raise errors.invalid_params(
            "Authorization",
            "Token prefix does not match requested model provider",
        )

    provider_config = PROVIDER_CONFIGS.get(target.provider, {})
    if provider_config.get("requires_auth") and not credential.token:
        raise errors.auth_required(provider_config.get("name", target.provider))


# ============================================================
# Response Conversion
# ============================================================

def convert_response(result: ImageResult, created: int | None = None) -> dict:
    """Build the public OpenAI images response for one result."""
    response = ImagesResponse(
        created=created if created is not None else int(time.time()),
        data=[ImageData(url=result.url, seed=result.seed, width=result.width, height=result.height)],
    )
    return response.model_dump(exclude_none=True)


def generate_from_body(body: dict, authorization: str | None, origin: str) -> dict:
    """Run the full adapter pipeline for one decoded request body.

    Args:
        body: Decoded JSON request object.
        authorization: Raw `Authorization` header value, if any.
        origin: Origin of the serving API, used for asset URL rewriting.

    Returns:
        Public `{created, data: [{url}]}` response.

    Raises:
        CanonicalError: validation, credential, or provider failure.
    """
    request = validate_request(body)
    target = resolve_model(request.model)
    credential = parse_bearer_token(authorization)
    check_credential(target, credential)

    internal_request = convert_request(request, target, credential)
    logger.info("Generating image with %s/%s", target.provider, target.model)

    result = service.generate_image(target.provider, internal_request)
    return convert_response(replace(result, url=to_proxy_url(origin, result.url)))
