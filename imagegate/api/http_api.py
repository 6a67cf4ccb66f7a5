"""
HTTP API adapter for imagegate.

Architectural role:
- Expose OpenAI-compatible image interfaces.
- Delegate validation, model resolution and provider dispatch to
  `imagegate.api.adapter`.
- Render `CanonicalError` failures as `{"error": {"kind", "message"}}` envelopes
  with the status mapped from the error kind.

Endpoint responsibilities:
- `POST /images/generations`: generate one image and return its URL.
- `GET /models`: expose the static model catalog.
- `GET /health`: liveness probe.
- Both OpenAI endpoints are also served under `/v1`.

Concurrency:
- The generation pipeline is blocking (`requests` + sleep-based backoff) and runs
  in Starlette's threadpool, one request per worker thread.
- No mutable state is shared between requests.

Side effects:
- Emits request debug logs only when `DEBUG == "true"`.
- Loads environment variables at import time via `provider_config`.
"""

import logging

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.concurrency import run_in_threadpool

from imagegate.api.adapter import generate_from_body, parse_body
from imagegate.api.model_resolver import list_models
from imagegate.api.url import get_origin
from imagegate.core.errors import CanonicalError
from imagegate.image.provider_config import DEBUG

logger = logging.getLogger(__name__)

app = FastAPI(title="imagegate")
router = APIRouter()


# ============================================================
# Error Rendering
# ============================================================

@app.exception_handler(CanonicalError)
async def canonical_error_handler(request: Request, exc: CanonicalError):
    """Render a classified failure with its mapped HTTP status."""
    if exc.status_code >= 500:
        logger.warning("Provider failure (%s): %s", exc.provider, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# ============================================================
# Model Listing
# ============================================================

@router.get("/models")
def models():
    """
    Return the static model catalog as OpenAI-style model metadata.

    Response formatting:
    - `object: "list"`
    - `data[]` entries with `id`, `object`, `created`, `owned_by`
    """
    return list_models()


# ============================================================
# OpenAI-Compatible Image Generation
# ============================================================

@router.post("/images/generations")
async def images_generations(request: Request):
    """
    OpenAI-compatible image generation endpoint.

    Input validation behavior (first violation wins, all before network I/O):
    - Invalid JSON body -> 400 `invalid_params`.
    - Missing/empty prompt -> 400 `invalid_prompt`.
    - `n` other than 1, `response_format` other than "url" -> 400 `invalid_params`.
    - Token prefix for another provider -> 400 `invalid_params`.
    - Missing token for a provider requiring auth -> 401 `auth_required`.

    Error handling strategy:
    - All failures raise `CanonicalError`, rendered by `canonical_error_handler`.
    """
    raw = await request.body()
    body = parse_body(raw)
    authorization = request.headers.get("Authorization")

    if DEBUG:
        logger.info("Incoming image request: model=%r keys=%s", body.get("model"), sorted(body))

    result = await run_in_threadpool(
        generate_from_body,
        body,
        authorization,
        get_origin(request),
    )

    if DEBUG:
        logger.info("Image response: %r", result)

    return result


app.include_router(router)
app.include_router(router, prefix="/v1")


@app.get("/health")
def health():
    return {"status": "ok"}
