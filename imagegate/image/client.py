"""Gitee AI image-generation HTTP client (OpenAI-style images API).

Processing flow:
    1. Build an OpenAI-style JSON payload from the `ImageRequest`.
    2. Submit it to `{GITEE_API_URL}/images/generations` with bearer auth.
    3. Return the first image as a URL (or as a data URL for `b64_json` output).

Base64:
    Base64 output is wrapped into a `data:` URL verbatim; nothing is decoded.

Error handling strategy:
    - Missing token -> `auth_required`.
    - Non-200 responses and transport exceptions are classified with the Gitee label.
    - Responses without image data raise provider errors.
"""

import logging

import requests

from imagegate.core import errors
from imagegate.core.image_types import ImageRequest, ImageResult, PROVIDER_GITEE
from imagegate.image.classifier import classify, classify_transport
from imagegate.image.provider_config import GITEE_API_URL, HTTP_TIMEOUT, provider_name

logger = logging.getLogger(__name__)

PROVIDER_LABEL = provider_name(PROVIDER_GITEE)


def send_image_request(payload: dict, token: str) -> dict:
    """Send an image-generation request to Gitee AI.

    Args:
        payload: OpenAI-style JSON payload.
        token: Gitee AI API token.

    Returns:
        Parsed JSON response.

    Error handling:
        - Transport exceptions -> classified error
        - Non-200 HTTP response -> classified error (status + body)
        - Non-JSON body -> provider error
    """
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {token}",
    }

    try:
        response = requests.post(
            f"{GITEE_API_URL}/images/generations",
            json=payload,
            headers=headers,
            timeout=HTTP_TIMEOUT,
        )
    except requests.RequestException as err:
        raise classify_transport(err, "Image", PROVIDER_LABEL) from err

    if response.status_code != 200:
        logger.warning("Gitee request failed with status %s", response.status_code)
        raise classify(
            response.text or f"Image request failed with status {response.status_code}",
            response.status_code,
            PROVIDER_LABEL,
        )

    try:
        return response.json()
    except ValueError:
        raise errors.provider_error(PROVIDER_LABEL, "Invalid JSON in image response") from None


def generate(request: ImageRequest) -> ImageResult:
    """Generate one image on Gitee AI."""
    if not request.auth_token:
        raise errors.auth_required(PROVIDER_LABEL)

    payload = {
        "model": request.model,
        "prompt": request.prompt,
        "width": request.width,
        "height": request.height,
    }
    if request.negative_prompt:
        payload["negative_prompt"] = request.negative_prompt
    if request.steps is not None:
        payload["num_inference_steps"] = request.steps
    if request.seed is not None:
        payload["seed"] = request.seed

    response_data = send_image_request(payload, request.auth_token)

    items = response_data.get("data") if isinstance(response_data, dict) else None
    first = items[0] if isinstance(items, list) and items else {}
    if not isinstance(first, dict):
        first = {}

    url = first.get("url")
    if not url and first.get("b64_json"):
        url = f"data:image/png;base64,{first['b64_json']}"
    if not url:
        raise errors.provider_error(PROVIDER_LABEL, "No image returned from Gitee AI")

    return ImageResult(
        url=url,
        provider=PROVIDER_GITEE,
        model=request.model,
        seed=request.seed,
        width=request.width,
        height=request.height,
    )
