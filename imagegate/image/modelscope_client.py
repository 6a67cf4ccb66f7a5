"""ModelScope async image-generation client.

Processing flow:
    1. Submit an async generation task (`X-ModelScope-Async-Mode: true`).
    2. Read the returned `task_id`.
    3. Poll `/tasks/{task_id}` until the task succeeds or fails.
    4. Return the first output image URL.

Polling budget:
    At most `MODELSCOPE_MAX_POLLS` status calls spaced by `MODELSCOPE_POLL_INTERVAL`
    seconds. An exhausted budget raises `timeout`. HTTP 429 on a status call waits
    one extra interval and consumes one poll.

Error handling strategy:
    - Missing token -> `auth_required`.
    - HTTP failures and transport exceptions are classified with the ModelScope label.
    - A failed task is classified from its reported error message.
    - Missing `task_id` or missing output image -> provider error.

Performance characteristics:
    Synchronous HTTP and blocking sleep-based polling.
"""

import logging
import time

import requests

from imagegate.core import errors
from imagegate.core.image_types import ImageRequest, ImageResult, PROVIDER_MODELSCOPE
from imagegate.image.classifier import classify, classify_transport
from imagegate.image.provider_config import (
    HTTP_TIMEOUT,
    MODELSCOPE_API_URL,
    MODELSCOPE_MAX_POLLS,
    MODELSCOPE_POLL_INTERVAL,
    provider_name,
)

logger = logging.getLogger(__name__)

PROVIDER_LABEL = provider_name(PROVIDER_MODELSCOPE)


def _request(method: str, url: str, **kwargs) -> requests.Response:
    try:
        return requests.request(method, url, timeout=HTTP_TIMEOUT, **kwargs)
    except requests.RequestException as err:
        raise classify_transport(err, method, PROVIDER_LABEL) from err


def _raise_for_status(response: requests.Response) -> None:
    if response.ok:
        return
    logger.warning("ModelScope request failed with status %s", response.status_code)
    raise classify(
        response.text or f"ModelScope request failed: {response.status_code}",
        response.status_code,
        PROVIDER_LABEL,
    )


def submit_task(payload: dict, token: str) -> str:
    """Submit an async generation task and return its id."""
    headers = {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
        "X-ModelScope-Async-Mode": "true",
    }
    response = _request("POST", f"{MODELSCOPE_API_URL}/images/generations", json=payload, headers=headers)
    _raise_for_status(response)

    try:
        task_id = response.json().get("task_id")
    except (ValueError, AttributeError):
        task_id = None
    if not task_id:
        raise errors.provider_error(PROVIDER_LABEL, "ModelScope did not return a task id")
    return task_id


def poll_task(task_id: str, token: str) -> dict:
    """Poll a task until it reaches a terminal state and return its status payload."""
    headers = {
        "Authorization": f"Bearer {token}",
        "X-ModelScope-Task-Type": "image_generation",
    }
    status_url = f"{MODELSCOPE_API_URL}/tasks/{task_id}"

    for _ in range(MODELSCOPE_MAX_POLLS):
        response = _request("GET", status_url, headers=headers)
        if response.status_code == 429:
            time.sleep(MODELSCOPE_POLL_INTERVAL)
            continue
        _raise_for_status(response)

        try:
            status_data = response.json()
        except ValueError:
            raise errors.provider_error(PROVIDER_LABEL, "Invalid JSON in task status") from None
        if not isinstance(status_data, dict):
            raise errors.provider_error(PROVIDER_LABEL, "Invalid task status payload")

        task_status = str(status_data.get("task_status", "")).upper()
        if task_status == "SUCCEED":
            return status_data
        if task_status == "FAILED":
            message = (
                status_data.get("errors", {}).get("message")
                if isinstance(status_data.get("errors"), dict)
                else None
            )
            raise classify(message or "ModelScope task failed", provider=PROVIDER_LABEL)

        time.sleep(MODELSCOPE_POLL_INTERVAL)

    raise errors.timeout(PROVIDER_LABEL)


def generate(request: ImageRequest) -> ImageResult:
    """Generate one image on ModelScope."""
    if not request.auth_token:
        raise errors.auth_required(PROVIDER_LABEL)

    payload = {
        "model": request.model,
        "prompt": request.prompt,
        "size": f"{request.width}x{request.height}",
    }
    if request.negative_prompt:
        payload["negative_prompt"] = request.negative_prompt
    if request.steps is not None:
        payload["steps"] = request.steps
    if request.seed is not None:
        payload["seed"] = request.seed

    task_id = submit_task(payload, request.auth_token)
    logger.debug("ModelScope task %s submitted for %s", task_id, request.model)
    status_data = poll_task(task_id, request.auth_token)

    images = status_data.get("output_images") or []
    if not images or not isinstance(images[0], str):
        raise errors.provider_error(PROVIDER_LABEL, "ModelScope finished but no image URL returned")

    return ImageResult(
        url=images[0],
        provider=PROVIDER_MODELSCOPE,
        model=request.model,
        seed=request.seed,
        width=request.width,
        height=request.height,
    )
