"""Gradio queue protocol client for HuggingFace Spaces.

Processing flow:
    1. Submit: `POST {base_url}/gradio_api/call/{endpoint}` with `{"data": [...]}`.
    2. Read the `event_id` of the accepted job.
    3. Await: `GET {base_url}/gradio_api/call/{endpoint}/{event_id}` returning an
       event-stream body.
    4. Extract the `complete` payload and normalize it to the output list.

Retry behavior:
    Spaces are often cold (starting/loading) and answer with transient 404/503.
    Each of the two round-trips is attempted up to `GRADIO_MAX_RETRIES` times;
    only 404/503 are retried, with a linear backoff of
    `GRADIO_RETRY_BASE_DELAY * attempt_number`. Any other status raises the
    classified error immediately.

Error handling strategy:
    - HTTP failures are classified from status + response body.
    - Transport exceptions (`requests.RequestException`) are classified by
      exception type and never retried.
    - Contract violations (missing `event_id`, empty body, malformed SSE, unknown
      payload shape) raise provider errors.

Determinism:
    Request assembly and the retry schedule are deterministic; backend output and
    timing are not.

Performance characteristics:
    Synchronous `requests` calls with blocking `time.sleep` backoff. Worst case per
    phase is `GRADIO_MAX_RETRIES` calls plus the summed backoff delays.
"""

import logging
import time

import requests

from imagegate.core import errors
from imagegate.core.image_types import QueueJob
from imagegate.image.classifier import HUGGINGFACE, classify, classify_transport
from imagegate.image.provider_config import (
    GRADIO_MAX_RETRIES,
    GRADIO_RETRY_BASE_DELAY,
    GRADIO_RETRY_STATUSES,
    HTTP_TIMEOUT,
)
from imagegate.image.sse import extract_complete_event_data, normalize_complete_payload

logger = logging.getLogger(__name__)


def _build_headers(token: str | None) -> dict:
    headers = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _send_with_retries(send, phase: str):
    """Run one protocol round-trip with the cold-start retry policy.

    Args:
        send: Zero-argument callable issuing the HTTP request.
        phase: Label used in fallback error messages ("Queue" or "Result").

    Returns:
        The first successful `requests.Response`, or `None` if no attempt succeeded.

    Raises:
        CanonicalError: on a non-retryable status, on the final failed attempt, or
        on a transport exception.
    """
    for attempt in range(GRADIO_MAX_RETRIES):
        try:
            response = send()
        except requests.RequestException as err:
            raise classify_transport(err, phase) from err

        if response.ok:
            return response

        status = response.status_code
        should_retry = attempt < GRADIO_MAX_RETRIES - 1 and status in GRADIO_RETRY_STATUSES
        if should_retry:
            delay = GRADIO_RETRY_BASE_DELAY * (attempt + 1)
            logger.debug(
                "%s request returned %s, retrying in %.1fs (attempt %d/%d)",
                phase, status, delay, attempt + 1, GRADIO_MAX_RETRIES,
            )
            time.sleep(delay)
            continue

        logger.warning("%s request failed with status %s", phase, status)
        raise classify(response.text or f"{phase} request failed: {status}", status)

    return None


def submit_job(base_url: str, endpoint: str, data: list, token: str | None = None) -> QueueJob:
    """Submit inputs to a Gradio queue and return the accepted job.

    Raises:
        CanonicalError: classified HTTP failure, exhausted retries, or a response
        without `event_id`.
    """
    url = f"{base_url}/gradio_api/call/{endpoint}"
    headers = _build_headers(token)

    response = _send_with_retries(
        lambda: requests.post(url, json={"data": data}, headers=headers, timeout=HTTP_TIMEOUT),
        "Queue",
    )
    if response is None:
        raise errors.provider_error(HUGGINGFACE, "Queue request failed after retries")

    try:
        queue_data = response.json()
    except ValueError:
        queue_data = None

    event_id = queue_data.get("event_id") if isinstance(queue_data, dict) else None
    if not event_id:
        raise errors.provider_error(HUGGINGFACE, "No event_id returned from queue")

    return QueueJob(event_id=str(event_id))


def await_job(base_url: str, endpoint: str, job: QueueJob, token: str | None = None) -> str:
    """Fetch the event-stream body of a submitted job.

    Raises:
        CanonicalError: classified HTTP failure or an empty result body.
    """
    url = f"{base_url}/gradio_api/call/{endpoint}/{job.event_id}"
    headers = _build_headers(token)

    response = _send_with_retries(
        lambda: requests.get(url, headers=headers, timeout=HTTP_TIMEOUT),
        "Result",
    )
    text = response.text if response is not None else ""
    if not text:
        raise errors.provider_error(HUGGINGFACE, "Empty result after retries")

    return text


def call_gradio_api(base_url: str, endpoint: str, data: list, token: str | None = None) -> list:
    """Run the full submit/await queue protocol and return the output list.

    Args:
        base_url: Space origin, for example `https://owner-space.hf.space`.
        endpoint: Gradio API endpoint name (without leading slash).
        data: Ordered endpoint inputs.
        token: Optional HuggingFace token sent as bearer authorization.

    Returns:
        Output values of the `complete` event, in endpoint order.

    Raises:
        CanonicalError: for every failure mode of either round-trip.
    """
    job = submit_job(base_url, endpoint, data, token)
    logger.debug("Gradio job %s accepted by %s/%s", job.event_id, base_url, endpoint)

    body = await_job(base_url, endpoint, job, token)
    complete = extract_complete_event_data(body)
    return normalize_complete_payload(complete)
