"""Gradio queue event-stream parsing.

Processing flow:
    1. Split the result body into lines.
    2. Track the most recent `event:` name.
    3. Return the first `complete` data payload, or raise on the first `error` one.
    4. Raise a provider error with a bounded body preview when neither occurs.

Payload shapes:
    Gradio "complete" payloads differ between Spaces: some emit the output list
    directly, others wrap it as `{"data": [...]}`. `normalize_complete_payload`
    accepts exactly those two shapes.

Error handling strategy:
    Every failure raises `CanonicalError` via `classifier.classify`. Malformed error
    payloads degrade to classification of the raw text.
"""

import json

from imagegate.core import errors
from imagegate.image.classifier import HUGGINGFACE, classify

PREVIEW_CHARS = 200


def extract_complete_event_data(body: str, provider: str = HUGGINGFACE):
    """Return the parsed data of the first `complete` event in an SSE body.

    Args:
        body: Raw event-stream text returned by the Gradio result call.
        provider: Provider label used for raised errors.

    Returns:
        Parsed JSON payload of the `complete` event (list or dict).

    Raises:
        CanonicalError: on an `error` event, on a malformed `complete` payload, or
        when no terminal event exists.
    """
    current_event = ""

    for line in body.split("\n"):
        if line.startswith("event:"):
            current_event = line[len("event:"):].strip()
        elif line.startswith("data:"):
            raw_data = line[len("data:"):].strip()

            if current_event == "complete":
                try:
                    return json.loads(raw_data)
                except json.JSONDecodeError:
                    raise errors.provider_error(
                        provider,
                        f"Malformed complete payload: {raw_data[:PREVIEW_CHARS]}",
                    ) from None

            if current_event == "error":
                raise classify(_error_message(raw_data), provider=provider)

    raise errors.provider_error(
        provider,
        f"Unexpected SSE response: {body[:PREVIEW_CHARS]}",
    )


def _error_message(raw_data: str) -> str:
    """Pick the most specific message out of an SSE error payload."""
    try:
        error_data = json.loads(raw_data)
    except json.JSONDecodeError:
        return raw_data or "Unknown SSE error"

    if isinstance(error_data, dict):
        message = error_data.get("error") or error_data.get("message")
        if message:
            return str(message)

    if error_data is None:
        return "Unknown error"
    return json.dumps(error_data)


def normalize_complete_payload(payload, provider: str = HUGGINGFACE) -> list:
    """Coerce a `complete` payload into the plain output list.

    Accepted shapes: a bare list, or a dict whose `data` field is a list.
    Anything else raises a provider error carrying a bounded preview.
    """
    if isinstance(payload, list):
        return payload

    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        return payload["data"]

    raise errors.provider_error(
        provider,
        f"Unexpected complete payload: {json.dumps(payload, default=str)[:PREVIEW_CHARS]}",
    )
