from __future__ import annotations

import pytest
import requests

from imagegate.core.errors import CanonicalError, ErrorKind
from imagegate.image import gradio_client

from fakes import FakeResponse, ScriptedTransport, sse

BASE_URL = "https://owner-space.hf.space"
BASE_DELAY = 0.5


@pytest.fixture(autouse=True)
def fixed_delay(monkeypatch):
    monkeypatch.setattr(gradio_client, "GRADIO_RETRY_BASE_DELAY", BASE_DELAY)
    monkeypatch.setattr(gradio_client, "GRADIO_MAX_RETRIES", 3)


def install(monkeypatch, posts, gets) -> tuple[ScriptedTransport, ScriptedTransport]:
    post = ScriptedTransport(posts)
    get = ScriptedTransport(gets)
    monkeypatch.setattr(gradio_client.requests, "post", post)
    monkeypatch.setattr(gradio_client.requests, "get", get)
    return post, get


def complete_body(payload: str = '[{"url": "https://owner-space.hf.space/gradio_api/file=/tmp/a.png"}, 7]') -> FakeResponse:
    return FakeResponse(200, text=sse(("generating", "null"), ("complete", payload)))


def test_submit_then_await_returns_output_list(monkeypatch, sleeps) -> None:
    post, get = install(
        monkeypatch,
        [FakeResponse(200, {"event_id": "abc"})],
        [complete_body()],
    )

    outputs = gradio_client.call_gradio_api(BASE_URL, "infer", ["a cat", 1], token="hf_secret")

    assert outputs[1] == 7
    assert post.calls[0]["url"] == f"{BASE_URL}/gradio_api/call/infer"
    assert post.calls[0]["json"] == {"data": ["a cat", 1]}
    assert get.calls[0]["url"] == f"{BASE_URL}/gradio_api/call/infer/abc"
    assert post.calls[0]["headers"]["Authorization"] == "Bearer hf_secret"
    assert get.calls[0]["headers"]["Authorization"] == "Bearer hf_secret"
    assert sleeps == []


def test_no_authorization_header_without_token(monkeypatch, sleeps) -> None:
    post, get = install(monkeypatch, [FakeResponse(200, {"event_id": "abc"})], [complete_body()])
    gradio_client.call_gradio_api(BASE_URL, "infer", [])
    assert "Authorization" not in post.calls[0]["headers"]
    assert "Authorization" not in get.calls[0]["headers"]


def test_object_complete_payload_is_unwrapped(monkeypatch, sleeps) -> None:
    install(monkeypatch, [FakeResponse(200, {"event_id": "abc"})], [complete_body('{"data": ["x"]}')])
    assert gradio_client.call_gradio_api(BASE_URL, "infer", []) == ["x"]


def test_cold_start_503_twice_then_success_uses_three_attempts(monkeypatch, sleeps) -> None:
    post, _ = install(
        monkeypatch,
        [
            FakeResponse(503, text="starting"),
            FakeResponse(503, text="starting"),
            FakeResponse(200, {"event_id": "abc"}),
        ],
        [complete_body()],
    )

    gradio_client.call_gradio_api(BASE_URL, "infer", [])

    assert len(post.calls) == 3
    assert sleeps == [BASE_DELAY * 1, BASE_DELAY * 2]
    assert sum(sleeps) == pytest.approx((1 + 2) * BASE_DELAY)


def test_await_phase_retries_404_independently(monkeypatch, sleeps) -> None:
    _, get = install(
        monkeypatch,
        [FakeResponse(200, {"event_id": "abc"})],
        [FakeResponse(404, text="Not Found"), complete_body()],
    )

    gradio_client.call_gradio_api(BASE_URL, "infer", [])

    assert len(get.calls) == 2
    assert sleeps == [BASE_DELAY]


def test_status_500_is_not_retried(monkeypatch, sleeps) -> None:
    post, get = install(monkeypatch, [FakeResponse(500, text="Internal error in worker")], [])

    with pytest.raises(CanonicalError) as exc_info:
        gradio_client.call_gradio_api(BASE_URL, "infer", [])

    assert exc_info.value.kind is ErrorKind.PROVIDER_ERROR
    assert exc_info.value.message == "Internal error in worker"
    assert len(post.calls) == 1
    assert get.calls == []
    assert sleeps == []


def test_auth_failure_is_not_retried(monkeypatch, sleeps) -> None:
    post, _ = install(monkeypatch, [FakeResponse(401, text="Invalid token")], [])
    with pytest.raises(CanonicalError) as exc_info:
        gradio_client.call_gradio_api(BASE_URL, "infer", [])
    assert exc_info.value.kind is ErrorKind.AUTH_INVALID
    assert len(post.calls) == 1


def test_exhausted_503_raises_classified_unavailable(monkeypatch, sleeps) -> None:
    post, _ = install(monkeypatch, [FakeResponse(503, text="")] * 3, [])

    with pytest.raises(CanonicalError) as exc_info:
        gradio_client.call_gradio_api(BASE_URL, "infer", [])

    assert exc_info.value.kind is ErrorKind.PROVIDER_ERROR
    assert "unavailable" in exc_info.value.message.lower()
    assert len(post.calls) == 3
    assert sleeps == [BASE_DELAY, 2 * BASE_DELAY]


def test_empty_error_body_falls_back_to_status_message(monkeypatch, sleeps) -> None:
    install(monkeypatch, [FakeResponse(200, {"event_id": "abc"})], [FakeResponse(500, text="")])
    with pytest.raises(CanonicalError) as exc_info:
        gradio_client.call_gradio_api(BASE_URL, "infer", [])
    assert exc_info.value.message == "Result request failed: 500"


def test_missing_event_id(monkeypatch, sleeps) -> None:
    install(monkeypatch, [FakeResponse(200, {"queued": True})], [])
    with pytest.raises(CanonicalError) as exc_info:
        gradio_client.call_gradio_api(BASE_URL, "infer", [])
    assert exc_info.value.message == "No event_id returned from queue"


def test_empty_result_body(monkeypatch, sleeps) -> None:
    install(monkeypatch, [FakeResponse(200, {"event_id": "abc"})], [FakeResponse(200, text="")])
    with pytest.raises(CanonicalError) as exc_info:
        gradio_client.call_gradio_api(BASE_URL, "infer", [])
    assert exc_info.value.message == "Empty result after retries"


def test_sse_error_event_surfaces_parsed_message(monkeypatch, sleeps) -> None:
    install(
        monkeypatch,
        [FakeResponse(200, {"event_id": "abc"})],
        [FakeResponse(200, text=sse(("error", '{"error": "Prompt rejected by safety checker"}')))],
    )
    with pytest.raises(CanonicalError) as exc_info:
        gradio_client.call_gradio_api(BASE_URL, "infer", [])
    assert exc_info.value.message == "Prompt rejected by safety checker"


def test_transport_timeout_is_classified(monkeypatch, sleeps) -> None:
    post, _ = install(monkeypatch, [requests.exceptions.ReadTimeout("Read timed out.")], [])
    with pytest.raises(CanonicalError) as exc_info:
        gradio_client.call_gradio_api(BASE_URL, "infer", [])
    assert exc_info.value.kind is ErrorKind.TIMEOUT
    assert len(post.calls) == 1


def test_connection_error_is_provider_error_not_quota(monkeypatch, sleeps) -> None:
    refused = requests.ConnectionError(
        "HTTPSConnectionPool(host='owner-space.hf.space', port=443): "
        "Max retries exceeded with url: /gradio_api/call/infer"
    )
    post, _ = install(monkeypatch, [refused], [])

    with pytest.raises(CanonicalError) as exc_info:
        gradio_client.call_gradio_api(BASE_URL, "infer", [])

    assert exc_info.value.kind is ErrorKind.PROVIDER_ERROR
    assert exc_info.value.message == "Queue request failed: ConnectionError"
    assert len(post.calls) == 1
    assert sleeps == []
