from __future__ import annotations

import pytest


@pytest.fixture
def sleeps(monkeypatch):
    """Record backoff delays instead of sleeping."""
    recorded: list[float] = []
    monkeypatch.setattr("imagegate.image.gradio_client.time.sleep", recorded.append)
    return recorded
