"""Tests for the Replicate-backed provider adapters."""

import pytest
import requests

from storyreel.config import config
from storyreel.errors import CollaboratorUnavailable, ValidationError
from storyreel.models import HailuoParams, KlingParams, Veo3Params
from storyreel.services.providers import (
    HailuoProvider,
    KlingProvider,
    PredictionStatus,
    Veo3Provider,
    get_provider,
)


class FakeResponse:
    def __init__(self, status_code=200, data=None, text=""):
        self.status_code = status_code
        self._data = data or {}
        self.text = text

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return self._data


class FakeSession:
    """Replays queued responses; the last one repeats."""

    def __init__(self, *responses, error=None):
        self.responses = list(responses)
        self.error = error
        self.requests = []

    def request(self, method, url, headers=None, timeout=None, **kwargs):
        self.requests.append({"method": method, "url": url, "headers": headers, **kwargs})
        if self.error is not None:
            raise self.error
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]


def make(provider_cls, session, **kwargs):
    return provider_cls(api_token="test-token", poll_interval=0, session=session, **kwargs)


def test_kling_success_with_seed():
    session = FakeSession(
        FakeResponse(201, {"id": "p1", "status": "starting"}),
        FakeResponse(200, {"id": "p1", "status": "processing"}),
        FakeResponse(200, {"id": "p1", "status": "succeeded", "output": "https://cdn/x.mp4"}),
    )
    provider = make(KlingProvider, session)

    outcome = provider.render(
        "a red fox", "narration", KlingParams(duration=10), seed_image="https://example.com/a.png"
    )

    assert outcome.succeeded
    assert outcome.output_url == "https://cdn/x.mp4"
    assert outcome.prediction_id == "p1"
    post = session.requests[0]
    assert post["method"] == "POST"
    assert post["url"].endswith("/models/kwaivgi/kling-v2.0/predictions")
    assert post["headers"]["Authorization"] == "Bearer test-token"
    assert post["json"]["input"]["start_image"] == "https://example.com/a.png"
    assert post["json"]["input"]["duration"] == 10
    assert session.requests[1]["url"].endswith("/predictions/p1")


def test_hailuo_input_uses_first_frame_image():
    session = FakeSession(
        FakeResponse(201, {"id": "p2", "status": "succeeded", "output": ["https://cdn/y.mp4"]}),
    )
    provider = make(HailuoProvider, session)

    outcome = provider.render("x", "", HailuoParams(), seed_image="https://example.com/a.png")

    assert outcome.output_url == "https://cdn/y.mp4"
    model_input = session.requests[0]["json"]["input"]
    assert model_input["first_frame_image"] == "https://example.com/a.png"
    assert model_input["prompt_optimizer"] is True
    assert session.requests[0]["url"].endswith("/models/minimax/hailuo-02/predictions")


def test_upstream_failure_message_is_kept():
    session = FakeSession(
        FakeResponse(201, {"id": "p3", "status": "starting"}),
        FakeResponse(200, {"id": "p3", "status": "failed", "error": "flagged as sensitive"}),
    )
    outcome = make(Veo3Provider, session).render("x", "", Veo3Params())

    assert not outcome.succeeded
    assert outcome.status == PredictionStatus.FAILED
    assert outcome.error_message == "Video generation failed: flagged as sensitive"


def test_http_error_on_submit():
    session = FakeSession(FakeResponse(422, text="invalid input"))
    outcome = make(KlingProvider, session).render("x", "", KlingParams())

    assert outcome.status == PredictionStatus.FAILED
    assert outcome.error_message == "Replicate API error: 422 - invalid input"


def test_network_error_raises_unavailable():
    session = FakeSession(error=requests.ConnectionError("connection refused"))
    with pytest.raises(CollaboratorUnavailable):
        make(KlingProvider, session).render("x", "", KlingParams())


def test_poll_timeout():
    session = FakeSession(FakeResponse(200, {"id": "p4", "status": "processing"}))
    provider = make(KlingProvider, session, max_poll_time=0)

    outcome = provider.render("x", "", KlingParams())

    assert outcome.status == PredictionStatus.FAILED
    assert "timed out" in outcome.error_message


def test_params_for_another_provider_rejected():
    session = FakeSession(FakeResponse(201, {}))
    with pytest.raises(ValidationError):
        make(KlingProvider, session).render("x", "", Veo3Params())
    assert session.requests == []


def test_veo_rejects_seed_image():
    session = FakeSession(FakeResponse(201, {}))
    with pytest.raises(ValidationError):
        make(Veo3Provider, session).render("x", "", Veo3Params(), seed_image="https://example.com/a.png")


def test_empty_prompt_rejected():
    session = FakeSession(FakeResponse(201, {}))
    with pytest.raises(ValidationError):
        make(KlingProvider, session).render("  ", "", KlingParams())


def test_veo_input():
    provider = make(Veo3Provider, FakeSession(FakeResponse(201, {})))
    model_input = provider.build_input("x", Veo3Params(resolution="1080p", seed=7))
    assert model_input == {
        "prompt": "x",
        "resolution": "1080p",
        "seed": 7,
        "negative_prompt": "blurry, low quality, distorted",
    }


def test_get_provider():
    assert isinstance(get_provider("veo-3", api_token="t"), Veo3Provider)
    with pytest.raises(ValidationError):
        get_provider("sora", api_token="t")


def test_missing_token(monkeypatch):
    monkeypatch.setattr(config, "replicate_api_token", "")
    with pytest.raises(ValueError):
        KlingProvider()
