"""Shared fakes for provider, encoder and text-completion collaborators."""

import threading
from typing import Optional

import pytest

from storyreel.errors import CollaboratorUnavailable
from storyreel.models import Scene
from storyreel.services.providers import PredictionStatus, RenderOutcome
from storyreel.store import SceneStore


class FakeProvider:
    """Provider stand-in keyed by prompt.

    Prompts listed in ``failures`` come back as failed outcomes, prompts in
    ``unavailable`` raise CollaboratorUnavailable, everything else succeeds
    with a URL derived from the call count.
    """

    provider_id = "fake"

    def __init__(self, failures: Optional[dict] = None, unavailable=(), **kwargs) -> None:
        self.failures = failures or {}
        self.unavailable = set(unavailable)
        self.calls = []
        self._lock = threading.Lock()

    def render(self, prompt, narration, params, seed_image=None):
        with self._lock:
            self.calls.append(
                {
                    "prompt": prompt,
                    "narration": narration,
                    "params": params,
                    "seed_image": seed_image,
                }
            )
            count = len(self.calls)

        if prompt in self.unavailable:
            raise CollaboratorUnavailable("fake", "connection reset")
        if prompt in self.failures:
            return RenderOutcome(
                status=PredictionStatus.FAILED,
                prediction_id=f"pred-{count}",
                error_message=self.failures[prompt],
            )
        return RenderOutcome(
            status=PredictionStatus.SUCCEEDED,
            prediction_id=f"pred-{count}",
            output_url=f"https://cdn.example.com/clip-{count}.mp4",
        )

    def call_for(self, prompt):
        return [call for call in self.calls if call["prompt"] == prompt]


class FakeEncoder:
    """Encoder stand-in that records requests."""

    def __init__(self, data: bytes = b"merged-video") -> None:
        self.data = data
        self.requests = []

    def encode(self, request):
        self.requests.append(request)
        return self.data


class FakeClient:
    """Text-completion stand-in returning a canned response."""

    def __init__(self, response: str = "") -> None:
        self.response = response
        self.calls = []

    def create_message(self, **kwargs):
        self.calls.append(kwargs)
        return self.response


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def encoder():
    return FakeEncoder()


@pytest.fixture
def three_scenes():
    return [
        Scene(image_prompt="A sunrise over the harbor", narration="The city wakes."),
        Scene(image_prompt="Traders rushing into the market", narration="Prices jump."),
        Scene(image_prompt="A quiet evening street", narration="Calm returns."),
    ]


@pytest.fixture
def store(three_scenes):
    return SceneStore(three_scenes)
