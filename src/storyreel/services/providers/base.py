"""Shared plumbing for Replicate-hosted video generation providers."""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Optional

import requests

from ...config import config
from ...errors import CollaboratorUnavailable, ValidationError

logger = logging.getLogger(__name__)


class PredictionStatus(str, Enum):
    """Status of a Replicate prediction."""

    STARTING = "starting"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"


TERMINAL_STATUSES = {
    PredictionStatus.SUCCEEDED,
    PredictionStatus.FAILED,
    PredictionStatus.CANCELED,
}


@dataclass
class RenderOutcome:
    """Result of one provider render call."""

    status: PredictionStatus
    prediction_id: Optional[str] = None
    output_url: Optional[str] = None
    error_message: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    metadata: dict = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == PredictionStatus.SUCCEEDED and bool(self.output_url)


class VideoProvider(ABC):
    """Base class for generative-video backends.

    Subclasses declare their Replicate model and parameter type and map a
    prompt plus parameters onto the model's input. Submission and polling
    live here. Upstream failures come back as failed outcomes carrying the
    upstream message; network failures raise CollaboratorUnavailable.
    Nothing is retried.
    """

    API_URL = "https://api.replicate.com/v1"

    provider_id: ClassVar[str]
    model: ClassVar[str]
    params_type: ClassVar[type]

    def __init__(
        self,
        api_token: Optional[str] = None,
        poll_interval: Optional[float] = None,
        max_poll_time: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize the provider.

        Args:
            api_token: Replicate API token. Defaults to REPLICATE_API_TOKEN env var.
            poll_interval: Seconds between status checks.
            max_poll_time: Maximum seconds to wait for one prediction.
            session: HTTP session to reuse.
        """
        self._api_token = api_token or config.replicate_api_token
        if not self._api_token:
            raise ValueError("Replicate API token not provided. Set REPLICATE_API_TOKEN env var.")
        self._poll_interval = poll_interval if poll_interval is not None else config.poll_interval
        self._max_poll_time = max_poll_time if max_poll_time is not None else config.max_poll_time
        self._session = session or requests.Session()

    @abstractmethod
    def build_input(
        self,
        prompt: str,
        params: Any,
        seed_image: Optional[str] = None,
    ) -> dict:
        """Map a prompt and validated parameters onto the model input."""
        ...

    def render(
        self,
        prompt: str,
        narration: str,
        params: Any,
        seed_image: Optional[str] = None,
    ) -> RenderOutcome:
        """Generate one clip and wait for it.

        Args:
            prompt: Generation prompt.
            narration: Narration recorded with the request. The announcer
                provider receives an empty string when it voices the prompt.
            params: This provider's parameter model.
            seed_image: Start image URL, already checked by the caller.

        Returns:
            RenderOutcome with the clip URL or the upstream error.

        Raises:
            ValidationError: If the prompt is empty or params belong to another provider.
            CollaboratorUnavailable: If the provider cannot be reached.
        """
        if not prompt or not prompt.strip():
            raise ValidationError("Prompt cannot be empty")
        if not isinstance(params, self.params_type):
            raise ValidationError(
                f"{self.provider_id} expects {self.params_type.__name__}, "
                f"got {type(params).__name__}"
            )
        if seed_image and not params.supports_seed_image:
            raise ValidationError(f"{self.provider_id} does not accept a seed image")

        model_input = self.build_input(prompt.strip(), params, seed_image)
        outcome = RenderOutcome(
            status=PredictionStatus.STARTING,
            started_at=datetime.now(),
            metadata={
                "model": self.model,
                "input": model_input,
                "narration": narration,
            },
        )

        logger.info(f"Starting {self.provider_id} generation")
        logger.debug(f"Prompt: {prompt[:100]}...")

        response = self._request("POST", f"{self.API_URL}/models/{self.model}/predictions",
                                 json={"input": model_input})
        if not response.ok:
            return self._fail(outcome, f"Replicate API error: {response.status_code} - {response.text[:500]}")

        prediction = response.json()
        outcome.prediction_id = prediction.get("id")
        return self._poll_prediction(prediction, outcome)

    def _poll_prediction(self, prediction: dict, outcome: RenderOutcome) -> RenderOutcome:
        """Poll a prediction until it reaches a terminal status or times out."""
        start_time = time.monotonic()
        poll_count = 0

        while True:
            status = self._parse_status(prediction.get("status"))
            outcome.status = status

            if status == PredictionStatus.SUCCEEDED:
                output_url = self._extract_output(prediction.get("output"))
                if not output_url:
                    return self._fail(outcome, "Prediction succeeded without an output URL")
                outcome.output_url = output_url
                outcome.completed_at = datetime.now()
                logger.info(f"Prediction {outcome.prediction_id} completed successfully")
                return outcome

            if status in (PredictionStatus.FAILED, PredictionStatus.CANCELED):
                error = prediction.get("error") or "Video generation failed"
                if isinstance(error, dict):
                    error = error.get("message") or str(error)
                return self._fail(outcome, f"Video generation failed: {error}", status)

            elapsed = time.monotonic() - start_time
            if elapsed > self._max_poll_time:
                logger.warning(f"Prediction {outcome.prediction_id} timed out after {elapsed:.1f}s")
                return self._fail(outcome, f"Video generation timed out after {self._max_poll_time}s")

            time.sleep(self._poll_interval)
            poll_count += 1
            logger.debug(f"Polling prediction (attempt {poll_count}): {outcome.prediction_id}")

            response = self._request("GET", f"{self.API_URL}/predictions/{outcome.prediction_id}")
            if not response.ok:
                return self._fail(
                    outcome,
                    f"Replicate API error: {response.status_code} - {response.text[:500]}",
                )
            prediction = response.json()

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        headers = {
            "Authorization": f"Bearer {self._api_token}",
            "Content-Type": "application/json",
        }
        try:
            return self._session.request(method, url, headers=headers, timeout=60, **kwargs)
        except requests.RequestException as e:
            logger.error(f"{self.provider_id} request failed: {e}")
            raise CollaboratorUnavailable(self.provider_id, str(e)) from e

    @staticmethod
    def _parse_status(value: Optional[str]) -> PredictionStatus:
        try:
            return PredictionStatus(value)
        except ValueError:
            return PredictionStatus.PROCESSING

    @staticmethod
    def _extract_output(output: Any) -> Optional[str]:
        if isinstance(output, list):
            return output[0] if output else None
        if isinstance(output, str):
            return output
        return None

    @staticmethod
    def _fail(
        outcome: RenderOutcome,
        message: str,
        status: PredictionStatus = PredictionStatus.FAILED,
    ) -> RenderOutcome:
        logger.error(message)
        outcome.status = status
        outcome.error_message = message
        outcome.completed_at = datetime.now()
        return outcome
