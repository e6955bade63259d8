"""Per-scene generation job record."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Optional, Union
from uuid import uuid4

from .params import HailuoParams, KlingParams, Veo3Params


class JobStatus(str, Enum):
    """Lifecycle of one scene's generation."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class GenerationJob:
    """The latest render request issued for a scene.

    ``result`` is set only when succeeded, ``error`` only when failed.
    """

    scene_number: int
    provider_id: str
    parameters: Union[KlingParams, Veo3Params, HailuoParams]
    status: JobStatus = JobStatus.NOT_STARTED
    attempt: int = 1
    prompt: str = ""
    narration: str = ""
    seed_image: Optional[str] = None
    result: Optional[str] = None
    error: Optional[str] = None
    prediction_id: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    metadata: dict = field(default_factory=dict)
    job_id: str = field(default_factory=lambda: uuid4().hex)

    @property
    def finished(self) -> bool:
        return self.status in (JobStatus.SUCCEEDED, JobStatus.FAILED)

    def copy(self) -> "GenerationJob":
        return replace(self, metadata=dict(self.metadata))

    def to_dict(self) -> dict:
        return {
            "job_id": self.job_id,
            "scene_number": self.scene_number,
            "provider_id": self.provider_id,
            "parameters": self.parameters.model_dump(),
            "status": self.status.value,
            "attempt": self.attempt,
            "prompt": self.prompt,
            "narration": self.narration,
            "seed_image": self.seed_image,
            "result": self.result,
            "error": self.error,
            "prediction_id": self.prediction_id,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "metadata": self.metadata,
        }
