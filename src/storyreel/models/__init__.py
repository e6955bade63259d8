"""Data models for the scenario pipeline."""

from .scene import Scene, ANNOUNCER_PROMPT, SEED_IMAGE_PROMPT
from .scenario import Scenario
from .params import (
    KlingParams,
    Veo3Params,
    HailuoParams,
    ProviderParams,
    PROVIDER_IDS,
    parse_params,
)
from .job import GenerationJob, JobStatus
from .clip import ClipEdit, CaptionStyle

__all__ = [
    "Scene",
    "ANNOUNCER_PROMPT",
    "SEED_IMAGE_PROMPT",
    "Scenario",
    "KlingParams",
    "Veo3Params",
    "HailuoParams",
    "ProviderParams",
    "PROVIDER_IDS",
    "parse_params",
    "GenerationJob",
    "JobStatus",
    "ClipEdit",
    "CaptionStyle",
]
