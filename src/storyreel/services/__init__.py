"""External service integrations."""

from .anthropic import AnthropicClient
from .providers import (
    PROVIDERS,
    HailuoProvider,
    KlingProvider,
    PredictionStatus,
    RenderOutcome,
    Veo3Provider,
    VideoProvider,
    get_provider,
)
from .storage import (
    GcsPersistence,
    LocalPersistence,
    Persistence,
    merged_video_path,
    scene_clip_path,
)

__all__ = [
    "AnthropicClient",
    "PROVIDERS",
    "HailuoProvider",
    "KlingProvider",
    "PredictionStatus",
    "RenderOutcome",
    "Veo3Provider",
    "VideoProvider",
    "get_provider",
    "GcsPersistence",
    "LocalPersistence",
    "Persistence",
    "merged_video_path",
    "scene_clip_path",
]
