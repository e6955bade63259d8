"""Generative-video provider adapters."""

from typing import Optional

from ...errors import ValidationError
from .base import PredictionStatus, RenderOutcome, VideoProvider
from .hailuo import HailuoProvider
from .kling import KlingProvider
from .veo import Veo3Provider

PROVIDERS: dict[str, type[VideoProvider]] = {
    KlingProvider.provider_id: KlingProvider,
    Veo3Provider.provider_id: Veo3Provider,
    HailuoProvider.provider_id: HailuoProvider,
}


def get_provider(provider_id: str, api_token: Optional[str] = None, **kwargs) -> VideoProvider:
    """Instantiate the adapter registered for a provider id.

    Raises:
        ValidationError: If the provider id is unknown.
    """
    try:
        provider_cls = PROVIDERS[provider_id]
    except KeyError:
        raise ValidationError(
            f"Unknown provider: {provider_id}. Available: {list(PROVIDERS)}"
        )
    return provider_cls(api_token=api_token, **kwargs)


__all__ = [
    "PredictionStatus",
    "RenderOutcome",
    "VideoProvider",
    "KlingProvider",
    "Veo3Provider",
    "HailuoProvider",
    "PROVIDERS",
    "get_provider",
]
