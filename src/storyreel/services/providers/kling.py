"""Kling v2.0 provider (start-image capable)."""

from typing import Optional

from ...models import KlingParams
from .base import VideoProvider


class KlingProvider(VideoProvider):
    """Provider A: fixed 5/10s clips in three aspect ratios."""

    provider_id = "kling-v2"
    model = "kwaivgi/kling-v2.0"
    params_type = KlingParams

    def build_input(
        self,
        prompt: str,
        params: KlingParams,
        seed_image: Optional[str] = None,
    ) -> dict:
        model_input = {
            "prompt": prompt,
            "duration": params.duration,
            "cfg_scale": params.cfg_scale,
            "aspect_ratio": params.aspect_ratio,
        }
        if params.negative_prompt and params.negative_prompt.strip():
            model_input["negative_prompt"] = params.negative_prompt.strip()
        if seed_image:
            model_input["start_image"] = seed_image
        return model_input
