"""Minimax Hailuo-02 provider."""

from typing import Optional

from ...models import HailuoParams
from .base import VideoProvider


class HailuoProvider(VideoProvider):
    """Provider C: 6/10s clips; the 10s/768p pairing is checked by the params model."""

    provider_id = "hailuo-02"
    model = "minimax/hailuo-02"
    params_type = HailuoParams

    def build_input(
        self,
        prompt: str,
        params: HailuoParams,
        seed_image: Optional[str] = None,
    ) -> dict:
        model_input = {
            "prompt": prompt,
            "duration": params.duration,
            "resolution": params.resolution,
            "prompt_optimizer": params.prompt_optimizer,
        }
        if seed_image:
            model_input["first_frame_image"] = seed_image
        return model_input
