"""Google Veo 3 provider.

Veo 3 renders its own audio track, which is what announcer mode relies on:
the spoken line lives in the prompt and the narration is sent empty.
"""

from typing import Optional

from ...models import Veo3Params
from .base import VideoProvider


class Veo3Provider(VideoProvider):
    """Provider B: resolution-only parameters, no start image."""

    provider_id = "veo-3"
    model = "google/veo-3"
    params_type = Veo3Params

    def build_input(
        self,
        prompt: str,
        params: Veo3Params,
        seed_image: Optional[str] = None,
    ) -> dict:
        model_input = {
            "prompt": prompt,
            "resolution": params.resolution,
        }
        if params.seed is not None:
            model_input["seed"] = params.seed
        if params.negative_prompt and params.negative_prompt.strip():
            model_input["negative_prompt"] = params.negative_prompt.strip()
        return model_input
