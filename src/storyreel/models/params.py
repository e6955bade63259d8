"""Provider-specific generation parameters.

Each provider accepts a different parameter shape. They form a union
discriminated by ``provider_id`` so a batch carries exactly one validated
shape, checked before anything is dispatched.
"""

from typing import Annotated, ClassVar, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter, model_validator
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError

DEFAULT_NEGATIVE_PROMPT = "blurry, low quality, distorted"


class KlingParams(BaseModel):
    """Provider A: Kling v2.0."""

    provider_id: Literal["kling-v2"] = "kling-v2"
    duration: Literal[5, 10] = 5
    aspect_ratio: Literal["16:9", "9:16", "1:1"] = "16:9"
    cfg_scale: float = Field(default=0.5, ge=0.0, le=1.0)
    negative_prompt: str = DEFAULT_NEGATIVE_PROMPT

    supports_seed_image: ClassVar[bool] = True


class Veo3Params(BaseModel):
    """Provider B: Veo 3, which voices announcer narration itself."""

    provider_id: Literal["veo-3"] = "veo-3"
    resolution: Literal["720p", "1080p"] = "720p"
    seed: Optional[int] = None
    negative_prompt: str = DEFAULT_NEGATIVE_PROMPT

    supports_seed_image: ClassVar[bool] = False


class HailuoParams(BaseModel):
    """Provider C: Hailuo-02."""

    provider_id: Literal["hailuo-02"] = "hailuo-02"
    duration: Literal[6, 10] = 6
    resolution: Literal["768p", "1080p"] = "1080p"
    prompt_optimizer: bool = True

    supports_seed_image: ClassVar[bool] = True

    @model_validator(mode="after")
    def _check_duration_resolution(self) -> "HailuoParams":
        if self.duration == 10 and self.resolution != "768p":
            raise ValueError("10 second clips are only available at 768p")
        return self


ProviderParams = Annotated[
    Union[KlingParams, Veo3Params, HailuoParams],
    Field(discriminator="provider_id"),
]

PROVIDER_IDS = ("kling-v2", "veo-3", "hailuo-02")

_params_adapter: TypeAdapter = TypeAdapter(ProviderParams)


def parse_params(data: dict) -> Union[KlingParams, Veo3Params, HailuoParams]:
    """Validate a raw parameter mapping into its provider's shape.

    Raises:
        ValidationError: If the provider is unknown or a value is out of range.
    """
    try:
        return _params_adapter.validate_python(data)
    except PydanticValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        raise ValidationError(f"Invalid provider parameters: {messages}") from e
