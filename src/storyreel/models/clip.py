"""Clip edit model for the assembly working set."""

from enum import Enum
from typing import Optional, Tuple
from pydantic import BaseModel, Field

from ..errors import ValidationError

DEFAULT_TRIM = (0.0, 5.0)


class CaptionStyle(str, Enum):
    """How burned-in captions are drawn."""

    BOX = "box"
    OUTLINE = "outline"


class ClipEdit(BaseModel):
    """A clip plus the user's trim window, speed, caption and inclusion flag.

    Values stay freely editable; they are checked when a merge is requested.
    """

    clip_ref: str = Field(..., description="Clip URL")
    caption: Optional[str] = Field(None, description="Caption burned into the clip")
    trim: Tuple[float, float] = Field(default=DEFAULT_TRIM, description="(start, end) seconds")
    speed: float = Field(default=1.0, description="Playback speed multiplier")
    included: bool = Field(default=False, description="Part of the next merge")
    scene_number: Optional[int] = Field(None, description="Scene the clip was rendered for")

    class Config:
        """Pydantic config."""
        frozen = False

    @property
    def start(self) -> float:
        return self.trim[0]

    @property
    def end(self) -> float:
        return self.trim[1]

    @property
    def duration(self) -> float:
        """Length of the trimmed window before the speed change."""
        return self.end - self.start

    def check(self) -> None:
        """Validate the edit before it is sent to the encoder.

        Raises:
            ValidationError: If the trim window or speed is malformed.
        """
        if not self.clip_ref or not self.clip_ref.strip():
            raise ValidationError("Clip reference is empty")
        if self.start < 0:
            raise ValidationError(f"Trim start must be >= 0, got {self.start}")
        if not self.start < self.end:
            raise ValidationError(
                f"Trim start must be before end, got ({self.start}, {self.end})"
            )
        if not self.speed > 0:
            raise ValidationError(f"Speed must be positive, got {self.speed}")
