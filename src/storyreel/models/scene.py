"""Scene data model."""

from typing import List, Literal, Optional
from pydantic import BaseModel, Field

# Prompt forced onto a scene when a seed image is attached.
SEED_IMAGE_PROMPT = "Keep the image content unchanged and minimize actions."

# Spoken-presenter template used by announcer mode; the narration follows it.
ANNOUNCER_PROMPT = (
    "The news anchor is wearing a clean and elegant white blouse with no logos "
    "or prints, sleeves neatly rolled up, confidently standing in a modern news "
    "studio. A breaking news opening screen appears, and a short-haired, "
    "neat-looking Asian female news anchor excitedly says:"
)

# Provider that voices the narration itself when announcer mode is on.
ANNOUNCER_PROVIDER = "veo-3"


def announcer_prompt(narration: str) -> str:
    """Build the announcer prompt for a narration line."""
    return f"{ANNOUNCER_PROMPT} {narration}"


class Scene(BaseModel):
    """Represents a single scene in the video."""

    scene_number: int = Field(default=1, description="1-based position in the scenario", ge=1)
    image_prompt: str = Field(default="", description="Video generation prompt")
    narration: str = Field(default="", description="Narration line for the scene")
    seed_image: Optional[str] = Field(None, description="Start image URL")
    rendered_clip: Optional[str] = Field(None, description="Provider clip URL (ephemeral)")
    persisted_clip: Optional[str] = Field(None, description="Durable clip URL")
    panels: List[str] = Field(
        default_factory=list, description="Fragments composed into one prompt when set"
    )
    layout: str = Field(default="horizontal", description="Panel layout for composed prompts")
    panel_unit: Literal["panel", "scene"] = Field(
        default="scene", description="Token naming each composed part"
    )
    announcer: bool = Field(default=False, description="Announcer mode enabled")
    original_prompt: Optional[str] = Field(
        None, description="Prompt saved when announcer mode was enabled"
    )

    class Config:
        """Pydantic config."""
        frozen = False

    def attach_seed_image(self, url: str) -> None:
        """Attach a start image and switch the prompt to the seed template.

        The author's prompt is overwritten and not kept anywhere.
        """
        self.seed_image = url.strip()
        self.image_prompt = SEED_IMAGE_PROMPT

    def set_announcer(self, enabled: bool) -> None:
        """Toggle announcer mode, saving or restoring the author's prompt."""
        if enabled == self.announcer:
            return

        if enabled:
            self.original_prompt = self.image_prompt
            self.image_prompt = announcer_prompt(self.narration)
        else:
            if self.original_prompt is not None:
                self.image_prompt = self.original_prompt
            self.original_prompt = None
        self.announcer = enabled

    def set_narration(self, narration: str) -> None:
        """Replace the narration, keeping an announcer prompt in sync."""
        self.narration = narration
        if self.announcer:
            self.image_prompt = announcer_prompt(narration)

    def apply_announcer(self, provider_id: str) -> bool:
        """Rewrite the prompt for announcer mode on the announcer provider.

        Returns:
            True if the prompt was substituted.
        """
        if not self.announcer or provider_id != ANNOUNCER_PROVIDER:
            return False
        self.image_prompt = announcer_prompt(self.narration)
        return True

    @property
    def uses_panels(self) -> bool:
        """True when the prompt is composed from panels at render time.

        Announcer mode and an attached seed image both pin the prompt to
        ``image_prompt``.
        """
        return bool(self.panels) and not self.announcer and not self.seed_image

    def request_narration(self, provider_id: str) -> str:
        """Narration to send upstream for the given provider.

        The announcer provider voices the prompt itself, so the narration is
        sent as an empty string rather than omitted.
        """
        if self.announcer and provider_id == ANNOUNCER_PROVIDER:
            return ""
        return self.narration
