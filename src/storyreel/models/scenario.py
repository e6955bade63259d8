"""Scenario data model."""

from typing import Any, List
from uuid import uuid4
from pathlib import Path
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError
import yaml

from ..errors import ParseError
from .scene import Scene


class Scenario(BaseModel):
    """A titled, ordered list of scenes."""

    scenario_id: str = Field(
        default_factory=lambda: uuid4().hex[:12], description="Identifier used in storage paths"
    )
    title: str = Field(..., description="Scenario title")
    summary: str = Field(default="", description="One-paragraph synopsis")
    scenes: List[Scene] = Field(default_factory=list, description="Ordered scenes")

    class Config:
        """Pydantic config."""
        frozen = False

    @classmethod
    def from_completion(cls, data: Any) -> "Scenario":
        """Build a scenario from parsed text-completion output.

        Expects ``{"title", "scenario", "scenes": [{"image_prompt",
        "narration", ...}]}``. Scene numbers are reassigned 1..N.

        Raises:
            ParseError: If the structure does not match.
        """
        if not isinstance(data, dict):
            raise ParseError("Scenario response is not a JSON object")

        title = data.get("title")
        scenes_data = data.get("scenes")
        if not isinstance(title, str) or not title.strip():
            raise ParseError("Scenario response is missing a title")
        if not isinstance(scenes_data, list) or not scenes_data:
            raise ParseError("Scenario response does not contain a scenes array")

        scenes: list[Scene] = []
        for i, scene_data in enumerate(scenes_data):
            if not isinstance(scene_data, dict):
                raise ParseError(f"Scene {i + 1} is not an object")
            prompt = scene_data.get("image_prompt")
            narration = scene_data.get("narration")
            if not isinstance(prompt, str) or not isinstance(narration, str):
                raise ParseError(
                    f"Scene {i + 1} must have string image_prompt and narration"
                )
            scenes.append(
                Scene(scene_number=i + 1, image_prompt=prompt, narration=narration)
            )

        summary = data.get("scenario", data.get("summary", ""))
        try:
            return cls(title=title, summary=summary or "", scenes=scenes)
        except PydanticValidationError as e:
            raise ParseError(f"Invalid scenario: {e}")

    @classmethod
    def from_yaml(cls, path: Path) -> "Scenario":
        """Load scenario from YAML file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f)
        return cls(**data)

    def to_yaml(self, path: Path) -> None:
        """Save scenario to YAML file."""
        with open(path, "w") as f:
            yaml.safe_dump(self.model_dump(), f, default_flow_style=False, sort_keys=False)
