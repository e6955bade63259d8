"""Scenario agent that turns a written brief into scenes."""

import logging
from dataclasses import dataclass
from typing import Optional

from ..errors import ValidationError
from ..models import Scenario
from .base import BaseAgent

logger = logging.getLogger(__name__)

MIN_SCENES = 1
MAX_SCENES = 10
SECONDS_PER_SCENE = 5
TARGET_LENGTH = 60

SCENARIO_PROMPT_TEMPLATE = """Below is the blog content.
Please generate a video script in **English** based on this content.

Requirements:
- Video length = {sceneCount} scenes × 5 seconds each (total {totalSeconds} seconds)
- Total of {sceneCount} scenes
- For each scene:
  • Image prompt (for AI video generation), including:
      - Camera angle and camera movement (e.g., dolly, pan, tracking shot)
      - Composition and visual details (environment, mood, lighting)
      - Subject movement (what the people or objects are doing)
      - Transition hint to the next scene for natural flow
  • Narration sentence (for video audio): short and emotionally resonant
- Ensure the scenes transition naturally and form a cohesive storyline.
- Please output the result in the JSON format example below.
- Keep the visual tone consistent (e.g., warm, cinematic, minimalistic) across all scenes.

[Example Output Format]
{
  "title": "Morning Journey",
  "scenario": "A calming start to the day that gradually builds into an inspiring journey through city life.",
  "scenes": [
    {
      "scene_number": 1,
      "image_prompt": "Low-angle dolly-in shot of a woman slowly lifting a coffee cup by a sunlit window, steam rising, warm cinematic tone, soft focus background, natural morning light, subtle camera movement forward.",
      "narration": "The day begins with a warm cup of coffee."
    },
    {
      "scene_number": 2,
      "image_prompt": "Side-tracking shot following a man walking through a bustling city street, morning sunlight reflecting on glass buildings, people passing by in motion blur, smooth tracking camera movement, transition fade toward next scene.",
      "narration": "Even in busy daily life, we move forward toward our dreams."
    }
  ]
}

Please compose the video based on the following blog content:

[Blog Content]
{blogContent}"""

SCENARIO_SYSTEM_TEMPLATE = (
    "You are a professional video scenario writer. Please generate a 1-minute "
    "video scenario in JSON format based on the blog content. Each scene should "
    "be approximately {sceneDuration} seconds long with a total of {sceneCount} "
    "scenes, and must include image prompts and narration."
)


@dataclass
class ScenarioInput:
    """Input data for the scenario agent."""

    brief: str
    scene_count: int = 2


class ScenarioAgent(BaseAgent[ScenarioInput, Scenario]):
    """Agent that writes a scenario of N scenes from a brief.

    Each scene gets a video prompt and one narration line. The response
    must be a JSON object with ``title``, ``scenario`` and ``scenes``;
    anything else is a ParseError and no scenario is produced.
    """

    max_tokens = 2048
    top_p = 0.9

    def __init__(self, *args, scene_count: Optional[int] = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._scene_count = scene_count

    @property
    def name(self) -> str:
        return "ScenarioAgent"

    @property
    def system_prompt(self) -> str:
        return self.build_system_prompt(self._scene_count or 2)

    @staticmethod
    def build_system_prompt(scene_count: int) -> str:
        scene_duration = round(TARGET_LENGTH / scene_count)
        return (
            SCENARIO_SYSTEM_TEMPLATE
            .replace("{sceneDuration}", str(scene_duration))
            .replace("{sceneCount}", str(scene_count))
        )

    @staticmethod
    def build_prompt(brief: str, scene_count: int) -> str:
        return (
            SCENARIO_PROMPT_TEMPLATE
            .replace("{sceneCount}", str(scene_count))
            .replace("{totalSeconds}", str(scene_count * SECONDS_PER_SCENE))
            .replace("{blogContent}", brief.strip())
        )

    def run(self, input_data: ScenarioInput) -> Scenario:
        """Generate a scenario from the brief.

        Raises:
            ValidationError: If the brief is empty or the scene count is out of range.
            ParseError: If the response is not a well-formed scenario.
            CollaboratorUnavailable: If the text-completion service fails.
        """
        if not input_data.brief or not input_data.brief.strip():
            raise ValidationError("Brief cannot be empty")
        if not MIN_SCENES <= input_data.scene_count <= MAX_SCENES:
            raise ValidationError(
                f"Scene count must be between {MIN_SCENES} and {MAX_SCENES}, "
                f"got {input_data.scene_count}"
            )

        self._scene_count = input_data.scene_count
        self._logger.info(f"Composing {input_data.scene_count} scene(s) from brief")

        data = self.complete_json(self.build_prompt(input_data.brief, input_data.scene_count))
        scenario = Scenario.from_completion(data)
        if len(scenario.scenes) != input_data.scene_count:
            self._logger.warning(
                f"Asked for {input_data.scene_count} scenes, got {len(scenario.scenes)}"
            )
        self._logger.info(f"Composed scenario '{scenario.title}' with {len(scenario.scenes)} scenes")
        return scenario
