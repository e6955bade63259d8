"""Text-completion agents."""

from .base import BaseAgent, extract_json
from .scenario import ScenarioAgent, ScenarioInput

__all__ = ["BaseAgent", "ScenarioAgent", "ScenarioInput", "extract_json"]
