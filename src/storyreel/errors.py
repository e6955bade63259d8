"""Error taxonomy shared across the pipeline."""

from typing import Optional


class StoryreelError(Exception):
    """Base class for pipeline errors."""


class ValidationError(StoryreelError, ValueError):
    """Input rejected before anything was applied or sent upstream."""


class ParseError(StoryreelError):
    """Text-completion output did not match the scenario shape."""

    def __init__(self, message: str, raw: Optional[str] = None) -> None:
        super().__init__(message)
        self.raw = raw


class ProviderError(StoryreelError):
    """A single scene's generation failed upstream."""

    def __init__(self, scene_number: int, message: str) -> None:
        super().__init__(f"Scene {scene_number}: {message}")
        self.scene_number = scene_number
        self.message = message


class CollaboratorUnavailable(StoryreelError):
    """An external service (network, storage, encoder) could not be reached."""

    def __init__(self, collaborator: str, message: str) -> None:
        super().__init__(f"{collaborator} unavailable: {message}")
        self.collaborator = collaborator
        self.message = message
