"""Ordered scene collection with contiguous numbering."""

import logging
from threading import Lock
from typing import Iterable, Iterator, Optional, Tuple

from .errors import ValidationError
from .models import Scene

logger = logging.getLogger(__name__)


class SceneStore:
    """Owns the scenes of one scenario.

    Every command swaps in a new list under the lock and returns a snapshot
    of copies, so callers never observe a half-applied mutation and cannot
    edit stored scenes behind the store's back. ``version`` increases by one
    on each successful mutation.
    """

    def __init__(self, scenes: Optional[Iterable[Scene]] = None) -> None:
        self._lock = Lock()
        self._scenes: list[Scene] = self._renumbered(
            [scene.model_copy(deep=True) for scene in scenes or []]
        )
        self._version = 0

    @property
    def version(self) -> int:
        return self._version

    def __len__(self) -> int:
        with self._lock:
            return len(self._scenes)

    def __iter__(self) -> Iterator[Scene]:
        return iter(self.snapshot())

    def snapshot(self) -> Tuple[Scene, ...]:
        """Return copies of the current scenes in order."""
        with self._lock:
            return self._copies(self._scenes)

    def get(self, index: int) -> Scene:
        """Return a copy of the scene at a 0-based index."""
        with self._lock:
            self._check_index(index)
            return self._scenes[index].model_copy(deep=True)

    def by_number(self, scene_number: int) -> Scene:
        """Return a copy of the scene with the given 1-based number."""
        return self.get(scene_number - 1)

    def replace_all(self, scenes: Iterable[Scene]) -> Tuple[Scene, ...]:
        """Replace every scene at once, renumbering 1..N."""
        new_scenes = self._renumbered([scene.model_copy(deep=True) for scene in scenes])
        with self._lock:
            self._scenes = new_scenes
            self._version += 1
            return self._copies(new_scenes)

    def insert(self, scene: Scene) -> Tuple[Scene, ...]:
        """Append a scene, then renumber the whole sequence."""
        with self._lock:
            new_scenes = list(self._scenes)
            new_scenes.append(scene.model_copy(deep=True))
            self._scenes = self._renumbered(new_scenes)
            self._version += 1
            logger.debug(f"Inserted scene {len(new_scenes)}")
            return self._copies(new_scenes)

    def delete(self, index: int) -> Tuple[Scene, ...]:
        """Remove the scene at a 0-based index, then renumber.

        Raises:
            ValidationError: If the index is out of range or only one scene is left.
        """
        with self._lock:
            self._check_index(index)
            if len(self._scenes) <= 1:
                raise ValidationError("A scenario must keep at least one scene")
            new_scenes = [s for i, s in enumerate(self._scenes) if i != index]
            new_scenes = self._renumbered(new_scenes)
            self._scenes = new_scenes
            self._version += 1
            logger.debug(f"Deleted scene {index + 1}; {len(new_scenes)} left")
            return self._copies(new_scenes)

    def update(self, index: int, scene: Scene) -> Tuple[Scene, ...]:
        """Replace the scene at a 0-based index without renumbering."""
        with self._lock:
            self._check_index(index)
            new_scenes = list(self._scenes)
            new_scenes[index] = scene.model_copy(deep=True, update={"scene_number": index + 1})
            self._scenes = new_scenes
            self._version += 1
            return self._copies(new_scenes)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._scenes):
            raise ValidationError(
                f"Scene index {index} out of range (0..{len(self._scenes) - 1})"
            )

    @staticmethod
    def _renumbered(scenes: list[Scene]) -> list[Scene]:
        for i, scene in enumerate(scenes):
            scene.scene_number = i + 1
        return scenes

    @staticmethod
    def _copies(scenes: list[Scene]) -> Tuple[Scene, ...]:
        return tuple(scene.model_copy(deep=True) for scene in scenes)
