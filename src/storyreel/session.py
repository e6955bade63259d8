"""One principal's scenario, its render jobs and its assembly working set."""

import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Tuple, Union

import requests

from .agents import ScenarioAgent, ScenarioInput
from .editor import AssemblyEngine, Encoder, MergeResult, MoviePyEncoder
from .errors import CollaboratorUnavailable, ValidationError
from .models import CaptionStyle, GenerationJob, JobStatus, Scenario, Scene
from .orchestrator import GenerationOrchestrator, Params, resolve_params
from .safety import is_safe_seed_url, require_safe_seed_url
from .services.providers import VideoProvider, get_provider
from .services.storage import GcsPersistence, Persistence, merged_video_path, scene_clip_path
from .store import SceneStore

logger = logging.getLogger(__name__)


class ScenarioSession:
    """Owns a scenario and wires the editing, rendering and merging steps.

    Collaborators are injected so each can be replaced; the scenario agent
    and the persistence backend are created on first use when not given.
    """

    def __init__(
        self,
        principal: str,
        agent: Optional[ScenarioAgent] = None,
        provider_factory: Callable[[str], VideoProvider] = get_provider,
        encoder: Optional[Encoder] = None,
        persistence: Optional[Persistence] = None,
        max_workers: Optional[int] = None,
        http: Optional[requests.Session] = None,
    ) -> None:
        """Initialize the session.

        Args:
            principal: Opaque identity that scopes persisted objects.
            agent: Scenario agent for ``compose_scenario``.
            provider_factory: Builds a provider adapter from its id.
            encoder: Merge encoder. Defaults to MoviePyEncoder.
            persistence: Durable storage. Defaults to GcsPersistence.
            max_workers: Maximum concurrent render jobs.
            http: HTTP session used to fetch rendered clips.

        Raises:
            ValidationError: If the principal is empty.
        """
        if not principal or not principal.strip():
            raise ValidationError("A principal is required")
        self.principal = principal.strip()

        self._agent = agent
        self._persistence = persistence
        self._http = http or requests.Session()
        self._params: Optional[Params] = None
        self._scenario: Optional[Scenario] = None

        self.store = SceneStore()
        self.orchestrator = GenerationOrchestrator(
            self.store, provider_factory=provider_factory, max_workers=max_workers
        )
        self.assembly = AssemblyEngine(encoder or MoviePyEncoder())

    @property
    def scenario(self) -> Optional[Scenario]:
        """The loaded scenario with its current scenes, or None."""
        if self._scenario is None:
            return None
        return self._scenario.model_copy(update={"scenes": list(self.store.snapshot())})

    @property
    def params(self) -> Optional[Params]:
        return self._params

    def compose_scenario(self, brief: str, scene_count: int = 2) -> Scenario:
        """Write a new scenario from a brief and make it current.

        Raises:
            ValidationError: If the brief or scene count is invalid.
            ParseError: If the completion is malformed. The current scenario is kept.
            CollaboratorUnavailable: If the text-completion service fails.
        """
        if self._agent is None:
            self._agent = ScenarioAgent()
        scenario = self._agent.run(ScenarioInput(brief=brief, scene_count=scene_count))
        return self.load_scenario(scenario)

    def create_manual_scenario(
        self,
        scenes: Iterable[Union[Scene, Tuple[str, str]]],
        title: Optional[str] = None,
    ) -> Scenario:
        """Make a scenario from hand-written ``(image_prompt, narration)`` pairs."""
        built = [
            scene if isinstance(scene, Scene) else Scene(image_prompt=scene[0], narration=scene[1])
            for scene in scenes
        ]
        if not built:
            raise ValidationError("A scenario needs at least one scene")
        return self.load_scenario(Scenario(title=title or "Untitled scenario", scenes=built))

    def load_scenario(self, scenario: Scenario) -> Scenario:
        """Replace the current scenario, dropping jobs and the working set."""
        self.orchestrator.discard()
        self.assembly.clear()
        self._scenario = scenario.model_copy(update={"scenes": []})
        self.store.replace_all(scenario.scenes)
        logger.info(f"Loaded scenario '{scenario.title}' with {len(self.store)} scenes")
        return self.scenario

    def add_manual_scene(self, image_prompt: str, narration: str = "") -> Tuple[Scene, ...]:
        """Append a scene, starting an untitled scenario if none is loaded."""
        if self._scenario is None:
            self._scenario = Scenario(title="Untitled scenario")
        return self.store.insert(Scene(image_prompt=image_prompt, narration=narration))

    def delete_scene(self, index: int) -> Tuple[Scene, ...]:
        """Delete a scene; its job goes with it and later jobs follow the renumbering."""
        snapshot = self.store.delete(index)
        self.orchestrator.renumber_after_delete(index + 1)
        return snapshot

    def update_scene(self, index: int, scene: Scene) -> Tuple[Scene, ...]:
        return self.store.update(index, scene)

    def attach_seed_image(self, index: int, url: str, strict: bool = False) -> Tuple[Scene, ...]:
        """Attach a start image to a scene.

        Unsafe URLs are kept but not sent at render time. With ``strict``
        they are rejected up front.
        """
        if strict:
            require_safe_seed_url(url)
        elif not is_safe_seed_url(url):
            logger.warning(f"Scene {index + 1}: seed image will not be sent upstream")
        scene = self.store.get(index)
        scene.attach_seed_image(url)
        return self.store.update(index, scene)

    def seed_status(self, index: int) -> Optional[bool]:
        """Whether the scene's seed image will be sent; None without a seed."""
        scene = self.store.get(index)
        if not scene.seed_image:
            return None
        return is_safe_seed_url(scene.seed_image)

    def set_announcer(self, index: int, enabled: bool) -> Tuple[Scene, ...]:
        scene = self.store.get(index)
        scene.set_announcer(enabled)
        return self.store.update(index, scene)

    def set_narration(self, index: int, narration: str) -> Tuple[Scene, ...]:
        scene = self.store.get(index)
        scene.set_narration(narration)
        return self.store.update(index, scene)

    def select_provider(self, params: Union[Params, dict]) -> Params:
        """Choose the provider and parameters used by later renders."""
        self._params = resolve_params(params)
        logger.info(f"Selected provider {self._params.provider_id}")
        return self._params

    def render_scene(self, scene_number: int) -> GenerationJob:
        """Render one scene with the selected provider."""
        return self.render_all(scene_numbers=[scene_number])[0]

    def render_all(self, scene_numbers: Optional[Iterable[int]] = None) -> List[GenerationJob]:
        """Render scenes with the selected provider and record their clips.

        Raises:
            ValidationError: If no provider is selected or no scenario is loaded.
        """
        if self._params is None:
            raise ValidationError("Select a provider before rendering")
        if not len(self.store):
            raise ValidationError("No scenes to render")

        jobs = self.orchestrator.render_all(self._params, scene_numbers=scene_numbers)
        for job in jobs:
            if job.status == JobStatus.SUCCEEDED and job.scene_number <= len(self.store):
                index = job.scene_number - 1
                scene = self.store.get(index)
                scene.rendered_clip = job.result
                self.store.update(index, scene)
        return jobs

    def job_status(self) -> dict:
        return self.orchestrator.status()

    def collect_rendered(self) -> List[int]:
        """Pull succeeded jobs into the working set, included by default."""
        return self.assembly.add_rendered(self.orchestrator.jobs())

    def collect_scene_clips(self) -> List[int]:
        """Pull clips already recorded on the scenes into the working set.

        Prefers the durable copy over the provider URL.
        """
        present = {clip.clip_ref for clip in self.assembly.clips}
        indices = []
        for scene in self.store.snapshot():
            ref = scene.persisted_clip or scene.rendered_clip
            if not ref or ref in present:
                continue
            index = self.assembly.add_clip(ref, included=True)
            self.assembly.update_clip(
                index, caption=scene.narration or None, scene_number=scene.scene_number
            )
            indices.append(index)
        return indices

    def add_clip_url(self, url: str) -> int:
        """Add an external clip; it is left out of merges until included."""
        if not url or not url.strip():
            raise ValidationError("Clip URL cannot be empty")
        return self.assembly.add_clip(url.strip(), included=False)

    def merge(
        self,
        caption_color: str = "#ffffff",
        caption_style: Union[CaptionStyle, str] = CaptionStyle.BOX,
    ) -> MergeResult:
        return self.assembly.merge(caption_color=caption_color, caption_style=caption_style)

    def persist(self, result: MergeResult, name: Optional[str] = None) -> str:
        """Store a merged video durably and return its URL."""
        scenario = self._require_scenario()
        filename = name or f"merged-{datetime.now().strftime('%Y%m%d-%H%M%S')}.mp4"
        path = merged_video_path(self.principal, scenario.scenario_id, filename)
        return self._storage().write(path, result.read())

    def persist_scene_clip(self, scene_number: int) -> str:
        """Copy a scene's rendered clip to durable storage.

        Raises:
            ValidationError: If the scene has no rendered clip.
            CollaboratorUnavailable: If the clip cannot be fetched or stored.
        """
        scenario = self._require_scenario()
        scene = self.store.by_number(scene_number)
        if not scene.rendered_clip:
            raise ValidationError(f"Scene {scene_number} has no rendered clip")

        try:
            response = self._http.get(scene.rendered_clip, timeout=120)
            response.raise_for_status()
        except requests.RequestException as e:
            raise CollaboratorUnavailable("clip download", str(e)) from e

        path = scene_clip_path(self.principal, scenario.scenario_id, scene_number)
        url = self._storage().write(path, response.content)

        # The scene may have moved while the clip was copied
        current = self.store.by_number(scene_number)
        if current.rendered_clip == scene.rendered_clip:
            current.persisted_clip = url
            self.store.update(scene_number - 1, current)
        return url

    def discard(self) -> None:
        """Drop the scenario, its jobs and the working set."""
        self.orchestrator.discard()
        self.assembly.clear()
        self.store.replace_all([])
        self._scenario = None
        logger.info("Discarded scenario")

    def _require_scenario(self) -> Scenario:
        if self._scenario is None:
            raise ValidationError("No scenario loaded")
        return self._scenario

    def _storage(self) -> Persistence:
        if self._persistence is None:
            self._persistence = GcsPersistence()
        return self._persistence
