"""Fan-out of per-scene generation jobs to a video provider."""

import json
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from pathlib import Path
from threading import Lock
from typing import Callable, Iterable, Optional, Union

from .composer import compose_panels
from .config import config
from .errors import CollaboratorUnavailable, ProviderError, ValidationError
from .models import GenerationJob, JobStatus, Scene, parse_params
from .models.params import HailuoParams, KlingParams, Veo3Params
from .models.scene import ANNOUNCER_PROVIDER
from .safety import seed_for_request
from .services.providers import VideoProvider, get_provider
from .store import SceneStore

logger = logging.getLogger(__name__)

Params = Union[KlingParams, Veo3Params, HailuoParams]
ProviderFactory = Callable[[str], VideoProvider]
JobCallback = Callable[[GenerationJob], None]


def resolve_params(params: Union[Params, dict]) -> Params:
    """Accept a parameter model or a raw mapping keyed by ``provider_id``."""
    if isinstance(params, (KlingParams, Veo3Params, HailuoParams)):
        return params
    if isinstance(params, dict):
        return parse_params(params)
    raise ValidationError(f"Unsupported provider parameters: {type(params).__name__}")


def scene_prompt(scene: Scene) -> str:
    """Prompt sent for a scene, composing its panels when it has any."""
    if scene.uses_panels:
        return compose_panels(scene.panels, scene.layout, unit=scene.panel_unit)
    return scene.image_prompt


class GenerationOrchestrator:
    """Tracks one generation job per scene number.

    Jobs are independent: a failed scene never blocks or rolls back another,
    and nothing is retried automatically. Re-issuing a render for a scene
    replaces that scene's job; a late result from the replaced job is dropped.
    The status table is keyed by scene number and each job writes only its
    own slot.
    """

    def __init__(
        self,
        store: SceneStore,
        provider_factory: ProviderFactory = get_provider,
        max_workers: Optional[int] = None,
        on_update: Optional[JobCallback] = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            store: Scenes to render.
            provider_factory: Builds a provider adapter from its id.
            max_workers: Maximum concurrent jobs. Defaults to config.max_parallel_jobs.
            on_update: Called with a copy of a job whenever it changes state.
        """
        self._store = store
        self._provider_factory = provider_factory
        self._max_workers = max_workers or config.max_parallel_jobs
        self._on_update = on_update
        self._jobs: dict[int, GenerationJob] = {}
        self._lock = Lock()

    def job(self, scene_number: int) -> Optional[GenerationJob]:
        """Return a copy of the scene's current job, if any."""
        with self._lock:
            job = self._jobs.get(scene_number)
            return job.copy() if job else None

    def jobs(self) -> list[GenerationJob]:
        """Return copies of all jobs ordered by scene number."""
        with self._lock:
            return [self._jobs[n].copy() for n in sorted(self._jobs)]

    def status(self) -> dict[int, JobStatus]:
        """Status per scene number; scenes never rendered are not_started."""
        with self._lock:
            statuses = {n: job.status for n, job in self._jobs.items()}
        for scene in self._store:
            statuses.setdefault(scene.scene_number, JobStatus.NOT_STARTED)
        return dict(sorted(statuses.items()))

    def results(self) -> dict[int, str]:
        """Clip URLs of succeeded jobs keyed by scene number."""
        return {
            job.scene_number: job.result
            for job in self.jobs()
            if job.status == JobStatus.SUCCEEDED and job.result
        }

    def failures(self) -> list[ProviderError]:
        """One ProviderError per failed job, carrying the upstream message."""
        return [
            ProviderError(job.scene_number, job.error or "Unknown error")
            for job in self.jobs()
            if job.status == JobStatus.FAILED
        ]

    def discard(self) -> None:
        """Forget every job."""
        with self._lock:
            self._jobs.clear()

    def renumber_after_delete(self, scene_number: int) -> None:
        """Follow a scene deletion in the job table.

        The deleted scene's job is dropped and jobs of later scenes move down
        one slot, mirroring how the store renumbers its scenes. A job still
        running for the deleted scene finishes into nothing.
        """
        with self._lock:
            self._jobs.pop(scene_number, None)
            for n in sorted(k for k in self._jobs if k > scene_number):
                job = self._jobs.pop(n)
                job.scene_number = n - 1
                self._jobs[n - 1] = job
        logger.debug(f"Job table renumbered after deleting scene {scene_number}")

    def _slot_of(self, job_id: str) -> Optional[GenerationJob]:
        for job in self._jobs.values():
            if job.job_id == job_id:
                return job
        return None

    def render_scene(self, scene_number: int, params: Union[Params, dict]) -> GenerationJob:
        """Render a single scene, leaving every other scene's job untouched.

        Returns:
            Copy of the finished job.

        Raises:
            ValidationError: If the scene is unknown or was deleted while rendering.
        """
        jobs = self.render_all(params, scene_numbers=[scene_number])
        if not jobs:
            raise ValidationError(f"Scene {scene_number} was deleted while rendering")
        return jobs[0]

    def render_all(
        self,
        params: Union[Params, dict],
        scene_numbers: Optional[Iterable[int]] = None,
    ) -> list[GenerationJob]:
        """Render every scene (or the listed ones) with one provider.

        Announcer prompts are written into the store first, then prompts and
        narrations are captured for the requests, so the substitution is what
        gets sent. All in-scope scenes move to running together.

        Args:
            params: The provider's parameters, applied to every scene.
            scene_numbers: Restrict the batch to these scenes.

        Returns:
            Copies of the finished jobs ordered by scene number.

        Raises:
            ValidationError: If params are invalid, a scene number is unknown,
                or a scene's panels cannot be composed. No job is created.
        """
        params = resolve_params(params)
        provider_id = params.provider_id

        scenes = self._store.snapshot()
        if scene_numbers is None:
            in_scope = list(scenes)
        else:
            wanted = sorted(set(scene_numbers))
            unknown = [n for n in wanted if not 1 <= n <= len(scenes)]
            if unknown:
                raise ValidationError(f"Unknown scene numbers: {unknown}")
            in_scope = [scenes[n - 1] for n in wanted]

        if not in_scope:
            raise ValidationError("No scenes to render")

        # Compose everything before touching state so a bad scene aborts the whole batch
        prompts = {}
        for scene in in_scope:
            if scene.apply_announcer(provider_id):
                logger.debug(f"Scene {scene.scene_number}: announcer prompt applied")
            prompts[scene.scene_number] = scene_prompt(scene)

        for scene in in_scope:
            if scene.announcer and provider_id == ANNOUNCER_PROVIDER:
                self._store.update(scene.scene_number - 1, scene)

        provider = self._provider_factory(provider_id)

        started = []
        with self._lock:
            now = datetime.now()
            for scene in in_scope:
                previous = self._jobs.get(scene.scene_number)
                seed = None
                if scene.seed_image and params.supports_seed_image:
                    seed = seed_for_request(scene.seed_image)
                    if seed is None:
                        logger.warning(
                            f"Scene {scene.scene_number}: unsafe seed image dropped"
                        )
                job = GenerationJob(
                    scene_number=scene.scene_number,
                    provider_id=provider_id,
                    parameters=params,
                    status=JobStatus.RUNNING,
                    attempt=previous.attempt + 1 if previous else 1,
                    prompt=prompts[scene.scene_number],
                    narration=scene.request_narration(provider_id),
                    seed_image=seed,
                    started_at=now,
                    metadata={"seed_dropped": bool(scene.seed_image) and seed is None},
                )
                self._jobs[scene.scene_number] = job
                started.append(job.copy())

        logger.info(f"Rendering {len(started)} scene(s) with {provider_id}")
        for job in started:
            self._notify(job)

        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(started))) as executor:
            futures = {
                executor.submit(self._run_job, provider, job): job.scene_number
                for job in started
            }
            for future in as_completed(futures):
                future.result()

        # Scenes deleted mid-batch have no slot left; their jobs are not reported
        with self._lock:
            finished = [self._slot_of(job.job_id) for job in started]
            return sorted(
                (job.copy() for job in finished if job is not None),
                key=lambda job: job.scene_number,
            )

    def _run_job(self, provider: VideoProvider, job: GenerationJob) -> None:
        """Run one job and record its outcome in its own slot."""
        try:
            outcome = provider.render(
                job.prompt,
                job.narration,
                job.parameters,
                seed_image=job.seed_image,
            )
        except (ValidationError, CollaboratorUnavailable) as e:
            self._finish(job, error=str(e))
            return
        except Exception as e:
            logger.exception(f"Scene {job.scene_number}: unexpected error")
            self._finish(job, error=str(e) or type(e).__name__)
            return

        if outcome.succeeded:
            self._finish(job, result=outcome.output_url, prediction_id=outcome.prediction_id)
        else:
            self._finish(
                job,
                error=outcome.error_message or "Video generation failed",
                prediction_id=outcome.prediction_id,
            )

    def _finish(
        self,
        job: GenerationJob,
        result: Optional[str] = None,
        error: Optional[str] = None,
        prediction_id: Optional[str] = None,
    ) -> None:
        with self._lock:
            current = self._slot_of(job.job_id)
            if current is None:
                logger.info(
                    f"Scene {job.scene_number}: ignoring late result of attempt {job.attempt}"
                )
                return
            current.prediction_id = prediction_id
            current.completed_at = datetime.now()
            if error is None:
                current.status = JobStatus.SUCCEEDED
                current.result = result
                current.error = None
                logger.info(f"Scene {current.scene_number}: generated → {result}")
            else:
                current.status = JobStatus.FAILED
                current.result = None
                current.error = error
                logger.error(f"Scene {current.scene_number}: failed - {error}")
            snapshot = current.copy()
        self._notify(snapshot)

    def _notify(self, job: GenerationJob) -> None:
        if self._on_update is not None:
            self._on_update(job)


def save_job_report(jobs: list[GenerationJob], output_path: Path) -> None:
    """Save a JSON summary of a render batch.

    Args:
        jobs: Jobs to report.
        output_path: Path to save the report.
    """
    report = {
        "generated_at": datetime.now().isoformat(),
        "total_scenes": len(jobs),
        "successful": sum(1 for j in jobs if j.status == JobStatus.SUCCEEDED),
        "failed": sum(1 for j in jobs if j.status == JobStatus.FAILED),
        "jobs": [job.to_dict() for job in jobs],
    }

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(report, f, indent=2)

    logger.info(f"Saved generation report to {output_path}")
