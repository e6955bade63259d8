"""CLI entry point for the scenario video generator."""

import logging
import typer
from pathlib import Path
from typing import List, Optional
from enum import Enum

from . import __version__
from .config import config
from .errors import StoryreelError
from .models import CaptionStyle, JobStatus, Scenario

app = typer.Typer(
    name="storyreel",
    help="Scenario-to-video generator",
    no_args_is_help=True
)


class ProviderChoice(str, Enum):
    """Video generation providers."""
    KLING = "kling-v2"
    VEO3 = "veo-3"
    HAILUO = "hailuo-02"


class PanelUnit(str, Enum):
    """Word naming each part of a composed prompt."""
    PANEL = "panel"
    SCENE = "scene"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"storyreel version {__version__}")
        raise typer.Exit()


def load_scenario(path: Path) -> Scenario:
    """Load a scenario file or exit with an error line."""
    if not path.exists():
        typer.echo(f"❌ No scenario found at {path}")
        typer.echo("   Run 'storyreel compose' to create one")
        raise typer.Exit(1)
    try:
        return Scenario.from_yaml(path)
    except Exception as e:
        typer.echo(f"❌ Error loading scenario: {e}")
        raise typer.Exit(1)


def build_params(
    provider: ProviderChoice,
    duration: Optional[int],
    aspect_ratio: Optional[str],
    cfg_scale: Optional[float],
    resolution: Optional[str],
    seed: Optional[int],
    negative: Optional[str],
    prompt_optimizer: bool,
) -> dict:
    """Collect the options that apply to the chosen provider."""
    params: dict = {"provider_id": provider.value}
    if negative is not None and provider != ProviderChoice.HAILUO:
        params["negative_prompt"] = negative

    if provider == ProviderChoice.KLING:
        if duration is not None:
            params["duration"] = duration
        if aspect_ratio is not None:
            params["aspect_ratio"] = aspect_ratio
        if cfg_scale is not None:
            params["cfg_scale"] = cfg_scale
    elif provider == ProviderChoice.VEO3:
        if resolution is not None:
            params["resolution"] = resolution
        if seed is not None:
            params["seed"] = seed
    else:
        if duration is not None:
            params["duration"] = duration
        if resolution is not None:
            params["resolution"] = resolution
        params["prompt_optimizer"] = prompt_optimizer
    return params


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    )
) -> None:
    """Storyreel - Turn a written brief into a narrated video."""
    pass


@app.command()
def compose(
    brief: str = typer.Argument(
        ...,
        help="Brief or blog text to turn into scenes"
    ),
    scenes: int = typer.Option(
        2,
        "--scenes",
        "-n",
        help="Number of scenes",
        min=1,
        max=10
    ),
    output: Path = typer.Option(
        Path("scenario.yaml"),
        "--output",
        "-o",
        help="Output scenario file path"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging"),
) -> None:
    """Write a scenario of scenes from a brief using AI."""
    from .agents import ScenarioAgent, ScenarioInput

    setup_logging(verbose)
    typer.echo(f"🎬 Composing {scenes} scene(s)")

    if not config.anthropic_api_key:
        typer.echo("❌ ANTHROPIC_API_KEY environment variable not set")
        raise typer.Exit(1)

    try:
        agent = ScenarioAgent()
        typer.echo(f"   Using model: {agent.model}")
        scenario = agent.run(ScenarioInput(brief=brief, scene_count=scenes))
    except StoryreelError as e:
        typer.echo(f"❌ Error composing scenario: {e}")
        raise typer.Exit(1)

    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        scenario.to_yaml(output)
    except OSError as e:
        typer.echo(f"❌ Error saving scenario: {e}")
        raise typer.Exit(1)

    typer.echo(f"\n✅ Scenario saved: {output}")
    typer.echo(f"\n📋 {scenario.title}")
    for scene in scenario.scenes:
        prompt_preview = scene.image_prompt[:70] + "..." if len(scene.image_prompt) > 70 else scene.image_prompt
        typer.echo(f"   • Scene {scene.scene_number}: {prompt_preview}")
        typer.echo(f"     🗣  {scene.narration}")


@app.command()
def status(
    scenario_path: Path = typer.Option(
        Path("scenario.yaml"),
        "--scenario",
        "-s",
        help="Path to scenario YAML file"
    )
) -> None:
    """Show scenario status."""
    scenario = load_scenario(scenario_path)

    typer.echo(f"📁 Scenario: {scenario.title}")
    if scenario.summary:
        typer.echo(f"   {scenario.summary}")
    typer.echo(f"   Scenes: {len(scenario.scenes)}")

    typer.echo("\n📽️  Scenes:")
    for scene in scenario.scenes:
        if scene.persisted_clip:
            status_icon = "💾"
        elif scene.rendered_clip:
            status_icon = "✅"
        else:
            status_icon = "⏳"
        flags = []
        if scene.announcer:
            flags.append("announcer")
        if scene.seed_image:
            flags.append("seed image")
        suffix = f" ({', '.join(flags)})" if flags else ""
        typer.echo(f"   {status_icon} Scene {scene.scene_number}{suffix}")
        prompt_preview = scene.image_prompt[:60] + "..." if len(scene.image_prompt) > 60 else scene.image_prompt
        typer.echo(f"      → {prompt_preview}")


@app.command()
def render(
    scenario_path: Path = typer.Option(
        Path("scenario.yaml"),
        "--scenario",
        "-s",
        help="Path to scenario YAML file"
    ),
    provider: ProviderChoice = typer.Option(
        ProviderChoice.KLING,
        "--provider",
        "-p",
        help="Video generation provider"
    ),
    scene: Optional[List[int]] = typer.Option(
        None,
        "--scene",
        help="Render only this scene number (repeatable)"
    ),
    duration: Optional[int] = typer.Option(None, "--duration", "-d", help="Clip length in seconds"),
    aspect_ratio: Optional[str] = typer.Option(None, "--aspect-ratio", "-a", help="Aspect ratio (kling-v2)"),
    cfg_scale: Optional[float] = typer.Option(None, "--cfg-scale", help="Prompt adherence 0..1 (kling-v2)"),
    resolution: Optional[str] = typer.Option(None, "--resolution", "-r", help="Output resolution"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed (veo-3)"),
    negative: Optional[str] = typer.Option(None, "--negative", help="Negative prompt"),
    prompt_optimizer: bool = typer.Option(
        True,
        "--prompt-optimizer/--no-prompt-optimizer",
        help="Let the provider rewrite the prompt (hailuo-02)"
    ),
    parallel: Optional[int] = typer.Option(
        None,
        "--parallel",
        help="Maximum concurrent generations",
        min=1,
        max=10
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging"),
) -> None:
    """Generate a clip for every scene (or the selected ones)."""
    from .orchestrator import save_job_report
    from .session import ScenarioSession

    setup_logging(verbose)
    scenario = load_scenario(scenario_path)
    typer.echo(f"🎬 Rendering '{scenario.title}' with {provider.value}")

    try:
        config.validate_replicate_required()
    except ValueError as e:
        typer.echo(f"❌ Configuration error: {e}")
        raise typer.Exit(1)

    params = build_params(
        provider, duration, aspect_ratio, cfg_scale, resolution, seed, negative, prompt_optimizer
    )

    session = ScenarioSession("local", max_workers=parallel)
    try:
        session.load_scenario(scenario)
        session.select_provider(params)
        typer.echo(f"\n⏳ Generating {len(scene) if scene else len(scenario.scenes)} clip(s)...\n")
        jobs = session.render_all(scene_numbers=scene or None)
    except StoryreelError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(1)

    for job in jobs:
        if job.status == JobStatus.SUCCEEDED:
            typer.echo(f"   ✅ Scene {job.scene_number}: Generated → {job.result}")
        else:
            typer.echo(f"   ❌ Scene {job.scene_number}: Failed - {job.error or 'Unknown error'}")
        if job.metadata.get("seed_dropped"):
            typer.echo(f"   ⚠️  Scene {job.scene_number}: seed image was not sent")

    session.scenario.to_yaml(scenario_path)
    report_path = scenario_path.parent / "generation_report.json"
    try:
        save_job_report(jobs, report_path)
        typer.echo(f"\n📄 Report saved: {report_path}")
    except OSError as e:
        typer.echo(f"⚠️  Failed to save report: {e}")

    failed = sum(1 for job in jobs if job.status == JobStatus.FAILED)
    typer.echo(f"\n📊 Summary:")
    typer.echo(f"   Generated: {len(jobs) - failed}")
    typer.echo(f"   Failed: {failed}")

    if failed > 0:
        typer.echo(f"\n⚠️  {failed} scene(s) failed to generate")
        raise typer.Exit(1)
    typer.echo(f"\n✅ All clips generated successfully!")


@app.command()
def merge(
    scenario_path: Path = typer.Option(
        Path("scenario.yaml"),
        "--scenario",
        "-s",
        help="Path to scenario YAML file"
    ),
    output: Path = typer.Option(
        Path("output/final.mp4"),
        "--output",
        "-o",
        help="Output file path"
    ),
    caption_color: str = typer.Option("#ffffff", "--caption-color", help="Caption text color"),
    caption_style: CaptionStyle = typer.Option(
        CaptionStyle.BOX,
        "--caption-style",
        help="Caption background box or text outline"
    ),
    persist: bool = typer.Option(False, "--persist", help="Also upload to STORYREEL_BUCKET"),
    user: str = typer.Option("local", "--user", "-u", help="Owner of persisted videos"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging"),
) -> None:
    """Merge the rendered scene clips into one captioned video."""
    from .session import ScenarioSession

    setup_logging(verbose)
    scenario = load_scenario(scenario_path)
    typer.echo(f"📼 Merging '{scenario.title}'")

    if persist:
        try:
            config.validate_storage_required()
        except ValueError as e:
            typer.echo(f"❌ Configuration error: {e}")
            raise typer.Exit(1)

    try:
        session = ScenarioSession(user)
        session.load_scenario(scenario)
        added = session.collect_scene_clips()
        typer.echo(f"   Found {len(added)} clip(s)")
        result = session.merge(caption_color=caption_color, caption_style=caption_style)
    except StoryreelError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(1)

    with result.handle:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(result.read())
        typer.echo(f"✅ Video merged: {output} ({result.size} bytes)")

        if persist:
            try:
                url = session.persist(result)
            except StoryreelError as e:
                typer.echo(f"❌ {e}")
                raise typer.Exit(1)
            typer.echo(f"💾 Persisted: {url}")


@app.command()
def panels(
    fragments: List[str] = typer.Argument(..., help="Prompt fragments, one per panel (max 4)"),
    layout: str = typer.Option("horizontal", "--layout", "-l", help="horizontal, vertical or grid"),
    unit: PanelUnit = typer.Option(PanelUnit.PANEL, "--unit", help="Word naming each part"),
    article: bool = typer.Option(False, "--article", help="Prefix the prompt with 'A'"),
) -> None:
    """Compose several prompt fragments into one multi-panel prompt."""
    from .composer import compose_panels

    try:
        prompt = compose_panels(fragments, layout=layout, unit=unit.value, article=article)
    except StoryreelError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(1)
    typer.echo(prompt)


@app.command("check-url")
def check_url(
    url: str = typer.Argument(..., help="Seed image URL to check"),
) -> None:
    """Check whether a seed image URL would be sent to a provider."""
    from .safety import require_safe_seed_url

    try:
        require_safe_seed_url(url)
    except StoryreelError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(1)
    typer.echo(f"✅ Safe: {url}")


if __name__ == "__main__":
    app()
