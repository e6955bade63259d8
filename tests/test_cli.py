"""CLI smoke tests."""

import json

import pytest
from typer.testing import CliRunner

from storyreel.cli import app
from storyreel.config import config
from storyreel.models import Scenario, Scene
from storyreel.services import providers

from conftest import FakeProvider

runner = CliRunner()


class FakeKling(FakeProvider):
    provider_id = "kling-v2"


@pytest.fixture
def scenario_file(tmp_path):
    path = tmp_path / "scenario.yaml"
    Scenario(
        title="Harbor Day",
        scenes=[
            Scene(image_prompt="boats at dawn", narration="Boats head out."),
            Scene(image_prompt="fish market", narration="The catch arrives."),
        ],
    ).to_yaml(path)
    return path


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "storyreel version" in result.output


def test_panels():
    result = runner.invoke(app, ["panels", "a red fox", "a snowy field", "--layout", "grid"])
    assert result.exit_code == 0
    assert "2-panel grid layout .1st panel: a red fox. 2nd panel: a snowy field" in result.output


def test_panels_too_many():
    result = runner.invoke(app, ["panels", "a", "b", "c", "d", "e"])
    assert result.exit_code == 1
    assert "❌" in result.output


def test_check_url():
    assert runner.invoke(app, ["check-url", "https://example.com/a.png"]).exit_code == 0
    result = runner.invoke(app, ["check-url", "http://localhost/a.png"])
    assert result.exit_code == 1


def test_status(scenario_file):
    result = runner.invoke(app, ["status", "--scenario", str(scenario_file)])
    assert result.exit_code == 0
    assert "Harbor Day" in result.output
    assert "Scene 2" in result.output


def test_status_missing_file(tmp_path):
    result = runner.invoke(app, ["status", "--scenario", str(tmp_path / "none.yaml")])
    assert result.exit_code == 1


def test_compose_requires_api_key(monkeypatch):
    monkeypatch.setattr(config, "anthropic_api_key", "")
    result = runner.invoke(app, ["compose", "A blog about the harbor"])
    assert result.exit_code == 1
    assert "ANTHROPIC_API_KEY" in result.output


def test_render_writes_back_clips(monkeypatch, scenario_file):
    monkeypatch.setattr(config, "replicate_api_token", "test-token")
    monkeypatch.setitem(providers.PROVIDERS, "kling-v2", FakeKling)

    result = runner.invoke(app, ["render", "--scenario", str(scenario_file), "--provider", "kling-v2"])

    assert result.exit_code == 0, result.output
    scenario = Scenario.from_yaml(scenario_file)
    assert all(scene.rendered_clip for scene in scenario.scenes)
    report = json.loads((scenario_file.parent / "generation_report.json").read_text())
    assert report["successful"] == 2


def test_render_rejects_invalid_params(monkeypatch, scenario_file):
    monkeypatch.setattr(config, "replicate_api_token", "test-token")
    result = runner.invoke(
        app,
        ["render", "--scenario", str(scenario_file), "--provider", "hailuo-02", "--duration", "10"],
    )
    assert result.exit_code == 1
    assert "❌" in result.output


def test_merge_without_clips_fails(scenario_file, tmp_path):
    result = runner.invoke(
        app, ["merge", "--scenario", str(scenario_file), "--output", str(tmp_path / "out.mp4")]
    )
    assert result.exit_code == 1
    assert "No clips selected" in result.output


def test_panels_scene_unit():
    result = runner.invoke(app, ["panels", "a", "b", "--unit", "scene"])
    assert result.exit_code == 0
    assert "1st scene: a" in result.output


def test_panels_rejects_unknown_unit():
    result = runner.invoke(app, ["panels", "a", "b", "--unit", "slide"])
    assert result.exit_code == 2
