"""Tests for scene prompt rules and scenario parsing."""

import pytest

from storyreel.errors import ParseError
from storyreel.models import ANNOUNCER_PROMPT, SEED_IMAGE_PROMPT, Scenario, Scene


@pytest.fixture
def scene():
    return Scene(image_prompt="Wide shot of a stadium", narration="The final begins.")


def test_announcer_toggle_round_trip(scene):
    scene.set_announcer(True)
    assert scene.image_prompt == f"{ANNOUNCER_PROMPT} The final begins."
    scene.set_announcer(False)
    assert scene.image_prompt == "Wide shot of a stadium"
    assert scene.original_prompt is None


def test_announcer_enable_twice_keeps_original(scene):
    scene.set_announcer(True)
    scene.set_announcer(True)
    scene.set_announcer(False)
    assert scene.image_prompt == "Wide shot of a stadium"


def test_narration_change_rebuilds_announcer_prompt(scene):
    scene.set_announcer(True)
    scene.set_narration("Extra time!")
    assert scene.image_prompt == f"{ANNOUNCER_PROMPT} Extra time!"
    scene.set_announcer(False)
    assert scene.image_prompt == "Wide shot of a stadium"


def test_request_narration_empty_for_announcer_on_veo(scene):
    scene.set_announcer(True)
    assert scene.request_narration("veo-3") == ""
    assert scene.request_narration("kling-v2") == "The final begins."


def test_apply_announcer_only_on_veo(scene):
    scene.announcer = True
    assert not scene.apply_announcer("hailuo-02")
    assert scene.image_prompt == "Wide shot of a stadium"
    assert scene.apply_announcer("veo-3")
    assert scene.image_prompt.startswith(ANNOUNCER_PROMPT)


def test_attach_seed_overwrites_prompt(scene):
    scene.attach_seed_image(" https://example.com/a.png ")
    assert scene.seed_image == "https://example.com/a.png"
    assert scene.image_prompt == SEED_IMAGE_PROMPT


def test_panels_not_used_with_seed_or_announcer(scene):
    scene.panels = ["a", "b"]
    assert scene.uses_panels
    scene.attach_seed_image("https://example.com/a.png")
    assert not scene.uses_panels


def test_scenario_from_completion_renumbers():
    scenario = Scenario.from_completion(
        {
            "title": "Morning Journey",
            "scenario": "A calm start.",
            "scenes": [
                {"scene_number": 4, "image_prompt": "coffee", "narration": "The day begins."},
                {"scene_number": 9, "image_prompt": "street", "narration": "We move on."},
            ],
        }
    )
    assert scenario.summary == "A calm start."
    assert [s.scene_number for s in scenario.scenes] == [1, 2]


@pytest.mark.parametrize(
    "data",
    [
        [],
        {"scenes": [{"image_prompt": "a", "narration": "b"}]},
        {"title": "t", "scenes": []},
        {"title": "t", "scenes": [{"image_prompt": "a"}]},
        {"title": "t", "scenes": ["not an object"]},
    ],
)
def test_scenario_from_completion_rejects_bad_shape(data):
    with pytest.raises(ParseError):
        Scenario.from_completion(data)


def test_scenario_yaml_round_trip(tmp_path):
    scenario = Scenario(title="Demo", scenes=[Scene(image_prompt="a", narration="b")])
    path = tmp_path / "scenario.yaml"
    scenario.to_yaml(path)
    loaded = Scenario.from_yaml(path)
    assert loaded.scenario_id == scenario.scenario_id
    assert loaded.scenes[0].image_prompt == "a"
