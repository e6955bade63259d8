"""Tests for the scenario agent."""

import json

import pytest

from storyreel.agents import ScenarioAgent, ScenarioInput
from storyreel.agents.base import extract_json
from storyreel.errors import ParseError, ValidationError

from conftest import FakeClient

SCENARIO = {
    "title": "Morning Journey",
    "scenario": "A calming start to the day.",
    "scenes": [
        {"scene_number": 1, "image_prompt": "coffee by the window", "narration": "The day begins."},
        {"scene_number": 2, "image_prompt": "busy street", "narration": "We move forward."},
        {"scene_number": 3, "image_prompt": "sunset rooftop", "narration": "Dreams come closer."},
    ],
}


def agent_with(response):
    client = FakeClient(response)
    return ScenarioAgent(client=client), client


def test_fenced_json_is_parsed():
    agent, client = agent_with(f"Here you go:\n```json\n{json.dumps(SCENARIO)}\n```")

    scenario = agent.run(ScenarioInput(brief="A blog about mornings", scene_count=3))

    assert scenario.title == "Morning Journey"
    assert scenario.summary == "A calming start to the day."
    assert [s.scene_number for s in scenario.scenes] == [1, 2, 3]
    assert scenario.scenes[2].narration == "Dreams come closer."


def test_request_shape():
    agent, client = agent_with(json.dumps(SCENARIO))

    agent.run(ScenarioInput(brief="  A blog about mornings  ", scene_count=3))

    call = client.calls[0]
    assert call["temperature"] == 0.7
    assert call["top_p"] == 0.9
    assert call["max_tokens"] == 2048
    assert "total 15 seconds" in call["prompt"]
    assert call["prompt"].endswith("[Blog Content]\nA blog about mornings")
    assert "approximately 20 seconds" in call["system"]
    assert "total of 3 scenes" in call["system"]


def test_invalid_json_is_parse_error():
    agent, _ = agent_with("Sorry, I cannot help with that.")
    with pytest.raises(ParseError):
        agent.run(ScenarioInput(brief="brief", scene_count=2))


def test_wrong_shape_is_parse_error():
    agent, _ = agent_with(json.dumps({"title": "x", "scenes": [{"prompt": "a"}]}))
    with pytest.raises(ParseError):
        agent.run(ScenarioInput(brief="brief", scene_count=1))


@pytest.mark.parametrize("count", [0, 11])
def test_scene_count_out_of_range(count):
    agent, client = agent_with(json.dumps(SCENARIO))
    with pytest.raises(ValidationError):
        agent.run(ScenarioInput(brief="brief", scene_count=count))
    assert client.calls == []


def test_empty_brief_rejected():
    agent, client = agent_with(json.dumps(SCENARIO))
    with pytest.raises(ValidationError):
        agent.run(ScenarioInput(brief="   ", scene_count=2))
    assert client.calls == []


def test_extract_raw_object():
    assert extract_json('prefix {"a": {"b": 1}} suffix') == '{"a": {"b": 1}}'


def test_extract_plain_fence():
    assert extract_json('```\n{"a": 1}\n```') == '{"a": 1}'


def test_complete_json_uses_agent_sampling():
    agent, client = agent_with('{"ok": true}')
    assert agent.complete_json("hello") == {"ok": True}
    call = client.calls[0]
    assert (call["max_tokens"], call["top_p"]) == (2048, 0.9)
    assert call["system"] == agent.system_prompt


def test_complete_json_rejects_text():
    agent, _ = agent_with("no json here")
    with pytest.raises(ParseError) as excinfo:
        agent.complete_json("hello")
    assert excinfo.value.raw == "no json here"
