"""Tests for the text-completion client wrapper."""

from types import SimpleNamespace
from unittest.mock import patch

import httpx
import pytest
from anthropic import APIConnectionError

from storyreel.errors import CollaboratorUnavailable
from storyreel.services.anthropic import AnthropicClient


@patch("storyreel.services.anthropic.Anthropic")
def test_create_message_joins_text(mock_anthropic):
    mock_anthropic.return_value.messages.create.return_value = SimpleNamespace(
        content=[SimpleNamespace(text="Hello "), SimpleNamespace(text="world")]
    )
    client = AnthropicClient(api_key="key", model="test-model")

    text = client.create_message("hi", system="be brief", top_p=0.9, max_tokens=100)

    assert text == "Hello world"
    mock_anthropic.assert_called_once_with(api_key="key", max_retries=0)
    kwargs = mock_anthropic.return_value.messages.create.call_args.kwargs
    assert kwargs["model"] == "test-model"
    assert kwargs["system"] == "be brief"
    assert kwargs["top_p"] == 0.9


@patch("storyreel.services.anthropic.Anthropic")
def test_connection_error_is_unavailable(mock_anthropic):
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    mock_anthropic.return_value.messages.create.side_effect = APIConnectionError(request=request)
    client = AnthropicClient(api_key="key")

    with pytest.raises(CollaboratorUnavailable):
        client.create_message("hi")
    assert mock_anthropic.return_value.messages.create.call_count == 1


@patch("storyreel.services.anthropic.Anthropic")
def test_empty_response_is_unavailable(mock_anthropic):
    mock_anthropic.return_value.messages.create.return_value = SimpleNamespace(content=[])
    with pytest.raises(CollaboratorUnavailable):
        AnthropicClient(api_key="key").create_message("hi")
