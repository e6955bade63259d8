"""Shared plumbing for agents that ask the text-completion service for JSON."""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar

from ..config import config
from ..errors import ParseError
from ..services.anthropic import AnthropicClient

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


def extract_json(response: str) -> str:
    """Pull the JSON payload out of a completion.

    Fenced blocks win, then the first balanced ``{...}`` object; otherwise
    the stripped text is returned for the caller to reject.
    """
    for fence in ("```json", "```"):
        if fence in response:
            start = response.find(fence) + len(fence)
            end = response.find("```", start)
            if end > start:
                return response[start:end].strip()

    start = response.find("{")
    if start != -1:
        depth = 0
        for i, char in enumerate(response[start:], start):
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return response[start:i + 1]

    return response.strip()


class BaseAgent(ABC, Generic[InputT, OutputT]):
    """One completion request per ``run``, sent with the agent's system prompt.

    Sampling settings are class attributes so each agent declares its own.
    Nothing is retried here; client failures reach the caller unchanged.
    """

    max_tokens: int = 4096
    temperature: float = 0.7
    top_p: Optional[float] = None

    def __init__(
        self,
        client: Optional[AnthropicClient] = None,
        model: Optional[str] = None,
    ) -> None:
        """Initialize the agent.

        Args:
            client: Text-completion client. An AnthropicClient is built if omitted.
            model: Model id. Defaults to config.default_model.
        """
        self._model = model or config.default_model
        self._client = client or AnthropicClient(model=self._model)
        self._logger = logging.getLogger(f"{__name__}.{self.name}")

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    @abstractmethod
    def system_prompt(self) -> str:
        ...

    @property
    def model(self) -> str:
        return self._model

    @abstractmethod
    def run(self, input_data: InputT) -> OutputT:
        ...

    def complete(self, prompt: str) -> str:
        """Send one prompt and return the completion text."""
        self._logger.debug(f"{self.name}: sending {len(prompt)} chars to {self._model}")
        try:
            text = self._client.create_message(
                prompt=prompt,
                max_tokens=self.max_tokens,
                system=self.system_prompt,
                temperature=self.temperature,
                top_p=self.top_p,
            )
        except Exception as e:
            self._logger.error(f"{self.name}: completion failed: {e}")
            raise
        self._logger.debug(f"{self.name}: received {len(text)} chars")
        return text

    def complete_json(self, prompt: str) -> Any:
        """Send one prompt and decode the JSON found in the completion.

        Raises:
            ParseError: If no valid JSON can be read from the completion.
        """
        text = self.complete(prompt)
        try:
            return json.loads(extract_json(text))
        except json.JSONDecodeError as e:
            self._logger.error(f"{self.name}: completion is not JSON: {e}")
            self._logger.debug(f"Raw completion: {text}")
            raise ParseError(f"Invalid JSON in response: {e}", raw=text) from e
