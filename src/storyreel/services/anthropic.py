"""Anthropic Claude API client wrapper (text-completion collaborator)."""

import logging
from typing import Optional

from anthropic import Anthropic, APIError, APIConnectionError, RateLimitError

from ..config import config
from ..errors import CollaboratorUnavailable

logger = logging.getLogger(__name__)


class AnthropicClient:
    """Client wrapper for the Anthropic Claude API.

    Requests are sent once. Failures surface as a single
    CollaboratorUnavailable; retrying is left to the caller.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
    ) -> None:
        """Initialize the Anthropic client.

        Args:
            api_key: Anthropic API key. Defaults to ANTHROPIC_API_KEY env var.
            model: Model to use. Defaults to config.default_model.
        """
        self._api_key = api_key or config.anthropic_api_key
        if not self._api_key:
            raise ValueError(
                "Anthropic API key not provided. Set ANTHROPIC_API_KEY env var."
            )

        self._client = Anthropic(api_key=self._api_key, max_retries=0)
        self._model = model or config.default_model

    @property
    def model(self) -> str:
        """Return the model being used."""
        return self._model

    def create_message(
        self,
        prompt: str,
        max_tokens: int = 4096,
        system: Optional[str] = None,
        temperature: float = 0.7,
        top_p: Optional[float] = None,
    ) -> str:
        """Create a message using Claude.

        Args:
            prompt: The user prompt to send.
            max_tokens: Maximum tokens in the response.
            system: Optional system prompt.
            temperature: Sampling temperature (0.0-1.0).
            top_p: Optional nucleus sampling cutoff.

        Returns:
            The text content of Claude's response.

        Raises:
            CollaboratorUnavailable: If the request fails for any reason.
        """
        kwargs = {
            "model": self._model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
        }
        if system:
            kwargs["system"] = system
        if top_p is not None:
            kwargs["top_p"] = top_p

        logger.debug(f"Sending request to Claude (prompt length: {len(prompt)})")

        try:
            response = self._client.messages.create(**kwargs)
        except RateLimitError as e:
            logger.warning(f"Rate limited: {e}")
            raise CollaboratorUnavailable("text-completion", f"rate limited: {e}") from e
        except APIConnectionError as e:
            logger.error(f"Connection error: {e}")
            raise CollaboratorUnavailable("text-completion", str(e)) from e
        except APIError as e:
            logger.error(f"API error: {e}")
            raise CollaboratorUnavailable("text-completion", str(e)) from e

        # Concatenate text blocks; no partial output is returned on failure
        texts = [block.text for block in response.content if hasattr(block, "text")]
        if not texts:
            raise CollaboratorUnavailable("text-completion", "response contained no text")
        return "".join(texts)
