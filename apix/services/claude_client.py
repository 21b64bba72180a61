"""Claude API client wrapper."""

from __future__ import annotations

import logging

import anthropic

from apix.config import Settings, load_settings

logger = logging.getLogger(__name__)

_client: ClaudeClient | None = None


class ClaudeClient:
    """Wrapper around the Anthropic SDK for apix-specific operations."""

    def __init__(self, api_key: str, model: str):
        self.client = anthropic.AsyncAnthropic(api_key=api_key)
        self.model = model

    async def analyze(self, prompt: str, max_tokens: int = 1024) -> str:
        """Send a prompt to Claude and return the text response.

        The prompt should request JSON output; the caller parses it. Markdown
        code fences around the answer are stripped.
        """
        try:
            message = await self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            logger.error(f"Claude API error: {e}")
            raise

        text = "".join(block.text for block in message.content if block.type == "text").strip()
        if text.startswith("```json"):
            text = text[7:]
        elif text.startswith("```"):
            text = text[3:]
        if text.endswith("```"):
            text = text[:-3]
        return text.strip()


def get_claude_client(settings: Settings | None = None) -> ClaudeClient | None:
    """Get or create the global Claude client.

    Returns None if no API key is configured.
    """
    global _client
    if _client is not None:
        return _client

    settings = settings or load_settings()
    if not settings.anthropic_api_key:
        logger.warning("No Anthropic API key found. Falling back to keyword classification.")
        return None

    _client = ClaudeClient(api_key=settings.anthropic_api_key, model=settings.claude_model)
    return _client
