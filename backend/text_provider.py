"""Text generation provider used for meta tags and keyword suggestions.

Claude API key must be defined in a .env file in the backend root:

ANTHROPIC_API_KEY=your_real_key_here

Provider output is untrusted. Callers parse it with `extract_json` and fall
back to deterministic data on any ProviderError or parse failure. No retries
happen here; a single bounded call is made per request.
"""

import json
import logging

import anthropic
from anthropic import Anthropic

import config

logger = logging.getLogger(__name__)

SYSTEM_MESSAGE = """You are a senior SEO copywriter.
When asked for JSON, return ONLY valid raw JSON that matches the requested schema.
Do not include markdown, code fences, or text outside JSON."""


class ProviderError(Exception):
    """Raised when the text generation provider cannot produce output."""


class ProviderUnavailableError(ProviderError):
    pass


class ProviderTimeoutError(ProviderError):
    pass


class TextGenerationProvider:
    """Interface: turn a prompt into plain text or a JSON-shaped string."""

    name = "base"

    def generate(self, prompt: str, max_tokens: int = 300, temperature: float = 0.7) -> str:
        raise NotImplementedError


class UnavailableTextProvider(TextGenerationProvider):
    """Used when no provider is configured; every call fails."""

    name = "unavailable"

    def __init__(self, reason: str = "No text generation provider configured") -> None:
        self.reason = reason

    def generate(self, prompt: str, max_tokens: int = 300, temperature: float = 0.7) -> str:
        raise ProviderUnavailableError(self.reason)


def _extract_response_text(response: object) -> str:
    content = ""
    for block in getattr(response, "content", []) or []:
        text = getattr(block, "text", None)
        if text:
            content += text
    return content.strip()


class ClaudeTextProvider(TextGenerationProvider):
    """Anthropic Messages API, bounded by a client timeout."""

    name = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        timeout: float | None = None,
        client: Anthropic | None = None,
    ) -> None:
        self.model = model or config.CLAUDE_MODEL
        self.timeout = timeout if timeout is not None else config.PROVIDER_TIMEOUT_SECONDS
        self.client = client or Anthropic(api_key=api_key, timeout=self.timeout, max_retries=0)

    def generate(self, prompt: str, max_tokens: int = 300, temperature: float = 0.7) -> str:
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                system=SYSTEM_MESSAGE,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
            )
        except anthropic.APITimeoutError as e:
            raise ProviderTimeoutError(f"Claude request timed out after {self.timeout}s") from e
        except anthropic.APIError as e:
            raise ProviderError(f"Claude request failed: {e}") from e

        if getattr(response, "stop_reason", None) == "max_tokens":
            logger.warning("Claude output hit max_tokens for model=%s", self.model)
        content = _extract_response_text(response)
        if not content:
            raise ProviderError("Empty Claude response content")
        return content


def get_text_provider() -> TextGenerationProvider:
    if not config.ANTHROPIC_API_KEY:
        return UnavailableTextProvider("ANTHROPIC_API_KEY not found in environment")
    return ClaudeTextProvider(api_key=config.ANTHROPIC_API_KEY)


def _escape_inner_quotes(value: str) -> str:
    """
    Escape likely unescaped quotes inside JSON strings.
    Keeps closing quotes intact by checking the next non-space token.
    """
    out: list[str] = []
    in_string = False
    escaped = False
    length = len(value)
    i = 0

    while i < length:
        ch = value[i]
        if escaped:
            out.append(ch)
            escaped = False
        elif ch == "\\":
            out.append(ch)
            escaped = True
        elif ch == '"' and not in_string:
            in_string = True
            out.append(ch)
        elif ch == '"':
            j = i + 1
            while j < length and value[j].isspace():
                j += 1
            next_char = value[j] if j < length else ""
            # A string closes before ":", ",", "}" or "]"
            if next_char in {":", ",", "}", "]", ""}:
                in_string = False
                out.append(ch)
            else:
                out.append('\\"')
        elif in_string and ch in {"\n", "\r", "\t"}:
            out.append("\\n")
        else:
            out.append(ch)
        i += 1

    return "".join(out)


def extract_json(text: str | None) -> dict | None:
    """Pull the first JSON object out of a provider response, or None."""
    if not text:
        return None

    text = text.strip()
    if text.startswith("```"):
        text = text.replace("```json", "").replace("```", "").strip()

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        return None

    json_str = (
        text[start : end + 1]
        .replace("“", '"')
        .replace("”", '"')
        .replace("‘", "'")
        .replace("’", "'")
    )

    for candidate in (json_str, _escape_inner_quotes(json_str)):
        try:
            parsed = json.loads(candidate)
        except ValueError:
            continue
        return parsed if isinstance(parsed, dict) else None

    logger.warning("Could not parse provider JSON: %.200s", json_str)
    return None
