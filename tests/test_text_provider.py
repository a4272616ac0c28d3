from types import SimpleNamespace

import anthropic
import httpx
import pytest

import config
from text_provider import (
    ClaudeTextProvider,
    ProviderError,
    ProviderTimeoutError,
    ProviderUnavailableError,
    UnavailableTextProvider,
    extract_json,
    get_text_provider,
)


class FakeMessages:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


def _client(response=None, error=None):
    return SimpleNamespace(messages=FakeMessages(response, error))


def _response(*texts, stop_reason="end_turn"):
    return SimpleNamespace(content=[SimpleNamespace(text=text) for text in texts], stop_reason=stop_reason)


def test_claude_provider_joins_text_blocks():
    client = _client(_response(' {"a": ', '1} '))
    provider = ClaudeTextProvider(api_key="test", model="test-model", timeout=5, client=client)

    assert provider.generate("prompt", max_tokens=50, temperature=0.2) == '{"a": 1}'
    call = client.messages.calls[0]
    assert call["model"] == "test-model"
    assert call["max_tokens"] == 50
    assert call["temperature"] == 0.2
    assert call["messages"] == [{"role": "user", "content": "prompt"}]


def test_claude_provider_maps_timeouts():
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    provider = ClaudeTextProvider(api_key="test", client=_client(error=anthropic.APITimeoutError(request=request)))

    with pytest.raises(ProviderTimeoutError):
        provider.generate("prompt")


def test_claude_provider_maps_connection_errors():
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    provider = ClaudeTextProvider(api_key="test", client=_client(error=anthropic.APIConnectionError(request=request)))

    with pytest.raises(ProviderError):
        provider.generate("prompt")


def test_claude_provider_rejects_empty_content():
    provider = ClaudeTextProvider(api_key="test", client=_client(_response("   ")))

    with pytest.raises(ProviderError):
        provider.generate("prompt")


def test_unavailable_provider_always_raises():
    with pytest.raises(ProviderUnavailableError):
        UnavailableTextProvider().generate("prompt")


def test_get_text_provider_without_key_is_unavailable(monkeypatch):
    monkeypatch.setattr(config, "ANTHROPIC_API_KEY", "")

    assert isinstance(get_text_provider(), UnavailableTextProvider)


def test_get_text_provider_with_key_builds_claude(monkeypatch):
    monkeypatch.setattr(config, "ANTHROPIC_API_KEY", "sk-test")

    provider = get_text_provider()

    assert isinstance(provider, ClaudeTextProvider)
    assert provider.model == config.CLAUDE_MODEL


@pytest.mark.parametrize(
    "raw, expected",
    [
        ('{"metaTitle": "Hi"}', {"metaTitle": "Hi"}),
        ('```json\n{"metaTitle": "Hi"}\n```', {"metaTitle": "Hi"}),
        ('Sure! Here you go: {"a": [1, 2]} Hope that helps.', {"a": [1, 2]}),
        ("{“a”: “b”}", {"a": "b"}),
        ('{"a": "He said "hi" today"}', {"a": 'He said "hi" today'}),
        ('{"a": "line one\nline two"}', {"a": "line one\nline two"}),
    ],
)
def test_extract_json_recovers_objects(raw, expected):
    assert extract_json(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "no json here", "[1, 2, 3]", "{not json at all}", "} backwards {"])
def test_extract_json_returns_none_for_unusable_text(raw):
    assert extract_json(raw) is None
