import pytest
import requests

from config import SETTINGS
from matching import llm_anthropic
from matching.llm_anthropic import CompletionError, NonTextResponse, complete


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self.payload


@pytest.fixture
def posted(monkeypatch):
    monkeypatch.setattr(SETTINGS, "anthropic_api_key", "sk-test")
    monkeypatch.setattr(SETTINGS, "anthropic_model", "claude-test")
    sent = {"response": FakeResponse({"content": [{"type": "text", "text": "{}"}]})}

    def fake_post(url, headers=None, json=None, timeout=None):
        sent.update(url=url, headers=headers, json=json, timeout=timeout)
        return sent["response"]

    monkeypatch.setattr(llm_anthropic.requests, "post", fake_post)
    return sent


def test_single_user_message_with_pinned_model(posted):
    assert complete("hello", max_tokens=1024) == "{}"
    assert posted["json"] == {
        "model": "claude-test",
        "max_tokens": 1024,
        "messages": [{"role": "user", "content": "hello"}],
    }
    assert posted["headers"]["x-api-key"] == "sk-test"
    assert posted["timeout"] == SETTINGS.llm_timeout


def test_http_error_propagates(posted):
    posted["response"] = FakeResponse({"error": {"type": "rate_limit_error"}}, status_code=429)
    with pytest.raises(requests.HTTPError):
        complete("hello")


def test_non_text_part_is_rejected(posted):
    posted["response"] = FakeResponse({"content": [{"type": "tool_use", "id": "x"}]})
    with pytest.raises(NonTextResponse, match="Unexpected response type"):
        complete("hello")


def test_missing_api_key(monkeypatch):
    monkeypatch.setattr(SETTINGS, "anthropic_api_key", "")
    with pytest.raises(CompletionError, match="ANTHROPIC_API_KEY"):
        complete("hello")
