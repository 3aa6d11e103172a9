import pytest
import requests

from ai_analysis import llm_client
from ai_analysis.llm_client import (
    LLMAuthError,
    LLMClient,
    LLMRateLimitError,
    LLMResponseError,
    LLMTimeoutError,
    check_connection,
)


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


@pytest.fixture
def calls(monkeypatch):
    """Records requests.post calls; tests set `calls.responses` to a list to replay."""
    class Recorder:
        responses = []
        made = []

    recorder = Recorder()
    recorder.responses = []
    recorder.made = []

    def fake_post(url, headers=None, params=None, json=None, timeout=None):
        recorder.made.append({"url": url, "headers": headers, "params": params, "json": json, "timeout": timeout})
        response = recorder.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(llm_client.requests, "post", fake_post)
    monkeypatch.setattr(llm_client.time, "sleep", lambda seconds: None)
    return recorder


def test_chat_provider_request_and_text(calls):
    calls.responses = [FakeResponse(payload={"choices": [{"message": {"content": "最終評分: +3"}}]})]
    client = LLMClient("deepseek", api_key="sk-test-key")

    assert client.complete("分析 2330") == "最終評分: +3"
    sent = calls.made[0]
    assert sent["url"] == "https://api.deepseek.com/v1/chat/completions"
    assert sent["headers"]["Authorization"] == "Bearer sk-test-key"
    assert sent["json"]["model"] == "deepseek-chat"
    assert sent["json"]["max_tokens"] == 1500
    assert sent["json"]["messages"] == [{"role": "user", "content": "分析 2330"}]
    assert sent["timeout"] == 55


def test_gemini_uses_query_key_and_candidates(calls):
    calls.responses = [FakeResponse(payload={"candidates": [{"content": {"parts": [{"text": "回應"}]}}]})]
    client = LLMClient("gemini", api_key="g-key")

    assert client.complete("prompt", timeout=45) == "回應"
    sent = calls.made[0]
    assert sent["params"] == {"key": "g-key"}
    assert sent["json"]["generationConfig"]["maxOutputTokens"] == 1500
    assert sent["timeout"] == 45


def test_claude_headers_and_content(calls):
    calls.responses = [FakeResponse(payload={"content": [{"text": "Claude 回應"}]})]
    client = LLMClient("claude", api_key="c-key")

    assert client.complete("prompt") == "Claude 回應"
    headers = calls.made[0]["headers"]
    assert headers["x-api-key"] == "c-key"
    assert headers["anthropic-version"] == "2023-06-01"


def test_unauthorized_maps_to_auth_error(calls):
    calls.responses = [FakeResponse(status_code=401, text="invalid key")]
    client = LLMClient("gpt", api_key="bad")

    with pytest.raises(LLMAuthError) as excinfo:
        client.complete("prompt")
    assert excinfo.value.user_message == "API Key 無效或已過期"
    assert excinfo.value.platform == "gpt"


def test_rate_limit_retries_once_then_fails(calls):
    calls.responses = [FakeResponse(status_code=429), FakeResponse(status_code=429)]
    client = LLMClient("grok", api_key="x-key")

    with pytest.raises(LLMRateLimitError):
        client.complete("prompt")
    assert len(calls.made) == 2


def test_rate_limit_recovers_on_retry(calls):
    calls.responses = [
        FakeResponse(status_code=503),
        FakeResponse(payload={"choices": [{"message": {"content": "ok"}}]}),
    ]
    assert LLMClient("grok", api_key="x-key").complete("prompt") == "ok"


def test_timeout(calls):
    calls.responses = [requests.exceptions.Timeout("slow")]
    with pytest.raises(LLMTimeoutError):
        LLMClient("deepseek", api_key="k").complete("prompt")


def test_malformed_response(calls):
    calls.responses = [FakeResponse(payload={"choices": []})]
    with pytest.raises(LLMResponseError):
        LLMClient("deepseek", api_key="k").complete("prompt")


def test_missing_key(monkeypatch, calls):
    monkeypatch.setattr(llm_client.settings, "get_api_key", lambda name: None)
    client = LLMClient("deepseek")

    with pytest.raises(LLMAuthError):
        client.complete("prompt")
    assert calls.made == []


def test_unsupported_platform():
    with pytest.raises(ValueError):
        LLMClient("unknown-ai", api_key="k")


def test_check_connection(calls):
    calls.responses = [FakeResponse(payload={"choices": [{"message": {"content": " 連線成功 "}}]})]
    assert check_connection("deepseek", "k") == {"success": True, "platform": "deepseek", "message": "連線成功"}

    calls.responses = [FakeResponse(status_code=429), FakeResponse(status_code=429)]
    outcome = check_connection("deepseek", "k")
    assert outcome["success"] is False
    assert outcome["message"] == "API 配額已用盡"

    assert check_connection("unknown-ai", "k")["success"] is False
