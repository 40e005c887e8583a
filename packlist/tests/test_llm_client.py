"""
Tests for the completion service client wrappers.
"""

import httpx
import pytest
from openai import APIConnectionError, BadRequestError

from packlist.shared.config import EngineConfig
from packlist.shared.llm import client as llm_client
from packlist.shared.llm.client import call_llm, call_llm_json, resolve_client
from packlist.tests.conftest import make_empty_reply_client, make_llm_client

_URL = "https://api.openai.com/v1/chat/completions"


def _bad_request():
    response = httpx.Response(400, request=httpx.Request("POST", _URL))
    return BadRequestError("schema not supported", response=response, body=None)


@pytest.fixture(autouse=True)
def _no_retry_sleep(monkeypatch):
    monkeypatch.setattr(call_llm.retry, "sleep", lambda _: None)


# ============================================================================
# TestCallLlm
# ============================================================================


class TestCallLlm:
    """Tests for call_llm() retries."""

    def test_strips_content(self):
        client = make_llm_client("  hello \n")
        assert call_llm([{"role": "user", "content": "hi"}], client=client) == "hello"

    def test_reply_without_message_is_empty(self):
        messages = [{"role": "user", "content": "hi"}]
        assert call_llm(messages, client=make_empty_reply_client()) == ""
        assert call_llm(messages, client=make_empty_reply_client(message_missing=True)) == ""

    def test_retries_transient_errors(self):
        error = APIConnectionError(request=httpx.Request("POST", _URL))
        client = make_llm_client(error, "ok")
        assert call_llm([{"role": "user", "content": "hi"}], client=client) == "ok"
        assert client.chat.completions.create.call_count == 2

    def test_gives_up_after_three_attempts(self):
        error = APIConnectionError(request=httpx.Request("POST", _URL))
        client = make_llm_client(error, error, error)
        with pytest.raises(APIConnectionError):
            call_llm([{"role": "user", "content": "hi"}], client=client)
        assert client.chat.completions.create.call_count == 3

    def test_retry_policy(self):
        assert call_llm.retry.stop.max_attempt_number == 3
        assert (call_llm.retry.wait.min, call_llm.retry.wait.max) == (2, 10)

    def test_bad_request_not_retried(self):
        client = make_llm_client(_bad_request())
        with pytest.raises(BadRequestError):
            call_llm([{"role": "user", "content": "hi"}], client=client)
        assert client.chat.completions.create.call_count == 1


class TestCallLlmJson:
    """Tests for the strict-schema / json_object fallback."""

    def test_strict_schema_first(self):
        client = make_llm_client({"season": "wet"})
        assert call_llm_json("sys", "user", {"type": "object"}, client=client) == '{"season": "wet"}'
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"]["type"] == "json_schema"
        assert kwargs["response_format"]["json_schema"]["strict"] is True

    def test_falls_back_to_json_object(self):
        client = make_llm_client(_bad_request(), {"season": "dry"})
        raw = call_llm_json("sys", "user", {"type": "object"}, client=client)
        assert raw == '{"season": "dry"}'
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert "sys" in kwargs["messages"][1]["content"]


# ============================================================================
# TestResolveClient
# ============================================================================


class TestResolveClient:
    """Tests for resolve_client()."""

    def test_injected_client_wins(self):
        injected = make_llm_client()
        assert resolve_client(EngineConfig(), injected) is injected

    def test_disabled_without_key(self):
        assert resolve_client(EngineConfig(openai_api_key=None)) is None

    def test_cached_per_key(self, monkeypatch):
        monkeypatch.setattr(llm_client, "_client", None)
        monkeypatch.setattr(llm_client, "_client_key", None)
        first = resolve_client(EngineConfig(openai_api_key="sk-test"))
        second = resolve_client(EngineConfig(openai_api_key="sk-test"))
        assert first is second
