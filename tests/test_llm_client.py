"""Tests for the chat-completion client error taxonomy."""

import httpx
import openai
import pytest

from faqdesk.core.errors import LlmError
from faqdesk.services.llm_client import LLMClient
from tests.fakes.factories import make_settings
from tests.fakes.fake_llm import FakeLLM, make_completion

_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
MESSAGES = [{"role": "user", "content": "안녕하세요"}]


def _client(fake: FakeLLM, **overrides) -> LLMClient:
    return LLMClient(make_settings(**overrides), client_factory=fake.factory)


async def test_returns_trimmed_content_and_uses_configured_model():
    fake = FakeLLM(content="  답변입니다.\n")
    result = await _client(fake, LLM_MODEL="gpt-test").complete(MESSAGES)
    assert result == "답변입니다."
    assert fake.calls == [{"model": "gpt-test", "messages": MESSAGES}]


async def test_missing_credentials_fail_before_network():
    fake = FakeLLM(content="unused")
    with pytest.raises(LlmError) as exc:
        await _client(fake, OPENAI_API_KEY=None).complete(MESSAGES)
    assert exc.value.status == 503
    assert fake.calls == []
    assert fake.factory_calls == 0


async def test_timeout_maps_to_504():
    fake = FakeLLM(content="late", delay=0.5)
    with pytest.raises(LlmError) as exc:
        await _client(fake, LLM_TIMEOUT_MS=20).complete(MESSAGES)
    assert exc.value.status == 504


async def test_sdk_timeout_maps_to_504():
    fake = FakeLLM(error=openai.APITimeoutError(request=_REQUEST))
    with pytest.raises(LlmError) as exc:
        await _client(fake).complete(MESSAGES)
    assert exc.value.status == 504


@pytest.mark.parametrize("status_code", [400, 401, 429, 500, 503])
async def test_http_error_maps_to_502(status_code):
    response = httpx.Response(status_code, request=_REQUEST)
    fake = FakeLLM(error=openai.APIStatusError("boom", response=response, body=None))
    with pytest.raises(LlmError) as exc:
        await _client(fake).complete(MESSAGES)
    assert exc.value.status == 502


async def test_connection_error_maps_to_502():
    fake = FakeLLM(error=openai.APIConnectionError(request=_REQUEST))
    with pytest.raises(LlmError) as exc:
        await _client(fake).complete(MESSAGES)
    assert exc.value.status == 502


@pytest.mark.parametrize("content", [None, "", "   \n"])
async def test_empty_content_maps_to_502(content):
    fake = FakeLLM(content=content)
    with pytest.raises(LlmError) as exc:
        await _client(fake).complete(MESSAGES)
    assert exc.value.status == 502


async def test_missing_choices_maps_to_502():
    fake = FakeLLM()
    fake.response = make_completion("x")
    fake.response.choices = []
    with pytest.raises(LlmError) as exc:
        await _client(fake).complete(MESSAGES)
    assert exc.value.status == 502


async def test_client_is_built_once_per_instance():
    fake = FakeLLM(content="ok")
    client = _client(fake)
    await client.complete(MESSAGES)
    await client.complete(MESSAGES)
    assert fake.factory_calls == 1
    assert len(fake.calls) == 2
