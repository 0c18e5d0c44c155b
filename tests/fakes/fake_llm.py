"""Fake OpenAI-compatible transport for LLM client tests.

Stands in for the AsyncOpenAI object returned by the client factory and
records every chat.completions.create invocation.
"""

import asyncio
from types import SimpleNamespace
from typing import Any, Dict, List, Optional


def make_completion(content: Optional[str], usage: Any = None) -> SimpleNamespace:
    """Build a chat.completions response object with a single choice."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=usage,
    )


class _FakeCompletions:
    def __init__(self, owner: "FakeLLM"):
        self._owner = owner

    async def create(self, **kwargs):
        owner = self._owner
        owner.calls.append(kwargs)
        if owner.delay:
            await asyncio.sleep(owner.delay)
        if owner.error is not None:
            raise owner.error
        if owner.response is not None:
            return owner.response
        return make_completion(owner.content)


class FakeLLM:
    """In-memory transport; configure content/error/delay per test."""

    def __init__(self, content: Optional[str] = None, error: Optional[BaseException] = None, delay: float = 0.0):
        self.content = content
        self.error = error
        self.delay = delay
        self.response: Any = None
        self.calls: List[Dict[str, Any]] = []
        self.factory_calls = 0
        self.chat = SimpleNamespace(completions=_FakeCompletions(self))

    def factory(self, settings):
        """client_factory for LLMClient."""
        self.factory_calls += 1
        return self

    @property
    def last_messages(self) -> List[Dict[str, str]]:
        return self.calls[-1]["messages"] if self.calls else []
