"""
LLM(OpenAI 호환 chat.completions) 호출 래퍼

- FAQ 추출과 챗봇 답변 생성이 같은 전송 경로/오류 분류를 공유한다.
- 재시도는 하지 않는다(max_retries=0). 재시도 정책은 호출측 책임.
- 호출 태스크가 취소되면 진행 중인 HTTP 요청도 함께 취소된다.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

import openai
from openai import AsyncOpenAI

from faqdesk.core.config import Settings, settings as default_settings
from faqdesk.core.errors import LlmError

logger = logging.getLogger(__name__)

ClientFactory = Callable[[Settings], Any]


def _default_client_factory(s: Settings) -> AsyncOpenAI:
    return AsyncOpenAI(
        api_key=s.OPENAI_API_KEY,
        organization=s.OPENAI_ORG_ID or None,
        project=s.OPENAI_PROJECT_ID or None,
        base_url=s.llm_api_base,
        timeout=s.llm_timeout_seconds,
        max_retries=0,
    )


def _extract_content(response: Any) -> Optional[str]:
    try:
        choices = response.choices
        if not choices:
            return None
        return choices[0].message.content
    except (AttributeError, IndexError, TypeError):
        return None


class LLMClient:
    """chat.completions 호출기"""

    def __init__(self, settings: Optional[Settings] = None, client_factory: Optional[ClientFactory] = None):
        self.settings = settings or default_settings
        self._client_factory = client_factory or _default_client_factory
        self._client = None

    def _get_client(self):
        if self._client is None:
            self._client = self._client_factory(self.settings)
        return self._client

    async def complete(
        self,
        messages: List[Dict[str, str]],
        *,
        purpose: str = "completion",
        model: Optional[str] = None,
    ) -> str:
        """메시지 목록으로 LLM을 호출해 응답 본문(trim)을 반환한다.

        - API 키 없음: LlmError(503), 네트워크 호출 없음
        - 타임아웃: LlmError(504)
        - HTTP 오류/연결 실패/빈 응답: LlmError(502)
        """
        if not self.settings.OPENAI_API_KEY:
            raise LlmError("OPENAI_API_KEY가 설정되지 않았습니다.", 503)

        model_name = model or self.settings.LLM_MODEL
        client = self._get_client()
        timeout = self.settings.llm_timeout_seconds

        try:
            response = await asyncio.wait_for(
                client.chat.completions.create(model=model_name, messages=messages),
                timeout=timeout,
            )
        except (asyncio.TimeoutError, openai.APITimeoutError) as e:
            logger.warning(f"[llm] {purpose} timeout after {timeout}s: {e}")
            raise LlmError(f"LLM 응답 시간이 초과되었습니다({timeout}s).", 504)
        except openai.APIStatusError as e:
            logger.warning(f"[llm] {purpose} HTTP {e.status_code}: {str(e)[:300]}")
            raise LlmError(f"LLM HTTP {e.status_code}", 502)
        except openai.APIConnectionError as e:
            logger.warning(f"[llm] {purpose} connection failed: {e}")
            raise LlmError("LLM 서버에 연결할 수 없습니다.", 502)

        usage = getattr(response, "usage", None)
        if usage is not None:
            logger.info(f"[llm] {purpose} usage: {usage}")

        content = _extract_content(response)
        if not isinstance(content, str) or not content.strip():
            raise LlmError("LLM 응답 본문이 비어 있습니다.", 502)
        return content.strip()
