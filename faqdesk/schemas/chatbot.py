"""
챗봇/챗봇 설정 Pydantic 스키마
"""

from pydantic import BaseModel
from typing import Optional

from faqdesk.services.chat_config_service import ChatSettings


class ChatbotRequest(BaseModel):
    """챗봇 질문"""
    message: Optional[str] = None


class ChatbotResponse(BaseModel):
    """챗봇 답변"""
    answer: str


class ChatSettingsUpdate(BaseModel):
    """챗봇 설정 수정 (보낸 필드만 반영)"""
    headerText: Optional[str] = None
    thumbnailUrl: Optional[str] = None
    thumbnailDataUrl: Optional[str] = None
    systemPrompt: Optional[str] = None


class ChatSettingsResponse(BaseModel):
    settings: ChatSettings
