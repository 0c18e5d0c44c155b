"""
FAQ 관련 Pydantic 스키마
"""

from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Any, Optional, List, Literal
from datetime import datetime
import re


def _sanitize_faq_text(value: Optional[str], max_length: Optional[int] = None) -> Optional[str]:
    """FAQ 텍스트 입력을 방어적으로 정리한다."""
    if value is None:
        return None
    text = re.sub(r"<[^>]*>", "", str(value)).strip()
    if max_length is not None and len(text) > max_length:
        raise ValueError(f"최대 {max_length}자까지 입력할 수 있습니다.")
    return text


# 컬럼 길이(models/faq.py)와 맞춘다
FAQ_FIELD_MAX_LENGTH = {"category": 100, "title": 500, "content": 20000, "source_type": 50}


class FAQMedia(BaseModel):
    """FAQ 첨부 미디어"""

    kind: Literal["image", "video"] = "image"
    url: str
    name: Optional[str] = None


class FAQArticleCreate(BaseModel):
    """FAQ 수동 생성 요청

    title/content 누락은 서비스 계층에서 ValidationError(400)로 처리한다.
    """

    title: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    # 형식이 잘못된 항목은 서비스에서 조용히 제외한다
    media: List[dict] = Field(default_factory=list)
    source_type: Optional[str] = Field(None, max_length=50)
    confidence: Optional[float] = Field(None, ge=0.0, le=1.0)

    @field_validator("category", "title", "content", mode="before")
    @classmethod
    def sanitize_fields(cls, v, info):
        return _sanitize_faq_text(v, FAQ_FIELD_MAX_LENGTH.get(info.field_name))


class FAQArticleUpdate(BaseModel):
    """FAQ 수정 요청 (보낸 필드만 반영, category=null은 카테고리 해제)"""

    title: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    media: Optional[List[dict]] = None

    @field_validator("category", "title", "content", mode="before")
    @classmethod
    def sanitize_update_fields(cls, v, info):
        if v is None:
            return None
        return _sanitize_faq_text(v, FAQ_FIELD_MAX_LENGTH.get(info.field_name))


class FAQArticleResponse(BaseModel):
    """FAQ 응답"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    tenant_id: int
    title: str
    content: str
    category: Optional[str] = None
    category_id: Optional[int] = None
    media: List[FAQMedia] = Field(default_factory=list)
    source_type: str = "manual"
    confidence: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FAQListResponse(BaseModel):
    """FAQ 목록 응답"""

    items: List[FAQArticleResponse]


class GenerateFromLogsRequest(BaseModel):
    """상담 로그 → FAQ 생성 요청"""

    raw_text: Optional[str] = None
    default_category: Optional[str] = Field(None, max_length=100)


class GenerateFromLogsResponse(BaseModel):
    """FAQ 생성 결과"""

    items: List[FAQArticleResponse]
    added_count: int
    skipped_duplicates: int = 0
    total_after: int


class BulkDeleteRequest(BaseModel):
    """FAQ 일괄 삭제 요청 (정수로 해석되지 않는 id는 무시)"""

    ids: List[Any] = Field(default_factory=list)


class BulkDeleteResponse(BaseModel):
    status: str = "deleted"
    count: int
    ids: List[int]
