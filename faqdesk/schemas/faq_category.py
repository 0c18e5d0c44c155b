"""
FAQ 카테고리 Pydantic 스키마
"""

from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import List, Optional
from datetime import datetime
import re


def _sanitize_category_text(value: Optional[str], max_length: int) -> Optional[str]:
    """카테고리 텍스트 입력을 방어적으로 정리한다."""
    if value is None:
        return None
    text = re.sub(r"<[^>]*>", "", str(value)).strip()
    if len(text) > max_length:
        raise ValueError(f"최대 {max_length}자까지 입력할 수 있습니다.")
    return text


class CategoryWrite(BaseModel):
    """카테고리 생성/수정 요청 (빈 이름은 서비스에서 400)"""

    name: Optional[str] = Field(None)

    @field_validator("name", mode="before")
    @classmethod
    def sanitize_name(cls, v):
        return _sanitize_category_text(v, 100)


class CategoryResponse(BaseModel):
    """카테고리 응답"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    tenant_id: int
    name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CategoryListResponse(BaseModel):
    items: List[CategoryResponse]
