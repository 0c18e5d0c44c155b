"""
FAQ 카테고리 모델

- name은 테넌트 내에서도 유일성을 보장하지 않는다.
  (LLM이 제안한 카테고리는 이름 완전일치가 아니라 유사도로 매핑된다)
- 카테고리 행은 관리자 요청으로만 생성된다. FAQ 생성 과정에서 자동 생성하지 않는다.
"""

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, func

from faqdesk.core.database import Base


class Category(Base):
    """FAQ 카테고리"""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name={self.name})>"
