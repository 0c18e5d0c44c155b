"""
FAQ 모델
"""

from sqlalchemy import Column, String, Text, Integer, Float, DateTime, ForeignKey, func

from faqdesk.core.database import Base, JSON


class FAQArticle(Base):
    """FAQ 문서(질문/답변)"""

    __tablename__ = "faq_articles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    content = Column(Text, nullable=False)
    # 자유 텍스트 카테고리명 (카테고리 테이블과 약하게 연결)
    category = Column(String(100), nullable=True, index=True)
    # 유사한 카테고리가 있을 때만 채워진다
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)
    # [{"kind": "image"|"video", "url": str, "name": str|None}]
    media = Column(JSON(), nullable=False, default=list)
    source_type = Column(String(50), nullable=False, default="manual")
    confidence = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<FAQArticle(id={self.id}, tenant_id={self.tenant_id}, title={(self.title or '')[:30]})>"
