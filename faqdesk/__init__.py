"""
faqdesk - 상담 로그 기반 FAQ 생성 + FAQ 검색 챗봇 백엔드
"""
