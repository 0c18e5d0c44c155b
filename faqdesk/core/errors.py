"""
서비스 계층 예외

라우터는 이 예외들을 HTTPException(status_code, detail)로 변환한다.
"""

from typing import Optional


class FaqDeskError(Exception):
    """faqdesk 기본 예외

    stage: FAQ 생성 파이프라인에서 실패한 단계(validating/extracting/persisting)
    """
    status_code: int = 500

    def __init__(self, detail: str = "", status_code: Optional[int] = None, stage: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        self.stage = stage
        if status_code is not None:
            self.status_code = status_code


class ValidationError(FaqDeskError):
    """호출자 입력이 구조적으로 잘못됨 (재시도 대상 아님)"""
    status_code = 400


class NotFoundError(FaqDeskError):
    """대상이 없거나 다른 테넌트 소유 (두 경우를 구분하지 않는다)"""
    status_code = 404


class LlmError(FaqDeskError):
    """LLM 호출 실패

    - 503: API 키 없음 (네트워크 호출 전 즉시 실패)
    - 502: HTTP 오류 / 응답 형식 오류 / JSON 파싱 실패 / 빈 응답
    - 504: 타임아웃
    """
    status_code = 502

    def __init__(self, detail: str = "", status_code: int = 502, stage: Optional[str] = None):
        super().__init__(detail, status_code, stage)

    @property
    def status(self) -> int:
        return self.status_code


class StorageError(FaqDeskError):
    """저장 실패 (일괄 저장은 롤백 후 발생)"""
    status_code = 500


def to_http_exception(e: FaqDeskError):
    """서비스 예외 → HTTPException"""
    from fastapi import HTTPException

    detail = e.detail or "Error"
    if e.stage:
        return HTTPException(status_code=e.status_code, detail={"stage": e.stage, "message": detail})
    return HTTPException(status_code=e.status_code, detail=detail)
