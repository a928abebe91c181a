"""공통 응답 스키마 정의 (Common response schemas)."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """헬스 체크 응답 — 활성 저장소 백엔드 포함.

    Attributes:
        status: 항상 "ok" (Always "ok")
        backend: 선택된 백엔드 (memory | dynamodb)
    """

    status: str = "ok"
    backend: str
