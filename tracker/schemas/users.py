"""사용자 관리 Pydantic 요청 스키마 정의 (User management request schemas)."""

from pydantic import Field

from tracker.models.base import CamelModel
from tracker.models.user import Role

# 단순 이메일 형식 검사 — Minimal email shape check
EMAIL_PATTERN: str = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class UserCreate(CamelModel):
    """사용자 생성 요청 스키마 (시스템 관리자 전용).

    Attributes:
        email: 로그인 이메일 — 고유 (Login email, unique)
        role: 역할 (teacher | clinician | sysadmin)
        active: 활성 상태 (Active flag)
    """

    email: str = Field(..., pattern=EMAIL_PATTERN)
    role: Role = Role.TEACHER
    active: bool = True
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    locale: str | None = None
    timezone: str | None = None


class UserUpdate(CamelModel):
    """사용자 수정 요청 스키마 (부분 업데이트)."""

    email: str | None = Field(None, pattern=EMAIL_PATTERN)
    role: Role | None = None
    active: bool | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    locale: str | None = None
    timezone: str | None = None
