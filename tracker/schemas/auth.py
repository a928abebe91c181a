"""인증 관련 Pydantic 요청/응답 스키마 정의.

Authentication-related request/response schema definitions.
Login is by email only; the account must exist and be active.
"""

from pydantic import BaseModel

from tracker.models.user import Role


class LoginRequest(BaseModel):
    """로그인 요청 스키마.

    Attributes:
        email: 로그인 이메일 — 대소문자 무시 (Login email, case-insensitive)
    """

    email: str


class TokenResponse(BaseModel):
    """JWT 토큰 발급 응답 스키마.

    Attributes:
        access_token: JWT 액세스 토큰 (Access token)
        token_type: 토큰 유형 (Always "bearer")
        role: 로그인한 사용자의 역할 (Role of the signed-in user)
    """

    access_token: str
    token_type: str = "bearer"
    role: Role
