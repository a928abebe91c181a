"""FastAPI 의존성 주입 모듈 — 인증 및 역할 검사.

FastAPI dependency injection module — Authentication and authorization.

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송
       (Client sends Authorization: Bearer <token> header)
    2. decode_token()이 JWT를 검증하고 페이로드를 반환
       (decode_token verifies the JWT and returns its payload)
    3. 페이로드의 "sub"로 선택된 백엔드에서 사용자를 다시 조회
       (The user is re-read from the selected backend by "sub")
    4. 사용자 활성 상태를 확인 (User active status is verified)

Authorization Flow (require_roles):
    사용자의 역할이 허용 목록에 없으면 403 Forbidden
    (403 when the user's role is not in the allowed set)
"""

from typing import Annotated, Awaitable, Callable

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tracker.models import Role, User
from tracker.repositories import Repos, get_repos
from tracker.utils.exceptions import ForbiddenError, UnauthorizedError
from tracker.utils.jwt import decode_token

# HTTP Bearer 토큰 추출기 — 헤더가 없으면 401로 직접 처리
# (Extracts the bearer token; a missing header is turned into 401 below)
security: HTTPBearer = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> User:
    """JWT 토큰에서 현재 인증된 사용자를 추출합니다.

    Decode the bearer token and return the authenticated, active user.

    Raises:
        UnauthorizedError: 토큰 누락/무효/만료, 사용자 없음 또는 비활성
                           (Missing, invalid or expired token; unknown or inactive user)
    """
    if credentials is None:
        raise UnauthorizedError()
    try:
        payload: dict = decode_token(credentials.credentials)
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Invalid or expired token")

    # 토큰 타입 검증 — Only access tokens authenticate requests
    if payload.get("type") != "access":
        raise UnauthorizedError("Invalid token type")
    user_id: str | None = payload.get("sub")
    if not user_id:
        raise UnauthorizedError("Invalid token")

    user: User | None = await repos.users.get(user_id)
    if user is None or not user.active:
        raise UnauthorizedError("User not found or inactive")
    return user


def require_roles(*roles: Role) -> Callable[..., Awaitable[User]]:
    """역할 기반 권한 검사 의존성 팩토리.

    Dependency factory that admits only users holding one of ``roles``.

    Returns:
        FastAPI 의존성 함수 — 인증된 사용자 반환 또는 403 발생
        (Dependency returning the user or raising 403)
    """
    allowed: frozenset[Role] = frozenset(roles)

    async def _check(
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        if current_user.role not in allowed:
            raise ForbiddenError()
        return current_user

    return _check


# 편의 의존성 — Pre-configured role dependencies
require_form_editor = require_roles(Role.CLINICIAN, Role.SYSADMIN)
require_sysadmin = require_roles(Role.SYSADMIN)
