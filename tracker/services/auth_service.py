"""인증 서비스 — 이메일 로그인과 토큰 발급.

Auth Service — email login and token issuance.
There are no passwords: an active account's email is enough to sign in.
"""

import logging

from tracker.models import User
from tracker.repositories import Repos
from tracker.schemas.auth import LoginRequest, TokenResponse
from tracker.utils.exceptions import UnauthorizedError
from tracker.utils.jwt import create_access_token

logger = logging.getLogger(__name__)


class AuthService:
    async def login(self, repos: Repos, data: LoginRequest) -> TokenResponse:
        """이메일로 로그인합니다.

        Sign in by email and issue an access token carrying the user's id,
        email, and role.

        Raises:
            UnauthorizedError: 없는 이메일 또는 비활성 계정 (Unknown email or inactive account)
        """
        user: User | None = await repos.users.get_by_email(data.email)
        if user is None or not user.active:
            logger.info("Rejected login for %s", data.email)
            raise UnauthorizedError("Invalid email or inactive account")

        token: str = create_access_token(
            {"sub": user.id, "email": user.email, "role": user.role.value}
        )
        return TokenResponse(access_token=token, role=user.role)


auth_service: AuthService = AuthService()
