"""인증 라우터 — 이메일 로그인, 현재 사용자 조회.

Auth Router — email login and current-user profile.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from tracker.api.deps import get_current_user
from tracker.models import User
from tracker.repositories import Repos, get_repos
from tracker.schemas.auth import LoginRequest, TokenResponse
from tracker.services.auth_service import auth_service

router: APIRouter = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(
    data: LoginRequest,
    repos: Annotated[Repos, Depends(get_repos)],
) -> TokenResponse:
    """로그인 — 활성 계정의 이메일로 액세스 토큰 발급.

    Issue an access token for an active account's email.
    """
    return await auth_service.login(repos, data)


@router.get("/me", response_model=User)
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """현재 사용자 프로필 조회 (Profile of the authenticated user)."""
    return current_user
