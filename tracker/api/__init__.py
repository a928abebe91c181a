"""API 라우터 패키지 — 모든 엔드포인트 통합.

API Router package — aggregates every endpoint into ``api_router``,
mounted under ``/api`` by ``tracker.main``.

Included routers:
    - auth: 이메일 로그인, 현재 사용자 (Email login, current user)
    - forms: 폼 및 필드 관리 (Forms and fields)
    - episodes: 에피소드 제출/조회 (Episode submission and listing)
    - users: 사용자 관리 (User management, sysadmin)
    - audit: 감사 로그 조회 (Audit trail, sysadmin)
"""

from fastapi import APIRouter

from tracker.api.audit import router as audit_router
from tracker.api.auth import router as auth_router
from tracker.api.episodes import router as episodes_router
from tracker.api.forms import router as forms_router
from tracker.api.users import router as users_router

api_router: APIRouter = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Auth"])
api_router.include_router(forms_router, prefix="/forms", tags=["Forms"])
api_router.include_router(episodes_router, prefix="/episodes", tags=["Episodes"])
api_router.include_router(users_router, prefix="/users", tags=["Users"])
api_router.include_router(audit_router, prefix="/audit", tags=["Audit"])
