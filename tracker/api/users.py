"""사용자 관리 라우터 — 시스템 관리자 전용 CRUD.

Users Router — user management endpoints, sysadmin only.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from tracker.api.deps import require_sysadmin
from tracker.models import User
from tracker.repositories import Repos, get_repos
from tracker.schemas.users import UserCreate, UserUpdate
from tracker.services.user_service import user_service

router: APIRouter = APIRouter()


@router.get("", response_model=list[User])
async def list_users(
    repos: Annotated[Repos, Depends(get_repos)],
    current_user: Annotated[User, Depends(require_sysadmin)],
) -> list[User]:
    return await user_service.list_users(repos)


@router.post("", response_model=User, status_code=201)
async def create_user(
    data: UserCreate,
    repos: Annotated[Repos, Depends(get_repos)],
    current_user: Annotated[User, Depends(require_sysadmin)],
) -> User:
    """사용자를 생성합니다 — 이메일 중복 시 409.

    Create a user; 409 when the email is already registered.
    """
    return await user_service.create_user(repos, data, current_user)


@router.get("/{user_id}", response_model=User)
async def get_user(
    user_id: str,
    repos: Annotated[Repos, Depends(get_repos)],
    current_user: Annotated[User, Depends(require_sysadmin)],
) -> User:
    return await user_service.get_user(repos, user_id)


@router.put("/{user_id}", response_model=User)
async def update_user(
    user_id: str,
    data: UserUpdate,
    repos: Annotated[Repos, Depends(get_repos)],
    current_user: Annotated[User, Depends(require_sysadmin)],
) -> User:
    return await user_service.update_user(repos, user_id, data, current_user)


@router.delete("/{user_id}", response_model=User)
async def delete_user(
    user_id: str,
    repos: Annotated[Repos, Depends(get_repos)],
    current_user: Annotated[User, Depends(require_sysadmin)],
) -> User:
    """사용자를 삭제합니다 (Hard delete; own account excluded)."""
    return await user_service.remove_user(repos, user_id, current_user)
