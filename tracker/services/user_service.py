"""사용자 서비스 — 사용자 관리 비즈니스 로직 (시스템 관리자 전용).

User Service — business logic for user management (sysadmin only).
Emails are stored lowercased and must be unique across users.
"""

from typing import Any

from tracker.models import User
from tracker.repositories import Repos
from tracker.schemas.users import UserCreate, UserUpdate
from tracker.services.audit_service import audit_service
from tracker.utils.exceptions import BadRequestError, DuplicateError, NotFoundError


class UserService:
    """사용자 관련 비즈니스 로직을 처리하는 서비스 (User business logic)."""

    async def _ensure_email_free(
        self, repos: Repos, email: str, user_id: str | None = None
    ) -> None:
        existing: User | None = await repos.users.get_by_email(email)
        if existing is not None and existing.id != user_id:
            raise DuplicateError("Email already registered")

    async def list_users(self, repos: Repos) -> list[User]:
        return await repos.users.list()

    async def get_user(self, repos: Repos, user_id: str) -> User:
        user: User | None = await repos.users.get(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def create_user(self, repos: Repos, data: UserCreate, actor: User) -> User:
        """사용자를 생성합니다.

        Raises:
            DuplicateError: 이메일 중복 (Email already registered)
        """
        attributes: dict[str, Any] = data.model_dump()
        attributes["email"] = data.email.strip().lower()
        await self._ensure_email_free(repos, attributes["email"])
        user: User = await repos.users.create(attributes)
        await audit_service.record(repos, "user.create", actor, {"userId": user.id})
        return user

    async def update_user(
        self, repos: Repos, user_id: str, data: UserUpdate, actor: User
    ) -> User:
        """사용자 정보를 병합 수정합니다.

        Raises:
            NotFoundError: 사용자 없음 (User not found)
            DuplicateError: 다른 사용자가 쓰는 이메일 (Email used by another user)
        """
        patch: dict[str, Any] = data.model_dump(exclude_unset=True, exclude_none=True)
        if "email" in patch:
            patch["email"] = patch["email"].strip().lower()
            await self._ensure_email_free(repos, patch["email"], user_id)
        user: User | None = await repos.users.update(user_id, patch)
        if user is None:
            raise NotFoundError("User not found")
        await audit_service.record(
            repos, "user.update", actor, {"userId": user_id, "changed": sorted(patch)}
        )
        return user

    async def remove_user(self, repos: Repos, user_id: str, actor: User) -> User:
        """사용자를 삭제합니다 — 자기 자신은 삭제 불가.

        Raises:
            BadRequestError: 자기 계정 삭제 시도 (Attempt to delete own account)
            NotFoundError: 사용자 없음 (User not found)
        """
        if user_id == actor.id:
            raise BadRequestError("Cannot delete your own account")
        user: User | None = await repos.users.remove(user_id)
        if user is None:
            raise NotFoundError("User not found")
        await audit_service.record(repos, "user.delete", actor, {"userId": user_id})
        return user


user_service: UserService = UserService()
