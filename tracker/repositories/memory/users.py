"""인메모리 사용자 레포지토리 (In-memory users repository)."""

from __future__ import annotations

from typing import Any

from tracker.db.memory import MemoryDB
from tracker.db.memory import db as memory_db
from tracker.models import User
from tracker.repositories.base import IMMUTABLE_USER_KEYS, UserRepository, clean_patch, new_id
from tracker.utils.clock import utc_now_iso


class UsersMemoryRepository(UserRepository):
    """사용자 인메모리 구현 (In-memory users)."""

    def __init__(self, store: MemoryDB | None = None) -> None:
        self._store: MemoryDB = store or memory_db

    def _index_of(self, user_id: str) -> int | None:
        for index, user in enumerate(self._store.users):
            if user.id == user_id:
                return index
        return None

    async def list(self) -> list[User]:
        return [user.model_copy(deep=True) for user in self._store.users]

    async def get(self, user_id: str) -> User | None:
        index: int | None = self._index_of(user_id)
        if index is None:
            return None
        return self._store.users[index].model_copy(deep=True)

    async def get_by_email(self, email: str) -> User | None:
        wanted: str = email.strip().lower()
        for user in self._store.users:
            if user.email.lower() == wanted:
                return user.model_copy(deep=True)
        return None

    async def create(self, attributes: dict[str, Any]) -> User:
        now: str = utc_now_iso()
        values: dict[str, Any] = {k: v for k, v in attributes.items() if v is not None}
        values.update(id=values.get("id") or new_id(), created_at=now, updated_at=now)
        user: User = User.model_validate(values)
        self._store.users.append(user)
        return user.model_copy(deep=True)

    async def update(self, user_id: str, patch: dict[str, Any]) -> User | None:
        index: int | None = self._index_of(user_id)
        if index is None:
            return None
        merged: dict[str, Any] = self._store.users[index].model_dump()
        merged.update(clean_patch(patch, IMMUTABLE_USER_KEYS))
        merged["updated_at"] = utc_now_iso()
        updated: User = User.model_validate(merged)
        self._store.users[index] = updated
        return updated.model_copy(deep=True)

    async def remove(self, user_id: str) -> User | None:
        index: int | None = self._index_of(user_id)
        if index is None:
            return None
        return self._store.users.pop(index)
