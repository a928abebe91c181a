"""DynamoDB 사용자 레포지토리 (DynamoDB users repository)."""

from __future__ import annotations

import logging
from typing import Any

from boto3.dynamodb.conditions import Attr

from tracker.db.dynamo import ConditionFailed, DynamoTable
from tracker.db.keys import PROFILE_SK, USER_PREFIX, user_key
from tracker.models import User
from tracker.repositories.base import IMMUTABLE_USER_KEYS, UserRepository, clean_patch, new_id
from tracker.repositories.ddb.items import creation_order, to_item
from tracker.utils.clock import utc_now_iso

logger = logging.getLogger(__name__)

_PROFILES = Attr("SK").eq(PROFILE_SK) & Attr("PK").begins_with(USER_PREFIX)


class UsersDynamoRepository(UserRepository):
    """사용자 DynamoDB 구현 (Durable users)."""

    def __init__(self, table: DynamoTable) -> None:
        self._table: DynamoTable = table

    @staticmethod
    def _item(user: User) -> dict[str, Any]:
        return to_item(user, user_key(user.id), userId=user.id)

    async def list(self) -> list[User]:
        items: list[dict] = await self._table.scan(_PROFILES)
        return sorted((User.model_validate(item) for item in items), key=creation_order)

    async def get(self, user_id: str) -> User | None:
        item: dict | None = await self._table.get(user_key(user_id))
        return User.model_validate(item) if item is not None else None

    async def get_by_email(self, email: str) -> User | None:
        # 이메일 인덱스 없음 — 프로필 스캔 후 대소문자 무시 비교
        wanted: str = email.strip().lower()
        for user in await self.list():
            if user.email.lower() == wanted:
                return user
        return None

    async def create(self, attributes: dict[str, Any]) -> User:
        now: str = utc_now_iso()
        values: dict[str, Any] = {k: v for k, v in attributes.items() if v is not None}
        values.update(id=values.get("id") or new_id(), created_at=now, updated_at=now)
        user: User = User.model_validate(values)
        await self._table.put(self._item(user))
        return user

    async def update(self, user_id: str, patch: dict[str, Any]) -> User | None:
        current: User | None = await self.get(user_id)
        if current is None:
            return None
        merged: dict[str, Any] = current.model_dump()
        merged.update(clean_patch(patch, IMMUTABLE_USER_KEYS))
        merged["updated_at"] = utc_now_iso()
        updated: User = User.model_validate(merged)
        try:
            await self._table.put(self._item(updated), condition=Attr("PK").exists())
        except ConditionFailed:
            logger.debug("User %s removed during update", user_id)
            return None
        return updated

    async def remove(self, user_id: str) -> User | None:
        old: dict | None = await self._table.delete(user_key(user_id))
        return User.model_validate(old) if old is not None else None
