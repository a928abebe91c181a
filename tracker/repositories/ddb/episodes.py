"""DynamoDB 에피소드 레포지토리.

DynamoDB episodes repository.
Each episode item is projected into GSI1 (by form) and GSI2 (by submitter)
with ``TS#{timestamp}`` sort keys. Listing without a form or submitter
filter falls back to a full table scan.
"""

from __future__ import annotations

import logging
from typing import Any

from boto3.dynamodb.conditions import Attr

from tracker.db.dynamo import ConditionFailed, DynamoTable
from tracker.db.keys import (
    EPISODE_PREFIX,
    METADATA_SK,
    episode_key,
    episodes_by_form_index,
    episodes_by_submitter_index,
    timestamp_sort_key,
)
from tracker.models import Episode
from tracker.repositories.base import (
    IMMUTABLE_EPISODE_KEYS,
    EpisodeRepository,
    clean_patch,
    new_id,
    time_bounds,
    within_range,
)
from tracker.repositories.ddb.items import creation_order, to_item
from tracker.utils.clock import utc_now_iso

logger = logging.getLogger(__name__)


def _timeline_order(episode: Episode) -> tuple[str, str]:
    # 인덱스 정렬 키 동률 시 생성 순서
    return (episode.timestamp, episode.created_at or "")


class EpisodesDynamoRepository(EpisodeRepository):
    """에피소드 DynamoDB 구현 (Durable episodes)."""

    def __init__(self, table: DynamoTable) -> None:
        self._table: DynamoTable = table

    @staticmethod
    def _item(episode: Episode) -> dict[str, Any]:
        # GSI 키는 현재 formId/createdBy/timestamp로 매번 재계산
        keys: dict[str, str] = {
            **episode_key(episode.id),
            **episodes_by_form_index(episode.form_id, episode.timestamp),
            **episodes_by_submitter_index(episode.created_by, episode.timestamp),
        }
        return to_item(episode, keys, episodeId=episode.id)

    async def _query(
        self,
        index: str,
        partition_value: str,
        since: str | None,
        until: str | None,
    ) -> list[dict]:
        lower: str | None = timestamp_sort_key(since) if since is not None else None
        upper: str | None = timestamp_sort_key(until) if until is not None else None
        if lower is not None and upper is not None:
            if lower > upper:
                return []
            return await self._table.query_index(index, partition_value, sk_between=(lower, upper))
        return await self._table.query_index(index, partition_value, sk_gte=lower, sk_lte=upper)

    async def list(
        self,
        form_id: str | None = None,
        created_by: str | None = None,
        since: str | None = None,
        until: str | None = None,
    ) -> list[Episode]:
        since, until = time_bounds(since, until)
        if form_id is not None:
            items: list[dict] = await self._query(
                "GSI1", episodes_by_form_index(form_id)["GSI1PK"], since, until
            )
            episodes: list[Episode] = [Episode.model_validate(item) for item in items]
            if created_by is not None:
                episodes = [e for e in episodes if e.created_by == created_by]
            return sorted(episodes, key=_timeline_order)
        if created_by is not None:
            items = await self._query(
                "GSI2", episodes_by_submitter_index(created_by)["GSI2PK"], since, until
            )
            return sorted((Episode.model_validate(item) for item in items), key=_timeline_order)

        logger.info("Listing episodes without a form or submitter filter: full table scan")
        items = await self._table.scan(
            Attr("SK").eq(METADATA_SK) & Attr("PK").begins_with(EPISODE_PREFIX)
        )
        episodes = [
            episode
            for episode in (Episode.model_validate(item) for item in items)
            if within_range(episode.timestamp, since, until)
        ]
        return sorted(episodes, key=creation_order)

    async def get(self, episode_id: str) -> Episode | None:
        item: dict | None = await self._table.get(episode_key(episode_id))
        return Episode.model_validate(item) if item is not None else None

    async def create(self, attributes: dict[str, Any]) -> Episode:
        now: str = utc_now_iso()
        values: dict[str, Any] = {k: v for k, v in attributes.items() if v is not None}
        values.update(id=values.get("id") or new_id(), created_at=now, updated_at=now)
        values.setdefault("timestamp", now)
        episode: Episode = Episode.model_validate(values)
        await self._table.put(self._item(episode))
        return episode

    async def update(self, episode_id: str, patch: dict[str, Any]) -> Episode | None:
        current: Episode | None = await self.get(episode_id)
        if current is None:
            return None
        merged: dict[str, Any] = current.model_dump()
        merged.update(clean_patch(patch, IMMUTABLE_EPISODE_KEYS))
        merged["updated_at"] = utc_now_iso()
        updated: Episode = Episode.model_validate(merged)
        try:
            await self._table.put(self._item(updated), condition=Attr("PK").exists())
        except ConditionFailed:
            return None
        return updated

    async def remove(self, episode_id: str) -> Episode | None:
        old: dict | None = await self._table.delete(episode_key(episode_id))
        return Episode.model_validate(old) if old is not None else None
