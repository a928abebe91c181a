"""인메모리 에피소드 레포지토리.

In-memory episodes repository. Filtered listings mirror the index queries of
the durable backend: the matching partition ordered by ``timestamp``.
"""

from __future__ import annotations

from typing import Any

from tracker.db.memory import MemoryDB
from tracker.db.memory import db as memory_db
from tracker.models import Episode
from tracker.repositories.base import (
    IMMUTABLE_EPISODE_KEYS,
    EpisodeRepository,
    clean_patch,
    new_id,
    time_bounds,
    within_range,
)
from tracker.utils.clock import utc_now_iso


class EpisodesMemoryRepository(EpisodeRepository):
    """에피소드 인메모리 구현 (In-memory episodes)."""

    def __init__(self, store: MemoryDB | None = None) -> None:
        self._store: MemoryDB = store or memory_db

    def _index_of(self, episode_id: str) -> int | None:
        for index, episode in enumerate(self._store.episodes):
            if episode.id == episode_id:
                return index
        return None

    async def list(
        self,
        form_id: str | None = None,
        created_by: str | None = None,
        since: str | None = None,
        until: str | None = None,
    ) -> list[Episode]:
        since, until = time_bounds(since, until)
        matches: list[Episode] = [
            episode
            for episode in self._store.episodes
            if (form_id is None or episode.form_id == form_id)
            and (created_by is None or episode.created_by == created_by)
            and within_range(episode.timestamp, since, until)
        ]
        if form_id is not None or created_by is not None:
            matches.sort(key=lambda e: e.timestamp)
        return [episode.model_copy(deep=True) for episode in matches]

    async def get(self, episode_id: str) -> Episode | None:
        index: int | None = self._index_of(episode_id)
        if index is None:
            return None
        return self._store.episodes[index].model_copy(deep=True)

    async def create(self, attributes: dict[str, Any]) -> Episode:
        now: str = utc_now_iso()
        values: dict[str, Any] = {k: v for k, v in attributes.items() if v is not None}
        values.update(id=values.get("id") or new_id(), created_at=now, updated_at=now)
        values.setdefault("timestamp", now)
        episode: Episode = Episode.model_validate(values)
        self._store.episodes.append(episode)
        return episode.model_copy(deep=True)

    async def update(self, episode_id: str, patch: dict[str, Any]) -> Episode | None:
        index: int | None = self._index_of(episode_id)
        if index is None:
            return None
        merged: dict[str, Any] = self._store.episodes[index].model_dump()
        merged.update(clean_patch(patch, IMMUTABLE_EPISODE_KEYS))
        merged["updated_at"] = utc_now_iso()
        updated: Episode = Episode.model_validate(merged)
        self._store.episodes[index] = updated
        return updated.model_copy(deep=True)

    async def remove(self, episode_id: str) -> Episode | None:
        index: int | None = self._index_of(episode_id)
        if index is None:
            return None
        return self._store.episodes.pop(index)
