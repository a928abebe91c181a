"""레포지토리 선택기 — 프로세스당 한 번 백엔드를 선택하고 캐시.

Repository selector.
Reads the backend selection once, builds the chosen backend and memoizes
the resulting repository set for the life of the process. When the durable
backend cannot be initialized the failure is logged and the in-memory
backend is used instead. The fallback happens at initialization only; a
later outage surfaces as ``BackendUnavailable`` from the failing call.
"""

import asyncio
import logging
from dataclasses import dataclass

from tracker.config import Settings, settings
from tracker.db.dynamo import DynamoTable
from tracker.repositories.base import (
    AuditRepository,
    EpisodeRepository,
    FormRepository,
    UserRepository,
)
from tracker.repositories.ddb import (
    AuditDynamoRepository,
    EpisodesDynamoRepository,
    FormsDynamoRepository,
    UsersDynamoRepository,
)
from tracker.repositories.memory import (
    EpisodesMemoryRepository,
    FormsMemoryRepository,
    UsersMemoryRepository,
)

logger = logging.getLogger(__name__)

BACKEND_MEMORY: str = "memory"
BACKEND_DYNAMODB: str = "dynamodb"


@dataclass(frozen=True)
class Repos:
    """선택된 백엔드의 레포지토리 묶음.

    Repository set of the selected backend. ``audit`` is ``None`` on the
    in-memory backend.
    """

    forms: FormRepository
    episodes: EpisodeRepository
    users: UserRepository
    audit: AuditRepository | None
    backend: str


def build_memory_repos() -> Repos:
    return Repos(
        forms=FormsMemoryRepository(),
        episodes=EpisodesMemoryRepository(),
        users=UsersMemoryRepository(),
        audit=None,
        backend=BACKEND_MEMORY,
    )


async def build_dynamo_repos(config: Settings) -> Repos:
    """DynamoDB 레포지토리 생성 — 테이블이 활성화될 때까지 대기.

    Raises:
        BackendUnavailable: 테이블 없음/비활성/연결 실패
                            (Missing or inactive table, or connectivity failure)
    """
    table: DynamoTable = DynamoTable(config)
    await table.connect()
    return Repos(
        forms=FormsDynamoRepository(table),
        episodes=EpisodesDynamoRepository(table),
        users=UsersDynamoRepository(table),
        audit=AuditDynamoRepository(table),
        backend=BACKEND_DYNAMODB,
    )


_cached: Repos | None = None
_lock: asyncio.Lock | None = None


def _get_lock() -> asyncio.Lock:
    global _lock
    if _lock is None:
        _lock = asyncio.Lock()
    return _lock


async def ensure_repos(config: Settings | None = None) -> Repos:
    """레포지토리 묶음을 반환합니다. 첫 호출자만 초기화 비용을 부담.

    Return the process-wide repository set, initializing it on first call.
    Idempotent and safe to call concurrently.
    """
    global _cached
    if _cached is not None:
        return _cached
    async with _get_lock():
        if _cached is not None:
            return _cached
        config = config or settings
        if config.use_dynamodb:
            try:
                _cached = await build_dynamo_repos(config)
            except Exception as exc:
                logger.warning(
                    "DynamoDB backend unavailable (%s); falling back to in-memory backend", exc
                )
                _cached = build_memory_repos()
        else:
            _cached = build_memory_repos()
        logger.info("Repository backend selected: %s", _cached.backend)
        return _cached


def reset_repos() -> None:
    """캐시된 선택을 지웁니다 — 테스트 전용 (Forget the cached selection; tests only)."""
    global _cached, _lock
    _cached = None
    _lock = None


async def get_repos() -> Repos:
    """FastAPI 의존성 — 요청 핸들러용 레포지토리 묶음 (Request dependency)."""
    return await ensure_repos()
