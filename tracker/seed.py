"""초기 데이터 시드 스크립트 — 기본 사용자, 폼, 필드 생성.

Seed script — writes the default dataset through the selected repositories.
The in-memory backend already starts from this dataset; run the script to
bootstrap the DynamoDB table.

Usage:
    DATA_BACKEND=ddb DDB_CREATE_TABLES=true python -m tracker.seed

Creates:
    - 3명 사용자: sysadmin, clinician, teacher (3 users)
    - 1개 폼: "Baseline Episode" (1 form)
    - 2개 필드: Context(select), Notes(textarea) (2 fields)
"""

import asyncio
import logging

from tracker.db.memory import SEED_FIELDS, SEED_FORMS, SEED_USERS
from tracker.repositories import Repos, ensure_repos

logger = logging.getLogger(__name__)


async def seed(repos: Repos | None = None) -> int:
    """기본 데이터셋을 기록합니다.

    Write the default dataset. Idempotent: entities that already exist are
    skipped, so repeated runs change nothing.

    Returns:
        int: 새로 생성한 엔티티 수 (Number of entities created)
    """
    repos = repos or await ensure_repos()
    created: int = 0

    for user in SEED_USERS:
        if await repos.users.get(user["id"]) is None:
            await repos.users.create(dict(user))
            created += 1

    for form in SEED_FORMS:
        if await repos.forms.get(form["id"]) is not None:
            continue
        fields: list[dict] = SEED_FIELDS.get(form["id"], [])
        if fields:
            # 폼보다 필드를 먼저 기록 — 폼이 없으면 버전 증가 없음, 시드 폼은 version=1
            await repos.forms.replace_fields(form["id"], [dict(f) for f in fields])
            created += len(fields)
        await repos.forms.create(dict(form))
        created += 1

    logger.info("Seeded %d entities into the %s backend", created, repos.backend)
    return created


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())
