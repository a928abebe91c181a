"""감사 레코드 스키마 — 쓰기 전용, 수정 없음.

Audit record schema. Write-only, never updated, kept indefinitely.
Stored at PK=AUDIT#{date}, SK={timestamp}#{action}#{actorId}.
"""

from typing import Any

from tracker.models.base import CamelModel


class AuditRecord(CamelModel):
    date: str
    timestamp: str
    action: str
    actor_id: str
    details: dict[str, Any] = {}
