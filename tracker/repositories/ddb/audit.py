"""DynamoDB 감사 로그 레포지토리.

Audit trail repository. Records are append-only and partitioned per UTC
day, so one partition query returns a day's records in time order.
"""

from typing import Any

from tracker.db.dynamo import DynamoTable
from tracker.db.keys import AUDIT_PREFIX, audit_key
from tracker.models import AuditRecord
from tracker.repositories.base import AuditRepository
from tracker.repositories.ddb.items import to_item
from tracker.utils.clock import utc_now_iso


class AuditDynamoRepository(AuditRepository):
    def __init__(self, table: DynamoTable) -> None:
        self._table: DynamoTable = table

    async def record(
        self, action: str, actor_id: str, details: dict[str, Any] | None = None
    ) -> AuditRecord:
        timestamp: str = utc_now_iso()
        entry: AuditRecord = AuditRecord(
            date=timestamp[:10],
            timestamp=timestamp,
            action=action,
            actor_id=actor_id,
            details=details or {},
        )
        await self._table.put(to_item(entry, audit_key(entry.date, timestamp, action, actor_id)))
        return entry

    async def list_for_date(self, date: str) -> list[AuditRecord]:
        items: list[dict] = await self._table.query_partition(f"{AUDIT_PREFIX}{date}")
        return [AuditRecord.model_validate(item) for item in items]
