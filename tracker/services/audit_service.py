"""감사 서비스 — 권한이 필요한 작업의 추적 기록.

Audit Service — traceability records for privileged actions.
Records are written only when the selected backend has an audit trail
(the DynamoDB backend); on the in-memory backend recording is a no-op.
"""

import logging
from datetime import date
from typing import Any

from tracker.models import AuditRecord, User
from tracker.repositories import Repos
from tracker.utils.exceptions import BadRequestError

logger = logging.getLogger(__name__)


class AuditService:
    """감사 기록 쓰기/조회 서비스 (Audit trail writer and reader)."""

    async def record(
        self,
        repos: Repos,
        action: str,
        actor: User,
        details: dict[str, Any] | None = None,
    ) -> AuditRecord | None:
        """감사 레코드를 기록합니다.

        Args:
            repos: 레포지토리 묶음 (Repository set)
            action: 작업 이름 (Action name, e.g. "form.update")
            actor: 작업 수행자 (Acting user)
            details: 부가 정보 (Extra details)

        Returns:
            AuditRecord | None: 기록된 레코드, 감사 저장소가 없으면 None
                                (The record, or None without an audit trail)
        """
        if repos.audit is None:
            return None
        entry: AuditRecord = await repos.audit.record(action, actor.id, details)
        logger.info("Audit %s by %s", action, actor.id)
        return entry

    async def list_for_date(self, repos: Repos, day: str) -> list[AuditRecord]:
        """특정 날짜의 감사 레코드를 조회합니다.

        Raises:
            BadRequestError: YYYY-MM-DD 형식이 아님 (Not a YYYY-MM-DD date)
        """
        try:
            date.fromisoformat(day)
        except ValueError:
            raise BadRequestError("Date must be YYYY-MM-DD")
        if repos.audit is None:
            return []
        return await repos.audit.list_for_date(day)


audit_service: AuditService = AuditService()
