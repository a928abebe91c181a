"""감사 로그 라우터 — 날짜별 감사 레코드 조회 (시스템 관리자 전용).

Audit Router — read one day's audit records, sysadmin only.
Returns an empty list on the in-memory backend, which keeps no audit trail.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from tracker.api.deps import require_sysadmin
from tracker.models import AuditRecord, User
from tracker.repositories import Repos, get_repos
from tracker.services.audit_service import audit_service

router: APIRouter = APIRouter()


@router.get("/{day}", response_model=list[AuditRecord])
async def list_audit_records(
    day: str,
    repos: Annotated[Repos, Depends(get_repos)],
    current_user: Annotated[User, Depends(require_sysadmin)],
) -> list[AuditRecord]:
    return await audit_service.list_for_date(repos, day)
