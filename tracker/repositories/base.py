"""레포지토리 인터페이스 — 모든 백엔드가 구현해야 하는 계약.

Repository interface — the backend-agnostic contract consumed by services.
Both the in-memory and the DynamoDB backends implement these classes and
must behave identically for the same inputs.

Contract:
    - 모든 연산은 비동기 (Every operation is async)
    - 조회 대상이 없으면 None 반환, 예외 아님 (Not-found is ``None``, never raised)
    - update는 부분 병합: patch에 있는 키만 덮어씀
      (update merges: only keys present in the patch are overwritten)
    - remove는 삭제 전 스냅샷 반환, 반복 호출 시 None
      (remove returns the pre-deletion snapshot; repeated calls return None)
    - 연결 실패는 BackendUnavailable 예외 (Connectivity failures raise BackendUnavailable)

Usage:
    class FormsMemoryRepository(FormRepository):
        async def list(self) -> list[Form]: ...
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from typing import Any

from tracker.models import AuditRecord, Episode, Form, FormField, User
from tracker.utils.clock import to_utc_iso

# 패치로 변경할 수 없는 속성 — Attributes a patch may never overwrite
IMMUTABLE_FORM_KEYS: frozenset[str] = frozenset({"id", "version", "created_by", "created_at"})
IMMUTABLE_FIELD_KEYS: frozenset[str] = frozenset({"field_id", "form_id", "created_at"})
IMMUTABLE_EPISODE_KEYS: frozenset[str] = frozenset({"id", "created_at"})
IMMUTABLE_USER_KEYS: frozenset[str] = frozenset({"id", "created_at"})


def new_id() -> str:
    """시스템 생성 식별자 — UUID v4 (System-generated opaque identifier)."""
    return str(uuid.uuid4())


def clean_patch(patch: dict[str, Any], immutable: frozenset[str]) -> dict[str, Any]:
    """변경 불가 키를 제거한 패치 사본 (Copy of the patch without immutable keys)."""
    return {key: value for key, value in patch.items() if key not in immutable}


def within_range(timestamp: str, since: str | None, until: str | None) -> bool:
    """시각이 [since, until] 범위 안인지 — 인덱스 정렬 키와 같은 문자열 비교.

    Inclusive bound check using the same lexicographic comparison the
    ``TS#`` index sort keys use, so both backends agree on the boundary.
    """
    if since is not None and timestamp < since:
        return False
    if until is not None and timestamp > until:
        return False
    return True


# 날짜만 있는 상한을 그날 끝까지 확장 — '~'는 ISO 시각의 모든 문자보다 큼
# Date-only upper bounds cover the whole day; '~' sorts after every ISO character
_END_OF_DAY_SUFFIX: str = "T~"


def time_bounds(since: str | None, until: str | None) -> tuple[str | None, str | None]:
    """조회 범위를 저장된 timestamp와 같은 UTC 표기로 정규화합니다.

    Normalise list bounds to the stored UTC form. A date-only ``until``
    covers that whole day.
    """
    lower: str | None = to_utc_iso(since) if since is not None else None
    upper: str | None = None
    if until is not None:
        upper = until + _END_OF_DAY_SUFFIX if len(until) == 10 else to_utc_iso(until)
    return lower, upper


class FormRepository(ABC):
    """폼 및 폼 필드 레포지토리 계약 (Forms and their field sub-resource)."""

    @abstractmethod
    async def list(self) -> list[Form]:
        """모든 폼을 반환합니다 (All forms visible to the backend)."""

    @abstractmethod
    async def get(self, form_id: str) -> Form | None:
        """ID로 폼을 조회합니다 (Point lookup)."""

    @abstractmethod
    async def create(self, attributes: dict[str, Any]) -> Form:
        """폼을 생성합니다. id가 없으면 UUID 생성, version=1.

        Create a form; generates an id when absent and starts at version 1.
        """

    @abstractmethod
    async def update(
        self,
        form_id: str,
        patch: dict[str, Any],
        expected_version: int | None = None,
    ) -> Form | None:
        """폼 메타데이터를 병합하고 버전을 1 증가시킵니다.

        Merge the patch and increment ``version`` by one. The write is
        conditional on the version that was read (or ``expected_version``
        when given).

        Raises:
            VersionConflict: 저장된 버전이 기대값과 다름 (Stored version moved on)
        """

    @abstractmethod
    async def remove(self, form_id: str) -> Form | None:
        """폼과 그 필드를 삭제하고 삭제 전 폼을 반환합니다.

        Hard-delete the form together with its fields.
        """

    @abstractmethod
    async def list_fields(self, form_id: str) -> list[FormField]:
        """order 오름차순, 동률은 삽입 순서 (Ascending ``order``, ties by insertion)."""

    @abstractmethod
    async def get_field(self, form_id: str, field_id: str) -> FormField | None:
        """필드 단건 조회 (Point lookup of one field)."""

    @abstractmethod
    async def create_field(self, form_id: str, attributes: dict[str, Any]) -> FormField:
        """필드를 생성합니다. order가 없으면 기존 필드 수 + 1.

        Create a field; ``order`` defaults to the current field count + 1.
        Bumps the owning form's version when the form exists.
        """

    @abstractmethod
    async def update_field(
        self, form_id: str, field_id: str, patch: dict[str, Any]
    ) -> FormField | None:
        """필드를 병합 수정합니다 (Merge-update one field; bumps the form version)."""

    @abstractmethod
    async def remove_field(self, form_id: str, field_id: str) -> FormField | None:
        """필드를 삭제합니다 (Delete one field; bumps the form version)."""

    @abstractmethod
    async def replace_fields(
        self, form_id: str, fields: list[dict[str, Any]]
    ) -> list[FormField]:
        """필드 집합 전체 교체 — 기존 삭제 후 새로 저장, 폼 버전 1 증가.

        Replace the whole field set (delete existing, write new) and bump the
        form version once. Not transactional on the durable backend.

        Raises:
            PartialBatchFailure: 일부만 기록됨 (Only part of the batch applied)
        """


class EpisodeRepository(ABC):
    """에피소드 레포지토리 계약 (Episodes)."""

    @abstractmethod
    async def list(
        self,
        form_id: str | None = None,
        created_by: str | None = None,
        since: str | None = None,
        until: str | None = None,
    ) -> list[Episode]:
        """에피소드 목록 — 폼/제출자/기간 필터.

        List episodes. With ``form_id`` or ``created_by`` the result is the
        matching index partition ordered by timestamp; without filters it is
        every episode. ``since``/``until`` bound the timestamp (inclusive) and
        are compared in UTC, whatever offset they carry.
        """

    @abstractmethod
    async def get(self, episode_id: str) -> Episode | None:
        """ID로 에피소드를 조회합니다 (Point lookup)."""

    @abstractmethod
    async def create(self, attributes: dict[str, Any]) -> Episode:
        """에피소드를 생성합니다 (Create; timestamp defaults to now)."""

    @abstractmethod
    async def update(self, episode_id: str, patch: dict[str, Any]) -> Episode | None:
        """에피소드를 병합 수정합니다 — 버전 관리 없음 (Merge without versioning)."""

    @abstractmethod
    async def remove(self, episode_id: str) -> Episode | None:
        """에피소드를 삭제합니다 (Delete; return the removed snapshot)."""


class UserRepository(ABC):
    """사용자 레포지토리 계약 (Users)."""

    @abstractmethod
    async def list(self) -> list[User]:
        """모든 사용자 (All users)."""

    @abstractmethod
    async def get(self, user_id: str) -> User | None:
        """ID로 사용자 조회 (Point lookup)."""

    @abstractmethod
    async def get_by_email(self, email: str) -> User | None:
        """이메일로 사용자 조회 — 대소문자 무시 (Login lookup, case-insensitive)."""

    @abstractmethod
    async def create(self, attributes: dict[str, Any]) -> User:
        """사용자를 생성합니다 (Create a user)."""

    @abstractmethod
    async def update(self, user_id: str, patch: dict[str, Any]) -> User | None:
        """사용자를 병합 수정합니다 (Merge without versioning)."""

    @abstractmethod
    async def remove(self, user_id: str) -> User | None:
        """사용자를 삭제합니다 (Hard delete; return the removed snapshot)."""


class AuditRepository(ABC):
    """감사 로그 레포지토리 — 쓰기 전용, DynamoDB 백엔드에만 존재.

    Audit trail repository. Write-only; exists on the durable backend only.
    """

    @abstractmethod
    async def record(
        self, action: str, actor_id: str, details: dict[str, Any] | None = None
    ) -> AuditRecord:
        """감사 레코드를 기록합니다 (Append one audit record)."""

    @abstractmethod
    async def list_for_date(self, date: str) -> list[AuditRecord]:
        """특정 날짜(YYYY-MM-DD)의 감사 레코드, 시각순 (Records of one day, by time)."""
