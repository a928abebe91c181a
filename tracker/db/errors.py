"""스토리지 계층 예외 — 백엔드 장애, 부분 배치 실패, 버전 충돌.

Storage-layer exceptions.
These are independent of the HTTP layer; ``tracker.main`` maps them to
responses. A missing entity is never an exception here: repositories
return ``None`` for not-found.
"""

from typing import Any


class StorageError(Exception):
    """스토리지 오류 기본 클래스 (Base class for all storage errors)."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class BackendUnavailable(StorageError):
    """백엔드 연결 불가, 스로틀링, 테이블 비활성, 잘못된 요청.

    The durable store is unreachable, throttled, not yet active, or rejected
    the request. Fatal to the current operation; callers retry with backoff.
    """

    def __init__(self, reason: str, code: str | None = None) -> None:
        message = f"Storage backend unavailable: {reason}"
        super().__init__(message, details={"reason": reason, "code": code})
        self.code = code


class PartialBatchFailure(StorageError):
    """배치 쓰기가 일부만 적용됨 — 필드 집합이 혼합 상태일 수 있음.

    A batched write applied only part of its requests, so the form's field
    set may mix old and new fields. Not retried or rolled back.
    """

    def __init__(self, form_id: str | None, written: int, failed: int) -> None:
        message = f"Batch write partially applied: {written} written, {failed} failed"
        if form_id:
            message += f" (form {form_id})"
        super().__init__(
            message, details={"form_id": form_id, "written": written, "failed": failed}
        )
        self.form_id = form_id
        self.written = written
        self.failed = failed


class VersionConflict(StorageError):
    """조건부 쓰기 실패 — 읽은 버전과 저장된 버전이 다름.

    A conditional form update lost the race: the stored version no longer
    matches the version the update was based on.
    """

    def __init__(self, form_id: str, expected: int | None, actual: int | None = None) -> None:
        message = f"Form {form_id} version conflict: expected {expected}"
        if actual is not None:
            message += f", found {actual}"
        super().__init__(
            message, details={"form_id": form_id, "expected": expected, "actual": actual}
        )
        self.form_id = form_id
        self.expected = expected
        self.actual = actual
