"""에피소드 관련 Pydantic 요청 스키마 정의.

Episode request schema definitions.
"""

from typing import Any

from pydantic import Field, field_validator

from tracker.models.base import CamelModel
from tracker.utils.clock import parse_timestamp


def _check_timestamp(value: str | None) -> str | None:
    if value is None:
        return value
    try:
        parse_timestamp(value)
    except ValueError as exc:
        raise ValueError("timestamp must be an ISO-8601 point in time") from exc
    return value


class EpisodeCreate(CamelModel):
    """에피소드 제출 요청 스키마.

    Episode submission request schema. ``created_by`` is never taken from
    the body; the service sets it from the authenticated caller.

    Attributes:
        form_id: 사용한 폼 ID (Form the episode was recorded with)
        timestamp: 사건 발생 시각 — 생략 시 현재 (Event time, defaults to now)
        context: 상황 분류 (Context category)
        data: 필드 ID → 값 (Field id to submitted value)
    """

    form_id: str = Field(..., min_length=1)
    timestamp: str | None = None
    context: str = "other"
    data: dict[str, Any] = {}

    @field_validator("timestamp")
    @classmethod
    def _valid_timestamp(cls, value: str | None) -> str | None:
        return _check_timestamp(value)


class EpisodeUpdate(CamelModel):
    """에피소드 수정 요청 스키마 (부분 업데이트)."""

    timestamp: str | None = None
    context: str | None = None
    data: dict[str, Any] | None = None

    @field_validator("timestamp")
    @classmethod
    def _valid_timestamp(cls, value: str | None) -> str | None:
        return _check_timestamp(value)
