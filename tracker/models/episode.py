"""에피소드 엔티티 스키마.

Episode entity schema.
Stored at PK=EPISODE#{episodeId}, SK=METADATA and projected into GSI1
(by form) and GSI2 (by submitter), both sorted by ``TS#{timestamp}``.
"""

from typing import Any

from pydantic import field_validator

from tracker.models.base import CamelModel
from tracker.utils.clock import to_utc_iso


class Episode(CamelModel):
    """에피소드 — 특정 폼으로 제출된 사건 기록.

    An event record submitted against a form. ``timestamp`` is the event
    time, normalised to UTC ``Z`` form so string order is time order, and
    differs from ``created_at``.
    ``data`` maps field ids to submitted values and is validated at write
    time only.
    """

    id: str
    form_id: str
    timestamp: str
    context: str = "other"
    created_by: str
    data: dict[str, Any] = {}
    created_at: str | None = None
    updated_at: str | None = None

    @field_validator("timestamp")
    @classmethod
    def _valid_point_in_time(cls, value: str) -> str:
        try:
            return to_utc_iso(value)
        except ValueError as exc:
            raise ValueError(f"timestamp is not a valid ISO-8601 point in time: {value}") from exc
