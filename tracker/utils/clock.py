"""UTC 시각 유틸리티.

UTC timestamp helpers shared by both storage backends.
``utc_now_iso`` never returns the same value twice within a process, so
creation timestamps double as an insertion sequence.
"""

import threading
from datetime import datetime, timedelta, timezone

_lock = threading.Lock()
_last: datetime | None = None


def utc_now() -> datetime:
    """단조 증가하는 현재 UTC 시각 (Strictly increasing current UTC time)."""
    global _last
    with _lock:
        now: datetime = datetime.now(timezone.utc)
        if _last is not None and now <= _last:
            now = _last + timedelta(microseconds=1)
        _last = now
        return now


def utc_now_iso() -> str:
    """ISO-8601 문자열, 마이크로초 포함 (e.g. 2024-01-01T10:00:00.000001+00:00)."""
    return utc_now().isoformat(timespec="microseconds")


def parse_timestamp(value: str) -> datetime:
    """ISO-8601 문자열을 datetime으로 변환합니다. 'Z' 접미사 허용.

    Raises:
        ValueError: 파싱 불가 (Unparseable value)
    """
    text: str = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def to_utc_iso(value: str) -> str:
    """UTC 'Z' 표기의 고정 정밀도 문자열로 정규화합니다.

    Normalise any ISO-8601 date or date-time to UTC with a fixed
    microsecond precision and a ``Z`` suffix, so that string order is time
    order. Offset-less values are taken as UTC.

    Raises:
        ValueError: 파싱 불가 (Unparseable value)
    """
    moment: datetime = parse_timestamp(value)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    text: str = moment.astimezone(timezone.utc).isoformat(timespec="microseconds")
    return text.replace("+00:00", "Z")
