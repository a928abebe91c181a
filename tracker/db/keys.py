"""단일 테이블 키 인코딩 — 엔티티 식별자를 PK/SK 및 GSI 키로 변환.

Single-table key encoding scheme.
Maps entity identities onto the partition/sort keys of the core table and
onto the two global secondary indexes.

Layout:
    User        PK=USER#{userId}        SK=PROFILE
    Form        PK=FORM#{formId}        SK=METADATA
    Form field  PK=FORM#{formId}        SK=FIELD#{fieldId}
    Episode     PK=EPISODE#{episodeId}  SK=METADATA
                GSI1PK=FORM#{formId}          GSI1SK=TS#{timestamp}
                GSI2PK=TEACHER#{submitterId}  GSI2SK=TS#{timestamp}
    Audit       PK=AUDIT#{date}         SK={timestamp}#{action}#{actorId}

All functions are pure and never raise. Identifiers are system-generated
opaque tokens, so the reserved prefixes never collide with their content.
"""

# 예약된 접두사 — Reserved key prefixes
USER_PREFIX: str = "USER#"
FORM_PREFIX: str = "FORM#"
FIELD_PREFIX: str = "FIELD#"
EPISODE_PREFIX: str = "EPISODE#"
TEACHER_PREFIX: str = "TEACHER#"
AUDIT_PREFIX: str = "AUDIT#"
TS_PREFIX: str = "TS#"

# 단일 아이템 정렬 키 — Sort keys of singleton items
PROFILE_SK: str = "PROFILE"
METADATA_SK: str = "METADATA"

# 키 속성 이름 — Key attribute names (never part of an entity's attributes)
KEY_ATTRIBUTES: frozenset[str] = frozenset(
    {"PK", "SK", "GSI1PK", "GSI1SK", "GSI2PK", "GSI2SK"}
)


def user_key(user_id: str) -> dict[str, str]:
    return {"PK": f"{USER_PREFIX}{user_id}", "SK": PROFILE_SK}


def form_key(form_id: str) -> dict[str, str]:
    return {"PK": f"{FORM_PREFIX}{form_id}", "SK": METADATA_SK}


def form_field_key(form_id: str, field_id: str) -> dict[str, str]:
    """폼 필드 키 — 소유 폼과 같은 파티션에 저장.

    Fields share the owning form's partition so one partition query returns
    the form metadata and all of its fields.
    """
    return {"PK": f"{FORM_PREFIX}{form_id}", "SK": f"{FIELD_PREFIX}{field_id}"}


def episode_key(episode_id: str) -> dict[str, str]:
    return {"PK": f"{EPISODE_PREFIX}{episode_id}", "SK": METADATA_SK}


def audit_key(date: str, timestamp: str, action: str, actor_id: str) -> dict[str, str]:
    """감사 레코드 키 — 날짜별 파티션, 시각순 정렬.

    Audit records are partitioned per day and sorted by timestamp.
    """
    return {"PK": f"{AUDIT_PREFIX}{date}", "SK": f"{timestamp}#{action}#{actor_id}"}


def timestamp_sort_key(timestamp: str) -> str:
    return f"{TS_PREFIX}{timestamp}"


def episodes_by_form_index(form_id: str, timestamp: str | None = None) -> dict[str, str]:
    """GSI1 키 — 폼별 에피소드를 시간순으로 조회.

    GSI1 projection: episodes for one form, ordered by event time.
    GSI1SK is omitted when no timestamp is given (query-side usage).
    """
    keys: dict[str, str] = {"GSI1PK": f"{FORM_PREFIX}{form_id}"}
    if timestamp:
        keys["GSI1SK"] = timestamp_sort_key(timestamp)
    return keys


def episodes_by_submitter_index(
    submitter_id: str, timestamp: str | None = None
) -> dict[str, str]:
    """GSI2 키 — 제출자별 에피소드를 시간순으로 조회.

    GSI2 projection: episodes by one submitter, ordered by event time.
    """
    keys: dict[str, str] = {"GSI2PK": f"{TEACHER_PREFIX}{submitter_id}"}
    if timestamp:
        keys["GSI2SK"] = timestamp_sort_key(timestamp)
    return keys


def strip_prefix(value: str, prefix: str) -> str:
    """키 값에서 접두사를 제거합니다 (Remove a reserved prefix from a key value)."""
    return value[len(prefix):] if value.startswith(prefix) else value
