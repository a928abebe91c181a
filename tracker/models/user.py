"""사용자 엔티티 스키마.

User entity schema.
Stored as a singleton item per user: PK=USER#{userId}, SK=PROFILE.
"""

from enum import Enum

from tracker.models.base import CamelModel


class Role(str, Enum):
    """사용자 역할 (User role)."""

    TEACHER = "teacher"
    CLINICIAN = "clinician"
    SYSADMIN = "sysadmin"


class User(CamelModel):
    """사용자 — 이메일은 로그인 조회에 사용되며 고유.

    User account. ``email`` is unique and used for login lookup; uniqueness
    is enforced by the user service, not by storage.

    Attributes:
        id: 사용자 ID (User identifier)
        email: 이메일 (Login email)
        role: 역할 (teacher, clinician, sysadmin)
        active: 활성 상태 (Active flag)
        first_name / last_name / phone: 프로필 (Profile fields)
        locale / timezone: 지역 설정 (Locale and timezone)
        created_at / updated_at: ISO-8601 UTC
    """

    id: str
    email: str
    role: Role = Role.TEACHER
    active: bool = True
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    locale: str = "es-ES"
    timezone: str = "Europe/Madrid"
    created_at: str | None = None
    updated_at: str | None = None
