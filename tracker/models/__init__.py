"""엔티티 스키마 패키지 — 단일 테이블에 저장되는 모든 엔티티.

Entity schema package — every entity stored in the single table.

Modules:
    user: 사용자 및 역할 (User and Role)
    form: 폼, 폼 필드, 검증 규칙 (Form, FormField, FieldValidation)
    episode: 에피소드 (Episode)
    audit: 감사 레코드 (AuditRecord)
"""

from tracker.models.audit import AuditRecord
from tracker.models.episode import Episode
from tracker.models.form import FieldType, FieldValidation, Form, FormField, FormStatus
from tracker.models.user import Role, User

__all__ = [
    "AuditRecord",
    "Episode",
    "FieldType",
    "FieldValidation",
    "Form",
    "FormField",
    "FormStatus",
    "Role",
    "User",
]
