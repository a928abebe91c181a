"""폼 및 폼 필드 엔티티 스키마.

Form and form field entity schemas.

Items:
    Form        PK=FORM#{formId}  SK=METADATA
    FormField   PK=FORM#{formId}  SK=FIELD#{fieldId}
"""

from enum import Enum
from typing import Any

from pydantic import model_validator

from tracker.models.base import CamelModel


class FormStatus(str, Enum):
    """폼 상태 (Form lifecycle status)."""

    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


class FieldType(str, Enum):
    """폼 필드 입력 유형 (Form field input type)."""

    TEXT = "text"
    TEXTAREA = "textarea"
    SELECT = "select"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    NUMBER = "number"
    DATE = "date"
    TIME = "time"
    SCALE = "scale"


# 선택지가 필요한 필드 유형 — Field types whose values come from ``options``
CHOICE_TYPES: frozenset[FieldType] = frozenset({FieldType.SELECT, FieldType.RADIO})


class Form(CamelModel):
    """폼 메타데이터 — 버전은 변경마다 정확히 1 증가.

    Form metadata. ``version`` starts at 1 and increases by exactly one per
    successful metadata or field-set change.
    """

    id: str
    title: str
    description: str | None = None
    status: FormStatus = FormStatus.ACTIVE
    version: int = 1
    created_by: str = "system"
    created_at: str | None = None
    updated_at: str | None = None


class FieldValidation(CamelModel):
    """필드 검증 규칙 (Optional per-field validation rules)."""

    min: float | None = None
    max: float | None = None
    max_length: int | None = None
    regex: str | None = None


class FormField(CamelModel):
    """폼 필드 — (formId, fieldId) 복합 식별자.

    Form field identified by ``(form_id, field_id)``. ``order`` defines the
    display and validation sequence.
    """

    field_id: str
    form_id: str
    label: str
    type: FieldType
    required: bool = False
    order: int = 0
    options: list[str] = []
    default: Any = None
    validation: FieldValidation | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @model_validator(mode="after")
    def _check_options(self) -> "FormField":
        # select/radio 유형은 선택지가 필요 — choice fields need options
        if self.type in CHOICE_TYPES and not self.options:
            raise ValueError(f"{self.type.value} field requires non-empty options")
        return self
