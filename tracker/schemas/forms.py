"""폼/필드 관련 Pydantic 요청 스키마 정의.

Form and form field request schema definitions.
Request bodies accept camelCase (wire) or snake_case keys; responses use
the entity models from ``tracker.models`` directly.
"""

from typing import Any

from pydantic import Field, model_validator

from tracker.models.base import CamelModel
from tracker.models.form import CHOICE_TYPES, FieldType, FieldValidation, FormStatus


class FormCreate(CamelModel):
    """폼 생성 요청 스키마.

    Attributes:
        title: 폼 제목 (Form title)
        description: 설명 (Optional description)
        status: 상태 (draft | active | archived, default: active)
    """

    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    status: FormStatus = FormStatus.ACTIVE


class FormUpdate(CamelModel):
    """폼 수정 요청 스키마 (부분 업데이트).

    Form update request schema (partial update). When ``version`` is given
    the update applies only if the stored version still equals it.
    """

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    status: FormStatus | None = None
    version: int | None = None  # 기대 버전 — 낙관적 잠금 (Expected version)


class FieldCreate(CamelModel):
    """폼 필드 생성 요청 스키마.

    Attributes:
        field_id: 필드 ID — 생략 시 서버 생성 (Server-generated when omitted)
        label: 표시 이름 (Display label)
        type: 입력 유형 (Input type)
        required: 필수 여부 (Required flag)
        order: 표시 순서 — 생략 시 마지막 (Display order, appended when omitted)
        options: 선택지 — select/radio 필수 (Choices, required for select/radio)
        default: 기본값 (Default value)
        validation: 검증 규칙 (Validation rules)
    """

    field_id: str | None = None
    label: str = Field(..., min_length=1)
    type: FieldType
    required: bool = False
    order: int | None = None
    options: list[str] = []
    default: Any = None
    validation: FieldValidation | None = None

    @model_validator(mode="after")
    def _choices_need_options(self) -> "FieldCreate":
        if self.type in CHOICE_TYPES and not self.options:
            raise ValueError(f"{self.type.value} field requires non-empty options")
        return self


class FieldUpdate(CamelModel):
    """폼 필드 수정 요청 스키마 (부분 업데이트)."""

    label: str | None = Field(None, min_length=1)
    type: FieldType | None = None
    required: bool | None = None
    order: int | None = None
    options: list[str] | None = None
    default: Any = None
    validation: FieldValidation | None = None


class FieldsReplace(CamelModel):
    """필드 집합 전체 교체 요청 스키마 (Whole field-set replacement)."""

    fields: list[FieldCreate]
