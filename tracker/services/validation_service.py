"""에피소드 데이터 검증 서비스.

Episode data validation.
Checks submitted episode ``data`` against the form's field definitions at
write time. Stored episodes are never re-validated when the form changes.

Error codes:
    required      필수 값 누락 (Missing required value)
    number        숫자 아님 (Not a number)
    min / max     범위 위반 (Outside validation.min / validation.max)
    maxLength     길이 초과 (Longer than validation.maxLength)
    regex         패턴 불일치 (Does not match validation.regex)
    option        선택지 외 값 (Not one of the field's options)
    boolean       불리언 아님 (Not a checkbox value)
    date / time   날짜/시각 형식 오류 (Unparseable date or time)
    unknown_field 폼에 없는 필드 (Field id not defined on the form)
"""

import logging
import re
from datetime import date, time
from typing import Any

from pydantic import BaseModel

from tracker.models import FieldType, FormField
from tracker.models.form import CHOICE_TYPES

logger = logging.getLogger(__name__)

# 체크박스로 허용되는 문자열 — String values accepted for checkboxes
_CHECKBOX_STRINGS: frozenset[str] = frozenset({"on", "true", "false"})
_NUMERIC_TYPES: frozenset[FieldType] = frozenset({FieldType.NUMBER, FieldType.SCALE})
_TEXT_TYPES: frozenset[FieldType] = frozenset({FieldType.TEXT, FieldType.TEXTAREA})


class FieldError(BaseModel):
    """필드 단위 검증 오류 (Per-field validation error)."""

    code: str
    value: Any = None


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _to_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value))
    except ValueError:
        return None


def _check_number(field: FormField, value: Any) -> FieldError | None:
    number: float | None = _to_number(value)
    if number is None or number != number:
        return FieldError(code="number")
    rules = field.validation
    if rules is not None and rules.min is not None and number < rules.min:
        return FieldError(code="min", value=rules.min)
    if rules is not None and rules.max is not None and number > rules.max:
        return FieldError(code="max", value=rules.max)
    return None


def _check_text(field: FormField, value: Any) -> FieldError | None:
    text: str = str(value)
    rules = field.validation
    if rules is None:
        return None
    if rules.max_length is not None and len(text) > rules.max_length:
        return FieldError(code="maxLength", value=rules.max_length)
    if rules.regex:
        try:
            if re.search(rules.regex, text) is None:
                return FieldError(code="regex")
        except re.error:
            # 잘못된 패턴은 검사하지 않음 — a broken pattern never rejects data
            logger.warning("Ignoring invalid regex on field %s: %r", field.field_id, rules.regex)
    return None


def _check_choice(field: FormField, value: Any) -> FieldError | None:
    if field.options and value not in field.options:
        return FieldError(code="option")
    return None


def _check_checkbox(value: Any) -> FieldError | None:
    if isinstance(value, bool) or (isinstance(value, str) and value in _CHECKBOX_STRINGS):
        return None
    return FieldError(code="boolean")


def _check_temporal(field: FormField, value: Any) -> FieldError | None:
    parser = date.fromisoformat if field.type == FieldType.DATE else time.fromisoformat
    try:
        parser(str(value))
    except ValueError:
        return FieldError(code=field.type.value)
    return None


def _check_value(field: FormField, value: Any) -> FieldError | None:
    if field.type in _NUMERIC_TYPES:
        return _check_number(field, value)
    if field.type in _TEXT_TYPES:
        return _check_text(field, value)
    if field.type in CHOICE_TYPES:
        return _check_choice(field, value)
    if field.type == FieldType.CHECKBOX:
        return _check_checkbox(value)
    if field.type in (FieldType.DATE, FieldType.TIME):
        return _check_temporal(field, value)
    return None


def validate_episode_data(
    fields: list[FormField], data: dict[str, Any]
) -> dict[str, FieldError]:
    """에피소드 데이터를 폼 필드 규칙으로 검증합니다.

    Validate submitted episode data against a form's fields.

    Args:
        fields: 폼 필드 목록 (The form's fields, in order)
        data: 필드 ID → 제출 값 (Field id to submitted value)

    Returns:
        dict[str, FieldError]: 필드 ID → 오류, 비어 있으면 통과
                               (Field id to error; empty when the data is valid)
    """
    errors: dict[str, FieldError] = {}
    known: set[str] = set()
    for field in fields:
        known.add(field.field_id)
        value: Any = data.get(field.field_id)
        if _is_empty(value):
            if field.required:
                errors[field.field_id] = FieldError(code="required")
            continue
        error: FieldError | None = _check_value(field, value)
        if error is not None:
            errors[field.field_id] = error

    for field_id in data:
        if field_id not in known:
            errors[field_id] = FieldError(code="unknown_field")
    return errors
