"""에피소드 데이터 검증 테스트.

Episode data validation against form field rules.
"""

from tracker.models import FormField
from tracker.services.validation_service import validate_episode_data


def _field(field_id: str, type_: str, **extra) -> FormField:
    return FormField(field_id=field_id, form_id="f", label=field_id, type=type_, **extra)


class TestRequired:
    """필수 값 검사."""

    def test_missing_required(self):
        """필수 필드 누락."""
        errors = validate_episode_data([_field("a", "text", required=True)], {})
        assert errors["a"].code == "required"

    def test_blank_string_counts_as_missing(self):
        """공백 문자열도 누락으로 처리."""
        errors = validate_episode_data([_field("a", "text", required=True)], {"a": "  "})
        assert errors["a"].code == "required"

    def test_optional_may_be_absent(self):
        """선택 필드는 생략 가능."""
        assert validate_episode_data([_field("a", "number")], {}) == {}


class TestTypes:
    """유형별 검사."""

    def test_number_bounds(self):
        """숫자 최소/최대."""
        fields = [_field("n", "number", validation={"min": 1, "max": 5})]
        assert validate_episode_data(fields, {"n": 3}) == {}
        assert validate_episode_data(fields, {"n": "4"}) == {}
        assert validate_episode_data(fields, {"n": 0})["n"].code == "min"
        assert validate_episode_data(fields, {"n": 6})["n"].code == "max"
        assert validate_episode_data(fields, {"n": "abc"})["n"].code == "number"
        assert validate_episode_data(fields, {"n": True})["n"].code == "number"

    def test_scale_is_numeric(self):
        """scale은 숫자로 검사."""
        fields = [_field("s", "scale", validation={"min": 0, "max": 10})]
        assert validate_episode_data(fields, {"s": 11})["s"].code == "max"

    def test_text_length_and_pattern(self):
        """텍스트 길이/정규식."""
        fields = [_field("t", "text", validation={"maxLength": 3, "regex": "^[a-z]+$"})]
        assert validate_episode_data(fields, {"t": "abc"}) == {}
        assert validate_episode_data(fields, {"t": "abcd"})["t"].code == "maxLength"
        assert validate_episode_data(fields, {"t": "AB"})["t"].code == "regex"

    def test_invalid_pattern_never_rejects(self):
        """잘못된 정규식은 무시."""
        fields = [_field("t", "text", validation={"regex": "("})]
        assert validate_episode_data(fields, {"t": "anything"}) == {}

    def test_choice_options(self):
        """선택지 외 값 거부."""
        fields = [_field("c", "select", options=["class", "recess"])]
        assert validate_episode_data(fields, {"c": "class"}) == {}
        assert validate_episode_data(fields, {"c": "gym"})["c"].code == "option"

    def test_checkbox(self):
        """체크박스 — bool 또는 허용 문자열."""
        fields = [_field("b", "checkbox")]
        assert validate_episode_data(fields, {"b": True}) == {}
        assert validate_episode_data(fields, {"b": "on"}) == {}
        assert validate_episode_data(fields, {"b": "maybe"})["b"].code == "boolean"
        assert validate_episode_data(fields, {"b": ["on"]})["b"].code == "boolean"

    def test_date_and_time(self):
        """날짜/시각 형식."""
        fields = [_field("d", "date"), _field("h", "time")]
        assert validate_episode_data(fields, {"d": "2024-01-31", "h": "10:30"}) == {}
        errors = validate_episode_data(fields, {"d": "31/01/2024", "h": "late"})
        assert errors["d"].code == "date"
        assert errors["h"].code == "time"


class TestUnknownFields:
    """폼에 없는 필드."""

    def test_unknown_field_rejected(self):
        """정의되지 않은 필드 ID."""
        errors = validate_episode_data([_field("a", "text")], {"a": "x", "zzz": 1})
        assert list(errors) == ["zzz"]
        assert errors["zzz"].code == "unknown_field"
