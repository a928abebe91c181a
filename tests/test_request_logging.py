"""요청 로깅 미들웨어 테스트 — 마스킹, 오류 상세, 로거 출력.

Request logging middleware tests.
"""

import logging

from httpx import AsyncClient

from tracker.middleware.request_logging import _error_detail, mask_sensitive


class TestMasking:
    """민감 정보 마스킹."""

    def test_nested_keys_masked(self):
        """중첩 딕셔너리/리스트의 민감 키."""
        masked = mask_sensitive({
            "email": "a@x.com",
            "accessToken": "abc",
            "items": [{"api_key": "k", "label": "ok"}],
        })
        assert masked == {
            "email": "a@x.com",
            "accessToken": "***",
            "items": [{"api_key": "***", "label": "ok"}],
        }

    def test_error_detail(self):
        """오류 응답 본문에서 detail 추출."""
        assert _error_detail(b'{"detail": "Form not found"}') == "Form not found"
        assert _error_detail(b"plain") == "plain"
        assert '"errors"' in _error_detail(b'{"detail": {"errors": {"a": 1}}}')


class TestRequestLog:
    """요청 로그 출력."""

    async def test_request_is_logged(self, client: AsyncClient, caplog):
        """API 요청은 메서드/경로/상태로 기록."""
        with caplog.at_level(logging.INFO, logger="tracker.request"):
            await client.get("/api/forms")
        messages = [r.getMessage() for r in caplog.records if r.name == "tracker.request"]
        assert any(m.startswith("GET /api/forms -> 401") for m in messages)

    async def test_health_is_not_logged(self, client: AsyncClient, caplog):
        """헬스 체크는 기록하지 않음."""
        with caplog.at_level(logging.INFO, logger="tracker.request"):
            await client.get("/health")
        assert [r for r in caplog.records if r.name == "tracker.request"] == []
