"""요청 로깅 미들웨어 — 표준 로거 + 선택적 Axiom 전송.

Request logging middleware.
Every API request is logged through the ``tracker.request`` logger
(method, path, status, duration). When ``AXIOM_API_TOKEN`` and
``AXIOM_DATASET`` are set, the same event, enriched with query params,
the masked request body, and the error detail, is shipped to Axiom.
"""

import json
import logging
import re
import time
from typing import Any

from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from tracker.config import settings

logger = logging.getLogger("tracker.request")

# 마스킹 대상 키 패턴 — Keys masked in shipped request data
_SENSITIVE_KEYS = re.compile(
    r"(password|secret|token|authorization|api_key|apikey|credential)",
    re.IGNORECASE,
)

# 로깅 제외 경로 — Paths excluded from logging
_SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}


def mask_sensitive(data: Any, depth: int = 0) -> Any:
    """민감 키 재귀 마스킹 (Recursively mask sensitive keys in dicts and lists)."""
    if depth > 5:
        return "..."
    if isinstance(data, dict):
        return {
            k: "***" if _SENSITIVE_KEYS.search(str(k)) else mask_sensitive(v, depth + 1)
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [mask_sensitive(item, depth + 1) for item in data[:20]]
    return data


def _error_detail(body: bytes) -> str:
    try:
        parsed: Any = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return body.decode("utf-8", errors="replace")[:500]
    detail: Any = parsed.get("detail", parsed) if isinstance(parsed, dict) else parsed
    text: str = detail if isinstance(detail, str) else json.dumps(detail, default=str)
    return text[:500]


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """모든 API 요청을 로깅하는 미들웨어.

    Middleware logging every API request, optionally shipping it to Axiom.
    """

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._client: AxiomClient | None = None
        self._dataset: str = settings.AXIOM_DATASET
        if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in _SKIP_PATHS:
            return await call_next(request)

        start: float = time.perf_counter()
        method: str = request.method
        path: str = request.url.path

        request_body: Any = None
        if self._client is not None and method in ("POST", "PUT", "PATCH"):
            body_bytes: bytes = await request.body()
            if body_bytes:
                try:
                    request_body = mask_sensitive(json.loads(body_bytes))
                except (json.JSONDecodeError, UnicodeDecodeError):
                    request_body = "(non-json body)"

        status_code: int = 500
        error: str | None = None
        try:
            response: Response = await call_next(request)
            status_code = response.status_code
            if status_code >= 400 and self._client is not None:
                # 오류 응답 본문을 읽은 뒤 다시 감싸서 반환 — re-wrap the consumed body
                body: bytes = b""
                async for chunk in response.body_iterator:
                    body += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")
                error = _error_detail(body)
                response = Response(
                    content=body,
                    status_code=status_code,
                    headers=dict(response.headers),
                    media_type=response.media_type,
                )
        except Exception as exc:
            error = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            duration_ms: float = round((time.perf_counter() - start) * 1000, 2)
            level: int = logging.WARNING if status_code >= 500 else logging.INFO
            logger.log(level, "%s %s -> %d (%.2f ms)", method, path, status_code, duration_ms)
            if self._client is not None:
                self._ship(
                    {
                        "method": method,
                        "path": path,
                        "status_code": status_code,
                        "duration_ms": duration_ms,
                        "query_params": mask_sensitive(dict(request.query_params)) or None,
                        "request_body": request_body,
                        "error": error,
                    }
                )
        return response

    def _ship(self, event: dict[str, Any]) -> None:
        payload: dict[str, Any] = {k: v for k, v in event.items() if v is not None}
        try:
            self._client.ingest_events(self._dataset, [payload])
        except Exception:
            # 로그 전송 실패는 요청 처리에 영향 없음 — shipping failures never fail a request
            logger.exception("Failed to ship request log to Axiom")
