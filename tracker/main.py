"""FastAPI 애플리케이션 엔트리포인트 — 로깅, 미들웨어, 예외 처리, 라우터 등록.

FastAPI application entry point.
Configures logging, middleware, storage error handlers, the health check,
and the API routers. The repository backend is selected at startup.
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated, AsyncIterator

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tracker.api import api_router
from tracker.config import settings
from tracker.db.errors import BackendUnavailable, PartialBatchFailure, VersionConflict
from tracker.middleware.request_logging import RequestLoggingMiddleware
from tracker.repositories import Repos, ensure_repos, get_repos
from tracker.schemas.common import HealthResponse

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # 시작 시 백엔드 선택 — Pick the storage backend before serving requests
    repos: Repos = await ensure_repos()
    logger.info("%s started with %s backend", settings.APP_NAME, repos.backend)
    yield


app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    debug=settings.DEBUG,
    lifespan=lifespan,
)

# 요청 로깅 미들웨어 — CORS보다 먼저 등록하여 모든 요청을 캡처
# (Registered before CORS to capture all requests)
app.add_middleware(RequestLoggingMiddleware)

# CORS 미들웨어 — Cross-Origin Resource Sharing middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# 스토리지 예외 처리 — Storage error handlers
# ---------------------------------------------------------------------------


@app.exception_handler(BackendUnavailable)
async def backend_unavailable_handler(request: Request, exc: BackendUnavailable) -> JSONResponse:
    logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Storage backend unavailable", "code": exc.code},
    )


@app.exception_handler(PartialBatchFailure)
async def partial_batch_failure_handler(
    request: Request, exc: PartialBatchFailure
) -> JSONResponse:
    logger.error("%s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "partial_batch_failure",
            "detail": exc.message,
            "formId": exc.form_id,
            "written": exc.written,
            "failed": exc.failed,
        },
    )


@app.exception_handler(VersionConflict)
async def version_conflict_handler(request: Request, exc: VersionConflict) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            "detail": exc.message,
            "formId": exc.form_id,
            "expected": exc.expected,
            "actual": exc.actual,
        },
    )


@app.get("/health", response_model=HealthResponse)
async def health_check(repos: Annotated[Repos, Depends(get_repos)]) -> HealthResponse:
    """서버 상태 확인 — 선택된 저장소 백엔드 포함.

    Health check reporting the active storage backend.
    """
    return HealthResponse(backend=repos.backend)


app.include_router(api_router, prefix="/api")
