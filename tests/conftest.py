"""테스트 인프라 — 백엔드별 레포지토리, moto DynamoDB, httpx 클라이언트 픽스처.

Test infrastructure.
The ``repos`` fixture is parametrised over both backends so every test that
uses it (directly or through ``client``) runs once against the in-memory
backend and once against DynamoDB mocked by moto. Both start from the same
seed dataset.
"""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from moto import mock_aws

from tracker.config import Settings
from tracker.db.dynamo import DynamoTable
from tracker.db.memory import reset_db
from tracker.main import app
from tracker.repositories import Repos, get_repos, reset_repos
from tracker.repositories.selector import build_dynamo_repos, build_memory_repos
from tracker.seed import seed
from tracker.utils.jwt import create_access_token

# 시드 사용자 — Seed users (see tracker.db.memory.SEED_USERS)
SYS_USER = {"id": "u-sys", "email": "sys@example.com", "role": "sysadmin"}
CLIN_USER = {"id": "u-clin", "email": "clin@example.com", "role": "clinician"}
TEACH_USER = {"id": "u-teach", "email": "teach@example.com", "role": "teacher"}


# ---------------------------------------------------------------------------
# 전역 상태 초기화 — Process-wide state reset
# ---------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def reset_state():
    """인메모리 저장소와 선택기 캐시를 테스트마다 초기화합니다."""
    reset_db()
    reset_repos()
    yield
    reset_repos()
    reset_db()


# ---------------------------------------------------------------------------
# DynamoDB (moto)
# ---------------------------------------------------------------------------
@pytest.fixture
def aws_credentials(monkeypatch):
    """moto용 가짜 자격 증명 — 실제 AWS 계정에 절대 접근하지 않음."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "eu-west-2")


@pytest.fixture
def ddb_settings() -> Settings:
    return Settings(
        _env_file=None,
        DATA_BACKEND="ddb",
        DDB_TABLE="test_core",
        AWS_REGION="eu-west-2",
        DDB_ENDPOINT="",
        DDB_CREATE_TABLES=True,
        DDB_WAIT_TIMEOUT_SECONDS=1.0,
        DDB_WAIT_INTERVAL_SECONDS=0.01,
        DDB_BATCH_MAX_RETRIES=1,
    )


@pytest.fixture
def mocked_aws(aws_credentials):
    with mock_aws():
        yield


@pytest_asyncio.fixture
async def ddb_table(mocked_aws, ddb_settings: Settings) -> DynamoTable:
    """생성되어 ACTIVE 상태인 빈 테이블 (An empty, active table)."""
    table = DynamoTable(ddb_settings)
    await table.connect()
    return table


# ---------------------------------------------------------------------------
# 백엔드 파라미터화 레포지토리 — Backend-parametrised repositories
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture(params=["memory", "dynamodb"])
async def repos(request, aws_credentials, ddb_settings: Settings) -> AsyncGenerator[Repos, None]:
    """두 백엔드 각각의 레포지토리 묶음 — 같은 시드 데이터로 시작."""
    if request.param == "memory":
        yield build_memory_repos()
        return
    with mock_aws():
        ddb_repos: Repos = await build_dynamo_repos(ddb_settings)
        await seed(ddb_repos)
        yield ddb_repos


@pytest_asyncio.fixture
async def client(repos: Repos) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — 레포지토리 의존성을 오버라이드합니다."""
    async def _override_get_repos() -> Repos:
        return repos

    app.dependency_overrides[get_repos] = _override_get_repos

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 토큰 헬퍼 — Token helpers
# ---------------------------------------------------------------------------
def make_token(user: dict) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return create_access_token({"sub": user["id"], "email": user["email"], "role": user["role"]})


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def sys_token() -> str:
    return make_token(SYS_USER)


@pytest.fixture
def clin_token() -> str:
    return make_token(CLIN_USER)


@pytest.fixture
def teach_token() -> str:
    return make_token(TEACH_USER)


async def make_teacher(repos: Repos, email: str) -> str:
    """교사 계정을 만들고 토큰을 반환합니다 (Create a teacher; return a token)."""
    user = await repos.users.create({"email": email, "role": "teacher"})
    return make_token({"id": user.id, "email": user.email, "role": "teacher"})
