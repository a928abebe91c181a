"""애플리케이션 환경 설정 모듈.

Application configuration module using pydantic-settings.
All settings can be overridden via environment variables or a .env file.
The repository selector reads the storage settings once per process.
"""

from pathlib import Path

from pydantic_settings import BaseSettings

# .env 파일 절대 경로 — CWD와 무관하게 항상 프로젝트 루트의 .env를 참조
# Absolute path to .env file — resolved relative to the project root
_ENV_FILE: Path = Path(__file__).resolve().parent.parent / ".env"

# 참으로 해석되는 문자열 값 — String values treated as true
_TRUTHY: frozenset[str] = frozenset({"1", "true", "yes", "on"})


class Settings(BaseSettings):
    """애플리케이션 전역 설정 — 환경 변수 기반 구성.

    Global application settings loaded from environment variables.

    Attributes:
        DATA_BACKEND: 저장소 백엔드 선택 (Backend selection: "memory", "ddb", "dynamodb")
        USE_DYNAMODB: 레거시 DynamoDB 스위치 (Legacy switch, same as DATA_BACKEND=ddb)
        DDB_TABLE: 단일 테이블 이름 (Single-table name)
        DDB_GSI1 / DDB_GSI2: 보조 인덱스 이름 (Global secondary index names)
        AWS_REGION: AWS 리전 (AWS region)
        DDB_ENDPOINT: 엔드포인트 재정의 (Endpoint override, e.g. DynamoDB Local)
        DDB_CREATE_TABLES: 테이블 자동 생성 여부 (Auto-create table and indexes when missing)
        DDB_WAIT_TIMEOUT_SECONDS: 테이블 활성 대기 상한 (Upper bound for wait-for-active)
        DDB_WAIT_INTERVAL_SECONDS: 활성 상태 폴링 간격 (Polling interval for wait-for-active)
        DDB_BATCH_MAX_RETRIES: 미처리 배치 항목 재시도 횟수 (Retries for unprocessed batch items)
        JWT_SECRET_KEY: JWT 서명 비밀키 (JWT signing secret key)
        JWT_ALGORITHM: JWT 서명 알고리즘 (JWT signing algorithm)
        JWT_ACCESS_TOKEN_EXPIRE_MINUTES: 액세스 토큰 만료 시간(분) (Access token TTL in minutes)
        APP_NAME: 애플리케이션 표시 이름 (Application display name)
        DEBUG: 디버그 모드 플래그 (Debug mode flag)
        LOG_LEVEL: 로그 레벨 (Root log level)
    """

    # 저장소 백엔드 — Storage backend selection
    DATA_BACKEND: str = "memory"
    USE_DYNAMODB: str = ""

    # DynamoDB 설정 — DynamoDB single-table settings
    DDB_TABLE: str = "app_core"
    DDB_GSI1: str = "GSI1"
    DDB_GSI2: str = "GSI2"
    AWS_REGION: str = "eu-west-2"
    DDB_ENDPOINT: str = ""  # 비어 있으면 기본 AWS 엔드포인트 사용 (Empty means the default AWS endpoint)
    DDB_CREATE_TABLES: bool = False  # 명시적으로 요청할 때만 생성 (Create only when explicitly requested)
    DDB_WAIT_TIMEOUT_SECONDS: float = 10.0
    DDB_WAIT_INTERVAL_SECONDS: float = 1.0
    DDB_BATCH_MAX_RETRIES: int = 3

    # JWT 인증 설정 — JSON Web Token authentication settings
    JWT_SECRET_KEY: str = "dev-insecure-secret"  # 운영 환경에서 반드시 변경 (MUST change in production)
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7일 세션 (7-day session)

    # 앱 메타데이터 — Application metadata
    APP_NAME: str = "Episode Tracker API"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Axiom 로깅 설정 — Axiom observability platform settings
    AXIOM_API_TOKEN: str = ""
    AXIOM_DATASET: str = ""

    model_config = {"env_file": _ENV_FILE, "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def use_dynamodb(self) -> bool:
        """DynamoDB 백엔드 사용 여부 (Whether the durable backend is selected)."""
        selected: str = self.DATA_BACKEND.strip().lower()
        return selected in ("ddb", "dynamodb") or self.USE_DYNAMODB.strip().lower() in _TRUTHY


# 전역 설정 싱글턴 인스턴스 — Global settings singleton instance
settings: Settings = Settings()
