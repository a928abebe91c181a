"""DynamoDB 백엔드 레포지토리 (Durable single-table backend repositories)."""

from tracker.repositories.ddb.audit import AuditDynamoRepository
from tracker.repositories.ddb.episodes import EpisodesDynamoRepository
from tracker.repositories.ddb.forms import FormsDynamoRepository
from tracker.repositories.ddb.users import UsersDynamoRepository

__all__ = [
    "AuditDynamoRepository",
    "EpisodesDynamoRepository",
    "FormsDynamoRepository",
    "UsersDynamoRepository",
]
