"""레포지토리 패키지 — 백엔드 독립 인터페이스와 두 가지 구현.

Repository package.
Services obtain a ``Repos`` set from ``ensure_repos`` (or the ``get_repos``
request dependency) and only ever talk to the abstract interfaces; the
concrete backend is either in-memory (``memory``) or DynamoDB (``ddb``).
"""

from tracker.repositories.base import (
    AuditRepository,
    EpisodeRepository,
    FormRepository,
    UserRepository,
)
from tracker.repositories.selector import Repos, ensure_repos, get_repos, reset_repos

__all__ = [
    "AuditRepository",
    "EpisodeRepository",
    "FormRepository",
    "Repos",
    "UserRepository",
    "ensure_repos",
    "get_repos",
    "reset_repos",
]
