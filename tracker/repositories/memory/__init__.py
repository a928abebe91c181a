"""인메모리 백엔드 레포지토리 (In-memory backend repositories)."""

from tracker.repositories.memory.episodes import EpisodesMemoryRepository
from tracker.repositories.memory.forms import FormsMemoryRepository
from tracker.repositories.memory.users import UsersMemoryRepository

__all__ = [
    "EpisodesMemoryRepository",
    "FormsMemoryRepository",
    "UsersMemoryRepository",
]
