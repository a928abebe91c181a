"""프로세스 내 임시 저장소 — 개발/테스트용 인메모리 데이터.

Ephemeral process-wide storage for the in-memory backend.
The collections below *are* the data: nothing is persisted and state is
lost on restart. ``reset_db`` restores the seed dataset and is used by test
setup. Only the in-memory repositories mutate these collections.
"""

from dataclasses import dataclass, field

from tracker.models import Episode, FieldType, Form, FormField, FormStatus, Role, User

# 기본 시드 데이터 — Default seed dataset (shared with tracker.seed)
SEED_USERS: list[dict] = [
    {"id": "u-sys", "role": Role.SYSADMIN, "email": "sys@example.com", "active": True},
    {"id": "u-clin", "role": Role.CLINICIAN, "email": "clin@example.com", "active": True},
    {"id": "u-teach", "role": Role.TEACHER, "email": "teach@example.com", "active": True},
]
SEED_FORMS: list[dict] = [
    {"id": "f-1", "title": "Baseline Episode", "status": FormStatus.ACTIVE, "version": 1},
]
SEED_FIELDS: dict[str, list[dict]] = {
    "f-1": [
        {
            "field_id": "fld-ctx",
            "label": "Context",
            "type": FieldType.SELECT,
            "required": True,
            "options": ["class", "recess", "lunch", "hall", "other"],
            "order": 1,
        },
        {
            "field_id": "fld-notes",
            "label": "Notes",
            "type": FieldType.TEXTAREA,
            "required": False,
            "order": 2,
        },
    ],
}


@dataclass
class MemoryDB:
    """인메모리 컬렉션 — 엔티티 유형별 리스트와 폼별 필드 매핑.

    Lists keyed by entity type plus a mapping from form id to its field list.
    Lists keep insertion order.
    """

    users: list[User] = field(default_factory=list)
    forms: list[Form] = field(default_factory=list)
    episodes: list[Episode] = field(default_factory=list)
    form_fields: dict[str, list[FormField]] = field(default_factory=dict)

    def load_seed(self) -> None:
        """시드 데이터로 모든 컬렉션을 교체합니다 (Replace every collection with the seed)."""
        self.users = [User(**data) for data in SEED_USERS]
        self.forms = [Form(**data) for data in SEED_FORMS]
        self.episodes = []
        self.form_fields = {
            form_id: [FormField(form_id=form_id, **data) for data in fields]
            for form_id, fields in SEED_FIELDS.items()
        }


def _seeded() -> MemoryDB:
    store = MemoryDB()
    store.load_seed()
    return store


# 프로세스 전역 저장소 — Process-wide store instance
db: MemoryDB = _seeded()


def reset_db() -> None:
    """저장소를 시드 상태로 되돌립니다 (Restore the process-wide store to the seed state)."""
    db.load_seed()
