"""인메모리 폼 레포지토리.

In-memory forms repository backed by ``tracker.db.memory``.
Returned models are deep copies; callers never hold references into the
store.
"""

from __future__ import annotations

from typing import Any

from tracker.db.errors import VersionConflict
from tracker.db.memory import MemoryDB
from tracker.db.memory import db as memory_db
from tracker.models import Form, FormField
from tracker.repositories.base import (
    IMMUTABLE_FIELD_KEYS,
    IMMUTABLE_FORM_KEYS,
    FormRepository,
    clean_patch,
    new_id,
)
from tracker.utils.clock import utc_now_iso


class FormsMemoryRepository(FormRepository):
    """폼/필드 인메모리 구현 (In-memory forms and fields)."""

    def __init__(self, store: MemoryDB | None = None) -> None:
        self._store: MemoryDB = store or memory_db

    def _index_of(self, form_id: str) -> int | None:
        for index, form in enumerate(self._store.forms):
            if form.id == form_id:
                return index
        return None

    def _bump_version(self, form_id: str) -> None:
        index: int | None = self._index_of(form_id)
        if index is None:
            return
        form: Form = self._store.forms[index]
        self._store.forms[index] = form.model_copy(
            update={"version": form.version + 1, "updated_at": utc_now_iso()}
        )

    async def list(self) -> list[Form]:
        return [form.model_copy(deep=True) for form in self._store.forms]

    async def get(self, form_id: str) -> Form | None:
        index: int | None = self._index_of(form_id)
        if index is None:
            return None
        return self._store.forms[index].model_copy(deep=True)

    async def create(self, attributes: dict[str, Any]) -> Form:
        now: str = utc_now_iso()
        values: dict[str, Any] = {k: v for k, v in attributes.items() if v is not None}
        values.update(
            id=values.get("id") or new_id(),
            version=1,
            created_at=now,
            updated_at=now,
        )
        form: Form = Form.model_validate(values)
        self._store.forms.append(form)
        return form.model_copy(deep=True)

    async def update(
        self,
        form_id: str,
        patch: dict[str, Any],
        expected_version: int | None = None,
    ) -> Form | None:
        index: int | None = self._index_of(form_id)
        if index is None:
            return None
        current: Form = self._store.forms[index]
        if expected_version is not None and current.version != expected_version:
            raise VersionConflict(form_id, expected_version, current.version)

        merged: dict[str, Any] = current.model_dump()
        merged.update(clean_patch(patch, IMMUTABLE_FORM_KEYS))
        merged.update(version=current.version + 1, updated_at=utc_now_iso())
        updated: Form = Form.model_validate(merged)
        self._store.forms[index] = updated
        return updated.model_copy(deep=True)

    async def remove(self, form_id: str) -> Form | None:
        index: int | None = self._index_of(form_id)
        if index is None:
            return None
        removed: Form = self._store.forms.pop(index)
        self._store.form_fields.pop(form_id, None)
        return removed

    # ------------------------------------------------------------------
    # 폼 필드 — Form fields
    # ------------------------------------------------------------------

    def _fields(self, form_id: str) -> list[FormField]:
        return self._store.form_fields.setdefault(form_id, [])

    async def list_fields(self, form_id: str) -> list[FormField]:
        # sorted()는 안정 정렬 — stable sort keeps insertion order on ties
        ordered: list[FormField] = sorted(
            self._store.form_fields.get(form_id, []), key=lambda f: f.order
        )
        return [field.model_copy(deep=True) for field in ordered]

    async def get_field(self, form_id: str, field_id: str) -> FormField | None:
        for field in self._store.form_fields.get(form_id, []):
            if field.field_id == field_id:
                return field.model_copy(deep=True)
        return None

    def _build_field(
        self, form_id: str, attributes: dict[str, Any], default_order: int
    ) -> FormField:
        now: str = utc_now_iso()
        values: dict[str, Any] = {k: v for k, v in attributes.items() if v is not None}
        values.update(
            field_id=values.get("field_id") or new_id(),
            form_id=form_id,
            created_at=now,
            updated_at=now,
        )
        values.setdefault("order", default_order)
        return FormField.model_validate(values)

    async def create_field(self, form_id: str, attributes: dict[str, Any]) -> FormField:
        fields: list[FormField] = self._fields(form_id)
        field: FormField = self._build_field(form_id, attributes, len(fields) + 1)
        # 같은 fieldId는 덮어쓰기 — an existing fieldId is overwritten
        fields[:] = [f for f in fields if f.field_id != field.field_id]
        fields.append(field)
        self._bump_version(form_id)
        return field.model_copy(deep=True)

    async def update_field(
        self, form_id: str, field_id: str, patch: dict[str, Any]
    ) -> FormField | None:
        fields: list[FormField] = self._store.form_fields.get(form_id, [])
        for index, field in enumerate(fields):
            if field.field_id != field_id:
                continue
            merged: dict[str, Any] = field.model_dump()
            merged.update(clean_patch(patch, IMMUTABLE_FIELD_KEYS))
            merged["updated_at"] = utc_now_iso()
            updated: FormField = FormField.model_validate(merged)
            fields[index] = updated
            self._bump_version(form_id)
            return updated.model_copy(deep=True)
        return None

    async def remove_field(self, form_id: str, field_id: str) -> FormField | None:
        fields: list[FormField] = self._store.form_fields.get(form_id, [])
        for index, field in enumerate(fields):
            if field.field_id == field_id:
                removed: FormField = fields.pop(index)
                self._bump_version(form_id)
                return removed
        return None

    async def replace_fields(
        self, form_id: str, fields: list[dict[str, Any]]
    ) -> list[FormField]:
        built: list[FormField] = [
            self._build_field(form_id, attributes, position)
            for position, attributes in enumerate(fields, start=1)
        ]
        self._store.form_fields[form_id] = built
        self._bump_version(form_id)
        return await self.list_fields(form_id)
