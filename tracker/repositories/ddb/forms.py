"""DynamoDB 폼 레포지토리.

DynamoDB forms repository.
Form metadata and its fields share the ``FORM#{formId}`` partition.
Metadata updates are conditional on the version that was read; field
mutations bump the form version with an atomic counter.
"""

from __future__ import annotations

import logging
from typing import Any

from boto3.dynamodb.conditions import Attr

from tracker.db.dynamo import ConditionFailed, DynamoTable
from tracker.db.errors import VersionConflict
from tracker.db.keys import FIELD_PREFIX, FORM_PREFIX, METADATA_SK, form_field_key, form_key
from tracker.models import Form, FormField
from tracker.repositories.base import (
    IMMUTABLE_FIELD_KEYS,
    IMMUTABLE_FORM_KEYS,
    FormRepository,
    clean_patch,
    new_id,
)
from tracker.repositories.ddb.items import creation_order, to_item
from tracker.utils.clock import utc_now_iso

logger = logging.getLogger(__name__)


def _field_order(field: FormField) -> tuple[int, str, str]:
    # 동률은 생성 시각(삽입 순서), 그다음 fieldId
    return (field.order, field.created_at or "", field.field_id)


class FormsDynamoRepository(FormRepository):
    """폼/필드 DynamoDB 구현 (Durable forms and fields)."""

    def __init__(self, table: DynamoTable) -> None:
        self._table: DynamoTable = table

    @staticmethod
    def _form_item(form: Form) -> dict[str, Any]:
        return to_item(form, form_key(form.id), formId=form.id)

    @staticmethod
    def _field_item(field: FormField) -> dict[str, Any]:
        return to_item(
            field,
            form_field_key(field.form_id, field.field_id),
            fieldId=field.field_id,
            formId=field.form_id,
        )

    async def _bump_version(self, form_id: str) -> None:
        updated: dict | None = await self._table.increment(
            form_key(form_id), "version", touched={"updatedAt": utc_now_iso()}
        )
        if updated is None:
            logger.debug("Field change on missing form %s; no version bump", form_id)

    async def list(self) -> list[Form]:
        items: list[dict] = await self._table.scan(
            Attr("SK").eq(METADATA_SK) & Attr("PK").begins_with(FORM_PREFIX)
        )
        return sorted((Form.model_validate(item) for item in items), key=creation_order)

    async def get(self, form_id: str) -> Form | None:
        item: dict | None = await self._table.get(form_key(form_id))
        return Form.model_validate(item) if item is not None else None

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
        await self._table.put(self._form_item(form))
        return form

    async def update(
        self,
        form_id: str,
        patch: dict[str, Any],
        expected_version: int | None = None,
    ) -> Form | None:
        current: Form | None = await self.get(form_id)
        if current is None:
            return None
        if expected_version is not None and current.version != expected_version:
            raise VersionConflict(form_id, expected_version, current.version)

        merged: dict[str, Any] = current.model_dump()
        merged.update(clean_patch(patch, IMMUTABLE_FORM_KEYS))
        merged.update(version=current.version + 1, updated_at=utc_now_iso())
        updated: Form = Form.model_validate(merged)
        try:
            await self._table.put(
                self._form_item(updated),
                condition=Attr("version").eq(current.version),
            )
        except ConditionFailed:
            latest: Form | None = await self.get(form_id)
            if latest is None:
                return None
            logger.info("Version conflict on form %s (read %d)", form_id, current.version)
            raise VersionConflict(form_id, current.version, latest.version)
        return updated

    async def remove(self, form_id: str) -> Form | None:
        old: dict | None = await self._table.delete(form_key(form_id))
        if old is None:
            return None
        fields: list[dict] = await self._table.query_partition(
            f"{FORM_PREFIX}{form_id}", FIELD_PREFIX
        )
        if fields:
            await self._table.batch_write(
                deletes=[{"PK": item["PK"], "SK": item["SK"]} for item in fields],
                form_id=form_id,
            )
        return Form.model_validate(old)

    # ------------------------------------------------------------------
    # 폼 필드 — Form fields
    # ------------------------------------------------------------------

    async def list_fields(self, form_id: str) -> list[FormField]:
        items: list[dict] = await self._table.query_partition(
            f"{FORM_PREFIX}{form_id}", FIELD_PREFIX
        )
        return sorted((FormField.model_validate(item) for item in items), key=_field_order)

    async def get_field(self, form_id: str, field_id: str) -> FormField | None:
        item: dict | None = await self._table.get(form_field_key(form_id, field_id))
        return FormField.model_validate(item) if item is not None else None

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
        default_order: int = 0
        if attributes.get("order") is None:
            existing: list[dict] = await self._table.query_partition(
                f"{FORM_PREFIX}{form_id}", FIELD_PREFIX
            )
            default_order = len(existing) + 1
        field: FormField = self._build_field(form_id, attributes, default_order)
        await self._table.put(self._field_item(field))
        await self._bump_version(form_id)
        return field

    async def update_field(
        self, form_id: str, field_id: str, patch: dict[str, Any]
    ) -> FormField | None:
        current: FormField | None = await self.get_field(form_id, field_id)
        if current is None:
            return None
        merged: dict[str, Any] = current.model_dump()
        merged.update(clean_patch(patch, IMMUTABLE_FIELD_KEYS))
        merged["updated_at"] = utc_now_iso()
        updated: FormField = FormField.model_validate(merged)
        try:
            await self._table.put(self._field_item(updated), condition=Attr("PK").exists())
        except ConditionFailed:
            return None
        await self._bump_version(form_id)
        return updated

    async def remove_field(self, form_id: str, field_id: str) -> FormField | None:
        old: dict | None = await self._table.delete(form_field_key(form_id, field_id))
        if old is None:
            return None
        await self._bump_version(form_id)
        return FormField.model_validate(old)

    async def replace_fields(
        self, form_id: str, fields: list[dict[str, Any]]
    ) -> list[FormField]:
        existing: list[dict] = await self._table.query_partition(
            f"{FORM_PREFIX}{form_id}", FIELD_PREFIX
        )
        built: list[FormField] = [
            self._build_field(form_id, attributes, position)
            for position, attributes in enumerate(fields, start=1)
        ]
        await self._table.batch_write(
            puts=[self._field_item(field) for field in built],
            deletes=[{"PK": item["PK"], "SK": item["SK"]} for item in existing],
            form_id=form_id,
        )
        await self._bump_version(form_id)
        logger.info(
            "Replaced fields of form %s: %d removed, %d written",
            form_id, len(existing), len(built),
        )
        return sorted(built, key=_field_order)
