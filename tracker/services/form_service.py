"""폼 서비스 — 폼 및 폼 필드 비즈니스 로직.

Form Service — Business logic for forms and their fields.
Field operations require the owning form to exist. Metadata and field-set
changes bump the form version inside the repository.
"""

from typing import Any

from pydantic import ValidationError

from tracker.models import Form, FormField, User
from tracker.repositories import Repos
from tracker.schemas.forms import FieldCreate, FieldsReplace, FieldUpdate, FormCreate, FormUpdate
from tracker.services.audit_service import audit_service
from tracker.utils.exceptions import BadRequestError, NotFoundError

# null로 지울 수 있는 속성 — Attributes a patch may explicitly clear
_CLEARABLE_FORM_KEYS: frozenset[str] = frozenset({"description"})
_CLEARABLE_FIELD_KEYS: frozenset[str] = frozenset({"default", "validation"})


def _patch_from(
    data: FormUpdate | FieldUpdate, clearable: frozenset[str]
) -> dict[str, Any]:
    """요청에 명시된 키만 담은 패치 (Patch holding only the keys the client sent)."""
    sent: dict[str, Any] = data.model_dump(exclude_unset=True)
    return {k: v for k, v in sent.items() if v is not None or k in clearable}


class FormService:
    """폼 관련 비즈니스 로직을 처리하는 서비스.

    Service handling form and field business logic.
    """

    async def list_forms(self, repos: Repos) -> list[Form]:
        return await repos.forms.list()

    async def get_form(self, repos: Repos, form_id: str) -> Form:
        """폼을 조회합니다.

        Raises:
            NotFoundError: 폼을 찾을 수 없을 때 (Form not found)
        """
        form: Form | None = await repos.forms.get(form_id)
        if form is None:
            raise NotFoundError("Form not found")
        return form

    async def create_form(self, repos: Repos, data: FormCreate, actor: User) -> Form:
        """새 폼을 생성합니다 — 버전 1로 시작.

        Create a form owned by the acting user, starting at version 1.
        """
        attributes: dict[str, Any] = data.model_dump()
        attributes["created_by"] = actor.email
        form: Form = await repos.forms.create(attributes)
        await audit_service.record(repos, "form.create", actor, {"formId": form.id})
        return form

    async def update_form(
        self, repos: Repos, form_id: str, data: FormUpdate, actor: User
    ) -> Form:
        """폼 메타데이터를 수정합니다.

        Merge the sent attributes and bump the version. When the request
        carries ``version`` the update only applies to that version.

        Raises:
            NotFoundError: 폼을 찾을 수 없을 때 (Form not found)
            VersionConflict: 버전 불일치 (Stale version)
        """
        patch: dict[str, Any] = _patch_from(data, _CLEARABLE_FORM_KEYS)
        expected_version: int | None = patch.pop("version", None)
        form: Form | None = await repos.forms.update(form_id, patch, expected_version)
        if form is None:
            raise NotFoundError("Form not found")
        await audit_service.record(
            repos, "form.update", actor, {"formId": form_id, "version": form.version}
        )
        return form

    async def remove_form(self, repos: Repos, form_id: str, actor: User) -> Form:
        """폼과 모든 필드를 삭제합니다 (Hard-delete a form with its fields).

        Raises:
            NotFoundError: 폼을 찾을 수 없을 때 (Form not found)
        """
        form: Form | None = await repos.forms.remove(form_id)
        if form is None:
            raise NotFoundError("Form not found")
        await audit_service.record(repos, "form.delete", actor, {"formId": form_id})
        return form

    # ------------------------------------------------------------------
    # 폼 필드 — Form fields
    # ------------------------------------------------------------------

    async def list_fields(self, repos: Repos, form_id: str) -> list[FormField]:
        await self.get_form(repos, form_id)
        return await repos.forms.list_fields(form_id)

    async def get_field(self, repos: Repos, form_id: str, field_id: str) -> FormField:
        await self.get_form(repos, form_id)
        field: FormField | None = await repos.forms.get_field(form_id, field_id)
        if field is None:
            raise NotFoundError("Field not found")
        return field

    async def create_field(
        self, repos: Repos, form_id: str, data: FieldCreate, actor: User
    ) -> FormField:
        """폼에 필드를 추가합니다. order가 없으면 마지막에 추가.

        Raises:
            NotFoundError: 폼을 찾을 수 없을 때 (Form not found)
        """
        await self.get_form(repos, form_id)
        field: FormField = await repos.forms.create_field(
            form_id, data.model_dump(exclude_none=True)
        )
        await audit_service.record(
            repos, "field.create", actor, {"formId": form_id, "fieldId": field.field_id}
        )
        return field

    async def update_field(
        self,
        repos: Repos,
        form_id: str,
        field_id: str,
        data: FieldUpdate,
        actor: User,
    ) -> FormField:
        """필드를 병합 수정합니다.

        Raises:
            NotFoundError: 폼 또는 필드를 찾을 수 없을 때 (Form or field not found)
            BadRequestError: 병합 결과가 유효하지 않음 (e.g. select without options)
        """
        current: FormField = await self.get_field(repos, form_id, field_id)
        patch: dict[str, Any] = _patch_from(data, _CLEARABLE_FIELD_KEYS)
        try:
            FormField.model_validate({**current.model_dump(), **patch})
        except ValidationError as exc:
            raise BadRequestError(f"Invalid field: {exc.errors()[0]['msg']}")

        field: FormField | None = await repos.forms.update_field(form_id, field_id, patch)
        if field is None:
            raise NotFoundError("Field not found")
        await audit_service.record(
            repos, "field.update", actor, {"formId": form_id, "fieldId": field_id}
        )
        return field

    async def remove_field(
        self, repos: Repos, form_id: str, field_id: str, actor: User
    ) -> FormField:
        await self.get_form(repos, form_id)
        field: FormField | None = await repos.forms.remove_field(form_id, field_id)
        if field is None:
            raise NotFoundError("Field not found")
        await audit_service.record(
            repos, "field.delete", actor, {"formId": form_id, "fieldId": field_id}
        )
        return field

    async def replace_fields(
        self, repos: Repos, form_id: str, data: FieldsReplace, actor: User
    ) -> list[FormField]:
        """필드 집합 전체를 교체합니다.

        Raises:
            NotFoundError: 폼을 찾을 수 없을 때 (Form not found)
            BadRequestError: 중복된 fieldId (Duplicate field ids in the request)
            PartialBatchFailure: 일부만 기록됨 (Only part of the batch applied)
        """
        await self.get_form(repos, form_id)
        given_ids: list[str] = [f.field_id for f in data.fields if f.field_id]
        if len(given_ids) != len(set(given_ids)):
            raise BadRequestError("Duplicate fieldId in field set")

        fields: list[FormField] = await repos.forms.replace_fields(
            form_id, [f.model_dump(exclude_none=True) for f in data.fields]
        )
        await audit_service.record(
            repos, "fields.replace", actor, {"formId": form_id, "count": len(fields)}
        )
        return fields


form_service: FormService = FormService()
