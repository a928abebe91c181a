"""폼 라우터 — 폼 및 폼 필드 CRUD 엔드포인트.

Forms Router — CRUD endpoints for forms and their fields.
Reads are open to every authenticated role; writes require a clinician or
a sysadmin.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from tracker.api.deps import get_current_user, require_form_editor
from tracker.models import Form, FormField, User
from tracker.repositories import Repos, get_repos
from tracker.schemas.forms import FieldCreate, FieldsReplace, FieldUpdate, FormCreate, FormUpdate
from tracker.services.form_service import form_service

router: APIRouter = APIRouter()


@router.get("", response_model=list[Form])
async def list_forms(
    repos: Annotated[Repos, Depends(get_repos)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[Form]:
    """폼 목록을 조회합니다 (List all forms)."""
    return await form_service.list_forms(repos)


@router.post("", response_model=Form, status_code=201)
async def create_form(
    data: FormCreate,
    repos: Annotated[Repos, Depends(get_repos)],
    current_user: Annotated[User, Depends(require_form_editor)],
) -> Form:
    """새 폼을 생성합니다 (Create a form)."""
    return await form_service.create_form(repos, data, current_user)


@router.get("/{form_id}", response_model=Form)
async def get_form(
    form_id: str,
    repos: Annotated[Repos, Depends(get_repos)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> Form:
    return await form_service.get_form(repos, form_id)


@router.put("/{form_id}", response_model=Form)
async def update_form(
    form_id: str,
    data: FormUpdate,
    repos: Annotated[Repos, Depends(get_repos)],
    current_user: Annotated[User, Depends(require_form_editor)],
) -> Form:
    """폼 메타데이터를 수정합니다 — 버전 1 증가.

    Update form metadata; the version increases by one. Send ``version``
    to apply the change only to that version (409 otherwise).
    """
    return await form_service.update_form(repos, form_id, data, current_user)


@router.delete("/{form_id}", response_model=Form)
async def delete_form(
    form_id: str,
    repos: Annotated[Repos, Depends(get_repos)],
    current_user: Annotated[User, Depends(require_form_editor)],
) -> Form:
    """폼과 그 필드를 삭제합니다 (Delete a form and its fields)."""
    return await form_service.remove_form(repos, form_id, current_user)


# ---------------------------------------------------------------------------
# 폼 필드 — Form fields
# ---------------------------------------------------------------------------


@router.get("/{form_id}/fields", response_model=list[FormField])
async def list_fields(
    form_id: str,
    repos: Annotated[Repos, Depends(get_repos)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[FormField]:
    """폼 필드 목록 — order 오름차순 (Fields by ascending order)."""
    return await form_service.list_fields(repos, form_id)


@router.post("/{form_id}/fields", response_model=FormField, status_code=201)
async def create_field(
    form_id: str,
    data: FieldCreate,
    repos: Annotated[Repos, Depends(get_repos)],
    current_user: Annotated[User, Depends(require_form_editor)],
) -> FormField:
    return await form_service.create_field(repos, form_id, data, current_user)


@router.put("/{form_id}/fields", response_model=list[FormField])
async def replace_fields(
    form_id: str,
    data: FieldsReplace,
    repos: Annotated[Repos, Depends(get_repos)],
    current_user: Annotated[User, Depends(require_form_editor)],
) -> list[FormField]:
    """필드 집합 전체를 교체합니다 (Replace the whole field set)."""
    return await form_service.replace_fields(repos, form_id, data, current_user)


@router.get("/{form_id}/fields/{field_id}", response_model=FormField)
async def get_field(
    form_id: str,
    field_id: str,
    repos: Annotated[Repos, Depends(get_repos)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> FormField:
    return await form_service.get_field(repos, form_id, field_id)


@router.put("/{form_id}/fields/{field_id}", response_model=FormField)
async def update_field(
    form_id: str,
    field_id: str,
    data: FieldUpdate,
    repos: Annotated[Repos, Depends(get_repos)],
    current_user: Annotated[User, Depends(require_form_editor)],
) -> FormField:
    return await form_service.update_field(repos, form_id, field_id, data, current_user)


@router.delete("/{form_id}/fields/{field_id}", response_model=FormField)
async def delete_field(
    form_id: str,
    field_id: str,
    repos: Annotated[Repos, Depends(get_repos)],
    current_user: Annotated[User, Depends(require_form_editor)],
) -> FormField:
    return await form_service.remove_field(repos, form_id, field_id, current_user)
