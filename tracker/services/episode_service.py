"""에피소드 서비스 — 제출, 조회, 소유권 규칙.

Episode Service — submission, listing, and ownership rules.

Rules:
    - 교사는 자신이 제출한 에피소드만 목록에서 봄
      (Teachers only list their own episodes; clinicians and sysadmins see all)
    - 수정/삭제는 제출자 본인 또는 시스템 관리자만
      (Only the submitter or a sysadmin may update or delete)
    - data는 제출 시점의 폼 필드로 검증 (data is validated against the form's fields)
"""

import logging
from typing import Any

from tracker.models import Episode, Form, FormField, Role, User
from tracker.repositories import Repos
from tracker.schemas.episodes import EpisodeCreate, EpisodeUpdate
from tracker.services.audit_service import audit_service
from tracker.services.validation_service import FieldError, validate_episode_data
from tracker.utils.clock import parse_timestamp
from tracker.utils.exceptions import (
    BadRequestError,
    ForbiddenError,
    NotFoundError,
    ValidationFailedError,
)

logger = logging.getLogger(__name__)


def _check_bound(name: str, value: str | None) -> None:
    if value is None:
        return
    try:
        parse_timestamp(value)
    except ValueError:
        raise BadRequestError(f"{name} must be an ISO-8601 date or date-time")


class EpisodeService:
    """에피소드 관련 비즈니스 로직을 처리하는 서비스 (Episode business logic)."""

    async def _validate(self, repos: Repos, form_id: str, data: dict[str, Any]) -> None:
        fields: list[FormField] = await repos.forms.list_fields(form_id)
        errors: dict[str, FieldError] = validate_episode_data(fields, data)
        if errors:
            logger.info("Episode data rejected for form %s: %s", form_id, sorted(errors))
            raise ValidationFailedError(
                {field_id: e.model_dump(exclude_none=True) for field_id, e in errors.items()}
            )

    def _check_owner(self, episode: Episode, actor: User) -> None:
        if actor.role != Role.SYSADMIN and episode.created_by != actor.email:
            raise ForbiddenError("Only the submitter or a sysadmin may change this episode")

    async def list_episodes(
        self,
        repos: Repos,
        actor: User,
        form_id: str | None = None,
        created_by: str | None = None,
        since: str | None = None,
        until: str | None = None,
    ) -> list[Episode]:
        """에피소드 목록을 조회합니다.

        List episodes, optionally by form, submitter, and time range. For a
        teacher the submitter filter is always the teacher's own email.

        Raises:
            BadRequestError: since/until 형식 오류 (Unparseable bound)
        """
        _check_bound("since", since)
        _check_bound("until", until)
        if actor.role == Role.TEACHER:
            created_by = actor.email
        return await repos.episodes.list(
            form_id=form_id, created_by=created_by, since=since, until=until
        )

    async def get_episode(self, repos: Repos, episode_id: str) -> Episode:
        episode: Episode | None = await repos.episodes.get(episode_id)
        if episode is None:
            raise NotFoundError("Episode not found")
        return episode

    async def create_episode(
        self, repos: Repos, data: EpisodeCreate, actor: User
    ) -> Episode:
        """에피소드를 제출합니다. 제출자는 호출자의 이메일.

        Submit an episode; ``created_by`` is the caller's email.

        Raises:
            NotFoundError: 폼을 찾을 수 없을 때 (Form not found)
            ValidationFailedError: data가 필드 규칙 위반 (data violates field rules)
        """
        form: Form | None = await repos.forms.get(data.form_id)
        if form is None:
            raise NotFoundError("Form not found")
        await self._validate(repos, form.id, data.data)

        attributes: dict[str, Any] = data.model_dump()
        attributes["created_by"] = actor.email
        episode: Episode = await repos.episodes.create(attributes)
        await audit_service.record(
            repos, "episode.create", actor, {"episodeId": episode.id, "formId": form.id}
        )
        return episode

    async def update_episode(
        self, repos: Repos, episode_id: str, data: EpisodeUpdate, actor: User
    ) -> Episode:
        """에피소드를 수정합니다 (제출자 또는 시스템 관리자).

        Raises:
            NotFoundError: 에피소드 없음 (Episode not found)
            ForbiddenError: 소유자가 아님 (Not the submitter or a sysadmin)
            ValidationFailedError: data가 필드 규칙 위반 (data violates field rules)
        """
        current: Episode = await self.get_episode(repos, episode_id)
        self._check_owner(current, actor)
        patch: dict[str, Any] = data.model_dump(exclude_unset=True, exclude_none=True)
        if "data" in patch:
            await self._validate(repos, current.form_id, patch["data"])

        episode: Episode | None = await repos.episodes.update(episode_id, patch)
        if episode is None:
            raise NotFoundError("Episode not found")
        await audit_service.record(repos, "episode.update", actor, {"episodeId": episode_id})
        return episode

    async def remove_episode(self, repos: Repos, episode_id: str, actor: User) -> Episode:
        current: Episode = await self.get_episode(repos, episode_id)
        self._check_owner(current, actor)
        episode: Episode | None = await repos.episodes.remove(episode_id)
        if episode is None:
            raise NotFoundError("Episode not found")
        await audit_service.record(repos, "episode.delete", actor, {"episodeId": episode_id})
        return episode


episode_service: EpisodeService = EpisodeService()
