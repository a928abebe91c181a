"""에피소드 라우터 — 제출, 조회, 수정, 삭제 엔드포인트.

Episodes Router — submit, list, read, update, and delete episodes.
Teachers only see their own episodes in listings.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from tracker.api.deps import get_current_user
from tracker.models import Episode, User
from tracker.repositories import Repos, get_repos
from tracker.schemas.episodes import EpisodeCreate, EpisodeUpdate
from tracker.services.episode_service import episode_service

router: APIRouter = APIRouter()


@router.get("", response_model=list[Episode])
async def list_episodes(
    repos: Annotated[Repos, Depends(get_repos)],
    current_user: Annotated[User, Depends(get_current_user)],
    form_id: Annotated[str | None, Query(alias="formId")] = None,
    created_by: Annotated[str | None, Query(alias="createdBy")] = None,
    since: str | None = None,
    until: str | None = None,
) -> list[Episode]:
    """에피소드 목록을 조회합니다.

    List episodes. ``formId``/``createdBy`` narrow the listing to one index
    partition ordered by time; ``since``/``until`` bound the timestamp.
    """
    return await episode_service.list_episodes(
        repos, current_user, form_id=form_id, created_by=created_by, since=since, until=until
    )


@router.post("", response_model=Episode, status_code=201)
async def create_episode(
    data: EpisodeCreate,
    repos: Annotated[Repos, Depends(get_repos)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> Episode:
    """에피소드를 제출합니다 — data는 폼 필드로 검증.

    Submit an episode; ``data`` is validated against the form's fields.
    """
    return await episode_service.create_episode(repos, data, current_user)


@router.get("/{episode_id}", response_model=Episode)
async def get_episode(
    episode_id: str,
    repos: Annotated[Repos, Depends(get_repos)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> Episode:
    return await episode_service.get_episode(repos, episode_id)


@router.put("/{episode_id}", response_model=Episode)
async def update_episode(
    episode_id: str,
    data: EpisodeUpdate,
    repos: Annotated[Repos, Depends(get_repos)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> Episode:
    return await episode_service.update_episode(repos, episode_id, data, current_user)


@router.delete("/{episode_id}", response_model=Episode)
async def delete_episode(
    episode_id: str,
    repos: Annotated[Repos, Depends(get_repos)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> Episode:
    return await episode_service.remove_episode(repos, episode_id, current_user)
