"""Link management API endpoints."""

from typing import Dict, List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from ..auth.dependencies import get_current_session
from ..auth.jwt_auth import UserSession
from ..core.plans import get_plan_limits
from ..db.models import Link
from ..repositories.dependencies import get_repository_container
from ..repositories.interfaces import RepositoryContainer
from ..utils.logging_config import get_logger
from .middleware import ProblemDetailsException
from .schemas import (
    LinkCreate,
    LinkEnvelope,
    LinkListResponse,
    LinkResponse,
    LinkUpdate,
    ProblemDetails,
    ReorderRequest,
    SuccessResponse,
)

router = APIRouter(prefix="/api/links", tags=["links"])
logger = get_logger("api")

LINK_LIMIT_MESSAGE = (
    "You've reached your limit of {limit} links. Upgrade to Pro for unlimited links!"
)


def _link_response(link: Link, click_count: int = 0) -> LinkResponse:
    return LinkResponse(
        id=link.id,
        title=link.title,
        url=link.url,
        is_active=link.is_active,
        order=link.order,
        click_count=click_count,
        created_at=link.created_at,
        updated_at=link.updated_at,
    )


async def _list_with_counts(repos: RepositoryContainer, user_id: UUID) -> LinkListResponse:
    links = await repos.link.list_for_user(user_id)
    counts: Dict[UUID, int] = await repos.link.click_counts([link.id for link in links])
    return LinkListResponse(
        links=[_link_response(link, counts.get(link.id, 0)) for link in links]
    )


def _link_not_found() -> ProblemDetailsException:
    return ProblemDetailsException(
        status_code=status.HTTP_404_NOT_FOUND,
        title="Not Found",
        detail="Link not found",
    )


@router.get(
    "",
    response_model=LinkListResponse,
    responses={401: {"model": ProblemDetails, "description": "Authentication required"}},
)
async def list_links(
    session: UserSession = Depends(get_current_session),
    repos: RepositoryContainer = Depends(get_repository_container),
) -> LinkListResponse:
    """The caller's links in display order, each with its all-time click count."""
    return await _list_with_counts(repos, session.user_id)


@router.post(
    "",
    response_model=LinkEnvelope,
    responses={
        401: {"model": ProblemDetails, "description": "Authentication required"},
        403: {"model": ProblemDetails, "description": "Plan link limit reached"},
        404: {"model": ProblemDetails, "description": "User not found"},
    },
)
async def create_link(
    payload: LinkCreate,
    session: UserSession = Depends(get_current_session),
    repos: RepositoryContainer = Depends(get_repository_container),
) -> LinkEnvelope:
    """
    Add a link at the end of the caller's list.

    Free accounts are limited in the number of links they can hold.
    """
    user = await repos.user.get_by_id(session.user_id)
    if user is None:
        raise ProblemDetailsException(
            status_code=status.HTTP_404_NOT_FOUND,
            title="Not Found",
            detail="User not found",
        )

    limits = get_plan_limits(user.plan)
    if await repos.link.count_for_user(user.id) >= limits.max_links:
        raise ProblemDetailsException(
            status_code=status.HTTP_403_FORBIDDEN,
            title="Forbidden",
            detail=LINK_LIMIT_MESSAGE.format(limit=int(limits.max_links)),
        )

    highest = await repos.link.max_order(user.id)
    link = await repos.link.create(
        user_id=user.id,
        title=payload.title,
        url=payload.url,
        order=0 if highest is None else highest + 1,
    )
    logger.info(f"User {user.id} created link {link.id} at position {link.order}")
    return LinkEnvelope(link=_link_response(link))


@router.post(
    "/reorder",
    response_model=LinkListResponse,
    responses={
        401: {"model": ProblemDetails, "description": "Authentication required"},
        404: {"model": ProblemDetails, "description": "Unknown or foreign link"},
    },
)
async def reorder_links(
    payload: ReorderRequest,
    session: UserSession = Depends(get_current_session),
    repos: RepositoryContainer = Depends(get_repository_container),
) -> LinkListResponse:
    """Set new positions for several links at once."""
    requested: List[UUID] = [item.id for item in payload.links]
    owned = {link.id for link in await repos.link.list_for_user(session.user_id)}

    # Duplicate ids count as a mismatch
    if len(set(requested)) != len(requested) or not set(requested) <= owned:
        raise ProblemDetailsException(
            status_code=status.HTTP_404_NOT_FOUND,
            title="Not Found",
            detail="One or more links not found or do not belong to you",
        )

    await repos.link.reorder({item.id: item.order for item in payload.links})
    return await _list_with_counts(repos, session.user_id)


@router.patch(
    "/{link_id}",
    response_model=LinkEnvelope,
    responses={
        401: {"model": ProblemDetails, "description": "Authentication required"},
        404: {"model": ProblemDetails, "description": "Link not found"},
    },
)
async def update_link(
    link_id: UUID,
    payload: LinkUpdate,
    session: UserSession = Depends(get_current_session),
    repos: RepositoryContainer = Depends(get_repository_container),
) -> LinkEnvelope:
    """Change the title, URL, visibility or position of one of the caller's links."""
    link = await repos.link.get_for_user(link_id, session.user_id)
    if link is None:
        raise _link_not_found()

    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if changes:
        link = await repos.link.update(link, **changes)

    counts = await repos.link.click_counts([link.id])
    return LinkEnvelope(link=_link_response(link, counts.get(link.id, 0)))


@router.delete(
    "/{link_id}",
    response_model=SuccessResponse,
    responses={
        401: {"model": ProblemDetails, "description": "Authentication required"},
        404: {"model": ProblemDetails, "description": "Link not found"},
    },
)
async def delete_link(
    link_id: UUID,
    session: UserSession = Depends(get_current_session),
    repos: RepositoryContainer = Depends(get_repository_container),
) -> SuccessResponse:
    """Delete one of the caller's links. Its recorded clicks are kept."""
    link = await repos.link.get_for_user(link_id, session.user_id)
    if link is None:
        raise _link_not_found()

    await repos.link.remove(link)
    logger.info(f"User {session.user_id} deleted link {link_id}")
    return SuccessResponse(success=True)
