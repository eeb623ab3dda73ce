"""User settings API endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status

from ..auth.dependencies import get_current_session
from ..auth.jwt_auth import UserSession
from ..db.models import SocialLink, User
from ..repositories.dependencies import get_repository_container
from ..repositories.interfaces import RepositoryContainer
from ..utils.logging_config import get_logger
from .middleware import ProblemDetailsException
from .schemas import (
    ProblemDetails,
    SocialLinkResponse,
    UserProfile,
    UserProfileResponse,
    UserUpdate,
)

router = APIRouter(prefix="/api/user", tags=["user"])
logger = get_logger("api")


def _profile_response(user: User, social_links: List[SocialLink]) -> UserProfileResponse:
    return UserProfileResponse(
        user=UserProfile(
            id=user.id,
            email=user.email,
            username=user.username,
            name=user.name,
            bio=user.bio,
            avatar_url=user.avatar_url,
            plan=user.plan,
            theme=user.theme,
            button_style=user.button_style,
            social_links=[
                SocialLinkResponse.model_validate(link) for link in social_links
            ],
        )
    )


async def _load_user(repos: RepositoryContainer, session: UserSession) -> User:
    user = await repos.user.get_by_id(session.user_id)
    if user is None:
        raise ProblemDetailsException(
            status_code=status.HTTP_404_NOT_FOUND,
            title="Not Found",
            detail="User not found",
        )
    return user


@router.get(
    "",
    response_model=UserProfileResponse,
    responses={401: {"model": ProblemDetails, "description": "Authentication required"}},
)
async def get_user(
    session: UserSession = Depends(get_current_session),
    repos: RepositoryContainer = Depends(get_repository_container),
) -> UserProfileResponse:
    """The caller's profile and appearance settings."""
    user = await _load_user(repos, session)
    social_links = await repos.social_link.list_for_user(user.id)
    return _profile_response(user, social_links)


@router.patch(
    "",
    response_model=UserProfileResponse,
    responses={
        400: {"model": ProblemDetails, "description": "Validation error"},
        401: {"model": ProblemDetails, "description": "Authentication required"},
    },
)
async def update_user(
    payload: UserUpdate,
    session: UserSession = Depends(get_current_session),
    repos: RepositoryContainer = Depends(get_repository_container),
) -> UserProfileResponse:
    """
    Update profile fields and appearance.

    Only the fields present in the body change. A ``socialLinks`` list
    replaces the stored set, positioned by list index.
    """
    user = await _load_user(repos, session)

    changes = payload.model_dump(
        exclude_unset=True, exclude_none=True, exclude={"social_links"}
    )
    for key in ("theme", "button_style"):
        if key in changes:
            changes[key] = changes[key].value
    if changes:
        user = await repos.user.update(user, **changes)

    if payload.social_links is not None:
        social_links = await repos.social_link.replace_for_user(
            user.id, [(item.platform.value, item.url) for item in payload.social_links]
        )
        logger.info(f"User {user.id} replaced social links ({len(social_links)})")
    else:
        social_links = await repos.social_link.list_for_user(user.id)

    return _profile_response(user, social_links)
