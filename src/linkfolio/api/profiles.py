"""Public profile API endpoint."""

from fastapi import APIRouter, Depends, Request, status

from ..analytics import record_profile_view
from ..core.themes import (
    BUTTON_STYLES,
    THEMES,
    get_platform,
    resolve_button_style,
    resolve_theme,
)
from ..db.models import SocialLink
from ..repositories.dependencies import get_repository_container
from ..repositories.interfaces import RepositoryContainer
from ..utils.logging_config import get_logger
from .middleware import ProblemDetailsException
from .schemas import (
    ButtonStyleInfo,
    ProblemDetails,
    PublicLink,
    PublicProfileResponse,
    PublicSocialLink,
    PublicUser,
    ThemeInfo,
)

router = APIRouter(prefix="/api/profiles", tags=["profiles"])
logger = get_logger("analytics")


def _public_social_link(link: SocialLink) -> PublicSocialLink:
    platform = get_platform(link.platform) or {"name": link.platform, "icon": "link"}
    return PublicSocialLink(
        id=link.id,
        platform=link.platform,
        url=link.url,
        order=link.order,
        name=platform["name"],
        icon=platform["icon"],
    )


@router.get(
    "/{username}",
    response_model=PublicProfileResponse,
    responses={404: {"model": ProblemDetails, "description": "Profile not found"}},
)
async def get_public_profile(
    username: str,
    request: Request,
    repos: RepositoryContainer = Depends(get_repository_container),
) -> PublicProfileResponse:
    """
    Public profile page data: active links, social links and appearance.

    Each successful call records a profile view. A failed write is logged
    and otherwise ignored so visitors always get the page.
    """
    user = await repos.user.get_by_username(username)
    if user is None:
        raise ProblemDetailsException(
            status_code=status.HTTP_404_NOT_FOUND,
            title="Not Found",
            detail="Profile not found",
        )

    links = await repos.link.list_for_user(user.id, active_only=True)
    social_links = await repos.social_link.list_for_user(user.id)

    result = await record_profile_view(
        repos.analytics,
        user_id=user.id,
        user_agent=request.headers.get("user-agent"),
        referrer=request.headers.get("referer"),
    )
    if not result.ok:
        logger.warning(f"Failed to track view for user {user.id}: {result.error}")

    theme = resolve_theme(user.theme)
    button_style = resolve_button_style(user.button_style)
    button = BUTTON_STYLES[button_style]

    return PublicProfileResponse(
        user=PublicUser(
            id=user.id,
            username=user.username,
            name=user.name,
            bio=user.bio,
            avatar_url=user.avatar_url,
            plan=user.plan,
        ),
        links=[PublicLink.model_validate(link) for link in links],
        social_links=[_public_social_link(link) for link in social_links],
        theme=ThemeInfo(id=theme.value, **THEMES[theme]),
        button_style=ButtonStyleInfo(
            id=button_style.value, name=button["name"], class_name=button["className"]
        ),
    )
