"""Write side of analytics: one event row per profile view or link click."""

import re
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from ..core.enums import DeviceType
from ..core.exceptions import StorageError
from ..repositories.interfaces import AnalyticsRepository

_MOBILE = re.compile(r"mobile", re.IGNORECASE)
_TABLET = re.compile(r"tablet", re.IGNORECASE)

# First match wins; Chrome user agents also mention Safari.
_BROWSERS = (
    (re.compile(r"chrome", re.IGNORECASE), "Chrome"),
    (re.compile(r"firefox", re.IGNORECASE), "Firefox"),
    (re.compile(r"safari", re.IGNORECASE), "Safari"),
    (re.compile(r"edge", re.IGNORECASE), "Edge"),
)
OTHER_BROWSER = "Other"


@dataclass(frozen=True)
class RecordResult:
    """Outcome of appending one analytics event."""

    ok: bool
    event_id: Optional[UUID] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, event_id: UUID) -> "RecordResult":
        return cls(ok=True, event_id=event_id)

    @classmethod
    def failure(cls, error: BaseException) -> "RecordResult":
        return cls(ok=False, error=f"{type(error).__name__}: {error}")


def detect_device(user_agent: Optional[str]) -> str:
    """Classify a user agent as mobile, tablet or desktop."""
    user_agent = user_agent or ""
    if _MOBILE.search(user_agent):
        return DeviceType.MOBILE.value
    if _TABLET.search(user_agent):
        return DeviceType.TABLET.value
    return DeviceType.DESKTOP.value


def detect_browser(user_agent: Optional[str]) -> str:
    """Name the browser family of a user agent."""
    user_agent = user_agent or ""
    for pattern, name in _BROWSERS:
        if pattern.search(user_agent):
            return name
    return OTHER_BROWSER


async def record_profile_view(
    analytics_repo: AnalyticsRepository,
    user_id: UUID,
    user_agent: Optional[str] = None,
    referrer: Optional[str] = None,
) -> RecordResult:
    """
    Append a profile view event.

    Storage errors are returned in the result instead of raised; the caller
    decides whether a failed write matters.
    """
    try:
        view = await analytics_repo.record_view(
            user_id=user_id,
            device=detect_device(user_agent),
            browser=detect_browser(user_agent),
            referrer=referrer or None,
        )
    except (SQLAlchemyError, StorageError) as exc:
        return RecordResult.failure(exc)
    return RecordResult.success(view.id)


async def record_link_click(
    analytics_repo: AnalyticsRepository,
    link_id: UUID,
    user_id: UUID,
    user_agent: Optional[str] = None,
    referrer: Optional[str] = None,
) -> RecordResult:
    """Append a link click event. Storage errors are returned in the result."""
    try:
        click = await analytics_repo.record_click(
            link_id=link_id,
            user_id=user_id,
            device=detect_device(user_agent),
            browser=detect_browser(user_agent),
            referrer=referrer or None,
        )
    except (SQLAlchemyError, StorageError) as exc:
        return RecordResult.failure(exc)
    return RecordResult.success(click.id)
