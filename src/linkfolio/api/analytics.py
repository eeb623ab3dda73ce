"""Analytics API endpoints: the dashboard report and outbound click tracking."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from ..analytics import AnalyticsReport, aggregate_analytics, record_link_click
from ..auth.dependencies import get_current_session
from ..auth.jwt_auth import UserSession
from ..context import AppContext, get_app_context
from ..core.exceptions import AggregationFailure
from ..repositories.dependencies import get_repository_container
from ..repositories.interfaces import RepositoryContainer
from ..utils.logging_config import get_logger, log_exception
from .middleware import ProblemDetailsException
from .schemas import (
    AnalyticsResponse,
    AnalyticsStats,
    ChartPoint,
    ClickTrackRequest,
    ProblemDetails,
    SuccessResponse,
    TopLinkEntry,
)

router = APIRouter(prefix="/api/analytics", tags=["analytics"])
logger = get_logger("analytics")


def parse_window_days(raw: Optional[str], default: int, maximum: int) -> int:
    """Window length from the ``days`` query value.

    Missing, non-numeric and non-positive values fall back to ``default``;
    larger values are capped at ``maximum``.
    """
    try:
        days = int(raw) if raw is not None else default
    except ValueError:
        return default
    if days < 1:
        return default
    return min(days, maximum)


def format_click_through_rate(views: int, rate: float) -> str:
    """One-decimal percentage string, ``"0"`` when nothing was clicked or viewed."""
    if views == 0 or rate == 0:
        return "0"
    return f"{rate:.1f}"


def report_to_response(report: AnalyticsReport) -> AnalyticsResponse:
    return AnalyticsResponse(
        chart_data=[
            ChartPoint(
                date=bucket.label,
                views=bucket.view_count,
                clicks=bucket.click_count,
            )
            for bucket in report.daily_series
        ],
        stats=AnalyticsStats(
            views=report.totals.view_count,
            clicks=report.totals.click_count,
            views_trend=report.trends.views_trend_pct,
            clicks_trend=report.trends.clicks_trend_pct,
            ctr=format_click_through_rate(
                report.totals.view_count, report.totals.click_through_rate
            ),
        ),
        top_links=[
            TopLinkEntry(name=link.title, url=link.url, clicks=link.click_count)
            for link in report.top_links
        ],
    )


@router.get(
    "",
    response_model=AnalyticsResponse,
    responses={
        401: {"model": ProblemDetails, "description": "Authentication required"},
        500: {"model": ProblemDetails, "description": "Aggregation failed"},
    },
)
async def get_analytics(
    days: Optional[str] = Query(None, description="Window length in days"),
    session: UserSession = Depends(get_current_session),
    repos: RepositoryContainer = Depends(get_repository_container),
    context: AppContext = Depends(get_app_context),
) -> AnalyticsResponse:
    """
    Views, clicks, trends and top links of the caller over the last ``days`` days.

    The series has one entry per calendar day of the window, ending today.
    """
    window_days = parse_window_days(
        days,
        default=context.config.app.default_analytics_days,
        maximum=context.config.app.max_analytics_days,
    )

    try:
        report = await aggregate_analytics(
            repos.analytics, repos.link, session.user_id, window_days=window_days
        )
    except AggregationFailure as exc:
        log_exception(
            "analytics", exc, {"user_id": exc.user_id, "days": window_days}
        )
        raise ProblemDetailsException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            title="Internal Server Error",
            detail="Failed to fetch analytics",
        )

    return report_to_response(report)


def _parse_uuid(value: str) -> Optional[UUID]:
    try:
        return UUID(value)
    except ValueError:
        return None


@router.post(
    "/click",
    response_model=SuccessResponse,
    responses={
        404: {"model": ProblemDetails, "description": "Link not found"},
        500: {"model": ProblemDetails, "description": "Click could not be recorded"},
    },
)
async def track_click(
    request: Request,
    payload: ClickTrackRequest,
    repos: RepositoryContainer = Depends(get_repository_container),
) -> SuccessResponse:
    """Record an outbound click on an active link of the given profile owner."""
    link_id = _parse_uuid(payload.link_id)
    user_id = _parse_uuid(payload.user_id)

    link = None
    if link_id is not None and user_id is not None:
        link = await repos.link.get_active_for_user(link_id, user_id)
    if link is None:
        raise ProblemDetailsException(
            status_code=status.HTTP_404_NOT_FOUND,
            title="Not Found",
            detail="Link not found",
        )

    result = await record_link_click(
        repos.analytics,
        link_id=link.id,
        user_id=link.user_id,
        user_agent=request.headers.get("user-agent"),
        referrer=request.headers.get("referer"),
    )
    if not result.ok:
        logger.error(f"Failed to track click on link {link.id}: {result.error}")
        raise ProblemDetailsException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            title="Internal Server Error",
            detail="Failed to track click",
        )

    return SuccessResponse(success=True)
