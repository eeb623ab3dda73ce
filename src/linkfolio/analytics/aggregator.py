"""
Analytics aggregation for profile views and link clicks.

Turns the raw view/click events of one user into a per-day series, window
totals, period-over-period trends and a top links ranking. The computation
itself (``build_report`` and its helpers) is pure; ``aggregate_analytics``
performs the storage reads and wraps any storage error in
``AggregationFailure``.
"""

import asyncio
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from ..core.exceptions import AggregationFailure, StorageError
from ..db.models import Link, LinkClick, ProfileView
from ..repositories.interfaces import AnalyticsRepository, LinkRepository
from ..utils.logging_config import get_module_logger

logger = get_module_logger(__name__)

DEFAULT_WINDOW_DAYS = 7
TOP_LINKS_LIMIT = 5
UNKNOWN_LINK_TITLE = "Unknown"

_MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


@dataclass(frozen=True)
class AnalyticsWindow:
    """Current and previous aggregation windows, aligned to UTC day boundaries."""

    days: Tuple[date, ...]
    start: datetime
    end: datetime
    previous_start: datetime

    @property
    def window_days(self) -> int:
        return len(self.days)


@dataclass(frozen=True)
class DailyBucket:
    day: date
    view_count: int = 0
    click_count: int = 0

    @property
    def label(self) -> str:
        """Display label such as ``"Jan 5"``."""
        return format_day_label(self.day)


@dataclass(frozen=True)
class Totals:
    view_count: int
    click_count: int
    click_through_rate: float


@dataclass(frozen=True)
class Trends:
    views_trend_pct: int
    clicks_trend_pct: int


@dataclass(frozen=True)
class TopLink:
    link_id: UUID
    title: str
    url: str
    click_count: int


@dataclass(frozen=True)
class AnalyticsReport:
    """Aggregated analytics for one user over one window."""

    window_days: int
    daily_series: List[DailyBucket]
    totals: Totals
    trends: Trends
    top_links: List[TopLink]


def round_half_away_from_zero(value: float, places: int = 0) -> Decimal:
    """Round like ``Math.round`` for positives and symmetrically for negatives."""
    quantum = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)


def calculate_trend(current: int, previous: int) -> int:
    """Percentage change from ``previous`` to ``current``.

    A zero previous period yields 100 when there is any current activity and
    0 otherwise.
    """
    if previous == 0:
        return 100 if current > 0 else 0
    return int(round_half_away_from_zero(((current - previous) / previous) * 100))


def click_through_rate(clicks: int, views: int) -> float:
    """Clicks per hundred views, one decimal; 0 without views."""
    if views == 0:
        return 0.0
    return float(round_half_away_from_zero((clicks / views) * 100, places=1))


def format_day_label(day: date) -> str:
    return f"{_MONTH_ABBREVIATIONS[day.month - 1]} {day.day}"


def as_utc(moment: datetime) -> datetime:
    """Treat naive timestamps (SQLite round-trips) as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def compute_window(now: datetime, window_days: int = DEFAULT_WINDOW_DAYS) -> AnalyticsWindow:
    """Window of ``window_days`` calendar days ending with the day of ``now``.

    The previous window has the same length and ends where the current one
    starts.
    """
    if window_days < 1:
        raise ValueError(f"window_days must be positive, got {window_days}")

    now = as_utc(now)
    today = now.date()
    first_day = today - timedelta(days=window_days - 1)
    start = datetime.combine(first_day, time.min, tzinfo=timezone.utc)
    days = tuple(first_day + timedelta(days=offset) for offset in range(window_days))
    return AnalyticsWindow(
        days=days,
        start=start,
        end=now,
        previous_start=start - timedelta(days=window_days),
    )


def bucket_by_day(
    days: Sequence[date],
    view_times: Iterable[datetime],
    click_times: Iterable[datetime],
) -> List[DailyBucket]:
    """Zero-filled ascending per-day counts; events outside ``days`` are ignored."""
    views: Dict[date, int] = {day: 0 for day in days}
    clicks: Dict[date, int] = {day: 0 for day in days}

    for moment in view_times:
        key = as_utc(moment).date()
        if key in views:
            views[key] += 1

    for moment in click_times:
        key = as_utc(moment).date()
        if key in clicks:
            clicks[key] += 1

    return [
        DailyBucket(day=day, view_count=views[day], click_count=clicks[day])
        for day in sorted(views)
    ]


def rank_links(
    clicks: Iterable[LinkClick], limit: int = TOP_LINKS_LIMIT
) -> List[Tuple[UUID, int]]:
    """Link IDs by click count, descending.

    Ties keep the order of each link's earliest click in the window.
    """
    ordered = sorted(clicks, key=lambda click: as_utc(click.created_at))
    return Counter(click.link_id for click in ordered).most_common(limit)


def build_report(
    window: AnalyticsWindow,
    views: Sequence[ProfileView],
    clicks: Sequence[LinkClick],
    previous_view_count: int,
    previous_click_count: int,
    ranked_links: Sequence[Tuple[UUID, int]],
    links: Iterable[Link],
) -> AnalyticsReport:
    """Assemble a report from already-fetched events."""
    series = bucket_by_day(
        window.days,
        (view.created_at for view in views),
        (click.created_at for click in clicks),
    )

    # Totals come from the series so both always agree
    total_views = sum(bucket.view_count for bucket in series)
    total_clicks = sum(bucket.click_count for bucket in series)

    details = {link.id: link for link in links}
    top_links = []
    for link_id, count in ranked_links:
        link = details.get(link_id)
        top_links.append(
            TopLink(
                link_id=link_id,
                title=link.title if link else UNKNOWN_LINK_TITLE,
                url=link.url if link else "",
                click_count=count,
            )
        )

    return AnalyticsReport(
        window_days=window.window_days,
        daily_series=series,
        totals=Totals(
            view_count=total_views,
            click_count=total_clicks,
            click_through_rate=click_through_rate(total_clicks, total_views),
        ),
        trends=Trends(
            views_trend_pct=calculate_trend(total_views, previous_view_count),
            clicks_trend_pct=calculate_trend(total_clicks, previous_click_count),
        ),
        top_links=top_links,
    )


async def aggregate_analytics(
    analytics_repo: AnalyticsRepository,
    link_repo: LinkRepository,
    user_id: UUID,
    window_days: int = DEFAULT_WINDOW_DAYS,
    now: Optional[datetime] = None,
) -> AnalyticsReport:
    """
    Build the analytics report for a user.

    Reads the current window's views and clicks and the previous window's
    counts together, then resolves the top links' titles and URLs.

    Raises:
        AggregationFailure: If any storage read fails. No partial report is
            returned.
    """
    window = compute_window(now or datetime.now(timezone.utc), window_days)

    try:
        views, clicks, previous_views, previous_clicks = await asyncio.gather(
            analytics_repo.get_views(user_id, window.start, window.end),
            analytics_repo.get_clicks(user_id, window.start, window.end),
            analytics_repo.count_views(user_id, window.previous_start, window.start),
            analytics_repo.count_clicks(user_id, window.previous_start, window.start),
        )
        ranked = rank_links(clicks)
        links = await link_repo.list_by_ids([link_id for link_id, _ in ranked])
    except (SQLAlchemyError, StorageError) as exc:
        logger.error(
            f"Analytics aggregation failed for user {user_id} "
            f"({window.window_days} days): {type(exc).__name__}: {exc}"
        )
        raise AggregationFailure("Failed to fetch analytics", user_id=str(user_id)) from exc

    report = build_report(
        window, views, clicks, previous_views, previous_clicks, ranked, links
    )
    logger.debug(
        f"Built analytics for user {user_id}: {report.totals.view_count} views, "
        f"{report.totals.click_count} clicks over {report.window_days} days"
    )
    return report
