"""Unit tests for analytics aggregation."""

from datetime import date, datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from linkfolio.analytics.aggregator import (
    TOP_LINKS_LIMIT,
    aggregate_analytics,
    bucket_by_day,
    calculate_trend,
    click_through_rate,
    compute_window,
    format_day_label,
    rank_links,
    round_half_away_from_zero,
)
from linkfolio.core.exceptions import AggregationFailure, StorageError
from linkfolio.db.models import LinkClick
from linkfolio.repositories.memory_impl import MemoryAnalyticsRepository

NOW = datetime(2026, 3, 10, 15, 30, tzinfo=timezone.utc)


def at(day: int, hour: int = 12, month: int = 3) -> datetime:
    return datetime(2026, month, day, hour, tzinfo=timezone.utc)


@pytest.mark.unit
class TestTrend:
    """Period-over-period percentage change."""

    def test_zero_previous_with_activity_is_100(self):
        assert calculate_trend(7, 0) == 100
        assert calculate_trend(1, 0) == 100

    def test_zero_previous_without_activity_is_0(self):
        assert calculate_trend(0, 0) == 0

    def test_halving_is_minus_50(self):
        assert calculate_trend(50, 100) == -50

    def test_doubling_is_100(self):
        assert calculate_trend(10, 5) == 100

    def test_drop_to_zero_is_minus_100(self):
        assert calculate_trend(0, 4) == -100

    def test_halves_round_away_from_zero(self):
        assert calculate_trend(13, 8) == 63
        assert calculate_trend(3, 8) == -63
        assert calculate_trend(1, 8) == -88

    def test_rounding_helper(self):
        assert round_half_away_from_zero(2.5) == 3
        assert round_half_away_from_zero(-2.5) == -3
        assert str(round_half_away_from_zero(6.25, places=1)) == "6.3"


@pytest.mark.unit
class TestClickThroughRate:
    def test_no_views_is_zero_regardless_of_clicks(self):
        assert click_through_rate(0, 0) == 0
        assert click_through_rate(12, 0) == 0

    def test_one_decimal(self):
        assert click_through_rate(1, 3) == 33.3
        assert click_through_rate(2, 3) == 66.7
        assert click_through_rate(1, 8) == 12.5
        assert click_through_rate(1, 16) == 6.3

    def test_more_clicks_than_views(self):
        assert click_through_rate(3, 2) == 150.0


@pytest.mark.unit
class TestWindow:
    def test_window_days_and_bounds(self):
        window = compute_window(NOW, 7)

        assert window.window_days == 7
        assert window.days[0] == date(2026, 3, 4)
        assert window.days[-1] == date(2026, 3, 10)
        assert window.start == datetime(2026, 3, 4, tzinfo=timezone.utc)
        assert window.end == NOW
        assert window.previous_start == datetime(2026, 2, 25, tzinfo=timezone.utc)

    @pytest.mark.parametrize("window_days", [1, 2, 7, 30, 90, 365])
    def test_days_are_contiguous_and_end_today(self, window_days):
        window = compute_window(NOW, window_days)

        assert len(window.days) == window_days
        assert window.days[-1] == NOW.date()
        for earlier, later in zip(window.days, window.days[1:]):
            assert later - earlier == timedelta(days=1)

    def test_rejects_non_positive_window(self):
        with pytest.raises(ValueError):
            compute_window(NOW, 0)

    def test_naive_now_is_treated_as_utc(self):
        window = compute_window(NOW.replace(tzinfo=None), 3)
        assert window.end == NOW


@pytest.mark.unit
class TestBucketing:
    def test_zero_filled_and_ascending(self):
        days = compute_window(NOW, 5).days
        series = bucket_by_day(days, [at(8), at(8, 23), at(10)], [at(9)])

        assert [bucket.day for bucket in series] == list(days)
        assert [bucket.view_count for bucket in series] == [0, 0, 2, 0, 1]
        assert [bucket.click_count for bucket in series] == [0, 0, 0, 1, 0]

    def test_events_outside_days_are_ignored(self):
        days = compute_window(NOW, 2).days
        series = bucket_by_day(days, [at(1), at(10)], [at(8)])

        assert sum(bucket.view_count for bucket in series) == 1
        assert sum(bucket.click_count for bucket in series) == 0

    def test_naive_timestamps_bucket_as_utc(self):
        days = compute_window(NOW, 1).days
        series = bucket_by_day(days, [at(10).replace(tzinfo=None)], [])
        assert series[0].view_count == 1

    def test_day_label(self):
        assert format_day_label(date(2026, 1, 5)) == "Jan 5"
        assert format_day_label(date(2026, 12, 31)) == "Dec 31"


def _click(link_id, created_at):
    return LinkClick(id=uuid4(), link_id=link_id, user_id=uuid4(), created_at=created_at)


@pytest.mark.unit
class TestRanking:
    def test_descending_by_count(self):
        first, second = uuid4(), uuid4()
        clicks = [_click(second, at(5)), _click(first, at(6)), _click(first, at(7))]

        assert rank_links(clicks) == [(first, 2), (second, 1)]

    def test_ties_keep_earliest_click_first(self):
        early, late = uuid4(), uuid4()
        clicks = [_click(late, at(9)), _click(early, at(4))]

        assert rank_links(clicks) == [(early, 1), (late, 1)]

    def test_limited_to_top_five(self):
        clicks = [_click(uuid4(), at(5)) for _ in range(8)]
        assert len(rank_links(clicks)) == TOP_LINKS_LIMIT


@pytest.mark.unit
class TestAggregateAnalytics:
    """End-to-end aggregation over in-memory repositories."""

    @pytest.fixture
    def user_id(self):
        return uuid4()

    @pytest.mark.asyncio
    async def test_views_on_three_days_without_clicks(self, memory_repos, user_id):
        analytics = memory_repos.analytics
        for moment in [at(5)] * 3 + [at(7)] * 3 + [at(10, 9)] * 4:
            await analytics.record_view(user_id, "desktop", "Chrome", None, created_at=moment)
        for moment in [at(1), at(2), at(2), at(3), at(3, 23)]:
            await analytics.record_view(user_id, "desktop", "Chrome", None, created_at=moment)

        report = await aggregate_analytics(
            analytics, memory_repos.link, user_id, window_days=7, now=NOW
        )

        assert report.totals.view_count == 10
        assert report.totals.click_count == 0
        assert report.totals.click_through_rate == 0
        assert len(report.daily_series) == 7
        assert sum(1 for bucket in report.daily_series if bucket.view_count > 0) == 3
        assert report.trends.views_trend_pct == 100
        assert report.trends.clicks_trend_pct == 0
        assert report.top_links == []

    @pytest.mark.asyncio
    async def test_totals_match_series(self, memory_repos, user_id):
        link = await memory_repos.link.create(user_id, "Blog", "https://blog.example", 0)
        for day in (4, 6, 6, 9, 10):
            await memory_repos.analytics.record_view(
                user_id, "mobile", "Safari", None, created_at=at(day)
            )
        for day in (6, 10):
            await memory_repos.analytics.record_click(
                link.id, user_id, "mobile", "Safari", None, created_at=at(day)
            )

        report = await aggregate_analytics(
            memory_repos.analytics, memory_repos.link, user_id, window_days=7, now=NOW
        )

        assert report.totals.view_count == sum(b.view_count for b in report.daily_series)
        assert report.totals.click_count == sum(b.click_count for b in report.daily_series)
        assert report.totals.click_through_rate == 40.0
        assert report.top_links[0].title == "Blog"
        assert report.top_links[0].url == "https://blog.example"
        assert report.top_links[0].click_count == 2

    @pytest.mark.asyncio
    async def test_deleted_link_reported_as_unknown(self, memory_repos, user_id):
        link = await memory_repos.link.create(user_id, "Old", "https://old.example", 0)
        for day in (8, 9, 10):
            await memory_repos.analytics.record_click(
                link.id, user_id, "desktop", "Firefox", None, created_at=at(day, 1)
            )
        await memory_repos.link.remove(link)

        report = await aggregate_analytics(
            memory_repos.analytics, memory_repos.link, user_id, now=NOW
        )

        assert len(report.top_links) == 1
        top = report.top_links[0]
        assert (top.title, top.url, top.click_count) == ("Unknown", "", 3)

    @pytest.mark.asyncio
    async def test_top_links_at_most_five_non_increasing(self, memory_repos, user_id):
        for index in range(7):
            link = await memory_repos.link.create(
                user_id, f"Link {index}", f"https://example.com/{index}", index
            )
            for _ in range(index + 1):
                await memory_repos.analytics.record_click(
                    link.id, user_id, "desktop", "Chrome", None, created_at=at(9)
                )

        report = await aggregate_analytics(
            memory_repos.analytics, memory_repos.link, user_id, now=NOW
        )

        counts = [top.click_count for top in report.top_links]
        assert len(counts) == 5
        assert counts == sorted(counts, reverse=True)
        assert counts[0] == 7

    @pytest.mark.asyncio
    async def test_other_users_events_are_excluded(self, memory_repos, user_id):
        await memory_repos.analytics.record_view(
            uuid4(), "desktop", "Chrome", None, created_at=at(9)
        )

        report = await aggregate_analytics(
            memory_repos.analytics, memory_repos.link, user_id, now=NOW
        )

        assert report.totals.view_count == 0

    @pytest.mark.asyncio
    async def test_idempotent(self, memory_repos, user_id):
        link = await memory_repos.link.create(user_id, "Shop", "https://shop.example", 0)
        await memory_repos.analytics.record_view(
            user_id, "desktop", "Chrome", None, created_at=at(9)
        )
        await memory_repos.analytics.record_click(
            link.id, user_id, "desktop", "Chrome", None, created_at=at(9)
        )

        first = await aggregate_analytics(
            memory_repos.analytics, memory_repos.link, user_id, now=NOW
        )
        second = await aggregate_analytics(
            memory_repos.analytics, memory_repos.link, user_id, now=NOW
        )

        assert first == second

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            StorageError("storage unavailable"),
            OperationalError("SELECT 1", {}, Exception("database is locked")),
        ],
    )
    async def test_storage_errors_become_aggregation_failure(self, memory_repos, user_id, error):
        class FailingAnalyticsRepository(MemoryAnalyticsRepository):
            async def count_clicks(self, user_id, since, before):
                raise error

        with pytest.raises(AggregationFailure) as exc_info:
            await aggregate_analytics(
                FailingAnalyticsRepository(), memory_repos.link, user_id, now=NOW
            )

        assert exc_info.value.user_id == str(user_id)
        assert exc_info.value.__cause__ is error
