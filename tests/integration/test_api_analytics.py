"""Integration tests for the analytics report and click tracking endpoints."""

from datetime import datetime, time, timedelta, timezone
from uuid import UUID, uuid4

import pytest
from sqlalchemy.exc import OperationalError

from linkfolio.analytics.aggregator import format_day_label
from linkfolio.db.models import LinkClick, ProfileView
from linkfolio.repositories.sqlalchemy_impl import SQLAlchemyAnalyticsRepository


def _start_of_today() -> datetime:
    return datetime.combine(datetime.now(timezone.utc).date(), time.min, tzinfo=timezone.utc)


def _add_views(db_session, user_id: str, moments):
    for moment in moments:
        db_session.add(
            ProfileView(user_id=UUID(user_id), created_at=moment, device="desktop", browser="Chrome")
        )
    db_session.commit()


def _create_link(client, headers, title="Site", url="https://example.com"):
    response = client.post("/api/links", json={"title": title, "url": url}, headers=headers)
    return response.json()["link"]


def _click(client, link_id, user_id):
    return client.post("/api/analytics/click", json={"linkId": link_id, "userId": user_id})


@pytest.mark.integration
class TestAnalyticsReport:
    def test_requires_session(self, client):
        assert client.get("/api/analytics").status_code == 401

    def test_empty_report(self, client, signup):
        _, headers = signup()

        response = client.get("/api/analytics", headers=headers)

        assert response.status_code == 200
        body = response.json()
        assert len(body["chartData"]) == 7
        assert body["chartData"][-1]["date"] == format_day_label(
            datetime.now(timezone.utc).date()
        )
        assert all(point["views"] == 0 and point["clicks"] == 0 for point in body["chartData"])
        assert body["stats"] == {
            "views": 0,
            "clicks": 0,
            "viewsTrend": 0,
            "clicksTrend": 0,
            "ctr": "0",
        }
        assert body["topLinks"] == []

    @pytest.mark.parametrize(
        "days, expected",
        [("30", 30), ("1", 1), ("abc", 7), ("0", 7), ("-3", 7), ("1000", 365)],
    )
    def test_days_parameter(self, client, signup, days, expected):
        _, headers = signup()

        response = client.get(f"/api/analytics?days={days}", headers=headers)

        assert response.status_code == 200
        assert len(response.json()["chartData"]) == expected

    def test_stats_and_trends(self, client, signup, db_session):
        user, headers = signup()
        today = _start_of_today() + timedelta(seconds=1)
        _add_views(db_session, user["id"], [today] * 4)
        _add_views(db_session, user["id"], [today - timedelta(days=10)] * 2)
        link = _create_link(client, headers)
        assert _click(client, link["id"], user["id"]).status_code == 200

        body = client.get("/api/analytics", headers=headers).json()

        assert body["stats"]["views"] == 4
        assert body["stats"]["clicks"] == 1
        assert body["stats"]["viewsTrend"] == 100
        assert body["stats"]["clicksTrend"] == 100
        assert body["stats"]["ctr"] == "25.0"
        assert body["chartData"][-1]["views"] == 4
        assert body["chartData"][-1]["clicks"] == 1
        assert sum(point["views"] for point in body["chartData"]) == body["stats"]["views"]
        assert body["topLinks"] == [{"name": "Site", "url": "https://example.com", "clicks": 1}]

    def test_views_without_clicks_report_zero_ctr(self, client, signup, db_session):
        user, headers = signup()
        today = _start_of_today() + timedelta(seconds=1)
        _add_views(
            db_session,
            user["id"],
            [today] * 3 + [today - timedelta(days=2)] * 3 + [today - timedelta(days=5)] * 4,
        )
        _add_views(db_session, user["id"], [today - timedelta(days=9)] * 5)

        body = client.get("/api/analytics?days=7", headers=headers).json()

        assert body["stats"]["views"] == 10
        assert body["stats"]["clicks"] == 0
        assert body["stats"]["ctr"] == "0"
        assert body["stats"]["viewsTrend"] == 100
        assert len(body["chartData"]) == 7
        assert sum(1 for point in body["chartData"] if point["views"] > 0) == 3

    def test_events_before_window_are_excluded(self, client, signup, db_session):
        user, headers = signup()
        _add_views(db_session, user["id"], [_start_of_today() - timedelta(days=7, seconds=1)])

        body = client.get("/api/analytics", headers=headers).json()

        assert body["stats"]["views"] == 0
        assert body["stats"]["viewsTrend"] == -100

    def test_deleted_link_in_top_links(self, client, signup):
        user, headers = signup()
        link = _create_link(client, headers, "Gone", "https://gone.example")
        for _ in range(3):
            _click(client, link["id"], user["id"])
        client.delete(f"/api/links/{link['id']}", headers=headers)

        body = client.get("/api/analytics", headers=headers).json()

        assert body["topLinks"] == [{"name": "Unknown", "url": "", "clicks": 3}]

    def test_storage_failure_is_500(self, client, signup, monkeypatch):
        _, headers = signup()

        async def failing_get_views(self, *args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(SQLAlchemyAnalyticsRepository, "get_views", failing_get_views)

        response = client.get("/api/analytics", headers=headers)

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to fetch analytics"


@pytest.mark.integration
class TestClickTracking:
    def test_records_click(self, client, signup, db_session):
        user, headers = signup()
        link = _create_link(client, headers)

        response = client.post(
            "/api/analytics/click",
            json={"linkId": link["id"], "userId": user["id"]},
            headers={"User-Agent": "Mozilla/5.0 Firefox/125.0", "Referer": "https://ref.example"},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True}
        click = db_session.query(LinkClick).one()
        assert str(click.link_id) == link["id"]
        assert (click.browser, click.referrer) == ("Firefox", "https://ref.example")

        listed = client.get("/api/links", headers=headers).json()["links"]
        assert listed[0]["clickCount"] == 1

    def test_inactive_link_not_found(self, client, signup):
        user, headers = signup()
        link = _create_link(client, headers)
        client.patch(f"/api/links/{link['id']}", json={"isActive": False}, headers=headers)

        response = _click(client, link["id"], user["id"])

        assert response.status_code == 404
        assert response.json()["detail"] == "Link not found"

    def test_owner_mismatch_not_found(self, client, signup):
        _, alice_headers = signup("alice")
        bob, _ = signup("bob")
        link = _create_link(client, alice_headers)

        assert _click(client, link["id"], bob["id"]).status_code == 404

    @pytest.mark.parametrize("link_id", ["not-a-uuid", str(uuid4())])
    def test_unknown_link_not_found(self, client, signup, link_id):
        user, _ = signup()
        assert _click(client, link_id, user["id"]).status_code == 404

    def test_empty_ids_rejected(self, client):
        response = client.post("/api/analytics/click", json={"linkId": "", "userId": "x"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Link ID is required"

    def test_write_failure_is_500(self, client, signup, monkeypatch):
        user, headers = signup()
        link = _create_link(client, headers)

        async def failing_record_click(self, *args, **kwargs):
            raise OperationalError("INSERT", {}, Exception("database is locked"))

        monkeypatch.setattr(SQLAlchemyAnalyticsRepository, "record_click", failing_record_click)

        response = _click(client, link["id"], user["id"])

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to track click"
