"""Integration tests for link management."""

from uuid import uuid4

import pytest

from linkfolio.db.models import User


def _create(client, headers, title="Site", url="https://example.com"):
    response = client.post("/api/links", json={"title": title, "url": url}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()["link"]


@pytest.mark.integration
class TestCreateAndList:
    def test_orders_are_appended(self, client, signup):
        _, headers = signup()

        first = _create(client, headers, "One")
        second = _create(client, headers, "Two")

        assert first["order"] == 0
        assert second["order"] == 1
        assert first["isActive"] is True
        assert first["clickCount"] == 0

        listed = client.get("/api/links", headers=headers).json()["links"]
        assert [link["title"] for link in listed] == ["One", "Two"]

    def test_title_is_sanitized(self, client, signup):
        _, headers = signup()
        link = _create(client, headers, "<script>")
        assert link["title"] == "&lt;script&gt;"

    def test_rejects_non_http_url(self, client, signup):
        _, headers = signup()

        response = client.post(
            "/api/links", json={"title": "x", "url": "javascript:alert(1)"}, headers=headers
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "URL must use http or https protocol"

    def test_free_plan_limit(self, client, signup):
        _, headers = signup()
        for index in range(5):
            _create(client, headers, f"Link {index}")

        response = client.post(
            "/api/links", json={"title": "Six", "url": "https://six.example"}, headers=headers
        )

        assert response.status_code == 403
        assert response.json()["detail"] == (
            "You've reached your limit of 5 links. Upgrade to Pro for unlimited links!"
        )

    def test_pro_plan_unlimited(self, client, signup, db_session):
        user, headers = signup()
        db_session.query(User).filter(User.username == user["username"]).update({"plan": "pro"})
        db_session.commit()

        for index in range(6):
            _create(client, headers, f"Link {index}")

        assert len(client.get("/api/links", headers=headers).json()["links"]) == 6

    def test_links_are_private_to_owner(self, client, signup):
        _, alice = signup("alice")
        _, bob = signup("bob")
        _create(client, alice, "Alice's")

        assert client.get("/api/links", headers=bob).json()["links"] == []


@pytest.mark.integration
class TestUpdateAndDelete:
    def test_partial_update(self, client, signup):
        _, headers = signup()
        link = _create(client, headers, "Before", "https://before.example")

        response = client.patch(
            f"/api/links/{link['id']}",
            json={"title": "After", "isActive": False},
            headers=headers,
        )

        assert response.status_code == 200
        updated = response.json()["link"]
        assert updated["title"] == "After"
        assert updated["url"] == "https://before.example"
        assert updated["isActive"] is False

    def test_update_foreign_link_is_404(self, client, signup):
        _, alice = signup("alice")
        _, bob = signup("bob")
        link = _create(client, alice)

        response = client.patch(f"/api/links/{link['id']}", json={"title": "x"}, headers=bob)

        assert response.status_code == 404
        assert response.json()["detail"] == "Link not found"

    def test_update_rejects_negative_order(self, client, signup):
        _, headers = signup()
        link = _create(client, headers)

        response = client.patch(f"/api/links/{link['id']}", json={"order": -1}, headers=headers)

        assert response.status_code == 400

    def test_delete(self, client, signup):
        _, headers = signup()
        link = _create(client, headers)

        response = client.delete(f"/api/links/{link['id']}", headers=headers)

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert client.get("/api/links", headers=headers).json()["links"] == []

    def test_delete_unknown_is_404(self, client, signup):
        _, headers = signup()
        response = client.delete(f"/api/links/{uuid4()}", headers=headers)
        assert response.status_code == 404


@pytest.mark.integration
class TestReorder:
    def test_reorder(self, client, signup):
        _, headers = signup()
        first = _create(client, headers, "First")
        second = _create(client, headers, "Second")

        response = client.post(
            "/api/links/reorder",
            json={"links": [{"id": first["id"], "order": 1}, {"id": second["id"], "order": 0}]},
            headers=headers,
        )

        assert response.status_code == 200
        assert [link["title"] for link in response.json()["links"]] == ["Second", "First"]

    def test_foreign_link_rejected(self, client, signup):
        _, alice = signup("alice")
        _, bob = signup("bob")
        alices = _create(client, alice)
        bobs = _create(client, bob)

        response = client.post(
            "/api/links/reorder",
            json={"links": [{"id": bobs["id"], "order": 1}, {"id": alices["id"], "order": 0}]},
            headers=bob,
        )

        assert response.status_code == 404
        assert response.json()["detail"] == (
            "One or more links not found or do not belong to you"
        )
        # Nothing changed
        assert client.get("/api/links", headers=bob).json()["links"][0]["order"] == 0

    def test_duplicate_ids_rejected(self, client, signup):
        _, headers = signup()
        link = _create(client, headers)

        response = client.post(
            "/api/links/reorder",
            json={"links": [{"id": link["id"], "order": 1}, {"id": link["id"], "order": 2}]},
            headers=headers,
        )

        assert response.status_code == 404

    def test_empty_list_rejected(self, client, signup):
        _, headers = signup()

        response = client.post("/api/links/reorder", json={"links": []}, headers=headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "At least one link is required"
