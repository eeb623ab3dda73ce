"""Integration tests for user settings."""

import pytest


@pytest.mark.integration
class TestUserSettings:
    def test_get_profile(self, client, signup):
        _, headers = signup("ivy", name="Ivy")

        response = client.get("/api/user", headers=headers)

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["username"] == "ivy"
        assert user["name"] == "Ivy"
        assert user["theme"] == "default"
        assert user["buttonStyle"] == "rounded"
        assert user["socialLinks"] == []

    def test_partial_update_keeps_other_fields(self, client, signup):
        _, headers = signup("ivy", name="Ivy")

        response = client.patch(
            "/api/user",
            json={"bio": "Maker of <things>", "theme": "ocean"},
            headers=headers,
        )

        assert response.status_code == 200
        user = response.json()["user"]
        assert user["bio"] == "Maker of &lt;things&gt;"
        assert user["theme"] == "ocean"
        assert user["name"] == "Ivy"
        assert user["buttonStyle"] == "rounded"

    def test_social_links_are_replaced_in_order(self, client, signup):
        _, headers = signup()
        client.patch(
            "/api/user",
            json={"socialLinks": [{"platform": "twitter", "url": "https://twitter.com/a"}]},
            headers=headers,
        )

        response = client.patch(
            "/api/user",
            json={
                "socialLinks": [
                    {"platform": "github", "url": "https://github.com/a"},
                    {"platform": "youtube", "url": "https://youtube.com/@a"},
                ]
            },
            headers=headers,
        )

        social = response.json()["user"]["socialLinks"]
        assert [(s["platform"], s["order"]) for s in social] == [("github", 0), ("youtube", 1)]

        again = client.get("/api/user", headers=headers).json()["user"]["socialLinks"]
        assert [s["platform"] for s in again] == ["github", "youtube"]

    def test_empty_social_links_clear_the_set(self, client, signup):
        _, headers = signup()
        client.patch(
            "/api/user",
            json={"socialLinks": [{"platform": "twitch", "url": "https://twitch.tv/a"}]},
            headers=headers,
        )

        response = client.patch("/api/user", json={"socialLinks": []}, headers=headers)

        assert response.json()["user"]["socialLinks"] == []

    @pytest.mark.parametrize(
        "payload",
        [{"theme": "rainbow"}, {"buttonStyle": "blob"}, {"bio": "x" * 161}],
    )
    def test_invalid_values_rejected(self, client, signup, payload):
        _, headers = signup()

        response = client.patch("/api/user", json=payload, headers=headers)

        assert response.status_code == 400
