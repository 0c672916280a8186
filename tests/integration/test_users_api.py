"""User lookup and health endpoints."""

import uuid

from conftest import auth_headers


class TestUserSearch:
    async def test_prefix_search_excludes_caller(self, client, make_user):
        me = await make_user("sam@example.com", "Sam")
        await make_user("sandra@example.com", "Sandra")
        await make_user("bob@example.com", "Bob")

        resp = await client.get("/api/users/search", params={"q": "SA"}, headers=auth_headers(me.id))
        assert resp.status_code == 200
        assert [u["email"] for u in resp.json()["users"]] == ["sandra@example.com"]

    async def test_short_query_returns_nothing(self, client, make_user):
        me = await make_user("sam@example.com", "Sam")
        await make_user("sandra@example.com", "Sandra")

        resp = await client.get("/api/users/search", params={"q": "s"}, headers=auth_headers(me.id))
        assert resp.json() == {"users": []}

    async def test_get_user(self, client, make_user):
        me = await make_user("sam@example.com", "Sam")

        found = await client.get(f"/api/users/{me.id}", headers=auth_headers(me.id))
        assert found.status_code == 200
        assert found.json()["name"] == "Sam"

        missing = await client.get(f"/api/users/{uuid.uuid4()}", headers=auth_headers(me.id))
        assert missing.status_code == 404


class TestHealth:
    async def test_liveness(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    async def test_readiness_reports_checks(self, client):
        resp = await client.get("/api/health")
        body = resp.json()
        assert body["status"] == "healthy"
        assert body["checks"]["database"] == "healthy"
        assert "redis" in body["checks"]
