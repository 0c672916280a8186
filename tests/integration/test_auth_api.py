"""Auth endpoints end to end through the ASGI app."""

from urllib.parse import parse_qs, urlparse

from conftest import DEFAULT_PASSWORD, auth_headers, cookie_header, refresh_cookie_from

NEW_PASSWORD = "N3w$ecret!"


async def register(client, email="ann@example.com", name="Ann", password=DEFAULT_PASSWORD):
    return await client.post("/api/auth/register", json={"name": name, "email": email, "password": password})


async def refresh(client, token):
    client.cookies.clear()
    return await client.post("/api/auth/refresh", headers=cookie_header(token))


class TestRegisterAndLogin:
    async def test_register_starts_session(self, client):
        resp = await register(client, email="  Ann@Example.com ")

        assert resp.status_code == 201
        body = resp.json()
        assert body["token_type"] == "bearer"
        assert body["user"]["email"] == "ann@example.com"
        assert "password" not in str(body["user"])
        assert refresh_cookie_from(resp)
        assert "httponly" in resp.headers["set-cookie"].lower()

        me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        assert me.status_code == 200
        assert me.json()["id"] == body["user"]["id"]

    async def test_duplicate_email(self, client):
        await register(client)
        resp = await register(client, email="ANN@example.com", name="Other Ann")

        assert resp.status_code == 409
        assert resp.json()["error"] == "conflict"
        assert resp.json()["details"] == {"email": "Email already in use"}

    async def test_weak_password(self, client):
        resp = await register(client, password="password")

        assert resp.status_code == 400
        body = resp.json()
        assert body["error"] == "validation_error"
        assert "password" in body["details"]

    async def test_login(self, client, make_user):
        await make_user("bob@example.com", "Bob")

        ok = await client.post("/api/auth/login", json={"email": "BOB@example.com", "password": DEFAULT_PASSWORD})
        assert ok.status_code == 200
        assert refresh_cookie_from(ok)

        wrong = await client.post("/api/auth/login", json={"email": "bob@example.com", "password": "Wr0ng$pass"})
        unknown = await client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "Wr0ng$pass"})
        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json()["message"] == unknown.json()["message"] == "Invalid email or password"

    async def test_me_requires_token(self, client, make_user):
        assert (await client.get("/api/auth/me")).status_code == 401
        bad = await client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert bad.status_code == 401

        user = await make_user("carl@example.com", "Carl")
        assert (await client.get("/api/auth/me", headers=auth_headers(user.id))).status_code == 200


class TestRefresh:
    async def test_rotation_and_reuse_detection(self, client):
        t1 = refresh_cookie_from(await register(client))

        first = await refresh(client, t1)
        assert first.status_code == 200
        t2 = refresh_cookie_from(first)
        assert t2 and t2 != t1

        # replaying the old token ends the session for everyone
        replay = await refresh(client, t1)
        assert replay.status_code == 401
        assert refresh_cookie_from(replay) is None

        assert (await refresh(client, t2)).status_code == 401

    async def test_missing_cookie(self, client):
        client.cookies.clear()
        resp = await client.post("/api/auth/refresh")
        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid or expired session"

    async def test_access_token_is_not_a_refresh_token(self, client):
        access = (await register(client)).json()["access_token"]
        assert (await refresh(client, access)).status_code == 401

    async def test_logout_ends_session(self, client):
        t1 = refresh_cookie_from(await register(client))

        client.cookies.clear()
        out = await client.post("/api/auth/logout", headers=cookie_header(t1))
        assert out.status_code == 200
        assert refresh_cookie_from(out) is None

        assert (await refresh(client, t1)).status_code == 401

    async def test_logout_without_session(self, client):
        client.cookies.clear()
        assert (await client.post("/api/auth/logout")).status_code == 200


class TestPasswordReset:
    async def test_response_does_not_reveal_account(self, client, make_user, reset_links):
        await make_user("dana@example.com", "Dana")

        known = await client.post("/api/auth/forgot-password", json={"email": "dana@example.com"})
        unknown = await client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})

        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json()
        assert [email for email, _ in reset_links.sent] == ["dana@example.com"]

    async def test_reset_flow(self, client, make_user, reset_links):
        user = await make_user("erin@example.com", "Erin")
        login = await client.post("/api/auth/login", json={"email": "erin@example.com", "password": DEFAULT_PASSWORD})
        old_refresh = refresh_cookie_from(login)

        await client.post("/api/auth/forgot-password", json={"email": "erin@example.com"})
        _, link = reset_links.sent[-1]
        query = parse_qs(urlparse(link).query)
        assert query["userId"] == [str(user.id)]

        reset = await client.post(
            "/api/auth/reset-password",
            json={"user_id": str(user.id), "token": query["token"][0], "password": NEW_PASSWORD},
        )
        assert reset.status_code == 200

        assert (await refresh(client, old_refresh)).status_code == 401
        old = await client.post("/api/auth/login", json={"email": "erin@example.com", "password": DEFAULT_PASSWORD})
        assert old.status_code == 401
        new = await client.post("/api/auth/login", json={"email": "erin@example.com", "password": NEW_PASSWORD})
        assert new.status_code == 200

        again = await client.post(
            "/api/auth/reset-password",
            json={"user_id": str(user.id), "token": query["token"][0], "password": "Y3t$another"},
        )
        assert again.status_code == 400
        assert again.json()["message"] == "Invalid or expired reset token"
