"""End-to-end dashboard and intake scenarios against the in-memory store."""

from tests.conftest import (
    ADMIN_EMAIL,
    SITE_ID,
    SITE_KEY,
    SITE_ORIGIN,
    session_cookie_header,
    session_token_from,
)


class TestAdminJourney:
    """Sign in, inspect the session, then read sites and submissions."""

    async def test_login_verify_and_browse(self, client, mock_send_code):
        # Site posts a few submissions first
        for i in range(12):
            accepted = await client.post(
                "/api/forms/submit",
                json={"siteId": SITE_ID, "data": {"seq": i}},
                headers={"Origin": SITE_ORIGIN, "X-Forms-Site-Key": SITE_KEY},
            )
            assert accepted.status_code == 200

        login = await client.post("/api/forms/login", json={"email": ADMIN_EMAIL})
        assert login.status_code == 200
        challenge_id = login.json()["challengeId"]
        code = mock_send_code.call_args.kwargs["code"]
        assert len(code) == 6

        verify = await client.post(
            "/api/forms/verify",
            json={"email": ADMIN_EMAIL, "code": code, "challengeId": challenge_id},
        )
        assert verify.status_code == 200
        token = session_token_from(verify)
        cookie = session_cookie_header(token)

        me = await client.get("/api/forms/me", headers=cookie)
        assert me.json()["email"] == ADMIN_EMAIL

        sites = await client.get("/api/forms/sites", headers=cookie)
        assert len(sites.json()["sites"]) >= 1

        submissions = await client.get("/api/forms/submissions", params={"limit": "10"}, headers=cookie)
        rows = submissions.json()["submissions"]
        assert len(rows) <= 10
        stamps = [row["submitted_at"] for row in rows]
        assert stamps == sorted(stamps, reverse=True)

        logout = await client.post("/api/forms/logout", headers=cookie)
        assert logout.status_code == 200
        after = await client.get("/api/forms/me", headers=cookie)
        assert after.status_code == 401


class TestIntakeJourney:
    """Unregistered and cross-origin submissions are refused."""

    async def test_unregistered_site(self, client, row_store):
        response = await client.post(
            "/api/forms/submit",
            json={"siteId": "site-x", "data": {"a": "b"}},
            headers={"Origin": SITE_ORIGIN, "X-Forms-Site-Key": "whatever"},
        )

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid site."

    async def test_registered_site_wrong_origin(self, client, row_store):
        response = await client.post(
            "/api/forms/submit",
            json={"siteId": SITE_ID, "data": {"a": "b"}},
            headers={"Origin": "https://evil.example", "X-Forms-Site-Key": SITE_KEY},
        )

        assert response.status_code == 403
        assert response.json()["error"] == "Origin not allowed."
        assert row_store.rows("forms_submissions") == []
