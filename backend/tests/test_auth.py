import pytest

from hirevision.config import settings
from hirevision.services import sso_service


class TestRegisterAndLogin:
    def _register(self, client, email="ada@example.com", password="correct-horse", **extra):
        body = {"email": email, "password": password, "display_name": "Ada Lovelace", **extra}
        return client.post("/api/auth/register", json=body)

    def _auth(self, token):
        return {"Authorization": f"Bearer {token}"}

    def test_register_defaults_to_candidate(self, client):
        r = self._register(client)
        assert r.status_code == 201
        data = r.json()
        assert data["email"] == "ada@example.com"
        assert data["role"] == "Candidate"
        assert data["organization_id"] is None
        assert "password_hash" not in data

    def test_register_normalizes_email(self, client):
        r = self._register(client, email="  Ada@Example.COM ")
        assert r.json()["email"] == "ada@example.com"

    def test_register_recruiter_creates_organization(self, client):
        r = self._register(
            client,
            email="rita@acme.io",
            role="Recruiter",
            organization_name="Acme",
        )
        assert r.status_code == 201
        org_id = r.json()["organization_id"]
        assert org_id

        token = client.post("/api/auth/login", json={
            "email": "rita@acme.io", "password": "correct-horse",
        }).json()["token"]
        org = client.get(f"/api/organizations/{org_id}", headers=self._auth(token)).json()
        assert org["name"] == "Acme"
        assert org["domains"] == ["acme.io"]
        assert org["member_count"] == 1

    def test_duplicate_email_conflicts(self, client):
        self._register(client)
        r = self._register(client)
        assert r.status_code == 409
        assert r.json()["success"] is False

    def test_missing_field_is_400(self, client):
        r = client.post("/api/auth/register", json={"email": "ada@example.com", "display_name": "Ada"})
        assert r.status_code == 400
        body = r.json()
        assert body["success"] is False
        assert "password" in body["error"]

    def test_short_password_rejected(self, client):
        r = self._register(client, password="short")
        assert r.status_code == 400

    def test_invalid_role_rejected(self, client):
        r = self._register(client, role="Admin")
        assert r.status_code == 400

    def test_login_and_me(self, client):
        user_id = self._register(client).json()["id"]
        r = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "correct-horse"})
        assert r.status_code == 200
        data = r.json()
        assert data["user_id"] == user_id
        assert data["expires_in_seconds"] == settings.session_ttl_seconds

        r = client.get("/api/auth/me", headers=self._auth(data["token"]))
        assert r.status_code == 200
        assert r.json()["id"] == user_id

    def test_wrong_password(self, client):
        self._register(client)
        r = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "wrong-horse"})
        assert r.status_code == 401
        assert r.json() == {"success": False, "error": "Invalid email or password"}

    def test_unknown_email(self, client):
        r = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "whatever1"})
        assert r.status_code == 401

    def test_login_throttled_after_repeated_failures(self, client):
        self._register(client)
        for _ in range(3):
            r = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "bad-password"})
            assert r.status_code == 401

        r = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "correct-horse"})
        assert r.status_code == 429
        assert int(r.headers["Retry-After"]) > 0
        assert "Too many failed attempts" in r.json()["error"]

    def test_throttle_is_per_email(self, client):
        self._register(client)
        self._register(client, email="grace@example.com")
        for _ in range(3):
            client.post("/api/auth/login", json={"email": "ada@example.com", "password": "bad-password"})

        r = client.post("/api/auth/login", json={"email": "grace@example.com", "password": "correct-horse"})
        assert r.status_code == 200

    def test_logout_invalidates_token(self, client):
        self._register(client)
        token = client.post("/api/auth/login", json={
            "email": "ada@example.com", "password": "correct-horse",
        }).json()["token"]

        r = client.post("/api/auth/logout", headers=self._auth(token))
        assert r.status_code == 200

        r = client.get("/api/auth/me", headers=self._auth(token))
        assert r.status_code == 401


class TestAuthGuard:
    @pytest.mark.parametrize("path", ["/api/jobs", "/api/users", "/api/conversations", "/api/posts/explore"])
    def test_requires_bearer_token(self, client, path):
        r = client.get(path)
        assert r.status_code == 401
        assert r.json() == {"success": False, "error": "Missing bearer token"}

    def test_rejects_unknown_token(self, client):
        r = client.get("/api/jobs", headers={"Authorization": "Bearer not-a-real-token"})
        assert r.status_code == 401

    def test_health_is_open(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"

    def test_unknown_route_uses_error_envelope(self, client):
        r = client.get("/api/nope")
        assert r.status_code == 404
        assert r.json() == {"success": False, "error": "Not Found"}

    def test_wrong_method_uses_error_envelope(self, client):
        r = client.delete("/health")
        assert r.status_code == 405
        assert r.json() == {"success": False, "error": "Method Not Allowed"}
        assert "GET" in r.headers["allow"]


class TestSSO:
    @pytest.fixture
    def workos(self, monkeypatch):
        monkeypatch.setattr(settings, "workos_api_key", "sk_test")
        monkeypatch.setattr(settings, "workos_client_id", "client_123")

        async def fake_exchange(code):
            if code == "bad":
                raise sso_service.SSOError("Failed to exchange authorization code")
            return {
                "id": "prof_1",
                "email": "Sam@Example.com",
                "first_name": "Sam",
                "last_name": "Rivera",
                "organization_id": None,
            }

        monkeypatch.setattr(sso_service, "exchange_code", fake_exchange)

    def test_authorize_not_configured(self, client):
        r = client.get("/api/auth/sso/authorize")
        assert r.status_code == 503
        assert r.json()["success"] is False

    def test_authorize_url(self, client, workos):
        r = client.get("/api/auth/sso/authorize", params={"provider": "github"})
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["authorization_url"].startswith("https://api.workos.com/sso/authorize?")
        assert "provider=GitHubOAuth" in data["authorization_url"]
        assert f"state={data['state']}" in data["authorization_url"]

    def _state(self, client):
        return client.get("/api/auth/sso/authorize").json()["data"]["state"]

    def test_callback_creates_candidate(self, client, workos):
        r = client.post("/api/auth/sso/callback", json={"code": "abc", "state": self._state(client)})
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["user"]["email"] == "sam@example.com"
        assert data["user"]["display_name"] == "Sam Rivera"
        assert data["user"]["role"] == "Candidate"

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
        assert me.json()["id"] == data["user_id"]

    def test_callback_reuses_existing_user(self, client, workos):
        first = client.post("/api/auth/sso/callback", json={"code": "abc", "state": self._state(client)}).json()["data"]
        second = client.post("/api/auth/sso/callback", json={"code": "abc", "state": self._state(client)}).json()["data"]
        assert first["user_id"] == second["user_id"]

    def test_callback_exchange_failure(self, client, workos):
        r = client.post("/api/auth/sso/callback", json={"code": "bad", "state": self._state(client)})
        assert r.status_code == 502

    def test_callback_rejects_unknown_state(self, client, workos):
        r = client.post("/api/auth/sso/callback", json={"code": "abc", "state": "forged"})
        assert r.status_code == 400
        assert r.json() == {"success": False, "error": "Invalid or expired SSO state"}

    def test_callback_requires_state(self, client, workos):
        r = client.post("/api/auth/sso/callback", json={"code": "abc"})
        assert r.status_code == 400

    def test_state_is_single_use(self, client, workos):
        state = self._state(client)
        assert client.post("/api/auth/sso/callback", json={"code": "abc", "state": state}).status_code == 200
        r = client.post("/api/auth/sso/callback", json={"code": "abc", "state": state})
        assert r.status_code == 400

    def test_redirect_without_code(self, client, workos):
        r = client.get("/api/auth/sso/callback", follow_redirects=False)
        assert r.status_code == 307
        assert r.headers["location"] == f"{settings.frontend_url}/login?error=no_code"

    def test_redirect_not_configured(self, client):
        r = client.get("/api/auth/sso/callback", params={"code": "abc", "state": "s"}, follow_redirects=False)
        assert r.headers["location"].endswith("/login?error=not_configured")

    def test_redirect_invalid_state(self, client, workos):
        r = client.get("/api/auth/sso/callback", params={"code": "abc", "state": "forged"}, follow_redirects=False)
        assert r.headers["location"].endswith("/login?error=invalid_state")

    def test_redirect_token_failed(self, client, workos):
        r = client.get(
            "/api/auth/sso/callback",
            params={"code": "bad", "state": self._state(client)},
            follow_redirects=False,
        )
        assert r.headers["location"].endswith("/login?error=token_failed")

    def test_redirect_to_dashboard_with_token(self, client, workos):
        r = client.get(
            "/api/auth/sso/callback",
            params={"code": "abc", "state": self._state(client)},
            follow_redirects=False,
        )
        location = r.headers["location"]
        assert location.startswith(f"{settings.frontend_url}/dashboard?token=")
        token = location.split("token=", 1)[1]
        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
