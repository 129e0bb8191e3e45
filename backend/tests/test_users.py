class TestUsers:
    def _register_and_login(self, client, email, role="Candidate", name="Test User", **extra):
        r = client.post("/api/auth/register", json={
            "email": email,
            "password": "test-password-123",
            "display_name": name,
            "role": role,
            **extra,
        })
        user_id = r.json()["id"]
        token = client.post("/api/auth/login", json={
            "email": email, "password": "test-password-123",
        }).json()["token"]
        return token, user_id

    def _auth(self, token):
        return {"Authorization": f"Bearer {token}"}

    def test_update_profile(self, client):
        token, _ = self._register_and_login(client, "cand@example.com")
        r = client.put("/api/users/me", json={
            "headline": "Backend engineer",
            "skills": [" Python ", "", "SQL"],
            "years_of_experience": 6,
        }, headers=self._auth(token))
        assert r.status_code == 200
        data = r.json()
        assert data["headline"] == "Backend engineer"
        assert data["skills"] == ["Python", "SQL"]
        assert data["years_of_experience"] == 6

    def test_null_display_name_is_ignored(self, client):
        token, _ = self._register_and_login(client, "cand@example.com", name="Casey")
        r = client.put("/api/users/me", json={"display_name": None}, headers=self._auth(token))
        assert r.status_code == 200
        assert r.json()["display_name"] == "Casey"

    def test_negative_experience_rejected(self, client):
        token, _ = self._register_and_login(client, "cand@example.com")
        r = client.put("/api/users/me", json={"years_of_experience": -1}, headers=self._auth(token))
        assert r.status_code == 400

    def test_get_user(self, client):
        token, _ = self._register_and_login(client, "a@example.com")
        _, other_id = self._register_and_login(client, "b@example.com", name="Blake")
        r = client.get(f"/api/users/{other_id}", headers=self._auth(token))
        assert r.status_code == 200
        assert r.json()["display_name"] == "Blake"

    def test_get_unknown_user(self, client):
        token, _ = self._register_and_login(client, "a@example.com")
        r = client.get("/api/users/missing", headers=self._auth(token))
        assert r.status_code == 404
        assert r.json() == {"success": False, "error": "User not found"}

    def test_list_filters_by_role_and_skill(self, client):
        token, _ = self._register_and_login(client, "rec@example.com", role="Recruiter")
        cand_token, cand_id = self._register_and_login(client, "cand@example.com")
        self._register_and_login(client, "cand2@example.com")
        client.put("/api/users/me", json={"skills": ["Rust"]}, headers=self._auth(cand_token))

        r = client.get("/api/users", params={"role": "Candidate"}, headers=self._auth(token))
        assert r.json()["total"] == 2

        r = client.get("/api/users", params={"role": "Candidate", "skill": "rust"}, headers=self._auth(token))
        data = r.json()
        assert data["total"] == 1
        assert data["users"][0]["id"] == cand_id


class TestOrganizations:
    def _register_and_login(self, client, email, role="Recruiter"):
        client.post("/api/auth/register", json={
            "email": email,
            "password": "test-password-123",
            "display_name": "Test User",
            "role": role,
        })
        return client.post("/api/auth/login", json={
            "email": email, "password": "test-password-123",
        }).json()["token"]

    def _auth(self, token):
        return {"Authorization": f"Bearer {token}"}

    def test_recruiter_creates_and_joins(self, client):
        token = self._register_and_login(client, "rec@globex.com")
        r = client.post("/api/organizations", json={
            "name": "Globex",
            "domains": ["Globex.com", " "],
        }, headers=self._auth(token))
        assert r.status_code == 201
        org = r.json()
        assert org["domains"] == ["globex.com"]
        assert org["member_count"] == 1

        me = client.get("/api/auth/me", headers=self._auth(token)).json()
        assert me["organization_id"] == org["id"]

    def test_candidate_cannot_create(self, client):
        token = self._register_and_login(client, "cand@example.com", role="Candidate")
        r = client.post("/api/organizations", json={"name": "Nope"}, headers=self._auth(token))
        assert r.status_code == 403

    def test_unknown_organization(self, client):
        token = self._register_and_login(client, "rec@globex.com")
        r = client.get("/api/organizations/missing", headers=self._auth(token))
        assert r.status_code == 404

    def test_public_mail_domains_are_not_claimed(self, client):
        token = self._register_and_login(client, "rec@gmail.com")
        r = client.post("/api/organizations", json={
            "name": "Initech",
            "domains": ["gmail.com", "initech.com"],
        }, headers=self._auth(token))
        assert r.json()["domains"] == ["initech.com"]

        iv = self._register_and_login(client, "someone@gmail.com", role="Interviewer")
        assert client.get("/api/auth/me", headers=self._auth(iv)).json()["organization_id"] is None

    def test_recruiter_adds_interviewer(self, client):
        rec = self._register_and_login(client, "rec@globex.com")
        org_id = client.post("/api/organizations", json={"name": "Globex"}, headers=self._auth(rec)).json()["id"]
        iv = self._register_and_login(client, "contractor@freelance.dev", role="Interviewer")

        r = client.post(f"/api/organizations/{org_id}/members", json={
            "email": "Contractor@freelance.dev",
        }, headers=self._auth(rec))
        assert r.status_code == 200
        assert r.json()["member_count"] == 2
        assert client.get("/api/auth/me", headers=self._auth(iv)).json()["organization_id"] == org_id

    def test_add_member_rules(self, client):
        rec = self._register_and_login(client, "rec@globex.com")
        org_id = client.post("/api/organizations", json={"name": "Globex"}, headers=self._auth(rec)).json()["id"]
        self._register_and_login(client, "cand@example.com", role="Candidate")
        other = self._register_and_login(client, "rec@initech.com")
        client.post("/api/organizations", json={"name": "Initech"}, headers=self._auth(other))

        url = f"/api/organizations/{org_id}/members"
        assert client.post(url, json={"email": "cand@example.com"}, headers=self._auth(rec)).status_code == 400
        assert client.post(url, json={"email": "rec@initech.com"}, headers=self._auth(rec)).status_code == 409
        assert client.post(url, json={"email": "nobody@globex.com"}, headers=self._auth(rec)).status_code == 404
        # Outsiders cannot add themselves
        assert client.post(url, json={"email": "rec@initech.com"}, headers=self._auth(other)).status_code == 403
