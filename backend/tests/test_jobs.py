class TestJobsCRUD:
    def _register_and_login(self, client, email, role="Recruiter", organization_name="Acme"):
        body = {
            "email": email,
            "password": "test-password-123",
            "display_name": "Test User",
            "role": role,
        }
        if role == "Recruiter" and organization_name:
            body["organization_name"] = organization_name
        client.post("/api/auth/register", json=body)
        return client.post("/api/auth/login", json={
            "email": email, "password": "test-password-123",
        }).json()["token"]

    def _auth(self, token):
        return {"Authorization": f"Bearer {token}"}

    def _create_job(self, client, token, **fields):
        body = {
            "title": "Software Engineer",
            "description": "Build and run our platform services.",
            "skills": ["Python", "SQL"],
            **fields,
        }
        return client.post("/api/jobs", json=body, headers=self._auth(token))

    def test_create_job(self, client):
        token = self._register_and_login(client, "rec@acme.io")
        r = self._create_job(client, token, location="Berlin", is_remote=True)
        assert r.status_code == 201
        data = r.json()
        assert data["title"] == "Software Engineer"
        assert data["company"] == "Acme"  # defaults to the organization name
        assert data["status"] == "open"
        assert data["is_remote"] is True
        assert data["application_count"] == 0

    def test_create_requires_organization(self, client):
        token = self._register_and_login(client, "solo@example.com", organization_name=None)
        r = self._create_job(client, token)
        assert r.status_code == 400

    def test_candidate_cannot_create(self, client):
        token = self._register_and_login(client, "cand@example.com", role="Candidate")
        r = self._create_job(client, token)
        assert r.status_code == 403

    def test_missing_description_is_400(self, client):
        token = self._register_and_login(client, "rec@acme.io")
        r = client.post("/api/jobs", json={"title": "No description"}, headers=self._auth(token))
        assert r.status_code == 400
        assert r.json()["success"] is False

    def test_list_and_filter(self, client):
        token = self._register_and_login(client, "rec@acme.io")
        h = self._auth(token)
        self._create_job(client, token, title="Data Engineer", location="Berlin")
        job_id = self._create_job(client, token, title="Designer", location="Lisbon").json()["id"]
        client.put(f"/api/jobs/{job_id}", json={"status": "closed"}, headers=h)

        r = client.get("/api/jobs", headers=h)
        assert r.json()["total"] == 2

        r = client.get("/api/jobs", params={"status": "open"}, headers=h)
        data = r.json()
        assert data["total"] == 1
        assert data["jobs"][0]["title"] == "Data Engineer"

        r = client.get("/api/jobs", params={"q": "design"}, headers=h)
        assert r.json()["total"] == 1

        r = client.get("/api/jobs", params={"location": "lisbon"}, headers=h)
        assert r.json()["jobs"][0]["title"] == "Designer"

    def test_pagination(self, client):
        token = self._register_and_login(client, "rec@acme.io")
        for i in range(3):
            self._create_job(client, token, title=f"Job {i}")
        r = client.get("/api/jobs", params={"page": 2, "per_page": 2}, headers=self._auth(token))
        data = r.json()
        assert data["total"] == 3
        assert len(data["jobs"]) == 1
        assert data["page"] == 2

    def test_update_job(self, client):
        token = self._register_and_login(client, "rec@acme.io")
        job_id = self._create_job(client, token).json()["id"]
        r = client.put(f"/api/jobs/{job_id}", json={
            "title": "Senior Software Engineer",
            "status": "paused",
        }, headers=self._auth(token))
        assert r.status_code == 200
        assert r.json()["title"] == "Senior Software Engineer"
        assert r.json()["status"] == "paused"

    def test_invalid_status_rejected(self, client):
        token = self._register_and_login(client, "rec@acme.io")
        job_id = self._create_job(client, token).json()["id"]
        r = client.put(f"/api/jobs/{job_id}", json={"status": "archived"}, headers=self._auth(token))
        assert r.status_code == 400
        assert "status" in r.json()["error"]

    def test_other_organization_cannot_modify(self, client):
        token = self._register_and_login(client, "rec@acme.io")
        job_id = self._create_job(client, token).json()["id"]
        other = self._register_and_login(client, "rec@globex.com", organization_name="Globex")

        r = client.put(f"/api/jobs/{job_id}", json={"title": "Hijacked"}, headers=self._auth(other))
        assert r.status_code == 403
        r = client.delete(f"/api/jobs/{job_id}", headers=self._auth(other))
        assert r.status_code == 403

    def test_delete_job(self, client):
        token = self._register_and_login(client, "rec@acme.io")
        h = self._auth(token)
        job_id = self._create_job(client, token).json()["id"]

        r = client.delete(f"/api/jobs/{job_id}", headers=h)
        assert r.status_code == 200

        r = client.get(f"/api/jobs/{job_id}", headers=h)
        assert r.status_code == 404

    def test_job_posting_pdf(self, client):
        token = self._register_and_login(client, "rec@acme.io")
        job_id = self._create_job(
            client,
            token,
            title="Platform Engineer",
            requirements="5+ years with distributed systems",
            salary_range="€80k – €100k",
        ).json()["id"]

        r = client.get(f"/api/jobs/{job_id}/pdf", headers=self._auth(token))
        assert r.status_code == 200
        assert r.headers["content-type"] == "application/pdf"
        assert 'filename="platform-engineer.pdf"' in r.headers["content-disposition"]
        assert r.content.startswith(b"%PDF")


class TestJobMatch:
    def _register_and_login(self, client, email, role):
        body = {
            "email": email,
            "password": "test-password-123",
            "display_name": "Test User",
            "role": role,
        }
        if role == "Recruiter":
            body["organization_name"] = "Acme"
        client.post("/api/auth/register", json=body)
        return client.post("/api/auth/login", json={
            "email": email, "password": "test-password-123",
        }).json()["token"]

    def _auth(self, token):
        return {"Authorization": f"Bearer {token}"}

    def test_scored_jobs_first(self, client, fake_llm):
        rec = self._register_and_login(client, "rec@acme.io", "Recruiter")
        ids = []
        for title in ("Frontend", "Backend", "Data"):
            r = client.post("/api/jobs", json={"title": title, "description": "Role"}, headers=self._auth(rec))
            ids.append(r.json()["id"])

        cand = self._register_and_login(client, "cand@example.com", "Candidate")
        client.put("/api/users/me", json={"skills": ["Python"], "years_of_experience": 4}, headers=self._auth(cand))

        # Open jobs are scored in posting order
        fake_llm.queue("40", "Score: 140", "no idea")

        r = client.post("/api/jobs/match", headers=self._auth(cand))
        assert r.status_code == 200
        data = r.json()
        assert data["scores"] == {ids[0]: 40, ids[1]: 100}
        assert [j["id"] for j in data["jobs"]] == [ids[1], ids[0], ids[2]]

    def test_recruiter_cannot_match(self, client, fake_llm):
        rec = self._register_and_login(client, "rec@acme.io", "Recruiter")
        r = client.post("/api/jobs/match", headers=self._auth(rec))
        assert r.status_code == 403
