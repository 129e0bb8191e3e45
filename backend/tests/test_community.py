class CommunityBase:
    def _register_and_login(self, client, email, role="Candidate"):
        user_id = client.post("/api/auth/register", json={
            "email": email,
            "password": "test-password-123",
            "display_name": email.split("@")[0].title(),
            "role": role,
        }).json()["id"]
        token = client.post("/api/auth/login", json={
            "email": email, "password": "test-password-123",
        }).json()["token"]
        return token, user_id

    def _auth(self, token):
        return {"Authorization": f"Bearer {token}"}

    def _post(self, client, token, content="We're hiring Python engineers in Berlin!", **kwargs):
        return client.post("/api/posts", data={"content": content}, headers=self._auth(token), **kwargs)


class TestPosts(CommunityBase):
    def test_post_without_ai(self, client):
        token, user_id = self._register_and_login(client, "dana@example.com")
        r = self._post(client, token)
        assert r.status_code == 201
        data = r.json()
        assert data["author_id"] == user_id
        assert data["author_name"] == "Dana"
        assert data["author_username"] == "dana"
        assert data["hashtags"] == []
        assert data["like_count"] == 0

    def test_post_gets_hashtags(self, client, fake_llm):
        token, _ = self._register_and_login(client, "dana@example.com")
        fake_llm.queue("#hiring, python ,#Berlin,#hiring")
        r = self._post(client, token)
        assert r.status_code == 201
        assert r.json()["hashtags"] == ["#hiring", "#python", "#Berlin"]

    def test_flagged_post_rejected(self, client, fake_llm):
        token, _ = self._register_and_login(client, "dana@example.com")
        fake_llm.safety = {
            "ratings": [
                {"category": "HARM_CATEGORY_HARASSMENT", "probability": "HIGH"},
                {"category": "HARM_CATEGORY_HATE_SPEECH", "probability": "LOW"},
            ],
            "block_reason": None,
        }
        r = self._post(client, token, content="something nasty")
        assert r.status_code == 422
        body = r.json()
        assert body["success"] is False
        assert "HARM_CATEGORY_HARASSMENT" in body["error"]
        assert "HATE_SPEECH" not in body["error"]

        explore = client.get("/api/posts/explore", headers=self._auth(token)).json()
        assert explore["total"] == 0

    def test_moderation_failure_allows_post(self, client, fake_llm):
        token, _ = self._register_and_login(client, "dana@example.com")
        fake_llm.safety = RuntimeError("safety service down")
        r = self._post(client, token)
        assert r.status_code == 201

    def test_blank_content_rejected(self, client):
        token, _ = self._register_and_login(client, "dana@example.com")
        r = self._post(client, token, content="   ")
        assert r.status_code == 400

    def test_image_attachment(self, client):
        token, user_id = self._register_and_login(client, "dana@example.com")
        r = self._post(client, token, files={"image": ("team photo.png", b"\x89PNG\r\n\x1a\nfake", "image/png")})
        assert r.status_code == 201
        image_key = r.json()["image_key"]
        assert image_key.startswith(f"posts/{user_id}/")
        assert image_key.endswith("_team_photo.png")

        r = client.get(f"/api/storage/{image_key}", headers=self._auth(token))
        assert r.status_code == 200
        assert r.content == b"\x89PNG\r\n\x1a\nfake"

    def test_non_image_attachment_rejected(self, client):
        token, _ = self._register_and_login(client, "dana@example.com")
        r = self._post(client, token, files={"image": ("notes.txt", b"hello", "text/plain")})
        assert r.status_code == 400

    def test_like_toggles(self, client):
        token, user_id = self._register_and_login(client, "dana@example.com")
        post_id = self._post(client, token).json()["id"]

        r = client.post(f"/api/posts/{post_id}/like", headers=self._auth(token))
        assert r.json()["likes"] == [user_id]
        assert r.json()["like_count"] == 1

        r = client.post(f"/api/posts/{post_id}/like", headers=self._auth(token))
        assert r.json()["likes"] == []
        assert r.json()["like_count"] == 0

    def test_comments(self, client):
        token, _ = self._register_and_login(client, "dana@example.com")
        other, other_id = self._register_and_login(client, "eli@example.com")
        post_id = self._post(client, token).json()["id"]

        r = client.post(f"/api/posts/{post_id}/comments", json={"comment": "Congrats!"}, headers=self._auth(other))
        assert r.status_code == 201
        comments = r.json()["comments"]
        assert len(comments) == 1
        assert comments[0]["user_id"] == other_id
        assert comments[0]["comment"] == "Congrats!"

    def test_unknown_post(self, client):
        token, _ = self._register_and_login(client, "dana@example.com")
        r = client.post("/api/posts/missing/like", headers=self._auth(token))
        assert r.status_code == 404

    def test_following_feed(self, client):
        dana, _ = self._register_and_login(client, "dana@example.com")
        eli, eli_id = self._register_and_login(client, "eli@example.com")
        fay, _ = self._register_and_login(client, "fay@example.com")
        self._post(client, eli, content="Eli's update")
        self._post(client, fay, content="Fay's update")

        r = client.get("/api/posts/following", headers=self._auth(dana))
        assert r.json() == {"posts": [], "total": 0}

        conn_id = client.post("/api/connections", json={"receiver_id": eli_id}, headers=self._auth(dana)).json()["id"]
        client.put(f"/api/connections/{conn_id}", json={"status": "accepted"}, headers=self._auth(eli))

        r = client.get("/api/posts/following", headers=self._auth(dana))
        data = r.json()
        assert data["total"] == 1
        assert data["posts"][0]["content"] == "Eli's update"

        r = client.get("/api/posts/explore", headers=self._auth(dana))
        assert r.json()["total"] == 2


class TestConnections(CommunityBase):
    def test_request_and_accept(self, client):
        dana, dana_id = self._register_and_login(client, "dana@example.com")
        eli, eli_id = self._register_and_login(client, "eli@example.com")

        r = client.post("/api/connections", json={"receiver_id": eli_id}, headers=self._auth(dana))
        assert r.status_code == 201
        conn = r.json()
        assert conn["status"] == "pending"
        assert conn["requester_id"] == dana_id

        r = client.put(f"/api/connections/{conn['id']}", json={"status": "accepted"}, headers=self._auth(eli))
        assert r.status_code == 200
        assert r.json()["status"] == "accepted"

        r = client.get("/api/connections", params={"status": "accepted"}, headers=self._auth(dana))
        assert r.json()["total"] == 1

    def test_only_receiver_can_respond(self, client):
        dana, _ = self._register_and_login(client, "dana@example.com")
        _, eli_id = self._register_and_login(client, "eli@example.com")
        conn_id = client.post("/api/connections", json={"receiver_id": eli_id}, headers=self._auth(dana)).json()["id"]

        r = client.put(f"/api/connections/{conn_id}", json={"status": "accepted"}, headers=self._auth(dana))
        assert r.status_code == 403

    def test_duplicate_request_conflicts(self, client):
        dana, _ = self._register_and_login(client, "dana@example.com")
        _, eli_id = self._register_and_login(client, "eli@example.com")
        client.post("/api/connections", json={"receiver_id": eli_id}, headers=self._auth(dana))
        r = client.post("/api/connections", json={"receiver_id": eli_id}, headers=self._auth(dana))
        assert r.status_code == 409

    def test_cannot_connect_to_self(self, client):
        dana, dana_id = self._register_and_login(client, "dana@example.com")
        r = client.post("/api/connections", json={"receiver_id": dana_id}, headers=self._auth(dana))
        assert r.status_code == 400

    def test_invalid_response_status(self, client):
        dana, _ = self._register_and_login(client, "dana@example.com")
        eli, eli_id = self._register_and_login(client, "eli@example.com")
        conn_id = client.post("/api/connections", json={"receiver_id": eli_id}, headers=self._auth(dana)).json()["id"]
        r = client.put(f"/api/connections/{conn_id}", json={"status": "maybe"}, headers=self._auth(eli))
        assert r.status_code == 400
