class TestConversations:
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

    def _pair(self, client):
        alex, alex_id = self._register_and_login(client, "alex@example.com", "Recruiter")
        blair, blair_id = self._register_and_login(client, "blair@example.com")
        conv = client.post("/api/conversations", json={"participant_id": blair_id}, headers=self._auth(alex)).json()
        return alex, blair, alex_id, blair_id, conv["id"]

    def test_start_conversation(self, client):
        alex, _, alex_id, blair_id, _ = self._pair(client)
        r = client.get("/api/conversations", headers=self._auth(alex))
        data = r.json()
        assert data["total"] == 1
        conv = data["conversations"][0]
        assert set(conv["participant_ids"]) == {alex_id, blair_id}
        assert {p["name"] for p in conv["participants"]} == {"Alex", "Blair"}
        assert conv["unread_count"] == 0

    def test_start_returns_existing_conversation(self, client):
        alex, blair, alex_id, _, conv_id = self._pair(client)
        r = client.post("/api/conversations", json={"participant_id": alex_id}, headers=self._auth(blair))
        assert r.json()["id"] == conv_id
        assert client.get("/api/conversations", headers=self._auth(alex)).json()["total"] == 1

    def test_cannot_message_self(self, client):
        alex, alex_id = self._register_and_login(client, "alex@example.com")
        r = client.post("/api/conversations", json={"participant_id": alex_id}, headers=self._auth(alex))
        assert r.status_code == 400

    def test_unknown_participant(self, client):
        alex, _ = self._register_and_login(client, "alex@example.com")
        r = client.post("/api/conversations", json={"participant_id": "missing"}, headers=self._auth(alex))
        assert r.status_code == 404

    def test_send_message_increments_receiver_unread(self, client):
        alex, blair, alex_id, blair_id, conv_id = self._pair(client)
        for text in ("Hi Blair!", "Are you open to a chat?"):
            r = client.post(f"/api/conversations/{conv_id}/messages", json={"content": text}, headers=self._auth(alex))
            assert r.status_code == 201
            assert r.json()["receiver_id"] == blair_id
            assert r.json()["sender_role"] == "Recruiter"

        blair_view = client.get("/api/conversations", headers=self._auth(blair)).json()["conversations"][0]
        assert blair_view["unread_count"] == 2
        assert blair_view["last_message"] == "Are you open to a chat?"

        alex_view = client.get("/api/conversations", headers=self._auth(alex)).json()["conversations"][0]
        assert alex_view["unread_count"] == 0

    def test_mark_read_resets_unread(self, client):
        alex, blair, _, _, conv_id = self._pair(client)
        client.post(f"/api/conversations/{conv_id}/messages", json={"content": "Hello"}, headers=self._auth(alex))

        r = client.post(f"/api/conversations/{conv_id}/read", headers=self._auth(blair))
        assert r.status_code == 200

        blair_view = client.get("/api/conversations", headers=self._auth(blair)).json()["conversations"][0]
        assert blair_view["unread_count"] == 0
        messages = client.get(f"/api/conversations/{conv_id}/messages", headers=self._auth(blair)).json()["messages"]
        assert all(m["is_read"] for m in messages)

    def test_messages_after_cursor(self, client):
        alex, blair, _, _, conv_id = self._pair(client)
        first = client.post(f"/api/conversations/{conv_id}/messages", json={"content": "one"}, headers=self._auth(alex)).json()
        client.post(f"/api/conversations/{conv_id}/messages", json={"content": "two"}, headers=self._auth(blair))
        client.post(f"/api/conversations/{conv_id}/messages", json={"content": "three"}, headers=self._auth(alex))

        r = client.get(f"/api/conversations/{conv_id}/messages", headers=self._auth(blair))
        assert [m["content"] for m in r.json()["messages"]] == ["one", "two", "three"]

        r = client.get(
            f"/api/conversations/{conv_id}/messages",
            params={"after": first["id"]},
            headers=self._auth(blair),
        )
        assert [m["content"] for m in r.json()["messages"]] == ["two", "three"]

    def test_non_participant_forbidden(self, client):
        _, _, _, _, conv_id = self._pair(client)
        eve, _ = self._register_and_login(client, "eve@example.com")

        r = client.get(f"/api/conversations/{conv_id}/messages", headers=self._auth(eve))
        assert r.status_code == 403
        assert r.json()["success"] is False

        r = client.post(f"/api/conversations/{conv_id}/messages", json={"content": "hi"}, headers=self._auth(eve))
        assert r.status_code == 403

        assert client.get("/api/conversations", headers=self._auth(eve)).json()["total"] == 0

    def test_empty_message_rejected(self, client):
        alex, _, _, _, conv_id = self._pair(client)
        r = client.post(f"/api/conversations/{conv_id}/messages", json={"content": ""}, headers=self._auth(alex))
        assert r.status_code == 400
