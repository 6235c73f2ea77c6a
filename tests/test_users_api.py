class TestRegisterAndLogin:
    def test_register_returns_identity_and_token(self, client):
        res = client.post(
            "/api/users/register",
            json={"name": " Ada ", "email": "Ada@Example.com", "password": "s3cret-pass"},
        )
        assert res.status_code == 201
        body = res.json()
        assert body["name"] == "Ada"
        assert body["email"] == "ada@example.com"
        assert body["id"] and body["token"]
        assert "password" not in res.text

    def test_register_duplicate_email(self, client, register):
        register("ada@example.com")
        res = client.post("/api/users/register", json={"email": "ADA@example.com", "password": "another1"})
        assert res.status_code == 409
        assert res.json()["error"] == "Conflict"

    def test_register_validation(self, client):
        res = client.post("/api/users/register", json={"email": "nope", "password": "s3cret-pass"})
        assert res.status_code == 422
        res = client.post("/api/users/register", json={"email": "a@b.com", "password": "123"})
        assert res.status_code == 422

    def test_login(self, client, register):
        user, _ = register("ada@example.com", name="Ada")
        res = client.post("/api/users/login", json={"email": "ada@example.com", "password": "s3cret-pass"})
        assert res.status_code == 200
        body = res.json()
        assert body["id"] == user["id"]
        assert body["name"] == "Ada"

        # The new token works
        profile = client.get("/api/users/profile", headers={"Authorization": f"Bearer {body['token']}"})
        assert profile.status_code == 200

    def test_login_wrong_password(self, client, register):
        register("ada@example.com")
        res = client.post("/api/users/login", json={"email": "ada@example.com", "password": "wrong-one"})
        assert res.status_code == 401
        res = client.post("/api/users/login", json={"email": "nobody@example.com", "password": "wrong-one"})
        assert res.status_code == 401


class TestProfile:
    def test_get_own_profile(self, client, register):
        user, headers = register("ada@example.com", name="Ada")
        res = client.get("/api/users/profile", headers=headers)
        assert res.status_code == 200
        assert res.json() == {"id": user["id"], "name": "Ada", "email": "ada@example.com"}

    def test_profiles_are_per_caller(self, client, register):
        _, ada = register("ada@example.com", name="Ada")
        _, bob = register("bob@example.com", name="Bob")
        assert client.get("/api/users/profile", headers=ada).json()["name"] == "Ada"
        assert client.get("/api/users/profile", headers=bob).json()["name"] == "Bob"

        client.put("/api/users/profile", json={"name": "Robert"}, headers=bob)
        assert client.get("/api/users/profile", headers=ada).json()["name"] == "Ada"

    def test_update_both_fields(self, client, register):
        _, headers = register("ada@example.com", name="Ada")
        res = client.put("/api/users/profile", json={"name": "Ada L", "email": "lovelace@example.com"}, headers=headers)
        assert res.status_code == 200
        assert res.json() == {"name": "Ada L", "email": "lovelace@example.com"}

        # Login now goes through the new email
        res = client.post("/api/users/login", json={"email": "lovelace@example.com", "password": "s3cret-pass"})
        assert res.status_code == 200

    def test_absent_or_blank_fields_are_kept(self, client, register):
        _, headers = register("ada@example.com", name="Ada")
        res = client.put("/api/users/profile", json={"name": "", "email": "new@example.com"}, headers=headers)
        assert res.status_code == 200
        assert res.json() == {"name": "Ada", "email": "new@example.com"}

        res = client.put("/api/users/profile", json={}, headers=headers)
        assert res.status_code == 200
        assert res.json() == {"name": "Ada", "email": "new@example.com"}

    def test_update_to_taken_email(self, client, register):
        register("bob@example.com")
        _, headers = register("ada@example.com")
        res = client.put("/api/users/profile", json={"email": "bob@example.com"}, headers=headers)
        assert res.status_code == 409
        assert client.get("/api/users/profile", headers=headers).json()["email"] == "ada@example.com"

    def test_malformed_email_rejected(self, client, register):
        _, headers = register("ada@example.com", name="Ada")
        res = client.put("/api/users/profile", json={"email": "nope"}, headers=headers)
        assert res.status_code == 422
        assert res.json()["error"] == "ValidationError"
        assert client.get("/api/users/profile", headers=headers).json()["email"] == "ada@example.com"

        # blank still means "leave it alone"
        res = client.put("/api/users/profile", json={"email": "  "}, headers=headers)
        assert res.status_code == 200
        assert res.json()["email"] == "ada@example.com"

    def test_overlong_name_rejected(self, client, register):
        _, headers = register("ada@example.com", name="Ada")
        res = client.put("/api/users/profile", json={"name": "x" * 101}, headers=headers)
        assert res.status_code == 422
        assert client.get("/api/users/profile", headers=headers).json()["name"] == "Ada"
