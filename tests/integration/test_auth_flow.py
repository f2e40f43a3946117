"""
Integration tests for complete authentication flows.

Tests end-to-end scenarios:
- Signup → Login → Access protected resource
- Password change
- Rejected and missing credentials
"""

from conftest import PASSWORD, auth_headers, signup


class TestSignup:
    def test_signup_returns_user_context(self, client):
        response = client.post(
            "/signup",
            json={"login": "  Alice ", "password": "pw", "email": "Alice@Example.com"},
        )
        assert response.status_code == 201

        data = response.json()
        assert data["authenticated"] is True
        assert data["token"]
        subject = data["subject"]
        assert subject["login"] == "alice"
        assert subject["email"] == "alice@example.com"
        assert subject["realm"] == "inhouse"
        assert subject["display_name"].startswith("Person")
        assert response.headers["location"] == f"/persons/{subject['id']}"

    def test_secrets_are_not_exposed(self, client):
        subject = signup(client, "bob")["subject"]
        assert "password" not in subject
        assert "password_hash" not in subject
        assert "access_token" not in subject

    def test_login_defaults_to_id(self, client):
        response = client.post("/signup", json={"password": "pw"})
        assert response.status_code == 201
        subject = response.json()["subject"]
        assert subject["login"] == subject["id"]

    def test_empty_password_rejected(self, client):
        response = client.post("/signup", json={"login": "carol", "password": ""})
        assert response.status_code == 422
        assert response.json()["message"] == "Password required"

    def test_duplicate_login(self, client):
        signup(client, "dave")
        response = client.post("/signup", json={"login": "DAVE", "password": "pw"})
        assert response.status_code == 409

    def test_invalid_wallet(self, client):
        response = client.post(
            "/signup", json={"login": "erin", "password": "pw", "ethereum_address": "0x12"}
        )
        assert response.status_code == 422
        assert response.json()["message"] == "ethereum_address: invalid format"

    def test_malformed_body(self, client):
        response = client.post(
            "/signup", content=b"{", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json()["message"] == "invalid format"


class TestLogin:
    def test_signup_then_login(self, client):
        context = signup(client, "frank")

        response = client.post("/login", json={"login": "Frank", "password": PASSWORD})
        assert response.status_code == 200
        assert response.json()["token"] == context["token"]

    def test_wrong_password_and_unknown_login_look_the_same(self, client):
        signup(client, "grace")

        wrong = client.post("/login", json={"login": "grace", "password": "nope"})
        unknown = client.post("/login", json={"login": "nobody", "password": "nope"})

        assert wrong.status_code == unknown.status_code == 422
        assert wrong.json() == unknown.json() == {"message": "unable to login"}

    def test_login_required(self, client):
        response = client.post("/login", json={"password": "pw"})
        assert response.status_code == 422
        assert response.json()["message"] == "login is required"


class TestProtectedResource:
    def test_me(self, client):
        context = signup(client, "heidi")

        response = client.get("/me", headers=auth_headers(context["token"]))
        assert response.status_code == 200
        assert response.json()["subject"]["id"] == context["subject"]["id"]

    def test_missing_token(self, client):
        response = client.get("/me")
        assert response.status_code == 401
        assert response.json() == {"message": "Authorization required"}
        assert response.headers["www-authenticate"] == "Bearer"

    def test_unknown_token(self, client):
        response = client.get("/me", headers=auth_headers("not-a-token"))
        assert response.status_code == 401

    def test_non_bearer_scheme(self, client):
        context = signup(client, "ivan")
        response = client.get("/me", headers={"Authorization": f"Basic {context['token']}"})
        assert response.status_code == 401


class TestPasswordChange:
    def test_change_password(self, client):
        context = signup(client, "judy")
        headers = auth_headers(context["token"])

        response = client.put(
            "/password",
            json={"old_password": PASSWORD, "new_password": "another-one"},
            headers=headers,
        )
        assert response.status_code == 204

        old = client.post("/login", json={"login": "judy", "password": PASSWORD})
        new = client.post("/login", json={"login": "judy", "password": "another-one"})
        assert old.status_code == 422
        assert new.status_code == 200

    def test_wrong_old_password(self, client):
        context = signup(client, "mallory")
        response = client.put(
            "/password",
            json={"old_password": "wrong", "new_password": "another-one"},
            headers=auth_headers(context["token"]),
        )
        assert response.status_code == 401

    def test_new_password_required(self, client):
        context = signup(client, "niaj")
        response = client.put(
            "/password",
            json={"old_password": PASSWORD},
            headers=auth_headers(context["token"]),
        )
        assert response.status_code == 422
        assert response.json()["message"] == "new_password: is required"
