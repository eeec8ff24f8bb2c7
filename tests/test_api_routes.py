"""
tests/test_api_routes.py -- Integration tests for the HTTP surface.

These tests exercise the full stack: FastAPI routing -> auth gate ->
UserStore/TodoStore -> response model serialization -> exception handlers.

Coverage:
  - Register: success, duplicate email, short password, duplicate id, missing field
  - Login: success (jwtToken, no-store), unknown email, wrong password
  - Gate: 401 "Invalid JWT Token" on every protected route without a valid token
  - Todos: create/list/update/status/delete happy paths and 404s
  - Ownership: another user's todo is 404 for update/delete/status and is left intact
  - Profile: get/update (with and without password)/delete with cascade
  - Storage failures: 500 with a generic message
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from auth.tokens import create_access_token

ALICE = {"id": "u1", "username": "alice", "email": "a@x.com", "password": "secret"}
MILK = {"id": "t1", "title": "buy milk", "priority": "HIGH", "status": "TODO", "category": "SHOPPING"}


def _error(resp) -> dict:
    return resp.json()["error"]


# ---------------------------------------------------------------------------
# Register / login
# ---------------------------------------------------------------------------


class TestRegister:
    def test_register_success(self, client: TestClient) -> None:
        resp = client.post("/register/", json=ALICE)
        assert resp.status_code == 200, resp.text
        assert resp.json() == {"message": "User created successfully"}

    def test_duplicate_email(self, client: TestClient) -> None:
        client.post("/register/", json=ALICE)
        resp = client.post("/register/", json={**ALICE, "id": "u2"})
        assert resp.status_code == 400
        assert _error(resp)["message"] == "User already exists"

    def test_duplicate_id(self, client: TestClient) -> None:
        client.post("/register/", json=ALICE)
        resp = client.post("/register/", json={**ALICE, "email": "other@x.com"})
        assert resp.status_code == 400
        assert _error(resp)["message"] == "User already exists"

    @pytest.mark.parametrize("password", ["", "a", "ab"])
    def test_short_password(self, client: TestClient, password: str) -> None:
        resp = client.post("/register/", json={**ALICE, "password": password})
        assert resp.status_code == 400
        assert _error(resp)["message"] == "Password is too short"

    def test_three_char_password_is_enough(self, client: TestClient) -> None:
        resp = client.post("/register/", json={**ALICE, "password": "abc"})
        assert resp.status_code == 200

    def test_existing_email_reported_before_short_password(self, client: TestClient) -> None:
        client.post("/register/", json=ALICE)
        resp = client.post("/register/", json={**ALICE, "id": "u2", "password": "x"})
        assert _error(resp)["message"] == "User already exists"

    def test_password_over_bcrypt_limit(self, client: TestClient) -> None:
        resp = client.post("/register/", json={**ALICE, "password": "p" * 73})
        assert resp.status_code == 422

    def test_missing_field(self, client: TestClient) -> None:
        body = {k: v for k, v in ALICE.items() if k != "email"}
        resp = client.post("/register/", json=body)
        assert resp.status_code == 422
        assert _error(resp)["code"] == "validation_error"


class TestLogin:
    def test_login_success(self, client: TestClient) -> None:
        client.post("/register/", json=ALICE)
        resp = client.post("/login/", json={"email": "a@x.com", "password": "secret"})
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["jwtToken"]
        assert data["token_type"] == "bearer"
        assert resp.headers["Cache-Control"] == "no-store"

    def test_wrong_password(self, client: TestClient) -> None:
        client.post("/register/", json=ALICE)
        resp = client.post("/login/", json={"email": "a@x.com", "password": "wrong"})
        assert resp.status_code == 400
        assert _error(resp)["message"] == "Invalid password"

    def test_unknown_email(self, client: TestClient) -> None:
        resp = client.post("/login/", json={"email": "nobody@x.com", "password": "secret"})
        assert resp.status_code == 400
        assert _error(resp)["message"] == "Invalid user"

    def test_login_token_opens_protected_routes(self, client: TestClient) -> None:
        client.post("/register/", json=ALICE)
        token = client.post("/login/", json={"email": "a@x.com", "password": "secret"}).json()["jwtToken"]
        resp = client.get("/profile/", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        assert resp.json() == {"id": "u1", "name": "alice", "email": "a@x.com"}


# ---------------------------------------------------------------------------
# Auth gate over HTTP
# ---------------------------------------------------------------------------

_PROTECTED = [
    ("GET", "/todos/", None),
    ("POST", "/todos/", MILK),
    ("PUT", "/todos/t1", {"title": "x", "priority": "LOW", "status": "TODO", "category": "HOME"}),
    ("DELETE", "/todos/t1", None),
    ("PATCH", "/todos/t1/status", {"status": "DONE"}),
    ("GET", "/profile/", None),
    ("PUT", "/profile/", {"name": "alice", "email": "a@x.com"}),
    ("DELETE", "/profile/", None),
]


class TestGateOverHttp:
    @pytest.mark.parametrize(("method", "path", "body"), _PROTECTED)
    def test_no_header(self, client: TestClient, method: str, path: str, body: dict | None) -> None:
        resp = client.request(method, path, json=body)
        assert resp.status_code == 401
        assert _error(resp)["message"] == "Invalid JWT Token"
        assert resp.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.parametrize(("method", "path", "body"), _PROTECTED)
    def test_garbage_token(self, client: TestClient, method: str, path: str, body: dict | None) -> None:
        resp = client.request(method, path, json=body, headers={"Authorization": "Bearer not.a.token"})
        assert resp.status_code == 401
        assert _error(resp)["message"] == "Invalid JWT Token"

    def test_tampered_token(self, client: TestClient, register_and_login) -> None:
        headers = register_and_login(**ALICE)
        token = headers["Authorization"].split()[1]
        header, payload, signature = token.split(".")
        mid = len(signature) // 2
        flipped = signature[:mid] + ("A" if signature[mid] != "A" else "B") + signature[mid + 1 :]
        resp = client.get("/todos/", headers={"Authorization": f"Bearer {header}.{payload}.{flipped}"})
        assert resp.status_code == 401
        assert _error(resp)["message"] == "Invalid JWT Token"

    def test_wrong_scheme(self, client: TestClient) -> None:
        token = create_access_token("u1", "alice")
        resp = client.get("/todos/", headers={"Authorization": f"Token {token}"})
        assert resp.status_code == 401


# ---------------------------------------------------------------------------
# Todos
# ---------------------------------------------------------------------------


class TestTodos:
    def test_create_then_list(self, client: TestClient, register_and_login) -> None:
        headers = register_and_login(**ALICE)
        resp = client.post("/todos/", json=MILK, headers=headers)
        assert resp.status_code == 201, resp.text
        assert resp.json() == {"message": "Todo Successfully Added"}

        resp = client.get("/todos/", headers=headers)
        assert resp.status_code == 200
        assert resp.json() == [{**MILK, "user_id": "u1"}]

    def test_list_empty(self, client: TestClient, register_and_login) -> None:
        headers = register_and_login(**ALICE)
        resp = client.get("/todos/", headers=headers)
        assert resp.status_code == 200
        assert resp.json() == []

    def test_duplicate_todo_id(self, client: TestClient, register_and_login) -> None:
        headers = register_and_login(**ALICE)
        client.post("/todos/", json=MILK, headers=headers)
        resp = client.post("/todos/", json=MILK, headers=headers)
        assert resp.status_code == 400
        assert _error(resp)["message"] == "Todo already exists"

    def test_missing_todo_field(self, client: TestClient, register_and_login) -> None:
        headers = register_and_login(**ALICE)
        body = {k: v for k, v in MILK.items() if k != "title"}
        resp = client.post("/todos/", json=body, headers=headers)
        assert resp.status_code == 422

    def test_update(self, client: TestClient, register_and_login) -> None:
        headers = register_and_login(**ALICE)
        client.post("/todos/", json=MILK, headers=headers)
        change = {"title": "buy oat milk", "priority": "LOW", "status": "IN PROGRESS", "category": "HOME"}
        resp = client.put("/todos/t1", json=change, headers=headers)
        assert resp.status_code == 200
        assert resp.json() == {"message": "Todo Successfully Updated"}
        assert client.get("/todos/", headers=headers).json() == [{"id": "t1", "user_id": "u1", **change}]

    def test_update_status(self, client: TestClient, register_and_login) -> None:
        headers = register_and_login(**ALICE)
        client.post("/todos/", json=MILK, headers=headers)
        resp = client.patch("/todos/t1/status", json={"status": "DONE"}, headers=headers)
        assert resp.status_code == 200
        assert resp.json() == {"message": "Todo Status Updated Successfully"}
        assert client.get("/todos/", headers=headers).json()[0]["status"] == "DONE"

    def test_delete(self, client: TestClient, register_and_login) -> None:
        headers = register_and_login(**ALICE)
        client.post("/todos/", json=MILK, headers=headers)
        resp = client.delete("/todos/t1", headers=headers)
        assert resp.status_code == 200
        assert resp.json() == {"message": "Todo Successfully Deleted"}
        assert client.get("/todos/", headers=headers).json() == []

    @pytest.mark.parametrize(
        ("method", "path", "body"),
        [
            ("PUT", "/todos/missing", {"title": "x", "priority": "LOW", "status": "TODO", "category": "HOME"}),
            ("DELETE", "/todos/missing", None),
            ("PATCH", "/todos/missing/status", {"status": "DONE"}),
        ],
    )
    def test_missing_todo_is_404(self, client: TestClient, register_and_login, method, path, body) -> None:
        headers = register_and_login(**ALICE)
        resp = client.request(method, path, json=body, headers=headers)
        assert resp.status_code == 404
        assert _error(resp)["message"] == "Todo Not Found"


class TestOwnership:
    """Bob holds a valid token but must not be able to touch Alice's todo."""

    @pytest.fixture
    def tokens(self, client: TestClient, register_and_login) -> tuple[dict, dict]:
        alice = register_and_login(**ALICE)
        bob = register_and_login("u2", "bob", "b@x.com", "hunter2")
        assert client.post("/todos/", json=MILK, headers=alice).status_code == 201
        return alice, bob

    def test_other_user_cannot_see(self, client: TestClient, tokens) -> None:
        _alice, bob = tokens
        assert client.get("/todos/", headers=bob).json() == []

    @pytest.mark.parametrize(
        ("method", "path", "body"),
        [
            ("PUT", "/todos/t1", {"title": "pwned", "priority": "LOW", "status": "DONE", "category": "X"}),
            ("DELETE", "/todos/t1", None),
            ("PATCH", "/todos/t1/status", {"status": "DONE"}),
        ],
    )
    def test_other_user_gets_404_and_row_is_untouched(self, client: TestClient, tokens, method, path, body) -> None:
        alice, bob = tokens
        resp = client.request(method, path, json=body, headers=bob)
        assert resp.status_code == 404
        assert _error(resp)["message"] == "Todo Not Found"
        assert client.get("/todos/", headers=alice).json() == [{**MILK, "user_id": "u1"}]

    def test_todo_is_owned_by_token_user(self, client: TestClient, tokens) -> None:
        """A user_id smuggled into the body is ignored; the owner comes from the token."""
        _alice, bob = tokens
        body = {"id": "t2", "title": "x", "priority": "LOW", "status": "TODO", "category": "HOME", "user_id": "u1"}
        assert client.post("/todos/", json=body, headers=bob).status_code == 201
        assert [t["user_id"] for t in client.get("/todos/", headers=bob).json()] == ["u2"]


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


class TestProfile:
    def test_get_profile(self, client: TestClient, register_and_login) -> None:
        headers = register_and_login(**ALICE)
        resp = client.get("/profile/", headers=headers)
        assert resp.status_code == 200
        assert resp.json() == {"id": "u1", "name": "alice", "email": "a@x.com"}

    def test_update_without_password_keeps_login(self, client: TestClient, register_and_login) -> None:
        headers = register_and_login(**ALICE)
        resp = client.put("/profile/", json={"name": "Alice", "email": "alice@x.com"}, headers=headers)
        assert resp.status_code == 200
        assert resp.json() == {"message": "Profile Updated Successfully"}
        assert client.post("/login/", json={"email": "alice@x.com", "password": "secret"}).status_code == 200

    def test_update_with_password(self, client: TestClient, register_and_login) -> None:
        headers = register_and_login(**ALICE)
        body = {"name": "alice", "email": "a@x.com", "password": "n3w-pass"}
        assert client.put("/profile/", json=body, headers=headers).status_code == 200
        assert client.post("/login/", json={"email": "a@x.com", "password": "secret"}).status_code == 400
        assert client.post("/login/", json={"email": "a@x.com", "password": "n3w-pass"}).status_code == 200

    def test_update_with_short_password(self, client: TestClient, register_and_login) -> None:
        headers = register_and_login(**ALICE)
        resp = client.put("/profile/", json={"name": "alice", "email": "a@x.com", "password": "ab"}, headers=headers)
        assert resp.status_code == 400
        assert _error(resp)["message"] == "Password is too short"

    def test_update_to_taken_email(self, client: TestClient, register_and_login) -> None:
        register_and_login(**ALICE)
        bob = register_and_login("u2", "bob", "b@x.com", "hunter2")
        resp = client.put("/profile/", json={"name": "bob", "email": "a@x.com"}, headers=bob)
        assert resp.status_code == 400

    def test_delete_profile_cascades(self, client: TestClient, register_and_login, todo_store) -> None:
        headers = register_and_login(**ALICE)
        client.post("/todos/", json=MILK, headers=headers)

        resp = client.delete("/profile/", headers=headers)
        assert resp.status_code == 200
        assert resp.json() == {"message": "User Profile Deleted Successfully"}
        assert todo_store.list_for_user("u1") == []

        # The token is still cryptographically valid, but the account is gone.
        assert client.get("/profile/", headers=headers).status_code == 404
        assert client.delete("/profile/", headers=headers).status_code == 404
        resp = client.post("/todos/", json={**MILK, "id": "t9"}, headers=headers)
        assert resp.status_code == 404
        assert client.post("/login/", json={"email": "a@x.com", "password": "secret"}).status_code == 400


# ---------------------------------------------------------------------------
# Storage failures
# ---------------------------------------------------------------------------


def _boom(*args, **kwargs):
    raise OperationalError("SELECT 1", {}, Exception("disk I/O error"))


class TestStorageFailure:
    def test_add_todo_failure(self, client: TestClient, register_and_login, monkeypatch) -> None:
        headers = register_and_login(**ALICE)
        monkeypatch.setattr(client.app.state.todo_store, "create_todo", _boom)
        resp = client.post("/todos/", json=MILK, headers=headers)
        assert resp.status_code == 500
        assert _error(resp)["message"] == "Error adding todo"
        assert "disk I/O" not in resp.text

    def test_generic_storage_failure(self, client: TestClient, register_and_login, monkeypatch) -> None:
        headers = register_and_login(**ALICE)
        monkeypatch.setattr(client.app.state.todo_store, "list_for_user", _boom)
        resp = client.get("/todos/", headers=headers)
        assert resp.status_code == 500
        assert _error(resp)["message"] == "Internal server error"
        assert "disk I/O" not in resp.text
