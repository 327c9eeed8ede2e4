import pytest
from fastapi.testclient import TestClient

from src.todo_api.errors import DocumentStoreError, IdentityProviderError
from src.todo_api.main import create_app
from src.todo_api.models import USERS_COLLECTION
from src.todo_api.services import Services


class TestSignup:
    def test_signup_creates_identity_and_mirror(self, client, identity_backend, store):
        res = client.post("/signup", json={"email": "a@x.com", "password": "p1", "name": "Ada"})
        assert res.status_code == 201
        assert res.json() == {"message": "User created successfully"}

        uid, _, display_name = identity_backend.users["a@x.com"]
        assert display_name == "Ada"
        assert store.get(USERS_COLLECTION, uid) == {"email": "a@x.com", "name": "Ada"}

    def test_signup_without_name_mirrors_empty_name(self, client, identity_backend, store):
        res = client.post("/signup", json={"email": "b@x.com", "password": "p1"})
        assert res.status_code == 201
        uid = identity_backend.users["b@x.com"][0]
        assert store.get(USERS_COLLECTION, uid) == {"email": "b@x.com", "name": ""}

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"email": "a@x.com"},
            {"password": "p1"},
            {"email": "", "password": "p1"},
            {"email": "a@x.com", "password": ""},
        ],
    )
    def test_signup_missing_fields_is_400(self, client, identity_backend, payload):
        res = client.post("/signup", json=payload)
        assert res.status_code == 400
        assert res.json() == {"error": "Email and password required"}
        assert identity_backend.users == {}

    def test_duplicate_email_surfaces_upstream_message(self, client):
        client.post("/signup", json={"email": "a@x.com", "password": "p1"})
        res = client.post("/signup", json={"email": "a@x.com", "password": "p2"})
        assert res.status_code == 400
        assert res.json() == {"error": "The user with the provided email already exists (EMAIL_EXISTS)."}

    def test_failed_signup_log_omits_email(self, client, caplog):
        client.post("/signup", json={"email": "grace.hopper@navy.example", "password": "p1"})
        with caplog.at_level("WARNING", logger="src.todo_api.repositories"):
            client.post("/signup", json={"email": "grace.hopper@navy.example", "password": "p2"})
        assert "EMAIL_EXISTS" in caplog.text
        assert "grace.hopper" not in caplog.text

    def test_signup_without_body_is_400(self, client, identity_backend):
        res = client.post("/signup")
        assert res.status_code == 400
        assert res.json() == {"error": "Email and password required"}
        assert identity_backend.users == {}


class _MirrorlessStore:
    def __init__(self, inner):
        self._inner = inner

    def set(self, collection, doc_id, data):
        raise DocumentStoreError("7 PERMISSION_DENIED: Missing or insufficient permissions.")

    def __getattr__(self, name):
        return getattr(self._inner, name)


class TestSignupRollback:
    @pytest.fixture
    def mirrorless_client(self, services, store):
        broken = Services(
            admin_identity=services.admin_identity,
            client_identity=services.client_identity,
            store=_MirrorlessStore(store),
        )
        return TestClient(create_app(broken))

    def test_mirror_failure_removes_identity(self, mirrorless_client, identity_backend):
        res = mirrorless_client.post("/signup", json={"email": "a@x.com", "password": "p1"})
        assert res.status_code == 400
        assert res.json() == {"error": "7 PERMISSION_DENIED: Missing or insufficient permissions."}
        assert "a@x.com" not in identity_backend.users

    def test_failed_rollback_still_reports_mirror_error(self, mirrorless_client, services, monkeypatch, caplog):
        def _refuse(uid):
            raise IdentityProviderError("backend unavailable")

        monkeypatch.setattr(services.admin_identity, "delete_user", _refuse)
        res = mirrorless_client.post("/signup", json={"email": "a@x.com", "password": "p1"})
        assert res.status_code == 400
        assert res.json()["error"].startswith("7 PERMISSION_DENIED")
        assert "could not delete uid=" in caplog.text


class TestLogin:
    def test_login_returns_token(self, client, identity_backend):
        client.post("/signup", json={"email": "a@x.com", "password": "p1"})
        res = client.post("/login", json={"email": "a@x.com", "password": "p1"})
        assert res.status_code == 200
        token = res.json()["token"]
        assert identity_backend.tokens[token] == identity_backend.users["a@x.com"][0]

    @pytest.mark.parametrize("payload", [{}, {"email": "a@x.com"}, {"password": "p1"}])
    def test_login_missing_fields_is_400(self, client, payload):
        res = client.post("/login", json=payload)
        assert res.status_code == 400
        assert res.json() == {"error": "Email and password required"}

    def test_login_without_body_is_400(self, client):
        res = client.post("/login")
        assert res.status_code == 400
        assert res.json() == {"error": "Email and password required"}

    def test_wrong_password_surfaces_upstream_message(self, client):
        client.post("/signup", json={"email": "a@x.com", "password": "p1"})
        res = client.post("/login", json={"email": "a@x.com", "password": "nope"})
        assert res.status_code == 400
        assert res.json() == {"error": "INVALID_LOGIN_CREDENTIALS"}

    def test_unknown_email_is_400(self, client):
        res = client.post("/login", json={"email": "ghost@x.com", "password": "p1"})
        assert res.status_code == 400


class TestEndToEnd:
    def test_signup_login_create_list_delete(self, client):
        assert client.post("/signup", json={"email": "a@x.com", "password": "p1"}).status_code == 201

        res = client.post("/login", json={"email": "a@x.com", "password": "p1"})
        assert res.status_code == 200
        headers = {"Authorization": res.json()["token"]}

        created = client.post("/todos", json={"title": "T"}, headers=headers)
        assert created.status_code == 201
        todo = created.json()
        assert todo["id"]
        assert todo["completed"] is False

        listed = client.get("/todos", headers=headers).json()
        assert [t["id"] for t in listed] == [todo["id"]]

        res_del = client.delete(f"/todos/{todo['id']}", headers=headers)
        assert res_del.status_code == 200

        assert client.get("/todos", headers=headers).json() == []
