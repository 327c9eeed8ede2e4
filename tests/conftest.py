import itertools
from typing import Dict, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from src.todo_api.errors import IdentityProviderError
from src.todo_api.identity import AdminIdentity, ClientIdentity
from src.todo_api.main import create_app
from src.todo_api.services import Services
from src.todo_api.store import InMemoryDocumentStore


class FakeIdentityBackend:
    """Shared user table behind the fake admin and client identities."""

    def __init__(self) -> None:
        self.users: Dict[str, Tuple[str, str, Optional[str]]] = {}  # email -> (uid, password, name)
        self.tokens: Dict[str, str] = {}  # token -> uid
        self._ids = itertools.count(1)
        self.verify_calls = 0


class FakeAdminIdentity(AdminIdentity):
    def __init__(self, backend: FakeIdentityBackend) -> None:
        self.backend = backend

    def create_user(self, email, password, display_name=None):
        if email in self.backend.users:
            raise IdentityProviderError("The user with the provided email already exists (EMAIL_EXISTS).")
        uid = f"uid-{next(self.backend._ids)}"
        self.backend.users[email] = (uid, password, display_name)
        return uid

    def verify_token(self, token):
        self.backend.verify_calls += 1
        try:
            return self.backend.tokens[token]
        except KeyError:
            raise IdentityProviderError("Decoding Firebase ID token failed.")

    def delete_user(self, uid):
        for email, (known_uid, _, _) in list(self.backend.users.items()):
            if known_uid == uid:
                del self.backend.users[email]
                return
        raise IdentityProviderError(f"No user record found for the given identifier ({uid}).")


class FakeClientIdentity(ClientIdentity):
    def __init__(self, backend: FakeIdentityBackend) -> None:
        self.backend = backend
        self._seq = itertools.count(1)

    def sign_in_with_password(self, email, password):
        user = self.backend.users.get(email)
        if user is None or user[1] != password:
            raise IdentityProviderError("INVALID_LOGIN_CREDENTIALS")
        token = f"token-{user[0]}-{next(self._seq)}"
        self.backend.tokens[token] = user[0]
        return token


@pytest.fixture
def identity_backend():
    return FakeIdentityBackend()


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def services(identity_backend, store):
    return Services(
        admin_identity=FakeAdminIdentity(identity_backend),
        client_identity=FakeClientIdentity(identity_backend),
        store=store,
    )


@pytest.fixture
def client(services):
    return TestClient(create_app(services))


@pytest.fixture
def login(client):
    """Sign up (if needed) and log in; returns the Authorization headers for that user."""

    def _login(email="a@x.com", password="p1secret", name=None):
        client.post("/signup", json={"email": email, "password": password, "name": name})
        res = client.post("/login", json={"email": email, "password": password})
        assert res.status_code == 200
        return {"Authorization": res.json()["token"]}

    return _login
