"""
Identity provider collaborators.

Two trust domains are kept apart on purpose:

- ``AdminIdentity`` holds the service-account credentials. It creates users and
  verifies ID tokens.
- ``ClientIdentity`` holds only the public web API key. It signs users in with
  email/password and hands back the ID token the client will present later.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import requests
from firebase_admin import App, auth
from firebase_admin.exceptions import FirebaseError

from .errors import IdentityProviderError

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com"
SIGN_IN_TIMEOUT_SECONDS = 30


# PUBLIC_INTERFACE
class AdminIdentity(ABC):
    """Administrative identity operations."""

    @abstractmethod
    def create_user(self, email: str, password: str, display_name: Optional[str] = None) -> str:
        """Create a user and return its uid."""

    @abstractmethod
    def verify_token(self, token: str) -> str:
        """Verify an ID token and return the uid it was issued for."""

    @abstractmethod
    def delete_user(self, uid: str) -> None:
        """Delete a user by uid."""


# PUBLIC_INTERFACE
class ClientIdentity(ABC):
    """Client-facing identity operations."""

    @abstractmethod
    def sign_in_with_password(self, email: str, password: str) -> str:
        """Sign in and return a signed ID token for the user."""


class FirebaseAdminIdentity(AdminIdentity):
    """
    AdminIdentity backed by the Firebase Admin SDK.
    """

    def __init__(self, app: App) -> None:
        self._app = app

    def create_user(self, email: str, password: str, display_name: Optional[str] = None) -> str:
        try:
            record = auth.create_user(
                email=email,
                password=password,
                display_name=display_name or None,
                app=self._app,
            )
        except (FirebaseError, ValueError) as e:
            raise IdentityProviderError(str(e)) from e
        return record.uid

    def verify_token(self, token: str) -> str:
        try:
            decoded = auth.verify_id_token(token, app=self._app)
        except (FirebaseError, ValueError) as e:
            raise IdentityProviderError(str(e)) from e
        return decoded["uid"]

    def delete_user(self, uid: str) -> None:
        try:
            auth.delete_user(uid, app=self._app)
        except (FirebaseError, ValueError) as e:
            raise IdentityProviderError(str(e)) from e


class FirebaseClientIdentity(ClientIdentity):
    """
    ClientIdentity backed by the Identity Toolkit REST API (``accounts:signInWithPassword``).

    When ``emulator_host`` is set the request goes to the local auth emulator instead.
    """

    def __init__(
        self,
        api_key: str,
        emulator_host: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._api_key = api_key
        if emulator_host:
            self._base_url = f"http://{emulator_host}/identitytoolkit.googleapis.com"
        else:
            self._base_url = IDENTITY_TOOLKIT_URL
        self._session = session or requests.Session()

    def sign_in_with_password(self, email: str, password: str) -> str:
        try:
            r = self._session.post(
                f"{self._base_url}/v1/accounts:signInWithPassword",
                params={"key": self._api_key},
                json={"email": email, "password": password, "returnSecureToken": True},
                timeout=SIGN_IN_TIMEOUT_SECONDS,
            )
            data = r.json()
        except (requests.RequestException, ValueError) as e:
            raise IdentityProviderError(str(e)) from e

        if "error" in data:
            raise IdentityProviderError(_error_message(data["error"]))
        token = data.get("idToken")
        if not token:
            raise IdentityProviderError("Sign-in response did not contain an ID token")
        return token


def _error_message(err: Any) -> str:
    if isinstance(err, dict):
        return str(err.get("message", err))
    return str(err)
