from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import status

from .errors import (
    BadRequest,
    DocumentStoreError,
    IdentityProviderError,
    NotFoundOrUnauthorized,
    UpstreamFailure,
)
from .identity import AdminIdentity, ClientIdentity
from .models import TODOS_COLLECTION, USERS_COLLECTION, TodoEntity, UserMirror
from .store import DocumentStore

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _store_failure(exc: DocumentStoreError) -> UpstreamFailure:
    logger.warning("Document store call failed: %s", exc)
    return UpstreamFailure.from_exc(exc, status.HTTP_500_INTERNAL_SERVER_ERROR)


# PUBLIC_INTERFACE
class AccountService:
    """
    Signup and login on top of the two identity collaborators and the ``users`` mirror.

    Every upstream failure is reported as a 400 carrying the upstream message.
    """

    def __init__(self, admin: AdminIdentity, client: ClientIdentity, store: DocumentStore) -> None:
        self._admin = admin
        self._client = client
        self._store = store

    def signup(self, email: Optional[str], password: Optional[str], name: Optional[str] = None) -> str:
        """Create the identity and its mirror document. Returns the new uid."""
        if not email or not password:
            raise BadRequest("Email and password required")

        try:
            uid = self._admin.create_user(email, password, display_name=name)
        except IdentityProviderError as e:
            logger.warning("Signup: create_user failed: %s", e)
            raise UpstreamFailure.from_exc(e, status.HTTP_400_BAD_REQUEST) from e

        mirror: UserMirror = {"email": email, "name": name or ""}
        try:
            self._store.set(USERS_COLLECTION, uid, dict(mirror))
        except DocumentStoreError as e:
            logger.warning("Signup: mirror write failed for uid=%s, removing identity: %s", uid, e)
            self._rollback_identity(uid)
            raise UpstreamFailure.from_exc(e, status.HTTP_400_BAD_REQUEST) from e
        return uid

    def _rollback_identity(self, uid: str) -> None:
        try:
            self._admin.delete_user(uid)
        except IdentityProviderError:
            logger.exception("Signup: could not delete uid=%s after failed mirror write", uid)

    def login(self, email: Optional[str], password: Optional[str]) -> str:
        """Sign in with email/password and return the ID token."""
        if not email or not password:
            raise BadRequest("Email and password required")
        try:
            return self._client.sign_in_with_password(email, password)
        except IdentityProviderError as e:
            raise UpstreamFailure.from_exc(e, status.HTTP_400_BAD_REQUEST) from e


# PUBLIC_INTERFACE
class TodoRepository:
    """
    Per-user todo operations over a DocumentStore.

    Store failures surface as 500 with the upstream message.
    """

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def create(
        self,
        user_id: str,
        title: Optional[str],
        description: Optional[str] = None,
        due_date: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Insert a new todo owned by ``user_id`` and return it with its id."""
        if not title:
            raise BadRequest("Title is required")

        now = _now()
        todo: TodoEntity = {
            "userId": user_id,
            "title": title,
            "description": description or "",
            "dueDate": due_date or None,
            "createdAt": now,
            "updatedAt": now,
            "completed": False,
        }
        try:
            todo_id = self._store.add(TODOS_COLLECTION, dict(todo))
        except DocumentStoreError as e:
            raise _store_failure(e) from e
        return {"id": todo_id, **todo}

    def list_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        try:
            rows = self._store.where_equal(TODOS_COLLECTION, "userId", user_id)
        except DocumentStoreError as e:
            raise _store_failure(e) from e
        return [{"id": todo_id, **data} for todo_id, data in rows]

    def get_owned(self, todo_id: str, user_id: str) -> Dict[str, Any]:
        """
        Return the todo if it exists and belongs to ``user_id``.

        Raises:
            NotFoundOrUnauthorized: the todo is absent or owned by another user.
        """
        try:
            data = self._store.get(TODOS_COLLECTION, todo_id)
        except DocumentStoreError as e:
            raise _store_failure(e) from e
        if data is None or data.get("userId") != user_id:
            raise NotFoundOrUnauthorized()
        return {"id": todo_id, **data}

    def delete(self, todo_id: str, user_id: str) -> None:
        self.get_owned(todo_id, user_id)
        try:
            self._store.delete(TODOS_COLLECTION, todo_id)
        except DocumentStoreError as e:
            raise _store_failure(e) from e

    def update(self, todo_id: str, user_id: str, changes: Dict[str, Any]) -> None:
        """
        Write ``changes`` (only the fields the caller sent) and refresh ``updatedAt``.

        An empty ``changes`` still counts as a write and only moves ``updatedAt``.
        """
        self.get_owned(todo_id, user_id)
        try:
            self._store.update(TODOS_COLLECTION, todo_id, {**changes, "updatedAt": _now()})
        except DocumentStoreError as e:
            raise _store_failure(e) from e
