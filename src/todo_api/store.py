from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from threading import RLock
from typing import Any, Dict, List, Optional, Tuple

from google.api_core.exceptions import GoogleAPIError
from google.cloud.firestore_v1.base_query import FieldFilter

from .errors import DocumentStoreError

Record = Dict[str, Any]


# PUBLIC_INTERFACE
class DocumentStore(ABC):
    """Abstract contract for a schema-less store of records in named collections."""

    @abstractmethod
    def set(self, collection: str, doc_id: str, data: Record) -> None:
        """Create or overwrite the record at ``collection/doc_id``."""

    @abstractmethod
    def add(self, collection: str, data: Record) -> str:
        """Insert a record under a store-assigned id and return that id."""

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[Record]:
        """Return the record, or None if it does not exist."""

    @abstractmethod
    def where_equal(self, collection: str, field: str, value: Any) -> List[Tuple[str, Record]]:
        """Return ``(id, record)`` pairs whose ``field`` equals ``value``. Unordered, unpaginated."""

    @abstractmethod
    def update(self, collection: str, doc_id: str, fields: Record) -> None:
        """Merge ``fields`` into an existing record."""

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> None:
        """Delete the record if present."""


class InMemoryDocumentStore(DocumentStore):
    """
    Thread-safe in-memory store suitable for testing and local runs.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._collections: Dict[str, Dict[str, Record]] = {}

    def _allocate_id(self) -> str:
        return uuid.uuid4().hex[:20]

    def set(self, collection: str, doc_id: str, data: Record) -> None:
        with self._lock:
            self._collections.setdefault(collection, {})[doc_id] = dict(data)

    def add(self, collection: str, data: Record) -> str:
        doc_id = self._allocate_id()
        self.set(collection, doc_id, data)
        return doc_id

    def get(self, collection: str, doc_id: str) -> Optional[Record]:
        with self._lock:
            item = self._collections.get(collection, {}).get(doc_id)
            return None if item is None else dict(item)

    def where_equal(self, collection: str, field: str, value: Any) -> List[Tuple[str, Record]]:
        with self._lock:
            items = self._collections.get(collection, {})
            # Return copies to avoid external mutation
            return [(doc_id, dict(r)) for doc_id, r in items.items() if r.get(field) == value]

    def update(self, collection: str, doc_id: str, fields: Record) -> None:
        with self._lock:
            existing = self._collections.get(collection, {}).get(doc_id)
            if existing is None:
                raise DocumentStoreError(f"No document to update: {collection}/{doc_id}")
            existing.update(fields)

    def delete(self, collection: str, doc_id: str) -> None:
        with self._lock:
            self._collections.get(collection, {}).pop(doc_id, None)


class FirestoreDocumentStore(DocumentStore):
    """
    DocumentStore backed by a ``google.cloud.firestore.Client``.

    Google API errors (and ValueError for invalid paths or values) are re-raised as
    DocumentStoreError carrying the upstream message; anything else propagates.
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    def _doc(self, collection: str, doc_id: str) -> Any:
        return self._client.collection(collection).document(doc_id)

    def set(self, collection: str, doc_id: str, data: Record) -> None:
        try:
            self._doc(collection, doc_id).set(data)
        except (GoogleAPIError, ValueError) as e:
            raise DocumentStoreError(str(e)) from e

    def add(self, collection: str, data: Record) -> str:
        try:
            _, ref = self._client.collection(collection).add(data)
        except (GoogleAPIError, ValueError) as e:
            raise DocumentStoreError(str(e)) from e
        return ref.id

    def get(self, collection: str, doc_id: str) -> Optional[Record]:
        try:
            snapshot = self._doc(collection, doc_id).get()
        except (GoogleAPIError, ValueError) as e:
            raise DocumentStoreError(str(e)) from e
        if not snapshot.exists:
            return None
        return snapshot.to_dict()

    def where_equal(self, collection: str, field: str, value: Any) -> List[Tuple[str, Record]]:
        try:
            query = self._client.collection(collection).where(filter=FieldFilter(field, "==", value))
            return [(snap.id, snap.to_dict()) for snap in query.stream()]
        except (GoogleAPIError, ValueError) as e:
            raise DocumentStoreError(str(e)) from e

    def update(self, collection: str, doc_id: str, fields: Record) -> None:
        try:
            self._doc(collection, doc_id).update(fields)
        except (GoogleAPIError, ValueError) as e:
            raise DocumentStoreError(str(e)) from e

    def delete(self, collection: str, doc_id: str) -> None:
        try:
            self._doc(collection, doc_id).delete()
        except (GoogleAPIError, ValueError) as e:
            raise DocumentStoreError(str(e)) from e
