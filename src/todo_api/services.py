from __future__ import annotations

import logging
from dataclasses import dataclass

import firebase_admin
from fastapi import Request
from firebase_admin import credentials, firestore

from .identity import AdminIdentity, ClientIdentity, FirebaseAdminIdentity, FirebaseClientIdentity
from .repositories import AccountService, TodoRepository
from .settings import Settings
from .store import DocumentStore, FirestoreDocumentStore

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class Services:
    """
    External collaborators handed to the app at startup.

    ``admin_identity`` and ``client_identity`` belong to different trust domains and
    are never interchangeable.
    """

    admin_identity: AdminIdentity
    client_identity: ClientIdentity
    store: DocumentStore


# PUBLIC_INTERFACE
def build_firebase_services(settings: Settings) -> Services:
    """
    Initialize the Firebase Admin app from the service account in ``settings`` and
    wrap the SDK handles in the collaborator interfaces.
    """
    cred = credentials.Certificate(dict(settings.service_account))
    app = firebase_admin.initialize_app(cred, {"storageBucket": settings.storage_bucket})
    logger.info("Firebase app initialized for project %s", settings.project_id)

    return Services(
        admin_identity=FirebaseAdminIdentity(app),
        client_identity=FirebaseClientIdentity(
            settings.api_key,
            emulator_host=settings.auth_emulator_host,
        ),
        store=FirestoreDocumentStore(firestore.client(app)),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_account_service(request: Request) -> AccountService:
    services = get_services(request)
    return AccountService(services.admin_identity, services.client_identity, services.store)


def get_todo_repository(request: Request) -> TodoRepository:
    return TodoRepository(get_services(request).store)
