from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Iterator, Optional, TypeVar

import firebase_admin
from firebase_admin import credentials, firestore as firebase_firestore
from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud.firestore import Query, transactional

from .errors import ClientError, ReadError

APP_NAME = "note-page-cli"

T = TypeVar("T")

logger = logging.getLogger("note_page_cli")


class _Exhausted:
    def __repr__(self) -> str:
        return "EXHAUSTED"


EXHAUSTED = _Exhausted()


class DocumentCursor:
    """Finite, restartable scan over one collection query.

    Nothing is fetched until the cursor is iterated, and every call to
    ``iter()`` opens a fresh stream from the server.
    """

    def __init__(self, collection: str, query: Any, transaction: Any = None) -> None:
        self.collection = collection
        self._query = query
        self._transaction = transaction

    def __iter__(self) -> Iterator[Any]:
        try:
            if self._transaction is not None:
                return iter(self._query.stream(transaction=self._transaction))
            return iter(self._query.stream())
        except (GoogleAPIError, GoogleAuthError) as exc:
            raise ReadError(f"failed to iterate {self.collection}: {exc}") from exc

    def next_document(self, documents: Iterator[Any]) -> Any:
        """Return the next snapshot from ``documents``, or EXHAUSTED once drained."""

        try:
            return next(documents, EXHAUSTED)
        except (GoogleAPIError, GoogleAuthError) as exc:
            raise ReadError(f"failed to iterate {self.collection}: {exc}") from exc


class FirestoreClient:
    def __init__(self, db: Any, app: Optional[firebase_admin.App] = None) -> None:
        """Wrap an already authenticated Firestore client."""

        self.db = db
        self.app = app

    @classmethod
    def from_key_file(cls, key_file: Path) -> "FirestoreClient":
        """Authenticate with a service-account key file and open a Firestore client."""

        try:
            cred = credentials.Certificate(str(key_file))
            app = firebase_admin.initialize_app(cred, name=APP_NAME)
        except (OSError, ValueError, GoogleAuthError) as exc:
            raise ClientError(f"error initializing app: {exc}") from exc

        try:
            db = firebase_firestore.client(app=app)
        except (ValueError, GoogleAuthError) as exc:
            firebase_admin.delete_app(app)
            raise ClientError(f"error get client: {exc}") from exc

        logger.info("Opened Firestore client for project %s", getattr(db, "project", "?"))
        return cls(db, app)

    def documents(
        self
        ,collection: str
        ,*
        ,order_by: Optional[str] = None
        ,transaction: Any = None
    ) -> DocumentCursor:
        """Return a cursor over ``collection``, ascending on ``order_by`` when given."""

        query = self.db.collection(collection)
        if order_by:
            query = query.order_by(order_by, direction=Query.ASCENDING)
        return DocumentCursor(collection, query, transaction)

    def run_transaction(self, unit_of_work: Callable[[Any], T]) -> T:
        """Run ``unit_of_work(transaction)`` and commit it, or roll back if it raises."""

        transaction = self.db.transaction()
        return transactional(unit_of_work)(transaction)

    def close(self) -> None:
        close = getattr(self.db, "close", None)
        if close is not None:
            close()
        if self.app is not None:
            firebase_admin.delete_app(self.app)
            self.app = None

    def __enter__(self) -> "FirestoreClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
