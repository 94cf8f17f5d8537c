"""In-memory stand-ins for the parts of the Firestore client the CLI touches."""

from __future__ import annotations

import copy
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest
from google.api_core.exceptions import Aborted

from note_page_cli import firestore_client
from note_page_cli.firestore_client import FirestoreClient

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def at(minutes: int) -> datetime:
    return BASE_TIME + timedelta(minutes=minutes)


class FakeDocumentRef:
    def __init__(self, collection: str, doc_id: str) -> None:
        self.collection = collection
        self.id = doc_id


class FakeSnapshot:
    def __init__(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        self.id = doc_id
        self.reference = FakeDocumentRef(collection, doc_id)
        self._data = copy.deepcopy(data)

    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self._data)


class FakeQuery:
    def __init__(self, db: "FakeFirestore", collection: str, order_field: Optional[str] = None) -> None:
        self.db = db
        self.collection = collection
        self.order_field = order_field

    def order_by(self, field: str, direction: str = "ASCENDING") -> "FakeQuery":
        assert direction == "ASCENDING"
        return FakeQuery(self.db, self.collection, field)

    def stream(self, transaction: Any = None):
        self.db.streams.append((self.collection, transaction))
        docs = list(self.db.collections.get(self.collection, {}).items())
        if self.order_field:
            # Firestore leaves out documents that lack the ordering field
            docs = [item for item in docs if self.order_field in item[1]]
            docs.sort(key=lambda item: item[1][self.order_field])
        for index, (doc_id, data) in enumerate(docs):
            if self.db.fail_stream_after is not None and index >= self.db.fail_stream_after:
                raise self.db.stream_error
            yield FakeSnapshot(self.collection, doc_id, data)


class FakeTransaction:
    def __init__(self, db: "FakeFirestore") -> None:
        self.db = db
        self.writes: List[tuple] = []
        self.committed = False
        self.rolled_back = False

    def set(self, reference: FakeDocumentRef, data: Dict[str, Any], merge: bool = False) -> None:
        self.writes.append((reference, dict(data), merge))

    def commit(self) -> None:
        if self.db.commit_error is not None:
            raise self.db.commit_error
        for reference, data, merge in self.writes:
            docs = self.db.collections.setdefault(reference.collection, {})
            if merge:
                docs.setdefault(reference.id, {}).update(data)
            else:
                docs[reference.id] = data
        self.committed = True

    def rollback(self) -> None:
        self.writes = []
        self.rolled_back = True


class FakeFirestore:
    def __init__(self) -> None:
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.transactions: List[FakeTransaction] = []
        self.streams: List[tuple] = []
        self.fail_stream_after: Optional[int] = None
        self.stream_error: Exception = Aborted("stream interrupted")
        self.commit_error: Optional[Exception] = None
        self.closed = False

    def add(self, collection: str, doc_id: str, **data: Any) -> None:
        self.collections.setdefault(collection, {})[doc_id] = data

    def collection(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def transaction(self) -> FakeTransaction:
        transaction = FakeTransaction(self)
        self.transactions.append(transaction)
        return transaction

    def close(self) -> None:
        self.closed = True


def fake_transactional(unit_of_work):
    def run(transaction: FakeTransaction):
        try:
            result = unit_of_work(transaction)
        except Exception:
            transaction.rollback()
            raise
        try:
            transaction.commit()
        except Exception:
            transaction.rollback()
            raise
        return result

    return run


@pytest.fixture
def fake_db(monkeypatch: pytest.MonkeyPatch) -> FakeFirestore:
    monkeypatch.setattr(firestore_client, "transactional", fake_transactional)
    return FakeFirestore()


@pytest.fixture
def client(fake_db: FakeFirestore) -> FirestoreClient:
    return FirestoreClient(fake_db)


@pytest.fixture
def seeded_db(fake_db: FakeFirestore) -> FakeFirestore:
    """Notebooks default=A and other=B, one legacy page and one already linked."""

    fake_db.add("notebooks", "A", name="default", createdAt=at(0), updatedAt=at(0))
    fake_db.add("notebooks", "B", name="other", createdAt=at(1), updatedAt=at(1))
    fake_db.add("pages", "p1", name="legacy", content="old", createdAt=at(2), updatedAt=at(2))
    fake_db.add(
        "pages", "p2", name="linked", content="new", noteBookId="B", createdAt=at(3), updatedAt=at(3)
    )
    return fake_db
