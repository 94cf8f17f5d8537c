from __future__ import annotations

import json
import logging
from typing import List, Optional, Type, TypeVar

from .errors import ReadError
from .firestore_client import EXHAUSTED, FirestoreClient
from .models import DecodeError, Notebook, Page

NOTEBOOKS_COLLECTION = "notebooks"
PAGES_COLLECTION = "pages"
CREATED_AT_FIELD = "createdAt"

Record = TypeVar("Record", Notebook, Page)


def fetch_collection(
    client: FirestoreClient
    ,collection: str
    ,record_type: Type[Record]
    ,*
    ,order_by: Optional[str] = CREATED_AT_FIELD
    ,debug_logger: Optional[logging.Logger] = None
) -> List[Record]:
    """Scan a whole collection in order and decode every document into ``record_type``."""

    cursor = client.documents(collection, order_by=order_by)
    documents = iter(cursor)
    records: List[Record] = []

    while True:
        snapshot = cursor.next_document(documents)
        if snapshot is EXHAUSTED:
            break

        data = snapshot.to_dict() or {}
        if debug_logger:
            debug_logger.info(
                "%s/%s:\n%s", collection, snapshot.id, json.dumps(data, indent=2, default=str)
            )
        try:
            records.append(record_type.from_document(snapshot.id, data))
        except DecodeError as exc:
            raise ReadError(
                f"failed to convert {collection} document {snapshot.id}: {exc}"
            ) from exc

    return records


def fetch_notebooks(client: FirestoreClient, **kwargs) -> List[Notebook]:
    return fetch_collection(client, NOTEBOOKS_COLLECTION, Notebook, **kwargs)


def fetch_pages(client: FirestoreClient, **kwargs) -> List[Page]:
    return fetch_collection(client, PAGES_COLLECTION, Page, **kwargs)
