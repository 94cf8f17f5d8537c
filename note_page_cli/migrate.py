from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from google.api_core.exceptions import GoogleAPIError

from .errors import MigrationError, ReadError
from .firestore_client import EXHAUSTED, FirestoreClient
from .models import DEFAULT_NOTEBOOK_NAME, NOTEBOOK_ID_FIELD, Notebook
from .reader import PAGES_COLLECTION, fetch_notebooks

logger = logging.getLogger("note_page_cli")


@dataclass
class MigrationResult:
    default_notebook: Notebook
    scanned: int = 0
    updated_page_ids: List[str] = field(default_factory=list)

    @property
    def updated(self) -> int:
        return len(self.updated_page_ids)


def find_default_notebook(notebooks: Sequence[Notebook]) -> Optional[Notebook]:
    """Return the first notebook named "default", if any."""

    for notebook in notebooks:
        if notebook.is_default:
            return notebook
    return None


def needs_notebook_id(data: Optional[dict]) -> bool:
    return (data or {}).get(NOTEBOOK_ID_FIELD) is None


def add_notebook_id(
    client: FirestoreClient
    ,*
    ,debug_logger: Optional[logging.Logger] = None
) -> MigrationResult:
    """Point every page without a noteBookId at the default notebook, in one transaction.

    Pages that already carry the field are left alone, so a second run is a
    no-op. Any failure rolls the whole batch back.
    """

    try:
        notebooks = fetch_notebooks(client, debug_logger=debug_logger)
    except ReadError as exc:
        raise MigrationError(f"failed to read notebooks: {exc}") from exc

    default_notebook = find_default_notebook(notebooks)
    if default_notebook is None:
        raise MigrationError(
            f"no notebook named {DEFAULT_NOTEBOOK_NAME!r}; create one before migrating"
        )
    logger.info("Default notebook is %s", default_notebook.id)

    def backfill(transaction: Any) -> MigrationResult:
        result = MigrationResult(default_notebook=default_notebook)
        cursor = client.documents(PAGES_COLLECTION, transaction=transaction)
        documents = iter(cursor)

        # Firestore transactions must finish every read before the first write.
        pending = []
        while True:
            snapshot = cursor.next_document(documents)
            if snapshot is EXHAUSTED:
                break
            result.scanned += 1
            if needs_notebook_id(snapshot.to_dict()):
                pending.append(snapshot)

        for snapshot in pending:
            transaction.set(
                snapshot.reference, {NOTEBOOK_ID_FIELD: default_notebook.id}, merge=True
            )
            result.updated_page_ids.append(snapshot.id)
            if debug_logger:
                debug_logger.info("Queued %s/%s -> %s", PAGES_COLLECTION, snapshot.id, default_notebook.id)
        return result

    try:
        result = client.run_transaction(backfill)
    except ReadError as exc:
        raise MigrationError(f"migration aborted: {exc}") from exc
    except (GoogleAPIError, ValueError) as exc:
        raise MigrationError(f"failed to commit migration: {exc}") from exc

    logger.info(
        "Migration committed: %d of %d pages updated", result.updated, result.scanned
    )
    return result
