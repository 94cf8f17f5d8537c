from __future__ import annotations


class NotePageError(RuntimeError):
    """Base class for every error the CLI reports and exits on."""


class ConfigurationError(NotePageError):
    """Raised when required configuration is missing or malformed."""


class ClientError(NotePageError):
    """Raised when the Firestore client cannot be initialized or authenticated."""


class ReadError(NotePageError):
    """Raised when a collection scan fails to iterate or decode."""


class MigrationError(NotePageError):
    """Raised when the notebook backfill cannot run or its transaction fails."""
