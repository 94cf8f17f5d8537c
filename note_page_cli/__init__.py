"""
Command-line tool for the notebooks and pages kept in Firestore.

It prints both collections in creation order and carries a one-shot
migration that attaches legacy pages to the "default" notebook. The
service-account key file is configured in config.toml rather than on the
command line.
"""
__all__ = [
    "config",
    "errors",
    "firestore_client",
    "models",
    "reader",
    "migrate",
    "cli",
]
