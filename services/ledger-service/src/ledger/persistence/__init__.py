"""Persistence primitives for the ledger service."""

from ledger.persistence.database import (
    DB_URL_ENV_VAR,
    DEFAULT_DB_FILENAME,
    DEFAULT_DB_PATH,
    build_engine,
    build_session_factory,
    get_database_url,
    init_db,
)
from ledger.persistence.models import Base, BlobRevision, StoredBlob
from ledger.persistence.repository import KeyValueRepository
from ledger.persistence.store import InMemoryKeyValueStore, KeyValueStore, SqlKeyValueStore

__all__ = [
    "Base",
    "BlobRevision",
    "DB_URL_ENV_VAR",
    "DEFAULT_DB_FILENAME",
    "DEFAULT_DB_PATH",
    "InMemoryKeyValueStore",
    "KeyValueRepository",
    "KeyValueStore",
    "SqlKeyValueStore",
    "StoredBlob",
    "build_engine",
    "build_session_factory",
    "get_database_url",
    "init_db",
]
