"""Asynchronous key-value stores the ledger engine persists through."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Protocol, runtime_checkable

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from ledger.persistence.database import build_engine, build_session_factory, init_db
from ledger.persistence.repository import KeyValueRepository

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """
    Opaque string store: whole-value replace, last write wins.

    Implementations raise on failure; the engine wraps whatever they raise.
    """

    async def read(self, key: str) -> str | None:
        ...

    async def write(self, key: str, value: str) -> None:
        ...


class InMemoryKeyValueStore:
    """Dict-backed store for tests and for embedding the ledger without a database."""

    def __init__(self, initial: Dict[str, str] | None = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})

    async def read(self, key: str) -> str | None:
        return self._values.get(key)

    async def write(self, key: str, value: str) -> None:
        self._values[key] = value

    def snapshot(self) -> Dict[str, str]:
        return dict(self._values)


class SqlKeyValueStore:
    """Durable store backed by SQLAlchemy; blocking session work runs on a worker thread."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    @classmethod
    def from_url(cls, database_url: str | None = None) -> "SqlKeyValueStore":
        engine = build_engine(database_url)
        return cls.from_engine(engine)

    @classmethod
    def from_engine(cls, engine: Engine) -> "SqlKeyValueStore":
        init_db(engine)
        return cls(build_session_factory(engine))

    async def read(self, key: str) -> str | None:
        return await asyncio.to_thread(self._read_sync, key)

    async def write(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write_sync, key, value)

    def _read_sync(self, key: str) -> str | None:
        with self._session_factory() as session:
            record = KeyValueRepository(session).get_blob(key)
            return record.value if record is not None else None

    def _write_sync(self, key: str, value: str) -> None:
        with self._session_factory() as session:
            record = KeyValueRepository(session).put_blob(key, value)
            logger.debug({"event": "kv_write", "key": key, "version": record.version})
