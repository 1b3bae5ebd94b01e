from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from ledger.persistence import InMemoryKeyValueStore, KeyValueStore, SqlKeyValueStore
from ledger.persistence.models import Base
from ledger.persistence.repository import KeyValueRepository
from shared.observability.privacy import hash_payload


def _session_factory(url: str):
    engine = create_engine(
        url,
        connect_args={"check_same_thread": False},
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    return engine, sessionmaker(bind=engine, expire_on_commit=False, future=True)


def test_blob_survives_new_engine(tmp_path: Path) -> None:
    """Stored blobs persist even after a new engine/session is created."""
    url = f"sqlite:///{tmp_path / 'ledger.db'}"

    engine_one, SessionOne = _session_factory(url)
    with SessionOne() as session:
        KeyValueRepository(session).put_blob("expenses_app_data", '{"monthlyData": []}')
    engine_one.dispose()

    engine_two, SessionTwo = _session_factory(url)
    with SessionTwo() as session:
        restored = KeyValueRepository(session).get_blob("expenses_app_data")

    assert restored is not None
    assert restored.value == '{"monthlyData": []}'
    assert restored.version == 1
    engine_two.dispose()


def test_every_write_bumps_version_and_records_a_digest(tmp_path: Path) -> None:
    engine, factory = _session_factory(f"sqlite:///{tmp_path / 'revisions.db'}")

    with factory() as session:
        repo = KeyValueRepository(session)
        repo.put_blob("state", "first")
        latest = repo.put_blob("state", "second, longer")
        revisions = repo.list_revisions("state")

    assert latest.value == "second, longer"
    assert latest.version == 2
    assert [revision.version for revision in revisions] == [1, 2]
    assert revisions[0].digest == hash_payload("first")
    assert revisions[1].size_bytes == len("second, longer")
    engine.dispose()


def test_missing_key_reads_as_none(tmp_path: Path) -> None:
    engine, factory = _session_factory(f"sqlite:///{tmp_path / 'empty.db'}")

    with factory() as session:
        assert KeyValueRepository(session).get_blob("nothing-here") is None
    engine.dispose()


@pytest.mark.anyio
async def test_sql_store_round_trip(tmp_path: Path) -> None:
    store = SqlKeyValueStore.from_url(f"sqlite:///{tmp_path / 'nested' / 'store.db'}")

    assert await store.read("expenses_app_data") is None

    await store.write("expenses_app_data", "v1")
    await store.write("expenses_app_data", "v2")

    assert await store.read("expenses_app_data") == "v2"
    assert (tmp_path / "nested" / "store.db").exists()


@pytest.mark.anyio
async def test_in_memory_store_last_write_wins() -> None:
    store = InMemoryKeyValueStore({"seed": "x"})

    await store.write("k", "a")
    await store.write("k", "b")

    assert await store.read("k") == "b"
    assert await store.read("missing") is None
    assert store.snapshot() == {"seed": "x", "k": "b"}


def test_stores_satisfy_protocol(tmp_path: Path) -> None:
    assert isinstance(InMemoryKeyValueStore(), KeyValueStore)
    assert isinstance(SqlKeyValueStore.from_url(f"sqlite:///{tmp_path / 'p.db'}"), KeyValueStore)
