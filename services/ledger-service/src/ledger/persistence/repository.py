"""Key-value data access helpers."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from ledger.persistence.models import BlobRevision, StoredBlob
from shared.observability.privacy import hash_payload


class KeyValueRepository:
    """Thin repository that encapsulates persistence operations."""

    def __init__(self, db: Session):
        self._db = db

    def get_blob(self, key: str) -> StoredBlob | None:
        return self._db.get(StoredBlob, key)

    def put_blob(self, key: str, value: str) -> StoredBlob:
        """Replace the value under `key` (creating the row if needed) and record a revision."""
        record = self.get_blob(key)
        if record is None:
            record = StoredBlob(key=key, value=value, version=1)
        else:
            record.value = value
            record.version += 1
        self._db.add(record)
        self._record_revision(record)
        self._db.commit()
        self._db.refresh(record)
        return record

    def list_revisions(self, key: str) -> list[BlobRevision]:
        statement = select(BlobRevision).where(BlobRevision.blob_key == key).order_by(BlobRevision.id)
        return list(self._db.scalars(statement))

    def _record_revision(self, record: StoredBlob) -> None:
        revision = BlobRevision(
            blob_key=record.key,
            version=record.version,
            size_bytes=len(record.value.encode("utf-8")),
            digest=hash_payload(record.value),
        )
        self._db.add(revision)
