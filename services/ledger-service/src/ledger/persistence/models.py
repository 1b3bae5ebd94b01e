"""SQLAlchemy models for stored state blobs and their write history."""

from __future__ import annotations

from datetime import datetime
from typing import List

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


class StoredBlob(Base):
    """Current value for one storage key; every write replaces it wholesale."""

    __tablename__ = "stored_blobs"

    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    version: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    revisions: Mapped[List["BlobRevision"]] = relationship(
        back_populates="blob",
        cascade="all, delete-orphan",
        order_by="BlobRevision.id",
    )


class BlobRevision(Base):
    """Write history for a key. Holds a digest of the value, never the value."""

    __tablename__ = "blob_revisions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    blob_key: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("stored_blobs.key", ondelete="CASCADE"),
        nullable=False,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    size_bytes: Mapped[int] = mapped_column(Integer, nullable=False)
    digest: Mapped[str] = mapped_column(String(64), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    blob: Mapped["StoredBlob"] = relationship(back_populates="revisions")
