from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kasir.app.core.database import Base


class StorageBucket(Base):
    """Object-storage bucket and its access policy.

    ``public`` buckets allow anonymous reads. Writes (insert, update, delete)
    always require an authenticated session.
    """

    __tablename__ = "storage_buckets"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    file_size_limit: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    allowed_mime_types: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    objects: Mapped[list[StorageObject]] = relationship(back_populates="bucket")


class StorageObject(Base):
    __tablename__ = "storage_objects"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    bucket_id: Mapped[str] = mapped_column(
        ForeignKey("storage_buckets.id"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    owner_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    bucket: Mapped[StorageBucket] = relationship(back_populates="objects")

    __table_args__ = (
        UniqueConstraint("bucket_id", "name", name="uq_storage_object_bucket_name"),
        Index("ix_storage_objects_bucket", "bucket_id"),
    )
