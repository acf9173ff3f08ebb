"""Bucket-scoped object storage for brand assets (company logo).

Bucket rows carry the policy: a per-object size ceiling, the allowed MIME
types and whether anonymous reads are allowed. Any write needs an
authenticated user. Object bytes go through :class:`FileStorageService`.
"""

from __future__ import annotations

import logging
import re
import uuid
from typing import Any

from sqlalchemy.orm import Session

from kasir.app.core.config import settings
from kasir.app.models.storage import StorageBucket, StorageObject
from kasir.app.models.user import User
from kasir.app.services.file_service import FileStorageService
from kasir.app.services.store_settings import upsert_setting

logger = logging.getLogger(__name__)

COMPANY_ASSETS_BUCKET = "company-assets"
COMPANY_ASSETS_SIZE_LIMIT = 5 * 1024 * 1024
COMPANY_ASSETS_MIME_TYPES = ["image/jpeg", "image/png", "image/gif", "image/webp"]

_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}
UPLOAD_CHUNK_SIZE = 64 * 1024
_SAFE_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,254}$")


class AssetRejectedError(ValueError):
    """Upload refused by the bucket policy."""


class AssetTooLargeError(AssetRejectedError):
    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"File is {size} bytes; the limit is {limit} bytes")


class UnsupportedMediaTypeError(AssetRejectedError):
    def __init__(self, mime_type: str, allowed: list[str]) -> None:
        self.mime_type = mime_type
        super().__init__(
            f"Type {mime_type or 'unknown'} not allowed; use one of {', '.join(allowed)}"
        )


class AssetAccessDenied(PermissionError):
    pass


def get_bucket(db: Session, bucket_id: str) -> StorageBucket:
    bucket = db.query(StorageBucket).filter(StorageBucket.id == bucket_id).first()
    if not bucket:
        raise LookupError(f"Bucket {bucket_id} not found")
    return bucket


def _object_path(bucket_id: str, name: str) -> str:
    return f"{bucket_id}/{name}"


def _validate_name(name: str) -> None:
    if not _SAFE_NAME.match(name) or ".." in name:
        raise AssetRejectedError(f"Invalid object name: {name!r}")


def _require_user(user: User | None, action: str) -> User:
    if user is None or not user.is_active:
        raise AssetAccessDenied(f"Authentication required to {action} assets")
    return user


def check_policy(bucket: StorageBucket, mime_type: str, size: int) -> None:
    allowed = bucket.allowed_mime_types
    if allowed and mime_type not in allowed:
        raise UnsupportedMediaTypeError(mime_type, allowed)
    if bucket.file_size_limit is not None and size > bucket.file_size_limit:
        raise AssetTooLargeError(size, bucket.file_size_limit)


async def read_upload(upload: Any, limit: int | None) -> bytes:
    """Read an uploaded file in chunks, stopping once it passes *limit* bytes."""
    if limit is None:
        return await upload.read()
    data = bytearray()
    while True:
        chunk = await upload.read(UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        data.extend(chunk)
        if len(data) > limit:
            raise AssetTooLargeError(len(data), limit)
    return bytes(data)


def public_url(bucket_id: str, name: str) -> str:
    return f"{settings.PUBLIC_BASE_URL}/api/v1/assets/{bucket_id}/{name}"


def put_object(
    db: Session,
    bucket_id: str,
    name: str,
    data: bytes,
    mime_type: str,
    user: User | None,
    *,
    replace: bool = False,
) -> StorageObject:
    """Insert (or with ``replace=True`` update) one object. Commits."""
    user = _require_user(user, "upload" if not replace else "update")
    bucket = get_bucket(db, bucket_id)
    _validate_name(name)
    check_policy(bucket, mime_type, len(data))

    obj = (
        db.query(StorageObject)
        .filter(StorageObject.bucket_id == bucket_id, StorageObject.name == name)
        .first()
    )
    if obj and not replace:
        raise ValueError(f"Object {name} already exists in {bucket_id}")
    if obj is None and replace:
        raise LookupError(f"Object {name} not found in {bucket_id}")

    FileStorageService().save(_object_path(bucket_id, name), data)
    if obj is None:
        obj = StorageObject(bucket_id=bucket_id, name=name)
        db.add(obj)
    obj.mime_type = mime_type
    obj.size = len(data)
    obj.owner_id = user.id
    db.commit()
    db.refresh(obj)
    logger.info("Stored %s/%s (%d bytes) for %s", bucket_id, name, len(data), user.username)
    return obj


def get_object(
    db: Session, bucket_id: str, name: str, user: User | None = None
) -> tuple[StorageObject, bytes]:
    bucket = get_bucket(db, bucket_id)
    if not bucket.public:
        _require_user(user, "read")
    obj = (
        db.query(StorageObject)
        .filter(StorageObject.bucket_id == bucket_id, StorageObject.name == name)
        .first()
    )
    if not obj:
        raise LookupError(f"Object {name} not found in {bucket_id}")
    return obj, FileStorageService().read(_object_path(bucket_id, name))


def delete_object(db: Session, bucket_id: str, name: str, user: User | None) -> None:
    _require_user(user, "delete")
    get_bucket(db, bucket_id)
    obj = (
        db.query(StorageObject)
        .filter(StorageObject.bucket_id == bucket_id, StorageObject.name == name)
        .first()
    )
    if not obj:
        raise LookupError(f"Object {name} not found in {bucket_id}")
    FileStorageService().delete(_object_path(bucket_id, name))
    db.delete(obj)
    db.commit()


def upload_company_logo(
    db: Session, data: bytes, mime_type: str, user: User | None
) -> str:
    """Store a new logo in ``company-assets`` and point ``company_logo`` at it."""
    name = f"logo-{uuid.uuid4().hex[:12]}{_EXTENSIONS.get(mime_type, '')}"
    put_object(db, COMPANY_ASSETS_BUCKET, name, data, mime_type, user)
    url = public_url(COMPANY_ASSETS_BUCKET, name)
    upsert_setting(db, "company_logo", url)
    db.commit()
    return url
