from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from kasir.app.api.deps import get_current_user, get_optional_user
from kasir.app.core.cache import SETTINGS_VIEW, query_cache
from kasir.app.core.database import get_db
from kasir.app.models.user import User
from kasir.app.services.assets import (
    COMPANY_ASSETS_BUCKET,
    AssetAccessDenied,
    AssetRejectedError,
    AssetTooLargeError,
    UnsupportedMediaTypeError,
    delete_object,
    get_bucket,
    get_object,
    public_url,
    put_object,
    read_upload,
    upload_company_logo,
)

router = APIRouter()


def _to_http(e: Exception) -> HTTPException:
    if isinstance(e, AssetTooLargeError):
        return HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(e))
    if isinstance(e, UnsupportedMediaTypeError):
        return HTTPException(status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail=str(e))
    if isinstance(e, AssetAccessDenied):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    if isinstance(e, LookupError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, AssetRejectedError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.post("/logo", status_code=status.HTTP_201_CREATED)
async def upload_logo(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict[str, str]:
    try:
        limit = get_bucket(db, COMPANY_ASSETS_BUCKET).file_size_limit
        data = await read_upload(file, limit)
        url = upload_company_logo(db, data, file.content_type or "", current_user)
    except (AssetRejectedError, AssetAccessDenied, LookupError) as e:
        raise _to_http(e)
    query_cache.invalidate(SETTINGS_VIEW)
    return {"company_logo": url}


@router.post("/{bucket_id}", status_code=status.HTTP_201_CREATED)
async def upload_object(
    bucket_id: str,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict[str, str]:
    name = file.filename or ""
    try:
        data = await read_upload(file, get_bucket(db, bucket_id).file_size_limit)
        put_object(db, bucket_id, name, data, file.content_type or "", current_user)
    except (ValueError, AssetAccessDenied, LookupError) as e:
        raise _to_http(e)
    return {"bucket": bucket_id, "name": name, "url": public_url(bucket_id, name)}


@router.put("/{bucket_id}/{name}")
async def replace_object(
    bucket_id: str,
    name: str,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict[str, str]:
    try:
        data = await read_upload(file, get_bucket(db, bucket_id).file_size_limit)
        put_object(
            db, bucket_id, name, data, file.content_type or "", current_user, replace=True
        )
    except (ValueError, AssetAccessDenied, LookupError) as e:
        raise _to_http(e)
    return {"bucket": bucket_id, "name": name, "url": public_url(bucket_id, name)}


@router.get("/{bucket_id}/{name}")
def read_object(
    bucket_id: str,
    name: str,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
) -> Response:
    try:
        obj, data = get_object(db, bucket_id, name, current_user)
    except (AssetAccessDenied, LookupError) as e:
        raise _to_http(e)
    return Response(content=data, media_type=obj.mime_type)


@router.delete("/{bucket_id}/{name}", status_code=status.HTTP_204_NO_CONTENT)
def remove_object(
    bucket_id: str,
    name: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> None:
    try:
        delete_object(db, bucket_id, name, current_user)
    except (AssetAccessDenied, LookupError) as e:
        raise _to_http(e)
