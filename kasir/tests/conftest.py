"""Shared test fixtures.

Tests run against an in-memory SQLite database whose tables are created before
and dropped after every test. The engine shares one connection (``StaticPool``)
so the eager Celery receipt task, which opens its own session, sees the same
data as the request under test.
"""

from __future__ import annotations

import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ.setdefault("FILE_STORAGE_PATH", tempfile.mkdtemp(prefix="kasir-test-"))

from decimal import Decimal
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

import kasir.app.models  # noqa: F401
from kasir.app.core.cache import query_cache
from kasir.app.core.config import settings
from kasir.app.core.database import Base, SessionLocal, engine, get_db
from kasir.app.core.security import create_access_token, get_password_hash
from kasir.app.main import app
from kasir.app.models.inventory import Product
from kasir.app.models.setting import Setting
from kasir.app.models.storage import StorageBucket
from kasir.app.models.user import RoleEnum, User
from kasir.app.services.assets import (
    COMPANY_ASSETS_BUCKET,
    COMPANY_ASSETS_MIME_TYPES,
    COMPANY_ASSETS_SIZE_LIMIT,
)
from kasir.app.services.cart import cart_store


# ─── DB session on a fresh schema per test ───────────────────────────────────


@pytest.fixture()
def db() -> Generator[Session, None, None]:
    """Yield a session on a freshly created schema; dropped after the test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _reset_process_state() -> Generator[None, None, None]:
    """Carts and cached views live in process memory; start every test empty."""
    query_cache.clear()
    cart_store.clear_all()
    yield
    query_cache.clear()
    cart_store.clear_all()


@pytest.fixture(autouse=True)
def _isolated_storage(tmp_path, monkeypatch: pytest.MonkeyPatch) -> str:
    """Receipts and uploaded assets go to a per-test directory."""
    root = str(tmp_path / "files")
    monkeypatch.setattr(settings, "FILE_STORAGE_PATH", root)
    return root


@pytest.fixture()
def client(db: Session) -> Generator[TestClient, None, None]:
    """FastAPI TestClient wired to the test session."""

    def _override_get_db() -> Generator[Session, None, None]:
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ─── Auth helpers ─────────────────────────────────────────────────────────────


def _make_user(db: Session, username: str, full_name: str, role: RoleEnum) -> User:
    user = User(
        username=username,
        full_name=full_name,
        hashed_password=get_password_hash("pass"),
        role=role,
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture()
def admin_user(db: Session) -> User:
    return _make_user(db, "test_admin", "Admin Toko", RoleEnum.ADMIN)


@pytest.fixture()
def cashier_user(db: Session) -> User:
    return _make_user(db, "test_cashier", "Budi Kasir", RoleEnum.CASHIER)


@pytest.fixture()
def stockist_user(db: Session) -> User:
    return _make_user(db, "test_stockist", "Sari Gudang", RoleEnum.STOCKIST)


@pytest.fixture()
def viewer_user(db: Session) -> User:
    return _make_user(db, "test_viewer", "Vina Viewer", RoleEnum.VIEWER)


@pytest.fixture()
def admin_token(admin_user: User) -> str:
    return create_access_token(subject=str(admin_user.id))


@pytest.fixture()
def cashier_token(cashier_user: User) -> str:
    return create_access_token(subject=str(cashier_user.id))


@pytest.fixture()
def viewer_token(viewer_user: User) -> str:
    return create_access_token(subject=str(viewer_user.id))


def auth(token: str) -> dict[str, str]:
    """Return Authorization header dict."""
    return {"Authorization": f"Bearer {token}"}


# ─── Catalog fixtures ─────────────────────────────────────────────────────────


@pytest.fixture()
def product_a(db: Session) -> Product:
    p = Product(
        name="Beras Premium 5kg",
        sku="SKU-A",
        price=Decimal("100000.0000"),
        stock_quantity=10,
    )
    db.add(p)
    db.commit()
    return p


@pytest.fixture()
def product_b(db: Session) -> Product:
    p = Product(
        name="Minyak Goreng 2L",
        sku="SKU-B",
        price=Decimal("50000.0000"),
        stock_quantity=2,
    )
    db.add(p)
    db.commit()
    return p


@pytest.fixture()
def inactive_product(db: Session) -> Product:
    p = Product(
        name="Produk Lama",
        sku="SKU-OLD",
        price=Decimal("10000.0000"),
        stock_quantity=5,
        is_active=False,
    )
    db.add(p)
    db.commit()
    return p


@pytest.fixture()
def sold_out_product(db: Session) -> Product:
    p = Product(
        name="Habis Terjual",
        sku="SKU-OUT",
        price=Decimal("15000.0000"),
        stock_quantity=0,
    )
    db.add(p)
    db.commit()
    return p


# ─── Store settings & storage ─────────────────────────────────────────────────


@pytest.fixture()
def store_settings(db: Session) -> dict[str, str]:
    values = {
        "store_name": "Toko Maju Jaya",
        "store_address": "Jl. Sudirman 10, Jakarta",
        "store_phone": "021-1234567",
        "receipt_header": "Terima kasih",
        "receipt_footer": "Sampai jumpa lagi",
    }
    for key, value in values.items():
        db.add(Setting(key=key, value=value))
    db.commit()
    return values


@pytest.fixture()
def company_assets_bucket(db: Session) -> StorageBucket:
    bucket = StorageBucket(
        id=COMPANY_ASSETS_BUCKET,
        name=COMPANY_ASSETS_BUCKET,
        public=True,
        file_size_limit=COMPANY_ASSETS_SIZE_LIMIT,
        allowed_mime_types=list(COMPANY_ASSETS_MIME_TYPES),
    )
    db.add(bucket)
    db.commit()
    return bucket


@pytest.fixture()
def private_bucket(db: Session) -> StorageBucket:
    bucket = StorageBucket(
        id="private-docs",
        name="private-docs",
        public=False,
        file_size_limit=1024,
        allowed_mime_types=["image/png"],
    )
    db.add(bucket)
    db.commit()
    return bucket
