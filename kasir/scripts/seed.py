"""Seed the database with staff, store settings and a demo catalog.

Usage:
    python -m kasir.scripts.seed
"""

from __future__ import annotations

from decimal import Decimal

from kasir.app.core.database import SessionLocal
from kasir.app.core.security import get_password_hash
from kasir.app.models.inventory import Product
from kasir.app.models.setting import Setting
from kasir.app.models.storage import StorageBucket
from kasir.app.models.user import RoleEnum, User
from kasir.app.services.assets import (
    COMPANY_ASSETS_BUCKET,
    COMPANY_ASSETS_MIME_TYPES,
    COMPANY_ASSETS_SIZE_LIMIT,
)

STAFF: list[tuple[str, str, RoleEnum]] = [
    ("admin", "Administrator", RoleEnum.ADMIN),
    ("kasir1", "Kasir Satu", RoleEnum.CASHIER),
    ("gudang1", "Staf Gudang", RoleEnum.STOCKIST),
]

STORE_SETTINGS: dict[str, str] = {
    "store_name": "Toko Kasir",
    "store_address": "Jl. Merdeka No. 1, Jakarta",
    "store_phone": "021-555-0100",
    "store_email": "halo@tokokasir.id",
    "store_website": "",
    "receipt_header": "Terima kasih atas kunjungan Anda",
    "receipt_footer": "Barang yang sudah dibeli tidak dapat dikembalikan",
    "payment_note_line1": "",
    "payment_note_line2": "",
    "company_logo": "",
}

# (sku, name, PPN-inclusive price, stock)
PRODUCTS: list[tuple[str, str, Decimal, int]] = [
    ("BRG-001", "Beras Premium 5kg", Decimal("78000"), 40),
    ("BRG-002", "Minyak Goreng 2L", Decimal("36500"), 60),
    ("BRG-003", "Gula Pasir 1kg", Decimal("17500"), 80),
    ("BRG-004", "Kopi Bubuk 200g", Decimal("24000"), 25),
    ("BRG-005", "Teh Celup isi 25", Decimal("9800"), 4),
]

DEFAULT_PASSWORD = "Kasir@2026!"


def seed() -> None:
    db = SessionLocal()
    try:
        # ── Staff ──────────────────────────────────────────────────────
        for username, full_name, role in STAFF:
            user = db.query(User).filter_by(username=username).first()
            if user:
                user.hashed_password = get_password_hash(DEFAULT_PASSWORD)
                print(f"Updated password for {username}.")
            else:
                db.add(
                    User(
                        username=username,
                        full_name=full_name,
                        hashed_password=get_password_hash(DEFAULT_PASSWORD),
                        role=role,
                    )
                )
                print(f"Created user {username} ({role.value}).")

        # ── Store settings ─────────────────────────────────────────────
        for key, value in STORE_SETTINGS.items():
            if not db.query(Setting).filter_by(key=key).first():
                db.add(Setting(key=key, value=value))
                print(f"Created setting {key}")

        # ── Catalog ────────────────────────────────────────────────────
        for sku, name, price, stock in PRODUCTS:
            if not db.query(Product).filter_by(sku=sku).first():
                db.add(Product(sku=sku, name=name, price=price, stock_quantity=stock))
                print(f"Created product {sku} - {name}")

        # Bucket is normally created by the migration; cover create_all setups
        if not db.get(StorageBucket, COMPANY_ASSETS_BUCKET):
            db.add(
                StorageBucket(
                    id=COMPANY_ASSETS_BUCKET,
                    name=COMPANY_ASSETS_BUCKET,
                    public=True,
                    file_size_limit=COMPANY_ASSETS_SIZE_LIMIT,
                    allowed_mime_types=list(COMPANY_ASSETS_MIME_TYPES),
                )
            )
            print(f"Created bucket {COMPANY_ASSETS_BUCKET}")

        db.commit()
        print("Seed complete.")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
