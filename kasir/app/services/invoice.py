from __future__ import annotations

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from zoneinfo import ZoneInfo

from sqlalchemy import func
from sqlalchemy.orm import Session

from kasir.app.core.config import settings
from kasir.app.models.sales import Sale

SALE_NUMBER_PREFIX = "TRX"


def store_now() -> datetime:
    """Current time in the store's timezone."""
    return datetime.now(ZoneInfo(settings.STORE_TIMEZONE))


def to_store_time(when: datetime) -> datetime:
    """Convert an aware datetime to store time; naive values are taken as-is."""
    if when.tzinfo is None:
        return when
    return when.astimezone(ZoneInfo(settings.STORE_TIMEZONE))


def generate_sale_number(sequence: int, when: datetime | None = None) -> str:
    """Return a formatted sale number like TRX-20261019-0001."""
    when = store_now() if when is None else to_store_time(when)
    return f"{SALE_NUMBER_PREFIX}-{when:%Y%m%d}-{sequence:04d}"


def next_sale_number(db: Session, when: datetime | None = None) -> str:
    """Next sale number in the per-day sequence, after the highest issued today."""
    when = store_now() if when is None else to_store_time(when)
    prefix = f"{SALE_NUMBER_PREFIX}-{when:%Y%m%d}-"
    # Suffixes are zero-padded to four digits, so a longer one is always larger
    last = (
        db.query(Sale.sale_number)
        .filter(Sale.sale_number.like(f"{prefix}%"))
        .order_by(func.length(Sale.sale_number).desc(), Sale.sale_number.desc())
        .first()
    )
    sequence = int(last[0].rsplit("-", 1)[1]) + 1 if last else 1
    return generate_sale_number(sequence, when)


def format_rupiah(amount: Decimal | int | float) -> str:
    """Format an amount as Indonesian rupiah, e.g. ``Rp 1.234.567``."""
    value = Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}Rp {abs(int(value)):,}".replace(",", ".")
