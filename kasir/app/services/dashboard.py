from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from kasir.app.core.config import settings
from kasir.app.models.inventory import Product
from kasir.app.models.sales import InvoiceStatus, Sale
from kasir.app.services.invoice import store_now, to_store_time


def get_dashboard_stats(db: Session, now: datetime | None = None) -> dict:
    """Headline numbers for the dashboard; cached as the ``dashboard-stats`` view."""
    local = store_now() if now is None else to_store_time(now)
    day_start = local.replace(hour=0, minute=0, second=0, microsecond=0)
    if day_start.tzinfo is not None:
        # Timestamps are stored in UTC
        day_start = day_start.astimezone(timezone.utc)

    sales_today, revenue_today = (
        db.query(
            func.count(Sale.id),
            func.coalesce(func.sum(Sale.total_amount), Decimal("0")),
        )
        .filter(Sale.created_at >= day_start)
        .one()
    )
    unpaid_invoices = (
        db.query(func.count(Sale.id))
        .filter(Sale.invoice_status == InvoiceStatus.UNPAID)
        .scalar()
    )
    active_products = (
        db.query(func.count(Product.id)).filter(Product.is_active.is_(True)).scalar()
    )
    low_stock = (
        db.query(func.count(Product.id))
        .filter(
            Product.is_active.is_(True),
            Product.stock_quantity <= settings.LOW_STOCK_THRESHOLD,
        )
        .scalar()
    )
    return {
        "sales_today": sales_today or 0,
        "revenue_today": str(Decimal(str(revenue_today or 0))),
        "unpaid_invoices": unpaid_invoices or 0,
        "active_products": active_products or 0,
        "low_stock_products": low_stock or 0,
    }
