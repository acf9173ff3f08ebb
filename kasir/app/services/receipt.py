"""Printable HTML invoice for a completed sale."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from uuid import UUID

from jinja2 import Environment, FileSystemLoader, select_autoescape
from sqlalchemy.orm import Session

from kasir.app.models.sales import Sale
from kasir.app.models.user import User
from kasir.app.schemas.cashier import ReceiptConfig
from kasir.app.services.file_service import FileStorageService
from kasir.app.services.invoice import format_rupiah, store_now, to_store_time
from kasir.app.services.pricing import LinePricing, calculate_line_pricing, summarize
from kasir.app.services.store_settings import RECEIPT_SETTING_KEYS, load_store_settings

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
RECEIPT_DIR = "receipts"


def _percent(value: Decimal) -> str:
    return f"{value.normalize():f}%"


env = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html"]),
)
env.filters["rupiah"] = format_rupiah
env.filters["percent"] = _percent


@dataclass(frozen=True)
class ReceiptLine:
    name: str
    quantity: int
    unit_price: Decimal
    discount_pct: Decimal
    pricing: LinePricing


def format_invoice_date(when: datetime | None) -> str:
    """``d/m/yyyy``, as Indonesian locale dates are written."""
    when = store_now() if when is None else to_store_time(when)
    return f"{when.day}/{when.month}/{when.year}"


def build_receipt_context(
    db: Session, sale: Sale, config: ReceiptConfig | None = None
) -> dict:
    config = config or ReceiptConfig()
    settings_map = load_store_settings(db)
    store = {key: settings_map.get(key, "") for key in RECEIPT_SETTING_KEYS}

    lines = [
        ReceiptLine(
            name=item.product.name if item.product else str(item.product_id),
            quantity=item.quantity,
            unit_price=Decimal(str(item.unit_price)),
            discount_pct=Decimal(str(item.discount)),
            pricing=calculate_line_pricing(item.unit_price, item.quantity, item.discount),
        )
        for item in sale.items
    ]
    totals = summarize(line.pricing for line in lines)

    cashier = db.query(User).filter(User.id == sale.cashier_id).first()
    cashier_name = cashier.full_name if cashier and cashier.full_name else "Unknown"

    note1 = store["payment_note_line1"]
    if not note1 and lines:
        average = (totals.dpp_faktur / len(lines)).quantize(Decimal("1"))
        note1 = f"Harga BCA : {format_rupiah(average)}"

    return {
        "sale_number": sale.sale_number,
        "sale_date": format_invoice_date(sale.created_at),
        "customer_name": sale.customer_name,
        "cashier_name": cashier_name,
        "store": store,
        "lines": lines,
        "totals": totals,
        "total": sale.total_amount,
        "config": config,
        "payment_note_line1": note1,
        "payment_note_line2": store["payment_note_line2"],
    }


def render_receipt_html(context: dict) -> str:
    return env.get_template("receipt.html").render(**context)


def render_sale_receipt(
    db: Session, sale_id: UUID, config: ReceiptConfig | None = None
) -> str:
    sale = db.query(Sale).filter(Sale.id == sale_id).first()
    if not sale:
        raise LookupError("Sale not found")
    return render_receipt_html(build_receipt_context(db, sale, config))


def receipt_path(sale_number: str) -> str:
    return f"{RECEIPT_DIR}/{sale_number}.html"


def store_receipt(sale_number: str, html: str) -> str:
    path = FileStorageService().save(receipt_path(sale_number), html.encode("utf-8"))
    logger.info("Receipt for %s stored at %s", sale_number, path)
    return path


def load_stored_receipt(sale_number: str) -> str | None:
    fs = FileStorageService()
    if not fs.exists(receipt_path(sale_number)):
        return None
    return fs.read(receipt_path(sale_number)).decode("utf-8")
