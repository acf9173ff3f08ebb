"""Receipt rendering tasks."""

from __future__ import annotations

import logging
from uuid import UUID

from kasir.app.core.events import ReceiptRequested
from kasir.app.workers.celery_app import celery

logger = logging.getLogger(__name__)


@celery.task(name="kasir.app.workers.tasks.receipts.render_receipt")
def render_receipt(sale_id: str, receipt_config: dict) -> dict:
    """Render the invoice HTML for a sale and store it via FileStorageService.

    Returns a dict with ``{"file_path": "...", "status": "done"}``.
    """
    from kasir.app.core.database import SessionLocal
    from kasir.app.schemas.cashier import ReceiptConfig
    from kasir.app.services.receipt import render_sale_receipt, store_receipt
    from kasir.app.models.sales import Sale

    db = SessionLocal()
    try:
        sale = db.query(Sale).filter(Sale.id == UUID(sale_id)).first()
        if sale is None:
            return {"status": "error", "detail": f"Unknown sale: {sale_id}"}
        html = render_sale_receipt(db, sale.id, ReceiptConfig(**receipt_config))
        path = store_receipt(sale.sale_number, html)
        return {"status": "done", "file_path": path}
    finally:
        db.close()


def enqueue_receipt(event: ReceiptRequested) -> None:
    """``ReceiptRequested`` handler: hand rendering off to the worker."""
    render_receipt.delay(str(event.sale_id), event.receipt_config)
    logger.info("Receipt requested for %s", event.sale_number)
