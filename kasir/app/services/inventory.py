from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from kasir.app.models.inventory import MovementType, Product, StockMovement

logger = logging.getLogger(__name__)


class InsufficientStockError(ValueError):
    def __init__(self, product_name: str, available: int, requested: int) -> None:
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for '{product_name}': "
            f"{available} available, {requested} requested"
        )


def record_outbound_movement(
    db: Session,
    product_id: UUID,
    quantity: int,
    reference_number: str,
    notes: str | None,
    user_id: UUID | None,
) -> StockMovement:
    """Write an outbound stock movement and decrement the product's stock.

    Raises :class:`InsufficientStockError` when the product no longer has
    *quantity* on hand. Does NOT commit.
    """
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise ValueError(f"Product {product_id} not found")
    if product.stock_quantity < quantity:
        raise InsufficientStockError(product.name, product.stock_quantity, quantity)

    movement = StockMovement(
        product_id=product_id,
        transaction_type=MovementType.OUTBOUND,
        quantity=quantity,
        reference_number=reference_number,
        notes=notes,
        created_by=user_id,
    )
    db.add(movement)
    product.stock_quantity -= quantity
    db.flush()

    logger.debug(
        "Stock out %s x%d (%s), %d left",
        product.sku,
        quantity,
        reference_number,
        product.stock_quantity,
    )
    return movement
