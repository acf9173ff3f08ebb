from __future__ import annotations

from uuid import UUID

from sqlalchemy.orm import Session

from kasir.app.models.inventory import Product
from kasir.app.services.cart import CartProduct


def list_active_products(db: Session) -> list[Product]:
    """Products a cashier can sell: active and with stock on hand."""
    return (
        db.query(Product)
        .filter(Product.is_active.is_(True), Product.stock_quantity > 0)
        .order_by(Product.name)
        .all()
    )


def get_sellable_product(db: Session, product_id: UUID) -> Product:
    product = (
        db.query(Product)
        .filter(
            Product.id == product_id,
            Product.is_active.is_(True),
            Product.stock_quantity > 0,
        )
        .first()
    )
    if not product:
        raise LookupError("Product not found or out of stock")
    return product


def to_cart_product(product: Product) -> CartProduct:
    return CartProduct(
        id=product.id,
        name=product.name,
        sku=product.sku,
        price=product.price,
        stock_quantity=product.stock_quantity,
    )
