from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from kasir.app.api.deps import require_admin, require_cashier
from kasir.app.core.cache import PRODUCTS_VIEW, SETTINGS_VIEW, query_cache
from kasir.app.core.database import get_db
from kasir.app.models.sales import PaymentMethod, Sale
from kasir.app.models.user import User
from kasir.app.schemas.cashier import (
    CartAddRequest,
    CartLineOut,
    CartLineUpdate,
    CartOut,
    CartTotalsOut,
    CheckoutOut,
    CheckoutRequest,
    LinePricingOut,
    PaymentMethodEnum,
    PaymentPreviewOut,
    ProductOut,
    SaleLineOut,
    SaleOut,
    SettingUpdate,
    StaffOut,
)
from kasir.app.services.cart import Cart, StockLimitError, cart_store
from kasir.app.services.catalog import get_sellable_product, list_active_products, to_cart_product
from kasir.app.services.checkout import InsufficientPaymentError, process_checkout, summarize_payment
from kasir.app.services.pricing import ZERO, quantize_money
from kasir.app.services.receipt import load_stored_receipt, render_sale_receipt
from kasir.app.services.staff import list_cashiers
from kasir.app.services.store_settings import load_store_settings, upsert_setting

router = APIRouter()


def _money(value: Decimal) -> str:
    return str(quantize_money(value))


def _cart_to_out(cart: Cart) -> CartOut:
    lines: list[CartLineOut] = []
    for line in cart:
        p = line.pricing
        lines.append(CartLineOut(
            product_id=line.product.id,
            name=line.product.name,
            sku=line.product.sku,
            unit_price=_money(line.product.price),
            stock_quantity=line.product.stock_quantity,
            quantity=line.quantity,
            discount=str(line.discount),
            pricing=LinePricingOut(
                amount=_money(p.amount),
                dpp11=_money(p.dpp11),
                discount=_money(p.discount),
                dpp_faktur=_money(p.dpp_faktur),
                dpp_lain=_money(p.dpp_lain),
                ppn11=_money(p.ppn11),
                ppn12=_money(p.ppn12),
                line_total=_money(p.line_total),
            ),
        ))
    totals = cart.totals()
    return CartOut(
        lines=lines,
        totals=CartTotalsOut(
            subtotal=_money(totals.subtotal),
            discount=_money(totals.discount),
            dpp_faktur=_money(totals.dpp_faktur),
            ppn11=_money(totals.ppn11),
            total=_money(totals.total),
        ),
    )


def _sale_to_out(sale: Sale) -> SaleOut:
    return SaleOut(
        id=sale.id,
        sale_number=sale.sale_number,
        customer_name=sale.customer_name,
        subtotal=str(sale.subtotal),
        tax_amount=str(sale.tax_amount),
        total_amount=str(sale.total_amount),
        payment_method=sale.payment_method.value,
        payment_received=str(sale.payment_received),
        change_amount=str(sale.change_amount),
        invoice_status=sale.invoice_status.value,
        notes=sale.notes,
        created_by=sale.created_by,
        cashier_id=sale.cashier_id,
        items=[
            SaleLineOut(
                product_id=item.product_id,
                quantity=item.quantity,
                unit_price=str(item.unit_price),
                subtotal=str(item.subtotal),
                discount=str(item.discount),
            )
            for item in sale.items
        ],
    )


def _stock_conflict(e: StockLimitError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


# ─── Loaders ─────────────────────────────────────────────────────────────────


@router.get("/products", response_model=list[ProductOut])
def get_products(
    db: Session = Depends(get_db),
    _current_user: User = Depends(require_cashier),
) -> list[ProductOut]:
    return query_cache.get_or_load(
        PRODUCTS_VIEW,
        lambda: [ProductOut.model_validate(p) for p in list_active_products(db)],
    )


@router.get("/settings", response_model=dict[str, str])
def get_settings(
    db: Session = Depends(get_db),
    _current_user: User = Depends(require_cashier),
) -> dict[str, str]:
    return query_cache.get_or_load(SETTINGS_VIEW, lambda: load_store_settings(db))


@router.put("/settings/{key}", response_model=dict[str, str])
def put_setting(
    key: str,
    payload: SettingUpdate,
    db: Session = Depends(get_db),
    _current_user: User = Depends(require_admin),
) -> dict[str, str]:
    setting = upsert_setting(db, key, payload.value)
    db.commit()
    query_cache.invalidate(SETTINGS_VIEW)
    return {setting.key: setting.value}


@router.get("/staff", response_model=list[StaffOut])
def get_staff(
    db: Session = Depends(get_db),
    _current_user: User = Depends(require_cashier),
) -> list[User]:
    return list_cashiers(db)


# ─── Cart ────────────────────────────────────────────────────────────────────


@router.get("/cart", response_model=CartOut)
def get_cart(current_user: User = Depends(require_cashier)) -> CartOut:
    return _cart_to_out(cart_store.get(current_user.id))


@router.post("/cart/items", response_model=CartOut)
def add_cart_item(
    payload: CartAddRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_cashier),
) -> CartOut:
    try:
        product = get_sellable_product(db, payload.product_id)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    cart = cart_store.get(current_user.id)
    try:
        cart.add_item(to_cart_product(product))
    except StockLimitError as e:
        raise _stock_conflict(e)
    return _cart_to_out(cart)


@router.patch("/cart/items/{product_id}", response_model=CartOut)
def update_cart_item(
    product_id: UUID,
    payload: CartLineUpdate,
    current_user: User = Depends(require_cashier),
) -> CartOut:
    cart = cart_store.get(current_user.id)
    if cart.find(product_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not in cart")
    if payload.quantity is not None:
        try:
            cart.set_quantity(product_id, payload.quantity)
        except StockLimitError as e:
            raise _stock_conflict(e)
    if payload.discount is not None:
        cart.set_discount(product_id, payload.discount)
    return _cart_to_out(cart)


@router.delete("/cart/items/{product_id}", response_model=CartOut)
def remove_cart_item(
    product_id: UUID,
    current_user: User = Depends(require_cashier),
) -> CartOut:
    cart = cart_store.get(current_user.id)
    cart.remove(product_id)
    return _cart_to_out(cart)


@router.delete("/cart", response_model=CartOut)
def clear_cart(current_user: User = Depends(require_cashier)) -> CartOut:
    cart = cart_store.get(current_user.id)
    cart.clear()
    return _cart_to_out(cart)


# ─── Checkout ────────────────────────────────────────────────────────────────


@router.get("/payment-preview", response_model=PaymentPreviewOut)
def payment_preview(
    payment_method: PaymentMethodEnum = PaymentMethodEnum.CASH,
    payment_received: Decimal | None = None,
    current_user: User = Depends(require_cashier),
) -> PaymentPreviewOut:
    cart = cart_store.get(current_user.id)
    summary = summarize_payment(
        cart.totals(), PaymentMethod(payment_method.value), payment_received
    )
    return PaymentPreviewOut(
        payment_method=payment_method,
        total=str(summary.total),
        payment_received=str(summary.received),
        change=str(summary.change),
        sufficient=summary.sufficient,
        shortfall=str(max(summary.total - summary.received, ZERO)),
    )


@router.post("/checkout", response_model=CheckoutOut)
def checkout(
    payload: CheckoutRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_cashier),
) -> CheckoutOut:
    cart = cart_store.get(current_user.id)
    try:
        result = process_checkout(
            db,
            cart,
            current_user,
            payment_method=PaymentMethod(payload.payment_method.value),
            payment_received=payload.payment_received,
            customer_name=payload.customer_name,
            bank_details=payload.bank_details,
            cashier_id=payload.cashier_id,
            receipt_config=payload.receipt_config.model_dump(mode="json"),
        )
    except InsufficientPaymentError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": str(e),
                "required": str(e.required),
                "received": str(e.received),
            },
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    sale = result.sale
    return CheckoutOut(
        sale=_sale_to_out(sale),
        message=f"Sale {sale.sale_number} completed successfully!",
        receipt_url=f"/api/v1/cashier/sales/{sale.id}/receipt",
    )


@router.get("/sales/{sale_id}/receipt", response_class=HTMLResponse)
def get_receipt(
    sale_id: UUID,
    db: Session = Depends(get_db),
    _current_user: User = Depends(require_cashier),
) -> HTMLResponse:
    sale = db.query(Sale).filter(Sale.id == sale_id).first()
    if not sale:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Sale not found")
    html = load_stored_receipt(sale.sale_number)
    if html is None:
        html = render_sale_receipt(db, sale.id)
    return HTMLResponse(content=html)
