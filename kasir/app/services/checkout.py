"""Cashier checkout: validate payment, persist the sale, request a receipt.

The workflow moves through ``IDLE -> VALIDATING -> PERSISTING -> SUCCEEDED``
and falls back to ``IDLE`` (via ``FAILED``) on any error, leaving the cart
intact for a retry.

Persistence runs three steps in order: the sale row, its line items, then one
outbound stock movement per line. All three share one database transaction;
if a step fails the remaining steps are skipped and everything is rolled back.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from kasir.app.core.cache import DASHBOARD_STATS_VIEW, PRODUCTS_VIEW, QueryCache, query_cache
from kasir.app.core.events import EventDispatcher, ReceiptRequested, dispatcher
from kasir.app.models.sales import InvoiceStatus, PaymentMethod, Sale, SaleItem
from kasir.app.models.user import User
from kasir.app.services.cart import Cart
from kasir.app.services.inventory import record_outbound_movement
from kasir.app.services.invoice import format_rupiah, next_sale_number
from kasir.app.services.pricing import ZERO, CartTotals, quantize_money
from kasir.app.services.staff import resolve_cashier

logger = logging.getLogger(__name__)


class CheckoutState(str, enum.Enum):
    IDLE = "IDLE"
    VALIDATING = "VALIDATING"
    PERSISTING = "PERSISTING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class EmptyCartError(ValueError):
    def __init__(self) -> None:
        super().__init__("Cart is empty")


class InsufficientPaymentError(ValueError):
    def __init__(self, required: Decimal, received: Decimal) -> None:
        self.required = required
        self.received = received
        super().__init__(
            f"Insufficient payment. Required: {format_rupiah(required)}, "
            f"Received: {format_rupiah(received)}"
        )


class PersistenceStepError(ValueError):
    """A database write failed during one of the persistence steps."""

    def __init__(self, step: str, detail: str) -> None:
        self.step = step
        super().__init__(f"Failed to save {step}: {detail}")


@dataclass(frozen=True)
class PaymentSummary:
    total: Decimal
    received: Decimal
    change: Decimal
    sufficient: bool


@dataclass
class CheckoutResult:
    sale: Sale
    totals: CartTotals
    event: ReceiptRequested


def effective_payment(
    method: PaymentMethod, received: Decimal | None, total: Decimal
) -> Decimal:
    """Cash is what the customer handed over; every other method pays the total."""
    if method != PaymentMethod.CASH:
        return total
    return received if received is not None else ZERO


def summarize_payment(
    totals: CartTotals, method: PaymentMethod, received: Decimal | None
) -> PaymentSummary:
    total = quantize_money(totals.total)
    paid = quantize_money(effective_payment(method, received, total))
    return PaymentSummary(
        total=total,
        received=paid,
        change=max(paid - total, ZERO),
        sufficient=paid >= total,
    )


class CheckoutWorkflow:
    """One checkout attempt against a database session.

    ``history`` records every state entered, which callers and tests use to
    confirm, e.g., that a rejected cart never reached ``PERSISTING``.
    """

    def __init__(
        self,
        db: Session,
        cache: QueryCache = query_cache,
        events: EventDispatcher = dispatcher,
    ) -> None:
        self.db = db
        self.cache = cache
        self.events = events
        self.state = CheckoutState.IDLE
        self.history: list[CheckoutState] = []

    def _enter(self, state: CheckoutState) -> None:
        self.state = state
        self.history.append(state)

    def _fail(self) -> None:
        self._enter(CheckoutState.FAILED)
        self._enter(CheckoutState.IDLE)

    def run(
        self,
        cart: Cart,
        *,
        user: User,
        payment_method: PaymentMethod,
        payment_received: Decimal | None = None,
        customer_name: str | None = None,
        bank_details: str | None = None,
        cashier_id: UUID | None = None,
        receipt_config: dict[str, Any] | None = None,
    ) -> CheckoutResult:
        if self.state != CheckoutState.IDLE:
            raise RuntimeError(f"Checkout already {self.state.value.lower()}")

        # ── Validating ───────────────────────────────────────────────────
        self._enter(CheckoutState.VALIDATING)
        try:
            if cart.is_empty:
                raise EmptyCartError()
            lines = cart.snapshot()
            totals = lines.totals()
            payment = summarize_payment(totals, payment_method, payment_received)
            logger.info(
                "Payment validation: method=%s received=%s total=%s sufficient=%s",
                payment_method.value,
                payment.received,
                payment.total,
                payment.sufficient,
            )
            if not payment.sufficient:
                raise InsufficientPaymentError(payment.total, payment.received)
            cashier = resolve_cashier(self.db, cashier_id, user)
        except ValueError:
            self._fail()
            raise

        # ── Persisting ───────────────────────────────────────────────────
        self._enter(CheckoutState.PERSISTING)
        try:
            sale = self._persist(
                lines,
                totals,
                payment,
                user=user,
                cashier=cashier,
                payment_method=payment_method,
                customer_name=customer_name,
                bank_details=bank_details,
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.exception("Sale processing error")
            self._fail()
            raise

        # ── Succeeded ────────────────────────────────────────────────────
        self._enter(CheckoutState.SUCCEEDED)
        self.db.refresh(sale)
        self.cache.invalidate(PRODUCTS_VIEW, DASHBOARD_STATS_VIEW)
        cart.clear()

        event = ReceiptRequested(
            sale_id=sale.id,
            sale_number=sale.sale_number,
            receipt_config=dict(receipt_config or {}),
        )
        self.events.publish(event)
        logger.info("Sale %s completed: total=%s", sale.sale_number, sale.total_amount)
        self._enter(CheckoutState.IDLE)
        return CheckoutResult(sale=sale, totals=totals, event=event)

    def _persist(
        self,
        lines: Cart,
        totals: CartTotals,
        payment: PaymentSummary,
        *,
        user: User,
        cashier: User,
        payment_method: PaymentMethod,
        customer_name: str | None,
        bank_details: str | None,
    ) -> Sale:
        db = self.db

        # Step 1: sale header
        sale_number = next_sale_number(db)
        notes = None
        if payment_method != PaymentMethod.CASH and bank_details:
            notes = f"Bank Details: {bank_details}"
        sale = Sale(
            sale_number=sale_number,
            customer_name=customer_name or None,
            subtotal=quantize_money(totals.subtotal),
            tax_amount=quantize_money(totals.ppn11),
            total_amount=payment.total,
            payment_method=payment_method,
            payment_received=payment.received,
            change_amount=payment.change,
            created_by=user.id,
            cashier_id=cashier.id,
            invoice_status=(
                InvoiceStatus.UNPAID
                if payment_method == PaymentMethod.CREDIT
                else InvoiceStatus.PAID
            ),
            notes=notes,
        )
        self._flush_step("sale", lambda: db.add(sale))

        # Step 2: line items
        def add_items() -> None:
            for position, line in enumerate(lines):
                db.add(SaleItem(
                    sale_id=sale.id,
                    product_id=line.product.id,
                    position=position,
                    quantity=line.quantity,
                    unit_price=quantize_money(line.product.price),
                    subtotal=quantize_money(line.product.price * line.quantity),
                    discount=line.discount,
                ))

        self._flush_step("sale items", add_items)

        # Step 3: stock movements
        def add_movements() -> None:
            for line in lines:
                record_outbound_movement(
                    db,
                    product_id=line.product.id,
                    quantity=line.quantity,
                    reference_number=sale_number,
                    notes=f"Sale: {sale_number}",
                    user_id=user.id,
                )

        self._flush_step("stock movements", add_movements)
        return sale

    def _flush_step(self, step: str, action) -> None:
        try:
            action()
            self.db.flush()
        except SQLAlchemyError as exc:
            raise PersistenceStepError(step, str(getattr(exc, "orig", None) or exc)) from exc


def process_checkout(db: Session, cart: Cart, user: User, **kwargs: Any) -> CheckoutResult:
    """Run a single checkout with the process-wide cache and event dispatcher."""
    return CheckoutWorkflow(db).run(cart, user=user, **kwargs)
