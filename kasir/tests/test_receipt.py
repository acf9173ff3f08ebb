"""Tests for invoice formatting, receipt rendering and the receipt task."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy.orm import Session

from kasir.app.core.cache import QueryCache
from kasir.app.core.events import EventDispatcher
from kasir.app.models.inventory import Product
from kasir.app.models.sales import PaymentMethod, Sale
from kasir.app.models.setting import Setting
from kasir.app.models.user import User
from kasir.app.schemas.cashier import ReceiptConfig
from kasir.app.services.cart import Cart
from kasir.app.services.catalog import to_cart_product
from kasir.app.services.checkout import CheckoutWorkflow
from kasir.app.services.invoice import format_rupiah, generate_sale_number, next_sale_number
from kasir.app.services.receipt import (
    build_receipt_context,
    format_invoice_date,
    load_stored_receipt,
    receipt_path,
    render_sale_receipt,
    store_receipt,
)
from kasir.app.workers.tasks.receipts import render_receipt


def _checkout(
    db: Session,
    user: User,
    product: Product,
    quantity: int = 2,
    discount: str = "10",
    customer_name: str | None = "PT Sumber Rejeki",
) -> Sale:
    cart = Cart()
    cp = to_cart_product(product)
    cart.add_item(cp)
    cart.set_quantity(cp.id, quantity)
    cart.set_discount(cp.id, Decimal(discount))
    wf = CheckoutWorkflow(db, cache=QueryCache(), events=EventDispatcher())
    return wf.run(
        cart,
        user=user,
        payment_method=PaymentMethod.CARD,
        customer_name=customer_name,
    ).sale


# ─── TestFormatting ──────────────────────────────────────────────────────────


class TestFormatting:
    @pytest.mark.parametrize(
        ("amount", "expected"),
        [
            (Decimal("1234567"), "Rp 1.234.567"),
            (Decimal("0"), "Rp 0"),
            (Decimal("999.4999"), "Rp 999"),
            (Decimal("1234.5"), "Rp 1.235"),
            (Decimal("-5000"), "-Rp 5.000"),
            (180000, "Rp 180.000"),
        ],
    )
    def test_format_rupiah(self, amount: Decimal, expected: str) -> None:
        assert format_rupiah(amount) == expected

    def test_invoice_date_has_no_zero_padding(self) -> None:
        assert format_invoice_date(datetime(2026, 3, 5, 14, 30)) == "5/3/2026"

    def test_invoice_date_in_store_timezone(self) -> None:
        when = datetime(2026, 3, 4, 19, 30, tzinfo=timezone.utc)
        assert format_invoice_date(when) == "5/3/2026"

    def test_sale_number_format(self) -> None:
        assert generate_sale_number(7, datetime(2026, 10, 19)) == "TRX-20261019-0007"

    def test_sale_number_uses_store_calendar_day(self) -> None:
        # 01:00 WIB on 19 Oct is 18:00 UTC on 18 Oct
        when = datetime(2026, 10, 18, 18, 0, tzinfo=timezone.utc)
        assert generate_sale_number(1, when) == "TRX-20261019-0001"


# ─── TestSaleNumbering ───────────────────────────────────────────────────────


def _store_sale(db: Session, user: User, number: str) -> None:
    db.add(
        Sale(
            sale_number=number,
            subtotal=Decimal("1000"),
            total_amount=Decimal("1000"),
            payment_method=PaymentMethod.CASH,
            payment_received=Decimal("1000"),
            created_by=user.id,
            cashier_id=user.id,
        )
    )
    db.commit()


class TestSaleNumbering:
    def test_first_sale_of_the_day(self, db: Session) -> None:
        assert next_sale_number(db, datetime(2026, 10, 19, 9, 0)) == "TRX-20261019-0001"

    def test_follows_highest_number_past_four_digits(
        self, db: Session, cashier_user: User
    ) -> None:
        _store_sale(db, cashier_user, "TRX-20261019-9999")
        _store_sale(db, cashier_user, "TRX-20261019-10000")
        assert next_sale_number(db, datetime(2026, 10, 19, 9, 0)) == "TRX-20261019-10001"

    def test_other_days_do_not_count(self, db: Session, cashier_user: User) -> None:
        _store_sale(db, cashier_user, "TRX-20261018-0042")
        assert next_sale_number(db, datetime(2026, 10, 19, 9, 0)) == "TRX-20261019-0001"

    def test_early_morning_sale_gets_store_date(
        self, db: Session, cashier_user: User
    ) -> None:
        _store_sale(db, cashier_user, "TRX-20261019-0003")
        when = datetime(2026, 10, 18, 20, 0, tzinfo=timezone.utc)
        assert next_sale_number(db, when) == "TRX-20261019-0004"


# ─── TestRenderReceipt ───────────────────────────────────────────────────────


class TestRenderReceipt:
    def test_default_receipt(
        self,
        db: Session,
        cashier_user: User,
        product_a: Product,
        store_settings: dict[str, str],
    ) -> None:
        sale = _checkout(db, cashier_user, product_a)
        html = render_sale_receipt(db, sale.id)

        assert 'onload="window.print()"' in html
        assert "INVOICE" in html
        assert sale.sale_number in html
        assert "<strong>KEPADA:</strong> PT Sumber Rejeki" in html
        assert "<strong>KASIR:</strong> Budi Kasir" in html
        assert "Toko Maju Jaya" in html
        assert "Terima kasih" in html
        assert "Sampai jumpa lagi" in html
        # Line: name, unit price, discount percentage and amount, line total
        assert "Beras Premium 5kg" in html
        assert "Rp 100.000" in html
        assert "10%" in html
        assert "-Rp 18.018" in html
        assert "Rp 180.000" in html
        # Totals gated by the default configuration
        assert "SUB TOTAL:" in html
        assert "Total Discount:" in html
        assert "DPP Faktur:" not in html
        assert "PPN 11%:" not in html
        assert "TOTAL:" in html

    def test_optional_totals_follow_config(
        self, db: Session, cashier_user: User, product_a: Product
    ) -> None:
        sale = _checkout(db, cashier_user, product_a)
        config = ReceiptConfig(show_amount=False, show_dpp_faktur=True, show_ppn11=True)
        html = render_sale_receipt(db, sale.id, config)

        assert "SUB TOTAL:" not in html
        assert "DPP Faktur:" in html
        assert "Rp 162.162" in html
        assert "PPN 11%:" in html
        assert "Rp 17.838" in html

    def test_no_discount_row_without_discounts(
        self, db: Session, cashier_user: User, product_a: Product
    ) -> None:
        sale = _checkout(db, cashier_user, product_a, quantity=1, discount="0")
        html = render_sale_receipt(db, sale.id)
        assert "Total Discount:" not in html

    def test_customer_line_omitted_without_customer(
        self, db: Session, cashier_user: User, product_a: Product
    ) -> None:
        sale = _checkout(db, cashier_user, product_a, customer_name=None)
        assert "KEPADA" not in render_sale_receipt(db, sale.id)

    def test_default_payment_note_is_average_dpp_faktur(
        self, db: Session, cashier_user: User, product_a: Product
    ) -> None:
        sale = _checkout(db, cashier_user, product_a)
        context = build_receipt_context(db, sale)
        assert context["payment_note_line1"] == "Harga BCA : Rp 162.162"

    def test_payment_note_setting_overrides_default(
        self, db: Session, cashier_user: User, product_a: Product
    ) -> None:
        db.add(Setting(key="payment_note_line1", value="Transfer ke BCA 123"))
        db.add(Setting(key="payment_note_line2", value="a.n. Toko Maju Jaya"))
        db.commit()
        sale = _checkout(db, cashier_user, product_a)
        html = render_sale_receipt(db, sale.id)
        assert "Transfer ke BCA 123" in html
        assert "a.n. Toko Maju Jaya" in html
        assert "Harga BCA" not in html

    def test_cashier_without_name_is_unknown(
        self, db: Session, cashier_user: User, product_a: Product
    ) -> None:
        sale = _checkout(db, cashier_user, product_a)
        cashier_user.full_name = ""
        db.commit()
        assert build_receipt_context(db, sale)["cashier_name"] == "Unknown"

    def test_user_text_is_escaped(
        self, db: Session, cashier_user: User, product_a: Product
    ) -> None:
        sale = _checkout(db, cashier_user, product_a, customer_name="<script>x</script>")
        html = render_sale_receipt(db, sale.id)
        assert "<script>x</script>" not in html
        assert "&lt;script&gt;" in html

    def test_unknown_sale_raises(self, db: Session) -> None:
        with pytest.raises(LookupError):
            render_sale_receipt(db, uuid.uuid4())


# ─── TestReceiptStorage ──────────────────────────────────────────────────────


class TestReceiptStorage:
    def test_store_and_load(self) -> None:
        assert load_stored_receipt("TRX-20261019-0001") is None
        store_receipt("TRX-20261019-0001", "<html>ok</html>")
        assert load_stored_receipt("TRX-20261019-0001") == "<html>ok</html>"
        assert receipt_path("TRX-20261019-0001") == "receipts/TRX-20261019-0001.html"

    def test_render_task_stores_receipt(
        self, db: Session, cashier_user: User, product_a: Product
    ) -> None:
        sale = _checkout(db, cashier_user, product_a)
        result = render_receipt(str(sale.id), {"show_ppn11": True})

        assert result["status"] == "done"
        stored = load_stored_receipt(sale.sale_number)
        assert stored is not None
        assert "PPN 11%:" in stored

    def test_render_task_unknown_sale(self, db: Session) -> None:
        result = render_receipt(str(uuid.uuid4()), {})
        assert result["status"] == "error"
