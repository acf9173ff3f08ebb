"""Tests for the cashier HTTP surface: loaders, checkout, receipts, dashboard."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from kasir.app.core.cache import DASHBOARD_STATS_VIEW, PRODUCTS_VIEW, query_cache
from kasir.app.models.inventory import Product
from kasir.app.models.sales import InvoiceStatus, PaymentMethod, Sale
from kasir.app.models.user import User
from kasir.app.services.dashboard import get_dashboard_stats
from kasir.app.services.file_service import FileStorageService
from kasir.app.services.receipt import load_stored_receipt, receipt_path
from kasir.tests.conftest import auth


def _add(client: TestClient, token: str, product: Product, times: int = 1) -> None:
    for _ in range(times):
        resp = client.post(
            "/api/v1/cashier/cart/items",
            json={"product_id": str(product.id)},
            headers=auth(token),
        )
        assert resp.status_code == 200


# ─── TestAuth ────────────────────────────────────────────────────────────────


class TestAuth:
    def test_login_and_me(self, client: TestClient, cashier_user: User) -> None:
        resp = client.post(
            "/api/v1/auth/login/access-token",
            data={"username": "test_cashier", "password": "pass"},
        )
        assert resp.status_code == 200
        token = resp.json()["access_token"]

        me = client.get("/api/v1/auth/me", headers=auth(token)).json()
        assert me["username"] == "test_cashier"
        assert me["full_name"] == "Budi Kasir"
        assert me["role"] == "CASHIER"

    def test_wrong_password(self, client: TestClient, cashier_user: User) -> None:
        resp = client.post(
            "/api/v1/auth/login/access-token",
            data={"username": "test_cashier", "password": "nope"},
        )
        assert resp.status_code == 401

    def test_inactive_user_is_rejected(
        self, client: TestClient, db: Session, cashier_user: User, cashier_token: str
    ) -> None:
        cashier_user.is_active = False
        db.commit()
        resp = client.get("/api/v1/cashier/cart", headers=auth(cashier_token))
        assert resp.status_code == 403

    def test_garbage_token(self, client: TestClient) -> None:
        resp = client.get("/api/v1/cashier/products", headers=auth("not-a-jwt"))
        assert resp.status_code == 401

    def test_request_id_is_echoed(self, client: TestClient) -> None:
        resp = client.get("/api/v1/cashier/products", headers={"X-Request-ID": "abc123"})
        assert resp.headers["X-Request-ID"] == "abc123"
        assert client.get("/api/v1/cashier/products").headers["X-Request-ID"]


# ─── TestLoaders ─────────────────────────────────────────────────────────────


class TestLoaders:
    def test_products_lists_sellable_only(
        self,
        client: TestClient,
        cashier_token: str,
        product_a: Product,
        product_b: Product,
        inactive_product: Product,
        sold_out_product: Product,
    ) -> None:
        resp = client.get("/api/v1/cashier/products", headers=auth(cashier_token))
        assert resp.status_code == 200
        names = [p["name"] for p in resp.json()]
        assert names == ["Beras Premium 5kg", "Minyak Goreng 2L"]

    def test_products_view_is_cached(
        self, client: TestClient, db: Session, cashier_token: str, product_a: Product
    ) -> None:
        client.get("/api/v1/cashier/products", headers=auth(cashier_token))
        assert query_cache.is_cached(PRODUCTS_VIEW)

        db.add(Product(name="Kopi Bubuk", sku="SKU-K", price=Decimal("24000"), stock_quantity=3))
        db.commit()
        cached = client.get("/api/v1/cashier/products", headers=auth(cashier_token)).json()
        assert len(cached) == 1

        query_cache.invalidate(PRODUCTS_VIEW)
        fresh = client.get("/api/v1/cashier/products", headers=auth(cashier_token)).json()
        assert len(fresh) == 2

    def test_settings_map_and_admin_update(
        self,
        client: TestClient,
        cashier_token: str,
        admin_token: str,
        store_settings: dict[str, str],
    ) -> None:
        resp = client.get("/api/v1/cashier/settings", headers=auth(cashier_token))
        assert resp.json() == store_settings

        denied = client.put(
            "/api/v1/cashier/settings/store_name",
            json={"value": "Toko Baru"},
            headers=auth(cashier_token),
        )
        assert denied.status_code == 403

        resp = client.put(
            "/api/v1/cashier/settings/store_name",
            json={"value": "Toko Baru"},
            headers=auth(admin_token),
        )
        assert resp.json() == {"store_name": "Toko Baru"}
        resp = client.get("/api/v1/cashier/settings", headers=auth(cashier_token))
        assert resp.json()["store_name"] == "Toko Baru"

    def test_staff_lists_cashier_roles_by_name(
        self,
        client: TestClient,
        cashier_token: str,
        admin_user: User,
        stockist_user: User,
        viewer_user: User,
    ) -> None:
        resp = client.get("/api/v1/cashier/staff", headers=auth(cashier_token))
        names = [s["full_name"] for s in resp.json()]
        assert names == ["Admin Toko", "Budi Kasir", "Sari Gudang"]


# ─── TestCheckoutEndpoint ────────────────────────────────────────────────────


class TestCheckoutEndpoint:
    def test_payment_preview(
        self, client: TestClient, cashier_token: str, product_b: Product
    ) -> None:
        _add(client, cashier_token, product_b)
        resp = client.get(
            "/api/v1/cashier/payment-preview",
            params={"payment_method": "CASH", "payment_received": "40000"},
            headers=auth(cashier_token),
        )
        body = resp.json()
        assert body["total"] == "50000.0000"
        assert body["sufficient"] is False
        assert body["shortfall"] == "10000.0000"

        resp = client.get(
            "/api/v1/cashier/payment-preview",
            params={"payment_method": "CARD"},
            headers=auth(cashier_token),
        )
        body = resp.json()
        assert body["payment_received"] == "50000.0000"
        assert body["sufficient"] is True
        assert body["change"] == "0.0000"

    def test_empty_cart_is_400(self, client: TestClient, cashier_token: str) -> None:
        resp = client.post(
            "/api/v1/cashier/checkout",
            json={"payment_method": "CASH", "payment_received": "10000"},
            headers=auth(cashier_token),
        )
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Cart is empty"

    def test_underpayment_is_400_and_cart_kept(
        self, client: TestClient, cashier_token: str, product_b: Product
    ) -> None:
        _add(client, cashier_token, product_b)
        resp = client.post(
            "/api/v1/cashier/checkout",
            json={"payment_method": "CASH", "payment_received": "40000"},
            headers=auth(cashier_token),
        )
        assert resp.status_code == 400
        detail = resp.json()["detail"]
        assert detail["required"] == "50000.0000"
        assert detail["received"] == "40000.0000"
        assert detail["message"].startswith("Insufficient payment.")

        cart = client.get("/api/v1/cashier/cart", headers=auth(cashier_token)).json()
        assert len(cart["lines"]) == 1

    def test_negative_payment_is_422(self, client: TestClient, cashier_token: str) -> None:
        resp = client.post(
            "/api/v1/cashier/checkout",
            json={"payment_method": "CASH", "payment_received": "-1"},
            headers=auth(cashier_token),
        )
        assert resp.status_code == 422

    def test_successful_checkout(
        self,
        client: TestClient,
        db: Session,
        cashier_token: str,
        cashier_user: User,
        product_a: Product,
        product_b: Product,
        store_settings: dict[str, str],
    ) -> None:
        client.get("/api/v1/cashier/products", headers=auth(cashier_token))
        query_cache.get_or_load(DASHBOARD_STATS_VIEW, lambda: {"stale": True})
        _add(client, cashier_token, product_a, times=2)
        _add(client, cashier_token, product_b)
        client.patch(
            f"/api/v1/cashier/cart/items/{product_a.id}",
            json={"discount": "10"},
            headers=auth(cashier_token),
        )

        resp = client.post(
            "/api/v1/cashier/checkout",
            json={
                "payment_method": "CASH",
                "payment_received": "250000",
                "customer_name": "  PT Sumber Rejeki ",
                "bank_details": "   ",
                "receipt_config": {"show_ppn11": True},
            },
            headers=auth(cashier_token),
        )
        assert resp.status_code == 200
        body = resp.json()
        sale = body["sale"]
        assert sale["sale_number"].startswith("TRX-")
        assert body["message"] == f"Sale {sale['sale_number']} completed successfully!"
        assert sale["customer_name"] == "PT Sumber Rejeki"
        assert Decimal(sale["total_amount"]) == Decimal("230000")
        assert Decimal(sale["change_amount"]) == Decimal("20000")
        assert sale["invoice_status"] == "PAID"
        assert sale["cashier_id"] == str(cashier_user.id)
        assert sale["notes"] is None
        assert [i["quantity"] for i in sale["items"]] == [2, 1]

        # Cart cleared, stale views refetched
        cart = client.get("/api/v1/cashier/cart", headers=auth(cashier_token)).json()
        assert cart["lines"] == []
        assert not query_cache.is_cached(DASHBOARD_STATS_VIEW)
        products = client.get("/api/v1/cashier/products", headers=auth(cashier_token)).json()
        stock = {p["sku"]: p["stock_quantity"] for p in products}
        assert stock == {"SKU-A": 8, "SKU-B": 1}

        # Receipt rendered by the eager worker task and served from storage
        stored = load_stored_receipt(sale["sale_number"])
        assert stored is not None
        assert "PPN 11%:" in stored
        resp = client.get(body["receipt_url"], headers=auth(cashier_token))
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/html")
        assert resp.text == stored

    def test_credit_checkout_with_bank_details(
        self, client: TestClient, cashier_token: str, product_a: Product
    ) -> None:
        _add(client, cashier_token, product_a)
        resp = client.post(
            "/api/v1/cashier/checkout",
            json={"payment_method": "CREDIT", "bank_details": "Mandiri 987"},
            headers=auth(cashier_token),
        )
        sale = resp.json()["sale"]
        assert sale["invoice_status"] == "UNPAID"
        assert sale["notes"] == "Bank Details: Mandiri 987"
        assert Decimal(sale["payment_received"]) == Decimal(sale["total_amount"])

    def test_stock_shortfall_is_400(
        self, client: TestClient, db: Session, cashier_token: str, product_b: Product
    ) -> None:
        _add(client, cashier_token, product_b, times=2)
        product_b.stock_quantity = 1
        db.commit()

        resp = client.post(
            "/api/v1/cashier/checkout",
            json={"payment_method": "CARD"},
            headers=auth(cashier_token),
        )
        assert resp.status_code == 400
        assert "Insufficient stock" in resp.json()["detail"]
        assert db.query(Sale).count() == 0

    def test_receipt_rendered_on_demand(
        self, client: TestClient, db: Session, cashier_token: str, product_a: Product
    ) -> None:
        _add(client, cashier_token, product_a)
        body = client.post(
            "/api/v1/cashier/checkout",
            json={"payment_method": "CARD"},
            headers=auth(cashier_token),
        ).json()
        # Drop the stored copy; the endpoint renders a fresh one
        FileStorageService().delete(receipt_path(body["sale"]["sale_number"]))
        resp = client.get(body["receipt_url"], headers=auth(cashier_token))
        assert resp.status_code == 200
        assert body["sale"]["sale_number"] in resp.text
        assert "window.print()" in resp.text

    def test_receipt_for_unknown_sale_is_404(
        self, client: TestClient, cashier_token: str
    ) -> None:
        resp = client.get(
            f"/api/v1/cashier/sales/{uuid.uuid4()}/receipt", headers=auth(cashier_token)
        )
        assert resp.status_code == 404


# ─── TestDashboard ───────────────────────────────────────────────────────────


class TestDashboard:
    def test_stats_after_sales(
        self,
        client: TestClient,
        db: Session,
        cashier_token: str,
        product_a: Product,
        product_b: Product,
    ) -> None:
        _add(client, cashier_token, product_b)
        client.post(
            "/api/v1/cashier/checkout",
            json={"payment_method": "CREDIT"},
            headers=auth(cashier_token),
        )

        stats = client.get("/api/v1/dashboard/stats", headers=auth(cashier_token)).json()
        assert stats["sales_today"] == 1
        assert Decimal(stats["revenue_today"]) == Decimal("50000")
        assert stats["unpaid_invoices"] == 1
        assert stats["active_products"] == 2
        # product_b dropped to one unit, under the default threshold
        assert stats["low_stock_products"] == 1
        assert db.query(Sale).one().invoice_status == InvoiceStatus.UNPAID

    def test_today_follows_the_store_timezone(
        self, db: Session, cashier_user: User
    ) -> None:
        utc = timezone.utc
        # 01:00 WIB on 19 Oct is still 18 Oct in UTC
        for number, created in (
            ("TRX-20261019-0001", datetime(2026, 10, 18, 18, 0, tzinfo=utc)),
            ("TRX-20261018-0001", datetime(2026, 10, 18, 16, 30, tzinfo=utc)),
        ):
            db.add(
                Sale(
                    sale_number=number,
                    subtotal=Decimal("10000"),
                    total_amount=Decimal("10000"),
                    payment_method=PaymentMethod.CASH,
                    payment_received=Decimal("10000"),
                    created_by=cashier_user.id,
                    cashier_id=cashier_user.id,
                    created_at=created,
                )
            )
        db.commit()

        stats = get_dashboard_stats(db, now=datetime(2026, 10, 19, 3, 0, tzinfo=utc))
        assert stats["sales_today"] == 1
        assert Decimal(stats["revenue_today"]) == Decimal("10000")
