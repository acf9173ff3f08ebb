from __future__ import annotations

from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator


class PaymentMethodEnum(str, Enum):
    CASH = "CASH"
    CARD = "CARD"
    TRANSFER = "TRANSFER"
    CREDIT = "CREDIT"


# ─── Loaders ──────────────────────────────────────────────────────────────────


class ProductOut(BaseModel):
    id: UUID
    name: str
    sku: str
    price: Decimal
    stock_quantity: int

    class Config:
        from_attributes = True


class StaffOut(BaseModel):
    id: UUID
    full_name: str

    class Config:
        from_attributes = True


class SettingUpdate(BaseModel):
    value: str


# ─── Cart ─────────────────────────────────────────────────────────────────────


class CartAddRequest(BaseModel):
    product_id: UUID


class CartLineUpdate(BaseModel):
    quantity: int | None = None
    discount: Decimal | None = None

    @model_validator(mode="after")
    def at_least_one_field(self) -> "CartLineUpdate":
        if self.quantity is None and self.discount is None:
            raise ValueError("Provide quantity and/or discount")
        return self


class LinePricingOut(BaseModel):
    amount: str
    dpp11: str
    discount: str
    dpp_faktur: str
    dpp_lain: str
    ppn11: str
    ppn12: str
    line_total: str


class CartLineOut(BaseModel):
    product_id: UUID
    name: str
    sku: str
    unit_price: str
    stock_quantity: int
    quantity: int
    discount: str
    pricing: LinePricingOut


class CartTotalsOut(BaseModel):
    subtotal: str
    discount: str
    dpp_faktur: str
    ppn11: str
    total: str


class CartOut(BaseModel):
    lines: list[CartLineOut]
    totals: CartTotalsOut


# ─── Checkout ─────────────────────────────────────────────────────────────────


class ReceiptConfig(BaseModel):
    """Which derived totals the printed invoice shows."""

    show_amount: bool = True
    show_dpp_faktur: bool = False
    show_discount: bool = False
    show_ppn11: bool = False
    discount_percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100)


class PaymentPreviewOut(BaseModel):
    payment_method: PaymentMethodEnum
    total: str
    payment_received: str
    change: str
    sufficient: bool
    shortfall: str


class CheckoutRequest(BaseModel):
    payment_method: PaymentMethodEnum = PaymentMethodEnum.CASH
    payment_received: Decimal | None = None
    customer_name: str | None = None
    bank_details: str | None = None
    cashier_id: UUID | None = None
    receipt_config: ReceiptConfig = ReceiptConfig()

    @field_validator("payment_received")
    @classmethod
    def received_non_negative(cls, v: Decimal | None) -> Decimal | None:
        if v is not None and v < 0:
            raise ValueError("Payment received must be non-negative")
        return v

    @field_validator("customer_name", "bank_details")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v


class SaleLineOut(BaseModel):
    product_id: UUID
    quantity: int
    unit_price: str
    subtotal: str
    discount: str


class SaleOut(BaseModel):
    id: UUID
    sale_number: str
    customer_name: str | None
    subtotal: str
    tax_amount: str
    total_amount: str
    payment_method: str
    payment_received: str
    change_amount: str
    invoice_status: str
    notes: str | None
    created_by: UUID
    cashier_id: UUID
    items: list[SaleLineOut]


class CheckoutOut(BaseModel):
    sale: SaleOut
    message: str
    receipt_url: str
