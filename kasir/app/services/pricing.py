"""PPN/DPP pricing for Indonesian invoicing.

Catalog prices are PPN-inclusive. For a unit price P the tax-exclusive base is
``DPP 11 = 100/111 * P``; the per-line discount is taken off that base to give
``DPP Faktur``, and PPN is 11% of DPP Faktur. ``DPP Nilai Lain`` (11/12 of DPP
Faktur) is reported for the 12% regime, where PPN 12% of DPP Lain comes out
equal to PPN 11% of DPP Faktur, so both PPN figures carry the same value.

All arithmetic is ``Decimal`` with no intermediate rounding; callers quantize
with :data:`Q` only when persisting.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

HUNDRED = Decimal("100")
DPP11_FACTOR = HUNDRED / Decimal("111")
DPP_LAIN_FACTOR = Decimal("11") / Decimal("12")
PPN_RATE = Decimal("0.11")

Q = Decimal("0.0001")
ZERO = Decimal("0")


def clamp_discount(value: Decimal | int | float) -> Decimal:
    """Clamp a discount percentage into [0, 100]."""
    pct = Decimal(str(value))
    return max(ZERO, min(HUNDRED, pct))


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(Q, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class LinePricing:
    amount: Decimal
    dpp11: Decimal
    discount: Decimal
    dpp_faktur: Decimal
    dpp_lain: Decimal
    ppn11: Decimal
    ppn12: Decimal
    line_total: Decimal


@dataclass(frozen=True)
class CartTotals:
    subtotal: Decimal
    discount: Decimal
    dpp_faktur: Decimal
    ppn11: Decimal
    total: Decimal
    line_count: int


def calculate_line_pricing(
    unit_price: Decimal | int | float,
    quantity: int,
    discount_pct: Decimal | int | float = 0,
) -> LinePricing:
    """Break one cart line down into DPP, discount and PPN amounts.

    Every returned figure is already multiplied by *quantity*.
    """
    price = Decimal(str(unit_price))
    qty = Decimal(quantity)
    pct = clamp_discount(discount_pct)

    dpp11 = DPP11_FACTOR * price
    discount = (pct / HUNDRED) * dpp11
    dpp_faktur = dpp11 - discount
    dpp_lain = DPP_LAIN_FACTOR * dpp_faktur
    ppn11 = PPN_RATE * dpp_faktur

    return LinePricing(
        amount=price * qty,
        dpp11=dpp11 * qty,
        discount=discount * qty,
        dpp_faktur=dpp_faktur * qty,
        dpp_lain=dpp_lain * qty,
        ppn11=ppn11 * qty,
        ppn12=ppn11 * qty,
        line_total=(dpp_faktur + ppn11) * qty,
    )


def summarize(pricings: Iterable[LinePricing]) -> CartTotals:
    subtotal = discount = dpp_faktur = ppn11 = total = ZERO
    count = 0
    for p in pricings:
        subtotal += p.amount
        discount += p.discount
        dpp_faktur += p.dpp_faktur
        ppn11 += p.ppn11
        total += p.line_total
        count += 1
    return CartTotals(
        subtotal=subtotal,
        discount=discount,
        dpp_faktur=dpp_faktur,
        ppn11=ppn11,
        total=total,
        line_count=count,
    )
