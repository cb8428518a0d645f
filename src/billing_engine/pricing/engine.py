"""
Pricing engine
Pure functions turning line items and a tax rate table into totals.

Discount is applied before tax, and every figure is rounded per line so
that the line totals shown to the user sum exactly to the document
total. Nothing here raises for arithmetic reasons: out-of-range inputs
are clamped and unknown tax codes price at zero with a warning.
"""

import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Tuple

from billing_engine.models.deposit import DepositResult, DepositSpec
from billing_engine.models.line_item import (
    AmountDiscount,
    LineItem,
    NoDiscount,
    PercentDiscount,
)
from billing_engine.models.tax import TaxRateTable
from billing_engine.models.totals import DocumentTotals, LineTotals, TaxBreakdownItem
from billing_engine.money import RoundingMode, round_cents

logger = logging.getLogger(__name__)

_HUNDRED = Decimal("100")


def missing_tax_code_warning(tax_code: str) -> str:
    return f"No tax rate configured for tax code '{tax_code}'"


def _resolve_discount(item: LineItem, base_cents: int, rounding: RoundingMode) -> int:
    discount = item.discount
    if isinstance(discount, NoDiscount):
        return 0
    if isinstance(discount, PercentDiscount):
        percent = min(max(discount.value, Decimal("0")), _HUNDRED)
        return round_cents(Decimal(base_cents) * percent / _HUNDRED, rounding)
    if isinstance(discount, AmountDiscount):
        return min(max(discount.value_cents, 0), base_cents)
    raise TypeError(f"Unsupported discount type: {type(discount).__name__}")


def compute_line_total(
    item: LineItem,
    tax_rates: TaxRateTable,
    rounding: RoundingMode = RoundingMode.HALF_UP,
) -> LineTotals:
    """
    Price a single line item
    
    Args:
        item: Line item to price
        tax_rates: Tax code to rate mapping
        rounding: Rounding mode applied to every fractional cent
        
    Returns:
        LineTotals with base, discount, net, tax and line total in cents
    """
    base_cents = round_cents(item.quantity * item.unit_price_cents, rounding)
    discount_cents = _resolve_discount(item, base_cents, rounding)
    net_cents = max(0, base_cents - discount_cents)
    
    resolution = tax_rates.resolve(item.tax_code)
    if not resolution.known:
        logger.warning(
            "Line %s priced without tax: %s",
            item.id,
            missing_tax_code_warning(item.tax_code),
        )
    tax_cents = round_cents(
        Decimal(net_cents) * resolution.rate_percent / _HUNDRED, rounding
    )
    
    return LineTotals(
        line_id=item.id,
        base_cents=base_cents,
        discount_cents=discount_cents,
        net_cents=net_cents,
        tax_cents=tax_cents,
        line_total_cents=net_cents + tax_cents,
        tax_code=item.tax_code,
        rate_percent=resolution.rate_percent,
        tax_code_known=resolution.known,
    )


def compute_document_totals(
    items: Iterable[LineItem],
    tax_rates: TaxRateTable,
    rounding: RoundingMode = RoundingMode.HALF_UP,
) -> DocumentTotals:
    """
    Aggregate line totals into document totals
    
    An empty item list yields all-zero totals. Rejecting a document with
    no billable content is the caller's job.
    """
    lines: List[LineTotals] = []
    breakdown: Dict[Tuple[str, Decimal], Dict[str, int]] = {}
    warnings: List[str] = []
    subtotal_cents = discount_cents = tax_cents = 0
    
    for item in items:
        line = compute_line_total(item, tax_rates, rounding)
        lines.append(line)
        
        subtotal_cents += line.base_cents
        discount_cents += line.discount_cents
        tax_cents += line.tax_cents
        
        group = breakdown.setdefault(
            (line.tax_code, line.rate_percent), {"taxable": 0, "tax": 0}
        )
        group["taxable"] += line.net_cents
        group["tax"] += line.tax_cents
        
        if not line.tax_code_known:
            warning = missing_tax_code_warning(line.tax_code)
            if warning not in warnings:
                warnings.append(warning)
    
    return DocumentTotals(
        subtotal_cents=subtotal_cents,
        discount_cents=discount_cents,
        tax_cents=tax_cents,
        total_cents=subtotal_cents - discount_cents + tax_cents,
        lines=lines,
        tax_breakdown=[
            TaxBreakdownItem(
                tax_code=code,
                rate_percent=rate,
                taxable_cents=sums["taxable"],
                tax_cents=sums["tax"],
            )
            for (code, rate), sums in breakdown.items()
        ],
        warnings=warnings,
    )


def apply_deposit(
    total_cents: int,
    deposit: DepositSpec,
    rounding: RoundingMode = RoundingMode.HALF_UP,
) -> DepositResult:
    """
    Split a quote total into a deposit and the remaining balance
    
    Percent deposits are taken from the total; fixed deposits are an
    amount in cents. The balance never goes below zero.
    """
    if deposit.kind == "percent":
        deposit_cents = round_cents(Decimal(total_cents) * deposit.value / _HUNDRED, rounding)
    else:
        deposit_cents = round_cents(deposit.value, rounding)
    
    return DepositResult(
        total_cents=total_cents,
        deposit_cents=deposit_cents,
        balance_cents=max(0, total_cents - deposit_cents),
    )
