"""Models module initialization"""

from billing_engine.models.tax import (
    TaxRate,
    TaxRateTable,
    TaxResolution,
    DEFAULT_TAX_RATES,
)
from billing_engine.models.line_item import (
    LineItem,
    Discount,
    NoDiscount,
    PercentDiscount,
    AmountDiscount,
)
from billing_engine.models.totals import (
    LineTotals,
    DocumentTotals,
    TaxBreakdownItem,
)
from billing_engine.models.deposit import DepositSpec, DepositResult
from billing_engine.models.sequence import DocumentType, DocumentSequence

__all__ = [
    "TaxRate",
    "TaxRateTable",
    "TaxResolution",
    "DEFAULT_TAX_RATES",
    "LineItem",
    "Discount",
    "NoDiscount",
    "PercentDiscount",
    "AmountDiscount",
    "LineTotals",
    "DocumentTotals",
    "TaxBreakdownItem",
    "DepositSpec",
    "DepositResult",
    "DocumentType",
    "DocumentSequence",
]
