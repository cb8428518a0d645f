"""Pricing module initialization"""

from billing_engine.pricing.engine import (
    compute_line_total,
    compute_document_totals,
    apply_deposit,
)
from billing_engine.pricing.validator import LineItemValidator

__all__ = [
    "compute_line_total",
    "compute_document_totals",
    "apply_deposit",
    "LineItemValidator",
]
