"""Computed totals models"""

from decimal import Decimal
from typing import List

from pydantic import BaseModel, Field


class LineTotals(BaseModel):
    """Priced figures for a single line item, all in cents"""
    
    line_id: str = Field(..., description="Id of the priced line item")
    base_cents: int = Field(..., description="quantity x unit price, rounded")
    discount_cents: int = Field(..., description="Resolved discount for the line")
    net_cents: int = Field(..., description="Base less discount, never negative")
    tax_cents: int = Field(..., description="Tax on the net amount, rounded")
    line_total_cents: int = Field(..., description="Net plus tax")
    tax_code: str = Field(..., description="Tax code the line was priced with")
    rate_percent: Decimal = Field(..., description="Rate applied to the net amount")
    tax_code_known: bool = Field(True, description="False when the code was missing from the table")
    
    model_config = {"frozen": True}


class TaxBreakdownItem(BaseModel):
    """Tax collected per (code, rate) pair"""
    
    tax_code: str
    rate_percent: Decimal
    taxable_cents: int = 0
    tax_cents: int = 0
    
    model_config = {"frozen": True}


class DocumentTotals(BaseModel):
    """
    Aggregate totals for an invoice or quote
    
    Derived entirely from the line items and the tax table it was
    computed with. Once a document is saved this is its immutable
    snapshot; it must not be recomputed against a later tax table.
    """
    
    subtotal_cents: int = Field(0, description="Sum of line bases")
    discount_cents: int = Field(0, description="Sum of line discounts")
    tax_cents: int = Field(0, description="Sum of line taxes")
    total_cents: int = Field(0, description="subtotal - discount + tax")
    lines: List[LineTotals] = Field(default_factory=list)
    tax_breakdown: List[TaxBreakdownItem] = Field(default_factory=list)
    warnings: List[str] = Field(
        default_factory=list,
        description="Non-blocking issues, e.g. tax codes without a configured rate",
    )
    
    model_config = {"frozen": True}
    
    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)
    
    @property
    def has_mixed_tax_rates(self) -> bool:
        return len({item.rate_percent for item in self.tax_breakdown}) > 1
    
    @property
    def is_empty(self) -> bool:
        return not self.lines
