"""Deposit request models (quotes)"""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field


class DepositSpec(BaseModel):
    """
    Deposit requested against a quote total
    
    ``value`` is a percentage for ``percent`` deposits and an amount in
    cents for ``fixed`` deposits.
    """
    
    kind: Literal["percent", "fixed"] = Field("percent", description="Deposit type")
    value: Decimal = Field(..., description="Percent (0-100) or cents", ge=0)
    
    model_config = {"frozen": True}


class DepositResult(BaseModel):
    """Deposit and remaining balance, in cents"""
    
    total_cents: int
    deposit_cents: int
    balance_cents: int
    
    model_config = {"frozen": True}
    
    @property
    def is_valid(self) -> bool:
        """A deposit must be positive and must not exceed the document total"""
        return 0 < self.deposit_cents <= self.total_cents
