"""Line item and discount models"""

import uuid
from decimal import Decimal
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from billing_engine.money import dollars_to_cents


class NoDiscount(BaseModel):
    """No discount on the line"""
    
    kind: Literal["none"] = "none"
    
    model_config = {"frozen": True}


class PercentDiscount(BaseModel):
    """Percentage of the line base; clamped to [0, 100] when priced"""
    
    kind: Literal["percent"] = "percent"
    value: Decimal = Field(..., description="Discount percentage")
    
    model_config = {"frozen": True}


class AmountDiscount(BaseModel):
    """Fixed amount in cents; capped at the line base when priced"""
    
    kind: Literal["amount"] = "amount"
    value_cents: int = Field(..., description="Discount amount in cents")
    
    model_config = {"frozen": True}


Discount = Annotated[
    Union[NoDiscount, PercentDiscount, AmountDiscount],
    Field(discriminator="kind"),
]


class LineItem(BaseModel):
    """One billable row of an invoice or quote"""
    
    id: str = Field(
        default_factory=lambda: uuid.uuid4().hex,
        description="Stable id for UI diffing, not an accounting identity",
    )
    description: str = Field("", description="Item description")
    quantity: Decimal = Field(..., description="Units billed", ge=0)
    unit_price_cents: int = Field(..., description="Price of one unit in cents", ge=0)
    discount: Discount = Field(default_factory=NoDiscount)
    tax_code: str = Field("NONE", description="Key into the tax rate table")
    
    model_config = {"frozen": True}
    
    @classmethod
    def from_dollars(
        cls,
        quantity: Union[int, float, str, Decimal],
        unit_price: Union[int, float, str, Decimal],
        tax_code: str = "NONE",
        discount: Optional[Union[NoDiscount, PercentDiscount, AmountDiscount]] = None,
        description: str = "",
        id: Optional[str] = None,
    ) -> "LineItem":
        """
        Build a line item from a dollar unit price
        
        This is the one place a dollar amount becomes integer cents;
        the conversion rounds once, half up.
        """
        data = {
            "description": description,
            "quantity": quantity,
            "unit_price_cents": dollars_to_cents(unit_price),
            "discount": discount or NoDiscount(),
            "tax_code": tax_code,
        }
        if id is not None:
            data["id"] = id
        return cls(**data)
