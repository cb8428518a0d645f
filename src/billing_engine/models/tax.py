"""Tax rate models"""

from decimal import Decimal
from typing import Dict, List, Mapping, Union

from pydantic import BaseModel, Field


class TaxRate(BaseModel):
    """Tax rate model"""
    
    tax_code: str = Field(..., description="Tax code", min_length=1)
    tax_name: str = Field(..., description="Tax name")
    tax_percent: Decimal = Field(..., description="Tax percentage", ge=0)
    
    model_config = {"frozen": True}


class TaxResolution(BaseModel):
    """Outcome of looking a tax code up in a rate table"""
    
    tax_code: str
    rate_percent: Decimal
    known: bool
    
    model_config = {"frozen": True}


DEFAULT_TAX_RATES: Dict[str, Decimal] = {
    "GST": Decimal("10"),
    "GST_FREE": Decimal("0"),
    "NONE": Decimal("0"),
}

DEFAULT_TAX_NAMES: Dict[str, str] = {
    "GST": "GST (10%)",
    "GST_FREE": "GST Free",
    "NONE": "No Tax",
}


class TaxRateTable(BaseModel):
    """
    Mapping of tax code to rate
    
    Owned by the tax settings screen and treated as an immutable input
    by the pricing engine. A code that is not in the table resolves to
    a zero rate with ``known=False`` so that saving a document is never
    blocked by a gap in the table.
    """
    
    rates: Dict[str, TaxRate] = Field(default_factory=dict)
    
    model_config = {"frozen": True}
    
    @classmethod
    def from_percentages(
        cls, percentages: Mapping[str, Union[int, float, str, Decimal]]
    ) -> "TaxRateTable":
        """Build a table from a plain ``{code: percent}`` mapping"""
        rates = {}
        for code, percent in percentages.items():
            value = percent if isinstance(percent, Decimal) else Decimal(str(percent))
            rates[code] = TaxRate(
                tax_code=code,
                tax_name=DEFAULT_TAX_NAMES.get(code, code),
                tax_percent=value,
            )
        return cls(rates=rates)
    
    @classmethod
    def default(cls) -> "TaxRateTable":
        """Australian GST defaults"""
        return cls.from_percentages(DEFAULT_TAX_RATES)
    
    def resolve(self, tax_code: str) -> TaxResolution:
        rate = self.rates.get(tax_code)
        if rate is None:
            return TaxResolution(tax_code=tax_code, rate_percent=Decimal("0"), known=False)
        return TaxResolution(tax_code=tax_code, rate_percent=rate.tax_percent, known=True)
    
    def codes(self) -> List[str]:
        return list(self.rates.keys())
    
    def __contains__(self, tax_code: object) -> bool:
        return tax_code in self.rates
