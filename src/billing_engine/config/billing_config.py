"""
Billing Engine Configuration Types and Schema
Type-safe configuration objects for the billing engine
"""

from decimal import Decimal
from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator

from billing_engine.models.sequence import DocumentSequence, DocumentType
from billing_engine.models.tax import DEFAULT_TAX_RATES, TaxRateTable
from billing_engine.money import RoundingMode


class ConfigDefaults:
    """Default configuration values"""
    INVOICE_PREFIX = "I"
    QUOTE_PREFIX = "E"
    INVOICE_START = 1
    QUOTE_START = 1
    NUMBER_PADDING = 0
    ROUNDING_MODE = RoundingMode.HALF_UP
    CURRENCY = "AUD"
    ENABLE_AUDIT_LOG = True


# Environment variable mapping
ENV_VAR_MAPPING = {
    "BILLING_STATE_STORE_PATH": "state_store_path",
    "BILLING_INVOICE_PREFIX": "invoice_prefix",
    "BILLING_QUOTE_PREFIX": "quote_prefix",
    "BILLING_INVOICE_START": "invoice_start",
    "BILLING_QUOTE_START": "quote_start",
    "BILLING_NUMBER_PADDING": "number_padding",
    "BILLING_ROUNDING_MODE": "rounding_mode",
    "BILLING_CURRENCY": "currency",
    "BILLING_ENABLE_AUDIT_LOG": "enable_audit_log",
}


class BillingConfig(BaseModel):
    """
    Main billing engine configuration
    Defines numbering, rounding and tax defaults
    """
    
    # Counter persistence
    state_store_path: Optional[str] = Field(
        default=None,
        description="Path of the JSON file holding document counters"
    )
    
    # Document numbering
    invoice_prefix: str = Field(
        default=ConfigDefaults.INVOICE_PREFIX,
        description="Display prefix for invoice numbers",
        max_length=10
    )
    quote_prefix: str = Field(
        default=ConfigDefaults.QUOTE_PREFIX,
        description="Display prefix for quote numbers",
        max_length=10
    )
    invoice_start: int = Field(
        default=ConfigDefaults.INVOICE_START,
        description="First invoice number when no invoices exist",
        ge=1
    )
    quote_start: int = Field(
        default=ConfigDefaults.QUOTE_START,
        description="First quote number when no quotes exist",
        ge=1
    )
    number_padding: int = Field(
        default=ConfigDefaults.NUMBER_PADDING,
        description="Zero-pad width of the numeric part (0 disables padding)",
        ge=0,
        le=12
    )
    
    # Pricing
    rounding_mode: RoundingMode = Field(
        default=ConfigDefaults.ROUNDING_MODE,
        description="Rounding applied per line: 'half_up' or 'half_even'"
    )
    currency: str = Field(
        default=ConfigDefaults.CURRENCY,
        description="ISO 4217 currency code used for display",
        min_length=3,
        max_length=3
    )
    tax_rates: Dict[str, Decimal] = Field(
        default_factory=lambda: dict(DEFAULT_TAX_RATES),
        description="Tax code to rate percent"
    )
    
    # Audit logging
    enable_audit_log: bool = Field(
        default=ConfigDefaults.ENABLE_AUDIT_LOG,
        description="Emit an audit entry for every generated number"
    )
    
    model_config = {
        "str_strip_whitespace": True,
        "validate_assignment": True,
    }
    
    @field_validator("invoice_prefix", "quote_prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        """Validate prefix can be told apart from the numeric part"""
        if any(ch.isspace() or ch.isdigit() for ch in v):
            raise ValueError("prefix must not contain whitespace or digits")
        return v

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        """Validate currency is an alphabetic ISO code"""
        if not v.isalpha():
            raise ValueError("currency must be a 3-letter ISO 4217 code")
        return v.upper()
    
    @field_validator("tax_rates")
    @classmethod
    def validate_tax_rates(cls, v: Dict[str, Decimal]) -> Dict[str, Decimal]:
        """Validate tax rates are percentages"""
        for code, rate in v.items():
            if not code:
                raise ValueError("tax code cannot be empty")
            if not rate.is_finite():
                raise ValueError(f"tax rate for {code} must be a finite number")
            if rate < 0 or rate > 100:
                raise ValueError(f"tax rate for {code} must be between 0 and 100")
        return v
    
    def get_tax_rate_table(self) -> TaxRateTable:
        """Build the tax rate table from configured percentages"""
        return TaxRateTable.from_percentages(self.tax_rates)
    
    def get_prefix(self, doc_type: DocumentType) -> str:
        if doc_type == DocumentType.INVOICE:
            return self.invoice_prefix
        return self.quote_prefix
    
    def get_start(self, doc_type: DocumentType) -> int:
        if doc_type == DocumentType.INVOICE:
            return self.invoice_start
        return self.quote_start
    
    def get_sequence(self, doc_type: DocumentType, next_value: int) -> DocumentSequence:
        """Describe a document type's counter with this configuration's format"""
        return DocumentSequence(
            doc_type=doc_type,
            prefix=self.get_prefix(doc_type),
            next_value=next_value,
            padding=self.number_padding,
        )


class PartialBillingConfig(BaseModel):
    """
    Partial configuration for merging from multiple sources
    All fields are optional to allow partial configuration
    """
    
    state_store_path: Optional[str] = None
    invoice_prefix: Optional[str] = None
    quote_prefix: Optional[str] = None
    invoice_start: Optional[int] = None
    quote_start: Optional[int] = None
    number_padding: Optional[int] = None
    rounding_mode: Optional[RoundingMode] = None
    currency: Optional[str] = None
    tax_rates: Optional[Dict[str, Decimal]] = None
    enable_audit_log: Optional[bool] = None
    
    model_config = {
        "str_strip_whitespace": True,
    }
