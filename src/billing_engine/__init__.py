"""
Billing Engine

Pricing and document numbering for invoices and quotes
"""

from billing_engine.exceptions import (
    BillingError,
    BillingErrorCategory,
    ValidationError,
    ConfigError,
    NumberingError,
    PersistenceError,
)

# Configuration
from billing_engine.config import (
    BillingConfig,
    PartialBillingConfig,
    ConfigLoader,
    ConfigValidator,
    ENV_VAR_MAPPING,
    ConfigDefaults,
)

# Models
from billing_engine.models import (
    TaxRate,
    TaxRateTable,
    TaxResolution,
    LineItem,
    NoDiscount,
    PercentDiscount,
    AmountDiscount,
    LineTotals,
    DocumentTotals,
    TaxBreakdownItem,
    DepositSpec,
    DepositResult,
    DocumentType,
    DocumentSequence,
)

# Money
from billing_engine.money import (
    RoundingMode,
    round_cents,
    dollars_to_cents,
    cents_to_dollars,
    display_to_cents,
    cents_to_display,
    cents_to_input_value,
)

# Pricing
from billing_engine.pricing import (
    compute_line_total,
    compute_document_totals,
    apply_deposit,
    LineItemValidator,
)

# Numbering
from billing_engine.numbering import (
    CounterStore,
    InMemoryCounterStore,
    JsonFileCounterStore,
    DocumentNumberingService,
    NumberingAudit,
    NumberingAuditEntry,
)

__version__ = "0.1.0"

__all__ = [
    # Exceptions
    "BillingError",
    "BillingErrorCategory",
    "ValidationError",
    "ConfigError",
    "NumberingError",
    "PersistenceError",
    # Configuration
    "BillingConfig",
    "PartialBillingConfig",
    "ConfigLoader",
    "ConfigValidator",
    "ENV_VAR_MAPPING",
    "ConfigDefaults",
    # Models
    "TaxRate",
    "TaxRateTable",
    "TaxResolution",
    "LineItem",
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
    # Money
    "RoundingMode",
    "round_cents",
    "dollars_to_cents",
    "cents_to_dollars",
    "display_to_cents",
    "cents_to_display",
    "cents_to_input_value",
    # Pricing
    "compute_line_total",
    "compute_document_totals",
    "apply_deposit",
    "LineItemValidator",
    # Numbering
    "CounterStore",
    "InMemoryCounterStore",
    "JsonFileCounterStore",
    "DocumentNumberingService",
    "NumberingAudit",
    "NumberingAuditEntry",
]
