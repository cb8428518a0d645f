"""
Billing Engine Examples
Pricing a document and numbering it on save
"""

import logging
from decimal import Decimal

from billing_engine import (
    AmountDiscount,
    BillingConfig,
    ConfigLoader,
    DepositSpec,
    DocumentNumberingService,
    DocumentType,
    LineItem,
    LineItemValidator,
    NumberingError,
    PercentDiscount,
    apply_deposit,
    cents_to_display,
    compute_document_totals,
)


# =============================================================================
# Example 1: Configuration
# =============================================================================

def load_config() -> BillingConfig:
    """Defaults, overridden by BILLING_* environment variables and code"""
    return ConfigLoader().load(
        config={
            "state_store_path": "./data/document-counters.json",
            "invoice_prefix": "I",
            "quote_prefix": "E",
            "invoice_start": 98978,
            "quote_start": 82385,
        }
    )


# =============================================================================
# Example 2: Live totals while editing
# =============================================================================

def price_document(config: BillingConfig) -> None:
    """Price a set of lines the way the document form does on every edit"""
    items = [
        LineItem(description="Design work", quantity=Decimal("7.5"), unit_price_cents=12000, tax_code="GST"),
        LineItem.from_dollars(
            description="Hosting (annual)",
            quantity=1,
            unit_price=240.00,
            discount=PercentDiscount(value=10),
            tax_code="GST",
        ),
        LineItem(
            description="Goodwill credit",
            quantity=1,
            unit_price_cents=5000,
            discount=AmountDiscount(value_cents=5000),
            tax_code="GST_FREE",
        ),
    ]
    
    totals = compute_document_totals(
        items, config.get_tax_rate_table(), config.rounding_mode
    )
    
    for line in totals.lines:
        print(f"  {line.line_id[:8]}  {cents_to_display(line.line_total_cents, config.currency)}")
    print(f"Subtotal: {cents_to_display(totals.subtotal_cents, config.currency)}")
    print(f"Discount: {cents_to_display(totals.discount_cents, config.currency)}")
    print(f"Tax:      {cents_to_display(totals.tax_cents, config.currency)}")
    print(f"Total:    {cents_to_display(totals.total_cents, config.currency)}")
    for warning in totals.warnings:
        print(f"Warning: {warning}")
    
    deposit = apply_deposit(totals.total_cents, DepositSpec(kind="percent", value=25))
    print(f"Deposit:  {cents_to_display(deposit.deposit_cents, config.currency)}")
    print(f"Balance:  {cents_to_display(deposit.balance_cents, config.currency)}")


# =============================================================================
# Example 3: Save workflow
# =============================================================================

def save_invoice(config: BillingConfig) -> None:
    """Validate, preview the number, then commit it once"""
    numbering = DocumentNumberingService.from_config(config)
    items = [LineItem(description="Consulting", quantity=2, unit_price_cents=1000, tax_code="GST")]
    
    LineItemValidator().validate_or_raise(items)
    print(f"Next invoice: {numbering.peek_next(DocumentType.INVOICE)}")
    
    totals = compute_document_totals(items, config.get_tax_rate_table(), config.rounding_mode)
    try:
        number = numbering.generate(DocumentType.INVOICE)
    except NumberingError as e:
        print(f"Could not create document, please retry: {e.get_description()}")
        return
    
    # The totals are stored with the document as an immutable snapshot
    print(f"Saved {number}: {totals.model_dump_json()}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    
    config = load_config()
    price_document(config)
    save_invoice(config)
