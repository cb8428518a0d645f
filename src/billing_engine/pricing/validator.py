"""
Line Item Validator
Caller-side checks run before a document is priced for saving.

The pricing engine clamps rather than fails; these checks are what
stop a bad value from being persisted in the first place.
"""

from decimal import Decimal
from typing import Iterable, List

from billing_engine.config.config_validator import ValidationErrorDetail, ValidationResult
from billing_engine.models.line_item import AmountDiscount, LineItem, PercentDiscount
from billing_engine.money import round_cents

MAX_QUANTITY = Decimal("99999")
MAX_UNIT_PRICE_CENTS = 99_999_999
MAX_DESCRIPTION_LENGTH = 200


class LineItemValidator:
    """
    LineItemValidator class
    Validates line items and documents with clear error messages
    """
    
    def __init__(self) -> None:
        self._errors: List[ValidationErrorDetail] = []
    
    def validate(self, item: LineItem, index: int = 0) -> ValidationResult:
        """
        Validate a single line item
        
        Args:
            item: Line item to validate
            index: Position of the line, used in error field names
            
        Returns:
            ValidationResult with any errors
        """
        self._errors = []
        self._validate_item(item, f"lines[{index}]")
        return ValidationResult(valid=not self._errors, errors=self._errors.copy())
    
    def validate_document(self, items: Iterable[LineItem]) -> ValidationResult:
        """Validate every line of a document and that it has billable content"""
        self._errors = []
        
        count = 0
        for index, item in enumerate(items):
            self._validate_item(item, f"lines[{index}]")
            count += 1
        
        if count == 0:
            self._errors.append(ValidationErrorDetail(
                field="lines",
                message="document must have at least one line item"
            ))
        
        return ValidationResult(valid=not self._errors, errors=self._errors.copy())
    
    def validate_or_raise(self, items: Iterable[LineItem]) -> None:
        """
        Validate a document and raise if invalid
        
        Raises:
            ValidationError: If any line (or the document) is invalid
        """
        from billing_engine.exceptions import ValidationError
        
        result = self.validate_document(items)
        if not result.valid:
            error_messages = "; ".join(
                f"{e.field}: {e.message}" for e in result.errors
            )
            raise ValidationError(
                f"Document validation failed: {error_messages}",
                field=result.errors[0].field,
                details={"errors": [e.field for e in result.errors]},
            )
    
    def _validate_item(self, item: LineItem, prefix: str) -> None:
        if not item.description.strip():
            self._errors.append(ValidationErrorDetail(
                field=f"{prefix}.description",
                message="description is required"
            ))
        elif len(item.description) > MAX_DESCRIPTION_LENGTH:
            self._errors.append(ValidationErrorDetail(
                field=f"{prefix}.description",
                message=f"description should not exceed {MAX_DESCRIPTION_LENGTH} characters",
                value=len(item.description)
            ))
        
        if item.quantity <= 0:
            self._errors.append(ValidationErrorDetail(
                field=f"{prefix}.quantity",
                message="quantity must be greater than 0",
                value=item.quantity
            ))
        elif item.quantity > MAX_QUANTITY:
            self._errors.append(ValidationErrorDetail(
                field=f"{prefix}.quantity",
                message=f"quantity should not exceed {MAX_QUANTITY}",
                value=item.quantity
            ))
        
        if item.unit_price_cents > MAX_UNIT_PRICE_CENTS:
            self._errors.append(ValidationErrorDetail(
                field=f"{prefix}.unit_price_cents",
                message=f"unit_price_cents should not exceed {MAX_UNIT_PRICE_CENTS}",
                value=item.unit_price_cents
            ))
        
        self._validate_discount(item, prefix)
    
    def _validate_discount(self, item: LineItem, prefix: str) -> None:
        discount = item.discount
        field = f"{prefix}.discount"
        
        if isinstance(discount, PercentDiscount):
            if not 0 <= discount.value <= 100:
                self._errors.append(ValidationErrorDetail(
                    field=field,
                    message="percent discount must be between 0 and 100",
                    value=discount.value
                ))
        elif isinstance(discount, AmountDiscount):
            base_cents = round_cents(item.quantity * item.unit_price_cents)
            if discount.value_cents < 0:
                self._errors.append(ValidationErrorDetail(
                    field=field,
                    message="amount discount must not be negative",
                    value=discount.value_cents
                ))
            elif discount.value_cents > base_cents:
                self._errors.append(ValidationErrorDetail(
                    field=field,
                    message="amount discount must not exceed the line amount",
                    value=discount.value_cents
                ))
