"""
Configuration Validator
Validates billing configuration with clear error messages
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from billing_engine.money import RoundingMode


@dataclass
class ValidationErrorDetail:
    """Validation error detail"""
    field: str
    message: str
    value: Optional[Any] = None


@dataclass
class ValidationResult:
    """Validation result"""
    valid: bool
    errors: List[ValidationErrorDetail] = field(default_factory=list)


class ConfigValidator:
    """
    ConfigValidator class
    Provides comprehensive validation for billing configuration
    """
    
    def __init__(self) -> None:
        self._errors: List[ValidationErrorDetail] = []
    
    def validate(self, config: Dict[str, Any]) -> ValidationResult:
        """
        Validate the entire configuration dictionary
        
        Args:
            config: Configuration dictionary to validate
            
        Returns:
            ValidationResult with any errors
        """
        self._errors = []
        
        self._validate_prefixes(config)
        self._validate_ranges(config)
        self._validate_rounding_mode(config)
        self._validate_currency(config)
        self._validate_tax_rates(config)
        self._validate_store_path(config)
        
        return ValidationResult(
            valid=len(self._errors) == 0,
            errors=self._errors.copy()
        )
    
    def validate_or_raise(self, config: Dict[str, Any]) -> None:
        """
        Validate and raise if invalid
        
        Args:
            config: Configuration dictionary to validate
            
        Raises:
            ValidationError: If configuration is invalid
        """
        from billing_engine.exceptions import ValidationError
        
        result = self.validate(config)
        if not result.valid:
            error_messages = "; ".join(
                f"{e.field}: {e.message}" for e in result.errors
            )
            raise ValidationError(f"Configuration validation failed: {error_messages}")
    
    def _validate_prefixes(self, config: Dict[str, Any]) -> None:
        """Validate document number prefixes"""
        for prefix_field in ["invoice_prefix", "quote_prefix"]:
            prefix = config.get(prefix_field)
            if prefix is None:
                continue
            if not isinstance(prefix, str):
                self._errors.append(ValidationErrorDetail(
                    field=prefix_field,
                    message=f"{prefix_field} must be a string",
                    value=prefix
                ))
            elif any(ch.isspace() or ch.isdigit() for ch in prefix.strip()):
                self._errors.append(ValidationErrorDetail(
                    field=prefix_field,
                    message=f"{prefix_field} must not contain whitespace or digits",
                    value=prefix
                ))
            elif len(prefix) > 10:
                self._errors.append(ValidationErrorDetail(
                    field=prefix_field,
                    message=f"{prefix_field} should not exceed 10 characters",
                    value=prefix
                ))
    
    def _validate_ranges(self, config: Dict[str, Any]) -> None:
        """Validate numeric ranges"""
        for start_field in ["invoice_start", "quote_start"]:
            start = config.get(start_field)
            if start is None:
                continue
            if isinstance(start, bool) or not isinstance(start, int) or start < 1:
                self._errors.append(ValidationErrorDetail(
                    field=start_field,
                    message=f"{start_field} must be a positive integer",
                    value=start
                ))
        
        padding = config.get("number_padding")
        if padding is not None:
            if isinstance(padding, bool) or not isinstance(padding, int) or padding < 0:
                self._errors.append(ValidationErrorDetail(
                    field="number_padding",
                    message="number_padding must be a non-negative integer",
                    value=padding
                ))
            elif padding > 12:
                self._errors.append(ValidationErrorDetail(
                    field="number_padding",
                    message="number_padding should not exceed 12",
                    value=padding
                ))
    
    def _validate_rounding_mode(self, config: Dict[str, Any]) -> None:
        """Validate rounding mode setting"""
        rounding_mode = config.get("rounding_mode")
        if rounding_mode is not None:
            valid_modes = [m.value for m in RoundingMode]
            mode_value = rounding_mode.value if isinstance(rounding_mode, RoundingMode) else rounding_mode
            if mode_value not in valid_modes:
                self._errors.append(ValidationErrorDetail(
                    field="rounding_mode",
                    message=f"rounding_mode must be one of: {', '.join(valid_modes)}",
                    value=rounding_mode
                ))
    
    def _validate_currency(self, config: Dict[str, Any]) -> None:
        """Validate currency code"""
        currency = config.get("currency")
        if currency is not None:
            if not isinstance(currency, str) or len(currency.strip()) != 3 or not currency.strip().isalpha():
                self._errors.append(ValidationErrorDetail(
                    field="currency",
                    message="currency must be a 3-letter ISO 4217 code",
                    value=currency
                ))
    
    def _validate_tax_rates(self, config: Dict[str, Any]) -> None:
        """Validate tax code to rate mapping"""
        tax_rates = config.get("tax_rates")
        if tax_rates is None:
            return
        
        if not isinstance(tax_rates, dict):
            self._errors.append(ValidationErrorDetail(
                field="tax_rates",
                message="tax_rates must be a mapping of tax code to percent",
                value=tax_rates
            ))
            return
        
        for code, rate in tax_rates.items():
            field_name = f"tax_rates.{code}"
            if not code:
                self._errors.append(ValidationErrorDetail(
                    field="tax_rates",
                    message="tax code cannot be empty"
                ))
                continue
            try:
                percent = Decimal(str(rate))
            except InvalidOperation:
                self._errors.append(ValidationErrorDetail(
                    field=field_name,
                    message="tax rate must be a number",
                    value=rate
                ))
                continue
            if not percent.is_finite():
                self._errors.append(ValidationErrorDetail(
                    field=field_name,
                    message="tax rate must be a finite number",
                    value=rate
                ))
                continue
            if percent < 0 or percent > 100:
                self._errors.append(ValidationErrorDetail(
                    field=field_name,
                    message="tax rate must be between 0 and 100",
                    value=rate
                ))
    
    def _validate_store_path(self, config: Dict[str, Any]) -> None:
        """Validate path fields"""
        path_value = config.get("state_store_path")
        if path_value is not None and path_value != "":
            if not isinstance(path_value, str):
                self._errors.append(ValidationErrorDetail(
                    field="state_store_path",
                    message="state_store_path must be a string",
                    value=path_value
                ))
