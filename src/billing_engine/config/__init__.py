"""
Configuration module
"""

from billing_engine.config.billing_config import (
    BillingConfig,
    PartialBillingConfig,
    ENV_VAR_MAPPING,
    ConfigDefaults,
)
from billing_engine.config.config_loader import ConfigLoader
from billing_engine.config.config_validator import (
    ConfigValidator,
    ValidationResult,
    ValidationErrorDetail,
)

__all__ = [
    "BillingConfig",
    "PartialBillingConfig",
    "ENV_VAR_MAPPING",
    "ConfigDefaults",
    "ConfigLoader",
    "ConfigValidator",
    "ValidationResult",
    "ValidationErrorDetail",
]
