"""
Configuration Loader
Loads billing configuration from various sources
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from billing_engine.config.billing_config import (
    BillingConfig,
    PartialBillingConfig,
    ENV_VAR_MAPPING,
    ConfigDefaults,
)
from billing_engine.config.config_validator import ConfigValidator
from billing_engine.exceptions import ConfigError
from billing_engine.models.tax import DEFAULT_TAX_RATES
from billing_engine.money import RoundingMode


class ConfigLoader:
    """
    ConfigLoader class
    Provides multiple ways to load and merge configuration
    """
    
    def __init__(self) -> None:
        self._validator = ConfigValidator()
    
    def from_file(self, path: Union[str, Path]) -> Dict[str, Any]:
        """
        Load configuration from a JSON file
        
        Args:
            path: Path to JSON configuration file
            
        Returns:
            Loaded configuration dictionary
            
        Raises:
            ConfigError: If file not found or invalid JSON
        """
        file_path = Path(path).resolve()
        
        if not file_path.exists():
            raise ConfigError(
                f"Configuration file not found: {file_path}",
                code="CONFIG_FILE_NOT_FOUND"
            )
        
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(
                f"Invalid JSON in configuration file: {file_path}",
                code="CONFIG_PARSE_ERROR"
            ) from e
        
        return self._process_store_path(config, file_path.parent)
    
    def from_environment(self) -> Dict[str, Any]:
        """
        Load configuration from environment variables
        
        Returns:
            Configuration dictionary from environment variables
        """
        config: Dict[str, Any] = {}
        
        for env_var, config_key in ENV_VAR_MAPPING.items():
            value = os.environ.get(env_var)
            if value is not None and value != "":
                config[config_key] = self._parse_env_value(config_key, value)
        
        return config
    
    def from_dict(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Load configuration from a dictionary
        
        Args:
            config: Configuration dictionary
            
        Returns:
            Copy of configuration dictionary
        """
        return config.copy()
    
    def merge(self, *sources: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge multiple configuration sources
        Priority: later sources override earlier sources
        
        Args:
            sources: Configuration dictionaries in order of increasing priority
            
        Returns:
            Merged configuration dictionary
        """
        merged: Dict[str, Any] = {}
        
        for source in sources:
            filtered = self._filter_none(source)
            merged.update(filtered)
        
        return merged
    
    def resolve(self, config: Dict[str, Any]) -> BillingConfig:
        """
        Resolve configuration with defaults and validation
        
        Args:
            config: Partial configuration dictionary
            
        Returns:
            Fully resolved BillingConfig object
            
        Raises:
            ValidationError: If configuration is invalid
        """
        # Validate before resolving
        self._validator.validate_or_raise(config)
        
        # Create BillingConfig (Pydantic handles defaults)
        return BillingConfig(**config)
    
    def load(
        self,
        file: Optional[Union[str, Path]] = None,
        env: bool = True,
        config: Optional[Dict[str, Any]] = None,
    ) -> BillingConfig:
        """
        Load, merge, and resolve configuration from multiple sources
        
        Args:
            file: Path to JSON configuration file (optional)
            env: Whether to load from environment variables (default: True)
            config: Programmatic configuration dictionary (optional)
            
        Returns:
            Fully resolved BillingConfig object
        """
        sources: list[Dict[str, Any]] = []
        
        # Load from file if specified
        if file is not None:
            sources.append(self.from_file(file))
        
        # Load from environment if enabled
        if env:
            sources.append(self.from_environment())
        
        # Add programmatic config
        if config is not None:
            sources.append(config)
        
        # Merge and resolve
        merged = self.merge(*sources)
        return self.resolve(merged)
    
    def create_template(self, path: Union[str, Path]) -> None:
        """
        Create a configuration template file
        
        Args:
            path: Path to write template
        """
        template = PartialBillingConfig(
            state_store_path="./data/document-counters.json",
            invoice_prefix=ConfigDefaults.INVOICE_PREFIX,
            quote_prefix=ConfigDefaults.QUOTE_PREFIX,
            invoice_start=ConfigDefaults.INVOICE_START,
            quote_start=ConfigDefaults.QUOTE_START,
            number_padding=ConfigDefaults.NUMBER_PADDING,
            rounding_mode=ConfigDefaults.ROUNDING_MODE,
            currency=ConfigDefaults.CURRENCY,
            tax_rates=dict(DEFAULT_TAX_RATES),
            enable_audit_log=ConfigDefaults.ENABLE_AUDIT_LOG,
        )
        
        file_path = Path(path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        
        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(template.model_dump(mode="json"), f, indent=2)
    
    def _parse_env_value(self, key: str, value: str) -> Any:
        """Parse environment variable value to appropriate type"""
        # Boolean fields
        if key == "enable_audit_log":
            return value.lower() in ("true", "1", "yes")
        
        # Numeric fields
        if key in ("invoice_start", "quote_start", "number_padding"):
            try:
                return int(value)
            except ValueError:
                return value
        
        # Rounding mode field
        if key == "rounding_mode":
            try:
                return RoundingMode(value.lower())
            except ValueError:
                return value
        
        return value
    
    def _process_store_path(
        self, config: Dict[str, Any], base_path: Path
    ) -> Dict[str, Any]:
        """Resolve a relative counter store path against the config file's directory"""
        processed = config.copy()
        
        store_path = processed.get("state_store_path")
        if isinstance(store_path, str) and store_path:
            candidate = Path(store_path)
            if not candidate.is_absolute():
                processed["state_store_path"] = str(base_path / candidate)
        
        return processed
    
    def _filter_none(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Filter out None values from config dictionary"""
        return {k: v for k, v in config.items() if v is not None}
