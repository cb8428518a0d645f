"""Exception classes for the billing engine"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class BillingErrorCategory(str, Enum):
    """Billing error category codes"""
    VALIDATION = "VAL"
    CONFIG = "CONFIG"
    NUMBERING = "NUM"
    STORE = "STORE"
    UNKNOWN = "UNKNOWN"


class BillingError(Exception):
    """
    Base exception for billing engine errors
    
    All errors raised by the package extend from this class.
    Provides consistent error handling and categorization.
    """
    
    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        cause: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.cause = cause
        self.details = details
        self.timestamp = datetime.now(timezone.utc)
        self.category = self._determine_category(code)

    def _determine_category(self, code: Optional[str]) -> BillingErrorCategory:
        """Determine error category from code"""
        if not code:
            return BillingErrorCategory.UNKNOWN
        
        if code.startswith("VAL"):
            return BillingErrorCategory.VALIDATION
        if code.startswith("CONFIG"):
            return BillingErrorCategory.CONFIG
        if code.startswith("NUM"):
            return BillingErrorCategory.NUMBERING
        if code.startswith("STORE"):
            return BillingErrorCategory.STORE
        
        return BillingErrorCategory.UNKNOWN

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary"""
        return {
            "name": self.__class__.__name__,
            "message": str(self),
            "code": self.code,
            "category": self.category.value,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
        }

    def has_code(self, code: str) -> bool:
        """Check if error has a specific code"""
        return self.code == code

    def is_category(self, category: BillingErrorCategory) -> bool:
        """Check if error belongs to a category"""
        return self.category == category

    def get_description(self) -> str:
        """Get human-readable error description"""
        parts = [str(self)]
        
        if self.code:
            parts.insert(0, f"[{self.code}]")
        
        return " ".join(parts)


class ValidationError(BillingError):
    """Caller-side validation error (line items, documents, configuration)"""
    
    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code="VALIDATION_ERROR", details=details)
        self.field = field


class ConfigError(BillingError):
    """Configuration error"""
    
    def __init__(
        self,
        message: str,
        code: str = "CONFIG01",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, details=details)


class PersistenceError(BillingError):
    """
    Counter store failure
    
    Raised when a counter value cannot be read from or durably written
    to the backing store.
    """
    
    def __init__(
        self,
        message: str,
        code: str = "STORE01",
        cause: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, cause=cause, details=details)

    @classmethod
    def write_failed(cls, path: str, cause: Exception) -> "PersistenceError":
        """Create a write failure error"""
        return cls(
            f"Failed to persist counters to {path}: {cause}",
            code="STORE02",
            cause=cause,
            details={"path": path},
        )

    @classmethod
    def corrupt(cls, path: str, cause: Optional[Exception] = None) -> "PersistenceError":
        """Create a corrupt store error"""
        return cls(
            f"Counter store is corrupt: {path}",
            code="STORE03",
            cause=cause,
            details={"path": path},
        )


class NumberingError(BillingError):
    """
    Document numbering error
    
    A failed generate() never hands out a number; callers should surface
    this as "could not create document, please retry".
    """
    
    def __init__(
        self,
        message: str,
        code: str = "NUM01",
        cause: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, cause=cause, details=details)

    @classmethod
    def reservation_failed(cls, doc_type: str, cause: Exception) -> "NumberingError":
        """Create an error for a number that could not be durably reserved"""
        return cls(
            f"Could not reserve {doc_type} number: {cause}",
            code="NUM03",
            cause=cause,
            details={"doc_type": doc_type},
        )
