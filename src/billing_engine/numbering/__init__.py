"""Numbering module initialization"""

from billing_engine.numbering.store import (
    CounterStore,
    InMemoryCounterStore,
    JsonFileCounterStore,
)
from billing_engine.numbering.service import (
    DocumentNumberingService,
    NumberingAudit,
    NumberingAuditEntry,
)

__all__ = [
    "CounterStore",
    "InMemoryCounterStore",
    "JsonFileCounterStore",
    "DocumentNumberingService",
    "NumberingAudit",
    "NumberingAuditEntry",
]
