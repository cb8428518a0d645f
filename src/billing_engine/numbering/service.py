"""
Document numbering service
Assigns unique, sequential display numbers to invoices and quotes.

Numbers are reserved on commit only: ``peek_next`` shows the number a
new document would get without consuming it, ``generate`` consumes it.
Numbers are never reused, so gaps are possible (a reservation whose
document is never saved) but duplicates are not.
"""

import logging
import re
import threading
import uuid
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from billing_engine.config.billing_config import BillingConfig
from billing_engine.exceptions import NumberingError, PersistenceError
from billing_engine.models.sequence import DocumentSequence, DocumentType
from billing_engine.numbering.store import (
    CounterStore,
    InMemoryCounterStore,
    JsonFileCounterStore,
)

logger = logging.getLogger(__name__)


@dataclass
class NumberingAuditEntry:
    """Audit log entry for a number reservation"""
    timestamp: str
    request_id: str
    doc_type: str
    number: Optional[str] = None
    next_value: Optional[int] = None
    success: bool = False
    error: Optional[str] = None


@dataclass
class NumberingAudit:
    """Findings from checking stored document numbers against the counter"""
    doc_type: DocumentType
    duplicates: List[str] = field(default_factory=list)
    ahead_of_counter: List[str] = field(default_factory=list)
    malformed: List[str] = field(default_factory=list)
    
    @property
    def needs_reconciliation(self) -> bool:
        return bool(self.duplicates or self.ahead_of_counter)


class DocumentNumberingService:
    """
    Document numbering service
    
    Features:
    - Per-document-type counters seeded from the store and existing documents
    - Non-committing preview via ``peek_next``
    - ``generate`` persists the advanced counter before returning a number
    - Audit callback for every reservation attempt
    
    Example:
        >>> service = DocumentNumberingService(JsonFileCounterStore("counters.json"))
        >>> service.peek_next(DocumentType.INVOICE)
        'I 1'
        >>> service.generate(DocumentType.INVOICE)
        'I 1'
    """
    
    def __init__(
        self,
        store: CounterStore,
        config: Optional[BillingConfig] = None,
    ) -> None:
        """
        Create a numbering service
        
        Args:
            store: Durable counter store
            config: Billing configuration (prefixes, start values, padding)
        """
        self.store = store
        self.config = config or BillingConfig()
        
        self._lock = threading.Lock()
        self._next_values: Dict[DocumentType, int] = {}
        self._initialized = False
        self._audit_log_callback: Optional[Callable[[NumberingAuditEntry], None]] = None

    @classmethod
    def from_config(cls, config: BillingConfig) -> "DocumentNumberingService":
        """Build a service backed by ``config.state_store_path``, or memory if unset"""
        if config.state_store_path:
            store: CounterStore = JsonFileCounterStore(config.state_store_path)
        else:
            logger.warning("No state_store_path configured; document counters will not survive a restart")
            store = InMemoryCounterStore()
        return cls(store, config)

    def initialize(
        self,
        existing_numbers: Optional[Mapping[DocumentType, Iterable[str]]] = None,
    ) -> None:
        """
        Seed every counter
        
        Each counter starts at the highest of: the persisted value, the
        highest committed number found in ``existing_numbers`` plus one,
        and the configured start value. Seeds that differ from the
        store are written back.
        
        Args:
            existing_numbers: Display numbers of documents already saved
            
        Raises:
            NumberingError: If the store cannot be read or written
        """
        with self._lock:
            self._initialize_locked(existing_numbers or {})
    
    def peek_next(self, doc_type: DocumentType) -> str:
        """
        Preview the number the next ``generate`` will return
        
        Reads the store like ``generate`` does but never writes; repeated
        calls return the same value until a number is generated.
        """
        return self.format_number(doc_type, self._current_value(doc_type))
    
    def generate(self, doc_type: DocumentType) -> str:
        """
        Reserve and return the next number for ``doc_type``
        
        Call at most once per committed document. Editing an existing
        document must reuse its stored number instead.
        
        Raises:
            NumberingError: If the advanced counter could not be persisted;
                no number is handed out in that case
        """
        request_id = str(uuid.uuid4())
        
        with self._lock:
            if not self._initialized:
                self._initialize_locked({})
            
            try:
                current = self._reload_locked(doc_type)
                self.store.save(doc_type, current + 1)
            except PersistenceError as e:
                logger.warning("Could not reserve %s number: %s", doc_type.value, e)
                self._log_audit(NumberingAuditEntry(
                    timestamp=datetime.now(timezone.utc).isoformat(),
                    request_id=request_id,
                    doc_type=doc_type.value,
                    success=False,
                    error=str(e),
                ))
                raise NumberingError.reservation_failed(doc_type.value, e) from e
            
            self._next_values[doc_type] = current + 1
        
        number = self.format_number(doc_type, current)
        self._log_audit(NumberingAuditEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            request_id=request_id,
            doc_type=doc_type.value,
            number=number,
            next_value=current + 1,
            success=True,
        ))
        return number
    
    def get_sequence(self, doc_type: DocumentType) -> DocumentSequence:
        """Snapshot of a document type's counter"""
        return self.config.get_sequence(doc_type, self._current_value(doc_type))
    
    def format_number(self, doc_type: DocumentType, value: int) -> str:
        """Format a counter value, e.g. ``I 98978`` or ``INV 000042``"""
        prefix = self.config.get_prefix(doc_type)
        digits = str(value).zfill(self.config.number_padding)
        if not prefix:
            return digits
        return f"{prefix} {digits}"
    
    def parse_number(self, doc_type: DocumentType, number: str) -> Optional[int]:
        """Extract the counter value from a display number; None if malformed"""
        prefix = self.config.get_prefix(doc_type)
        pattern = rf"^{re.escape(prefix)}\s?(\d+)$" if prefix else r"^(\d+)$"
        match = re.match(pattern, number.strip())
        if not match:
            return None
        return int(match.group(1))
    
    def is_number_available(self, doc_type: DocumentType, number: str) -> bool:
        """True if ``number`` is well formed and the counter has not reached it"""
        value = self.parse_number(doc_type, number)
        if value is None:
            return False
        return value >= self._current_value(doc_type)
    
    def audit_numbers(self, doc_type: DocumentType, numbers: Iterable[str]) -> NumberingAudit:
        """
        Check stored document numbers for conflicts
        
        Duplicates and numbers at or beyond the counter are flagged for
        manual reconciliation. Existing documents are never renumbered.
        """
        next_value = self._current_value(doc_type)
        audit = NumberingAudit(doc_type=doc_type)
        
        counts: Counter = Counter()
        for number in numbers:
            value = self.parse_number(doc_type, number)
            if value is None:
                audit.malformed.append(number)
                continue
            counts[value] += 1
            if value >= next_value:
                audit.ahead_of_counter.append(number)
        
        audit.duplicates = [
            self.format_number(doc_type, value)
            for value, count in sorted(counts.items())
            if count > 1
        ]
        
        if audit.needs_reconciliation:
            logger.warning(
                "%s numbering needs manual reconciliation: duplicates=%s ahead_of_counter=%s",
                doc_type.value,
                audit.duplicates,
                audit.ahead_of_counter,
            )
        return audit
    
    def set_audit_log_callback(
        self, callback: Callable[[NumberingAuditEntry], None]
    ) -> None:
        """Set audit log callback"""
        self._audit_log_callback = callback
    
    def _log_audit(self, entry: NumberingAuditEntry) -> None:
        """Log audit entry"""
        if self.config.enable_audit_log and self._audit_log_callback:
            # The number is already persisted; callback errors are only logged
            try:
                self._audit_log_callback(entry)
            except Exception:
                logger.exception(
                    "Audit log callback failed for %s request %s",
                    entry.doc_type,
                    entry.request_id,
                )
    
    def _current_value(self, doc_type: DocumentType) -> int:
        """Counter value the next ``generate`` would use; never writes"""
        with self._lock:
            if not self._initialized:
                self._initialize_locked({})
            try:
                return self._reload_locked(doc_type)
            except PersistenceError as e:
                raise NumberingError(
                    f"Could not read {doc_type.value} counter: {e}", cause=e
                ) from e
    
    def _initialize_locked(
        self, existing_numbers: Mapping[DocumentType, Iterable[str]]
    ) -> None:
        try:
            stored = self.store.load()
        except PersistenceError as e:
            raise NumberingError(
                f"Could not load document counters: {e}", cause=e
            ) from e
        
        next_values: Dict[DocumentType, int] = {}
        for doc_type in DocumentType:
            candidates = [self.config.get_start(doc_type)]
            if doc_type in stored:
                candidates.append(stored[doc_type])
            
            committed = [
                value
                for value in (
                    self.parse_number(doc_type, number)
                    for number in existing_numbers.get(doc_type, ())
                )
                if value is not None
            ]
            if committed:
                candidates.append(max(committed) + 1)
            
            next_value = max(candidates)
            if stored.get(doc_type) != next_value:
                try:
                    self.store.save(doc_type, next_value)
                except PersistenceError as e:
                    raise NumberingError(
                        f"Could not persist seeded {doc_type.value} counter: {e}",
                        cause=e,
                    ) from e
            next_values[doc_type] = next_value
        
        self._next_values = next_values
        self._initialized = True
        logger.info(
            "Document counters initialized: %s",
            {doc_type.value: value for doc_type, value in next_values.items()},
        )
    
    def _reload_locked(self, doc_type: DocumentType) -> int:
        """
        Current counter value with the store as ground truth
        
        The store wins when it is ahead (another writer, or a reservation
        whose in-memory update was lost). Memory can only be ahead if the
        store was rolled back; the higher value is kept so numbers are
        never reissued.
        """
        in_memory = self._next_values[doc_type]
        stored = self.store.load().get(doc_type)
        
        if stored is None or stored == in_memory:
            return in_memory
        
        logger.warning(
            "%s counter mismatch: memory=%d store=%d; continuing from %d",
            doc_type.value,
            in_memory,
            stored,
            max(stored, in_memory),
        )
        self._next_values[doc_type] = max(stored, in_memory)
        return self._next_values[doc_type]
