"""
Document Numbering Service Unit Tests
"""

import json
import logging
import threading
from pathlib import Path
from typing import Dict, List

import pytest

from billing_engine.config import BillingConfig
from billing_engine.exceptions import BillingErrorCategory, NumberingError, PersistenceError
from billing_engine.models import DocumentType
from billing_engine.numbering import (
    DocumentNumberingService,
    InMemoryCounterStore,
    JsonFileCounterStore,
    NumberingAuditEntry,
)


class FailingCounterStore(InMemoryCounterStore):
    """Store whose writes can be switched off"""
    
    def __init__(self, initial: Dict[DocumentType, int] = None) -> None:
        super().__init__(initial)
        self.fail_writes = False
    
    def save(self, doc_type: DocumentType, next_value: int) -> None:
        if self.fail_writes:
            raise PersistenceError("disk full", code="STORE02")
        super().save(doc_type, next_value)


@pytest.fixture
def store() -> InMemoryCounterStore:
    return InMemoryCounterStore()


@pytest.fixture
def service(store: InMemoryCounterStore) -> DocumentNumberingService:
    return DocumentNumberingService(store)


class TestPeekNext:
    """Tests for peek_next"""
    
    def test_first_number_starts_at_one(self, service: DocumentNumberingService):
        assert service.peek_next(DocumentType.INVOICE) == "I 1"
        assert service.peek_next(DocumentType.QUOTE) == "E 1"
    
    def test_peek_is_stable(self, service: DocumentNumberingService):
        previews = {service.peek_next(DocumentType.INVOICE) for _ in range(1000)}
        assert previews == {"I 1"}
    
    def test_peek_predicts_generate(self, service: DocumentNumberingService):
        for _ in range(1000):
            preview = service.peek_next(DocumentType.INVOICE)
        
        assert service.generate(DocumentType.INVOICE) == preview
    
    def test_peek_does_not_write(self, store: InMemoryCounterStore):
        service = DocumentNumberingService(store)
        service.initialize()
        before = store.load()
        
        service.peek_next(DocumentType.QUOTE)
        
        assert store.load() == before


class TestGenerate:
    """Tests for generate"""
    
    def test_sequential_and_unique(self, service: DocumentNumberingService):
        numbers = [service.generate(DocumentType.INVOICE) for _ in range(50)]
        values = [service.parse_number(DocumentType.INVOICE, n) for n in numbers]
        
        assert values == list(range(1, 51))
        assert len(set(numbers)) == 50
    
    def test_counters_are_per_type(self, service: DocumentNumberingService):
        assert service.generate(DocumentType.INVOICE) == "I 1"
        assert service.generate(DocumentType.INVOICE) == "I 2"
        assert service.generate(DocumentType.QUOTE) == "E 1"
        assert service.peek_next(DocumentType.INVOICE) == "I 3"
    
    def test_persists_before_returning(self, store: InMemoryCounterStore, service: DocumentNumberingService):
        service.generate(DocumentType.INVOICE)
        
        assert store.load()[DocumentType.INVOICE] == 2
    
    def test_quote_conversion_gets_new_invoice_number(self, service: DocumentNumberingService):
        quote_number = service.generate(DocumentType.QUOTE)
        invoice_number = service.generate(DocumentType.INVOICE)
        
        assert quote_number == "E 1"
        assert invoice_number == "I 1"
        assert service.peek_next(DocumentType.QUOTE) == "E 2"
    
    def test_concurrent_generate_never_duplicates(self, service: DocumentNumberingService):
        results: List[str] = []
        results_lock = threading.Lock()
        
        def worker() -> None:
            for _ in range(25):
                number = service.generate(DocumentType.INVOICE)
                with results_lock:
                    results.append(number)
        
        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        
        assert len(results) == 200
        assert len(set(results)) == 200
        assert service.peek_next(DocumentType.INVOICE) == "I 201"


class TestPersistenceFailure:
    """generate must fail atomically when the counter cannot be persisted"""
    
    def test_failed_write_returns_no_number(self):
        store = FailingCounterStore()
        service = DocumentNumberingService(store)
        service.generate(DocumentType.INVOICE)
        
        store.fail_writes = True
        with pytest.raises(NumberingError) as exc_info:
            service.generate(DocumentType.INVOICE)
        
        assert exc_info.value.is_category(BillingErrorCategory.NUMBERING)
        assert isinstance(exc_info.value.cause, PersistenceError)
    
    def test_failed_write_does_not_advance(self):
        store = FailingCounterStore()
        service = DocumentNumberingService(store)
        service.initialize()
        
        store.fail_writes = True
        with pytest.raises(NumberingError):
            service.generate(DocumentType.INVOICE)
        store.fail_writes = False
        
        assert service.peek_next(DocumentType.INVOICE) == "I 1"
        assert service.generate(DocumentType.INVOICE) == "I 1"
    
    def test_store_ahead_of_memory_wins(self, caplog):
        store = InMemoryCounterStore()
        service = DocumentNumberingService(store)
        service.initialize()
        
        # another writer advanced the durable counter
        store.save(DocumentType.INVOICE, 10)
        
        with caplog.at_level(logging.WARNING, logger="billing_engine.numbering.service"):
            number = service.generate(DocumentType.INVOICE)
        
        assert number == "I 10"
        assert "mismatch" in caplog.text
        assert service.peek_next(DocumentType.INVOICE) == "I 11"
    
    def test_store_behind_memory_never_reissues(self):
        store = InMemoryCounterStore()
        service = DocumentNumberingService(store)
        for _ in range(5):
            service.generate(DocumentType.INVOICE)
        
        store.save(DocumentType.INVOICE, 2)
        
        assert service.generate(DocumentType.INVOICE) == "I 6"
        assert store.load()[DocumentType.INVOICE] == 7
    
    def test_peek_follows_store_ahead_of_memory(self):
        store = InMemoryCounterStore()
        service = DocumentNumberingService(store)
        service.initialize()
        
        store.save(DocumentType.INVOICE, 10)
        
        assert service.peek_next(DocumentType.INVOICE) == "I 10"
        assert service.is_number_available(DocumentType.INVOICE, "I 9") is False
        assert service.generate(DocumentType.INVOICE) == "I 10"
    
    def test_peek_unreadable_store_raises(self):
        store = InMemoryCounterStore()
        service = DocumentNumberingService(store)
        service.initialize()
        
        def broken_load():
            raise PersistenceError("store unreadable", code="STORE01")
        store.load = broken_load
        
        with pytest.raises(NumberingError) as exc_info:
            service.peek_next(DocumentType.INVOICE)
        
        assert isinstance(exc_info.value.cause, PersistenceError)


class TestInitialize:
    """Tests for counter seeding"""
    
    def test_restart_resumes_from_store(self, tmp_path: Path):
        path = tmp_path / "counters.json"
        JsonFileCounterStore(path).save(DocumentType.INVOICE, 42)
        
        service = DocumentNumberingService(JsonFileCounterStore(path))
        
        assert service.generate(DocumentType.INVOICE) == "I 42"
    
    def test_restart_after_generate(self, tmp_path: Path):
        path = tmp_path / "counters.json"
        first = DocumentNumberingService(JsonFileCounterStore(path))
        first.generate(DocumentType.QUOTE)
        first.generate(DocumentType.QUOTE)
        
        second = DocumentNumberingService(JsonFileCounterStore(path))
        
        assert second.peek_next(DocumentType.QUOTE) == "E 3"
    
    def test_seeded_from_existing_documents(self, service: DocumentNumberingService):
        service.initialize({
            DocumentType.INVOICE: ["I 7", "I 12", "I 9", "not-a-number"],
        })
        
        assert service.peek_next(DocumentType.INVOICE) == "I 13"
        assert service.peek_next(DocumentType.QUOTE) == "E 1"
    
    def test_seed_uses_highest_source(self):
        store = InMemoryCounterStore({DocumentType.INVOICE: 100})
        service = DocumentNumberingService(store)
        service.initialize({DocumentType.INVOICE: ["I 50"]})
        
        assert service.peek_next(DocumentType.INVOICE) == "I 100"
    
    def test_configured_start(self, store: InMemoryCounterStore):
        config = BillingConfig(invoice_start=98978, quote_start=82385)
        service = DocumentNumberingService(store, config)
        
        assert service.peek_next(DocumentType.INVOICE) == "I 98978"
        assert service.peek_next(DocumentType.QUOTE) == "E 82385"
        assert store.load() == {DocumentType.INVOICE: 98978, DocumentType.QUOTE: 82385}
    
    def test_unreadable_store_raises(self, tmp_path: Path):
        path = tmp_path / "counters.json"
        path.write_text("{broken")
        service = DocumentNumberingService(JsonFileCounterStore(path))
        
        with pytest.raises(NumberingError):
            service.peek_next(DocumentType.INVOICE)


class TestFormatting:
    """Tests for number formatting and parsing"""
    
    def test_padding_and_prefix(self, store: InMemoryCounterStore):
        config = BillingConfig(invoice_prefix="INV", number_padding=6)
        service = DocumentNumberingService(store, config)
        
        assert service.generate(DocumentType.INVOICE) == "INV 000001"
        assert service.parse_number(DocumentType.INVOICE, "INV 000001") == 1
    
    def test_no_prefix(self, store: InMemoryCounterStore):
        config = BillingConfig(quote_prefix="")
        service = DocumentNumberingService(store, config)
        
        assert service.generate(DocumentType.QUOTE) == "1"
        assert service.parse_number(DocumentType.QUOTE, "1") == 1
    
    def test_parse_rejects_other_prefix(self, service: DocumentNumberingService):
        assert service.parse_number(DocumentType.INVOICE, "E 5") is None
        assert service.parse_number(DocumentType.INVOICE, "I5") == 5
        assert service.parse_number(DocumentType.INVOICE, "I five") is None
    
    def test_is_number_available(self, service: DocumentNumberingService):
        service.generate(DocumentType.INVOICE)
        
        assert service.is_number_available(DocumentType.INVOICE, "I 1") is False
        assert service.is_number_available(DocumentType.INVOICE, "I 2") is True
        assert service.is_number_available(DocumentType.INVOICE, "X 2") is False
    
    def test_get_sequence(self, service: DocumentNumberingService):
        service.generate(DocumentType.QUOTE)
        sequence = service.get_sequence(DocumentType.QUOTE)
        
        assert sequence.doc_type == DocumentType.QUOTE
        assert sequence.prefix == "E"
        assert sequence.next_value == 2


class TestAuditNumbers:
    """Tests for reconciliation checks"""
    
    def test_clean_history(self, service: DocumentNumberingService):
        numbers = [service.generate(DocumentType.INVOICE) for _ in range(3)]
        audit = service.audit_numbers(DocumentType.INVOICE, numbers)
        
        assert audit.needs_reconciliation is False
        assert audit.duplicates == []
    
    def test_flags_duplicates_without_renumbering(self, service: DocumentNumberingService):
        for _ in range(3):
            service.generate(DocumentType.INVOICE)
        
        audit = service.audit_numbers(
            DocumentType.INVOICE, ["I 1", "I 2", "I 2", "I 3", "junk"]
        )
        
        assert audit.needs_reconciliation is True
        assert audit.duplicates == ["I 2"]
        assert audit.malformed == ["junk"]
        assert service.peek_next(DocumentType.INVOICE) == "I 4"
    
    def test_flags_numbers_ahead_of_counter(self, service: DocumentNumberingService):
        audit = service.audit_numbers(DocumentType.QUOTE, ["E 5"])
        
        assert audit.ahead_of_counter == ["E 5"]
        assert audit.needs_reconciliation is True


class TestAuditLog:
    """Tests for the audit callback"""
    
    def test_success_entry(self, service: DocumentNumberingService):
        entries: List[NumberingAuditEntry] = []
        service.set_audit_log_callback(entries.append)
        
        service.generate(DocumentType.INVOICE)
        
        assert len(entries) == 1
        assert entries[0].success is True
        assert entries[0].number == "I 1"
        assert entries[0].next_value == 2
    
    def test_failure_entry(self):
        store = FailingCounterStore()
        service = DocumentNumberingService(store)
        service.initialize()
        entries: List[NumberingAuditEntry] = []
        service.set_audit_log_callback(entries.append)
        
        store.fail_writes = True
        with pytest.raises(NumberingError):
            service.generate(DocumentType.QUOTE)
        
        assert len(entries) == 1
        assert entries[0].success is False
        assert entries[0].number is None
        assert "disk full" in entries[0].error
    
    def test_disabled_audit_log(self, store: InMemoryCounterStore):
        service = DocumentNumberingService(store, BillingConfig(enable_audit_log=False))
        entries: List[NumberingAuditEntry] = []
        service.set_audit_log_callback(entries.append)
        
        service.generate(DocumentType.INVOICE)
        
        assert entries == []
    
    def test_failing_callback_keeps_reserved_number(self, store: InMemoryCounterStore, caplog):
        service = DocumentNumberingService(store)
        
        def broken_callback(entry: NumberingAuditEntry) -> None:
            raise RuntimeError("audit sink offline")
        service.set_audit_log_callback(broken_callback)
        
        with caplog.at_level(logging.ERROR, logger="billing_engine.numbering.service"):
            number = service.generate(DocumentType.INVOICE)
        
        assert number == "I 1"
        assert "Audit log callback failed" in caplog.text
        assert store.load()[DocumentType.INVOICE] == 2
        assert service.generate(DocumentType.INVOICE) == "I 2"


class TestFromConfig:
    """Tests for DocumentNumberingService.from_config"""
    
    def test_uses_json_store(self, tmp_path: Path):
        path = tmp_path / "data" / "counters.json"
        service = DocumentNumberingService.from_config(
            BillingConfig(state_store_path=str(path))
        )
        
        service.generate(DocumentType.INVOICE)
        
        data = json.loads(path.read_text())
        assert data["counters"]["invoice"] == 2
    
    def test_falls_back_to_memory(self):
        service = DocumentNumberingService.from_config(BillingConfig())
        
        assert isinstance(service.store, InMemoryCounterStore)
