"""
Counter stores
Durable homes for the per-document-type ``next_value`` counters.

A store's ``save`` must not return until the new value is durable;
any failure is raised as PersistenceError so the numbering service can
refuse to hand out a number it has not reserved.
"""

import json
import os
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Union

from billing_engine.exceptions import PersistenceError
from billing_engine.models.sequence import DocumentType


class CounterStoreDefaults:
    """Default values for counter store files"""
    VERSION = 1
    FILE_PERMISSIONS = 0o600


class CounterStore(ABC):
    """Persistence contract for document counters"""
    
    @abstractmethod
    def load(self) -> Dict[DocumentType, int]:
        """Return every persisted counter, keyed by document type"""
    
    @abstractmethod
    def save(self, doc_type: DocumentType, next_value: int) -> None:
        """Durably record ``next_value`` for ``doc_type``"""


class InMemoryCounterStore(CounterStore):
    """Process-local store for tests and throwaway sessions"""
    
    def __init__(self, initial: Union[Dict[DocumentType, int], None] = None) -> None:
        self._values: Dict[DocumentType, int] = dict(initial or {})
        self._lock = threading.Lock()
    
    def load(self) -> Dict[DocumentType, int]:
        with self._lock:
            return dict(self._values)
    
    def save(self, doc_type: DocumentType, next_value: int) -> None:
        with self._lock:
            self._values[doc_type] = next_value


class JsonFileCounterStore(CounterStore):
    """
    JSON file counter store
    
    File layout::
    
        {
          "version": 1,
          "counters": {"invoice": 42, "quote": 7},
          "updated_at": "2026-10-18T09:30:00+00:00"
        }
    
    Writes go to a temp file that is fsynced and then renamed over the
    original, so a crash leaves either the old or the new counters on
    disk, never a torn file.
    """
    
    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path).resolve()
        self._lock = threading.Lock()
    
    @property
    def path(self) -> Path:
        return self._path
    
    def load(self) -> Dict[DocumentType, int]:
        """
        Read counters from disk
        
        Returns:
            Counters keyed by document type; empty when the file does not exist
            
        Raises:
            PersistenceError: If the file cannot be read or is corrupt
        """
        with self._lock:
            return self._read()
    
    def save(self, doc_type: DocumentType, next_value: int) -> None:
        """
        Write one counter, keeping the others
        
        Raises:
            PersistenceError: If the write cannot be made durable
        """
        with self._lock:
            counters = self._read()
            counters[doc_type] = next_value
            self._write(counters)
    
    def _read(self) -> Dict[DocumentType, int]:
        if not self._path.exists():
            return {}
        
        try:
            data = json.loads(self._path.read_text("utf-8"))
        except json.JSONDecodeError as e:
            raise PersistenceError.corrupt(str(self._path), e) from e
        except OSError as e:
            raise PersistenceError(
                f"Failed to read counter store {self._path}: {e}",
                cause=e,
                details={"path": str(self._path)},
            ) from e
        
        if not isinstance(data, dict) or data.get("version") != CounterStoreDefaults.VERSION:
            raise PersistenceError.corrupt(str(self._path))
        
        counters: Dict[DocumentType, int] = {}
        for key, value in data.get("counters", {}).items():
            try:
                doc_type = DocumentType(key)
            except ValueError:
                continue
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise PersistenceError.corrupt(str(self._path))
            counters[doc_type] = value
        return counters
    
    def _write(self, counters: Dict[DocumentType, int]) -> None:
        payload = {
            "version": CounterStoreDefaults.VERSION,
            "counters": {doc_type.value: value for doc_type, value in counters.items()},
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        temp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(temp_path, CounterStoreDefaults.FILE_PERMISSIONS)
            temp_path.replace(self._path)
        except OSError as e:
            raise PersistenceError.write_failed(str(self._path), e) from e
