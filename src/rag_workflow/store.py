from __future__ import annotations
from threading import Lock
from typing import Any, Dict, Generic, List, Type, TypeVar
import uuid

from pydantic import BaseModel

from .schemas import PdfDocument, Workflow, utc_now


RecordT = TypeVar("RecordT", bound=BaseModel)


class MemoryCollection(Generic[RecordT]):
    """
    Thread-safe keyed collection of pydantic records.
    Ids and timestamps are assigned here; nothing survives a restart.
    """

    def __init__(self, model: Type[RecordT]):
        self.model = model
        self._items: Dict[str, RecordT] = {}
        self._lock = Lock()

    def create(self, fields: Dict[str, Any]) -> RecordT:
        now = utc_now()
        record = self.model.model_validate(
            {**fields, "id": str(uuid.uuid4()), "created_at": now, "updated_at": now}
        )
        with self._lock:
            self._items[record.id] = record
        return record

    def list(self) -> List[RecordT]:
        with self._lock:
            items = list(self._items.values())
        return sorted(items, key=lambda r: r.created_at, reverse=True)

    def get(self, item_id: str) -> RecordT | None:
        with self._lock:
            return self._items.get(item_id)

    def update(self, item_id: str, updates: Dict[str, Any]) -> RecordT | None:
        """Merge `updates` into the stored record; unknown ids return None."""
        with self._lock:
            current = self._items.get(item_id)
            if current is None:
                return None
            merged = {
                **current.model_dump(),
                **updates,
                "id": current.id,
                "created_at": current.created_at,
                "updated_at": utc_now(),
            }
            record = self.model.model_validate(merged)
            self._items[item_id] = record
            return record

    def delete(self, item_id: str) -> bool:
        with self._lock:
            return self._items.pop(item_id, None) is not None

    def __len__(self) :
        with self._lock:
            return len(self._items)


class MemoryStore:
    def __init__(self):
        self.workflows: MemoryCollection[Workflow] = MemoryCollection(Workflow)
        self.pdfs: MemoryCollection[PdfDocument] = MemoryCollection(PdfDocument)
