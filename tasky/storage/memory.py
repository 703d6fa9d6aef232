import threading
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from tasky.models.entities import TodoItem


class InMemoryTodoRepository:
    """Process-local store for the v1 to-do list. Contents are lost on restart."""

    def __init__(self):
        self._items: Dict[uuid.UUID, TodoItem] = {}
        self._lock = threading.Lock()

    def list_all(self) -> List[TodoItem]:
        with self._lock:
            return list(self._items.values())

    def get_by_id(self, item_id: uuid.UUID) -> Optional[TodoItem]:
        with self._lock:
            return self._items.get(item_id)

    def create(self, description: str) -> TodoItem:
        item = TodoItem(
            id=uuid.uuid4(),
            description=description.strip(),
            created_at_utc=datetime.now(timezone.utc),
        )
        with self._lock:
            self._items[item.id] = item
        return item

    def update(self, item_id: uuid.UUID, description: str, is_completed: bool) -> bool:
        with self._lock:
            item = self._items.get(item_id)
            if not item:
                return False
            item.description = description.strip()
            item.is_completed = is_completed
            return True

    def toggle(self, item_id: uuid.UUID) -> bool:
        with self._lock:
            item = self._items.get(item_id)
            if not item:
                return False
            item.is_completed = not item.is_completed
            return True

    def delete(self, item_id: uuid.UUID) -> bool:
        with self._lock:
            return self._items.pop(item_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._items.clear()
