"""In-process item directory -- the CI engine's view of top-level items.

Serves as both the project registry (lookup by name) and the item
directory (enumerate everything).  Deletes and renames are published on
the item event bus after the directory itself has been updated.
"""

import logging
import threading
from dataclasses import dataclass

from conductor.errors import ConflictError, NotFoundError
from conductor.events import ItemEventBus

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class SubProject:
    """Handle for one independently managed buildable item."""

    name: str


class ItemRepository:
    """Name-keyed, insertion-ordered item store."""

    def __init__(self, bus: ItemEventBus) -> None:
        self._bus = bus
        self._items: dict[str, SubProject] = {}
        self._lock = threading.Lock()

    def find_project(self, name: str) -> SubProject | None:
        with self._lock:
            return self._items.get(name)

    def all_items(self) -> list[tuple[str, SubProject]]:
        with self._lock:
            return list(self._items.items())

    def add_item(self, name: str) -> SubProject:
        with self._lock:
            if name in self._items:
                raise ConflictError(f"Item already exists: {name}")
            item = SubProject(name)
            self._items[name] = item
        logger.info("Item %s registered", name)
        return item

    def delete_item(self, name: str) -> list:
        """Remove *name* and notify listeners.  Returns the changed listeners."""
        with self._lock:
            item = self._items.pop(name, None)
        if item is None:
            raise NotFoundError("item", name)
        logger.info("Item %s deleted", name)
        return self._bus.publish_deleted(item)

    def rename_item(self, old_name: str, new_name: str) -> list:
        """Rename *old_name* and notify listeners.  Returns the changed listeners."""
        with self._lock:
            item = self._items.get(old_name)
            if item is None:
                raise NotFoundError("item", old_name)
            if new_name == old_name:
                return []
            if new_name in self._items:
                raise ConflictError(f"Item already exists: {new_name}")
            del self._items[old_name]
            item.name = new_name
            self._items[new_name] = item
        logger.info("Item %s renamed to %s", old_name, new_name)
        return self._bus.publish_renamed(item, old_name, new_name)
