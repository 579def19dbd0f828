"""Item lifecycle fan-out -- keeps every master consistent with the directory.

The item directory publishes delete/rename events; each master subscribes
when it is created and unsubscribes when it is removed.
"""

import logging
import threading
from typing import Protocol

from conductor.interfaces import Item

logger = logging.getLogger(__name__)


class ItemListener(Protocol):
    """Anything that wants to hear about item deletes and renames."""

    def on_deleted(self, item: Item) -> bool: ...

    def on_renamed(self, item: Item, old_name: str, new_name: str | None) -> bool: ...


class ItemEventBus:
    """Thread-safe publish/subscribe channel for item lifecycle events."""

    def __init__(self) -> None:
        self._listeners: list[ItemListener] = []
        self._lock = threading.Lock()

    # ── subscription management ───────────────────────────────

    def subscribe(self, listener: ItemListener) -> None:
        """Register *listener*; subscribing twice is a no-op."""
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def unsubscribe(self, listener: ItemListener) -> None:
        """Remove *listener* if registered."""
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    # ── publishing ────────────────────────────────────────────

    def publish_deleted(self, item: Item) -> list[ItemListener]:
        """Forward a delete to every listener.

        Returns the listeners whose state changed.
        """
        changed = []
        for listener in self._snapshot():
            if listener.on_deleted(item):
                changed.append(listener)
        logger.debug("Delete of %s fanned out, %d listener(s) changed", item.name, len(changed))
        return changed

    def publish_renamed(
        self, item: Item, old_name: str, new_name: str | None,
    ) -> list[ItemListener]:
        """Forward a rename to every listener.

        Returns the listeners whose state changed.
        """
        changed = []
        for listener in self._snapshot():
            if listener.on_renamed(item, old_name, new_name):
                changed.append(listener)
        logger.debug(
            "Rename %s -> %s fanned out, %d listener(s) changed",
            old_name, new_name, len(changed),
        )
        return changed

    def _snapshot(self) -> list[ItemListener]:
        with self._lock:
            return list(self._listeners)
