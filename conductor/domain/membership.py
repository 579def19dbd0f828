"""Membership set -- the sub-project names grouped under one master project.

Names are held, never handles: a sub-project deleted elsewhere simply stops
resolving.  Every mutation and every snapshot read goes through one
per-instance lock so a delete arriving mid-reconcile is neither lost nor
re-added.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable

from conductor.interfaces import Item, ProjectRegistry

logger = logging.getLogger(__name__)


class MembershipSet:
    """Insertion-ordered set of member names with serialized mutation."""

    def __init__(self, names: Iterable[str] = ()) -> None:
        # dict keys keep insertion order for deterministic display
        self._names: dict[str, None] = dict.fromkeys(names)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._names)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.contains(name)

    def contains(self, name: str) -> bool:
        """Return True iff *name* is currently a member."""
        with self._lock:
            return name in self._names

    def names(self) -> tuple[str, ...]:
        """Return a consistent snapshot of the member names."""
        with self._lock:
            return tuple(self._names)

    # ── mutations ─────────────────────────────────────────────

    def reconcile(
        self,
        selected_names: Iterable[str],
        known_names: Iterable[str] = (),
        still_known: Callable[[str], bool] | None = None,
    ) -> None:
        """Replace the membership with exactly *selected_names*.

        This is a full overwrite, not a merge.  *known_names* only fixes the
        iteration order: selected names that are also known keep the known
        order, the remainder follow in selection order.

        *still_known* is checked under the lock, so a name whose item was
        deleted after the caller's snapshot is not written back.
        """
        selected = dict.fromkeys(selected_names)
        ordered = dict.fromkeys(n for n in known_names if n in selected)
        ordered.update(selected)
        with self._lock:
            if still_known is not None:
                ordered = {n: None for n in ordered if still_known(n)}
            self._names = ordered
        logger.debug("Membership reconciled to %d name(s)", len(ordered))

    def on_deleted(self, name: str) -> bool:
        """Drop *name* if present.  Returns True when the set changed."""
        with self._lock:
            if name not in self._names:
                return False
            del self._names[name]
        return True

    def on_renamed(self, old_name: str, new_name: str | None) -> bool:
        """Swap *old_name* for *new_name* if *old_name* is a member.

        Renames of non-members, renames to an empty name and self-renames
        are ignored.  Returns True when the set changed.
        """
        if not new_name or old_name == new_name:
            return False
        with self._lock:
            if old_name not in self._names:
                return False
            del self._names[old_name]
            self._names[new_name] = None
        return True

    # ── resolution ────────────────────────────────────────────

    def resolve_all(self, registry: ProjectRegistry) -> list[Item]:
        """Look up every member; names that no longer resolve are skipped."""
        resolved: list[Item] = []
        seen: set[int] = set()
        for name in self.names():
            handle = registry.find_project(name)
            if handle is None:
                logger.debug("Skipping stale member %r", name)
                continue
            if id(handle) in seen:
                continue
            seen.add(id(handle))
            resolved.append(handle)
        return resolved
