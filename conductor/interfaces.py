"""Contracts for the collaborators Conductor consumes but does not own.

The CI engine that actually runs builds, the item directory and the build
history are external.  The core talks to them only through these
structural protocols so the in-process adapters in ``conductor.repos`` and
test fakes are interchangeable.
"""

from __future__ import annotations

from typing import Iterable, Protocol, runtime_checkable


@runtime_checkable
class Item(Protocol):
    """Anything addressable by name in the item directory."""

    name: str


class ProjectRegistry(Protocol):
    """Resolves a sub-project name to a handle."""

    def find_project(self, name: str) -> Item | None:
        """Return the handle for *name*, or ``None`` when it does not exist."""
        ...


class ItemDirectory(Protocol):
    """Enumerates every top-level item known to the CI engine."""

    def all_items(self) -> Iterable[tuple[str, Item]]:
        ...


@runtime_checkable
class BuildRecord(Protocol):
    """One historical execution of a master project."""

    number: int

    def rebuild(self, sub_project: Item) -> None:
        """Re-run *sub_project* in the context of this build (fire-and-forget)."""
        ...


class BuildHistory(Protocol):
    """Read access to master build records by number."""

    def get_build_by_number(self, master_name: str, number: int) -> object | None:
        ...

    def new_build(self, master_name: str) -> BuildRecord:
        ...


class BuildScheduler(Protocol):
    """Queues a sub-project build on the CI engine."""

    def schedule(self, sub_project: Item, cause: str) -> None:
        ...
