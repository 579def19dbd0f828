"""Master project aggregate -- ties membership, builds and rebuilds together."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from pydantic import BaseModel, Field

from conductor.domain.builder import MasterBuilder
from conductor.domain.membership import MembershipSet
from conductor.interfaces import BuildHistory, BuildRecord, Item, ItemDirectory, ProjectRegistry

if TYPE_CHECKING:
    from conductor.services.rebuild_service import RebuildCoordinator

logger = logging.getLogger(__name__)


class MasterSelection(BaseModel):
    """Typed configuration form produced by the binding layer."""

    selected_names: set[str] = Field(default_factory=set)
    description: str | None = None


class MasterProject:
    """A named group of sub-projects that can be built and rebuilt together.

    Collaborators are supplied by the owning container; the master never
    reaches for process-wide state.
    """

    def __init__(
        self,
        name: str,
        *,
        registry: ProjectRegistry,
        history: BuildHistory,
        builder: MasterBuilder,
        coordinator: "RebuildCoordinator",
        job_names: Iterable[str] = (),
        description: str | None = None,
    ) -> None:
        self.name = name
        self.description = description
        self._membership = MembershipSet(job_names)
        self._registry = registry
        self._history = history
        self._builder = builder
        self._coordinator = coordinator

    def __repr__(self) -> str:
        return f"MasterProject({self.name!r}, jobs={list(self.job_names)!r})"

    @property
    def job_names(self) -> tuple[str, ...]:
        return self._membership.names()

    @property
    def builders(self) -> list[MasterBuilder]:
        """The build steps of a master are fixed: always the master builder."""
        return [self._builder]

    def contains(self, item: Item) -> bool:
        return self._membership.contains(item.name)

    # ── lifecycle notifications ───────────────────────────────

    def on_deleted(self, item: Item) -> bool:
        changed = self._membership.on_deleted(item.name)
        if changed:
            logger.info("Master %s dropped deleted sub-project %s", self.name, item.name)
        return changed

    def on_renamed(self, item: Item, old_name: str, new_name: str | None) -> bool:
        changed = self._membership.on_renamed(old_name, new_name)
        if changed:
            logger.info(
                "Master %s followed rename %s -> %s", self.name, old_name, new_name,
            )
        return changed

    # ── configuration ─────────────────────────────────────────

    def submit(self, form: MasterSelection, directory: ItemDirectory) -> None:
        """Apply a configuration form.

        Membership is reconciled before any other field so a concurrent
        reader never sees new settings next to a stale member list.
        """
        known = [name for name, _ in directory.all_items()]
        selected = [name for name in known if name in form.selected_names]
        self._membership.reconcile(
            selected, known,
            still_known=lambda name: self._registry.find_project(name) is not None,
        )
        if form.description is not None:
            self.description = form.description
        logger.info("Master %s reconfigured with %d sub-project(s)", self.name, len(selected))

    def sub_projects(self) -> list[Item]:
        return self._membership.resolve_all(self._registry)

    # ── builds ────────────────────────────────────────────────

    def get_build_by_number(self, number: int) -> object | None:
        return self._history.get_build_by_number(self.name, number)

    def run_build(self) -> BuildRecord:
        """Start a normal build: a new record, then the fixed build step."""
        build = self._history.new_build(self.name)
        for step in self.builders:
            step.perform(self, build)
        return build

    def rebuild(self, sub_project: str | None, number: str | None) -> None:
        self._coordinator.rebuild(self, sub_project, number)
