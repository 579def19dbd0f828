"""Master service -- the container that owns every master project.

Creates masters with their collaborators wired in, keeps them subscribed
to the item event bus, and writes configuration changes through to the
master repository when persistence is enabled.
"""

import logging
import threading

from conductor.domain.builder import MasterBuilder
from conductor.domain.master import MasterProject, MasterSelection
from conductor.errors import ConflictError, NotFoundError
from conductor.events import ItemEventBus
from conductor.repos import master_repo
from conductor.repos.build_repo import BuildHistoryRepository, MasterBuild, QueueScheduler
from conductor.repos.db import persistence_enabled
from conductor.repos.item_repo import ItemRepository
from conductor.services.rebuild_service import RebuildCoordinator

logger = logging.getLogger(__name__)


class MasterService:
    """Registry of master projects plus the collaborators they share."""

    def __init__(
        self,
        *,
        bus: ItemEventBus | None = None,
        items: ItemRepository | None = None,
        scheduler: QueueScheduler | None = None,
        history: BuildHistoryRepository | None = None,
    ) -> None:
        self.bus = bus or ItemEventBus()
        self.items = items or ItemRepository(self.bus)
        self.scheduler = scheduler or QueueScheduler()
        self.history = history or BuildHistoryRepository(self.scheduler)
        self._builder = MasterBuilder(self.scheduler)
        self._coordinator = RebuildCoordinator(self.items)
        self._masters: dict[str, MasterProject] = {}
        self._lock = threading.Lock()

    # ── master lifecycle ──────────────────────────────────────

    def _add(
        self,
        name: str,
        description: str | None = None,
        job_names: tuple[str, ...] | list[str] = (),
    ) -> MasterProject:
        master = MasterProject(
            name,
            registry=self.items,
            history=self.history,
            builder=self._builder,
            coordinator=self._coordinator,
            job_names=job_names,
            description=description,
        )
        with self._lock:
            if name in self._masters:
                raise ConflictError(f"Master project already exists: {name}")
            self._masters[name] = master
        self.bus.subscribe(master)
        return master

    async def create_master(self, name: str, description: str | None = None) -> MasterProject:
        master = self._add(name, description)
        logger.info("Master project %s created", name)
        await self._persist(master)
        return master

    def get_master(self, name: str) -> MasterProject:
        with self._lock:
            master = self._masters.get(name)
        if master is None:
            raise NotFoundError("master project", name)
        return master

    def list_masters(self) -> list[MasterProject]:
        with self._lock:
            return list(self._masters.values())

    async def delete_master(self, name: str) -> None:
        with self._lock:
            master = self._masters.pop(name, None)
        if master is None:
            raise NotFoundError("master project", name)
        self.bus.unsubscribe(master)
        self.history.forget(name)
        logger.info("Master project %s deleted", name)
        if persistence_enabled():
            await master_repo.delete_master(name)

    async def restore(self) -> int:
        """Recreate masters from the repository. Returns how many were loaded."""
        if not persistence_enabled():
            return 0
        await master_repo.ensure_schema()
        rows = await master_repo.list_masters()
        for row in rows:
            self._add(row["name"], row.get("description"), row["job_names"])
        return len(rows)

    # ── configuration ─────────────────────────────────────────

    async def configure(self, name: str, form: MasterSelection) -> MasterProject:
        master = self.get_master(name)
        master.submit(form, self.items)
        await self._persist(master)
        return master

    # ── builds ────────────────────────────────────────────────

    def run_build(self, name: str) -> MasterBuild:
        return self.get_master(name).run_build()

    def get_build(self, name: str, number: int) -> MasterBuild:
        master = self.get_master(name)
        build = master.get_build_by_number(number)
        if build is None:
            raise NotFoundError("build", number)
        return build

    def rebuild(self, name: str, sub_project: str | None, number: str | None) -> None:
        self.get_master(name).rebuild(sub_project, number)

    # ── item directory notifications ──────────────────────────

    def register_item(self, name: str) -> None:
        self.items.add_item(name)

    async def delete_item(self, name: str) -> list[str]:
        """Delete an item and persist every master that dropped it."""
        changed = self.items.delete_item(name)
        for master in changed:
            await self._persist(master)
        return [m.name for m in changed]

    async def rename_item(self, old_name: str, new_name: str) -> list[str]:
        """Rename an item and persist every master that followed it."""
        changed = self.items.rename_item(old_name, new_name)
        for master in changed:
            await self._persist(master)
        return [m.name for m in changed]

    # ── helpers ───────────────────────────────────────────────

    async def _persist(self, master: MasterProject) -> None:
        if not persistence_enabled():
            return
        await master_repo.upsert_master(
            master.name, master.description, list(master.job_names),
        )

    def describe(self, master: MasterProject, *, resolve: bool = False) -> dict:
        data = {
            "name": master.name,
            "description": master.description,
            "job_names": list(master.job_names),
        }
        if resolve:
            data["sub_projects"] = [p.name for p in master.sub_projects()]
            data["builds"] = [b.number for b in self.history.list_builds(master.name)]
        return data
