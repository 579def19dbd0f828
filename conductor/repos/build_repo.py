"""In-process build history and scheduler for master builds.

Build numbers are assigned per master, starting at 1 and increasing
monotonically.  The scheduler only records what was queued; the CI engine
that would execute those entries is outside this service.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone

from conductor.interfaces import BuildScheduler, Item

logger = logging.getLogger(__name__)


@dataclass
class QueuedBuild:
    """One entry handed to the CI engine."""

    sub_project: str
    cause: str
    queued_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class QueueScheduler:
    """Thread-safe record of every scheduled sub-project build."""

    def __init__(self) -> None:
        self._queue: list[QueuedBuild] = []
        self._lock = threading.Lock()

    def schedule(self, sub_project: Item, cause: str) -> None:
        with self._lock:
            self._queue.append(QueuedBuild(sub_project.name, cause))
        logger.debug("Queued %s (%s)", sub_project.name, cause)

    def entries(self) -> list[QueuedBuild]:
        with self._lock:
            return list(self._queue)


@dataclass
class MasterBuild:
    """A historical execution of a master project."""

    master_name: str
    number: int
    scheduler: BuildScheduler = field(repr=False)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    sub_builds: list[str] = field(default_factory=list)
    rebuilds: list[str] = field(default_factory=list)

    def record_sub_build(self, name: str) -> None:
        self.sub_builds.append(name)

    def rebuild(self, sub_project: Item) -> None:
        """Schedule *sub_project* again on behalf of this master build."""
        cause = f"Rebuilt from master project {self.master_name} #{self.number}"
        self.scheduler.schedule(sub_project, cause)
        self.rebuilds.append(sub_project.name)

    def to_dict(self) -> dict:
        return {
            "master": self.master_name,
            "number": self.number,
            "started_at": self.started_at.isoformat(),
            "sub_builds": list(self.sub_builds),
            "rebuilds": list(self.rebuilds),
        }


class BuildHistoryRepository:
    """Per-master build records addressable by number."""

    def __init__(self, scheduler: BuildScheduler) -> None:
        self._scheduler = scheduler
        self._builds: dict[str, dict[int, MasterBuild]] = {}
        self._next_number: dict[str, int] = {}
        self._lock = threading.Lock()

    def new_build(self, master_name: str) -> MasterBuild:
        with self._lock:
            number = self._next_number.get(master_name, 1)
            self._next_number[master_name] = number + 1
            build = MasterBuild(master_name, number, self._scheduler)
            self._builds.setdefault(master_name, {})[number] = build
        return build

    def get_build_by_number(self, master_name: str, number: int) -> MasterBuild | None:
        with self._lock:
            return self._builds.get(master_name, {}).get(number)

    def list_builds(self, master_name: str) -> list[MasterBuild]:
        """All builds for *master_name*, newest first."""
        with self._lock:
            builds = list(self._builds.get(master_name, {}).values())
        return sorted(builds, key=lambda b: b.number, reverse=True)

    def forget(self, master_name: str) -> None:
        """Drop the history of a deleted master.  Numbers are not reused."""
        with self._lock:
            self._builds.pop(master_name, None)
