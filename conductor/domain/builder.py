"""The one fixed build step every master project runs."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from conductor.interfaces import BuildScheduler

if TYPE_CHECKING:
    from conductor.domain.master import MasterProject
    from conductor.repos.build_repo import MasterBuild

logger = logging.getLogger(__name__)


class MasterBuilder:
    """Schedules every resolvable sub-project of a master build."""

    def __init__(self, scheduler: BuildScheduler) -> None:
        self._scheduler = scheduler

    def perform(self, master: "MasterProject", build: "MasterBuild") -> list[str]:
        """Queue each sub-project and record it on *build*.

        Returns the scheduled sub-project names in membership order.
        """
        cause = f"Started by master project {master.name} #{build.number}"
        scheduled: list[str] = []
        for sub_project in master.sub_projects():
            self._scheduler.schedule(sub_project, cause)
            build.record_sub_build(sub_project.name)
            scheduled.append(sub_project.name)
        logger.info(
            "Master %s #%d scheduled %d sub-project(s)",
            master.name, build.number, len(scheduled),
        )
        return scheduled
