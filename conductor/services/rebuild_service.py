"""Rebuild coordinator -- validates a rebuild request and dispatches it.

Validation runs in a fixed order and stops at the first failure so every
rejection carries its own diagnostic:

1. ``subProject`` present and non-empty
2. sub-project exists in the registry
3. sub-project is a member of the master
4. ``number`` present and an integer
5. master build ``number`` exists
6. dispatch ``rebuild`` on that build record

Nothing is dispatched unless every check passes.  The coordinator neither
retries nor rolls back; a failure inside the actual rebuild belongs to the
build-execution collaborator.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from conductor.errors import (
    InvalidParameterError,
    MissingParameterError,
    NotAMemberError,
    NotFoundError,
)
from conductor.interfaces import BuildRecord, Item, ProjectRegistry

if TYPE_CHECKING:
    from conductor.domain.master import MasterProject

logger = logging.getLogger(__name__)

SUB_PROJECT_PARAM = "subProject"
NUMBER_PARAM = "number"

_INT_RE = re.compile(r"[+-]?\d+")


class RebuildCoordinator:
    """Turns a raw ``(subProject, number)`` request into a rebuild."""

    def __init__(self, registry: ProjectRegistry) -> None:
        self._registry = registry

    def rebuild(
        self,
        master: "MasterProject",
        sub_project_name: str | None,
        master_build_number: str | int | None,
    ) -> None:
        sub_project = self._resolve_sub_project(master, sub_project_name)
        build = self._resolve_build(master, master_build_number)
        logger.info(
            "Rebuilding %s from master %s #%d",
            sub_project.name, master.name, build.number,
        )
        build.rebuild(sub_project)

    def _resolve_sub_project(self, master: "MasterProject", name: str | None) -> Item:
        if not name:
            raise MissingParameterError(SUB_PROJECT_PARAM)

        sub_project = self._registry.find_project(name)
        if sub_project is None:
            raise NotFoundError("project", name)

        if not master.contains(sub_project):
            raise NotAMemberError(name)

        return sub_project

    def _resolve_build(self, master: "MasterProject", raw: str | int | None) -> BuildRecord:
        number = parse_build_number(raw)
        build = master.get_build_by_number(number)
        if build is None or not isinstance(build, BuildRecord):
            raise NotFoundError("build", number)
        return build


def parse_build_number(raw: str | int | None) -> int:
    """Parse the ``number`` request parameter as a plain decimal integer."""
    if isinstance(raw, bool):
        raise InvalidParameterError(NUMBER_PARAM, str(raw))
    if isinstance(raw, int):
        return raw
    if raw is None or raw == "":
        raise MissingParameterError(NUMBER_PARAM)
    if not _INT_RE.fullmatch(raw):
        raise InvalidParameterError(NUMBER_PARAM, raw)
    return int(raw)
