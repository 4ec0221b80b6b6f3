"""SyncService: runs the timeline engine over every configured project.

Pipeline per project: READ → PLAN (backfilling as needed) → MATERIALIZE
→ REPORT. Projects are processed one at a time with a fresh read each;
nothing is shared between them except the client and today's date.

``plan`` is the dry-run twin of ``run``: the same engine, with a
backfill step that appends synthetic nodes in memory instead of calling
the server.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Any, TypeVar

import structlog

from iterctl.domain.errors import ConfigurationError, IterctlError
from iterctl.domain.iterations import IterationDates, IterationNode, PlannedIteration
from iterctl.infrastructure.reader import read_iteration_tree
from iterctl.services import _helpers
from iterctl.services.base import BaseService
from iterctl.services.materialize import IterationMaterializer, MaterializedIteration
from iterctl.services.result import ServiceError, ServiceResult
from iterctl.services.timeline import TimelineEngine, TimelinePlan

if TYPE_CHECKING:
    from iterctl.config.models import CalendarConfig
    from iterctl.services.base import WorkTrackingClient

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ProjectReport:
    """What happened to one project during a sync."""

    project: str
    mode: str
    anchor: str | None = None
    backfilled: list[MaterializedIteration] = field(default_factory=list)
    created: list[MaterializedIteration] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def warnings(self) -> list[str]:
        return [f.message for m in (*self.backfilled, *self.created) for f in m.failures]

    def to_dict(self) -> dict[str, Any]:
        return {
            "project": self.project,
            "mode": self.mode,
            "anchor": self.anchor,
            "backfilled": [m.to_dict() for m in self.backfilled],
            "created": [m.to_dict() for m in self.created],
            "skipped": list(self.skipped),
        }


class SyncService(BaseService):
    """Keeps each project's iteration calendar populated."""

    def __init__(
        self,
        client: WorkTrackingClient,
        calendar: CalendarConfig,
        *,
        keep_going: bool = False,
    ) -> None:
        super().__init__(client)
        self._calendar = calendar
        self._keep_going = keep_going

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self, projects: Sequence[str], *, today: date | None = None) -> ServiceResult:
        """Create missing iterations in every project.

        The first fatal error ends the run unless ``keep_going`` is set,
        in which case the remaining projects are still processed and the
        result reports every failure.
        """
        op = "sync"
        day = today or _helpers.today()
        meta = {"today": day.isoformat()}
        try:
            engine = self._engine(projects)
        except ConfigurationError as exc:
            return ServiceResult.failure(op, exc, meta=meta)

        reports, failures, error = self._each_project(
            projects, lambda project: self._sync_project(engine, project, day)
        )
        data = {
            "projects": [r.to_dict() for r in reports],
            "created_count": sum(len(r.created) + len(r.backfilled) for r in reports),
            "failures": failures,
        }
        return ServiceResult(
            ok=error is None,
            op=op,
            data=data,
            warnings=[w for r in reports for w in r.warnings],
            error=error,
            meta=meta,
        )

    def plan(self, projects: Sequence[str], *, today: date | None = None) -> ServiceResult:
        """Report what ``run`` would create, without writing anything.

        Failures are handled as in :meth:`run`, ``keep_going`` included,
        so the dry run previews exactly which projects a sync would reach.
        """
        op = "plan"
        day = today or _helpers.today()
        meta = {"today": day.isoformat()}
        try:
            engine = self._engine(projects)
        except ConfigurationError as exc:
            return ServiceResult.failure(op, exc, meta=meta)

        results, failures, error = self._each_project(
            projects, lambda project: self._plan_project(engine, project, day)
        )
        return ServiceResult(
            ok=error is None,
            op=op,
            data={"projects": results, "failures": failures},
            error=error,
            meta=meta,
        )

    def _each_project(
        self,
        projects: Sequence[str],
        step: Callable[[str], T],
    ) -> tuple[list[T], list[dict[str, Any]], ServiceError | None]:
        """Apply *step* to each project, collecting outcomes and failures."""
        outcomes: list[T] = []
        failures: list[dict[str, Any]] = []
        error: ServiceError | None = None
        for project in projects:
            with structlog.contextvars.bound_contextvars(project=project):
                try:
                    outcomes.append(step(project))
                except IterctlError as exc:
                    logger.error("%s failed: %s", project, exc.message)
                    failures.append({"project": project, "code": exc.code, "message": exc.message})
                    error = error or ServiceError.from_exception(exc, project=project)
                    if not self._keep_going:
                        break
        if error is not None and self._keep_going:
            error = ServiceError(
                code=error.code,
                message=f"{len(failures)} of {len(projects)} projects failed",
                detail={"failures": failures},
            )
        return outcomes, failures, error

    # ------------------------------------------------------------------
    # Per-project steps
    # ------------------------------------------------------------------

    def _engine(self, projects: Sequence[str]) -> TimelineEngine:
        if not projects:
            msg = "No projects configured; set `projects` in iterctl.toml or pass --project"
            raise ConfigurationError(msg)
        return TimelineEngine.from_config(self._calendar)

    def _sync_project(self, engine: TimelineEngine, project: str, day: date) -> ProjectReport:
        logger.info("Syncing iterations for %s", project)
        teams = self._client.get_teams(project)
        tree = read_iteration_tree(self._client, project)
        materializer = IterationMaterializer(
            self._client,
            project=project,
            teams=teams,
            prefix=engine.prefix,
            iteration_length=engine.iteration_length,
        )

        backfilled: list[MaterializedIteration] = []

        def backfill(entry: PlannedIteration) -> Sequence[IterationNode]:
            backfilled.append(materializer.materialize(entry))
            return read_iteration_tree(self._client, project).children

        timeline = engine.plan(tree.children, day, backfill)
        created = materializer.materialize_all(timeline.plan)
        logger.info(
            "Finished %s: %d backfilled, %d created, %d already present",
            project,
            len(backfilled),
            len(created),
            len(timeline.skipped),
        )
        return ProjectReport(
            project=project,
            mode=str(timeline.mode),
            anchor=timeline.anchor.name if timeline.anchor else None,
            backfilled=backfilled,
            created=created,
            skipped=timeline.skipped,
        )

    def _plan_project(self, engine: TimelineEngine, project: str, day: date) -> dict[str, Any]:
        tree = read_iteration_tree(self._client, project)
        children = list(tree.children)
        simulated: list[PlannedIteration] = []

        def backfill(entry: PlannedIteration) -> Sequence[IterationNode]:
            simulated.append(entry)
            dates = IterationDates(
                start_date=entry.start_date,
                finish_date=entry.finish_date(engine.iteration_length),
            )
            children.append(IterationNode(name=entry.name(engine.prefix), dates=dates))
            return children

        timeline = engine.plan(tree.children, day, backfill)
        return _plan_to_dict(project, timeline, simulated, engine)


def _plan_to_dict(
    project: str,
    timeline: TimelinePlan,
    backfill: list[PlannedIteration],
    engine: TimelineEngine,
) -> dict[str, Any]:
    prefix, length = engine.prefix, engine.iteration_length
    return {
        "project": project,
        "mode": str(timeline.mode),
        "anchor": timeline.anchor.name if timeline.anchor else None,
        "backfill": [entry.to_dict(prefix, length) for entry in backfill],
        "plan": [entry.to_dict(prefix, length) for entry in timeline.plan],
        "skipped": list(timeline.skipped),
    }
