"""TimelineEngine: decides which iterations a project calendar is missing.

The calendar is always in one of three states:

- Empty: bootstrap ``iterations_to_create`` iterations from the
  configured start date, numbered from 1.
- Fully dated: backfill any iterations missed between the latest known
  iteration and today, then guarantee ``iterations_to_create`` iterations
  after the current one.
- Partially dated: unsupported, must be fixed by hand.

Backfilling needs each missed iteration to exist remotely before the next
decision is made, so the engine takes a *backfill step* callable. The step
materializes one :class:`PlannedIteration` and returns the refreshed list
of children. Everything else here is pure.

INVARIANT: "Current" uses strict bounds. A day equal to an iteration's
start or finish date is not inside it. Backfilling stops once some
iteration starts after today; planning then continues from
:func:`fallback_anchor`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from typing import TYPE_CHECKING

from iterctl.domain.dates import next_sequence_number, next_start_date
from iterctl.domain.errors import (
    ConfigurationError,
    IterationCreationFailedError,
    OverlappingIterationsError,
    UnsupportedCalendarStateError,
)
from iterctl.domain.iterations import IterationNode, PlannedIteration

if TYPE_CHECKING:
    from iterctl.config.models import CalendarConfig

logger = logging.getLogger(__name__)

BackfillStep = Callable[[PlannedIteration], Sequence[IterationNode]]


class CalendarMode(StrEnum):
    """Which branch of the decision tree produced a plan."""

    BOOTSTRAP = "bootstrap"
    EXTEND = "extend"


@dataclass
class TimelinePlan:
    """Outcome of one engine run for one project.

    ``backfilled`` iterations already exist remotely; only ``plan`` still
    needs to be materialized.
    """

    mode: CalendarMode
    plan: list[PlannedIteration] = field(default_factory=list)
    backfilled: list[IterationNode] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    anchor: IterationNode | None = None


def find_current(children: Sequence[IterationNode], today: date) -> IterationNode | None:
    """Return the single dated child strictly containing *today*, if any.

    Raises:
        OverlappingIterationsError: more than one child contains *today*.
    """
    matches = [c for c in children if c.dates is not None and c.dates.strictly_contains(today)]
    if len(matches) > 1:
        names = [c.name for c in matches]
        msg = f"{len(matches)} iterations contain {today.isoformat()}: {', '.join(names)}"
        raise OverlappingIterationsError(msg, detail={"iterations": names})
    return matches[0] if matches else None


def _finish(node: IterationNode) -> date:
    assert node.dates is not None
    return node.dates.finish_date


def latest_iteration(children: Sequence[IterationNode]) -> IterationNode:
    """The dated child with the latest finish date."""
    return max((c for c in children if c.dates is not None), key=_finish)


def fallback_anchor(children: Sequence[IterationNode], today: date) -> IterationNode:
    """Where to plan from when no child strictly contains *today*.

    On a boundary day that is the child covering *today* with its start or
    finish date. When *today* falls in a gap, it is the first child starting
    after *today*. Planning from either leaves the existing later iterations
    to the name check, so reruns on the same day create nothing.
    """
    dated = [c for c in children if c.dates is not None]
    covering = [c for c in dated if c.dates.covers(today)]  # type: ignore[union-attr]
    if covering:
        return max(covering, key=_finish)
    upcoming = [c for c in dated if c.dates.start_date > today]  # type: ignore[union-attr]
    return min(upcoming, key=_finish)


def _require_fully_dated(children: Sequence[IterationNode]) -> None:
    undated = [c.name for c in children if not c.is_dated]
    if undated:
        msg = (
            "Some iterations have no start/finish dates; set them by hand before "
            f"running again: {', '.join(undated)}"
        )
        raise UnsupportedCalendarStateError(msg, detail={"undated": undated})


class TimelineEngine:
    """Plans missing iterations for one project calendar."""

    def __init__(
        self,
        *,
        prefix: str,
        iteration_length: int,
        iterations_to_create: int,
        bootstrap_start_date: date | None = None,
    ) -> None:
        if iteration_length <= 0:
            msg = f"iteration_length must be positive, got {iteration_length}"
            raise ConfigurationError(msg)
        if iterations_to_create <= 0:
            msg = f"iterations_to_create must be positive, got {iterations_to_create}"
            raise ConfigurationError(msg)
        self.prefix = prefix
        self.iteration_length = iteration_length
        self.iterations_to_create = iterations_to_create
        self.bootstrap_start_date = bootstrap_start_date

    @classmethod
    def from_config(cls, calendar: CalendarConfig) -> TimelineEngine:
        return cls(
            prefix=calendar.iteration_name_prefix,
            iteration_length=calendar.iteration_length,
            iterations_to_create=calendar.iterations_to_create,
            bootstrap_start_date=calendar.bootstrap_start_date,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def plan(
        self,
        children: Sequence[IterationNode],
        today: date,
        backfill: BackfillStep,
    ) -> TimelinePlan:
        """Run the decision tree against *children* as of *today*."""
        if not children:
            return TimelinePlan(mode=CalendarMode.BOOTSTRAP, plan=self.bootstrap())

        _require_fully_dated(children)

        backfilled: list[IterationNode] = []
        anchor = find_current(children, today)
        while anchor is None:
            latest = latest_iteration(children)
            assert latest.dates is not None
            if latest.dates.start_date > today:
                anchor = fallback_anchor(children, today)
                logger.warning(
                    "No iteration strictly contains %s; planning after %s",
                    today.isoformat(),
                    anchor.name,
                )
                break

            entry = self.successor_of(latest)
            logger.info("Backfilling %s from %s", entry.name(self.prefix), entry.start_date)
            refreshed = list(backfill(entry))
            _require_fully_dated(refreshed)
            created = self._confirm_backfill(entry, latest, refreshed)
            backfilled.append(created)
            children = refreshed
            anchor = find_current(children, today)

        result = self.extend(anchor, children)
        result.backfilled = backfilled
        return result

    def bootstrap(self) -> list[PlannedIteration]:
        """Plan the first iterations of an empty calendar."""
        if self.bootstrap_start_date is None:
            msg = "calendar.bootstrap_start_date is required to start an empty calendar"
            raise ConfigurationError(msg)
        return list(self._consecutive(1, self.bootstrap_start_date))

    def extend(self, anchor: IterationNode, children: Sequence[IterationNode]) -> TimelinePlan:
        """Plan the iterations following *anchor*, skipping names that already exist."""
        assert anchor.dates is not None
        existing = {c.name for c in children}
        result = TimelinePlan(mode=CalendarMode.EXTEND, anchor=anchor)
        start = next_start_date(anchor.dates.finish_date)
        for entry in self._consecutive(next_sequence_number(anchor.name, self.prefix), start):
            name = entry.name(self.prefix)
            if name in existing:
                logger.debug("Skipping %s, already exists", name)
                result.skipped.append(name)
            else:
                result.plan.append(entry)
        return result

    def successor_of(self, node: IterationNode) -> PlannedIteration:
        """The iteration immediately following *node*."""
        assert node.dates is not None
        return PlannedIteration(
            sequence_number=next_sequence_number(node.name, self.prefix),
            start_date=next_start_date(node.dates.finish_date),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _consecutive(self, sequence_number: int, start: date) -> list[PlannedIteration]:
        entries: list[PlannedIteration] = []
        for offset in range(self.iterations_to_create):
            entry = PlannedIteration(sequence_number=sequence_number + offset, start_date=start)
            entries.append(entry)
            start = next_start_date(entry.finish_date(self.iteration_length))
        return entries

    def _confirm_backfill(
        self,
        entry: PlannedIteration,
        previous_latest: IterationNode,
        refreshed: Sequence[IterationNode],
    ) -> IterationNode:
        """Check that the backfill step moved the calendar forward."""
        name = entry.name(self.prefix)
        new_latest = latest_iteration(refreshed) if refreshed else None
        if new_latest is None or _finish(new_latest) <= _finish(previous_latest):
            msg = f"Backfilled iteration {name} is not visible after refreshing the calendar"
            raise IterationCreationFailedError(msg, detail={"name": name})
        return next((c for c in refreshed if c.name == name), new_latest)
