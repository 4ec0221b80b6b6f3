"""Iteration models: typed nodes, date ranges, plan entries, and teams.

Remote iteration nodes keep their dates in a loose attribute map. The
reader converts that map into :class:`IterationDates` once, so everything
past the infrastructure boundary works with two required ``date`` fields.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, model_validator

from iterctl.domain.dates import finish_date_of, iteration_name, parse_sequence_number


class IterationDates(BaseModel):
    """Inclusive date range of one iteration."""

    model_config = {"frozen": True}

    start_date: date
    finish_date: date

    @model_validator(mode="after")
    def _check_order(self) -> IterationDates:
        if self.start_date > self.finish_date:
            msg = f"start date {self.start_date} is after finish date {self.finish_date}"
            raise ValueError(msg)
        return self

    def strictly_contains(self, day: date) -> bool:
        """True when *day* falls strictly inside the range.

        A day equal to the start or finish date is not contained.
        """
        return self.start_date < day < self.finish_date

    def covers(self, day: date) -> bool:
        """True when *day* falls inside the range, boundaries included."""
        return self.start_date <= day <= self.finish_date


class IterationNode(BaseModel):
    """One iteration (sprint) as known to the work-tracking system."""

    model_config = {"frozen": True}

    name: str
    identifier: str | None = None
    node_id: int | None = None
    path: str | None = None
    dates: IterationDates | None = None

    @property
    def is_dated(self) -> bool:
        return self.dates is not None

    def sequence_number(self, prefix: str) -> int:
        return parse_sequence_number(self.name, prefix)


class PlannedIteration(BaseModel):
    """A ``(sequence number, start date)`` pair waiting to be materialized."""

    model_config = {"frozen": True}

    sequence_number: int
    start_date: date

    def name(self, prefix: str) -> str:
        return iteration_name(prefix, self.sequence_number)

    def finish_date(self, length: int) -> date:
        return finish_date_of(self.start_date, length)

    def to_dict(self, prefix: str, length: int) -> dict[str, str | int]:
        return {
            "name": self.name(prefix),
            "sequence_number": self.sequence_number,
            "start_date": self.start_date.isoformat(),
            "finish_date": self.finish_date(length).isoformat(),
        }


class Team(BaseModel):
    """A team within a project; only used to fan out iteration assignment."""

    model_config = {"frozen": True}

    id: str
    name: str


class IterationTree(BaseModel):
    """Root iteration node of a project and its direct children."""

    model_config = {"frozen": True}

    project: str
    root_name: str
    root_identifier: str | None = None
    has_children: bool = False
    children: tuple[IterationNode, ...] = ()

    @property
    def fully_dated(self) -> bool:
        return all(child.is_dated for child in self.children)
