"""Iteration tree reader: the typed boundary over raw classification nodes.

Azure DevOps returns iteration dates in a free-form ``attributes`` map.
This module is the only place that looks inside it: a node either gets a
validated :class:`IterationDates` or no dates at all.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from iterctl.domain.errors import UnsupportedCalendarStateError
from iterctl.domain.iterations import IterationDates, IterationNode, IterationTree

if TYPE_CHECKING:
    from iterctl.services.base import WorkTrackingClient

START_DATE_KEY = "startDate"
FINISH_DATE_KEY = "finishDate"


def parse_remote_date(value: Any, *, node: str) -> date:
    """Parse ``2024-03-01T00:00:00Z`` (or a bare ISO date) to a calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value)).date()
    except ValueError:
        msg = f"Iteration {node!r} has an unreadable date: {value!r}"
        raise UnsupportedCalendarStateError(msg, detail={"name": node}) from None


def format_remote_date(day: date) -> str:
    """Render a calendar date the way Azure DevOps stores iteration dates."""
    return f"{day.isoformat()}T00:00:00Z"


def node_from_payload(payload: dict[str, Any]) -> IterationNode:
    """Build an :class:`IterationNode` from a classification node payload."""
    name = str(payload.get("name", ""))
    attributes = payload.get("attributes") or {}
    dates: IterationDates | None = None
    if attributes.get(START_DATE_KEY) is not None and attributes.get(FINISH_DATE_KEY) is not None:
        try:
            dates = IterationDates(
                start_date=parse_remote_date(attributes[START_DATE_KEY], node=name),
                finish_date=parse_remote_date(attributes[FINISH_DATE_KEY], node=name),
            )
        except ValidationError as exc:
            msg = f"Iteration {name!r} has invalid dates: {exc.errors()[0]['msg']}"
            raise UnsupportedCalendarStateError(msg, detail={"name": name}) from exc

    identifier = payload.get("identifier")
    node_id = payload.get("id")
    return IterationNode(
        name=name,
        identifier=str(identifier) if identifier else None,
        node_id=int(node_id) if node_id is not None else None,
        path=payload.get("path"),
        dates=dates,
    )


def read_iteration_tree(client: WorkTrackingClient, project: str) -> IterationTree:
    """Fetch the root iteration node of *project* with its direct children."""
    root = client.get_root_iteration_node(project, depth=1)
    children = tuple(node_from_payload(child) for child in root.get("children") or [])
    return IterationTree(
        project=project,
        root_name=str(root.get("name", project)),
        root_identifier=root.get("identifier"),
        has_children=bool(root.get("hasChildren")) or bool(children),
        children=children,
    )
