"""IterationMaterializer: creates planned iterations and attaches them to teams.

INVARIANT: A failed team assignment never rolls back or aborts. The
iteration already exists and can be assigned by hand afterwards.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from iterctl.domain.dates import finish_date_of
from iterctl.domain.errors import (
    AzureDevOpsError,
    IterationCreationFailedError,
    TeamAssignmentFailedError,
)
from iterctl.services.base import BaseService

if TYPE_CHECKING:
    from iterctl.domain.iterations import IterationNode, PlannedIteration, Team
    from iterctl.services.base import WorkTrackingClient

logger = logging.getLogger(__name__)


@dataclass
class MaterializedIteration:
    """A created iteration and the outcome of assigning it to each team."""

    node: IterationNode
    assigned_teams: list[str] = field(default_factory=list)
    failures: list[TeamAssignmentFailedError] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        dates = self.node.dates
        return {
            "name": self.node.name,
            "identifier": self.node.identifier,
            "start_date": dates.start_date.isoformat() if dates else None,
            "finish_date": dates.finish_date.isoformat() if dates else None,
            "assigned_teams": list(self.assigned_teams),
            "failed_teams": [f.detail.get("team") for f in self.failures],
        }


class IterationMaterializer(BaseService):
    """Materializes plan entries for one project."""

    def __init__(
        self,
        client: WorkTrackingClient,
        *,
        project: str,
        teams: Sequence[Team],
        prefix: str,
        iteration_length: int,
    ) -> None:
        super().__init__(client)
        self.project = project
        self.teams = list(teams)
        self.prefix = prefix
        self.iteration_length = iteration_length

    def materialize(self, entry: PlannedIteration) -> MaterializedIteration:
        """Create one iteration and assign it to every team.

        Raises:
            IterationCreationFailedError: the remote system returned nothing.
        """
        name = entry.name(self.prefix)
        finish = finish_date_of(entry.start_date, self.iteration_length)
        node = self._client.create_iteration_node(self.project, name, entry.start_date, finish)
        if node is None or not node.identifier:
            msg = f"Unable to create the iteration `{self.project} - {name}`"
            raise IterationCreationFailedError(
                msg, detail={"project": self.project, "name": name}
            )
        logger.info("Created %s (%s..%s) in %s", name, entry.start_date, finish, self.project)

        result = MaterializedIteration(node=node)
        for team in self.teams:
            failure = self._assign(node, team)
            if failure is None:
                result.assigned_teams.append(team.name)
            else:
                logger.warning(failure.message)
                result.failures.append(failure)
        return result

    def materialize_all(self, plan: Iterable[PlannedIteration]) -> list[MaterializedIteration]:
        return [self.materialize(entry) for entry in plan]

    def _assign(self, node: IterationNode, team: Team) -> TeamAssignmentFailedError | None:
        assert node.identifier is not None
        reason = "rejected by the server"
        try:
            if self._client.assign_iteration_to_team(self.project, team, node.identifier):
                return None
        except AzureDevOpsError as exc:
            reason = exc.message
        msg = f"Could not assign {node.name} to team {team.name} in {self.project}: {reason}"
        return TeamAssignmentFailedError(
            msg,
            detail={"project": self.project, "team": team.name, "iteration": node.name},
        )
